"""
Shared math for the shelf engines: interpolation, rotation, isometric
projection, path strings and bounds.
"""

import numpy as np
from typing import Tuple, Union

ArrayLike = Union[float, np.ndarray]

# Fixed camera: 30 degree isometric convention used for every 3D -> 2D step
ISO_ANGLE = np.pi / 6
COS_ISO = np.cos(ISO_ANGLE)
SIN_ISO = np.sin(ISO_ANGLE)

# Unit vector along the 45 degree diagonal pointing out of the corner
DIAG = 1 / np.sqrt(2)

# Path-parameter positions of the five control curves
CONTROL_KNOTS = np.array([0.0, 1 / 6, 1 / 2, 5 / 6, 1.0])

# Wave sign for each control curve: straight, sine, inverted, sine, straight
CONTROL_SIGNS = (0.0, 1.0, -1.0, 1.0, 0.0)

# Identity for merge_bounds
EMPTY_BOUNDS = (np.inf, -np.inf, np.inf, -np.inf)


def sine_profile(z: ArrayLike, height: float) -> ArrayLike:
    """
    One full sine period over the height of the unit.

    Args:
        z: Height(s) in [0, height]
        height: Total height of the unit

    Returns:
        sin(2*pi*z/height)
    """
    return np.sin(2 * np.pi * np.asarray(z, dtype=float) / height)


def cosine_interpolate(a: ArrayLike, b: ArrayLike, t: ArrayLike) -> ArrayLike:
    """Raised-cosine blend between a (t=0) and b (t=1)."""
    t2 = (1 - np.cos(np.asarray(t) * np.pi)) / 2
    return a * (1 - t2) + b * t2


def catmull_rom(p0: ArrayLike, p1: ArrayLike, p2: ArrayLike, p3: ArrayLike,
                t: ArrayLike) -> ArrayLike:
    """
    Uniform Catmull-Rom spline value between p1 (t=0) and p2 (t=1).

    p0 and p3 only shape the tangents at p1 and p2.
    """
    t = np.asarray(t)
    t2 = t * t
    t3 = t2 * t
    return 0.5 * (
        (2 * p1)
        + (-p0 + p2) * t
        + (2 * p0 - 5 * p1 + 4 * p2 - p3) * t2
        + (-p0 + 3 * p1 - 3 * p2 + p3) * t3
    )


def _segment_coordinates(t: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Locate each t in the knot table.

    Segments are half-open, so a value sitting exactly on an interior knot
    starts the next segment with local parameter 0.

    Returns:
        (segment index 0..3, local parameter in [0, 1])
    """
    index = np.clip(np.searchsorted(CONTROL_KNOTS, t, side='right') - 1, 0, 3)
    start = CONTROL_KNOTS[index]
    end = CONTROL_KNOTS[index + 1]
    return index, (t - start) / (end - start)


def _take(stacked: np.ndarray, index: np.ndarray) -> np.ndarray:
    """Pick stacked[index[...], ...] element-wise along the first axis."""
    if stacked.ndim == 1:
        return stacked[index]
    return np.take_along_axis(stacked, index[np.newaxis, ...], axis=0)[0]


def interpolate5_cosine(t: ArrayLike, values) -> ArrayLike:
    """
    Piecewise raised-cosine interpolation through the five control values.

    Args:
        t: Path parameter(s), clamped to [0, 1]
        values: Five control values at t = 0, 1/6, 1/2, 5/6, 1. Each value
            may itself be an array broadcastable against t.

    Returns:
        Interpolated value(s), exactly equal to the control value at a knot
    """
    t = np.clip(np.asarray(t, dtype=float), 0.0, 1.0)
    t, *values = np.broadcast_arrays(t, *values)
    scalar = t.ndim == 0
    stacked = np.stack(values)
    index, local_t = _segment_coordinates(t)
    a = _take(stacked, index)
    b = _take(stacked, index + 1)
    result = cosine_interpolate(a, b, local_t)
    result = np.where(t >= 1.0, stacked[-1], result)
    return float(result) if scalar else result


def interpolate5_smooth(t: ArrayLike, values) -> ArrayLike:
    """
    Catmull-Rom interpolation through the five control values.

    Virtual end points mirror the second and fourth values across the first
    and last so the curve starts and ends without a kink.

    Args:
        t: Path parameter(s), clamped to [0, 1]
        values: Five control values at t = 0, 1/6, 1/2, 5/6, 1 (scalars or
            arrays broadcastable against t)

    Returns:
        Interpolated value(s), exactly equal to the control value at a knot
    """
    t = np.clip(np.asarray(t, dtype=float), 0.0, 1.0)
    t, v0, v1, v2, v3, v4 = np.broadcast_arrays(t, *values)
    scalar = t.ndim == 0
    padded = np.stack([v0 + (v0 - v1), v0, v1, v2, v3, v4, v4 + (v4 - v3)])
    index, local_t = _segment_coordinates(t)
    result = catmull_rom(_take(padded, index), _take(padded, index + 1),
                         _take(padded, index + 2), _take(padded, index + 3),
                         local_t)
    result = np.where(t >= 1.0, v4, result)
    return float(result) if scalar else result


def isometric_project(points: np.ndarray) -> np.ndarray:
    """
    Project 3D points to screen space with the fixed isometric camera.

    X runs right-down, Y left-down, Z up (screen Y grows downward).

    Args:
        points: Array of shape (3,) or (N, 3)

    Returns:
        Array of shape (2,) or (N, 2)
    """
    p = np.asarray(points, dtype=float)
    x, y, z = p[..., 0], p[..., 1], p[..., 2]
    return np.stack([(x - y) * COS_ISO, -z + (x + y) * SIN_ISO * 0.5], axis=-1)


def rotate_about_vertical(points: np.ndarray, angle: float,
                          pivot: Tuple[float, float]) -> np.ndarray:
    """
    Rotate points about the vertical axis through a plan-view pivot.

    Args:
        points: Array of shape (3,) or (N, 3)
        angle: Rotation angle in radians
        pivot: (x, y) centre of rotation

    Returns:
        Rotated points, same shape; z is untouched
    """
    p = np.asarray(points, dtype=float)
    cx, cy = pivot
    x = p[..., 0] - cx
    y = p[..., 1] - cy
    cos_a = np.cos(angle)
    sin_a = np.sin(angle)
    return np.stack([
        x * cos_a - y * sin_a + cx,
        x * sin_a + y * cos_a + cy,
        p[..., 2],
    ], axis=-1)


def rotate_and_project(points: np.ndarray, angle: float,
                       pivot: Tuple[float, float]) -> np.ndarray:
    """Rotate about the vertical axis, then apply the isometric projection."""
    return isometric_project(rotate_about_vertical(points, angle, pivot))


def wrap_angle(angle: float) -> float:
    """Wrap an angle in radians into [0, 2*pi)."""
    wrapped = float(np.mod(angle, 2 * np.pi))
    # np.mod can return 2*pi for tiny negative inputs
    return 0.0 if wrapped >= 2 * np.pi else wrapped


def _fmt(value: float) -> str:
    # Adding 0.0 folds -0.0 into 0.0 so "-0.00" never appears
    return f'{round(float(value), 2) + 0.0:.2f}'


def points_to_path(points: np.ndarray) -> str:
    """
    Convert 2D points to an SVG-style path string.

    Args:
        points: Array of shape (N, 2)

    Returns:
        "M x y L x y ..." with two decimals, or '' for no points
    """
    pts = np.asarray(points, dtype=float)
    if pts.size == 0:
        return ''
    return ' '.join(
        f"{'M' if i == 0 else 'L'} {_fmt(x)} {_fmt(y)}"
        for i, (x, y) in enumerate(pts.reshape(-1, 2))
    )


def points_bounds(points: np.ndarray) -> Tuple[float, float, float, float]:
    """
    Axis-aligned bounds of a 2D point set.

    Returns:
        (min_x, max_x, min_y, max_y)
    """
    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(pts) == 0:
        return EMPTY_BOUNDS
    min_x, min_y = pts.min(axis=0)
    max_x, max_y = pts.max(axis=0)
    return (float(min_x), float(max_x), float(min_y), float(max_y))


def merge_bounds(a: Tuple[float, float, float, float],
                 b: Tuple[float, float, float, float]) -> Tuple[float, float, float, float]:
    """Union of two (min_x, max_x, min_y, max_y) boxes."""
    return (min(a[0], b[0]), max(a[1], b[1]), min(a[2], b[2]), max(a[3], b[3]))
