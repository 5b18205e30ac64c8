"""
Generate the sliced shelf solid for a unit fitted into a 90 degree corner.

The walls run along y=0 (x-axis wall, extent `width`) and x=0 (y-axis
wall, extent `length`). The front surface wraps around the corner through
five control curves:

    t=0    (width, 0)                  straight, on the x-axis wall
    t=1/6  (width - 2/3 depth, depth)  sine
    t=1/2  (depth, depth)              inverted sine, on the diagonal
    t=5/6  (depth, length - 2/3 depth) sine
    t=1    (0, length)                 straight, on the y-axis wall

The base spine and the wave multiplier are interpolated separately with
Catmull-Rom splines and the wave is applied along the 45 degree diagonal,
so the wave moves smoothly without dragging the footprint around. Columns
are 45 degree slices x - y = k radiating from the corner.
"""

import logging
from typing import Tuple

import numpy as np

import geometry
import viewport
from config import CornerShelfParams
from shelf_generator import Piece, ShelfEngine, ShelfGeometry, slice_positions, frozen_points

logger = logging.getLogger(__name__)

DIAG = geometry.DIAG
CONTROL_KNOTS = geometry.CONTROL_KNOTS
CONTROL_SIGNS = geometry.CONTROL_SIGNS
sine_profile = geometry.sine_profile
interpolate5_smooth = geometry.interpolate5_smooth

SHELF_SEGMENTS = 80
BACK_SEGMENTS = 20
HEIGHT_SEGMENTS = 40
CURVE_SEGMENTS = 40
CONTOUR_COUNT = 30
CONTOUR_SEGMENTS = 80
# 20 halvings of [0, 1] puts t within ~1e-6 of the crossing
BISECTION_STEPS = 20

# Dimension handle layout for the interactive variant (inches)
HANDLE_HEIGHT_OFFSET = 8.0
HANDLE_LABEL_PADDING = 10.0


def spine_knots(params: CornerShelfParams) -> Tuple[Tuple[float, ...], Tuple[float, ...]]:
    """
    Base spine (x, y) values at the five control knots.

    The two sine curves sit 2/3 depth in from the wall ends so the wave
    reaches closer to the edges.
    """
    width, length, depth = params.width, params.length, params.depth
    xs = (width, width - depth * 2 / 3, depth, depth, 0.0)
    ys = (0.0, depth, depth, length - depth * 2 / 3, length)
    return xs, ys


def corner_front_surface(t, z, params: CornerShelfParams) -> np.ndarray:
    """
    Point on the wavy front surface at path parameter t and height z.

    Args:
        t: Path parameter(s) in [0, 1], x-axis wall end to y-axis wall end
        z: Height(s) in [0, params.height]
        params: CornerShelfParams

    Returns:
        Array [..., 2] of (x, y)
    """
    xs, ys = spine_knots(params)
    base_x = interpolate5_smooth(t, xs)
    base_y = interpolate5_smooth(t, ys)
    multiplier = interpolate5_smooth(t, CONTROL_SIGNS)

    offset = params.amplitude * sine_profile(z, params.height) * multiplier
    x, y = np.broadcast_arrays(base_x + offset * DIAG, base_y + offset * DIAG)
    return np.stack([x, y], axis=-1)


def wall_intersection(k: float, width: float, length: float) -> Tuple[float, float]:
    """
    Where the 45 degree slice x - y = k meets the corner walls.

    k >= 0 hits the x-axis wall at (k, 0); k < 0 hits the y-axis wall at
    (0, -k). Points past the end of a wall are clamped to its end.
    """
    if k >= 0:
        return (min(k, width), 0.0)
    return (0.0, min(-k, length))


def solve_diagonal_crossing(k: float, z: np.ndarray, params: CornerShelfParams,
                            steps: int = BISECTION_STEPS) -> np.ndarray:
    """
    Path parameter where the surface crosses x - y = k, at each height.

    x - y falls monotonically from the x-axis wall end (t=0) to the y-axis
    wall end (t=1); the wave moves x and y together so it never changes
    x - y. Bisection over [0, 1] is therefore well founded.

    Args:
        k: Diagonal slice offset
        z: Heights to solve at
        params: CornerShelfParams
        steps: Number of bisection halvings

    Returns:
        Array of t, one per height
    """
    z = np.asarray(z, dtype=float)
    t_low = np.zeros_like(z)
    t_high = np.ones_like(z)
    for _ in range(steps):
        t_mid = (t_low + t_high) / 2
        pos = corner_front_surface(t_mid, z, params)
        above = (pos[..., 0] - pos[..., 1]) > k
        t_low = np.where(above, t_mid, t_low)
        t_high = np.where(above, t_high, t_mid)
    return (t_low + t_high) / 2


def diagonal_range(params: CornerShelfParams) -> Tuple[float, float]:
    """
    Usable x - y range for columns, sampled at mid-height.

    Returns:
        (k_min, k_max) after trimming column_offset from each end
    """
    z_mid = params.height / 2
    start = corner_front_surface(0.0, z_mid, params)
    end = corner_front_surface(1.0, z_mid, params)
    k_start = start[0] - start[1]
    k_end = end[0] - end[1]
    k_min = min(k_start, k_end) + params.column_offset
    k_max = max(k_start, k_end) - params.column_offset
    return float(k_min), float(k_max)


class CornerEngine(ShelfEngine):
    """Shelf unit wrapped into a 90 degree corner."""

    name = 'corner'

    def surface_point(self, t, z, params: CornerShelfParams) -> np.ndarray:
        return corner_front_surface(t, z, params)

    def control_curves(self, params: CornerShelfParams) -> Tuple[np.ndarray, ...]:
        """The five vertical control curves, t=0 (x-axis wall) first."""
        z = np.linspace(0, params.height, CURVE_SEGMENTS + 1)
        curves = []
        for knot in CONTROL_KNOTS:
            xy = corner_front_surface(np.full_like(z, knot), z, params)
            curves.append(frozen_points(np.column_stack([xy, z])))
        return tuple(curves)

    def surface_contours(self, params: CornerShelfParams) -> Tuple[np.ndarray, ...]:
        """Horizontal contour lines tracing the lofted surface."""
        t = np.linspace(0, 1, CONTOUR_SEGMENTS + 1)
        contours = []
        for z in np.linspace(0, params.height, CONTOUR_COUNT + 1):
            xy = corner_front_surface(t, z, params)
            contours.append(frozen_points(np.column_stack([xy, np.full_like(t, z)])))
        return tuple(contours)

    def generate_shelf(self, z: float, params: CornerShelfParams) -> Piece:
        """Horizontal slice at height z, backed by both walls."""
        width, length = params.width, params.length
        t = np.linspace(0, 1, SHELF_SEGMENTS + 1)
        front = np.column_stack([corner_front_surface(t, z, params), np.full_like(t, z)])

        s = np.linspace(0, 1, BACK_SEGMENTS + 1)
        zs = np.full_like(s, z)
        # x-axis wall from (width, 0) to the corner, then y-axis wall out to (0, length)
        back_x = np.column_stack([width * (1 - s), np.zeros_like(s), zs])
        back_y = np.column_stack([np.zeros_like(s), length * s, zs])

        width_side = [front[0], [width, 0.0, z]]
        length_side = [front[-1], [0.0, length, z]]
        return Piece(
            kind='shelf',
            position=float(z),
            front_edge=frozen_points(front),
            back_edges=(frozen_points(back_x), frozen_points(back_y)),
            connectors=(frozen_points(width_side), frozen_points(length_side)),
        )

    def generate_column(self, k: float, params: CornerShelfParams) -> Piece:
        """45 degree slice along x - y = k."""
        z = np.linspace(0, params.height, HEIGHT_SEGMENTS + 1)
        t = solve_diagonal_crossing(k, z, params)
        front = np.column_stack([corner_front_surface(t, z, params), z])

        back_x, back_y = wall_intersection(k, params.width, params.length)
        back = np.column_stack([np.full_like(z, back_x), np.full_like(z, back_y), z])

        bottom = [front[0], back[0]]
        top = [front[-1], back[-1]]
        return Piece(
            kind='column',
            position=float(k),
            front_edge=frozen_points(front),
            back_edges=(frozen_points(back),),
            connectors=(frozen_points(bottom), frozen_points(top)),
        )

    def generate_geometry(self, params: CornerShelfParams) -> ShelfGeometry:
        """
        Slice the corner loft into shelves and diagonal columns.

        Args:
            params: CornerShelfParams (used as given; clamp beforehand if needed)

        Returns:
            ShelfGeometry with shelves, columns, control curves and contours
        """
        shelf_z = slice_positions(params.shelf_count, params.shelf_offset,
                                  params.height - params.shelf_offset)
        k_min, k_max = diagonal_range(params)
        # Width side first
        column_k = slice_positions(params.column_count, k_max, k_min)

        shelves = tuple(self.generate_shelf(z, params) for z in shelf_z)
        columns = tuple(self.generate_column(k, params) for k in column_k)
        logger.debug("Corner geometry: %d shelves, %d columns, k in [%.2f, %.2f]",
                     len(shelves), len(columns), k_min, k_max)
        return ShelfGeometry(
            shelves=shelves,
            columns=columns,
            curves=self.control_curves(params),
            contours=self.surface_contours(params),
        )


class HomeCornerEngine(CornerEngine):
    """
    Corner engine as used by the three-handle home generator.

    The view box also keeps the width, length and height drag handles in
    frame and uses the tighter home padding/zoom.
    """

    name = 'home'
    view_settings = viewport.HOME_VIEWPORT

    def handle_points(self, params: CornerShelfParams) -> np.ndarray:
        """
        Handle end points (plus label room) that must stay visible.

        Returns:
            Array of shape (5, 3)
        """
        width, length, height = params.width, params.length, params.height
        handle_x = -HANDLE_HEIGHT_OFFSET - HANDLE_LABEL_PADDING
        return np.array([
            [width, length, 0.0],
            [0.0, length, 0.0],
            [width, 0.0, 0.0],
            [handle_x, length, 0.0],
            [handle_x, length, height],
        ])
