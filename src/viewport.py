"""
Rotation-invariant view box for a spinning shelf.

The projected geometry is sampled over a full turn and the union of the
per-angle bounds becomes a fixed display frame, so the frame does not
resize as the object rotates.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Tuple

import numpy as np

from geometry import EMPTY_BOUNDS, merge_bounds

logger = logging.getLogger(__name__)

Bounds = Tuple[float, float, float, float]


@dataclass(frozen=True)
class ViewportSettings:
    """
    Tunable constants for the fixed view box.

    Attributes:
        samples: Number of evenly spaced rotation angles to sample
        padding: Margin added on every side before zooming
        zoom: Scale applied to the padded box (< 1 zooms in)
        precision: Decimal places kept in the final numbers
    """
    samples: int = 12
    padding: float = 10.0
    zoom: float = 1 / 1.15
    precision: int = 2


# Interactive home variant: tighter padding, handles included in the sweep
HOME_VIEWPORT = ViewportSettings(samples=12, padding=5.0, zoom=0.91, precision=2)


@dataclass(frozen=True)
class ViewBox:
    """Display rectangle in screen-space units."""
    min_x: float
    min_y: float
    width: float
    height: float

    @property
    def max_x(self) -> float:
        return self.min_x + self.width

    @property
    def max_y(self) -> float:
        return self.min_y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.min_x + self.width / 2, self.min_y + self.height / 2)

    def as_attribute(self) -> str:
        """'minX minY width height' as used by an SVG viewBox attribute."""
        return f'{self.min_x:.2f} {self.min_y:.2f} {self.width:.2f} {self.height:.2f}'

    def unzoomed(self, zoom: float) -> 'ViewBox':
        """The padded box before zooming, about the same centre."""
        cx, cy = self.center
        w = self.width / zoom
        h = self.height / zoom
        return ViewBox(cx - w / 2, cy - h / 2, w, h)

    def contains(self, points: np.ndarray, tolerance: float = 0.0) -> bool:
        """True if every 2D point lies inside the box (plus tolerance)."""
        pts = np.asarray(points, dtype=float).reshape(-1, 2)
        return bool(
            np.all(pts[:, 0] >= self.min_x - tolerance)
            and np.all(pts[:, 0] <= self.max_x + tolerance)
            and np.all(pts[:, 1] >= self.min_y - tolerance)
            and np.all(pts[:, 1] <= self.max_y + tolerance)
        )


def sample_angles(samples: int) -> np.ndarray:
    """Evenly spaced angles over one full turn, starting at 0."""
    return np.arange(samples) * (2 * np.pi / samples)


def fit_view_box(bounds_at_angle: Callable[[float], Bounds],
                 settings: ViewportSettings = ViewportSettings()) -> ViewBox:
    """
    Fit a fixed view box around geometry spinning about its pivot.

    Args:
        bounds_at_angle: Returns (min_x, max_x, min_y, max_y) of the
            projected geometry at a rotation angle
        settings: Sampling, padding and zoom constants

    Returns:
        ViewBox rounded to settings.precision decimals
    """
    bounds = EMPTY_BOUNDS
    for angle in sample_angles(settings.samples):
        bounds = merge_bounds(bounds, bounds_at_angle(float(angle)))

    min_x, max_x, min_y, max_y = bounds
    if not np.all(np.isfinite(bounds)):
        logger.debug("No finite geometry to frame, returning an empty view box")
        return ViewBox(0.0, 0.0, 0.0, 0.0)

    w = max_x - min_x + settings.padding * 2
    h = max_y - min_y + settings.padding * 2

    scaled_w = w * settings.zoom
    scaled_h = h * settings.zoom
    center_x = (min_x + max_x) / 2
    center_y = (min_y + max_y) / 2

    digits = settings.precision
    return ViewBox(
        min_x=round(center_x - scaled_w / 2, digits) + 0.0,
        min_y=round(center_y - scaled_h / 2, digits) + 0.0,
        width=round(scaled_w, digits) + 0.0,
        height=round(scaled_h, digits) + 0.0,
    )
