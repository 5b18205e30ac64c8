"""
Generate the sliced shelf solid for a unit standing against a flat wall.

The front surface is a loft across five vertical control curves spaced
along the width (x) axis. Each curve is a single sine period over the
height that pushes the surface toward or away from the wall (y):

    t:     0         1/6       1/2        5/6       1
    wave:  straight  sine      inverted   sine      straight

The loft is sliced horizontally into shelves and vertically into columns.
This module also holds the piece/geometry containers and the engine base
class shared with the corner engine.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Tuple

import numpy as np

import geometry
import viewport
from config import ShelfParams

logger = logging.getLogger(__name__)

CONTROL_KNOTS = geometry.CONTROL_KNOTS
CONTROL_SIGNS = geometry.CONTROL_SIGNS
sine_profile = geometry.sine_profile
interpolate5_cosine = geometry.interpolate5_cosine
rotate_and_project = geometry.rotate_and_project
points_bounds = geometry.points_bounds
points_to_path = geometry.points_to_path

# Samples per polyline
EDGE_SEGMENTS = 40
HEIGHT_SEGMENTS = 40
CURVE_SEGMENTS = 40


def frozen_points(points) -> np.ndarray:
    arr = np.array(points, dtype=float)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Piece:
    """
    One slice of the lofted solid.

    Shelves are constant-height slices; columns are constant path-position
    slices (flat wall) or constant x - y slices (corner). Point arrays are
    read-only: a parameter change produces a new piece, never an edit.

    Attributes:
        kind: 'shelf' or 'column'
        position: z for shelves; path parameter t (flat) or diagonal
            offset k (corner) for columns
        front_edge: Wavy edge on the lofted surface, shape (N, 3) or (N, 2)
        back_edges: Straight edge(s) against the wall(s)
        connectors: Two 2-point segments joining the front edge ends to the
            wall. Shelves: (start side, end side) along the path. Columns:
            (bottom, top).
    """
    kind: str
    position: float
    front_edge: np.ndarray
    back_edges: Tuple[np.ndarray, ...]
    connectors: Tuple[np.ndarray, np.ndarray]

    @property
    def back_edge(self) -> np.ndarray:
        return self.back_edges[0]

    def polylines(self) -> Iterator[np.ndarray]:
        """Every edge of the piece, front edge first."""
        yield self.front_edge
        yield from self.back_edges
        yield from self.connectors

    def map_points(self, transform: Callable[[np.ndarray], np.ndarray]) -> 'Piece':
        """Apply a point transform (e.g. a projection) to every edge."""
        return Piece(
            kind=self.kind,
            position=self.position,
            front_edge=frozen_points(transform(self.front_edge)),
            back_edges=tuple(frozen_points(transform(e)) for e in self.back_edges),
            connectors=tuple(frozen_points(transform(c)) for c in self.connectors),
        )

    def to_paths(self) -> List[str]:
        """Path strings for every edge of a projected piece."""
        return [points_to_path(line) for line in self.polylines()]


@dataclass(frozen=True, eq=False)
class ShelfGeometry:
    """
    A geometry snapshot: sliced pieces plus reference curves.

    The same container holds 3D geometry and its 2D projection.
    """
    shelves: Tuple[Piece, ...]
    columns: Tuple[Piece, ...]
    curves: Tuple[np.ndarray, ...]
    contours: Tuple[np.ndarray, ...] = field(default_factory=tuple)

    def polylines(self) -> Iterator[np.ndarray]:
        for piece in self.shelves + self.columns:
            yield from piece.polylines()
        yield from self.curves
        yield from self.contours

    def all_points(self) -> np.ndarray:
        """Every point of every polyline stacked into one array."""
        lines = list(self.polylines())
        if not lines:
            return np.empty((0, 3))
        return np.concatenate(lines, axis=0)

    def map_points(self, transform: Callable[[np.ndarray], np.ndarray]) -> 'ShelfGeometry':
        return ShelfGeometry(
            shelves=tuple(p.map_points(transform) for p in self.shelves),
            columns=tuple(p.map_points(transform) for p in self.columns),
            curves=tuple(frozen_points(transform(c)) for c in self.curves),
            contours=tuple(frozen_points(transform(c)) for c in self.contours),
        )


def slice_positions(count: int, start: float, end: float) -> np.ndarray:
    """
    Evenly spaced slice positions from start to end.

    A count of one or less collapses to a single slice halfway between.
    """
    count = int(count)
    if count > 1:
        return np.linspace(start, end, count)
    return np.array([(start + end) / 2])


class ShelfEngine:
    """
    Common interface of the shelf engines.

    Subclasses provide the surface function and the slicer; rotation,
    projection and the fixed view box are shared.
    """

    name = 'base'
    view_settings = viewport.ViewportSettings()

    def surface_point(self, t, z, params) -> np.ndarray:
        raise NotImplementedError

    def generate_geometry(self, params) -> ShelfGeometry:
        raise NotImplementedError

    def pivot(self, params) -> Tuple[float, float]:
        """Plan-view centre of rotation for these parameters."""
        return params.pivot

    def handle_points(self, params) -> Optional[np.ndarray]:
        """3D positions of interactive markers to keep in frame (none by default)."""
        return None

    def project(self, points, angle: float, params) -> np.ndarray:
        """Rotate 3D point(s) about the pivot and project to screen space."""
        return rotate_and_project(points, angle, self.pivot(params))

    def project_geometry(self, geo: ShelfGeometry, angle: float,
                         params) -> ShelfGeometry:
        """
        Rotate and project a whole geometry snapshot.

        Args:
            geo: 3D geometry from generate_geometry
            angle: Rotation in radians
            params: Parameters the geometry was generated from

        Returns:
            ShelfGeometry with (N, 2) screen-space arrays
        """
        pivot = self.pivot(params)
        return geo.map_points(lambda pts: rotate_and_project(pts, angle, pivot))

    def compute_bounds(self, projected: ShelfGeometry) -> Tuple[float, float, float, float]:
        """
        Bounding box of projected geometry.

        Returns:
            (min_x, max_x, min_y, max_y)
        """
        return points_bounds(projected.all_points())

    def fixed_view_box(self, params,
                       settings: Optional[viewport.ViewportSettings] = None) -> viewport.ViewBox:
        """
        View box that holds the geometry at every rotation angle.

        Args:
            params: Parameter snapshot
            settings: Override for the engine's padding/zoom preset

        Returns:
            ViewBox
        """
        geo = self.generate_geometry(params)
        points = geo.all_points()
        handles = self.handle_points(params)
        if handles is not None:
            points = np.concatenate([points, handles], axis=0)
        pivot = self.pivot(params)

        def bounds_at(angle: float):
            return points_bounds(rotate_and_project(points, angle, pivot))

        return viewport.fit_view_box(bounds_at, settings or self.view_settings)


def front_surface_y(t, z, params: ShelfParams):
    """
    Depth of the wavy front surface at path parameter t and height z.

    Args:
        t: Position along the width, normalised to [0, 1]
        z: Height(s) in [0, params.height]
        params: ShelfParams

    Returns:
        y (distance from the wall)
    """
    sine = sine_profile(z, params.height)
    values = [params.depth + params.amplitude * sign * sine for sign in CONTROL_SIGNS]
    return interpolate5_cosine(t, values)


class FlatWallEngine(ShelfEngine):
    """Shelf unit against a single flat wall."""

    name = 'flat'

    def surface_point(self, t, z, params: ShelfParams) -> np.ndarray:
        """
        Point on the front surface.

        Returns:
            Array [..., 2] of (x, y)
        """
        t = np.clip(np.asarray(t, dtype=float), 0.0, 1.0)
        y = front_surface_y(t, z, params)
        x, y = np.broadcast_arrays(t * params.width, y)
        return np.stack([x, y], axis=-1)

    def control_curves(self, params: ShelfParams) -> Tuple[np.ndarray, ...]:
        """The five vertical control curves, in path order."""
        z = np.linspace(0, params.height, CURVE_SEGMENTS + 1)
        sine = sine_profile(z, params.height)
        curves = []
        for knot, sign in zip(CONTROL_KNOTS, CONTROL_SIGNS):
            y = params.depth + params.amplitude * sign * sine
            curves.append(frozen_points(np.column_stack([np.full_like(z, knot * params.width), y, z])))
        return tuple(curves)

    def generate_shelf(self, z: float, params: ShelfParams) -> Piece:
        """Horizontal slice at height z."""
        width = params.width
        t = np.linspace(0, 1, EDGE_SEGMENTS + 1)
        front_xy = self.surface_point(t, z, params)
        zs = np.full_like(t, z)
        front = np.column_stack([front_xy, zs])
        back = np.column_stack([t * width, np.zeros_like(t), zs])
        left_side = [front[0], [0.0, 0.0, z]]
        right_side = [front[-1], [width, 0.0, z]]
        return Piece(
            kind='shelf',
            position=float(z),
            front_edge=frozen_points(front),
            back_edges=(frozen_points(back),),
            connectors=(frozen_points(left_side), frozen_points(right_side)),
        )

    def generate_column(self, t: float, params: ShelfParams) -> Piece:
        """Vertical slice at path parameter t."""
        t = float(np.clip(t, 0.0, 1.0))
        x = t * params.width
        z = np.linspace(0, params.height, HEIGHT_SEGMENTS + 1)
        y = front_surface_y(t, z, params)
        xs = np.full_like(z, x)
        front = np.column_stack([xs, y, z])
        back = np.column_stack([xs, np.zeros_like(z), z])
        bottom = [front[0], [x, 0.0, 0.0]]
        top = [front[-1], [x, 0.0, params.height]]
        return Piece(
            kind='column',
            position=t,
            front_edge=frozen_points(front),
            back_edges=(frozen_points(back),),
            connectors=(frozen_points(bottom), frozen_points(top)),
        )

    def generate_geometry(self, params: ShelfParams) -> ShelfGeometry:
        """
        Slice the lofted solid into shelves and columns.

        Args:
            params: ShelfParams (used as given; clamp beforehand if needed)

        Returns:
            ShelfGeometry with the shelves, columns and five control curves
        """
        shelf_z = slice_positions(params.shelf_count, params.offset,
                                  params.height - params.offset)
        column_t = slice_positions(params.column_count, params.offset / params.width,
                                   1 - params.offset / params.width)

        shelves = tuple(self.generate_shelf(z, params) for z in shelf_z)
        columns = tuple(self.generate_column(t, params) for t in column_t)
        logger.debug("Flat-wall geometry: %d shelves, %d columns", len(shelves), len(columns))
        return ShelfGeometry(shelves=shelves, columns=columns,
                             curves=self.control_curves(params))
