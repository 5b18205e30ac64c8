"""Tests for the flat-wall engine and the shared piece containers."""
import numpy as np
import pytest

from config import ShelfParams
from geometry import CONTROL_KNOTS
from shelf_generator import (
    EDGE_SEGMENTS,
    HEIGHT_SEGMENTS,
    FlatWallEngine,
    front_surface_y,
    slice_positions,
)


class TestSlicePositions:

    def test_even_spacing(self):
        np.testing.assert_allclose(slice_positions(3, 0.0, 10.0), [0.0, 5.0, 10.0])

    def test_single_slice_is_centered(self):
        np.testing.assert_allclose(slice_positions(1, 6.0, 44.0), [25.0])

    def test_zero_count_does_not_divide_by_zero(self):
        np.testing.assert_allclose(slice_positions(0, 2.0, 4.0), [3.0])

    def test_descending_range(self):
        np.testing.assert_allclose(slice_positions(3, 4.0, -4.0), [4.0, 0.0, -4.0])


class TestFrontSurface:

    def test_straight_ends_sit_at_depth(self, flat_params):
        z = np.linspace(0, flat_params.height, 11)
        np.testing.assert_array_equal(front_surface_y(0.0, z, flat_params), flat_params.depth)
        np.testing.assert_array_equal(front_surface_y(1.0, z, flat_params), flat_params.depth)

    def test_control_curves_match_surface(self, flat_engine, flat_params):
        curves = flat_engine.control_curves(flat_params)
        assert len(curves) == 5
        for knot, curve in zip(CONTROL_KNOTS, curves):
            xy = flat_engine.surface_point(np.full(len(curve), knot), curve[:, 2], flat_params)
            np.testing.assert_array_equal(xy[:, 0], curve[:, 0])
            np.testing.assert_array_equal(xy[:, 1], curve[:, 1])

    def test_inverted_curve_in_the_middle(self, flat_params):
        quarter = flat_params.height / 4
        assert front_surface_y(1 / 6, quarter, flat_params) == pytest.approx(12.5)
        assert front_surface_y(1 / 2, quarter, flat_params) == pytest.approx(7.5)
        assert front_surface_y(5 / 6, quarter, flat_params) == pytest.approx(12.5)

    def test_periodic_in_height(self, flat_engine, flat_params):
        t = np.linspace(0, 1, 13)
        bottom = flat_engine.surface_point(t, 0.0, flat_params)
        top = flat_engine.surface_point(t, flat_params.height, flat_params)
        np.testing.assert_allclose(bottom, top, atol=1e-12)

    def test_surface_clamps_path_parameter(self, flat_engine, flat_params):
        np.testing.assert_array_equal(
            flat_engine.surface_point(-1.0, 10.0, flat_params),
            flat_engine.surface_point(0.0, 10.0, flat_params),
        )


class TestFlatWallGeometry:

    def test_piece_counts(self, flat_engine, flat_params):
        geo = flat_engine.generate_geometry(flat_params)
        assert len(geo.shelves) == 4
        assert len(geo.columns) == 5
        assert len(geo.curves) == 5
        assert geo.contours == ()

    def test_front_edge_segment_counts(self, flat_engine, flat_params):
        geo = flat_engine.generate_geometry(flat_params)
        for shelf in geo.shelves:
            assert shelf.front_edge.shape == (EDGE_SEGMENTS + 1, 3)
        for column in geo.columns:
            assert column.front_edge.shape == (HEIGHT_SEGMENTS + 1, 3)

    def test_slice_positions(self, flat_engine, flat_params):
        geo = flat_engine.generate_geometry(flat_params)
        np.testing.assert_allclose([s.position for s in geo.shelves],
                                   [6.0, 18.0 + 2 / 3, 31.0 + 1 / 3, 44.0])
        np.testing.assert_allclose([c.front_edge[0, 0] for c in geo.columns],
                                   [6.0, 23.0, 40.0, 57.0, 74.0])

    def test_shelf_is_closed_against_the_wall(self, flat_engine, flat_params):
        shelf = flat_engine.generate_geometry(flat_params).shelves[0]
        back = shelf.back_edge
        np.testing.assert_array_equal(back[:, 1], 0.0)
        np.testing.assert_array_equal(back[:, 2], shelf.position)
        left, right = shelf.connectors
        np.testing.assert_array_equal(left[0], shelf.front_edge[0])
        np.testing.assert_array_equal(left[1], back[0])
        np.testing.assert_array_equal(right[0], shelf.front_edge[-1])
        np.testing.assert_array_equal(right[1], back[-1])

    def test_column_connectors(self, flat_engine, flat_params):
        column = flat_engine.generate_geometry(flat_params).columns[2]
        bottom, top = column.connectors
        np.testing.assert_allclose(bottom[1], [40.0, 0.0, 0.0])
        np.testing.assert_allclose(top[1], [40.0, 0.0, 50.0])
        assert column.position == pytest.approx(0.5)

    def test_single_shelf_and_column(self, flat_engine):
        params = ShelfParams(shelf_count=1, column_count=1)
        geo = flat_engine.generate_geometry(params)
        assert len(geo.shelves) == 1
        assert len(geo.columns) == 1
        assert geo.shelves[0].position == pytest.approx(params.height / 2)
        assert geo.columns[0].position == pytest.approx(0.5)

    def test_pieces_are_read_only(self, flat_engine, flat_params):
        shelf = flat_engine.generate_geometry(flat_params).shelves[0]
        with pytest.raises(ValueError):
            shelf.front_edge[0, 0] = 99.0

    def test_regeneration_gives_fresh_snapshot(self, flat_engine, flat_params):
        first = flat_engine.generate_geometry(flat_params)
        second = flat_engine.generate_geometry(flat_params.with_changes(amplitude=4.0))
        assert first.shelves[0] is not second.shelves[0]
        assert not np.array_equal(first.shelves[1].front_edge, second.shelves[1].front_edge)


class TestFlatWallProjection:

    def test_regression_paths(self, flat_engine, flat_params):
        geo = flat_engine.generate_geometry(flat_params)
        projected = flat_engine.project_geometry(geo, 0.0, flat_params)
        front, back = projected.shelves[0].to_paths()[:2]
        assert front.startswith("M -8.66 -3.50 L ")
        assert front.endswith(" L 60.62 16.50")
        assert front.count(" L ") == EDGE_SEGMENTS
        assert back.startswith("M 0.00 -6.00 L 1.73 -5.50 L 3.46 -5.00")

    def test_paths_are_deterministic(self, flat_engine, flat_params):
        paths = []
        for _ in range(2):
            geo = flat_engine.generate_geometry(flat_params)
            projected = flat_engine.project_geometry(geo, 1.1, flat_params)
            paths.append([p for piece in projected.shelves for p in piece.to_paths()])
        assert paths[0] == paths[1]

    def test_projection_is_periodic(self, flat_engine, flat_params):
        geo = flat_engine.generate_geometry(flat_params)
        a = flat_engine.project_geometry(geo, 0.7, flat_params).all_points()
        b = flat_engine.project_geometry(geo, 0.7 + 2 * np.pi, flat_params).all_points()
        np.testing.assert_allclose(a, b, atol=1e-9)

    def test_projected_shapes(self, flat_engine, flat_params):
        geo = flat_engine.generate_geometry(flat_params)
        projected = flat_engine.project_geometry(geo, 0.3, flat_params)
        assert projected.shelves[0].front_edge.shape == (EDGE_SEGMENTS + 1, 2)
        assert all(c.shape == (2, 2) for c in projected.columns[0].connectors)

    def test_compute_bounds(self, flat_engine, flat_params):
        geo = flat_engine.generate_geometry(flat_params)
        projected = flat_engine.project_geometry(geo, 0.0, flat_params)
        min_x, max_x, min_y, max_y = flat_engine.compute_bounds(projected)
        assert min_x == pytest.approx(-10 * np.cos(np.pi / 6), abs=0.5)
        assert max_x == pytest.approx(80 * np.cos(np.pi / 6))
        # Top of the first column's wall edge: -50 + 6 * sin(30)/2
        assert min_y == pytest.approx(-48.5)
        assert min_x < max_x and min_y < max_y

    def test_pivot_is_footprint_center(self, flat_engine, flat_params):
        assert flat_engine.pivot(flat_params) == (40.0, 5.0)
        assert flat_engine.handle_points(flat_params) is None

    def test_view_box_holds_every_angle(self, flat_engine, flat_params):
        vb = flat_engine.fixed_view_box(flat_params)
        frame = vb.unzoomed(flat_engine.view_settings.zoom)
        geo = flat_engine.generate_geometry(flat_params)
        for angle in np.linspace(0, 2 * np.pi, 97):
            pts = flat_engine.project_geometry(geo, angle, flat_params).all_points()
            assert frame.contains(pts, tolerance=0.05)

    def test_engine_name(self):
        assert FlatWallEngine.name == 'flat'
