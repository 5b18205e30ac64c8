"""Tests for parameter snapshots, the derived-parameter table and presets."""
import json

import pytest

import engines
from config import (
    CornerShelfParams,
    HomeDimensions,
    ShelfConfig,
    ShelfParams,
    derive_corner_params,
    derive_depth,
    round_half_up,
)
from corner_generator import CornerEngine, HomeCornerEngine
from shelf_generator import FlatWallEngine


class TestClamping:

    def test_flat_defaults_are_in_range(self):
        assert ShelfParams().clamped() == ShelfParams()

    def test_flat_clamps_each_field(self):
        params = ShelfParams(width=200, height=5, depth=40, amplitude=-1,
                             shelf_count=0, column_count=12, offset=30).clamped()
        assert params.width == 100.0
        assert params.height == 20.0
        assert params.depth == 25.0
        assert params.amplitude == 0.0
        assert params.shelf_count == 1
        assert params.column_count == 8
        assert params.offset == 10.0

    def test_flat_offset_limited_by_height(self):
        params = ShelfParams(height=20, offset=10).clamped()
        assert params.offset == 10.0
        assert ShelfParams(height=20, width=30, offset=10).clamped().offset <= 10.0

    def test_counts_are_rounded(self):
        params = ShelfParams(shelf_count=2.5, column_count=3.4).clamped()
        assert params.shelf_count == 3
        assert params.column_count == 3
        assert isinstance(params.shelf_count, int)

    def test_corner_depth_limited_by_short_wall(self):
        params = CornerShelfParams(width=20, length=60, depth=25).clamped()
        assert params.depth == 10.0

    def test_corner_offsets(self):
        params = CornerShelfParams(width=20, length=20, height=20,
                                   shelf_offset=15, column_offset=15).clamped()
        assert params.shelf_offset == 10.0
        assert params.column_offset == 10.0

    def test_corner_defaults_are_in_range(self):
        assert CornerShelfParams().clamped() == CornerShelfParams()

    def test_home_dimensions_clamped(self):
        dims = HomeDimensions(width=5, length=100, height=50).clamped()
        assert dims == HomeDimensions(20.0, 80.0, 50.0)

    def test_pivots(self):
        assert ShelfParams(width=60, depth=12).pivot == (30.0, 6.0)
        assert CornerShelfParams(width=40, length=70).pivot == (20.0, 35.0)

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2


class TestDerivedParameters:

    @pytest.mark.parametrize("side, depth", [(20, 7.0), (32, 10.0), (80, 13.0)])
    def test_depth_anchors(self, side, depth):
        assert derive_depth(side, 80) == pytest.approx(depth)
        assert derive_depth(80, side) == pytest.approx(depth)

    def test_depth_between_anchors(self):
        assert 10.0 < derive_depth(50, 50) < 13.0

    def test_default_home_dimensions(self, home_dims):
        params = home_dims.to_params()
        assert params.depth == pytest.approx(10.0)
        assert params.shelf_count == 3
        assert params.column_count == 4
        assert params.amplitude == pytest.approx(1.0 + 4 * 2 / 60)
        assert params.shelf_offset == pytest.approx(2 + 4 * 4 / 60)
        assert params.column_offset == 15.0
        assert params.wall_align == 0.85

    def test_short_unit_has_two_shelves(self):
        assert derive_corner_params(40, 40, 23).shelf_count == 2

    def test_tall_unit(self):
        params = derive_corner_params(60, 40, 80)
        assert params.shelf_count == 6
        assert params.column_count == 5
        assert params.amplitude == pytest.approx(3.0)
        assert params.shelf_offset == pytest.approx(6.0)

    def test_shelf_count_rounding(self):
        # 3 + 36 * 3 / 56 is about 4.93
        assert derive_corner_params(40, 40, 60).shelf_count == 5
        assert derive_corner_params(40, 40, 30).shelf_count == 3

    def test_column_threshold(self):
        assert derive_corner_params(50, 50, 40).column_count == 4
        assert derive_corner_params(51, 20, 40).column_count == 5

    def test_inputs_are_clamped(self):
        params = derive_corner_params(200, 10, 5)
        assert (params.width, params.length, params.height) == (80.0, 20.0, 20.0)

    def test_derived_params_generate(self, home_dims):
        geo = HomeCornerEngine().generate_geometry(home_dims.to_params())
        assert len(geo.shelves) == 3
        assert len(geo.columns) == 4


class TestShelfConfig:

    def test_default_is_flat(self):
        cfg = ShelfConfig()
        assert cfg.engine == 'flat'
        assert cfg.version == "0000"
        assert cfg.to_params() == ShelfParams()

    def test_for_engine(self):
        assert ShelfConfig.for_engine('corner').to_params() == CornerShelfParams()
        assert ShelfConfig.for_engine('home').to_params() == HomeDimensions()
        with pytest.raises(ValueError):
            ShelfConfig.for_engine('round')

    def test_round_trip(self, tmp_path):
        cfg = ShelfConfig.from_params(CornerShelfParams(width=60, depth=12))
        cfg.version = "0007"
        path = tmp_path / "presets" / "corner_0007.json"
        cfg.to_file(path)
        loaded = ShelfConfig.from_file(path)
        assert loaded.engine == 'corner'
        assert loaded.version == "0007"
        assert loaded.to_params() == CornerShelfParams(width=60, depth=12)

    def test_partial_params_use_defaults(self):
        cfg = ShelfConfig({"config_version": "0001", "engine": "flat",
                           "params": {"width": 90}})
        params = cfg.to_params()
        assert params.width == 90.0
        assert params.height == ShelfParams().height

    def test_out_of_range_file_values_are_clamped(self, tmp_path):
        path = tmp_path / "flat_0001.json"
        path.write_text(json.dumps({"config_version": "0001", "engine": "flat",
                                    "params": {"width": 500, "offset": -3}}))
        params = ShelfConfig.from_file(path).to_params()
        assert params.width == 100.0
        assert params.offset == 0.0

    @pytest.mark.parametrize("data, message", [
        ({"engine": "flat", "params": {}}, "config_version"),
        ({"config_version": "0000", "params": {}}, "engine"),
        ({"config_version": "0000", "engine": "flat"}, "params"),
        ({"config_version": "0000", "engine": "round", "params": {}}, "Unknown engine"),
        ({"config_version": "0000", "engine": "flat", "params": {"length": 3}}, "length"),
        ({"config_version": "0000", "engine": "home", "params": {"width": "wide"}}, "number"),
        ({"config_version": "0000", "engine": "flat", "params": {"width": True}}, "number"),
    ])
    def test_validation_errors(self, data, message):
        with pytest.raises(ValueError, match=message):
            ShelfConfig(data)

    def test_next_version_number(self, tmp_path):
        cfg = ShelfConfig.for_engine('flat')
        assert cfg.get_next_version_number(tmp_path / "missing") == "0000"
        for name in ("flat_0000.json", "flat_0003.json", "corner_0009.json", "flat_x.json"):
            (tmp_path / name).write_text("{}")
        assert cfg.get_next_version_number(tmp_path) == "0004"


class TestEngineSelection:

    @pytest.mark.parametrize("name, klass", [
        ('flat', FlatWallEngine),
        ('corner', CornerEngine),
        ('home', HomeCornerEngine),
    ])
    def test_get_engine(self, name, klass):
        engine = engines.get_engine(name)
        assert type(engine) is klass
        assert engine.name == name

    def test_unknown_engine(self):
        with pytest.raises(ValueError):
            engines.get_engine('round')

    def test_home_preset_expands_to_corner_params(self):
        params = engines.engine_params(ShelfConfig.for_engine('home'))
        assert isinstance(params, CornerShelfParams)
        assert params.depth == pytest.approx(10.0)

    def test_flat_preset_params(self):
        assert engines.engine_params(ShelfConfig()) == ShelfParams()
