"""
Parameter model for the shelf engines.
Holds the immutable parameter snapshots, their documented ranges, the
derived-parameter table for the three-dimension home variant, and JSON
preset loading/saving.
"""

import json
import logging
from dataclasses import dataclass, asdict, fields, replace
from pathlib import Path
from typing import Dict, Any, Optional, NamedTuple, Union

import numpy as np
from scipy.interpolate import lagrange

logger = logging.getLogger(__name__)

ENGINE_FLAT = 'flat'
ENGINE_CORNER = 'corner'
ENGINE_HOME = 'home'
ENGINES = (ENGINE_FLAT, ENGINE_CORNER, ENGINE_HOME)


class ParamRange(NamedTuple):
    """Inclusive min/max for one user-settable value."""
    minimum: float
    maximum: float

    def clamp(self, value: float) -> float:
        return float(min(self.maximum, max(self.minimum, value)))


FLAT_RANGES = {
    'width': ParamRange(30, 100),
    'height': ParamRange(20, 80),
    'depth': ParamRange(10, 25),
    'amplitude': ParamRange(0, 6),
    'shelf_count': ParamRange(1, 8),
    'column_count': ParamRange(1, 8),
    'offset': ParamRange(0, 10),
}

CORNER_RANGES = {
    'width': ParamRange(20, 80),
    'length': ParamRange(20, 80),
    'height': ParamRange(20, 80),
    'depth': ParamRange(5, 25),
    'amplitude': ParamRange(0, 6),
    'shelf_count': ParamRange(1, 8),
    'column_count': ParamRange(1, 8),
    'shelf_offset': ParamRange(0, 15),
    'column_offset': ParamRange(0, 15),
    'wall_align': ParamRange(0, 1),
}

# The home variant only exposes width/length/height, all on the same range
HOME_DIMENSION_RANGE = ParamRange(20, 80)

# Corner depth anchors: min(width, length) -> depth
DEPTH_ANCHORS = ((20.0, 7.0), (32.0, 10.0), (80.0, 13.0))
_DEPTH_CURVE = lagrange([a[0] for a in DEPTH_ANCHORS], [a[1] for a in DEPTH_ANCHORS])


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (matches slider rounding)."""
    return int(np.floor(value + 0.5))


@dataclass(frozen=True)
class ShelfParams:
    """Flat-wall shelf parameters (inches)."""
    width: float = 80.0
    height: float = 50.0
    depth: float = 10.0
    amplitude: float = 2.5
    shelf_count: int = 5
    column_count: int = 5
    offset: float = 6.0

    @property
    def pivot(self):
        """Plan-view rotation centre: middle of the footprint."""
        return (self.width / 2, self.depth / 2)

    def clamped(self) -> 'ShelfParams':
        """
        Clamp every field to its documented range.

        The offset is also limited to half the height and half the width so
        the shelf and column slice ranges never invert.
        """
        values = {name: FLAT_RANGES[name].clamp(getattr(self, name))
                  for name in FLAT_RANGES}
        values['shelf_count'] = round_half_up(values['shelf_count'])
        values['column_count'] = round_half_up(values['column_count'])
        values['offset'] = min(values['offset'], values['height'] / 2, values['width'] / 2)
        result = ShelfParams(**values)
        if result != self:
            logger.debug("Clamped flat-wall params %s -> %s", self, result)
        return result

    def with_changes(self, **changes) -> 'ShelfParams':
        return replace(self, **changes)


@dataclass(frozen=True)
class CornerShelfParams:
    """Corner shelf parameters (inches)."""
    width: float = 50.0
    length: float = 50.0
    height: float = 50.0
    depth: float = 15.0
    amplitude: float = 2.5
    shelf_count: int = 5
    column_count: int = 5
    shelf_offset: float = 6.0
    column_offset: float = 6.0
    # Carried for the home variant; does not change the geometry
    wall_align: float = 0.85

    @property
    def pivot(self):
        return (self.width / 2, self.length / 2)

    def clamped(self) -> 'CornerShelfParams':
        """
        Clamp every field to its documented range.

        Depth is limited to half of min(width, length) so the control curve
        base positions cannot cross; the shelf offset to half the height;
        the column offset to half of min(width, length).
        """
        values = {name: CORNER_RANGES[name].clamp(getattr(self, name))
                  for name in CORNER_RANGES}
        values['shelf_count'] = round_half_up(values['shelf_count'])
        values['column_count'] = round_half_up(values['column_count'])
        short_side = min(values['width'], values['length'])
        values['depth'] = min(values['depth'], short_side / 2)
        values['shelf_offset'] = min(values['shelf_offset'], values['height'] / 2)
        values['column_offset'] = min(values['column_offset'], short_side / 2)
        result = CornerShelfParams(**values)
        if result != self:
            logger.debug("Clamped corner params %s -> %s", self, result)
        return result

    def with_changes(self, **changes) -> 'CornerShelfParams':
        return replace(self, **changes)


@dataclass(frozen=True)
class HomeDimensions:
    """The three user-facing dimensions of the home corner generator."""
    width: float = 48.0
    length: float = 32.0
    height: float = 24.0

    def clamped(self) -> 'HomeDimensions':
        return HomeDimensions(
            width=HOME_DIMENSION_RANGE.clamp(self.width),
            length=HOME_DIMENSION_RANGE.clamp(self.length),
            height=HOME_DIMENSION_RANGE.clamp(self.height),
        )

    def to_params(self) -> CornerShelfParams:
        return derive_corner_params(self.width, self.length, self.height)


def derive_depth(width: float, length: float) -> float:
    """Quadratic depth through (20, 7), (32, 10), (80, 13) in min(width, length)."""
    return float(_DEPTH_CURVE(min(width, length)))


def derive_corner_params(width: float, length: float,
                         height: float) -> CornerShelfParams:
    """
    Build a full corner parameter set from the three user dimensions.

    The secondary values come from a fixed table:
    - depth: Lagrange quadratic over min(width, length)
    - columns: 5 once either wall exceeds 50", else 4
    - shelves: 2 below 24" tall, then 3 -> 6 linearly over 24"-80"
    - amplitude: 1.0 at 20" tall -> 3.0 at 80"
    - shelf offset: 2 at 20" tall -> 6 at 80"

    Args:
        width: Extent along the x-axis wall
        length: Extent along the y-axis wall
        height: Overall height

    Returns:
        CornerShelfParams
    """
    dims = HomeDimensions(width, length, height).clamped()
    width, length, height = dims.width, dims.length, dims.height

    if height < 24:
        shelf_count = 2
    else:
        shelf_count = round_half_up(3 + (height - 24) * (3 / 56))

    return CornerShelfParams(
        width=width,
        length=length,
        height=height,
        depth=derive_depth(width, length),
        amplitude=1.0 + (height - 20) * (2.0 / 60),
        shelf_count=shelf_count,
        column_count=5 if (width > 50 or length > 50) else 4,
        shelf_offset=2 + (height - 20) * (4 / 60),
        column_offset=15.0,
        wall_align=0.85,
    )


ParamsType = Union[ShelfParams, CornerShelfParams, HomeDimensions]
_PARAM_CLASSES = {
    ENGINE_FLAT: ShelfParams,
    ENGINE_CORNER: CornerShelfParams,
    ENGINE_HOME: HomeDimensions,
}


class ShelfConfig:
    """Manages a shelf parameter preset."""

    def __init__(self, config_data: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            config_data: Configuration dictionary. If None, creates a default
                flat-wall preset.
        """
        if config_data is None:
            self.data = self._create_default_config()
        else:
            self.data = config_data
            self.validate()

    @staticmethod
    def _create_default_config(engine: str = ENGINE_FLAT) -> Dict[str, Any]:
        """Create a default preset for an engine."""
        return {
            "config_version": "0000",
            "engine": engine,
            "params": asdict(_PARAM_CLASSES[engine]()),
        }

    @classmethod
    def for_engine(cls, engine: str) -> 'ShelfConfig':
        """Default preset for the named engine."""
        if engine not in ENGINES:
            raise ValueError(f"Unknown engine: {engine}")
        return cls(cls._create_default_config(engine))

    @classmethod
    def from_params(cls, params: ParamsType) -> 'ShelfConfig':
        """Wrap an existing parameter snapshot."""
        engine = next(name for name, klass in _PARAM_CLASSES.items()
                      if isinstance(params, klass))
        return cls({"config_version": "0000", "engine": engine, "params": asdict(params)})

    @classmethod
    def from_file(cls, filepath: Path) -> 'ShelfConfig':
        """
        Load configuration from JSON file.

        Args:
            filepath: Path to JSON configuration file

        Returns:
            ShelfConfig instance
        """
        with open(filepath, 'r') as f:
            config_data = json.load(f)
        return cls(config_data)

    def to_file(self, filepath: Path) -> None:
        """
        Save configuration to JSON file.

        Args:
            filepath: Path to save JSON configuration
        """
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w') as f:
            json.dump(self.data, f, indent=2)

    def validate(self) -> bool:
        """
        Validate configuration data structure.

        Missing parameter fields fall back to the engine defaults; unknown
        fields are rejected.

        Returns:
            True if valid

        Raises:
            ValueError: If configuration is invalid
        """
        required_keys = ['config_version', 'engine', 'params']
        for key in required_keys:
            if key not in self.data:
                raise ValueError(f"Missing required key: {key}")

        engine = self.data['engine']
        if engine not in ENGINES:
            raise ValueError(f"Unknown engine: {engine}")

        known = {f.name for f in fields(_PARAM_CLASSES[engine])}
        for key, value in self.data['params'].items():
            if key not in known:
                raise ValueError(f"Unknown {engine} parameter: {key}")
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ValueError(f"Parameter {key} must be a number, got {value!r}")

        return True

    def to_params(self) -> ParamsType:
        """
        Build the clamped parameter snapshot described by this preset.

        Returns:
            ShelfParams, CornerShelfParams or HomeDimensions
        """
        klass = _PARAM_CLASSES[self.engine]
        return klass(**self.data['params']).clamped()

    @property
    def engine(self) -> str:
        """Get engine name."""
        return self.data['engine']

    @property
    def params(self) -> Dict[str, float]:
        """Get raw parameter values."""
        return self.data['params']

    @property
    def version(self) -> str:
        """Get configuration version."""
        return self.data['config_version']

    @version.setter
    def version(self, value: str) -> None:
        """Set configuration version."""
        self.data['config_version'] = value

    def get_next_version_number(self, config_dir: Path) -> str:
        """
        Get the next sequential version number based on existing presets.

        Args:
            config_dir: Directory containing preset files

        Returns:
            Next version number as 4-digit string (e.g., "0001")
        """
        if not config_dir.exists():
            return "0000"

        max_version = -1
        for config_path in config_dir.glob(f"{self.engine}_*.json"):
            try:
                version_num = int(config_path.stem.split('_')[1])
                max_version = max(max_version, version_num)
            except (IndexError, ValueError):
                continue

        return f"{max_version + 1:04d}"
