"""
Engine selection. An engine is picked once per session; callers then use
its generate_geometry / project_geometry / compute_bounds / fixed_view_box.
"""

from typing import Dict, Type

import config
from shelf_generator import ShelfEngine, FlatWallEngine
from corner_generator import CornerEngine, HomeCornerEngine

ENGINE_CLASSES: Dict[str, Type[ShelfEngine]] = {
    config.ENGINE_FLAT: FlatWallEngine,
    config.ENGINE_CORNER: CornerEngine,
    config.ENGINE_HOME: HomeCornerEngine,
}


def get_engine(name: str) -> ShelfEngine:
    """
    Create the engine registered under a name.

    Args:
        name: 'flat', 'corner' or 'home'

    Returns:
        ShelfEngine instance

    Raises:
        ValueError: If the name is unknown
    """
    if name not in ENGINE_CLASSES:
        raise ValueError(f"Unknown engine: {name}")
    return ENGINE_CLASSES[name]()


def engine_params(cfg: config.ShelfConfig):
    """
    Geometry parameters for a preset.

    The home variant stores only its three dimensions; the rest of the
    corner parameters are derived from them.
    """
    params = cfg.to_params()
    if isinstance(params, config.HomeDimensions):
        return params.to_params()
    return params
