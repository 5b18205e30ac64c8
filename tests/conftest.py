"""
Shared test fixtures for the shelf engines.
"""
import sys
from pathlib import Path

import matplotlib
import pytest

# Headless backend for the preview tests
matplotlib.use("Agg")

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config import ShelfParams, CornerShelfParams, HomeDimensions
from shelf_generator import FlatWallEngine
from corner_generator import CornerEngine, HomeCornerEngine


@pytest.fixture
def flat_engine():
    return FlatWallEngine()


@pytest.fixture
def corner_engine():
    return CornerEngine()


@pytest.fixture
def home_engine():
    return HomeCornerEngine()


@pytest.fixture
def flat_params():
    """The documented flat-wall regression scenario."""
    return ShelfParams(width=80, height=50, depth=10, amplitude=2.5,
                       shelf_count=4, column_count=5, offset=6)


@pytest.fixture
def corner_params():
    """Symmetric 50" corner unit."""
    return CornerShelfParams(width=50, length=50, height=50, depth=15, amplitude=2.5)


@pytest.fixture
def home_dims():
    return HomeDimensions(width=48, length=32, height=24)
