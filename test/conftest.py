"""
conftest.py — pytest fixtures shared across the test suite.

Provides ready-made occupancy maps for the standard planning scenarios
(open grid, full-width wall, one-cell corridor) so that individual test
modules stay short and focused.
"""

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

os.environ.setdefault("MPLBACKEND", "Agg")

from grid_rrt.occupancy import OccupancyMap  # noqa: E402


# =========================================================================
# Occupancy map fixtures (5x5 grid, extent 500 → cell size 100)
# =========================================================================

@pytest.fixture
def open_map() -> OccupancyMap:
    """No obstacles at all."""
    return OccupancyMap(5)


@pytest.fixture
def wall_map() -> OccupancyMap:
    """Row 2 fully blocked: rows 0-1 and rows 3-4 are disconnected."""
    return OccupancyMap(5, obstacles=[(2, c) for c in range(5)])


@pytest.fixture
def corridor_map() -> OccupancyMap:
    """Rows 1-3 blocked except column 2: a one-cell-wide corridor."""
    obstacles = [(r, c) for r in (1, 2, 3) for c in (0, 1, 3, 4)]
    return OccupancyMap(5, obstacles=obstacles)


@pytest.fixture
def block_map() -> OccupancyMap:
    """3x2 block in the middle (rows 2-3, columns 1-3)."""
    return OccupancyMap(5, obstacles=[(r, c) for r in (2, 3) for c in (1, 2, 3)])
