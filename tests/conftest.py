"""Shared fixtures for the dungeon chess tests."""

import pytest

from dungeonchess.game.board import Tile, TileGrid
from dungeonchess.game.state import BoardState, PieceType, Team, Unit

EXAMPLE_MAP = [
    "..#####",
    "##..##.",
    "##...#.",
    ".......",
    "##...##",
    "##...#.",
    "##...#.",
]


def open_grid(width=7, height=7, stairs=None):
    """All-floor grid, optionally with stairs."""
    grid = TileGrid(width, height)
    grid.fill(Tile.FLOOR)
    if stairs is not None:
        grid.set(stairs, Tile.STAIRS)
    return grid


def make_state(grid, *units):
    """Build a state from (x, y, piece_type, team) tuples."""
    return BoardState.from_grid(grid, [Unit((x, y), kind, team) for x, y, kind, team in units])


@pytest.fixture
def example_map():
    return TileGrid.from_rows(EXAMPLE_MAP)


@pytest.fixture
def example_state(example_map):
    """A player Pawn facing two AI Knights on the example map."""
    return make_state(
        example_map,
        (3, 2, PieceType.PAWN, Team.PLAYER),
        (2, 3, PieceType.KNIGHT, Team.AI),
        (3, 3, PieceType.KNIGHT, Team.AI),
    )


@pytest.fixture
def small_config():
    """Campaign config with a shallow search so tests stay quick."""
    from dungeonchess.config import load_config
    return load_config(overrides={"search": {"depth": 1}, "campaign": {"seed": 0}})
