"""Tile grid, geometry helpers, and text-based rendering."""

from __future__ import annotations

import math
from enum import IntEnum
from typing import Iterable, Optional

import numpy as np

# Sliding pieces walk at most this many steps along a ray, so no map
# dimension may reach past it.
MAX_RAY_LENGTH = 20
MAX_GRID_SIZE = MAX_RAY_LENGTH

# Column labels for notation (one per possible map column)
COL_LABELS = "abcdefghijklmnopqrst"

Position = tuple[int, int]


class Tile(IntEnum):
    EMPTY = 0
    FLOOR = 1
    WALL = 2
    STAIRS = 3


# Map plan characters
TILE_CHARS = {
    "#": Tile.WALL,
    ".": Tile.FLOOR,
    "<": Tile.STAIRS,
    " ": Tile.EMPTY,
}
TILE_NAMES = {v: k for k, v in TILE_CHARS.items()}

PASSABLE_TILES = frozenset({Tile.FLOOR, Tile.STAIRS})


def is_passable(tile: Optional[Tile]) -> bool:
    return tile in PASSABLE_TILES


def dist2(a: Position, b: Position) -> int:
    """Squared Euclidean distance between two positions."""
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


def dist(a: Position, b: Position) -> float:
    """Euclidean distance between two positions."""
    return math.sqrt(dist2(a, b))


class TileGrid:
    """Fixed-size grid of tiles stored as an int8 array indexed [y, x]."""

    def __init__(self, width: int, height: int):
        if not (1 <= width <= MAX_GRID_SIZE and 1 <= height <= MAX_GRID_SIZE):
            raise ValueError(
                f"Grid size {width}x{height} outside 1..{MAX_GRID_SIZE}"
            )
        self.tiles = np.full((height, width), Tile.EMPTY, dtype=np.int8)
        self._passable: Optional[frozenset[Position]] = None

    @classmethod
    def from_rows(cls, rows: Iterable[str]) -> TileGrid:
        """Build a grid from an ASCII map plan.

        '#' is a wall, '.' floor, '<' stairs; anything else is empty. The
        width is taken from the first row, longer rows are clipped.
        """
        rows = list(rows)
        if not rows:
            raise ValueError("Map plan has no rows")
        grid = cls(len(rows[0]), len(rows))
        for y, line in enumerate(rows):
            for x, char in enumerate(line):
                grid.set((x, y), TILE_CHARS.get(char, Tile.EMPTY))
        return grid

    @property
    def width(self) -> int:
        return self.tiles.shape[1]

    @property
    def height(self) -> int:
        return self.tiles.shape[0]

    @property
    def is_frozen(self) -> bool:
        return not self.tiles.flags.writeable

    def in_bounds(self, pos: Position) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, pos: Position) -> Optional[Tile]:
        """Tile at pos, or None outside the grid."""
        if not self.in_bounds(pos):
            return None
        return Tile(int(self.tiles[pos[1], pos[0]]))

    def get_unchecked(self, pos: Position) -> Tile:
        assert self.in_bounds(pos), f"{pos} outside {self.width}x{self.height} grid"
        return Tile(int(self.tiles[pos[1], pos[0]]))

    def set(self, pos: Position, tile: Tile):
        """Set the tile at pos. Positions outside the grid are ignored."""
        if not self.in_bounds(pos):
            return
        self.tiles[pos[1], pos[0]] = tile
        self._passable = None

    def fill(self, tile: Tile):
        self.tiles[:, :] = tile
        self._passable = None

    def is_passable(self, pos: Position) -> bool:
        # Move generation asks this constantly, so answer from a cached set
        if self._passable is None:
            ys, xs = np.nonzero(np.isin(self.tiles, list(PASSABLE_TILES)))
            self._passable = frozenset(zip(xs.tolist(), ys.tolist()))
        return pos in self._passable

    def find_tile(self, tile: Tile) -> Optional[Position]:
        """First position holding tile, scanning row by row."""
        ys, xs = np.nonzero(self.tiles == tile)
        if len(xs) == 0:
            return None
        return (int(xs[0]), int(ys[0]))

    def count(self, tile: Tile) -> int:
        return int(np.count_nonzero(self.tiles == tile))

    def copy(self) -> TileGrid:
        """Return an independent, writable copy."""
        new = TileGrid.__new__(TileGrid)
        new.tiles = self.tiles.copy()
        new._passable = self._passable
        return new

    def frozen(self) -> TileGrid:
        """Return a read-only view sharing this grid's memory.

        Writes through the view raise ValueError. Writes to the original
        grid remain visible through the view, so the owner must not mutate
        it while views are in use.
        """
        if self.is_frozen:
            return self
        new = TileGrid.__new__(TileGrid)
        new.tiles = self.tiles.view()
        new.tiles.flags.writeable = False
        new._passable = self._passable
        return new

    def to_rows(self) -> list[str]:
        return ["".join(TILE_NAMES[Tile(int(t))] for t in row) for row in self.tiles]

    def __eq__(self, other):
        if not isinstance(other, TileGrid):
            return NotImplemented
        return np.array_equal(self.tiles, other.tiles)

    def __repr__(self):
        return f"TileGrid({self.width}x{self.height})"


def render_board(grid: TileGrid, units=(), turn_label: str | None = None,
                 material: int | None = None, floor: int | None = None) -> str:
    """Render the floor as a text string.

    Args:
        grid: The tile grid.
        units: Iterable of units (anything with pos and display_char).
            Player units are uppercase, AI units lowercase.
        turn_label: Optional header line such as "Player Turn".
        material: Optional player material count.
        floor: Optional floor number.
    """
    lines = []

    header = []
    if floor is not None:
        header.append(f"Floor {floor}")
    if turn_label is not None:
        header.append(turn_label)
    if material is not None:
        header.append(f"Material: {material}")
    if header:
        lines.append("  ".join(header))
        lines.append("")

    occupied = {u.pos: u.display_char for u in units}
    labels = COL_LABELS[:grid.width]

    lines.append("    " + " ".join(labels))
    for y in range(grid.height):
        row_str = f"{y + 1:2d}  "
        cells = []
        for x in range(grid.width):
            if (x, y) in occupied:
                cells.append(occupied[(x, y)])
            else:
                cells.append(TILE_NAMES[grid.get_unchecked((x, y))])
        row_str += " ".join(cells)
        lines.append(row_str.rstrip())
    lines.append("    " + " ".join(labels))

    return "\n".join(lines)
