"""Procedural floor generation: a start room, attached rooms, and stairs.

An attempt carves a 5x5 start room, grows rooms off the floor that is
already there, and puts the stairs on a floor tile far from the start. An
attempt that comes up short is thrown away and the whole floor is
regenerated from an empty grid, so callers only ever see complete floors.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Iterator, Optional

import numpy as np

from dungeonchess.game.board import Position, Tile, TileGrid, dist2

logger = logging.getLogger("dungeonchess.dungeon")

START_ROOM_SIZE = 5
TARGET_ROOMS = 5
ROOM_ATTEMPTS = 100
EDGE_SAMPLES = 100
STAIRS_SAMPLES = 100
# Room sides are drawn from randrange(MIN, MAX), so 2..7 inclusive
MIN_ROOM_SIDE = 2
MAX_ROOM_SIDE = 8

# A tile is a room edge when exactly one of these is floor
_EDGE_DELTAS = [(0, 0), (-1, 0), (1, 0), (0, -1), (0, 1)]


class GenerationError(RuntimeError):
    """Raised when a capped generator runs out of attempts."""


@dataclass(frozen=True)
class Room:
    x: int
    y: int
    w: int
    h: int

    def tiles(self) -> Iterator[Position]:
        for y in range(self.y, self.y + self.h):
            for x in range(self.x, self.x + self.w):
                yield (x, y)

    def overlaps(self, other: Room) -> bool:
        return (self.x < other.x + other.w and other.x < self.x + self.w
                and self.y < other.y + other.h and other.y < self.y + self.h)


@dataclass
class GenerationResult:
    grid: TileGrid
    start_pos: Position
    start_room: Room
    rooms: list[Room] = field(default_factory=list)
    attempts: int = 1


class DungeonGenerator:
    """Generates floors from a seeded random source.

    Args:
        rng: Random source. The same seed always yields the same floor.
        width: Grid width, at least START_ROOM_SIZE.
        height: Grid height, at least START_ROOM_SIZE.
        max_attempts: Give up with GenerationError after this many failed
            attempts. None retries forever, which is safe for the small,
            roomy grids the game uses but can spin on cramped ones.
    """

    def __init__(self, rng: random.Random, width: int, height: int,
                 max_attempts: Optional[int] = None):
        if width < START_ROOM_SIZE or height < START_ROOM_SIZE:
            raise ValueError(
                f"Grid {width}x{height} cannot hold the "
                f"{START_ROOM_SIZE}x{START_ROOM_SIZE} start room"
            )
        if max_attempts is not None and max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {max_attempts}")
        self.rng = rng
        self.grid = TileGrid(width, height)
        self.max_attempts = max_attempts
        self.rooms: list[Room] = []
        self.start_room: Optional[Room] = None

    def generate(self) -> GenerationResult:
        """Generate floors until one meets the room and stairs targets."""
        attempt = 0
        while True:
            attempt += 1
            self.grid.fill(Tile.EMPTY)
            self.rooms = []
            start_pos = self._try_generate()
            if start_pos is not None:
                logger.info(f"Generated {self.grid.width}x{self.grid.height} floor "
                            f"in {attempt} attempt(s)")
                return GenerationResult(
                    grid=self.grid.copy(),
                    start_pos=start_pos,
                    start_room=self.start_room,
                    rooms=list(self.rooms),
                    attempts=attempt,
                )
            if self.max_attempts is not None and attempt >= self.max_attempts:
                raise GenerationError(
                    f"No valid {self.grid.width}x{self.grid.height} floor "
                    f"after {attempt} attempts"
                )

    def _try_generate(self) -> Optional[Position]:
        """One attempt. Returns the start position, or None on failure."""
        grid = self.grid
        top_left = (self.rng.randint(0, grid.width - START_ROOM_SIZE),
                    self.rng.randint(0, grid.height - START_ROOM_SIZE))
        self.start_room = Room(top_left[0], top_left[1], START_ROOM_SIZE, START_ROOM_SIZE)
        assert self._can_place_room(self.start_room)
        self._make_room(self.start_room)

        for _ in range(ROOM_ATTEMPTS):
            edge = self._find_room_edge()
            if edge is not None:
                room = Room(edge[0], edge[1],
                            self.rng.randrange(MIN_ROOM_SIDE, MAX_ROOM_SIDE),
                            self.rng.randrange(MIN_ROOM_SIDE, MAX_ROOM_SIDE))
                if self._can_place_room(room):
                    self._make_room(room)
                    self.rooms.append(room)
            if len(self.rooms) >= TARGET_ROOMS:
                break

        if len(self.rooms) < TARGET_ROOMS:
            logger.debug(f"Attempt failed: only {len(self.rooms)} rooms carved")
            return None

        candidates = []
        for _ in range(STAIRS_SAMPLES):
            pos = self._random_tile_pos()
            if grid.get(pos) == Tile.FLOOR:
                candidates.append(pos)

        if not candidates:
            logger.debug("Attempt failed: no floor tile found for the stairs")
            return None

        # Stable sort, so the later of two equally distant samples wins
        candidates.sort(key=lambda p: dist2(p, top_left))
        grid.set(candidates[-1], Tile.STAIRS)

        offset = START_ROOM_SIZE // 2
        return (top_left[0] + offset, top_left[1] + offset)

    def _random_tile_pos(self) -> Position:
        return (self.rng.randrange(self.grid.width), self.rng.randrange(self.grid.height))

    def _find_room_edge(self) -> Optional[Position]:
        """Sample for a tile touching existing floor at exactly one point."""
        for _ in range(EDGE_SAMPLES):
            x, y = self._random_tile_pos()
            floor_count = sum(1 for dx, dy in _EDGE_DELTAS
                              if self.grid.get((x + dx, y + dy)) == Tile.FLOOR)
            if floor_count == 1:
                return (x, y)
        return None

    def _can_place_room(self, room: Room) -> bool:
        """Room lies inside the grid and covers only empty tiles."""
        if room.x < 0 or room.y < 0:
            return False
        if room.x + room.w > self.grid.width or room.y + room.h > self.grid.height:
            return False
        footprint = self.grid.tiles[room.y:room.y + room.h, room.x:room.x + room.w]
        return bool(np.all(footprint == Tile.EMPTY))

    def _make_room(self, room: Room):
        for pos in room.tiles():
            self.grid.set(pos, Tile.FLOOR)
