"""Tests for floor generation and population."""

import random
from collections import deque

import pytest

from dungeonchess.dungeon.generator import (
    START_ROOM_SIZE, TARGET_ROOMS, DungeonGenerator, GenerationError,
)
from dungeonchess.dungeon.population import (
    SPAWN_CLEARANCE, enemy_budget, enemy_kinds, enemy_roster, populate_floor,
)
from dungeonchess.game.board import Tile, dist2
from dungeonchess.game.state import BUY_PRICE, PieceType, Team

ROSTER = [
    (PieceType.KING, (0, 0)),
    (PieceType.KNIGHT, (1, 0)),
    (PieceType.BISHOP, (-1, 0)),
]


def reachable(grid, start):
    """Passable tiles reachable from start by orthogonal steps."""
    seen = {start}
    queue = deque([start])
    while queue:
        x, y = queue.popleft()
        for dx, dy in ((0, -1), (0, 1), (-1, 0), (1, 0)):
            pos = (x + dx, y + dy)
            if pos not in seen and grid.is_passable(pos):
                seen.add(pos)
                queue.append(pos)
    return seen


class TestDungeonGenerator:
    @pytest.mark.parametrize("seed", range(5))
    def test_floor_layout(self, seed):
        result = DungeonGenerator(random.Random(seed), 15, 15).generate()
        grid = result.grid

        assert grid.count(Tile.STAIRS) == 1
        assert grid.count(Tile.WALL) == 0
        assert len(result.rooms) == TARGET_ROOMS

        room = result.start_room
        assert (room.w, room.h) == (START_ROOM_SIZE, START_ROOM_SIZE)
        assert result.start_pos == (room.x + 2, room.y + 2)
        assert all(grid.is_passable(pos) for pos in room.tiles())

        for i, a in enumerate(result.rooms):
            assert all(grid.is_passable(pos) for pos in a.tiles())
            assert not a.overlaps(room)
            for b in result.rooms[i + 1:]:
                assert not a.overlaps(b)

    @pytest.mark.parametrize("seed", range(5))
    def test_stairs_reachable_from_start(self, seed):
        result = DungeonGenerator(random.Random(seed), 15, 15).generate()
        stairs = result.grid.find_tile(Tile.STAIRS)
        assert stairs in reachable(result.grid, result.start_pos)

    def test_same_seed_same_floor(self):
        a = DungeonGenerator(random.Random(42), 15, 15).generate()
        b = DungeonGenerator(random.Random(42), 15, 15).generate()
        assert a.grid == b.grid
        assert a.start_pos == b.start_pos

    def test_generate_again_gives_new_floor(self):
        gen = DungeonGenerator(random.Random(1), 15, 15)
        first = gen.generate()
        second = gen.generate()
        # Results own their grids
        assert first.grid is not second.grid
        assert first.grid.count(Tile.STAIRS) == 1

    def test_non_square_grid(self):
        result = DungeonGenerator(random.Random(7), 18, 11).generate()
        assert (result.grid.width, result.grid.height) == (18, 11)
        assert result.grid.count(Tile.STAIRS) == 1

    def test_too_small_grid_rejected(self):
        with pytest.raises(ValueError):
            DungeonGenerator(random.Random(0), START_ROOM_SIZE - 1, 10)

    def test_attempt_cap(self):
        # The start room fills a 5x5 grid, so no other room ever fits
        gen = DungeonGenerator(random.Random(0), 5, 5, max_attempts=3)
        with pytest.raises(GenerationError):
            gen.generate()

    def test_invalid_attempt_cap(self):
        with pytest.raises(ValueError):
            DungeonGenerator(random.Random(0), 10, 10, max_attempts=0)


class TestPopulation:
    def test_budget(self):
        assert enemy_budget(1) == 3
        assert enemy_budget(12) == 25

    def test_kinds_by_floor(self):
        assert enemy_kinds(1) == [PieceType.PAWN]
        assert PieceType.KNIGHT in enemy_kinds(3)
        assert PieceType.ARCHBISHOP in enemy_kinds(5)
        assert PieceType.ROOK in enemy_kinds(9)
        for floor in range(1, 13):
            assert PieceType.KING not in enemy_kinds(floor)

    @pytest.mark.parametrize("floor", [1, 3, 5, 8, 12])
    def test_roster_spends_whole_budget(self, floor):
        roster = enemy_roster(floor, random.Random(floor))
        assert sum(BUY_PRICE[k] for k in roster) == enemy_budget(floor)
        assert set(roster) <= set(enemy_kinds(floor))

    def test_first_floor_is_pawns(self):
        assert enemy_roster(1, random.Random(0)) == [PieceType.PAWN] * 3

    @pytest.mark.parametrize("floor", [1, 4, 7])
    def test_populate_floor(self, floor):
        rng = random.Random(floor)
        result = DungeonGenerator(rng, 15, 15).generate()
        units = populate_floor(result.grid, result.start_pos, ROSTER, floor, rng)

        player = [u for u in units if u.team == Team.PLAYER]
        assert units[:len(ROSTER)] == player
        sx, sy = result.start_pos
        assert [(u.piece_type, u.pos) for u in player] == [
            (kind, (sx + dx, sy + dy)) for kind, (dx, dy) in ROSTER
        ]

        positions = [u.pos for u in units]
        assert len(positions) == len(set(positions))
        for unit in units:
            if unit.team == Team.AI:
                assert result.grid.get(unit.pos) == Tile.FLOOR
                assert dist2(unit.pos, result.start_pos) > SPAWN_CLEARANCE ** 2
        assert result.grid.count(Tile.STAIRS) == 1

    def test_last_floor_king_guards_stairs(self):
        rng = random.Random(12)
        result = DungeonGenerator(rng, 15, 15).generate()
        stairs = result.grid.find_tile(Tile.STAIRS)
        units = populate_floor(result.grid, result.start_pos, ROSTER, 12, rng)

        kings = [u for u in units if u.team == Team.AI and u.piece_type == PieceType.KING]
        assert len(kings) == 1
        assert kings[0].pos == stairs
        assert result.grid.count(Tile.STAIRS) == 0
        assert result.grid.get(stairs) == Tile.FLOOR
