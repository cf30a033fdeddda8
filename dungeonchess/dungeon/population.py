"""Placing the player's roster and a floor's enemies onto a generated map."""

from __future__ import annotations

import random
from typing import Iterable, Optional

from dungeonchess.game.board import Position, Tile, TileGrid, dist2
from dungeonchess.game.state import BUY_PRICE, PieceType, Team, Unit

LAST_FLOOR = 12

# Enemies spawn further than this from the start tile
SPAWN_CLEARANCE = 4

# (deepest floor, kinds the AI may buy there); later floors use the last list
ENEMY_TIERS = [
    (2, [PieceType.PAWN]),
    (4, [PieceType.PAWN, PieceType.KNIGHT, PieceType.BISHOP]),
    (6, [PieceType.PAWN, PieceType.KNIGHT, PieceType.BISHOP, PieceType.ARCHBISHOP]),
    (None, [PieceType.PAWN, PieceType.KNIGHT, PieceType.BISHOP,
            PieceType.JESTER, PieceType.ROOK]),
]


def enemy_budget(floor: int) -> int:
    return 1 + 2 * floor


def enemy_kinds(floor: int) -> list[PieceType]:
    for deepest, kinds in ENEMY_TIERS:
        if deepest is None or floor <= deepest:
            return kinds


def enemy_roster(floor: int, rng: random.Random) -> list[PieceType]:
    """Spend the floor's budget on random affordable enemy kinds."""
    kinds = enemy_kinds(floor)
    budget = enemy_budget(floor)
    roster = []
    while budget > 0:
        affordable = [k for k in kinds if BUY_PRICE[k] <= budget]
        kind = affordable[rng.randrange(len(affordable))]
        budget -= BUY_PRICE[kind]
        roster.append(kind)
    return roster


def random_empty_tile(grid: TileGrid, units: list[Unit], rng: random.Random,
                      samples: int = 200) -> Optional[Position]:
    """Sample for a floor tile nobody stands on."""
    occupied = {u.pos for u in units}
    for _ in range(samples):
        pos = (rng.randrange(grid.width), rng.randrange(grid.height))
        if grid.get(pos) == Tile.FLOOR and pos not in occupied:
            return pos
    return None


def random_tile_away_from(grid: TileGrid, units: list[Unit], rng: random.Random,
                          origin: Position, tries: int = 100) -> Optional[Position]:
    for _ in range(tries):
        pos = random_empty_tile(grid, units, rng)
        if pos is not None and dist2(pos, origin) > SPAWN_CLEARANCE ** 2:
            return pos
    return None


def populate_floor(grid: TileGrid, start_pos: Position,
                   roster: Iterable[tuple[PieceType, Position]], floor: int,
                   rng: random.Random, last_floor: int = LAST_FLOOR) -> list[Unit]:
    """Create the units for a new floor.

    Player units go to start_pos plus their roster offset. Enemies are
    spent from the floor's budget and spawned away from the start. On the
    last floor an AI King takes the place of the stairs, turning that tile
    back into floor. Modifies grid in that case.

    Returns:
        The new unit list, player units first.
    """
    units = []
    for piece_type, (dx, dy) in roster:
        units.append(Unit((start_pos[0] + dx, start_pos[1] + dy), piece_type, Team.PLAYER))

    enemies = enemy_roster(floor, rng)
    if floor == last_floor:
        enemies.append(PieceType.KING)

    while enemies:
        kind = enemies.pop()
        if kind == PieceType.KING:
            stairs = grid.find_tile(Tile.STAIRS)
            if stairs is not None:
                units.append(Unit(stairs, kind, Team.AI))
                grid.set(stairs, Tile.FLOOR)
        else:
            pos = random_tile_away_from(grid, units, rng, start_pos)
            if pos is not None:
                units.append(Unit(pos, kind, Team.AI))

    return units
