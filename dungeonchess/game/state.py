"""Units, moves, and the board state searched by the AI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Optional

from dungeonchess.game.board import Position, Tile, TileGrid


class Team(IntEnum):
    PLAYER = 0
    AI = 1

    @property
    def opponent(self) -> Team:
        return Team(1 - self)


class PieceType(IntEnum):
    PAWN = 0
    KNIGHT = 1
    KING = 2
    BISHOP = 3
    JESTER = 4
    ROOK = 5
    QUEEN = 6
    ARCHBISHOP = 7


# Map character codes to PieceType
PIECE_CHARS = {
    "P": PieceType.PAWN,
    "N": PieceType.KNIGHT,
    "K": PieceType.KING,
    "B": PieceType.BISHOP,
    "J": PieceType.JESTER,
    "R": PieceType.ROOK,
    "Q": PieceType.QUEEN,
    "A": PieceType.ARCHBISHOP,
}
PIECE_NAMES = {v: k for k, v in PIECE_CHARS.items()}

# Shop price per piece type (also the refund when selling)
BUY_PRICE = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.JESTER: 4,
    PieceType.ROOK: 6,
    PieceType.ARCHBISHOP: 7,
    PieceType.QUEEN: 9,
    PieceType.KING: 100,
}

# Material earned for capturing an AI unit
MATERIAL_REWARD = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.JESTER: 4,
    PieceType.ROOK: 6,
    PieceType.ARCHBISHOP: 6,
    PieceType.QUEEN: 6,
    PieceType.KING: 100,
}

PIECE_DESCRIPTIONS = {
    PieceType.PAWN: "Moves one square in any direction, but not diagonally.",
    PieceType.KNIGHT: "Moves in L shape, can jump over pieces.",
    PieceType.BISHOP: "Moves any amount diagonally.",
    PieceType.JESTER: "Like a Rook, until it takes move style from captured piece.",
    PieceType.ROOK: "Moves any amount up, down, left or right.",
    PieceType.QUEEN: "Moves like a Bishop and a Rook combined.",
    PieceType.KING: "Moves one square in any direction.",
    PieceType.ARCHBISHOP: "Moves like a Knight and a Bishop combined.",
}


@dataclass
class Unit:
    pos: Position
    piece_type: PieceType
    team: Team
    # Movement rule borrowed by a Jester; ignored for every other kind
    disguise: PieceType = PieceType.ROOK

    def __post_init__(self):
        if self.disguise == PieceType.JESTER:
            raise ValueError("A Jester cannot be disguised as a Jester")

    @property
    def char(self) -> str:
        return PIECE_NAMES[self.piece_type]

    @property
    def display_char(self) -> str:
        # Lowercase for the AI, uppercase for the player
        return self.char if self.team == Team.PLAYER else self.char.lower()

    @property
    def move_type(self) -> PieceType:
        """The piece type whose movement rule this unit follows."""
        if self.piece_type == PieceType.JESTER:
            return self.disguise
        return self.piece_type

    def is_enemy(self, other: Unit) -> bool:
        return self.team != other.team

    def adopt_disguise(self, captured: Unit):
        """Take the movement rule of a captured unit (Jester capture)."""
        if captured.piece_type == PieceType.JESTER:
            disguise = captured.disguise
        else:
            disguise = captured.piece_type
        if disguise == PieceType.JESTER:
            raise ValueError("A Jester cannot be disguised as a Jester")
        self.disguise = disguise

    def copy(self) -> Unit:
        return Unit(self.pos, self.piece_type, self.team, self.disguise)


@dataclass(frozen=True)
class Move:
    """Relocate the unit at from_pos to to_pos, capturing whatever is there."""
    from_pos: Position
    to_pos: Position


class BoardState:
    """Units on a floor, the floor's grid, and the stairs (win tile).

    The grid is held as a read-only view, so clones share it while each
    clone owns its own units.
    """

    def __init__(self, grid: TileGrid, units: Optional[Iterable[Unit]] = None,
                 stairs: Optional[Position] = None):
        self.grid: TileGrid = grid.frozen()
        self.units: list[Unit] = list(units) if units is not None else []
        self.stairs: Optional[Position] = stairs

    @classmethod
    def from_grid(cls, grid: TileGrid, units: Iterable[Unit]) -> BoardState:
        """Build a state, locating the stairs tile on the grid."""
        return cls(grid, units, grid.find_tile(Tile.STAIRS))

    def clone(self) -> BoardState:
        """Return a copy with its own units and the same grid."""
        new = BoardState.__new__(BoardState)
        new.grid = self.grid
        new.units = [u.copy() for u in self.units]
        new.stairs = self.stairs
        return new

    def unit_index(self, pos: Position) -> Optional[int]:
        for i, unit in enumerate(self.units):
            if unit.pos == pos:
                return i
        return None

    def unit_at(self, pos: Position) -> Optional[Unit]:
        """Unit standing on pos, or None. The unit is live, not a copy."""
        for unit in self.units:
            if unit.pos == pos:
                return unit
        return None

    def units_of(self, team: Team) -> list[Unit]:
        return [u for u in self.units if u.team == team]

    def find_king(self, team: Team) -> Optional[Unit]:
        for unit in self.units:
            if unit.team == team and unit.piece_type == PieceType.KING:
                return unit
        return None

    def get_position_key(self) -> tuple:
        """Hashable summary of unit placement for comparing states."""
        return tuple(sorted(
            (u.pos, int(u.piece_type), int(u.team), int(u.disguise))
            for u in self.units
        ))

    def __repr__(self):
        return (f"BoardState({self.grid.width}x{self.grid.height}, "
                f"{len(self.units)} units, stairs={self.stairs})")
