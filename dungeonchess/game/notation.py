"""Move notation for the text front end.

Move formats:
  Pd3-d4     Move the Pawn on d3 to d4
  Ra1xa7     Capture: Rook on a1 takes the unit on a7

Columns are letters (a = x 0), rows are 1-based numbers (1 = y 0), so a
square reads the way the board is printed by render_board.
"""

from __future__ import annotations

import re

from dungeonchess.game.board import COL_LABELS, Position
from dungeonchess.game.state import BoardState, Move

_SQUARE_RE = re.compile(r"^([a-t])([1-9][0-9]?)$")
_MOVE_RE = re.compile(r"^([PNKBJRQA])?([a-t][1-9][0-9]?)([-x])([a-t][1-9][0-9]?)$")


def square_name(pos: Position) -> str:
    """Convert (x, y) to a square name like 'c4'."""
    x, y = pos
    return f"{COL_LABELS[x]}{y + 1}"


def parse_square(sq: str) -> Position:
    """Convert a square name like 'c4' to (x, y)."""
    m = _SQUARE_RE.match(sq.strip())
    if not m:
        raise ValueError(f"Invalid square: {sq!r}")
    return (COL_LABELS.index(m.group(1)), int(m.group(2)) - 1)


def move_to_notation(state: BoardState, move: Move) -> str:
    """Convert a move to notation.

    Args:
        state: The board state BEFORE the move is applied.
        move: The move to convert.
    """
    unit = state.unit_at(move.from_pos)
    piece_char = unit.char if unit else "?"
    sep = "x" if state.unit_at(move.to_pos) is not None else "-"
    return f"{piece_char}{square_name(move.from_pos)}{sep}{square_name(move.to_pos)}"


def notation_to_move(text: str) -> Move:
    """Parse notation into a Move.

    The piece letter is optional and not checked against the board; the
    capture marker is accepted either way.

    Raises:
        ValueError: If the notation is invalid.
    """
    m = _MOVE_RE.match(text.strip())
    if not m:
        raise ValueError(f"Invalid move notation: {text!r}")
    return Move(parse_square(m.group(2)), parse_square(m.group(4)))
