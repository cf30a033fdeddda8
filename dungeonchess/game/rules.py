"""Legal move generation, move execution, and end-of-game checks.

Every unit captures by moving onto an enemy. There is no check: taking the
King is itself the win condition, so a King may step into danger. Floors are
won by bringing any player unit onto the stairs.
"""

from __future__ import annotations

from typing import Optional

from dungeonchess.game.board import MAX_RAY_LENGTH, Position
from dungeonchess.game.state import BoardState, Move, PieceType, Team, Unit

PAWN_DELTAS = [(0, -1), (0, 1), (-1, 0), (1, 0)]
KING_DELTAS = [(0, -1), (0, 1), (-1, 0), (1, 0),
               (-1, -1), (1, 1), (-1, 1), (1, -1)]
KNIGHT_DELTAS = [(-2, -1), (-1, -2), (1, -2), (2, -1),
                 (-2, 1), (-1, 2), (1, 2), (2, 1)]

DIAGONAL_DIRS = [(-1, -1), (1, -1), (-1, 1), (1, 1)]
CARDINAL_DIRS = [(0, -1), (0, 1), (-1, 0), (1, 0)]


def is_legal(state: BoardState, move: Move) -> bool:
    """Check that a unit stands on from_pos and may land on to_pos.

    The destination must be passable and either empty or held by an enemy.
    """
    mover = state.unit_at(move.from_pos)
    if mover is None:
        return False
    if not state.grid.is_passable(move.to_pos):
        return False
    target = state.unit_at(move.to_pos)
    return target is None or mover.is_enemy(target)


def _gen_step_moves(state: BoardState, pos: Position,
                    deltas: list[tuple[int, int]], moves: list[Move]):
    """One square along each delta (Pawn, Knight, King)."""
    x, y = pos
    for dx, dy in deltas:
        move = Move(pos, (x + dx, y + dy))
        if is_legal(state, move):
            moves.append(move)


def _gen_slide_moves(state: BoardState, pos: Position,
                     directions: list[tuple[int, int]], moves: list[Move]):
    """Walk each ray until blocked (Bishop, Rook).

    A ray ends on the first illegal square, or right after a capture.
    """
    x, y = pos
    for dx, dy in directions:
        for dist in range(1, MAX_RAY_LENGTH + 1):
            move = Move(pos, (x + dx * dist, y + dy * dist))
            if not is_legal(state, move):
                break
            moves.append(move)
            if state.unit_at(move.to_pos) is not None:
                break


def _gen_moves_as(state: BoardState, pos: Position, piece_type: PieceType,
                  moves: list[Move]):
    """Generate moves from pos following piece_type's movement rule."""
    if piece_type == PieceType.PAWN:
        _gen_step_moves(state, pos, PAWN_DELTAS, moves)
    elif piece_type == PieceType.KNIGHT:
        _gen_step_moves(state, pos, KNIGHT_DELTAS, moves)
    elif piece_type == PieceType.KING:
        _gen_step_moves(state, pos, KING_DELTAS, moves)
    elif piece_type == PieceType.BISHOP:
        _gen_slide_moves(state, pos, DIAGONAL_DIRS, moves)
    elif piece_type == PieceType.ROOK:
        _gen_slide_moves(state, pos, CARDINAL_DIRS, moves)
    elif piece_type == PieceType.QUEEN:
        _gen_slide_moves(state, pos, DIAGONAL_DIRS, moves)
        _gen_slide_moves(state, pos, CARDINAL_DIRS, moves)
    elif piece_type == PieceType.ARCHBISHOP:
        _gen_slide_moves(state, pos, DIAGONAL_DIRS, moves)
        _gen_step_moves(state, pos, KNIGHT_DELTAS, moves)
    else:
        raise ValueError(f"No movement rule for {piece_type!r}")


def generate_unit_moves(state: BoardState, unit: Unit) -> list[Move]:
    """Legal moves for one unit. A Jester moves as its disguise."""
    moves: list[Move] = []
    _gen_moves_as(state, unit.pos, unit.move_type, moves)
    return moves


def generate_legal_moves(state: BoardState, team: Team) -> list[Move]:
    """Legal moves for every unit of team, in unit order."""
    moves: list[Move] = []
    for unit in state.units:
        if unit.team == team:
            _gen_moves_as(state, unit.pos, unit.move_type, moves)
    return moves


def has_legal_move(state: BoardState, team: Team) -> bool:
    """Whether team can move at all. Stops at the first unit with a move."""
    for unit in state.units:
        if unit.team != team:
            continue
        moves: list[Move] = []
        _gen_moves_as(state, unit.pos, unit.move_type, moves)
        if moves:
            return True
    return False


def is_terminal(state: BoardState) -> bool:
    """True when either team has no legal move."""
    return not has_legal_move(state, Team.PLAYER) or not has_legal_move(state, Team.AI)


def is_on_win_tile(state: BoardState) -> bool:
    """True when a player unit stands on the stairs."""
    if state.stairs is None:
        return False
    return any(u.team == Team.PLAYER and u.pos == state.stairs for u in state.units)


def apply_move(state: BoardState, move: Move) -> Optional[Unit]:
    """Apply a move in place and return the captured unit, if any.

    Only pass moves produced by the generators above; a move whose source
    square is empty raises ValueError. Clone the state first if the original
    must survive.
    """
    mover = state.unit_at(move.from_pos)
    if mover is None:
        raise ValueError(f"No unit at {move.from_pos} to move")

    captured = None
    index = state.unit_index(move.to_pos)
    if index is not None and state.units[index] is not mover:
        captured = state.units[index]
        # Swap-remove: the last unit takes the captured unit's slot
        last = state.units.pop()
        if index < len(state.units):
            state.units[index] = last

    mover.pos = move.to_pos

    if captured is not None and mover.piece_type == PieceType.JESTER:
        mover.adopt_disguise(captured)

    return captured
