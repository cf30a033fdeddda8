"""Dungeon chess game core: tile grid, units, board state, rules, notation."""

from dungeonchess.game.board import Tile, TileGrid, render_board, dist, dist2
from dungeonchess.game.state import BoardState, Move, PieceType, Team, Unit
from dungeonchess.game.rules import (
    generate_legal_moves, generate_unit_moves, is_legal, apply_move,
    is_terminal, is_on_win_tile,
)
from dungeonchess.game.notation import move_to_notation, notation_to_move

__all__ = [
    "Tile", "TileGrid", "render_board", "dist", "dist2",
    "BoardState", "Move", "PieceType", "Team", "Unit",
    "generate_legal_moves", "generate_unit_moves", "is_legal", "apply_move",
    "is_terminal", "is_on_win_tile",
    "move_to_notation", "notation_to_move",
]
