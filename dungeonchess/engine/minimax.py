"""Depth-limited minimax with alpha-beta pruning.

The player is the maximizing side and the AI the minimizing side, matching
the sign of evaluate(). Moves are searched in generation order with no
ordering heuristics, and every child works on a clone of its parent so
sibling branches never see each other's moves.

Leaf scores get a small depth-dependent nudge (10 - remaining depth for the
maximizer, its negation for the minimizer) so that among otherwise equal
lines the search prefers to reach decisive positions sooner.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from dungeonchess.engine.evaluation import evaluate
from dungeonchess.game.rules import apply_move, generate_legal_moves, is_terminal
from dungeonchess.game.state import BoardState, Move, Team

logger = logging.getLogger("dungeonchess.search")

DEFAULT_DEPTH = 5

Evaluator = Callable[[BoardState], float]


@dataclass
class SearchResult:
    """Outcome of one root search."""
    move: Optional[Move]
    score: float
    nodes: int = 0
    # (move, score) for each root move searched before any cutoff
    root_scores: list[tuple[Move, float]] = field(default_factory=list)


class MinimaxSearch:
    """Alpha-beta minimax over BoardState with a static evaluator."""

    def __init__(self, depth: int = DEFAULT_DEPTH,
                 evaluator: Optional[Evaluator] = None):
        if depth < 0:
            raise ValueError(f"Search depth must be >= 0, got {depth}")
        self.depth = depth
        self.evaluator = evaluator if evaluator is not None else evaluate
        self.nodes = 0

    def search(self, state: BoardState, team: Team = Team.AI) -> SearchResult:
        """Search for team's best move from state.

        The state is not modified. The move is None only when the search
        starts on a terminal state or with depth 0.
        """
        self.nodes = 0
        root_scores: list[tuple[Move, float]] = []
        start = time.perf_counter()
        move, score = self.minimax(state, self.depth, -math.inf, math.inf,
                                   team == Team.PLAYER, root_scores)
        elapsed = time.perf_counter() - start

        for m, s in root_scores:
            logger.debug(f"root {m.from_pos}->{m.to_pos}: {s:.2f}")
        logger.info(f"{team.name} search depth {self.depth}: "
                    f"{self.nodes} nodes in {elapsed:.2f}s, score {score:.2f}")
        return SearchResult(move, score, self.nodes, root_scores)

    def get_move(self, state: BoardState) -> Optional[Move]:
        """Best move for the AI, or None when it has no move."""
        return self.search(state, Team.AI).move

    def minimax(self, state: BoardState, depth: int, alpha: float, beta: float,
                maximizing: bool,
                root_scores: Optional[list[tuple[Move, float]]] = None,
                ) -> tuple[Optional[Move], float]:
        """Return (best move, score) for the side to move.

        Args:
            state: Position to search. Left unmodified.
            depth: Remaining plies.
            alpha: Best score the maximizer can already force.
            beta: Best score the minimizer can already force.
            maximizing: True when the player is to move, False for the AI.
            root_scores: If given, receives (move, score) for each child
                searched at this level before any cutoff.
        """
        self.nodes += 1

        if depth == 0 or is_terminal(state):
            nudge = 10.0 - depth if maximizing else depth - 10.0
            return None, self.evaluator(state) + nudge

        team = Team.PLAYER if maximizing else Team.AI
        moves = generate_legal_moves(state, team)
        best_move = moves[0]

        if maximizing:
            best = -math.inf
            for move in moves:
                child = state.clone()
                apply_move(child, move)
                _, score = self.minimax(child, depth - 1, alpha, beta, False)

                if score > best:
                    best = score
                    best_move = move
                if best >= beta:
                    break
                if best > alpha:
                    alpha = best
                if root_scores is not None:
                    root_scores.append((move, score))
        else:
            best = math.inf
            for move in moves:
                child = state.clone()
                apply_move(child, move)
                _, score = self.minimax(child, depth - 1, alpha, beta, True)

                if score < best:
                    best = score
                    best_move = move
                if best <= alpha:
                    break
                if best < beta:
                    beta = best
                if root_scores is not None:
                    root_scores.append((move, score))

        return best_move, best


def minimax(state: BoardState, depth: int, alpha: float = -math.inf,
            beta: float = math.inf, maximizing: bool = False,
            evaluator: Optional[Evaluator] = None) -> tuple[Optional[Move], float]:
    """Run one minimax search and return (best move, score)."""
    return MinimaxSearch(depth, evaluator).minimax(state, depth, alpha, beta, maximizing)
