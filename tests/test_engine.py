"""Tests for position evaluation and the minimax search."""

import math

import pytest

from dungeonchess.engine.evaluation import (
    KING_BIAS, WIN_TILE_BONUS, evaluate, evaluate_breakdown,
)
from dungeonchess.engine.minimax import MinimaxSearch, minimax
from dungeonchess.game.rules import apply_move, generate_legal_moves, is_terminal
from dungeonchess.game.state import Move, PieceType, Team

from conftest import make_state, open_grid


def plain_minimax(state, depth, maximizing):
    """Minimax without pruning, for checking the alpha-beta search."""
    if depth == 0 or is_terminal(state):
        nudge = 10.0 - depth if maximizing else depth - 10.0
        return None, evaluate(state) + nudge
    team = Team.PLAYER if maximizing else Team.AI
    best_move, best = None, -math.inf if maximizing else math.inf
    for move in generate_legal_moves(state, team):
        child = state.clone()
        apply_move(child, move)
        _, score = plain_minimax(child, depth - 1, not maximizing)
        if (maximizing and score > best) or (not maximizing and score < best):
            best, best_move = score, move
    return best_move, best


@pytest.fixture
def skirmish():
    return make_state(
        open_grid(stairs=(6, 6)),
        (1, 1, PieceType.KING, Team.PLAYER),
        (2, 5, PieceType.BISHOP, Team.PLAYER),
        (5, 1, PieceType.ROOK, Team.AI),
        (4, 4, PieceType.KNIGHT, Team.AI),
    )


class TestEvaluation:
    def test_lone_player_king_scores_zero(self):
        state = make_state(open_grid(), (3, 3, PieceType.KING, Team.PLAYER))
        assert evaluate(state) == 0.0

    def test_king_bias(self, example_state):
        assert evaluate_breakdown(example_state).bias == KING_BIAS == -100000.0

    def test_material(self, example_state):
        # Pawn 10 against two Knights
        assert evaluate_breakdown(example_state).material == 10.0 - 60.0

    def test_ai_unit_lowers_score(self):
        state = make_state(open_grid(), (0, 0, PieceType.ROOK, Team.PLAYER))
        before = evaluate(state)
        state = make_state(open_grid(), (0, 0, PieceType.ROOK, Team.PLAYER),
                           (5, 5, PieceType.PAWN, Team.AI))
        assert evaluate(state) == before - 10.0

    def test_player_unit_raises_score(self, example_state):
        before = evaluate(example_state)
        grid = example_state.grid
        richer = make_state(grid, (3, 2, PieceType.PAWN, Team.PLAYER),
                            (2, 3, PieceType.KNIGHT, Team.AI),
                            (3, 3, PieceType.KNIGHT, Team.AI),
                            (0, 0, PieceType.ROOK, Team.PLAYER))
        assert evaluate(richer) > before

    def test_stairs_pull(self):
        state = make_state(open_grid(stairs=(6, 6)), (6, 2, PieceType.PAWN, Team.PLAYER))
        assert evaluate_breakdown(state).stairs == pytest.approx(5.0)

    def test_stairs_pull_caps_at_distance_one(self):
        state = make_state(open_grid(stairs=(6, 6)), (6, 6, PieceType.PAWN, Team.PLAYER))
        breakdown = evaluate_breakdown(state)
        assert breakdown.stairs == pytest.approx(20.0)
        assert breakdown.win_bonus == WIN_TILE_BONUS

    def test_king_pressure(self):
        state = make_state(open_grid(), (0, 0, PieceType.KING, Team.PLAYER),
                           (3, 4, PieceType.PAWN, Team.AI))
        breakdown = evaluate_breakdown(state)
        assert breakdown.king_pressure == pytest.approx(5.0)
        assert breakdown.score == pytest.approx(-5.0)
        chasing = evaluate_breakdown(state, chase_player_king=True)
        assert chasing.king_pressure == pytest.approx(-5.0)

    def test_no_player_king_no_pressure(self, example_state):
        assert evaluate_breakdown(example_state).king_pressure == 0.0

    def test_score_is_sum_of_terms(self, skirmish):
        b = evaluate_breakdown(skirmish)
        assert b.score == pytest.approx(
            b.bias + b.material + b.stairs + b.king_pressure + b.win_bonus)


class TestMinimax:
    def test_negative_depth_rejected(self):
        with pytest.raises(ValueError):
            MinimaxSearch(depth=-1)

    def test_depth_zero_nudge(self, example_state):
        search = MinimaxSearch(depth=0)
        base = evaluate(example_state)
        assert search.minimax(example_state, 0, -math.inf, math.inf, False) == (None, base - 10.0)
        assert search.minimax(example_state, 0, -math.inf, math.inf, True) == (None, base + 10.0)

    def test_terminal_root_has_no_move(self):
        state = make_state(open_grid(), (3, 3, PieceType.KING, Team.PLAYER))
        result = MinimaxSearch(depth=3).search(state, Team.AI)
        assert result.move is None

    @pytest.mark.parametrize("depth", [1, 2])
    def test_ai_takes_player_king(self, depth):
        state = make_state(
            open_grid(),
            (0, 4, PieceType.KING, Team.PLAYER),
            (6, 6, PieceType.PAWN, Team.PLAYER),
            (0, 0, PieceType.ROOK, Team.AI),
        )
        assert MinimaxSearch(depth).get_move(state) == Move((0, 0), (0, 4))

    @pytest.mark.parametrize("depth", [1, 2])
    def test_player_takes_queen(self, depth):
        state = make_state(
            open_grid(),
            (1, 2, PieceType.KNIGHT, Team.PLAYER),
            (3, 3, PieceType.QUEEN, Team.AI),
            (6, 6, PieceType.PAWN, Team.AI),
        )
        result = MinimaxSearch(depth).search(state, Team.PLAYER)
        assert result.move == Move((1, 2), (3, 3))

    def test_search_leaves_state_untouched(self, skirmish):
        before = skirmish.get_position_key()
        MinimaxSearch(depth=2).search(skirmish)
        assert skirmish.get_position_key() == before

    def test_deterministic(self, skirmish):
        a = MinimaxSearch(depth=2).search(skirmish)
        b = MinimaxSearch(depth=2).search(skirmish)
        assert (a.move, a.score, a.nodes) == (b.move, b.score, b.nodes)

    @pytest.mark.parametrize("maximizing", [True, False])
    def test_matches_unpruned_minimax(self, skirmish, maximizing):
        expected = plain_minimax(skirmish, 3, maximizing)
        assert minimax(skirmish, 3, maximizing=maximizing) == expected

    def test_pruning_visits_fewer_nodes(self, skirmish):
        search = MinimaxSearch(depth=3)
        search.search(skirmish)
        full = 0
        frontier = [(skirmish, 3, False)]
        while frontier:
            state, depth, maximizing = frontier.pop()
            full += 1
            if depth == 0 or is_terminal(state):
                continue
            team = Team.PLAYER if maximizing else Team.AI
            for move in generate_legal_moves(state, team):
                child = state.clone()
                apply_move(child, move)
                frontier.append((child, depth - 1, not maximizing))
        assert 0 < search.nodes < full

    def test_root_scores(self, example_state):
        result = MinimaxSearch(depth=2).search(example_state)
        assert result.nodes > 0
        assert result.root_scores
        assert result.root_scores[0][0] == generate_legal_moves(example_state, Team.AI)[0]
        assert result.score == min(score for _, score in result.root_scores)

    def test_ties_keep_first_move(self, example_state):
        search = MinimaxSearch(depth=1, evaluator=lambda state: 0.0)
        assert search.get_move(example_state) == generate_legal_moves(example_state, Team.AI)[0]
