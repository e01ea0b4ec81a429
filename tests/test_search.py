import math
import random

import pytest

import betaentropy.agent.search as search_module
from betaentropy.agent.evaluator import evaluate_board
from betaentropy.agent.search import (
    MoverSearch,
    choose_depth_ceiling,
    likely_next_color,
    ordered_placements,
    ordered_slides,
)
from betaentropy.agent.transposition import TranspositionCache
from betaentropy.game.board import CELL_COUNT, Board, GameState
from betaentropy.game.moves import apply_action, count_slides, is_legal_slide, mover_actions
from betaentropy.game.scoring import score
from betaentropy.game.types import PASS, Color, Role, Slide

R, G, B = Color.RED, Color.GREEN, Color.BLUE


def board_with(cells: dict[int, Color]) -> Board:
    return Board(cells.get(i) for i in range(CELL_COUNT))


def random_board(seed: int, filled: int) -> Board:
    rng = random.Random(seed)
    bag = [c for c in Color for _ in range(7)]
    rng.shuffle(bag)
    spots = rng.sample(range(CELL_COUNT), filled)
    return board_with(dict(zip(spots, bag)))


def mover_state(board: Board, color: Color = G) -> GameState:
    return GameState(board, color, Role.MOVER)


def three_in_a_row_setup() -> GameState:
    # R R in the top row; the R on e3 can slide straight up to a3
    return mover_state(board_with({0: R, 1: R, 30: R}), G)


def assert_legal(state: GameState, action) -> None:
    assert action is PASS or is_legal_slide(state.board, action)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_likely_next_color(self):
        assert likely_next_color(Board()) is R
        seven_reds = board_with({i: R for i in range(7)})
        assert likely_next_color(seven_reds) is G
        assert likely_next_color(seven_reds.with_cell(10, G)) is B

    def test_depth_ceiling_wide_board(self):
        # seven tokens on the diagonal never block each other: 84 slides * 42 empties
        board = board_with({i * 8: color for i, color in enumerate(Color)})
        assert choose_depth_ceiling(board) == 2

    def test_depth_ceiling_medium_board(self):
        # 24 slides * 47 empties
        assert choose_depth_ceiling(board_with({0: R, 48: G})) == 3

    def test_depth_ceiling_sparse_board(self):
        # 12 slides * 48 empties
        assert choose_depth_ceiling(board_with({24: R})) == 4

    def test_depth_ceiling_endgame(self):
        board = Board([R] * 48 + [None])
        assert choose_depth_ceiling(board) == 4
        assert choose_depth_ceiling(board, max_depth=1) == 1

    def test_ordered_slides(self):
        board = random_board(4, 12)
        children = ordered_slides(board)
        assert len(children) == count_slides(board) + 1
        deltas = [delta for _, delta, _ in children]
        assert deltas == sorted(deltas, reverse=True)
        assert any(action is PASS for action, _, _ in children)
        for action, delta, child in children:
            assert score(child) - score(board) == delta

    def test_pass_sorts_ahead_of_equal_slides(self):
        children = ordered_slides(board_with({24: R}))
        assert children[0][0] is PASS

    def test_ordered_placements_cover_every_empty_cell(self):
        board = random_board(5, 10)
        ranked = ordered_placements(board, R)
        assert sorted(cell for cell, _, _ in ranked) == board.empty_cells()
        for cell, delta, child in ranked:
            assert child.get(cell) is R
            assert score(child) - score(board) == delta


# ---------------------------------------------------------------------------
# Fixed-depth search
# ---------------------------------------------------------------------------

class TestSearchDepth:
    def test_completes_three_in_a_row(self):
        state = three_in_a_row_setup()
        _, action = MoverSearch().search_depth(state, 1)
        assert action == Slide(30, 2)

    def test_two_ply_still_completes_three_in_a_row(self):
        state = three_in_a_row_setup()
        _, action = MoverSearch().search_depth(state, 2)
        assert action == Slide(30, 2)

    def test_depth_one_takes_the_best_immediate_gain(self):
        searcher = MoverSearch()
        tried = 0
        for seed in range(60):
            state = mover_state(random_board(seed, 6 + seed % 25), list(Color)[seed % 7])
            gains = {action: delta for action, delta, _ in ordered_slides(state.board)}
            best_gain = max(gains.values())
            if best_gain <= 0:
                continue
            tried += 1
            _, action = searcher.search_depth(state, 1)
            assert gains[action] == best_gain, (state.board.key(), action)
        assert tried >= 20

    def test_cache_does_not_change_the_result(self):
        state = mover_state(random_board(3, 8), B)
        searcher = MoverSearch()
        with_cache = searcher.search_depth(state, 2, TranspositionCache(5000))
        without_cache = searcher.search_depth(state, 2, TranspositionCache(0))
        tiny_cache = searcher.search_depth(state, 2, TranspositionCache(3))
        assert with_cache == without_cache
        assert tiny_cache == without_cache

    def test_reused_cache_hits(self):
        state = mover_state(random_board(6, 8), R)
        searcher = MoverSearch()
        cache = TranspositionCache(5000)
        first = searcher.search_depth(state, 2, cache)
        second = searcher.search_depth(state, 2, cache)
        assert first == second
        assert cache.hits > 0


def full_width_max(board: Board, upcoming: Color, depth: int) -> float:
    if depth == 0 or board.is_full:
        return evaluate_board(board, upcoming)
    return max(
        full_width_min(apply_action(board, action), upcoming, depth - 1)
        for action in mover_actions(board)
    )


def full_width_min(board: Board, color: Color, depth: int) -> float:
    if depth == 0 or board.is_full:
        return evaluate_board(board, color)
    values = []
    for cell in board.empty_cells():
        child = board.with_cell(cell, color)
        values.append(full_width_max(child, likely_next_color(child), depth - 1))
    return min(values)


class TestPruning:
    @pytest.mark.parametrize("seed, depth", [(21, 2), (22, 2), (23, 3), (24, 3)])
    def test_alpha_beta_matches_full_width_minimax(self, seed, depth):
        state = mover_state(random_board(seed, 40), list(Color)[seed % 7])
        expected = max(
            full_width_min(apply_action(state.board, action), state.announced_color, depth - 1)
            for action in mover_actions(state.board)
        )
        value, action = MoverSearch().search_depth(state, depth)
        assert value == pytest.approx(expected)
        child = apply_action(state.board, action)
        assert full_width_min(child, state.announced_color, depth - 1) == pytest.approx(expected)


# ---------------------------------------------------------------------------
# Iterative deepening
# ---------------------------------------------------------------------------

class AlwaysExpired:
    def __init__(self, seconds):
        pass

    def expired(self):
        return True

    def remaining(self):
        return math.inf


class TestIterativeDeepening:
    def test_full_board_passes(self):
        full = Board([R, G, B, Color.YELLOW, Color.PURPLE, Color.ORANGE, Color.CYAN] * 7)
        result = MoverSearch().search(mover_state(full))
        assert result.action is PASS

    def test_empty_board_passes(self):
        result = MoverSearch().search(mover_state(Board()))
        assert result.action is PASS

    def test_tiny_budget_returns_a_legal_action(self):
        state = mover_state(random_board(9, 20), R)
        result = MoverSearch(time_budget=0.001, safety_buffer=0.0).search(state)
        assert_legal(state, result.action)
        assert result.depth == 1
        assert result.nodes > 0

    def test_unbounded_search_reaches_the_ceiling(self):
        state = three_in_a_row_setup()
        result = MoverSearch(max_depth=2, time_budget=None).search(state)
        assert result.action == Slide(30, 2)
        assert result.depth == 2
        assert not result.timed_out

    def test_interrupted_depth_is_discarded(self, monkeypatch):
        state = mover_state(random_board(2, 10), G)
        expected = MoverSearch().search_depth(state, 1)
        monkeypatch.setattr(search_module, "Deadline", AlwaysExpired)
        result = MoverSearch(max_depth=3).search(state)
        assert result.timed_out
        assert result.depth == 1
        assert (result.value, result.action) == expected

    def test_legal_on_many_positions(self):
        for seed in range(5):
            state = mover_state(random_board(seed, 30), list(Color)[seed])
            result = MoverSearch(time_budget=0.3, safety_buffer=0.1).search(state)
            assert_legal(state, result.action)
            assert result.depth >= 1
