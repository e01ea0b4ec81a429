"""Mover search: iterative-deepening minimax with alpha-beta pruning.

Plies alternate between the mover (maximizing the evaluator) and the placer
(minimizing it). The first placer ply places the announced color. Deeper
placer plies do not know their color; they assume the color with the most
tokens left in the bag, which is the most likely draw.

The transposition cache holds static evaluations only, keyed by board and
upcoming color. It replaces a call to the evaluator and never cuts off a
subtree, so a search returns the same value with the cache on, off or tiny.

The wall-clock deadline is polled at every node. A node entered after the
deadline returns its static value and flags the iteration as incomplete;
the driver then keeps the move from the last depth that finished.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Optional

from betaentropy.agent.evaluator import DEFAULT_WEIGHTS, EvaluatorWeights, evaluate_board, line_potential
from betaentropy.agent.transposition import DEFAULT_CAPACITY, TranspositionCache
from betaentropy.game.board import LINES_THROUGH, Board, GameState
from betaentropy.game.moves import apply_slide, count_slides, crossing_lines, generate_slides
from betaentropy.game.scoring import LineScoreCache, lines_score, score
from betaentropy.game.types import PASS, Color, MoverAction

logger = logging.getLogger(__name__)

# Overall budget per mover decision and the part reserved for the caller
TIME_BUDGET = 2.0
SAFETY_BUFFER = 0.2
# Do not start a new depth with less than this much time left
MIN_TIME_FOR_NEXT_DEPTH = 0.5

MAX_DEPTH = 4

# Branching factor (slides x empty cells) thresholds for the depth ceiling
HIGH_BRANCHING = 2500
MEDIUM_BRANCHING = 600

INF = math.inf


class Deadline:
    """A wall-clock instant. `seconds=None` never expires."""

    def __init__(self, seconds: Optional[float]) -> None:
        self.at = None if seconds is None else time.perf_counter() + seconds

    def expired(self) -> bool:
        return self.at is not None and time.perf_counter() >= self.at

    def remaining(self) -> float:
        if self.at is None:
            return INF
        return self.at - time.perf_counter()


@dataclass
class SearchResult:
    action: MoverAction
    value: float
    depth: int  # deepest depth that completed
    nodes: int
    elapsed: float
    timed_out: bool = False


@dataclass
class _SearchContext:
    cache: TranspositionCache
    line_cache: LineScoreCache
    weights: EvaluatorWeights
    deadline: Deadline
    enforce_deadline: bool = True
    timed_out: bool = False
    nodes: int = 0

    def out_of_time(self) -> bool:
        if self.enforce_deadline and self.deadline.expired():
            self.timed_out = True
            return True
        return False

    def static_value(self, board: Board, upcoming: Optional[Color], score_value: int) -> float:
        key = board.key() + (upcoming.value if upcoming is not None else "?")
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        value = evaluate_board(board, upcoming, score_value, self.weights, self.line_cache)
        self.cache.put(key, value)
        return value


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def likely_next_color(board: Board) -> Color:
    """The color with the most tokens still in the bag (first one on ties)."""
    return max(Color, key=board.remaining)


def choose_depth_ceiling(board: Board, max_depth: int = MAX_DEPTH) -> int:
    """Shallow ceilings for wide early positions, deep ones for the endgame."""
    branching = count_slides(board) * max(1, board.empty_count)
    if branching >= HIGH_BRANCHING:
        ceiling = 2
    elif branching >= MEDIUM_BRANCHING:
        ceiling = 3
    else:
        ceiling = 4
    return max(1, min(ceiling, max_depth))


def ordered_slides(
    board: Board, line_cache: Optional[LineScoreCache] = None
) -> list[tuple[MoverAction, int, Board]]:
    """(action, score delta, child board) for every slide plus the pass,
    best immediate delta first. The pass sorts ahead of equal-delta slides.
    """
    children: list[tuple[MoverAction, int, Board]] = [(PASS, 0, board)]
    for slide in generate_slides(board):
        child = apply_slide(board, slide)
        line_ids = crossing_lines(slide)
        delta = lines_score(child, line_ids, line_cache) - lines_score(board, line_ids, line_cache)
        children.append((slide, delta, child))
    children.sort(key=lambda item: -item[1])
    return children


def placement_disruption(
    board: Board, child: Board, cell: int, line_cache: Optional[LineScoreCache] = None
) -> float:
    """Points and pattern potential lost in the two lines through `cell`."""
    line_ids = LINES_THROUGH[cell]
    lost_points = lines_score(board, line_ids, line_cache) - lines_score(child, line_ids, line_cache)
    lost_potential = sum(
        line_potential(board.line(i)) - line_potential(child.line(i)) for i in line_ids
    )
    return lost_points + lost_potential


def ordered_placements(
    board: Board, color: Color, line_cache: Optional[LineScoreCache] = None
) -> list[tuple[int, int, Board]]:
    """(cell, score delta, child board) for every empty cell, most disruptive first."""
    ranked: list[tuple[float, int, int, Board]] = []
    for cell in board.empty_cells():
        child = board.with_cell(cell, color)
        line_ids = LINES_THROUGH[cell]
        delta = lines_score(child, line_ids, line_cache) - lines_score(board, line_ids, line_cache)
        disruption = placement_disruption(board, child, cell, line_cache)
        ranked.append((disruption, cell, delta, child))
    ranked.sort(key=lambda item: -item[0])
    return [(cell, delta, child) for _, cell, delta, child in ranked]


# ---------------------------------------------------------------------------
# Minimax with alpha-beta
# ---------------------------------------------------------------------------

def _max_value(
    ctx: _SearchContext,
    board: Board,
    score_value: int,
    upcoming: Color,
    depth: int,
    alpha: float,
    beta: float,
) -> float:
    """Mover to act; `upcoming` is the color the placer places afterwards."""
    ctx.nodes += 1
    if depth == 0 or board.is_full or ctx.out_of_time():
        return ctx.static_value(board, upcoming, score_value)

    best = -INF
    for _, delta, child in ordered_slides(board, ctx.line_cache):
        value = _min_value(ctx, child, score_value + delta, upcoming, depth - 1, alpha, beta)
        if value > best:
            best = value
        if best >= beta:
            return best
        alpha = max(alpha, best)
    return best


def _min_value(
    ctx: _SearchContext,
    board: Board,
    score_value: int,
    color: Color,
    depth: int,
    alpha: float,
    beta: float,
) -> float:
    """Placer to act with `color` in hand."""
    ctx.nodes += 1
    if depth == 0 or board.is_full or ctx.out_of_time():
        return ctx.static_value(board, color, score_value)

    best = INF
    for _, delta, child in ordered_placements(board, color, ctx.line_cache):
        upcoming = likely_next_color(child)
        value = _max_value(ctx, child, score_value + delta, upcoming, depth - 1, alpha, beta)
        if value < best:
            best = value
        if best <= alpha:
            return best
        beta = min(beta, best)
    return best


def _root_search(
    ctx: _SearchContext,
    state: GameState,
    root_score: int,
    depth: int,
) -> tuple[float, MoverAction]:
    """Search every mover action at the root. Returns (best value, best action)."""
    board = state.board
    upcoming = state.announced_color or likely_next_color(board)
    alpha, beta = -INF, INF
    best_value = -INF
    best_action: MoverAction = PASS

    for action, delta, child in ordered_slides(board, ctx.line_cache):
        value = _min_value(ctx, child, root_score + delta, upcoming, depth - 1, alpha, beta)
        if value > best_value:
            best_value = value
            best_action = action
        alpha = max(alpha, best_value)

    return best_value, best_action


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

class MoverSearch:
    """Time-bounded iterative deepening for the mover role."""

    def __init__(
        self,
        max_depth: int = MAX_DEPTH,
        time_budget: Optional[float] = TIME_BUDGET,
        safety_buffer: float = SAFETY_BUFFER,
        min_time_for_next_depth: float = MIN_TIME_FOR_NEXT_DEPTH,
        cache_capacity: int = DEFAULT_CAPACITY,
        weights: EvaluatorWeights = DEFAULT_WEIGHTS,
    ) -> None:
        self.max_depth = max_depth
        self.time_budget = time_budget
        self.safety_buffer = safety_buffer
        self.min_time_for_next_depth = min_time_for_next_depth
        self.cache_capacity = cache_capacity
        self.weights = weights

    def _context(self, deadline: Deadline, cache: Optional[TranspositionCache]) -> _SearchContext:
        return _SearchContext(
            cache=cache if cache is not None else TranspositionCache(self.cache_capacity),
            line_cache=LineScoreCache(),
            weights=self.weights,
            deadline=deadline,
        )

    def search_depth(
        self,
        state: GameState,
        depth: int,
        cache: Optional[TranspositionCache] = None,
    ) -> tuple[float, MoverAction]:
        """One full-width search at a fixed depth, ignoring the clock."""
        ctx = self._context(Deadline(None), cache)
        return _root_search(ctx, state, score(state.board, ctx.line_cache), max(1, depth))

    def search(self, state: GameState) -> SearchResult:
        start = time.perf_counter()
        board = state.board

        if board.is_full or count_slides(board) == 0:
            return SearchResult(PASS, 0.0, 0, 0, time.perf_counter() - start)

        budget = None if self.time_budget is None else max(0.0, self.time_budget - self.safety_buffer)
        deadline = Deadline(budget)
        ctx = self._context(deadline, None)
        root_score = score(board, ctx.line_cache)
        ceiling = choose_depth_ceiling(board, self.max_depth)

        best_value, best_action, completed = -INF, PASS, 0
        timed_out = False
        for depth in range(1, ceiling + 1):
            if depth > 1 and deadline.remaining() < self.min_time_for_next_depth:
                break
            # Depth 1 is a single ply of static evaluations; it always finishes.
            ctx.enforce_deadline = depth > 1
            ctx.timed_out = False
            value, action = _root_search(ctx, state, root_score, depth)
            if ctx.timed_out:
                timed_out = True
                logger.debug("depth %d abandoned at the deadline after %d nodes", depth, ctx.nodes)
                break
            best_value, best_action, completed = value, action, depth
            logger.debug(
                "depth %d complete: value=%.1f action=%r nodes=%d elapsed=%.3fs",
                depth, value, action, ctx.nodes, time.perf_counter() - start,
            )

        return SearchResult(
            action=best_action,
            value=best_value,
            depth=completed,
            nodes=ctx.nodes,
            elapsed=time.perf_counter() - start,
            timed_out=timed_out,
        )
