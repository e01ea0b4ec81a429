"""Placer strategies.

DisruptionStrategy looks one mover reply ahead and prefers the cell that
leaves the mover the least; EntropyStrategy scores the structural damage a
placement does without simulating anyone. HybridStrategy blends the two
with weights that shift toward disruption as the board fills up.
"""

from __future__ import annotations

import abc
import heapq
from typing import Optional

from betaentropy.agent.evaluator import MAX_POTENTIAL_GAP, POTENTIAL_TIERS, line_potential
from betaentropy.game.board import (
    BOARD_SIZE,
    CELL_COUNT,
    LINES,
    LINES_THROUGH,
    Board,
    GameState,
    col_of,
    game_phase,
    row_of,
)
from betaentropy.game.errors import ErrorCode, InvalidStateError
from betaentropy.game.moves import RAYS, apply_slide, crossing_lines, generate_slides
from betaentropy.game.scoring import LineScoreCache, lines_score, score
from betaentropy.game.types import Color, Phase, Placement

# Disruption strategy
DEFAULT_SAMPLE_SIZE = 50      # mover replies simulated per candidate cell
REPLY_WEIGHT = 10.0
POTENTIAL_WEIGHT = 15.0
FORECLOSURE_WEIGHT = 8.0
SCARCITY_WEIGHT = 4.0
SCARCE_REMAINING = 2          # tokens left off-board at or below which a color is scarce
ABUNDANT_REMAINING = 4

# Entropy strategy
FRAGMENTATION_WEIGHT = 2.0
SYMMETRY_WEIGHT = 1.5
PARITY_WEIGHT = 0.5
ZONE_WEIGHT = 1.0
POSITION_WEIGHT = 1.0

# Zone bands along each axis: rows/cols 0-1, 2-4, 5-6
ZONE_BANDS = (0, 0, 1, 1, 1, 2, 2)
CENTER = BOARD_SIZE // 2

# Hybrid blend per phase: (disruption weight, entropy weight)
PHASE_BLEND: dict[Phase, tuple[float, float]] = {
    Phase.EARLY: (0.4, 0.6),
    Phase.MID: (0.6, 0.4),
    Phase.LATE: (0.8, 0.2),
}


def _require_color(state: GameState) -> Color:
    if state.announced_color is None:
        raise InvalidStateError(ErrorCode.ERR_MISSING_COLOR, "Placer needs an announced color")
    return state.announced_color


def _require_space(board: Board) -> None:
    if board.is_full:
        raise InvalidStateError(ErrorCode.ERR_ILLEGAL_ACTION, "Board is full; nothing to place")


def _zone_of(index: int) -> tuple[int, int]:
    return ZONE_BANDS[row_of(index)], ZONE_BANDS[col_of(index)]


def _build_zones() -> dict[tuple[int, int], tuple[int, ...]]:
    zones: dict[tuple[int, int], list[int]] = {}
    for i in range(CELL_COUNT):
        zones.setdefault(_zone_of(i), []).append(i)
    return {zone: tuple(cells) for zone, cells in zones.items()}


ZONES = _build_zones()


class PlacementStrategy(abc.ABC):
    """Scores every empty cell for the announced color."""

    # True when a lower cell score is better for the placer
    lower_is_better = False

    @abc.abstractmethod
    def score_cells(self, state: GameState) -> dict[int, float]:
        """Return {cell: score} for every empty cell."""

    def goodness(self, state: GameState) -> dict[int, float]:
        """Scores rescaled to [0, 1], 1 being best for the placer."""
        scores = self.score_cells(state)
        if not scores:
            return {}
        lo, hi = min(scores.values()), max(scores.values())
        if hi == lo:
            return {cell: 1.0 for cell in scores}
        span = hi - lo
        if self.lower_is_better:
            return {cell: (hi - s) / span for cell, s in scores.items()}
        return {cell: (s - lo) / span for cell, s in scores.items()}

    def choose(self, state: GameState) -> Placement:
        color = _require_color(state)
        _require_space(state.board)
        goodness = self.goodness(state)
        best_cell, best = -1, -1.0
        # Board order; the first cell with strictly greater goodness wins
        for cell in sorted(goodness):
            if goodness[cell] > best:
                best_cell, best = cell, goodness[cell]
        return Placement(best_cell, color)

    @property
    def name(self) -> str:
        return self.__class__.__name__


# ---------------------------------------------------------------------------
# Disruption
# ---------------------------------------------------------------------------

def best_reply_score(
    board: Board,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    line_cache: Optional[LineScoreCache] = None,
) -> int:
    """Highest score the mover can reach with one slide (or a pass).

    Every slide gets the quick crossing-line delta; only the `sample_size`
    largest are kept as candidate replies. With a sample of 0 the mover is
    assumed to pass.
    """
    base = score(board, line_cache)

    def deltas():
        for slide in generate_slides(board):
            child = apply_slide(board, slide)
            line_ids = crossing_lines(slide)
            yield lines_score(child, line_ids, line_cache) - lines_score(board, line_ids, line_cache)

    best = base  # passing keeps the current score
    for delta in heapq.nlargest(sample_size, deltas()):
        best = max(best, base + delta)
    return best


def foreclosed_patterns(board: Board, cell: int, color: Color) -> int:
    """Matching token pairs around `cell` that a different color would split.

    Counts pairs in the cell's row and column that straddle it with at most
    MAX_POTENTIAL_GAP empty cells between them, whose color differs from
    `color`. Each is a palindrome the placement rules out.
    """
    cells = board.cells
    total = 0
    for line_id in LINES_THROUGH[cell]:
        indices = LINES[line_id]
        pos = indices.index(cell)
        line = [cells[i] for i in indices]
        for p in range(pos):
            a = line[p]
            if a is None or a is color:
                continue
            for q in range(pos + 1, len(line)):
                if line[q] is not a:
                    continue
                gap = sum(1 for x in line[p + 1:q] if x is None)
                if gap <= MAX_POTENTIAL_GAP:
                    total += 1
    return total


class DisruptionStrategy(PlacementStrategy):
    """Minimize what the mover can do next, plus local pattern damage."""

    lower_is_better = True

    def __init__(self, sample_size: int = DEFAULT_SAMPLE_SIZE) -> None:
        self.sample_size = sample_size

    def cell_score(
        self,
        board: Board,
        cell: int,
        color: Color,
        line_cache: Optional[LineScoreCache] = None,
    ) -> float:
        child = board.with_cell(cell, color)
        line_ids = LINES_THROUGH[cell]

        reply = best_reply_score(child, self.sample_size, line_cache)

        potential_before = sum(line_potential(board.line(i)) for i in line_ids)
        potential_after = sum(line_potential(child.line(i)) for i in line_ids)
        foreclosed = foreclosed_patterns(board, cell, color)

        remaining = board.remaining(color)
        adjustment = 0.0
        if remaining <= SCARCE_REMAINING:
            # Keep a scarce color away from partners it could pair with
            partners = sum(
                1 for i in line_ids for j in LINES[i] if j != cell and board.get(j) is color
            )
            adjustment = SCARCITY_WEIGHT * partners
        elif remaining >= ABUNDANT_REMAINING:
            # Spend an abundant color inside lines that are close to scoring
            adjustment = -SCARCITY_WEIGHT * potential_before / POTENTIAL_TIERS[1]

        return (
            REPLY_WEIGHT * reply
            + POTENTIAL_WEIGHT * (potential_after - potential_before)
            - FORECLOSURE_WEIGHT * foreclosed
            + adjustment
        )

    def score_cells(self, state: GameState) -> dict[int, float]:
        color = _require_color(state)
        board = state.board
        line_cache = LineScoreCache()
        return {cell: self.cell_score(board, cell, color, line_cache) for cell in board.empty_cells()}


# ---------------------------------------------------------------------------
# Entropy
# ---------------------------------------------------------------------------

def run_count(colors: list[Color]) -> int:
    """Number of maximal same-color runs in a filled sequence."""
    if not colors:
        return 0
    return 1 + sum(1 for a, b in zip(colors, colors[1:]) if a is not b)


def fragmentation_gain(board: Board, child: Board, cell: int) -> int:
    gain = 0
    for line_id in LINES_THROUGH[cell]:
        gain += run_count(list(child.filled_line(line_id))) - run_count(list(board.filled_line(line_id)))
    return gain


def symmetry_break(board: Board, cell: int, color: Color) -> float:
    """+1 if the point-reflected cell holds another color, -1 if the same."""
    mirror = CELL_COUNT - 1 - cell
    if mirror == cell:
        return 0.0
    other = board.get(mirror)
    if other is None:
        return 0.0
    return -1.0 if other is color else 1.0


def odd_gaps(board: Board, cell: int) -> int:
    """Directions in which the run of empty cells next to `cell` has odd length."""
    cells = board.cells
    count = 0
    for ray in RAYS[cell]:
        gap = 0
        for i in ray:
            if cells[i] is not None:
                break
            gap += 1
        if gap % 2 == 1:
            count += 1
    return count


def zone_diversity(board: Board, cell: int, color: Color) -> float:
    """1.0 if the color is new to the cell's zone."""
    zone = ZONES[_zone_of(cell)]
    return 0.0 if any(board.get(i) is color for i in zone) else 1.0


def position_preference(cell: int, phase: Phase) -> float:
    distance = max(abs(row_of(cell) - CENTER), abs(col_of(cell) - CENTER))
    if phase is Phase.EARLY:
        return (CENTER - distance) / CENTER
    if phase is Phase.LATE:
        return distance / CENTER
    return 0.0


class EntropyStrategy(PlacementStrategy):
    """Maximize structural disorder around the placed token."""

    lower_is_better = False

    def cell_score(self, board: Board, cell: int, color: Color, phase: Phase) -> float:
        child = board.with_cell(cell, color)
        return (
            FRAGMENTATION_WEIGHT * fragmentation_gain(board, child, cell)
            + SYMMETRY_WEIGHT * symmetry_break(board, cell, color)
            + PARITY_WEIGHT * odd_gaps(child, cell)
            + ZONE_WEIGHT * zone_diversity(board, cell, color)
            + POSITION_WEIGHT * position_preference(cell, phase)
        )

    def score_cells(self, state: GameState) -> dict[int, float]:
        color = _require_color(state)
        board = state.board
        phase = game_phase(board)
        return {cell: self.cell_score(board, cell, color, phase) for cell in board.empty_cells()}


# ---------------------------------------------------------------------------
# Hybrid
# ---------------------------------------------------------------------------

class HybridStrategy(PlacementStrategy):
    """Phase-weighted blend of disruption and entropy goodness."""

    lower_is_better = False

    def __init__(
        self,
        disruption: Optional[DisruptionStrategy] = None,
        entropy: Optional[EntropyStrategy] = None,
    ) -> None:
        self.disruption = disruption or DisruptionStrategy()
        self.entropy = entropy or EntropyStrategy()

    def score_cells(self, state: GameState) -> dict[int, float]:
        w_disruption, w_entropy = PHASE_BLEND[game_phase(state.board)]
        disruption = self.disruption.goodness(state)
        entropy = self.entropy.goodness(state)
        return {
            cell: w_disruption * disruption[cell] + w_entropy * entropy[cell]
            for cell in disruption
        }


STRATEGIES: dict[str, type[PlacementStrategy]] = {
    "disruption": DisruptionStrategy,
    "entropy": EntropyStrategy,
    "hybrid": HybridStrategy,
}
