"""Static evaluation from the mover's point of view.

Six components, each computed on the raw board and combined with
EvaluatorWeights. Only the immediate score is ground truth; the other five
are advisory heuristics about how the board is likely to develop.

The advisory components are scaled to roughly [0, 1]. A slide touches at
most three lines and two cells, so with the default weights it moves their
weighted sum by less than half a point of score. A slide that gains points
therefore always evaluates above one that does not.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, NamedTuple, Optional

from betaentropy.game.board import BOARD_SIZE, CELL_COUNT, LINES, LINES_THROUGH, Board, GameState
from betaentropy.game.scoring import LineScoreCache, score
from betaentropy.game.types import Color


@dataclass(frozen=True)
class EvaluatorWeights:
    score: float = 100.0
    potential: float = 50.0
    control: float = 30.0
    opportunity: float = -40.0
    preparation: float = 20.0
    fertility: float = 25.0


DEFAULT_WEIGHTS = EvaluatorWeights()

# Pattern potential: empty cells between two matching tokens -> weight.
# A line counts only its closest pair.
POTENTIAL_TIERS: dict[int, float] = {
    1: 1.0,   # almost complete
    2: 0.5,   # two moves away
    3: 0.2,   # three moves away
}
MAX_POTENTIAL_GAP = max(POTENTIAL_TIERS)

# Board control
CENTER_CELLS = frozenset({17, 23, 25, 31})  # orthogonal neighbours of the middle cell
EDGE_CELLS = frozenset(
    i for i in range(CELL_COUNT)
    if i // BOARD_SIZE in (0, BOARD_SIZE - 1) or i % BOARD_SIZE in (0, BOARD_SIZE - 1)
)
CENTER_WEIGHT = 2.0
EDGE_WEIGHT = 1.0
MULTIPLICITY_WEIGHT = 1.5

# Opponent opportunity
EMPTY_CELL_WEIGHT = 0.5
VULNERABLE_LINE_WEIGHT = 2.0

# Announced-color preparation
DIVERSITY_BONUS = 0.5
SCARCE_COLOR_LIMIT = 1
ABUNDANT_COLOR_LIMIT = 4
SCARCITY_BONUS = 2.0
ABUNDANCE_PENALTY = 2.0
SHARED_LINE_BONUS = 0.25

# Line fertility, indexed by filled-cell count (a full line uses FULL_LINE_BONUS)
FERTILITY_CURVE = (0.0, 0.2, 1.0, 1.0, 1.0, 0.5, 0.2)
FULL_LINE_BONUS = 0.3
DIVERSITY_SCALE = {1: 1.5, 2: 1.0, 3: 0.75}
CROWDED_SCALE = 0.5  # four or more distinct colors

# Largest raw value of each advisory component, used to scale it to [0, 1]
MAX_POTENTIAL = POTENTIAL_TIERS[1] * len(LINES)
MAX_CONTROL = (
    CENTER_WEIGHT * len(CENTER_CELLS)
    + EDGE_WEIGHT * len(EDGE_CELLS)
    + MULTIPLICITY_WEIGHT * (BOARD_SIZE - 1) * len(LINES)
)
MAX_OPPORTUNITY = EMPTY_CELL_WEIGHT * CELL_COUNT + VULNERABLE_LINE_WEIGHT * len(LINES)
MAX_PREPARATION = DIVERSITY_BONUS * len(Color) + SCARCITY_BONUS + SHARED_LINE_BONUS * CELL_COUNT
MAX_FERTILITY = max(FERTILITY_CURVE) * max(DIVERSITY_SCALE.values()) * len(LINES)


class EvalComponents(NamedTuple):
    score: float
    potential: float
    control: float
    opportunity: float
    preparation: float
    fertility: float

    def weighted(self, weights: EvaluatorWeights = DEFAULT_WEIGHTS) -> float:
        return (
            weights.score * self.score
            + weights.potential * self.potential
            + weights.control * self.control
            + weights.opportunity * self.opportunity
            + weights.preparation * self.preparation
            + weights.fertility * self.fertility
        )


# ---------------------------------------------------------------------------
# Per-line features
# ---------------------------------------------------------------------------

def line_potential(line: tuple[Optional[Color], ...]) -> float:
    """Tier of the closest matching token pair separated by 1-3 empty cells."""
    best = 0.0
    n = len(line)
    for i in range(n):
        a = line[i]
        if a is None:
            continue
        empties = 0
        for j in range(i + 1, n):
            b = line[j]
            if b is None:
                empties += 1
                if empties > MAX_POTENTIAL_GAP:
                    break
            elif b is a and empties:
                best = max(best, POTENTIAL_TIERS[empties])
    return best


def pattern_potential(board: Board, line_ids: Optional[Iterable[int]] = None) -> float:
    """Sum of line_potential over `line_ids` (all 14 lines by default)."""
    if line_ids is None:
        line_ids = range(len(LINES))
    return sum(line_potential(board.line(line_id)) for line_id in line_ids)


def is_vulnerable_line(line: tuple[Optional[Color], ...]) -> bool:
    """A line the placer can still spoil and the mover can still improve."""
    filled = [c for c in line if c is not None]
    if len(filled) < 2 or len(filled) == len(line):
        return False
    if filled[0] is filled[-1]:
        return True
    return any(a is b for a, b in zip(filled, filled[1:]))


def line_fertility(line: tuple[Optional[Color], ...]) -> float:
    filled = [c for c in line if c is not None]
    n = len(filled)
    if n == len(line):
        return FULL_LINE_BONUS
    if n == 0:
        return 0.0
    distinct = len(set(filled))
    return FERTILITY_CURVE[n] * DIVERSITY_SCALE.get(distinct, CROWDED_SCALE)


def _line_multiplicity(line: tuple[Optional[Color], ...]) -> float:
    counts = Counter(c for c in line if c is not None)
    return MULTIPLICITY_WEIGHT * sum(n - 1 for n in counts.values() if n > 1)


# ---------------------------------------------------------------------------
# Whole-board components
# ---------------------------------------------------------------------------

def color_preparation(board: Board, announced: Optional[Color]) -> float:
    counts = board.color_counts()
    value = DIVERSITY_BONUS * len(counts)
    if announced is None:
        return value
    n = counts.get(announced, 0)
    if n <= SCARCE_COLOR_LIMIT:
        value += SCARCITY_BONUS
    elif n >= ABUNDANT_COLOR_LIMIT:
        value -= ABUNDANCE_PENALTY

    cells = board.cells
    hot_lines: set[int] = set()
    for i, cell in enumerate(cells):
        if cell is announced:
            hot_lines.update(LINES_THROUGH[i])
    if hot_lines:
        shared = sum(
            1 for i, cell in enumerate(cells)
            if cell is None and not hot_lines.isdisjoint(LINES_THROUGH[i])
        )
        value += SHARED_LINE_BONUS * shared
    return value


def evaluation_components(
    board: Board,
    announced: Optional[Color],
    score_value: Optional[int] = None,
    cache: Optional[LineScoreCache] = None,
) -> EvalComponents:
    """Unweighted components; reuses `score_value` when the caller has it.

    `score` is in points; the others are scaled by their MAX_* bound.
    """
    if score_value is None:
        score_value = score(board, cache)

    cells = board.cells
    potential = 0.0
    control = 0.0
    vulnerable = 0
    fertile = 0.0
    for indices in LINES:
        line = tuple(cells[i] for i in indices)
        potential += line_potential(line)
        control += _line_multiplicity(line)
        if is_vulnerable_line(line):
            vulnerable += 1
        fertile += line_fertility(line)

    for i in CENTER_CELLS:
        if cells[i] is not None:
            control += CENTER_WEIGHT
    for i in EDGE_CELLS:
        if cells[i] is not None:
            control += EDGE_WEIGHT

    opportunity = EMPTY_CELL_WEIGHT * board.empty_count + VULNERABLE_LINE_WEIGHT * vulnerable

    return EvalComponents(
        score=float(score_value),
        potential=potential / MAX_POTENTIAL,
        control=control / MAX_CONTROL,
        opportunity=opportunity / MAX_OPPORTUNITY,
        preparation=color_preparation(board, announced) / MAX_PREPARATION,
        fertility=fertile / MAX_FERTILITY,
    )


def evaluate_board(
    board: Board,
    announced: Optional[Color],
    score_value: Optional[int] = None,
    weights: EvaluatorWeights = DEFAULT_WEIGHTS,
    cache: Optional[LineScoreCache] = None,
) -> float:
    return evaluation_components(board, announced, score_value, cache).weighted(weights)


def evaluate(
    state: GameState,
    score_value: Optional[int] = None,
    weights: EvaluatorWeights = DEFAULT_WEIGHTS,
    cache: Optional[LineScoreCache] = None,
) -> float:
    """Figure of merit for the mover; higher is better."""
    return evaluate_board(state.board, state.announced_color, score_value, weights, cache)
