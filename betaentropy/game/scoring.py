"""Palindrome scoring over rows and columns.

Each of the 14 lines is reduced to its filled cells (empty cells are
dropped, so gaps never break a pattern). Every contiguous run of length
2..7 in that sequence that reads the same both ways scores the points of
its shape, e.g. Red-Green-Red has shape "ABA" and scores 3. Overlapping
and nested runs each count.
"""

from __future__ import annotations

from typing import Hashable, Iterable, Optional, Sequence

from .board import LINES, Board, lines_touching

MIN_PATTERN = 2
MAX_PATTERN = 7

# Shape signature -> points. Signatures relabel colors by first occurrence.
SCORE_TABLE: dict[str, int] = {
    "AA": 2,
    "ABA": 3,
    "AAA": 7,
    "ABBA": 6,
    "AAAA": 16,
    "ABCBA": 8,
    "AABAA": 12,
    "ABABA": 14,
    "ABBBA": 12,
    "AAAAA": 30,
    "AABBAA": 16,
    "ABAABA": 18,
    "ABBBBA": 22,
    "ABCCBA": 12,
    "AAAAAA": 50,
    "ABCDCBA": 15,
    "AAABAAA": 29,
    "AABABAA": 25,
    "AABBBAA": 23,
    "AABCBAA": 19,
    "ABAAABA": 25,
    "ABABABA": 27,
    "ABACABA": 21,
    "ABBABBA": 27,
    "ABBBBBA": 37,
    "ABBCBBA": 19,
    "ABCACBA": 15,
    "ABCBCBA": 21,
    "ABCCCBA": 19,
    "AAAAAAA": 77,
}

# Same table keyed by label tuples (A=0, B=1, ...), built once.
_SHAPE_POINTS: dict[tuple[int, ...], int] = {
    tuple(ord(ch) - ord("A") for ch in signature): points
    for signature, points in SCORE_TABLE.items()
}


def _relabel(colors: Sequence[Hashable]) -> tuple[int, ...]:
    seen: dict[Hashable, int] = {}
    return tuple(seen.setdefault(c, len(seen)) for c in colors)


def pattern_signature(colors: Sequence[Hashable]) -> str:
    """First-occurrence relabeling, e.g. [Red, Green, Red] -> 'ABA'."""
    return "".join(chr(ord("A") + label) for label in _relabel(colors))


def is_palindrome(colors: Sequence[Hashable]) -> bool:
    i, j = 0, len(colors) - 1
    while i < j:
        if colors[i] != colors[j]:
            return False
        i += 1
        j -= 1
    return True


def score_sequence(colors: Sequence[Hashable]) -> int:
    """Points for `colors` taken as one whole run.

    The table value when it is a palindrome of length 2..7, otherwise 0.
    Shapes missing from the table fall back to the run length.
    """
    n = len(colors)
    if n < MIN_PATTERN or n > MAX_PATTERN or not is_palindrome(colors):
        return 0
    return _SHAPE_POINTS.get(_relabel(colors), n)


def score_line(colors: Sequence[Hashable]) -> int:
    """Sum of score_sequence over every contiguous run of a filled line."""
    n = len(colors)
    total = 0
    for start in range(n - 1):
        first = colors[start]
        for end in range(start + MIN_PATTERN, min(n, start + MAX_PATTERN) + 1):
            # Cheap endpoint test before the full palindrome check
            if colors[end - 1] == first:
                total += score_sequence(colors[start:end])
    return total


class LineScoreCache:
    """Memo from a line's filled color sequence to its points.

    Owned by one decision call and passed explicitly; never module-global.
    """

    def __init__(self) -> None:
        self._scores: dict[tuple, int] = {}
        self.hits = 0

    def score(self, colors: tuple) -> int:
        cached = self._scores.get(colors)
        if cached is not None:
            self.hits += 1
            return cached
        value = score_line(colors)
        self._scores[colors] = value
        return value

    def __len__(self) -> int:
        return len(self._scores)

    def clear(self) -> None:
        self._scores.clear()
        self.hits = 0


def lines_score(
    board: Board, line_ids: Iterable[int], cache: Optional[LineScoreCache] = None
) -> int:
    cells = board.cells
    total = 0
    for line_id in line_ids:
        filled = tuple(cells[i] for i in LINES[line_id] if cells[i] is not None)
        if len(filled) < MIN_PATTERN:
            continue
        total += cache.score(filled) if cache is not None else score_line(filled)
    return total


def score(board: Board, cache: Optional[LineScoreCache] = None) -> int:
    """Total points of the board over all 7 rows and 7 columns."""
    return lines_score(board, range(len(LINES)), cache)


def score_delta(
    before: Board,
    after: Board,
    changed_cells: Iterable[int],
    cache: Optional[LineScoreCache] = None,
) -> int:
    """Score change between two boards that differ only in `changed_cells`.

    Only the rows and columns through those cells are rescored.
    """
    line_ids = lines_touching(changed_cells)
    return lines_score(after, line_ids, cache) - lines_score(before, line_ids, cache)
