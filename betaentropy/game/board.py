from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence, Union

from .errors import ErrorCode, InvalidStateError
from .types import PASS, Color, MoverAction, Pass, Phase, Placement, Role, Slide

BOARD_SIZE = 7
CELL_COUNT = BOARD_SIZE * BOARD_SIZE
TOKENS_PER_COLOR = 7

# Phase thresholds on the filled-cell count
EARLY_PHASE_LIMIT = 16
MID_PHASE_LIMIT = 35

# Cell addresses: row letter a-g, then 1-based column number ("c4" = row 2, col 3)
ROW_LABELS = "abcdefg"

EMPTY_SYMBOLS = frozenset({"", ".", "-", "_"})

# Line ids 0..6 are rows, 7..13 are columns.
ROW_LINES: tuple[tuple[int, ...], ...] = tuple(
    tuple(r * BOARD_SIZE + c for c in range(BOARD_SIZE)) for r in range(BOARD_SIZE)
)
COL_LINES: tuple[tuple[int, ...], ...] = tuple(
    tuple(r * BOARD_SIZE + c for r in range(BOARD_SIZE)) for c in range(BOARD_SIZE)
)
LINES: tuple[tuple[int, ...], ...] = ROW_LINES + COL_LINES

# LINES_THROUGH[cell] -> (row line id, column line id)
LINES_THROUGH: tuple[tuple[int, int], ...] = tuple(
    (i // BOARD_SIZE, BOARD_SIZE + i % BOARD_SIZE) for i in range(CELL_COUNT)
)


def row_of(index: int) -> int:
    return index // BOARD_SIZE


def col_of(index: int) -> int:
    return index % BOARD_SIZE


def to_index(row: int, col: int) -> int:
    return row * BOARD_SIZE + col


def lines_touching(cells: Iterable[int]) -> list[int]:
    """Return the sorted ids of every row/column passing through `cells`."""
    ids: set[int] = set()
    for cell in cells:
        ids.update(LINES_THROUGH[cell])
    return sorted(ids)


# ---------------------------------------------------------------------------
# Addressing
# ---------------------------------------------------------------------------

def parse_cell(text: str) -> Optional[int]:
    """Parse an address like 'c4' into a board index.

    The letter selects the row (a-g), the number the column (1-7).
    Returns None if the string is invalid.
    """
    text = text.strip().lower()
    if len(text) != 2:
        return None
    row_char, col_char = text[0], text[1]
    if row_char not in ROW_LABELS or not col_char.isdigit():
        return None
    col = int(col_char)
    if not (1 <= col <= BOARD_SIZE):
        return None
    return to_index(ROW_LABELS.index(row_char), col - 1)


def format_cell(index: int) -> str:
    """Format a board index as an address like 'c4'."""
    return f"{ROW_LABELS[row_of(index)]}{col_of(index) + 1}"


def format_action(action: Union[MoverAction, Placement]) -> str:
    """Render a slide as 'c4-c7', a pass as 'pass', a placement as 'c4'."""
    if isinstance(action, Pass):
        return "pass"
    if isinstance(action, Slide):
        return f"{format_cell(action.origin)}-{format_cell(action.target)}"
    return format_cell(action.cell)


def parse_mover_action(text: str) -> MoverAction:
    """Parse 'pass' or 'c4-c7'. Raises InvalidStateError on bad input."""
    text = text.strip().lower()
    if text == "pass":
        return PASS
    parts = text.split("-")
    if len(parts) == 2:
        origin, target = parse_cell(parts[0]), parse_cell(parts[1])
        if origin is not None and target is not None:
            return Slide(origin, target)
    raise InvalidStateError(
        ErrorCode.ERR_BAD_ADDRESS,
        f"Cannot parse mover action {text!r}; use 'pass' or e.g. 'c4-c7'",
        {"text": text},
    )


# ---------------------------------------------------------------------------
# Board
# ---------------------------------------------------------------------------

class Board:
    """Immutable 7x7 grid of colors, row-major. None marks an empty cell."""

    __slots__ = ("_cells", "_key")

    def __init__(self, cells: Optional[Iterable[Optional[Color]]] = None) -> None:
        """An empty board when `cells` is None; otherwise exactly 49 cells."""
        cells = (None,) * CELL_COUNT if cells is None else tuple(cells)
        if len(cells) != CELL_COUNT:
            raise InvalidStateError(
                ErrorCode.ERR_BOARD_LENGTH,
                f"Board needs {CELL_COUNT} cells, got {len(cells)}",
                {"length": len(cells)},
            )
        for i, cell in enumerate(cells):
            if cell is not None and not isinstance(cell, Color):
                raise InvalidStateError(
                    ErrorCode.ERR_UNKNOWN_SYMBOL,
                    f"Cell {i} holds {cell!r}, expected a Color or None",
                    {"index": i, "symbol": repr(cell)},
                )
        self._cells: tuple[Optional[Color], ...] = cells
        self._key: Optional[str] = None

    @classmethod
    def _trusted(cls, cells: tuple[Optional[Color], ...]) -> Board:
        # Skips validation; only for boards derived from an existing Board.
        board = cls.__new__(cls)
        board._cells = cells
        board._key = None
        return board

    @property
    def cells(self) -> tuple[Optional[Color], ...]:
        return self._cells

    def get(self, index: int) -> Optional[Color]:
        return self._cells[index]

    def is_empty(self, index: int) -> bool:
        return self._cells[index] is None

    def is_on_grid(self, row: int, col: int) -> bool:
        return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE

    def with_cell(self, index: int, color: Optional[Color]) -> Board:
        cells = list(self._cells)
        cells[index] = color
        return Board._trusted(tuple(cells))

    def line(self, line_id: int) -> tuple[Optional[Color], ...]:
        cells = self._cells
        return tuple(cells[i] for i in LINES[line_id])

    def filled_line(self, line_id: int) -> tuple[Color, ...]:
        """The colors in a line with the empty cells dropped."""
        cells = self._cells
        return tuple(cells[i] for i in LINES[line_id] if cells[i] is not None)

    def empty_cells(self) -> list[int]:
        return [i for i, cell in enumerate(self._cells) if cell is None]

    def filled_cells(self) -> list[int]:
        return [i for i, cell in enumerate(self._cells) if cell is not None]

    @property
    def filled_count(self) -> int:
        return CELL_COUNT - self._cells.count(None)

    @property
    def empty_count(self) -> int:
        return self._cells.count(None)

    @property
    def is_full(self) -> bool:
        return None not in self._cells

    def count(self, color: Color) -> int:
        return self._cells.count(color)

    def color_counts(self) -> Counter:
        return Counter(cell for cell in self._cells if cell is not None)

    def remaining(self, color: Color) -> int:
        """Tokens of `color` still off the board, assuming a full bag of 7."""
        return TOKENS_PER_COLOR - self._cells.count(color)

    def key(self) -> str:
        """49-character serialization; '.' marks an empty cell."""
        if self._key is None:
            self._key = "".join("." if c is None else c.value for c in self._cells)
        return self._key

    def rows_text(self) -> str:
        k = self.key()
        return "\n".join(k[r * BOARD_SIZE:(r + 1) * BOARD_SIZE] for r in range(BOARD_SIZE))

    def __iter__(self) -> Iterator[Optional[Color]]:
        return iter(self._cells)

    def __len__(self) -> int:
        return CELL_COUNT

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._cells == other._cells

    def __hash__(self) -> int:
        return hash(self._cells)

    def __repr__(self) -> str:
        return f"Board({self.key()!r})"


def game_phase(board: Board) -> Phase:
    filled = board.filled_count
    if filled < EARLY_PHASE_LIMIT:
        return Phase.EARLY
    if filled < MID_PHASE_LIMIT:
        return Phase.MID
    return Phase.LATE


# ---------------------------------------------------------------------------
# Game state
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GameState:
    """One decision's input: board, the placer's next color, who is to act.

    `announced_color` is None only inside search, at plies where the next
    draw is not known.
    """

    board: Board
    announced_color: Optional[Color]
    active_role: Role

    @property
    def is_game_over(self) -> bool:
        return self.board.is_full

    @property
    def phase(self) -> Phase:
        return game_phase(self.board)


def is_game_over(board: Board) -> bool:
    return board.is_full


# ---------------------------------------------------------------------------
# Input boundary
# ---------------------------------------------------------------------------

def _parse_symbol(symbol: str, index: int) -> Optional[Color]:
    symbol = symbol.strip()
    if symbol in EMPTY_SYMBOLS:
        return None
    try:
        return Color.from_symbol(symbol)
    except ValueError:
        raise InvalidStateError(
            ErrorCode.ERR_UNKNOWN_SYMBOL,
            f"Unknown symbol {symbol!r} at cell {index}",
            {"index": index, "symbol": symbol},
        ) from None


def board_from_symbols(symbols: Sequence[str], strict: bool = False) -> Board:
    """Build a Board from 49 symbols; '' (or '.', '-', '_') marks empty.

    With strict=True, also rejects boards holding more than 7 of a color.
    """
    if len(symbols) != CELL_COUNT:
        raise InvalidStateError(
            ErrorCode.ERR_BOARD_LENGTH,
            f"Board needs {CELL_COUNT} cells, got {len(symbols)}",
            {"length": len(symbols)},
        )
    board = Board(_parse_symbol(s, i) for i, s in enumerate(symbols))
    if strict:
        for color, n in board.color_counts().items():
            if n > TOKENS_PER_COLOR:
                raise InvalidStateError(
                    ErrorCode.ERR_BAG_OVERFLOW,
                    f"{color} appears {n} times; at most {TOKENS_PER_COLOR} exist",
                    {"color": color.value, "count": n},
                )
    return board


def parse_board(text: str, strict: bool = False) -> Board:
    """Parse board text.

    Accepts comma-separated symbols (empty fields are empty cells), or a
    run of single characters where '.', '-' or '_' mark empty cells and
    whitespace/newlines are ignored.
    """
    if "," in text:
        symbols = [s.strip() for s in text.replace("\n", ",").split(",")]
        # A trailing comma at the end of a row-per-line layout
        if len(symbols) == CELL_COUNT + 1 and symbols[-1] == "":
            symbols.pop()
    else:
        symbols = [ch for ch in text if not ch.isspace()]
    return board_from_symbols(symbols, strict=strict)


def parse_color(text: Optional[str]) -> Color:
    if text is None or not text.strip():
        raise InvalidStateError(ErrorCode.ERR_MISSING_COLOR, "Announced color is missing")
    try:
        return Color.from_symbol(text)
    except ValueError:
        raise InvalidStateError(
            ErrorCode.ERR_UNKNOWN_SYMBOL,
            f"Unknown color {text!r}",
            {"symbol": text},
        ) from None


def parse_role(text: str) -> Role:
    try:
        return Role(text.strip().lower())
    except ValueError:
        raise InvalidStateError(
            ErrorCode.ERR_UNKNOWN_ROLE,
            f"Unknown role {text!r}; expected 'placer' or 'mover'",
            {"role": text},
        ) from None


def parse_state(
    board_text: str,
    announced: Optional[str],
    role: str,
    strict: bool = False,
) -> GameState:
    """Validate caller-supplied text and build a GameState."""
    return GameState(
        board=parse_board(board_text, strict=strict),
        announced_color=parse_color(announced),
        active_role=parse_role(role),
    )
