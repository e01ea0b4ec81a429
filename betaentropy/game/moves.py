"""Legal action enumeration and pure application of slides and placements."""

from __future__ import annotations

from .board import BOARD_SIZE, CELL_COUNT, LINES_THROUGH, Board
from .types import PASS, MoverAction, Placement, Slide

# Four axis directions as (row step, col step): up, down, left, right
DIRECTIONS = [(-1, 0), (1, 0), (0, -1), (0, 1)]


def _build_rays() -> tuple[tuple[tuple[int, ...], ...], ...]:
    """RAYS[cell] holds, per direction, the cells walked outward to the edge."""
    rays = []
    for index in range(CELL_COUNT):
        row, col = divmod(index, BOARD_SIZE)
        per_cell = []
        for dr, dc in DIRECTIONS:
            ray = []
            r, c = row + dr, col + dc
            while 0 <= r < BOARD_SIZE and 0 <= c < BOARD_SIZE:
                ray.append(r * BOARD_SIZE + c)
                r += dr
                c += dc
            per_cell.append(tuple(ray))
        rays.append(tuple(per_cell))
    return tuple(rays)


RAYS = _build_rays()


def slide_targets(board: Board, origin: int) -> list[int]:
    """Empty cells reachable from `origin` before the first obstruction."""
    cells = board.cells
    targets: list[int] = []
    for ray in RAYS[origin]:
        for cell in ray:
            if cells[cell] is not None:
                break
            targets.append(cell)
    return targets


def generate_slides(board: Board) -> list[Slide]:
    """Every legal slide, in board order then direction order.

    Returns an empty list when nothing can move, which means the mover passes.
    """
    cells = board.cells
    slides: list[Slide] = []
    for origin in range(CELL_COUNT):
        if cells[origin] is None:
            continue
        for ray in RAYS[origin]:
            for cell in ray:
                if cells[cell] is not None:
                    break
                slides.append(Slide(origin, cell))
    return slides


def count_slides(board: Board) -> int:
    cells = board.cells
    total = 0
    for origin in range(CELL_COUNT):
        if cells[origin] is None:
            continue
        for ray in RAYS[origin]:
            for cell in ray:
                if cells[cell] is not None:
                    break
                total += 1
    return total


def mover_actions(board: Board) -> list[MoverAction]:
    """All slides followed by the explicit pass."""
    actions: list[MoverAction] = list(generate_slides(board))
    actions.append(PASS)
    return actions


def generate_placements(board: Board) -> list[int]:
    """Indices of the empty cells."""
    return board.empty_cells()


def crossing_lines(slide: Slide) -> list[int]:
    """Lines whose filled sequence a slide can change.

    A token never passes another, so the line it slides along keeps its
    order; only the two lines crossing the origin and the target change.
    """
    origin_row, origin_col = LINES_THROUGH[slide.origin]
    target_row, target_col = LINES_THROUGH[slide.target]
    if origin_row == target_row:
        return [origin_col, target_col]
    return [origin_row, target_row]


def is_legal_slide(board: Board, slide: Slide) -> bool:
    if not (0 <= slide.origin < CELL_COUNT and 0 <= slide.target < CELL_COUNT):
        return False
    if board.is_empty(slide.origin):
        return False
    return slide.target in slide_targets(board, slide.origin)


def is_legal_placement(board: Board, placement: Placement) -> bool:
    return 0 <= placement.cell < CELL_COUNT and board.is_empty(placement.cell)


def apply_slide(board: Board, slide: Slide) -> Board:
    """Return a new board with the token moved from origin to target."""
    cells = list(board.cells)
    color = cells[slide.origin]
    assert color is not None, f"Slide origin {slide.origin} is empty"
    assert cells[slide.target] is None, f"Slide target {slide.target} is occupied"
    cells[slide.origin] = None
    cells[slide.target] = color
    return Board._trusted(tuple(cells))


def apply_placement(board: Board, placement: Placement) -> Board:
    """Return a new board with the placement's color on its cell."""
    assert board.is_empty(placement.cell), f"Cell {placement.cell} is occupied"
    return board.with_cell(placement.cell, placement.color)


def apply_action(board: Board, action: MoverAction) -> Board:
    if isinstance(action, Slide):
        return apply_slide(board, action)
    return board
