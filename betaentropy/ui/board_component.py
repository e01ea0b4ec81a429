"""SVG board renderer for Gradio."""

from __future__ import annotations

import html
from typing import Optional, Union

from betaentropy.game.board import BOARD_SIZE, ROW_LABELS, Board, col_of, format_cell, row_of
from betaentropy.game.types import Color, MoverAction, Placement, Slide

# Layout constants
CELL_SIZE = 56
MARGIN = 36
BOARD_PX = MARGIN * 2 + CELL_SIZE * BOARD_SIZE
TOKEN_RADIUS = 22

# Colors
BG_COLOR = "#2B2D42"
CELL_COLOR = "#3D405B"
LINE_COLOR = "#8D99AE"
LABEL_COLOR = "#EDF2F4"
HIGHLIGHT_COLOR = "#FFD166"

TOKEN_COLORS: dict[Color, str] = {
    Color.RED: "#E63946",
    Color.GREEN: "#2A9D8F",
    Color.BLUE: "#277DA1",
    Color.YELLOW: "#F9C74F",
    Color.PURPLE: "#9B5DE5",
    Color.ORANGE: "#F3722C",
    Color.CYAN: "#4CC9F0",
}


def _center(index: int) -> tuple[int, int]:
    """Pixel center of a cell; row 'a' is drawn at the top."""
    x = MARGIN + col_of(index) * CELL_SIZE + CELL_SIZE // 2
    y = MARGIN + row_of(index) * CELL_SIZE + CELL_SIZE // 2
    return x, y


def render_board_svg(
    board: Board,
    highlight: Optional[Union[MoverAction, Placement]] = None,
    caption: str = "",
) -> str:
    """Render the board as an SVG string, optionally marking an action."""
    parts: list[str] = []

    height = BOARD_PX + (24 if caption else 0)
    parts.append(
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{BOARD_PX}" height="{height}" '
        f'viewBox="0 0 {BOARD_PX} {height}" '
        f'id="entropy-board">'
    )
    parts.append(f'<rect width="{BOARD_PX}" height="{height}" fill="{BG_COLOR}" rx="6"/>')

    # Cells
    for index in range(BOARD_SIZE * BOARD_SIZE):
        x = MARGIN + col_of(index) * CELL_SIZE
        y = MARGIN + row_of(index) * CELL_SIZE
        parts.append(
            f'<rect x="{x + 2}" y="{y + 2}" width="{CELL_SIZE - 4}" height="{CELL_SIZE - 4}" '
            f'fill="{CELL_COLOR}" stroke="{LINE_COLOR}" stroke-width="0.5" rx="4">'
            f'<title>{format_cell(index)}</title></rect>'
        )

    # Row letters on the left, column numbers on top
    for r in range(BOARD_SIZE):
        y = MARGIN + r * CELL_SIZE + CELL_SIZE // 2 + 5
        parts.append(
            f'<text x="{MARGIN // 2}" y="{y}" text-anchor="middle" '
            f'font-size="14" font-family="monospace" fill="{LABEL_COLOR}">'
            f'{ROW_LABELS[r]}</text>'
        )
    for c in range(BOARD_SIZE):
        x = MARGIN + c * CELL_SIZE + CELL_SIZE // 2
        parts.append(
            f'<text x="{x}" y="{MARGIN - 12}" text-anchor="middle" '
            f'font-size="14" font-family="monospace" fill="{LABEL_COLOR}">'
            f'{c + 1}</text>'
        )

    # Tokens
    for index, color in enumerate(board):
        if color is None:
            continue
        x, y = _center(index)
        parts.append(
            f'<circle cx="{x}" cy="{y}" r="{TOKEN_RADIUS}" fill="{TOKEN_COLORS[color]}" '
            f'class="token" data-cell="{format_cell(index)}"/>'
        )
        parts.append(
            f'<text x="{x}" y="{y + 5}" text-anchor="middle" font-size="14" '
            f'font-family="monospace" fill="#1A1A1A">{color.value}</text>'
        )

    # Highlighted action
    if isinstance(highlight, Slide):
        x1, y1 = _center(highlight.origin)
        x2, y2 = _center(highlight.target)
        parts.append(
            f'<line x1="{x1}" y1="{y1}" x2="{x2}" y2="{y2}" stroke="{HIGHLIGHT_COLOR}" '
            f'stroke-width="4" stroke-linecap="round" class="highlight"/>'
        )
        parts.append(
            f'<circle cx="{x2}" cy="{y2}" r="{TOKEN_RADIUS + 3}" fill="none" '
            f'stroke="{HIGHLIGHT_COLOR}" stroke-width="3" stroke-dasharray="4 3"/>'
        )
    elif isinstance(highlight, Placement):
        x, y = _center(highlight.cell)
        parts.append(
            f'<circle cx="{x}" cy="{y}" r="{TOKEN_RADIUS}" fill="{TOKEN_COLORS[highlight.color]}" '
            f'opacity="0.45" class="highlight"/>'
        )
        parts.append(
            f'<circle cx="{x}" cy="{y}" r="{TOKEN_RADIUS + 3}" fill="none" '
            f'stroke="{HIGHLIGHT_COLOR}" stroke-width="3"/>'
        )

    if caption:
        parts.append(
            f'<text x="{BOARD_PX // 2}" y="{BOARD_PX + 12}" text-anchor="middle" '
            f'font-size="15" font-family="sans-serif" fill="{LABEL_COLOR}">{html.escape(caption)}</text>'
        )

    parts.append("</svg>")
    return "\n".join(parts)
