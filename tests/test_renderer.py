from betaentropy.game.board import CELL_COUNT, Board
from betaentropy.game.types import PASS, Color, Placement, Slide
from betaentropy.ui.board_component import TOKEN_COLORS, render_board_svg


def board_with(cells: dict[int, Color]) -> Board:
    return Board(cells.get(i) for i in range(CELL_COUNT))


def test_empty_board_svg():
    html = render_board_svg(Board())
    assert "<svg" in html
    assert "</svg>" in html
    assert "entropy-board" in html
    # One labelled cell per square, no tokens
    assert html.count("<title>") == 49
    assert html.count('class="token"') == 0


def test_svg_with_tokens():
    html = render_board_svg(board_with({0: Color.RED, 48: Color.BLUE}))
    assert html.count('class="token"') == 2
    assert 'data-cell="a1"' in html
    assert 'data-cell="g7"' in html
    assert TOKEN_COLORS[Color.RED] in html


def test_no_highlight_by_default():
    html = render_board_svg(board_with({24: Color.RED}))
    assert 'class="highlight"' not in html


def test_slide_highlight_draws_a_line():
    html = render_board_svg(board_with({24: Color.RED}), highlight=Slide(24, 3))
    assert "<line" in html
    assert 'class="highlight"' in html


def test_placement_highlight_is_a_ghost_token():
    html = render_board_svg(Board(), highlight=Placement(10, Color.GREEN))
    assert 'opacity="0.45"' in html
    assert TOKEN_COLORS[Color.GREEN] in html


def test_pass_has_no_highlight():
    html = render_board_svg(board_with({24: Color.RED}), highlight=PASS)
    assert 'class="highlight"' not in html


def test_caption_is_escaped():
    html = render_board_svg(Board(), caption="<b>Mover</b>")
    assert "&lt;b&gt;Mover&lt;/b&gt;" in html
    assert "<b>" not in html
