"""Analyze tab: enter a position and ask the engine for its decision."""

from __future__ import annotations

import time as _time
from dataclasses import dataclass
from typing import Optional

import gradio as gr

from betaentropy.agent.base import Action
from betaentropy.agent.engine import decide_mover_turn, decide_placer_turn
from betaentropy.agent.evaluator import DEFAULT_WEIGHTS, evaluation_components
from betaentropy.agent.placement import STRATEGIES
from betaentropy.agent.search import TIME_BUDGET
from betaentropy.game.board import Board, GameState, format_action, parse_state
from betaentropy.game.errors import InvalidStateError
from betaentropy.game.moves import apply_action, apply_placement
from betaentropy.game.scoring import score
from betaentropy.game.types import Color, Placement, Role
from betaentropy.ui.board_component import render_board_svg

COLOR_CHOICES = [c.value for c in Color]
ROLE_CHOICES = [r.value for r in Role]
STRATEGY_CHOICES = list(STRATEGIES)

EMPTY_BOARD_TEXT = "\n".join(["......."] * 7)


@dataclass
class AnalysisSession:
    """Per-tab analysis state held in gr.State."""

    state: Optional[GameState] = None
    action: Optional[Action] = None
    elapsed: float = 0.0

    @property
    def status_text(self) -> str:
        if self.state is None:
            return "Enter a position and press Analyze."
        board = self.state.board
        head = f"Score {score(board)} | {board.filled_count} filled | phase {self.state.phase.value}"
        if self.action is None:
            return head
        role = str(self.state.active_role)
        return f"{head}\n{role} plays {format_action(self.action)} ({self.elapsed:.2f}s)"

    @property
    def component_table(self) -> list[list[str]]:
        if self.state is None:
            return []
        parts = evaluation_components(self.state.board, self.state.announced_color)
        rows: list[list[str]] = []
        for name, value in parts._asdict().items():
            weight = getattr(DEFAULT_WEIGHTS, name)
            rows.append([name, f"{value:.2f}", f"{weight:+.0f}", f"{weight * value:.1f}"])
        rows.append(["total", "", "", f"{parts.weighted(DEFAULT_WEIGHTS):.1f}"])
        return rows


def _board_html(session: AnalysisSession) -> str:
    board = session.state.board if session.state is not None else Board()
    return render_board_svg(board, highlight=session.action)


def _analyze(
    board_text: str,
    color_text: str,
    role_text: str,
    strategy_choice: str,
    time_budget: float,
    session: AnalysisSession,
):
    """Validate the inputs, then run the engine for the active role."""
    try:
        state = parse_state(board_text, color_text, role_text)
    except InvalidStateError as exc:
        session.state, session.action = None, None
        return (
            _board_html(session),
            f"Invalid input [{exc.code.value}]: {exc}",
            [],
            session,
        )

    session.state = state
    t0 = _time.time()
    try:
        if state.active_role is Role.MOVER:
            session.action = decide_mover_turn(state, time_budget=float(time_budget))
        else:
            session.action = decide_placer_turn(state, strategy_choice)
    except InvalidStateError as exc:
        session.action = None
        return (_board_html(session), f"Cannot decide [{exc.code.value}]: {exc}", session.component_table, session)
    session.elapsed = _time.time() - t0

    return (
        _board_html(session),
        session.status_text,
        session.component_table,
        session,
    )


def _apply_suggestion(session: AnalysisSession):
    """Play the suggested action and hand the turn to the other role."""
    if session.state is None or session.action is None:
        return (
            EMPTY_BOARD_TEXT if session.state is None else session.state.board.rows_text(),
            ROLE_CHOICES[0],
            _board_html(session),
            "Nothing to apply; press Analyze first.",
            session,
        )

    state = session.state
    if isinstance(session.action, Placement):
        board = apply_placement(state.board, session.action)
    else:
        board = apply_action(state.board, session.action)
    next_role = state.active_role.other
    session.state = GameState(board, state.announced_color, next_role)
    session.action = None

    return (
        board.rows_text(),
        next_role.value,
        _board_html(session),
        session.status_text,
        session,
    )


def build_analyze_tab() -> None:
    """Construct the Analyze tab UI inside a gr.Blocks context."""

    session_state = gr.State(AnalysisSession())

    with gr.Row():
        # Left: board
        with gr.Column(scale=3):
            board_html = gr.HTML(value=render_board_svg(Board()), label="Board")
        # Right: controls
        with gr.Column(scale=2):
            board_text = gr.Textbox(
                value=EMPTY_BOARD_TEXT,
                label="Board (7 rows, '.' = empty, letters R G B Y P O C)",
                lines=7,
                elem_id="board-text",
            )
            with gr.Row():
                color_choice = gr.Dropdown(
                    choices=COLOR_CHOICES,
                    value=COLOR_CHOICES[0],
                    label="Announced color",
                )
                role_choice = gr.Radio(
                    choices=ROLE_CHOICES,
                    value=ROLE_CHOICES[0],
                    label="Active role",
                )
            strategy_choice = gr.Dropdown(
                choices=STRATEGY_CHOICES,
                value="hybrid",
                label="Placer strategy",
            )
            budget = gr.Slider(
                minimum=0.3,
                maximum=TIME_BUDGET,
                value=TIME_BUDGET,
                step=0.1,
                label="Mover time budget (s)",
            )
            with gr.Row():
                analyze_btn = gr.Button("Analyze", variant="primary")
                apply_btn = gr.Button("Apply suggestion")
            status_text = gr.Textbox(
                value=AnalysisSession().status_text,
                label="Status",
                interactive=False,
                lines=3,
            )
            gr.Markdown("### Evaluation")
            component_table = gr.Dataframe(
                headers=["Component", "Raw", "Weight", "Weighted"],
                datatype=["str", "str", "str", "str"],
                interactive=False,
                column_count=4,
            )

    analyze_btn.click(
        fn=_analyze,
        inputs=[board_text, color_choice, role_choice, strategy_choice, budget, session_state],
        outputs=[board_html, status_text, component_table, session_state],
    )

    apply_btn.click(
        fn=_apply_suggestion,
        inputs=[session_state],
        outputs=[board_text, role_choice, board_html, status_text, session_state],
    )
