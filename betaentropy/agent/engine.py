"""Decision entry points: one call per turn, for either role."""

from __future__ import annotations

import logging
from typing import Optional, Union

from betaentropy.agent.base import Action, Agent
from betaentropy.agent.placement import STRATEGIES, PlacementStrategy
from betaentropy.agent.search import TIME_BUDGET, MoverSearch
from betaentropy.game.board import GameState, format_action
from betaentropy.game.errors import ErrorCode, InvalidStateError
from betaentropy.game.moves import is_legal_placement, is_legal_slide
from betaentropy.game.types import MoverAction, Placement, Role, Slide

logger = logging.getLogger(__name__)

DEFAULT_STRATEGY = "hybrid"


def _strategy_for(strategy: Union[str, PlacementStrategy]) -> PlacementStrategy:
    if isinstance(strategy, PlacementStrategy):
        return strategy
    try:
        return STRATEGIES[strategy]()
    except KeyError:
        raise ValueError(
            f"Unknown placement strategy {strategy!r}; choose from {sorted(STRATEGIES)}"
        ) from None


def decide_mover_turn(
    state: GameState,
    time_budget: Optional[float] = TIME_BUDGET,
    search: Optional[MoverSearch] = None,
) -> MoverAction:
    """Best slide, or PASS, within the time budget."""
    search = search or MoverSearch(time_budget=time_budget)
    result = search.search(state)
    action = result.action
    if isinstance(action, Slide):
        assert is_legal_slide(state.board, action), f"Search returned illegal slide {action}"
    logger.info(
        "mover plays %s (value=%.1f depth=%d nodes=%d %.3fs)",
        format_action(action), result.value, result.depth, result.nodes, result.elapsed,
    )
    return action


def decide_placer_turn(
    state: GameState,
    strategy: Union[str, PlacementStrategy] = DEFAULT_STRATEGY,
) -> Placement:
    """Cell for the announced color, chosen by the named strategy."""
    chooser = _strategy_for(strategy)
    placement = chooser.choose(state)
    assert is_legal_placement(state.board, placement), f"Strategy chose occupied cell {placement}"
    logger.info("placer (%s) plays %s", chooser.name, format_action(placement))
    return placement


class EntropyAgent(Agent):
    """Plays whichever role the state says is active."""

    def __init__(
        self,
        time_budget: Optional[float] = TIME_BUDGET,
        strategy: Union[str, PlacementStrategy] = DEFAULT_STRATEGY,
        max_depth: Optional[int] = None,
    ) -> None:
        self.time_budget = time_budget
        self.strategy = _strategy_for(strategy)
        kwargs = {} if max_depth is None else {"max_depth": max_depth}
        self.search = MoverSearch(time_budget=time_budget, **kwargs)

    @property
    def name(self) -> str:
        return f"EntropyAgent({self.strategy.name}, d<={self.search.max_depth})"

    def select_move(self, game_state: GameState) -> Action:
        if game_state.active_role is Role.MOVER:
            return decide_mover_turn(game_state, search=self.search)
        if game_state.active_role is Role.PLACER:
            return decide_placer_turn(game_state, self.strategy)
        raise InvalidStateError(
            ErrorCode.ERR_UNKNOWN_ROLE,
            f"Unknown role {game_state.active_role!r}",
            {"role": repr(game_state.active_role)},
        )
