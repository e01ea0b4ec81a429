from __future__ import annotations

import random
from typing import Optional

from betaentropy.game.board import GameState
from betaentropy.game.moves import mover_actions
from betaentropy.game.types import Placement, Role

from .base import Action, Agent


class RandomAgent(Agent):
    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def select_move(self, game_state: GameState) -> Action:
        board = game_state.board
        if game_state.active_role is Role.MOVER:
            return self._rng.choice(mover_actions(board))
        cells = board.empty_cells()
        assert cells, "No empty cells to place on"
        assert game_state.announced_color is not None, "Placer needs an announced color"
        return Placement(self._rng.choice(cells), game_state.announced_color)
