from __future__ import annotations

import abc
from typing import Union

from betaentropy.game.board import GameState
from betaentropy.game.types import MoverAction, Placement

Action = Union[MoverAction, Placement]


class Agent(abc.ABC):
    @abc.abstractmethod
    def select_move(self, game_state: GameState) -> Action:
        """Return a slide or pass for the mover, a placement for the placer."""

    @property
    def name(self) -> str:
        return self.__class__.__name__
