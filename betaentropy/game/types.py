from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union


class Color(enum.Enum):
    RED = "R"
    GREEN = "G"
    BLUE = "B"
    YELLOW = "Y"
    PURPLE = "P"
    ORANGE = "O"
    CYAN = "C"

    @property
    def symbol(self) -> str:
        return self.value

    @classmethod
    def from_symbol(cls, symbol: str) -> Color:
        return cls(symbol.strip().upper())

    def __str__(self) -> str:
        return self.name.capitalize()


class Role(enum.Enum):
    PLACER = "placer"
    MOVER = "mover"

    @property
    def other(self) -> Role:
        return Role.MOVER if self is Role.PLACER else Role.PLACER

    def __str__(self) -> str:
        return self.name.capitalize()


class Phase(enum.Enum):
    EARLY = "early"
    MID = "mid"
    LATE = "late"


@dataclass(frozen=True)
class Slide:
    origin: int  # 0..48, row-major
    target: int


class Pass:
    """The mover declines to slide. Use the module-level PASS instance."""

    _instance: Pass | None = None

    def __new__(cls) -> Pass:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "PASS"


PASS = Pass()

MoverAction = Union[Slide, Pass]


@dataclass(frozen=True)
class Placement:
    cell: int
    color: Color
