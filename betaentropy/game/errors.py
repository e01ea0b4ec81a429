from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    ERR_BOARD_LENGTH = "ERR_BOARD_LENGTH"
    ERR_UNKNOWN_SYMBOL = "ERR_UNKNOWN_SYMBOL"
    ERR_MISSING_COLOR = "ERR_MISSING_COLOR"
    ERR_UNKNOWN_ROLE = "ERR_UNKNOWN_ROLE"
    ERR_BAG_OVERFLOW = "ERR_BAG_OVERFLOW"
    ERR_BAD_ADDRESS = "ERR_BAD_ADDRESS"
    ERR_ILLEGAL_ACTION = "ERR_ILLEGAL_ACTION"


class InvalidStateError(ValueError):
    """Raised at the input boundary when a game state cannot be built.

    Attributes:
        code: ErrorCode enum
        details: structured context (e.g. {'index': 12, 'symbol': 'X'})
    """

    def __init__(
        self,
        code: ErrorCode,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.code = code
        self.details = details or {}
        super().__init__(message or code.value)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code.value, "message": str(self), "details": self.details}
