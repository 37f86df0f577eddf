"""
Move outcomes.

Every move operation ends in one ``MoveResult``: either ``ok`` with the
response body, or an error tagged with an ``ErrorKind``. The direct-call
and HTTP boundaries each translate it exactly once.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from shared.utils.schemas import MoveResponse


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STORAGE = "storage"


class MoveValidationError(Exception):
    """Request is malformed or refers to items the order does not hold."""

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.context = context
        super().__init__(message)


class SourceOrderNotFoundError(Exception):
    """The order to move from is not on the source table."""

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.context = context
        super().__init__(message)


@dataclass(frozen=True)
class MoveResult:
    ok: bool
    message: str
    response: MoveResponse | None = None
    error: ErrorKind | None = None

    @classmethod
    def success(cls, response: MoveResponse) -> "MoveResult":
        return cls(ok=True, message=response.message, response=response)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> "MoveResult":
        return cls(ok=False, message=message, error=error)

    def body(self) -> dict[str, Any]:
        """Contract body (camelCase keys) for either outcome."""
        if self.response is not None:
            return self.response.model_dump(by_alias=True)
        return {"success": False, "message": self.message}
