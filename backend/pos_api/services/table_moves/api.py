"""
Direct-call adapters for the move operations.

Return the contract body as a dict on success and raise the shared
``AppException`` types on failure. A rejected ``move_kot`` request is the
exception: it comes back as ``{"success": False, "message": ...}``.

Usage:
    with get_db_context() as db:
        summary = move_table(db, {"restaurantId": "r1", "oldTableId": "4", "newTableId": "9"})
"""

from typing import Any

from sqlalchemy.orm import Session

from shared.utils.exceptions import DatabaseError, NotFoundError, ValidationError
from . import operations
from .collaborators import MoveCollaborators
from .result import ErrorKind, MoveResult


def _move_context(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        return {}
    return {
        "restaurant_id": data.get("restaurantId"),
        "old_table_id": data.get("oldTableId"),
        "new_table_id": data.get("newTableId"),
    }


def _unwrap(result: MoveResult, operation: str, data: Any) -> dict[str, Any]:
    if result.ok:
        return result.body()
    context = _move_context(data)
    if result.error is ErrorKind.VALIDATION:
        raise ValidationError(result.message, operation=operation, **context)
    if result.error is ErrorKind.NOT_FOUND:
        raise NotFoundError("Order on source table", operation=operation, **context)
    raise DatabaseError(operation, **context)


def move_table(
    db: Session,
    data: dict[str, Any],
    collaborators: MoveCollaborators | None = None,
) -> dict[str, Any]:
    return _unwrap(operations.move_table(db, data, collaborators), "move_table", data)


def move_kot(
    db: Session,
    data: dict[str, Any],
    collaborators: MoveCollaborators | None = None,
) -> dict[str, Any]:
    result = operations.move_kot(db, data, collaborators)
    if result.error is ErrorKind.VALIDATION:
        return result.body()
    return _unwrap(result, "move_kot", data)


def move_items(
    db: Session,
    data: dict[str, Any],
    collaborators: MoveCollaborators | None = None,
) -> dict[str, Any]:
    return _unwrap(operations.move_items(db, data, collaborators), "move_items", data)
