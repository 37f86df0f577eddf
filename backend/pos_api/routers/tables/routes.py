"""
Tables router.
Moves a table's orders, kitchen tickets and items to another table.

Bodies are read as plain JSON objects and validated by the move
operations, so a malformed body is answered with the usual
{"success": false, "message"} shape and status 400.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import MoveResponse, MoveTableResponse
from pos_api.services.table_moves import (
    ErrorKind,
    MoveCollaborators,
    MoveResult,
    default_collaborators,
    move_items,
    move_kot,
    move_table,
)


router = APIRouter(prefix="/api/tables", tags=["tables"])


_STATUS_BY_ERROR = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.STORAGE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_FAILURES = {
    400: {"model": MoveResponse},
    404: {"model": MoveResponse},
    500: {"model": MoveResponse},
}


def get_move_collaborators() -> MoveCollaborators:
    """Dependency: collaborators used by the move operations."""
    return default_collaborators()


def _respond(result: MoveResult) -> JSONResponse:
    status_code = status.HTTP_200_OK if result.ok else _STATUS_BY_ERROR[result.error]
    return JSONResponse(status_code=status_code, content=result.body())


@router.post("/move", response_model=MoveTableResponse, responses=_FAILURES)
def move_table_endpoint(
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    collaborators: MoveCollaborators = Depends(get_move_collaborators),
) -> JSONResponse:
    """
    Move everything on oldTableId to newTableId.

    Open orders are merged into the destination's open order; printed
    orders keep their own row.
    """
    return _respond(move_table(db, payload, collaborators))


@router.post("/move-kot", response_model=MoveResponse, responses=_FAILURES)
def move_kot_endpoint(
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    collaborators: MoveCollaborators = Depends(get_move_collaborators),
) -> JSONResponse:
    """Move the kitchen tickets listed in notificationIds to newTableId."""
    return _respond(move_kot(db, payload, collaborators))


@router.post("/move-items", response_model=MoveResponse, responses=_FAILURES)
def move_items_endpoint(
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    collaborators: MoveCollaborators = Depends(get_move_collaborators),
) -> JSONResponse:
    """Move part of one order's item quantities to newTableId."""
    return _respond(move_items(db, payload, collaborators))
