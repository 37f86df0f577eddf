"""
Move operations.

Each operation parses its payload, runs its service in one transaction,
fires the post-commit side effects of a table move, and reports a single
``MoveResult``. Nothing here raises for expected failures.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.config.constants import MoveMessages
from shared.config.logging import table_moves_logger as logger
from shared.infrastructure.db import transaction
from shared.utils.schemas import (
    MoveItemsRequest,
    MoveKotRequest,
    MoveResponse,
    MoveTableRequest,
    MoveTableResponse,
)
from .collaborators import MoveCollaborators, default_collaborators
from .item_mover import ItemMoveService
from .result import ErrorKind, MoveResult, MoveValidationError, SourceOrderNotFoundError
from .table_mover import TableMoveService
from .ticket_mover import TicketMoveService

RequestT = TypeVar("RequestT", bound=MoveTableRequest)


def _parse(model: type[RequestT], data: Any) -> RequestT:
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True)
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        errors = e.errors()
        field = ".".join(str(part) for part in errors[0]["loc"]) if errors else None
        raise MoveValidationError(
            f"Invalid value for {field}" if field else MoveMessages.MISSING_FIELDS,
            errors=len(errors),
        ) from e


def _run(
    operation: str,
    db: Session,
    data: Any,
    model: type[RequestT],
    execute: Callable[[RequestT, TableMoveService], MoveResponse],
    collaborators: MoveCollaborators,
) -> MoveResult:
    table_mover: TableMoveService | None = None
    request: RequestT | None = None

    try:
        request = _parse(model, data)
        table_mover = TableMoveService(
            db, collaborators.session_migration, collaborators.dispatcher
        )
        with transaction(db):
            response = execute(request, table_mover)
    except MoveValidationError as e:
        logger.warning(f"{operation} rejected", reason=e.message, **e.context)
        return MoveResult.failure(ErrorKind.VALIDATION, e.message)
    except SourceOrderNotFoundError as e:
        logger.warning(f"{operation} rejected", reason=e.message, **e.context)
        return MoveResult.failure(ErrorKind.NOT_FOUND, e.message)
    except PydanticValidationError as e:
        # Requests are parsed above, so this is a stored payload that does not parse
        logger.error(
            f"{operation} failed, stored payload unreadable",
            restaurant_id=request.restaurant_id if request else None,
            old_table_id=request.old_table_id if request else None,
            new_table_id=request.new_table_id if request else None,
            error=str(e),
            exc_info=True,
        )
        return MoveResult.failure(ErrorKind.STORAGE, MoveMessages.STORAGE_FAILURE)
    except SQLAlchemyError as e:
        logger.error(
            f"{operation} failed, transaction rolled back",
            restaurant_id=request.restaurant_id if request else None,
            old_table_id=request.old_table_id if request else None,
            new_table_id=request.new_table_id if request else None,
            error=str(e),
            exc_info=True,
        )
        return MoveResult.failure(ErrorKind.STORAGE, MoveMessages.STORAGE_FAILURE)

    # Delegated partial moves come back as a table move summary
    if isinstance(response, MoveTableResponse):
        table_mover.announce(request)

    return MoveResult.success(response)


def move_table(
    db: Session,
    data: Any,
    collaborators: MoveCollaborators | None = None,
) -> MoveResult:
    """Move everything on ``oldTableId`` to ``newTableId``."""
    collaborators = collaborators or default_collaborators()
    return _run(
        "Table move",
        db,
        data,
        MoveTableRequest,
        lambda request, table_mover: table_mover.apply(request),
        collaborators,
    )


def move_kot(
    db: Session,
    data: Any,
    collaborators: MoveCollaborators | None = None,
) -> MoveResult:
    """Move the tickets in ``notificationIds`` to ``newTableId``."""
    collaborators = collaborators or default_collaborators()
    upsert = collaborators.upsert

    def execute(request: MoveKotRequest, table_mover: TableMoveService) -> MoveResponse:
        return TicketMoveService(db, table_mover, upsert).move(request)

    return _run("KOT move", db, data, MoveKotRequest, execute, collaborators)


def move_items(
    db: Session,
    data: Any,
    collaborators: MoveCollaborators | None = None,
) -> MoveResult:
    """Move the quantities in ``items`` to ``newTableId``."""
    collaborators = collaborators or default_collaborators()
    upsert = collaborators.upsert

    def execute(request: MoveItemsRequest, table_mover: TableMoveService) -> MoveResponse:
        return ItemMoveService(db, table_mover, upsert).move(request)

    return _run("Item move", db, data, MoveItemsRequest, execute, collaborators)
