"""
Centralized HTTP exceptions for consistent error handling.

Usage:
    from shared.utils.exceptions import NotFoundError, ValidationError

    raise NotFoundError("Order on source table", operation="move_items", table_id="4")
    raise ValidationError("Missing required fields", operation="move_table")
"""

from fastapi import HTTPException, status
from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Order", 123, operation="move_kot")
        raise NotFoundError("Order on source table", operation="move_items")
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Missing required fields", operation="move_table")
        raise ValidationError("Invalid value for items.0.quantity", operation="move_items")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("Failed to move table", restaurant_id="r1", old_table_id="4")
    """

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """
    A move transaction failed and was rolled back.

    Usage:
        raise DatabaseError("move_table")
    """

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Database error during {operation}. Please try again."
        super().__init__(detail, operation=operation, **log_context)
