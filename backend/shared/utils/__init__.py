"""
Utilities module: Exceptions and schemas.
"""

from shared.utils.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
    InternalError,
    DatabaseError,
)
from shared.utils.schemas import (
    MoveTableRequest,
    MoveKotRequest,
    MoveItemsRequest,
    MoveResponse,
    MoveTableResponse,
)

__all__ = [
    # exceptions
    "AppException",
    "NotFoundError",
    "ValidationError",
    "InternalError",
    "DatabaseError",
    # schemas
    "MoveTableRequest",
    "MoveKotRequest",
    "MoveItemsRequest",
    "MoveResponse",
    "MoveTableResponse",
]
