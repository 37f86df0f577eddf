"""
Domain services of the POS API.
"""

from .table_moves import (
    MoveCollaborators,
    MoveResult,
    ErrorKind,
    default_collaborators,
    move_items,
    move_kot,
    move_table,
)

__all__ = [
    "MoveCollaborators",
    "MoveResult",
    "ErrorKind",
    "default_collaborators",
    "move_items",
    "move_kot",
    "move_table",
]
