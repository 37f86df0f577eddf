"""
Table moves: relocate orders, kitchen tickets and delivery ledger rows
from one table to another.

- operations.py: move_table / move_kot / move_items returning MoveResult
- api.py: direct-call adapters (dict in, dict out, AppException on failure)
- table_mover.py, item_mover.py, ticket_mover.py: domain services
- merge_resolver.py: merge, reassign or create on the destination table
- reconciler.py: quantity arithmetic over orders, tickets and the ledger
- collaborators.py: order upsert, session migration and notification dispatch
"""

from .collaborators import (
    MoveCollaborators,
    NotificationDispatch,
    OrderUpsertService,
    RedisNotificationDispatcher,
    RedisSessionMigrator,
    SessionMigration,
    UpsertOrder,
    default_collaborators,
)
from .item_mover import ItemMoveService
from .merge_resolver import DestinationPlan, MergeResolver, pick_merge_target
from .operations import move_items, move_kot, move_table
from .result import ErrorKind, MoveResult, MoveValidationError, SourceOrderNotFoundError
from .table_mover import TableMoveService
from .ticket_mover import TicketMoveService

__all__ = [
    # Operations
    "move_table",
    "move_kot",
    "move_items",
    "MoveResult",
    "ErrorKind",
    "MoveValidationError",
    "SourceOrderNotFoundError",
    # Services
    "TableMoveService",
    "ItemMoveService",
    "TicketMoveService",
    "MergeResolver",
    "DestinationPlan",
    "pick_merge_target",
    # Collaborators
    "MoveCollaborators",
    "UpsertOrder",
    "SessionMigration",
    "NotificationDispatch",
    "OrderUpsertService",
    "RedisSessionMigrator",
    "RedisNotificationDispatcher",
    "default_collaborators",
]
