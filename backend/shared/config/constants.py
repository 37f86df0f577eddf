"""
Centralized constants for the backend application.
Avoid magic strings for ticket action types, order types and messages.

Usage:
    from shared.config.constants import NotificationAction, OrderType

    if ticket.action_type in NotificationAction.KOT:
        ...
"""

from typing import Final


# =============================================================================
# Kitchen Order Tickets
# =============================================================================


class NotificationAction:
    """Action types stored on kitchen order tickets (KOTs)."""

    CREATED: Final[str] = "order_created"
    UPDATED: Final[str] = "order-updated"

    # Action types that represent a ticket shown to the kitchen
    KOT: Final[tuple[str, ...]] = (CREATED, UPDATED)


class OrderType:
    """Origin of an order."""

    CAPTAIN: Final[str] = "captain"
    BILLER: Final[str] = "biller"
    ONLINE: Final[str] = "online"


# =============================================================================
# Table move messages
# =============================================================================


class MoveMessages:
    """User-facing messages returned by the move operations."""

    TABLE_MOVED: Final[str] = "Table moved successfully"
    KOT_MOVED: Final[str] = "KOT moved successfully"
    ITEMS_MOVED: Final[str] = "Items moved successfully"
    MISSING_FIELDS: Final[str] = "Missing required fields"
    ORDER_NOT_FOUND: Final[str] = "Order not found on source table"
    STORAGE_FAILURE: Final[str] = "Database error while moving table state"

    MOVE_COMPLETED_TITLE: Final[str] = "Table Move Completed"
