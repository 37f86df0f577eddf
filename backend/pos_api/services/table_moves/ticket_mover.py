"""
Ticket Move Service.

Moves a chosen set of kitchen order tickets (KOTs) to another table. The
tickets' ledger rows say exactly which lines they carried; those lines are
placed on the new table and taken off the source order.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from shared.config.constants import MoveMessages
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.utils.order_schemas import parse_delivery
from shared.utils.schemas import MoveKotRequest, MoveResponse, UpsertOrderRequest
from pos_api.repositories import (
    DeliveryRepository,
    NotificationRepository,
    OrderRepository,
)
from .collaborators import UpsertOrder
from .merge_resolver import MergeResolver
from .reconciler import items_from_deliveries, subtract_delivered_lines
from .result import MoveValidationError
from .table_mover import TableMoveService

logger = get_logger(__name__)


class TicketMoveService:
    """Domain service for moving a subset of an order's tickets."""

    def __init__(
        self,
        db: Session,
        table_mover: TableMoveService,
        upsert: UpsertOrder,
        order_type: str | None = None,
    ):
        self._db = db
        self._orders = OrderRepository(db)
        self._tickets = NotificationRepository(db)
        self._deliveries = DeliveryRepository(db)
        self._resolver = MergeResolver(db)
        self._table_mover = table_mover
        self._upsert = upsert
        self._order_type = order_type or settings.default_order_type

    @staticmethod
    def validate_request(request: MoveKotRequest) -> list[int]:
        """Return the requested ticket ids without duplicates, in request order."""
        if (
            not request.restaurant_id
            or not request.old_table_id
            or not request.new_table_id
            or request.order_id is None
            or not request.notification_ids
        ):
            raise MoveValidationError(MoveMessages.MISSING_FIELDS)
        if any(notification_id < 1 for notification_id in request.notification_ids):
            raise MoveValidationError("Notification ids must be positive integers")
        return list(dict.fromkeys(request.notification_ids))

    def move(self, request: MoveKotRequest) -> MoveResponse:
        """
        Move the requested tickets to the new table.

        When as many distinct ids are requested as the order has active
        tickets, the whole table moves. Only the count is compared.

        The source order is written back even when it ends up empty.

        Raises:
            MoveValidationError: Malformed request.
        """
        requested = self.validate_request(request)
        restaurant_id = request.restaurant_id

        order = self._orders.find_by_id(restaurant_id, request.order_id)
        active = self._tickets.count_active_kots(restaurant_id, request.order_id)
        if len(requested) == active:
            logger.info(
                "Every ticket of the order requested, moving table",
                order_id=request.order_id,
                tickets=active,
                old_table_id=request.old_table_id,
                new_table_id=request.new_table_id,
            )
            return self._table_mover.apply(request)

        tickets = self._tickets.find_for_order(restaurant_id, request.order_id, requested)
        ticket_ids = [ticket.notification_id for ticket in tickets]
        rows = self._deliveries.list_for_notifications(ticket_ids)
        deliveries = [(row.item_id, parse_delivery(row.customization_details)) for row in rows]
        self._tickets.delete_many(tickets)

        source_items = self._orders.get_items(order) if order is not None else {}
        destination = items_from_deliveries(
            deliveries,
            names={item_id: entry.name for item_id, entry in source_items.items()},
        )
        if destination:
            plan = self._resolver.plan_destination(restaurant_id, request.new_table_id)
            self._upsert.upsert(
                self._db,
                UpsertOrderRequest(
                    restaurant_id=restaurant_id,
                    table_id=request.new_table_id,
                    items=destination,
                    order_type=self._order_type,
                    order_id=request.order_id,
                    force_new_order=plan.force_new_order,
                    target_order_id=plan.target.id if plan.target else None,
                ),
            )
        self._deliveries.delete_for_notifications(ticket_ids)

        if order is not None:
            self._orders.save_items(order, subtract_delivered_lines(source_items, deliveries))

        logger.info(
            "Tickets moved",
            restaurant_id=restaurant_id,
            order_id=request.order_id,
            old_table_id=request.old_table_id,
            new_table_id=request.new_table_id,
            tickets_requested=len(requested),
            tickets_moved=len(ticket_ids),
            ledger_rows=len(rows),
        )
        return MoveResponse(success=True, message=MoveMessages.KOT_MOVED)
