"""
Item Move Service.

Moves part of the item quantities of one order to another table, keeping
the order, its kitchen tickets and its delivery ledger in step.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from shared.config.constants import MoveMessages
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.utils.order_schemas import ItemMap, parse_delivery, parse_ticket
from shared.utils.schemas import (
    MoveItemInput,
    MoveItemsRequest,
    MoveResponse,
    UpsertOrderRequest,
)
from pos_api.repositories import (
    DeliveryRepository,
    NotificationRepository,
    OrderRepository,
)
from .collaborators import UpsertOrder
from .merge_resolver import MergeResolver
from .reconciler import (
    LedgerEntry,
    build_destination_item,
    drain_ledger,
    is_consumed_ticket,
    reduce_source_item,
    reduce_ticket_snapshots,
    total_qty,
)
from .result import MoveValidationError, SourceOrderNotFoundError
from .table_mover import TableMoveService

logger = get_logger(__name__)


class ItemMoveService:
    """
    Domain service for partial item moves.

    A request that takes every item of the order at its full quantity is a
    table move and is handed to ``TableMoveService``.
    """

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
    def validate_request(request: MoveItemsRequest) -> list[MoveItemInput]:
        """Checks that need nothing from the database."""
        if (
            not request.restaurant_id
            or not request.old_table_id
            or not request.new_table_id
            or request.order_id is None
            or not request.items
        ):
            raise MoveValidationError(MoveMessages.MISSING_FIELDS)

        seen: set[str] = set()
        for move in request.items:
            if move.quantity < 1:
                raise MoveValidationError("Quantity must be at least 1", item_id=move.item_id)
            if move.item_id in seen:
                raise MoveValidationError(f"Item {move.item_id} requested more than once")
            seen.add(move.item_id)
        return request.items

    def move(self, request: MoveItemsRequest) -> MoveResponse:
        """
        Move the requested quantities to the new table.

        Returns the table move summary when the request covers the whole
        order.

        Raises:
            MoveValidationError: Malformed request or unknown item.
            SourceOrderNotFoundError: Order is not on the old table.
        """
        moves = self.validate_request(request)
        restaurant_id = request.restaurant_id

        order = self._orders.find_on_table(restaurant_id, request.order_id, request.old_table_id)
        if order is None:
            raise SourceOrderNotFoundError(
                MoveMessages.ORDER_NOT_FOUND,
                order_id=request.order_id,
                table_id=request.old_table_id,
            )
        tickets = self._tickets.list_active_kots(restaurant_id, order.id)
        ledger_rows = self._deliveries.list_outstanding(order.id)
        items = self._orders.get_items(order)

        for move in moves:
            if move.item_id not in items:
                raise MoveValidationError(f"Item {move.item_id} not found in the order")

        if self._is_full_move(moves, items):
            logger.info(
                "Every item requested at full quantity, moving table",
                order_id=order.id,
                old_table_id=request.old_table_id,
                new_table_id=request.new_table_id,
            )
            return self._table_mover.apply(request)

        ledger = [
            LedgerEntry(
                record_id=row.id,
                ticket_id=row.notification_id,
                item_id=row.item_id,
                details=parse_delivery(row.customization_details),
            )
            for row in ledger_rows
        ]
        snapshots = [(t.notification_id, parse_ticket(t.notification_data)) for t in tickets]
        ticket_ids = [t.notification_id for t in tickets]

        destination: ItemMap = {}
        remaining: ItemMap = dict(items)
        drained: set[int] = set()
        touched: set[int] = set()
        for move in moves:
            entry = items[move.item_id]
            destination[move.item_id] = build_destination_item(entry, move.quantity)

            reduced = reduce_source_item(entry, move.quantity)
            if reduced is None:
                del remaining[move.item_id]
            else:
                remaining[move.item_id] = reduced

            # Ledger first: it bounds what may leave the table
            drained |= drain_ledger(ledger, ticket_ids, move.item_id, move.quantity)
            touched |= reduce_ticket_snapshots(snapshots, move.item_id, move.quantity)

        rows_by_id = {row.id: row for row in ledger_rows}
        for entry in ledger:
            if entry.record_id in drained:
                self._deliveries.save_details(rows_by_id[entry.record_id], entry.details)

        consumed = []
        for ticket, (_, snapshot) in zip(tickets, snapshots):
            if is_consumed_ticket(snapshot):
                consumed.append(ticket)
            elif ticket.notification_id in touched:
                self._tickets.save_snapshot(ticket, snapshot)
        self._tickets.delete_many(consumed)

        if remaining:
            self._orders.save_items(order, remaining)
        else:
            self._orders.delete(order)

        plan = self._resolver.plan_destination(restaurant_id, request.new_table_id)
        result = self._upsert.upsert(
            self._db,
            UpsertOrderRequest(
                restaurant_id=restaurant_id,
                table_id=request.new_table_id,
                items=destination,
                order_type=self._order_type,
                force_new_order=plan.force_new_order,
                target_order_id=plan.target.id if plan.target else None,
            ),
        )

        logger.info(
            "Items moved",
            restaurant_id=restaurant_id,
            order_id=request.order_id,
            old_table_id=request.old_table_id,
            new_table_id=request.new_table_id,
            items=len(moves),
            ledger_rows_drained=len(drained),
            tickets_deleted=len(consumed),
            source_deleted=not remaining,
            destination_order_id=result.order_id,
        )
        return MoveResponse(success=True, message=MoveMessages.ITEMS_MOVED)

    @staticmethod
    def _is_full_move(moves: list[MoveItemInput], items: ItemMap) -> bool:
        if {move.item_id for move in moves} != set(items):
            return False
        return all(move.quantity == total_qty(items[move.item_id]) for move in moves)
