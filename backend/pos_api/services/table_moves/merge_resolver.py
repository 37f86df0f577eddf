"""
Merge Resolver.

Decides what happens when orders arrive on a table that already has
orders: merge into an open one, keep a printed one untouched, or start a
new order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy.orm import Session

from shared.config.logging import get_logger
from shared.utils.order_schemas import ItemMap
from pos_api.models import Order
from pos_api.repositories import (
    DeliveryRepository,
    NotificationRepository,
    OrderRepository,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class DestinationPlan:
    """Where new items for a table should go."""

    force_new_order: bool
    target: Order | None


def pick_merge_target(destination_orders: Sequence[Order]) -> Order | None:
    """
    First order that has not been printed, else the first order.

    ``destination_orders`` must already be sorted by print status, then
    age. A printed target is never merged into.
    """
    for order in destination_orders:
        if not order.print_status:
            return order
    return destination_orders[0] if destination_orders else None


def merge_item_maps(target: ItemMap, source: ItemMap) -> ItemMap:
    """Union of two item maps; items on both sides keep all their lines."""
    merged: ItemMap = {
        item_id: entry.model_copy(update={"customizations": list(entry.customizations)})
        for item_id, entry in target.items()
    }
    for item_id, entry in source.items():
        if item_id in merged:
            merged[item_id].customizations.extend(entry.customizations)
        else:
            merged[item_id] = entry
    return merged


def merge_instructions(*instructions: str | None) -> str:
    return "\n".join(text for text in instructions if text)


class MergeResolver:
    """Applies merge decisions on the caller's session."""

    def __init__(self, db: Session):
        self._db = db
        self._orders = OrderRepository(db)
        self._tickets = NotificationRepository(db)
        self._deliveries = DeliveryRepository(db)

    def plan_destination(self, restaurant_id: str, table_id: str) -> DestinationPlan:
        """
        Orders exist but all are printed: force a new order. An open order
        exists: merge into the oldest one. No orders: create one.
        """
        orders = self._orders.list_for_table(restaurant_id, table_id, lock=True)
        eligible = next((order for order in orders if not order.print_status), None)
        return DestinationPlan(
            force_new_order=bool(orders) and eligible is None,
            target=eligible,
        )

    def merge_into(self, target: Order, source: Order) -> None:
        """
        Fold ``source`` into ``target`` and delete ``source``.

        Active tickets and every ledger row of the source follow it to the
        target order and table.
        """
        merged = merge_item_maps(
            self._orders.get_items(target),
            self._orders.get_items(source),
        )
        self._orders.save_items(target, merged)
        target.instructions = merge_instructions(target.instructions, source.instructions)

        tickets = self._tickets.repoint_to_order(
            target.restaurant_id, source.id, target.id, target.table_id
        )
        deliveries = self._deliveries.repoint_to_order(source.id, target.id)
        logger.info(
            "Order merged",
            source_order_id=source.id,
            target_order_id=target.id,
            tickets_repointed=tickets,
            deliveries_repointed=deliveries,
        )
        self._orders.delete(source)

    def reassign(self, source: Order, table_id: str) -> None:
        """Move ``source`` to ``table_id`` as a separate order."""
        self._orders.relabel_table(source, table_id)
        logger.info("Order reassigned", order_id=source.id, table_id=table_id)
