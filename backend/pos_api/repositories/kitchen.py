"""
Kitchen Repositories - Data access for kitchen order tickets and the
delivery ledger.
"""

from typing import Sequence

from sqlalchemy import delete, func, select, update

from pos_api.models import Notification, OrderCustomizationDelivery
from shared.config.constants import NotificationAction
from shared.utils.order_schemas import (
    DeliveryDetails,
    TicketSnapshot,
    dump_delivery,
    dump_ticket,
)
from .base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Repository for kitchen order tickets (KOTs)."""

    @property
    def model(self) -> type[Notification]:
        return Notification

    def _active_kots(self, restaurant_id: str, order_id: int):
        return (
            Notification.restaurant_id == restaurant_id,
            Notification.order_id == order_id,
            Notification.action_type.in_(NotificationAction.KOT),
            Notification.active.is_(True),
        )

    def list_active_kots(self, restaurant_id: str, order_id: int) -> Sequence[Notification]:
        """Active KOTs of an order, oldest first."""
        query = (
            select(Notification)
            .where(*self._active_kots(restaurant_id, order_id))
            .order_by(Notification.created_at.asc(), Notification.notification_id.asc())
        )
        return self._db.execute(query).scalars().all()

    def count_active_kots(self, restaurant_id: str, order_id: int) -> int:
        query = (
            select(func.count())
            .select_from(Notification)
            .where(*self._active_kots(restaurant_id, order_id))
        )
        return self._db.scalar(query) or 0

    def find_for_order(
        self,
        restaurant_id: str,
        order_id: int,
        notification_ids: list[int],
    ) -> Sequence[Notification]:
        """Tickets among ``notification_ids`` that belong to the order."""
        if not notification_ids:
            return []
        query = (
            select(Notification)
            .where(
                Notification.restaurant_id == restaurant_id,
                Notification.order_id == order_id,
                Notification.notification_id.in_(notification_ids),
            )
            .order_by(Notification.notification_id.asc())
        )
        return self._db.execute(query).scalars().all()

    def save_snapshot(self, ticket: Notification, snapshot: TicketSnapshot) -> None:
        ticket.notification_data = dump_ticket(snapshot)
        self._db.flush()

    def delete_many(self, tickets: Sequence[Notification]) -> int:
        ids = [t.notification_id for t in tickets]
        if not ids:
            return 0
        result = self._db.execute(
            delete(Notification)
            .where(Notification.notification_id.in_(ids))
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def repoint_to_order(
        self,
        restaurant_id: str,
        source_order_id: int,
        target_order_id: int,
        table_number: str,
    ) -> int:
        """Move the active tickets of a merged-away order onto its target."""
        result = self._db.execute(
            update(Notification)
            .where(
                Notification.restaurant_id == restaurant_id,
                Notification.order_id == source_order_id,
                Notification.active.is_(True),
            )
            .values(order_id=target_order_id, table_number=table_number)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def relabel_table(self, restaurant_id: str, old_table_id: str, new_table_id: str) -> int:
        result = self._db.execute(
            update(Notification)
            .where(
                Notification.restaurant_id == restaurant_id,
                Notification.table_number == old_table_id,
                Notification.active.is_(True),
            )
            .values(table_number=new_table_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def create_kot(
        self,
        restaurant_id: str,
        order_id: int,
        table_number: str,
        action_type: str,
        snapshot: TicketSnapshot,
        order_type: str,
    ) -> Notification:
        ticket = Notification(
            restaurant_id=restaurant_id,
            order_id=order_id,
            table_number=table_number,
            action_type=action_type,
            notification_data=dump_ticket(snapshot),
            order_type=order_type,
            active=True,
        )
        return self.add(ticket)


class DeliveryRepository(BaseRepository[OrderCustomizationDelivery]):
    """Repository for the per-customization delivery ledger."""

    @property
    def model(self) -> type[OrderCustomizationDelivery]:
        return OrderCustomizationDelivery

    def list_outstanding(self, order_id: int) -> Sequence[OrderCustomizationDelivery]:
        """Undelivered, uncancelled rows of an order in fetch order."""
        query = (
            select(OrderCustomizationDelivery)
            .where(
                OrderCustomizationDelivery.order_id == order_id,
                OrderCustomizationDelivery.delivered.is_(False),
                OrderCustomizationDelivery.cancelled.is_(False),
            )
            .order_by(OrderCustomizationDelivery.id.asc())
        )
        return self._db.execute(query).scalars().all()

    def list_for_notifications(self, notification_ids: list[int]) -> Sequence[OrderCustomizationDelivery]:
        if not notification_ids:
            return []
        query = (
            select(OrderCustomizationDelivery)
            .where(OrderCustomizationDelivery.notification_id.in_(notification_ids))
            .order_by(OrderCustomizationDelivery.id.asc())
        )
        return self._db.execute(query).scalars().all()

    def save_details(self, row: OrderCustomizationDelivery, details: DeliveryDetails) -> None:
        row.customization_details = dump_delivery(details)
        self._db.flush()

    def repoint_to_order(self, source_order_id: int, target_order_id: int) -> int:
        result = self._db.execute(
            update(OrderCustomizationDelivery)
            .where(OrderCustomizationDelivery.order_id == source_order_id)
            .values(order_id=target_order_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def delete_for_notifications(self, notification_ids: list[int]) -> int:
        if not notification_ids:
            return 0
        result = self._db.execute(
            delete(OrderCustomizationDelivery)
            .where(OrderCustomizationDelivery.notification_id.in_(notification_ids))
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def record(
        self,
        notification_id: int,
        order_id: int,
        item_id: str,
        details: DeliveryDetails,
    ) -> OrderCustomizationDelivery:
        row = OrderCustomizationDelivery(
            notification_id=notification_id,
            order_id=order_id,
            item_id=item_id,
            customization_details=dump_delivery(details),
            delivered=False,
            cancelled=False,
        )
        return self.add(row)
