"""
Collaborators used by the movers.

The movers only see the three protocols below. Default implementations
place orders through the ORM and reach staff devices and table sessions
through Redis. Tests inject recording fakes instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import redis
from sqlalchemy.orm import Session

from shared.config.constants import NotificationAction
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.events import (
    TABLE_MOVED,
    Event,
    channel_restaurant_audience,
    get_redis_sync_client,
    publish_event,
    table_session_key,
)
from shared.utils.order_schemas import (
    DeliveryDetails,
    ItemEntry,
    ItemMap,
    TicketItem,
)
from shared.utils.schemas import UpsertOrderRequest, UpsertOrderResult
from pos_api.models import Order
from pos_api.repositories import (
    DeliveryRepository,
    NotificationRepository,
    OrderRepository,
)
from .merge_resolver import MergeResolver

logger = get_logger(__name__)


# =============================================================================
# Contracts
# =============================================================================


class UpsertOrder(Protocol):
    def upsert(self, db: Session, request: UpsertOrderRequest) -> UpsertOrderResult:
        ...


class SessionMigration(Protocol):
    def migrate(self, restaurant_id: str, old_table_id: str, new_table_id: str) -> None:
        ...


class NotificationDispatch(Protocol):
    def send(
        self,
        title: str,
        message: str,
        payload: dict[str, Any],
        restaurant_id: str,
        audience: str,
        active: bool = False,
        *,
        event_type: str = TABLE_MOVED,
    ) -> None:
        ...


# =============================================================================
# Order upsert
# =============================================================================


class OrderUpsertService:
    """
    Places items on a table inside the caller's transaction.

    Items merge into the oldest open order of the table unless a new order
    is forced. Every upsert prints a kitchen ticket for the added items and
    records one outstanding ledger row per line, so the items can move
    again from their new table.
    """

    def upsert(self, db: Session, request: UpsertOrderRequest) -> UpsertOrderResult:
        orders = OrderRepository(db)
        target = None if request.force_new_order else self._find_target(db, request)

        if target is None:
            order = orders.create(
                request.restaurant_id,
                request.table_id,
                request.items,
                request.order_type,
            )
            action_type = NotificationAction.CREATED
            created = True
        else:
            order = target
            orders.save_items(order, self._merge_lines(orders.get_items(order), request.items))
            action_type = NotificationAction.UPDATED
            created = False

        ticket = NotificationRepository(db).create_kot(
            restaurant_id=request.restaurant_id,
            order_id=order.id,
            table_number=request.table_id,
            action_type=action_type,
            snapshot={
                item_id: TicketItem(
                    name=entry.name,
                    added=True,
                    customizations=[line.model_copy() for line in entry.customizations],
                )
                for item_id, entry in request.items.items()
            },
            order_type=request.order_type,
        )

        deliveries = DeliveryRepository(db)
        for item_id, entry in request.items.items():
            for line in entry.customizations:
                deliveries.record(
                    notification_id=ticket.notification_id,
                    order_id=order.id,
                    item_id=item_id,
                    details=DeliveryDetails.model_validate(line.model_dump()),
                )

        logger.info(
            "Order upserted",
            restaurant_id=request.restaurant_id,
            table_id=request.table_id,
            order_id=order.id,
            created=created,
            notification_id=ticket.notification_id,
        )
        return UpsertOrderResult(
            order_id=order.id,
            created=created,
            notification_id=ticket.notification_id,
        )

    def _find_target(self, db: Session, request: UpsertOrderRequest) -> Order | None:
        orders = OrderRepository(db)
        # A named order is only a merge target while it is open on this table
        if request.order_id is not None:
            named = orders.find_on_table(request.restaurant_id, request.order_id, request.table_id)
            if named is not None and not named.print_status:
                return named
        if request.force_new_order is None:
            return MergeResolver(db).plan_destination(request.restaurant_id, request.table_id).target
        if request.target_order_id is None:
            return None
        # Planned by the caller, which already holds the lock on this row
        return orders.get(request.target_order_id)

    @staticmethod
    def _merge_lines(current: ItemMap, incoming: dict[str, ItemEntry]) -> ItemMap:
        merged: ItemMap = {
            item_id: entry.model_copy(
                update={"customizations": [line.model_copy() for line in entry.customizations]}
            )
            for item_id, entry in current.items()
        }
        for item_id, entry in incoming.items():
            existing = merged.get(item_id)
            if existing is None:
                merged[item_id] = entry.model_copy(
                    update={"customizations": [line.model_copy() for line in entry.customizations]}
                )
                continue
            for line in entry.customizations:
                match = next(
                    (old for old in existing.customizations if old.same_customization(line)),
                    None,
                )
                if match is None:
                    existing.customizations.append(line.model_copy())
                else:
                    match.qty += line.qty
        return merged


# =============================================================================
# Redis-backed side effects
# =============================================================================


@dataclass
class RedisSessionMigrator:
    """
    Moves a table's diner session in Redis.

    The session hash lives at ``{prefix}:{restaurant}:{table}`` with
    sub-keys under ``{prefix}:{restaurant}:{table}:*``. Every key is renamed
    to the new table; keys already on the new table are overwritten.
    """

    client: redis.Redis | None = None
    prefix: str = field(default_factory=lambda: settings.table_session_key_prefix)

    def migrate(self, restaurant_id: str, old_table_id: str, new_table_id: str) -> None:
        client = self.client or get_redis_sync_client()
        old_key = table_session_key(self.prefix, restaurant_id, old_table_id)
        new_key = table_session_key(self.prefix, restaurant_id, new_table_id)

        keys = [old_key, *client.scan_iter(match=f"{old_key}:*")]
        moved = 0
        for key in keys:
            if not client.exists(key):
                continue
            client.rename(key, new_key + key[len(old_key):])
            moved += 1

        logger.info(
            "Table session migrated",
            restaurant_id=restaurant_id,
            old_table_id=old_table_id,
            new_table_id=new_table_id,
            keys_moved=moved,
        )


@dataclass
class RedisNotificationDispatcher:
    """Publishes staff notifications on ``restaurant:{id}:{audience}``."""

    client: redis.Redis | None = None

    def send(
        self,
        title: str,
        message: str,
        payload: dict[str, Any],
        restaurant_id: str,
        audience: str,
        active: bool = False,
        *,
        event_type: str = TABLE_MOVED,
    ) -> None:
        event = Event(
            type=event_type,
            restaurant_id=restaurant_id,
            audience=audience,
            title=title,
            message=message,
            payload=payload,
            active=active,
        )
        channel = channel_restaurant_audience(restaurant_id, audience)
        receivers = publish_event(self.client or get_redis_sync_client(), channel, event)
        logger.debug(
            "Notification dispatched",
            channel=channel,
            event_type=event_type,
            receivers=receivers,
        )


# =============================================================================
# Wiring
# =============================================================================


@dataclass
class MoveCollaborators:
    upsert: UpsertOrder
    session_migration: SessionMigration
    dispatcher: NotificationDispatch


def default_collaborators() -> MoveCollaborators:
    return MoveCollaborators(
        upsert=OrderUpsertService(),
        session_migration=RedisSessionMigrator(),
        dispatcher=RedisNotificationDispatcher(),
    )
