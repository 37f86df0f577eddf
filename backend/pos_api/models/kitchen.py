"""
Kitchen Models: Notification (kitchen order ticket), OrderCustomizationDelivery.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import Boolean, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from shared.config.constants import OrderType
from .base import JSON_TYPE, Base, TimestampMixin


class Notification(TimestampMixin, Base):
    """
    A kitchen order ticket (KOT): what kitchen staff have already seen.

    ``notification_data`` is a snapshot ``{item_id: TicketItem}``. When
    quantities move off the order, the snapshot is adjusted; tickets with no
    data or with every line at zero are deleted.
    """

    __tablename__ = "notifications"

    notification_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    order_id: Mapped[Optional[int]] = mapped_column(Integer, index=True)
    table_number: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    action_type: Mapped[str] = mapped_column(Text, nullable=False)  # order_created, order-updated
    notification_data: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON_TYPE, nullable=True)
    order_type: Mapped[str] = mapped_column(Text, default=OrderType.CAPTAIN, nullable=False)
    captain_id: Mapped[Optional[int]] = mapped_column(Integer)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        Index("ix_notifications_restaurant_order", "restaurant_id", "order_id"),
        Index("ix_notifications_restaurant_table", "restaurant_id", "table_number"),
    )

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.notification_id}, order_id={self.order_id}, "
            f"action_type={self.action_type!r}, active={self.active})>"
        )


class OrderCustomizationDelivery(Base):
    """
    Delivery ledger row: one customization of one item on one ticket.

    Rows that are neither delivered nor cancelled are outstanding and are
    the only quantities that may move off a table.
    """

    __tablename__ = "order_customization_deliveries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    notification_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    order_id: Mapped[Optional[int]] = mapped_column(Integer, index=True)
    item_id: Mapped[str] = mapped_column(Text, nullable=False)
    customization_details: Mapped[dict[str, Any]] = mapped_column(JSON_TYPE, nullable=False, default=dict)
    delivered: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    cancelled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("ix_deliveries_order_outstanding", "order_id", "delivered", "cancelled"),
    )
