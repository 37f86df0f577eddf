"""
Order Model: the canonical order document of a table.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import Boolean, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from shared.config.constants import OrderType
from .base import JSON_TYPE, Base, TimestampMixin


class Order(TimestampMixin, Base):
    """
    An open order on a table.

    ``json_data`` holds ``{"items": {item_id: ItemEntry}}``. A table may
    carry several orders at once; ``print_status`` tells apart the ones
    already sent to a kitchen printer (never merged into) from the ones
    still open for merging. An order whose item map is empty is deleted.
    """

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    table_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    json_data: Mapped[dict[str, Any]] = mapped_column(JSON_TYPE, nullable=False, default=dict)
    instructions: Mapped[Optional[str]] = mapped_column(Text)
    print_status: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    order_type: Mapped[str] = mapped_column(Text, default=OrderType.CAPTAIN, nullable=False)

    __table_args__ = (
        # Orders of a table, the lookup every move starts with
        Index("ix_orders_restaurant_table", "restaurant_id", "table_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, table_id={self.table_id!r}, "
            f"print_status={self.print_status})>"
        )
