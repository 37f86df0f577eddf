"""
Table satellite models: TableOtp, Discount, DynamicOffer, Captain.

These rows reference a table by its token and are relabelled when the
table's state moves elsewhere.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import JSON_TYPE, Base, TimestampMixin


class TableOtp(TimestampMixin, Base):
    """One-time password diners use to join a table session."""

    __tablename__ = "table_otps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    table_id: Mapped[str] = mapped_column(Text, nullable=False)
    otp: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        Index("ix_table_otps_restaurant_table", "restaurant_id", "table_id"),
    )


class Discount(TimestampMixin, Base):
    """A discount applied to whatever is on a table."""

    __tablename__ = "discounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    table_number: Mapped[str] = mapped_column(Text, nullable=False)
    percentage: Mapped[Optional[int]] = mapped_column(Integer)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        Index("ix_discounts_restaurant_table", "restaurant_id", "table_number"),
    )


class DynamicOffer(TimestampMixin, Base):
    """An offer attached to one order on one table."""

    __tablename__ = "dynamic_offers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    order_id: Mapped[Optional[int]] = mapped_column(Integer, index=True)
    table_id: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Captain(TimestampMixin, Base):
    """Floor staff member with a JSON array of assigned table tokens."""

    __tablename__ = "captains"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    assigned_tables: Mapped[list[str]] = mapped_column(JSON_TYPE, nullable=False, default=list)
