"""
SQLAlchemy ORM Models Package.

- base: Base class, JSON_TYPE and TimestampMixin
- order: Order
- kitchen: Notification (KOT), OrderCustomizationDelivery (delivery ledger)
- table: TableOtp, Discount, DynamicOffer, Captain
"""

from .base import Base, JSON_TYPE, TimestampMixin
from .order import Order
from .kitchen import Notification, OrderCustomizationDelivery
from .table import TableOtp, Discount, DynamicOffer, Captain

__all__ = [
    "Base",
    "JSON_TYPE",
    "TimestampMixin",
    "Order",
    "Notification",
    "OrderCustomizationDelivery",
    "TableOtp",
    "Discount",
    "DynamicOffer",
    "Captain",
]
