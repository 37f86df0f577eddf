"""
Repository layer. Repositories share the caller's session and never commit.
"""

from .base import BaseRepository
from .order import OrderRepository
from .kitchen import NotificationRepository, DeliveryRepository
from .table import TableSatelliteRepository

__all__ = [
    "BaseRepository",
    "OrderRepository",
    "NotificationRepository",
    "DeliveryRepository",
    "TableSatelliteRepository",
]
