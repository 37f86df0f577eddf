"""
Infrastructure module: Database and Redis/events.

Provides:
- Database sessions and transactions (db.py)
- Redis pub/sub for staff notifications (events/)
- Request correlation IDs (correlation.py)
"""

from shared.infrastructure.db import (
    engine,
    SessionLocal,
    get_db,
    get_db_context,
    transaction,
)
from shared.infrastructure.events import (
    get_redis_sync_client,
    close_redis_sync_client,
    publish_event,
)

__all__ = [
    # db
    "engine",
    "SessionLocal",
    "get_db",
    "get_db_context",
    "transaction",
    # events (Redis)
    "get_redis_sync_client",
    "close_redis_sync_client",
    "publish_event",
]
