"""
Event System for real-time staff notifications via Redis pub/sub.

- circuit_breaker.py: Circuit breaker and retry jitter
- event_types.py: Event type constants
- event_schema.py: Event dataclass with validation
- channels.py: Channel and key naming
- redis_pool.py: Sync connection pool management
- publisher.py: publish_event with retry
"""

from .circuit_breaker import (
    CircuitState,
    EventCircuitBreaker,
    get_event_circuit_breaker,
    calculate_retry_delay_with_jitter,
)
from .event_types import (
    TABLE_MOVED,
    TABLE_MOVE_COMPLETED,
    MAX_EVENT_SIZE,
)
from .event_schema import Event
from .channels import (
    channel_restaurant_audience,
    table_session_key,
)
from .redis_pool import (
    get_redis_sync_client,
    close_redis_sync_client,
)
from .publisher import publish_event

__all__ = [
    # Circuit breaker
    "CircuitState",
    "EventCircuitBreaker",
    "get_event_circuit_breaker",
    "calculate_retry_delay_with_jitter",
    # Event types
    "TABLE_MOVED",
    "TABLE_MOVE_COMPLETED",
    "MAX_EVENT_SIZE",
    # Schema
    "Event",
    # Channels
    "channel_restaurant_audience",
    "table_session_key",
    # Redis pool
    "get_redis_sync_client",
    "close_redis_sync_client",
    # Publishing
    "publish_event",
]
