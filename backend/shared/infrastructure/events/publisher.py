"""
Event Publishing with Retry and Validation.

Publishes through the sync Redis pool, retrying with jittered backoff and
failing fast while the circuit breaker is open.
"""

from __future__ import annotations

import time

import redis

from shared.config.settings import settings
from shared.config.logging import get_logger
from .event_types import MAX_EVENT_SIZE
from .event_schema import Event
from .circuit_breaker import get_event_circuit_breaker, calculate_retry_delay_with_jitter

logger = get_logger(__name__)


def _validate_event_size(event_json: str, event_type: str) -> None:
    """Raise ValueError when the serialized event exceeds MAX_EVENT_SIZE."""
    size = len(event_json.encode("utf-8"))
    if size > MAX_EVENT_SIZE:
        raise ValueError(
            f"Event {event_type} exceeds max size: {size} > {MAX_EVENT_SIZE} bytes"
        )


def publish_event(
    redis_client: redis.Redis,
    channel: str,
    event: Event,
) -> int:
    """
    Publish an event to a Redis channel.

    Args:
        redis_client: Sync Redis client.
        channel: Redis channel name.
        event: Event to publish.

    Returns:
        Number of subscribers that received the message.
        Returns 0 if the circuit breaker is open.

    Raises:
        ValueError: If event is too large.
        redis.RedisError: If all retries fail.
    """
    event_json = event.to_json()
    _validate_event_size(event_json, event.type)

    circuit_breaker = get_event_circuit_breaker()
    if not circuit_breaker.can_execute():
        logger.warning(
            "Event publish skipped - circuit breaker open",
            channel=channel,
            event_type=event.type,
        )
        return 0

    last_error: redis.RedisError | None = None
    for attempt in range(settings.redis_publish_max_retries):
        try:
            result = redis_client.publish(channel, event_json)
            circuit_breaker.record_success()
            return result
        except redis.RedisError as e:
            last_error = e
            if attempt < settings.redis_publish_max_retries - 1:
                delay = calculate_retry_delay_with_jitter(
                    attempt, settings.redis_publish_retry_delay
                )
                logger.warning(
                    "Redis publish failed, retrying",
                    channel=channel,
                    event_type=event.type,
                    attempt=attempt + 1,
                    max_retries=settings.redis_publish_max_retries,
                    delay_seconds=round(delay, 2),
                    error=str(e),
                )
                time.sleep(delay)
            else:
                logger.error(
                    "Redis publish failed after all retries",
                    channel=channel,
                    event_type=event.type,
                    error=str(e),
                )

    circuit_breaker.record_failure()
    raise last_error  # type: ignore[misc]
