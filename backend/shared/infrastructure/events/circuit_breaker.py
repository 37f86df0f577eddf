"""
Circuit Breaker for Redis publishing.

Stops hammering Redis while it is down: after a run of failures the
breaker opens and publishes fail fast until the recovery timeout passes.
Also provides the jittered backoff used between publish retries.
"""

from __future__ import annotations

import random
import threading
import time
from enum import Enum

from shared.config.settings import settings
from shared.config.logging import get_logger

logger = get_logger(__name__)


class CircuitState(Enum):
    """States of the circuit breaker."""
    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failure mode - calls rejected
    HALF_OPEN = "half_open"  # Recovery probing


class EventCircuitBreaker:
    """Thread-safe circuit breaker guarding Redis publish calls."""

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 30.0,
        half_open_max_calls: int = 3,
    ):
        self._failure_threshold = failure_threshold
        self._recovery_timeout = recovery_timeout
        self._half_open_max_calls = half_open_max_calls

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: float = 0
        self._half_open_calls = 0
        self._rejected_count = 0
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    def can_execute(self) -> bool:
        """Return True when a call may proceed."""
        with self._lock:
            if self._state == CircuitState.OPEN:
                if time.monotonic() - self._last_failure_time < self._recovery_timeout:
                    self._rejected_count += 1
                    return False
                self._state = CircuitState.HALF_OPEN
                self._half_open_calls = 0
                logger.info("Event circuit breaker transitioning to HALF_OPEN")

            if self._state == CircuitState.HALF_OPEN:
                if self._half_open_calls >= self._half_open_max_calls:
                    self._rejected_count += 1
                    return False
                self._half_open_calls += 1

            return True

    def record_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = time.monotonic()

            if self._state == CircuitState.HALF_OPEN:
                self._state = CircuitState.OPEN
                logger.error("Event circuit breaker OPEN (half-open probe failed)")
            elif self._failure_count >= self._failure_threshold:
                self._state = CircuitState.OPEN
                logger.error(
                    "Event circuit breaker OPEN",
                    failure_count=self._failure_count,
                    threshold=self._failure_threshold,
                )

    def record_success(self) -> None:
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                logger.info("Event circuit breaker recovered to CLOSED")
            self._state = CircuitState.CLOSED
            self._failure_count = 0

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "state": self._state.value,
                "failure_count": self._failure_count,
                "rejected_count": self._rejected_count,
            }


_event_circuit_breaker: EventCircuitBreaker | None = None
_circuit_breaker_lock = threading.Lock()


def get_event_circuit_breaker() -> EventCircuitBreaker:
    """Get or create the process-wide breaker."""
    global _event_circuit_breaker
    if _event_circuit_breaker is None:
        with _circuit_breaker_lock:
            if _event_circuit_breaker is None:
                _event_circuit_breaker = EventCircuitBreaker(
                    failure_threshold=settings.redis_publish_max_retries + 2,
                )
    return _event_circuit_breaker


def calculate_retry_delay_with_jitter(attempt: int, base_delay: float = 0.5) -> float:
    """
    Exponential backoff with decorrelated jitter, capped at 10 seconds.

    Args:
        attempt: Current attempt number (0-indexed)
        base_delay: Base delay in seconds
    """
    exp_delay = min(base_delay * (2 ** attempt), 10.0)
    return random.uniform(base_delay, exp_delay)
