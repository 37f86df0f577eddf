"""
Redis Channel and Key Naming.

All restaurant-scoped names go through these helpers so producers and
subscribers agree on the format.
"""

from __future__ import annotations


def _validate_token(value: str, name: str) -> None:
    """Identifiers become part of Redis names and must be non-empty strings."""
    if not isinstance(value, str) or not value or ":" in value:
        raise ValueError(f"{name} must be a non-empty string without ':', got {value!r}")


def channel_restaurant_audience(restaurant_id: str, audience: str) -> str:
    """Channel for one staff audience (captain, biller, ...) of a restaurant."""
    _validate_token(restaurant_id, "restaurant_id")
    _validate_token(audience, "audience")
    return f"restaurant:{restaurant_id}:{audience}"


def table_session_key(prefix: str, restaurant_id: str, table_id: str) -> str:
    """Redis key holding the diner session of a table."""
    _validate_token(restaurant_id, "restaurant_id")
    _validate_token(table_id, "table_id")
    return f"{prefix}:{restaurant_id}:{table_id}"
