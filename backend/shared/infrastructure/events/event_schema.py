"""
Event Schema.

Defines the Event dataclass published to restaurant staff channels.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class Event:
    """
    Notification event sent to one audience of a restaurant.

    ``active`` marks a silent signal: clients refresh their state
    without showing ``title``/``message`` to staff.
    """

    type: str
    restaurant_id: str
    audience: str
    title: str = ""
    message: str = ""
    payload: dict[str, Any] = field(default_factory=dict)
    active: bool = False
    ts: str | None = None
    v: int = 1  # Schema version for future compatibility

    def __post_init__(self) -> None:
        """Reject malformed events before they reach Redis."""
        if not self.type or not isinstance(self.type, str):
            raise ValueError("Event type must be a non-empty string")

        if not self.restaurant_id or not isinstance(self.restaurant_id, str):
            raise ValueError("Event restaurant_id must be a non-empty string")

        if not self.audience or not isinstance(self.audience, str):
            raise ValueError("Event audience must be a non-empty string")

        if self.payload is not None and not isinstance(self.payload, dict):
            raise ValueError("Event payload must be a dict or None")

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        data = asdict(self)
        data["payload"] = data["payload"] or {}
        data["ts"] = data["ts"] or datetime.now(timezone.utc).isoformat()
        return json.dumps(data, ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> "Event":
        """Deserialize event from JSON string. Validation runs in __post_init__."""
        data = json.loads(json_str)
        return cls(**data)
