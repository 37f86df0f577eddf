"""
Typed views over the JSON columns of orders, kitchen tickets and the
delivery ledger.

Rows store plain JSON. Services parse it into these models, work on the
models, and dump them back with ``dump_*`` so the stored format keeps its
camelCase keys (``qtyChange``, ``isBasic``, ``totalQty``). Keys the models
do not name (item categories, line ids, ...) are kept as extra fields and
written back unchanged. ``variation`` and ``addons`` hold whatever JSON the
client stored; lines are only ever compared on them.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class CustomizationLine(BaseModel):
    """One variation/addon combination of an ordered item."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    variation: Any = None
    addons: Any = None
    qty: int = 0
    qty_change: int | None = Field(default=None, alias="qtyChange")
    is_basic: bool = Field(default=False, alias="isBasic")
    price: float | None = None
    instructions: str | None = None

    def same_customization(self, other: "CustomizationLine | DeliveryDetails") -> bool:
        """Structural match on variation and addons (ids are not compared)."""
        return self.variation == other.variation and self.addons == other.addons


class ItemEntry(BaseModel):
    """An item of an order: its customization lines and derived total."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str | None = None
    customizations: list[CustomizationLine] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _drop_stored_total(cls, data: Any) -> Any:
        # totalQty is derived; a stored value must not come back as an extra field
        if isinstance(data, dict) and ("totalQty" in data or "total_qty" in data):
            data = {k: v for k, v in data.items() if k not in ("totalQty", "total_qty")}
        return data

    @computed_field(alias="totalQty")  # type: ignore[misc]
    @property
    def total_qty(self) -> int:
        return sum(line.qty for line in self.customizations)


class TicketItem(BaseModel):
    """An item as printed on a kitchen order ticket."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str | None = None
    added: bool | str | None = None
    customizations: list[CustomizationLine] = Field(default_factory=list)

    def basic_line(self) -> CustomizationLine | None:
        """The line that tracks the item's primary quantity, if any."""
        for line in self.customizations:
            if line.is_basic:
                return line
        return None


class DeliveryDetails(BaseModel):
    """Customization recorded on a delivery ledger row."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    qty: int = 0
    qty_change: int | None = Field(default=None, alias="qtyChange")
    variation: Any = None
    addons: Any = None
    is_basic: bool = Field(default=False, alias="isBasic")
    price: float | None = None
    instructions: str | None = None

    @property
    def removed_qty(self) -> int:
        """Quantity taken off the source order when this row moves."""
        return self.qty_change if self.qty_change is not None else self.qty

    def to_line(self) -> CustomizationLine:
        return CustomizationLine.model_validate(self.model_dump())


ItemMap = dict[str, ItemEntry]
TicketSnapshot = dict[str, TicketItem]


# =============================================================================
# Parsing / dumping helpers
# =============================================================================


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def parse_items(json_data: dict[str, Any] | None) -> ItemMap:
    """Parse the ``items`` map of an order's ``json_data`` column."""
    raw = (json_data or {}).get("items") or {}
    return {item_id: ItemEntry.model_validate(entry) for item_id, entry in raw.items()}


def dump_items(items: ItemMap) -> dict[str, Any]:
    """Build an order ``json_data`` value from an item map."""
    return {"items": {item_id: _dump(entry) for item_id, entry in items.items()}}


def parse_ticket(notification_data: dict[str, Any] | None) -> TicketSnapshot | None:
    """Parse a ticket snapshot. None stays None (a ticket with no data)."""
    if notification_data is None:
        return None
    return {
        item_id: TicketItem.model_validate(entry)
        for item_id, entry in notification_data.items()
    }


def dump_ticket(snapshot: TicketSnapshot) -> dict[str, Any]:
    return {item_id: _dump(entry) for item_id, entry in snapshot.items()}


def parse_delivery(customization_details: dict[str, Any] | None) -> DeliveryDetails:
    return DeliveryDetails.model_validate(customization_details or {})


def dump_delivery(details: DeliveryDetails) -> dict[str, Any]:
    return _dump(details)

