"""
Request and response schemas for the table move operations.

Field names follow the external contract (camelCase) through aliases;
Python code uses the snake_case attribute names.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.utils.order_schemas import ItemEntry


def _as_token(value: Any) -> Any:
    """Identifiers arrive as strings or numbers; store them as strings."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return value


class _ContractModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# =============================================================================
# Requests
# =============================================================================


class MoveTableRequest(_ContractModel):
    """Move everything on one table to another."""

    restaurant_id: str | None = Field(default=None, alias="restaurantId")
    old_table_id: str | None = Field(default=None, alias="oldTableId")
    new_table_id: str | None = Field(default=None, alias="newTableId")
    order_id: int | None = Field(default=None, alias="orderId")

    @field_validator("restaurant_id", "old_table_id", "new_table_id", mode="before")
    @classmethod
    def _normalize_ids(cls, value: Any) -> Any:
        return _as_token(value)


class MoveKotRequest(MoveTableRequest):
    """Move a subset of kitchen order tickets."""

    notification_ids: list[int] | None = Field(default=None, alias="notificationIds")


class MoveItemInput(_ContractModel):
    """One item and the quantity of it to move."""

    item_id: str = Field(alias="itemId")
    quantity: int

    @field_validator("item_id", mode="before")
    @classmethod
    def _normalize_item_id(cls, value: Any) -> Any:
        return _as_token(value)


class MoveItemsRequest(MoveTableRequest):
    """Move part of the item quantities of one order."""

    items: list[MoveItemInput] | None = None


# =============================================================================
# Responses
# =============================================================================


class MoveResponse(_ContractModel):
    """Acknowledgement returned by every move operation."""

    success: bool
    message: str


class MoveTableResponse(MoveResponse):
    """Summary of a full table move: rows touched per satellite relation."""

    orders_updated: int = Field(default=0, alias="ordersUpdated")
    notifications_updated: int = Field(default=0, alias="notificationsUpdated")
    otp_updated: int = Field(default=0, alias="otpUpdated")
    discount_updated: int = Field(default=0, alias="discountUpdated")
    dynamic_offers_updated: int = Field(default=0, alias="dynamicOffersUpdated")
    captains_updated: int = Field(default=0, alias="captainsUpdated")


# =============================================================================
# Order upsert collaborator
# =============================================================================


class UpsertOrderRequest(_ContractModel):
    """
    Items to place on a table, creating or merging into an order.

    A caller that already planned the destination sets ``forceNewOrder`` and,
    when merging, ``targetOrderId``; the upsert then trusts that plan.
    """

    restaurant_id: str = Field(alias="restaurantId")
    table_id: str = Field(alias="tableId")
    items: dict[str, ItemEntry]
    order_type: str = Field(alias="orderType")
    order_id: int | None = Field(default=None, alias="orderId")
    force_new_order: bool | None = Field(default=None, alias="forceNewOrder")
    target_order_id: int | None = Field(default=None, alias="targetOrderId")


class UpsertOrderResult(_ContractModel):
    """Outcome of an order upsert."""

    order_id: int = Field(alias="orderId")
    created: bool
    notification_id: int | None = Field(default=None, alias="notificationId")
