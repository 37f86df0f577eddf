"""
Quantity reconciliation between the three views of an order.

An order's item map, the kitchen tickets already shown to staff, and the
delivery ledger all record how much of an item was ordered. When part of
an order moves, these functions work out the new quantities of each view.
They work on parsed payloads only and never touch the session.

Ticket snapshots and ledger details are reduced in place, so several
items of one request accumulate on the same parsed objects. Item maps are
rebuilt and returned.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from shared.utils.order_schemas import (
    CustomizationLine,
    DeliveryDetails,
    ItemEntry,
    ItemMap,
    TicketSnapshot,
)


@dataclass
class LedgerEntry:
    """An outstanding delivery ledger row, parsed."""

    record_id: int
    ticket_id: int
    item_id: str
    details: DeliveryDetails


def total_qty(entry: ItemEntry) -> int:
    return sum(line.qty for line in entry.customizations)


# =============================================================================
# Order item maps
# =============================================================================


def build_destination_item(entry: ItemEntry, quantity: int) -> ItemEntry:
    """
    Copy of ``entry`` for the destination table.

    Every line gets the requested quantity. Lines are not split in
    proportion: two lines of 2 and 3 moved with quantity 4 arrive as 4 and 4.
    """
    lines = [line.model_copy(update={"qty": quantity}) for line in entry.customizations]
    return entry.model_copy(update={"customizations": lines})


def reduce_source_item(entry: ItemEntry, quantity: int) -> ItemEntry | None:
    """
    What stays on the source table after ``quantity`` is taken.

    The quantity comes off every line and lines are clipped at zero. An
    over-request empties the line instead of failing. Returns None when no
    line is left.
    """
    lines = [
        line.model_copy(update={"qty": max(0, line.qty - quantity)})
        for line in entry.customizations
    ]
    lines = [line for line in lines if line.qty > 0]
    if not lines:
        return None
    return entry.model_copy(update={"customizations": lines})


def subtract_delivered_lines(
    items: ItemMap,
    deliveries: Iterable[tuple[str, DeliveryDetails]],
) -> ItemMap:
    """
    Take ledger quantities back out of an item map.

    Each ledger row reduces the first line with the same variation and
    addons by its ``qtyChange`` (or ``qty`` when there is none). Lines at or
    below zero are dropped, then items without lines.
    """
    reduced: ItemMap = {
        item_id: entry.model_copy(
            update={"customizations": [line.model_copy() for line in entry.customizations]}
        )
        for item_id, entry in items.items()
    }

    for item_id, details in deliveries:
        entry = reduced.get(item_id)
        if entry is None:
            continue
        for index, line in enumerate(entry.customizations):
            if line.same_customization(details):
                line.qty -= details.removed_qty
                if line.qty <= 0:
                    del entry.customizations[index]
                break
        if not entry.customizations:
            del reduced[item_id]

    return reduced


def items_from_deliveries(
    deliveries: Iterable[tuple[str, DeliveryDetails]],
    names: Mapping[str, str | None] | None = None,
) -> ItemMap:
    """Rebuild an item map from ledger rows, one line per row in row order."""
    items: ItemMap = {}
    for item_id, details in deliveries:
        entry = items.get(item_id)
        if entry is None:
            name = names.get(item_id) if names else None
            entry = items[item_id] = ItemEntry(name=name)
        entry.customizations.append(details.to_line())
    return items


# =============================================================================
# Delivery ledger
# =============================================================================


def drain_ledger(
    ledger: Sequence[LedgerEntry],
    ticket_ids: Sequence[int],
    item_id: str,
    quantity: int,
) -> set[int]:
    """
    Take ``quantity`` of ``item_id`` out of the outstanding ledger.

    Tickets are visited in ``ticket_ids`` order. Each one gives up at most
    what its rows still record as outstanding for the item, spread over the
    rows in fetch order. Returns the ids of the rows that changed.
    """
    by_ticket: dict[int, list[LedgerEntry]] = defaultdict(list)
    for entry in ledger:
        if entry.item_id == item_id:
            by_ticket[entry.ticket_id].append(entry)

    remaining = quantity
    changed: set[int] = set()
    for ticket_id in ticket_ids:
        if remaining <= 0:
            break
        rows = by_ticket.get(ticket_id)
        if not rows:
            continue

        budget = min(remaining, sum(row.details.qty for row in rows))
        for row in rows:
            if budget <= 0:
                break
            take = min(budget, row.details.qty)
            if take <= 0:
                continue
            row.details.qty -= take
            budget -= take
            remaining -= take
            changed.add(row.record_id)

    return changed


# =============================================================================
# Kitchen tickets
# =============================================================================


def reduce_ticket_snapshots(
    tickets: Sequence[tuple[int, TicketSnapshot | None]],
    item_id: str,
    quantity: int,
) -> set[int]:
    """
    Take ``quantity`` of ``item_id`` off the tickets' basic lines.

    ``tickets`` must be oldest first. Each ticket gives up to its basic
    line's quantity; ``qtyChange`` drops by the same amount when present.
    Returns the ids of the tickets that changed.
    """
    remaining = quantity
    changed: set[int] = set()
    for ticket_id, snapshot in tickets:
        if remaining <= 0:
            break
        if not snapshot or item_id not in snapshot:
            continue

        basic: CustomizationLine | None = snapshot[item_id].basic_line()
        if basic is None or basic.qty <= 0:
            continue

        take = min(remaining, basic.qty)
        basic.qty -= take
        if basic.qty_change is not None:
            basic.qty_change -= take
        remaining -= take
        changed.add(ticket_id)

    return changed


def is_consumed_ticket(snapshot: TicketSnapshot | None) -> bool:
    """A ticket with no data, or with no line above zero, has nothing left to show."""
    if not snapshot:
        return True
    return not any(
        line.qty > 0
        for item in snapshot.values()
        for line in item.customizations
    )
