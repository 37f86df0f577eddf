"""
Tests for kitchen ticket (KOT) moves.
"""

import pytest

from pos_api.services.table_moves import ErrorKind, move_kot
from pos_api.services.table_moves import api
from shared.config.constants import NotificationAction


def _payload(seed, order, *notification_ids, **extra):
    return {
        "restaurantId": seed.restaurant_id,
        "oldTableId": "T1",
        "newTableId": "T2",
        "orderId": order.id,
        "notificationIds": list(notification_ids),
        **extra,
    }


@pytest.fixture
def kot_order(seed):
    """
    Order on T1 with 3 soups and 1 tea. The first ticket carried 2 soups,
    the second 1 soup and the tea.
    """
    order = seed.order(
        "T1",
        {
            "101": seed.item("Soup", seed.line(3)),
            "202": seed.item("Tea", seed.line(1, variation={"temp": "hot"})),
        },
    )
    first = seed.ticket(order, {"101": seed.item("Soup", seed.line(2))})
    second = seed.ticket(
        order,
        {
            "101": seed.item("Soup", seed.line(1)),
            "202": seed.item("Tea", seed.line(1, variation={"temp": "hot"})),
        },
        action_type=NotificationAction.UPDATED,
    )
    rows = {
        "first_soup": seed.delivery(first, "101", seed.line(2, qty_change=2)),
        "second_soup": seed.delivery(second, "101", seed.line(1)),
        "second_tea": seed.delivery(second, "202", seed.line(1, variation={"temp": "hot"})),
    }
    seed.commit()
    return order, first, second, rows


class TestPartialTicketMove:
    def test_moves_ticket_lines_to_new_table(self, db_session, seed, store, collaborators, kot_order):
        order, first, second, rows = kot_order

        result = move_kot(db_session, _payload(seed, order, second.notification_id), collaborators)

        assert result.ok
        assert result.body() == {"success": True, "message": "KOT moved successfully"}

        # Ticket and its ledger rows are gone, the other ticket is untouched
        assert store.ticket(second.notification_id) is None
        assert store.delivery(rows["second_soup"].id) is None
        assert store.delivery(rows["second_tea"].id) is None
        assert store.ticket(first.notification_id) is not None
        assert store.delivery(rows["first_soup"].id) is not None

        # Destination built from the ledger rows
        (request,) = collaborators.upsert.requests
        assert request.order_id == order.id
        assert request.force_new_order is False
        assert request.items["101"].name == "Soup"
        assert [line.qty for line in request.items["101"].customizations] == [1]
        assert request.items["202"].customizations[0].variation == {"temp": "hot"}

        (destination,) = store.orders("T2")
        assert set(destination.json_data["items"]) == {"101", "202"}

        # Source reduced line by line
        source_items = store.order(order.id).json_data["items"]
        assert list(source_items) == ["101"]
        assert source_items["101"]["customizations"][0]["qty"] == 2
        assert source_items["101"]["totalQty"] == 2

    def test_qty_change_is_what_leaves_the_source(self, db_session, seed, store, collaborators):
        order = seed.order("T1", {"101": seed.item("Soup", seed.line(5))})
        first = seed.ticket(order, {"101": seed.item("Soup", seed.line(4))})
        seed.ticket(order, {"101": seed.item("Soup", seed.line(1))})
        seed.delivery(first, "101", seed.line(4, qty_change=1))
        seed.commit()

        move_kot(db_session, _payload(seed, order, first.notification_id), collaborators)

        assert store.order(order.id).json_data["items"]["101"]["customizations"][0]["qty"] == 4

    def test_printed_destination_forces_new_order(self, db_session, seed, store, collaborators, kot_order):
        order, first, second, rows = kot_order
        printed = seed.order("T2", {"909": seed.item("Bread", seed.line(1))}, print_status=True)
        seed.commit()

        move_kot(db_session, _payload(seed, order, first.notification_id), collaborators)

        assert collaborators.upsert.requests[0].force_new_order is True
        assert len(store.orders("T2")) == 2
        assert list(store.order(printed.id).json_data["items"]) == ["909"]

    def test_emptied_source_order_is_kept(self, db_session, seed, store, collaborators):
        """Unlike item moves, a ticket move leaves an empty source order in place."""
        order = seed.order("T1", {"101": seed.item("Soup", seed.line(2))})
        ticket = seed.ticket(order, {"101": seed.item("Soup", seed.line(2))})
        seed.ticket(order, None, action_type=NotificationAction.UPDATED)
        seed.delivery(ticket, "101", seed.line(2))
        seed.commit()

        result = move_kot(db_session, _payload(seed, order, ticket.notification_id), collaborators)

        assert result.ok
        source = store.order(order.id)
        assert source is not None
        assert source.table_id == "T1"
        assert source.json_data["items"] == {}


class TestTicketCountEquivalence:
    def test_as_many_ids_as_tickets_moves_the_table(self, db_session, seed, store, collaborators, kot_order):
        """Only the number of ids is compared, not which tickets they name."""
        order, first, second, rows = kot_order
        other = seed.order("T7", {"303": seed.item("Cake", seed.line(1))})
        stranger = seed.ticket(other, {"303": seed.item("Cake", seed.line(1))})
        seed.commit()

        result = move_kot(
            db_session,
            _payload(seed, order, first.notification_id, stranger.notification_id),
            collaborators,
        )

        assert result.ok
        assert result.body()["message"] == "Table moved successfully"
        assert store.order(order.id).table_id == "T2"
        assert store.ticket(second.notification_id) is not None
        assert store.ticket(stranger.notification_id).table_number == "T7"
        assert collaborators.upsert.requests == []
        assert collaborators.session_migration.calls == [(seed.restaurant_id, "T1", "T2")]

    def test_duplicate_ids_count_once(self, db_session, seed, store, collaborators, kot_order):
        order, first, second, rows = kot_order

        result = move_kot(
            db_session,
            _payload(seed, order, first.notification_id, first.notification_id),
            collaborators,
        )

        assert result.body()["message"] == "KOT moved successfully"
        assert store.order(order.id).table_id == "T1"


class TestTicketMoveValidation:
    @pytest.mark.parametrize(
        "override",
        [
            {"notificationIds": []},
            {"notificationIds": None},
            {"orderId": None},
            {"newTableId": ""},
        ],
    )
    def test_missing_fields(self, db_session, seed, collaborators, kot_order, override):
        order, first, second, rows = kot_order
        payload = _payload(seed, order, first.notification_id)
        payload.update(override)

        result = move_kot(db_session, payload, collaborators)

        assert result.error is ErrorKind.VALIDATION
        assert result.message == "Missing required fields"

    def test_non_positive_ids(self, db_session, seed, collaborators, kot_order):
        order, first, second, rows = kot_order

        result = move_kot(db_session, _payload(seed, order, 0), collaborators)

        assert result.error is ErrorKind.VALIDATION
        assert result.message == "Notification ids must be positive integers"

    def test_direct_call_returns_failure_instead_of_raising(self, db_session, seed, collaborators):
        body = api.move_kot(
            db_session,
            {"restaurantId": seed.restaurant_id, "notificationIds": "not-a-list"},
            collaborators,
        )

        assert body["success"] is False
        assert body["message"]
