"""
Tests for the default move collaborators and event publishing.
"""

import json
from unittest.mock import MagicMock, call, patch

import pytest
import redis

from pos_api.services.table_moves import (
    MergeResolver,
    OrderUpsertService,
    RedisNotificationDispatcher,
    RedisSessionMigrator,
)
from shared.config.constants import NotificationAction
from shared.infrastructure.events import (
    TABLE_MOVE_COMPLETED,
    CircuitState,
    Event,
    EventCircuitBreaker,
    publish_event,
)
from shared.utils.order_schemas import ItemEntry
from shared.utils.schemas import UpsertOrderRequest


# =============================================================================
# Session migration
# =============================================================================


class TestRedisSessionMigrator:
    def test_renames_session_and_sub_keys(self):
        client = MagicMock()
        client.scan_iter.return_value = ["table_session:r1:T1:cart"]
        client.exists.return_value = 1

        RedisSessionMigrator(client=client).migrate("r1", "T1", "T2")

        client.scan_iter.assert_called_once_with(match="table_session:r1:T1:*")
        assert client.rename.call_args_list == [
            call("table_session:r1:T1", "table_session:r1:T2"),
            call("table_session:r1:T1:cart", "table_session:r1:T2:cart"),
        ]

    def test_missing_session_is_a_no_op(self):
        client = MagicMock()
        client.scan_iter.return_value = []
        client.exists.return_value = 0

        RedisSessionMigrator(client=client, prefix="sess").migrate("r1", "T1", "T2")

        client.exists.assert_called_once_with("sess:r1:T1")
        client.rename.assert_not_called()


# =============================================================================
# Notification dispatch
# =============================================================================


class TestRedisNotificationDispatcher:
    def test_publishes_on_audience_channel(self):
        client = MagicMock()
        client.publish.return_value = 2

        with patch(
            "shared.infrastructure.events.publisher.get_event_circuit_breaker",
            return_value=EventCircuitBreaker(),
        ):
            RedisNotificationDispatcher(client=client).send(
                "Table Move Completed",
                "Table move from T1 to T2 completed.",
                {"oldTable": "T1", "newTable": "T2", "tableId": "T2"},
                "r1",
                "biller",
                event_type=TABLE_MOVE_COMPLETED,
            )

        channel, message = client.publish.call_args.args
        assert channel == "restaurant:r1:biller"
        event = Event.from_json(message)
        assert event.type == TABLE_MOVE_COMPLETED
        assert event.title == "Table Move Completed"
        assert event.payload["newTable"] == "T2"
        assert event.active is False

    def test_rejects_empty_restaurant(self):
        with pytest.raises(ValueError):
            RedisNotificationDispatcher(client=MagicMock()).send("", "", {}, "", "captain")


# =============================================================================
# Publisher retry
# =============================================================================


class TestPublishEvent:
    @pytest.fixture
    def breaker(self):
        breaker = EventCircuitBreaker(failure_threshold=1)
        with patch(
            "shared.infrastructure.events.publisher.get_event_circuit_breaker",
            return_value=breaker,
        ), patch("shared.infrastructure.events.publisher.time.sleep"):
            yield breaker

    def _event(self):
        return Event(type="TABLE_MOVED", restaurant_id="r1", audience="captain", active=True)

    def test_retries_then_succeeds(self, breaker):
        client = MagicMock()
        client.publish.side_effect = [redis.ConnectionError("reset"), 1]

        assert publish_event(client, "restaurant:r1:captain", self._event()) == 1
        assert client.publish.call_count == 2
        assert breaker.state == CircuitState.CLOSED

    def test_gives_up_and_opens_breaker(self, breaker):
        client = MagicMock()
        client.publish.side_effect = redis.ConnectionError("down")

        with pytest.raises(redis.ConnectionError):
            publish_event(client, "restaurant:r1:captain", self._event())

        assert breaker.state == CircuitState.OPEN
        # While open, publishing is skipped
        assert publish_event(client, "restaurant:r1:captain", self._event()) == 0

    def test_oversized_event_is_rejected(self, breaker):
        event = Event(
            type="TABLE_MOVED",
            restaurant_id="r1",
            audience="captain",
            payload={"blob": "x" * 70_000},
        )

        with pytest.raises(ValueError):
            publish_event(MagicMock(), "restaurant:r1:captain", event)

    def test_payload_serializes_with_timestamp(self):
        data = json.loads(self._event().to_json())

        assert data["ts"]
        assert data["payload"] == {}


# =============================================================================
# Order upsert
# =============================================================================


def _request(seed, table_id, items, **extra):
    return UpsertOrderRequest(
        restaurant_id=seed.restaurant_id,
        table_id=table_id,
        items={item_id: ItemEntry.model_validate(entry) for item_id, entry in items.items()},
        order_type="captain",
        **extra,
    )


class TestOrderUpsertService:
    def test_creates_order_ticket_and_ledger(self, db_session, seed, store):
        request = _request(
            seed,
            "T5",
            {"101": seed.item("Soup", seed.line(2), seed.line(1, variation={"size": "L"}))},
        )

        result = OrderUpsertService().upsert(db_session, request)
        db_session.commit()

        assert result.created is True
        (order,) = store.orders("T5")
        assert order.id == result.order_id
        assert order.json_data["items"]["101"]["totalQty"] == 3

        (ticket,) = store.tickets(order.id)
        assert ticket.notification_id == result.notification_id
        assert ticket.action_type == NotificationAction.CREATED
        assert ticket.table_number == "T5"
        assert ticket.notification_data["101"]["added"] is True

        rows = store.deliveries(order.id)
        assert [row.customization_details["qty"] for row in rows] == [2, 1]
        assert all(row.notification_id == ticket.notification_id for row in rows)

    def test_merges_into_open_order(self, db_session, seed, store):
        open_order = seed.order(
            "T5",
            {"101": seed.item("Soup", seed.line(1)), "202": seed.item("Tea", seed.line(1))},
        )
        seed.commit()

        result = OrderUpsertService().upsert(
            db_session,
            _request(
                seed,
                "T5",
                {"101": seed.item("Soup", seed.line(2), seed.line(1, variation={"size": "L"}))},
            ),
        )
        db_session.commit()

        assert result.created is False
        assert result.order_id == open_order.id
        items = store.order(open_order.id).json_data["items"]
        assert [line["qty"] for line in items["101"]["customizations"]] == [3, 1]
        assert "202" in items
        assert store.ticket(result.notification_id).action_type == NotificationAction.UPDATED

    def test_forced_new_order(self, db_session, seed, store):
        seed.order("T5", {"101": seed.item("Soup", seed.line(1))})
        seed.commit()

        result = OrderUpsertService().upsert(
            db_session,
            _request(seed, "T5", {"101": seed.item("Soup", seed.line(1))}, force_new_order=True),
        )
        db_session.commit()

        assert result.created is True
        assert len(store.orders("T5")) == 2

    def test_named_order_elsewhere_is_not_a_target(self, db_session, seed, store):
        source = seed.order("T1", {"101": seed.item("Soup", seed.line(1))})
        seed.commit()

        result = OrderUpsertService().upsert(
            db_session,
            _request(seed, "T5", {"101": seed.item("Soup", seed.line(1))}, order_id=source.id),
        )
        db_session.commit()

        assert result.created is True
        assert store.order(source.id).table_id == "T1"

    def test_planned_target_is_used_without_replanning(self, db_session, seed, store):
        seed.order("T5", {"101": seed.item("Soup", seed.line(1))})
        newer = seed.order("T5", {"909": seed.item("Bread", seed.line(1))})
        seed.commit()

        with patch.object(MergeResolver, "plan_destination") as planner:
            result = OrderUpsertService().upsert(
                db_session,
                _request(
                    seed,
                    "T5",
                    {"101": seed.item("Soup", seed.line(2))},
                    force_new_order=False,
                    target_order_id=newer.id,
                ),
            )
            db_session.commit()

        planner.assert_not_called()
        assert result.created is False
        assert result.order_id == newer.id
        assert set(store.order(newer.id).json_data["items"]) == {"909", "101"}

    def test_planned_empty_destination_creates(self, db_session, seed, store):
        with patch.object(MergeResolver, "plan_destination") as planner:
            result = OrderUpsertService().upsert(
                db_session,
                _request(seed, "T5", {"101": seed.item("Soup", seed.line(1))}, force_new_order=False),
            )
            db_session.commit()

        planner.assert_not_called()
        assert result.created is True
        (order,) = store.orders("T5")
        assert order.id == result.order_id

    def test_unknown_fields_survive_a_merge(self, db_session, seed, store):
        bread = seed.item("Bread", seed.line(1))
        bread["category"] = "bakery"
        open_order = seed.order("T5", {"909": bread})
        seed.commit()

        OrderUpsertService().upsert(
            db_session,
            _request(seed, "T5", {"101": seed.item("Soup", seed.line(1))}),
        )
        db_session.commit()

        assert store.order(open_order.id).json_data["items"]["909"]["category"] == "bakery"
