"""
Tests for merge target selection and destination planning.
"""

from pos_api.models import Order
from pos_api.services.table_moves import MergeResolver, pick_merge_target
from pos_api.services.table_moves.merge_resolver import merge_instructions, merge_item_maps
from shared.utils.order_schemas import parse_items


class TestPickMergeTarget:
    def test_prefers_first_unprinted(self):
        printed = Order(id=1, print_status=True)
        open_order = Order(id=2, print_status=False)

        assert pick_merge_target([printed, open_order]) is open_order

    def test_falls_back_to_first_printed(self):
        first = Order(id=1, print_status=True)
        second = Order(id=2, print_status=True)

        assert pick_merge_target([first, second]) is first

    def test_no_orders(self):
        assert pick_merge_target([]) is None


class TestMergeHelpers:
    def test_items_on_both_sides_concatenate_lines(self):
        target = parse_items({"items": {"101": {"name": "Soup", "customizations": [{"qty": 1}]}}})
        source = parse_items(
            {
                "items": {
                    "101": {"name": "Soup", "customizations": [{"qty": 2, "variation": {"size": "L"}}]},
                    "202": {"name": "Tea", "customizations": [{"qty": 1}]},
                }
            }
        )

        merged = merge_item_maps(target, source)

        assert [line.qty for line in merged["101"].customizations] == [1, 2]
        assert merged["101"].total_qty == 3
        assert "202" in merged
        assert len(target["101"].customizations) == 1

    def test_instructions_skip_empty_values(self):
        assert merge_instructions("No onions", None, "", "Extra spicy") == "No onions\nExtra spicy"
        assert merge_instructions(None, None) == ""


class TestPlanDestination:
    def test_empty_table_creates_without_forcing(self, db_session, seed):
        plan = MergeResolver(db_session).plan_destination(seed.restaurant_id, "T9")

        assert plan.force_new_order is False
        assert plan.target is None

    def test_only_printed_orders_force_new_order(self, db_session, seed):
        seed.order("T2", {"101": seed.item("Soup", seed.line(1))}, print_status=True)
        seed.commit()

        plan = MergeResolver(db_session).plan_destination(seed.restaurant_id, "T2")

        assert plan.force_new_order is True
        assert plan.target is None

    def test_oldest_unprinted_order_is_the_target(self, db_session, seed):
        seed.order("T2", {"101": seed.item("Soup", seed.line(1))}, print_status=True)
        oldest_open = seed.order("T2", {"202": seed.item("Tea", seed.line(1))})
        seed.order("T2", {"303": seed.item("Cake", seed.line(1))})
        seed.commit()

        plan = MergeResolver(db_session).plan_destination(seed.restaurant_id, "T2")

        assert plan.force_new_order is False
        assert plan.target.id == oldest_open.id
