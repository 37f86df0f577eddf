"""
Order Repository - Data access for table orders.
"""

from typing import Sequence

from sqlalchemy import select

from pos_api.models import Order
from shared.utils.order_schemas import ItemMap, dump_items, parse_items
from .base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    """
    Repository for Order entities.

    Reads used by the movers lock the rows they return (``FOR UPDATE`` on
    PostgreSQL) so two moves on the same order cannot interleave.
    """

    @property
    def model(self) -> type[Order]:
        return Order

    def find_on_table(
        self,
        restaurant_id: str,
        order_id: int,
        table_id: str,
        *,
        lock: bool = True,
    ) -> Order | None:
        """Find an order by id, only if it still sits on ``table_id``."""
        query = select(Order).where(
            Order.restaurant_id == restaurant_id,
            Order.id == order_id,
            Order.table_id == table_id,
        )
        if lock:
            query = query.with_for_update()
        return self._db.scalar(query)

    def find_by_id(self, restaurant_id: str, order_id: int, *, lock: bool = True) -> Order | None:
        query = select(Order).where(
            Order.restaurant_id == restaurant_id,
            Order.id == order_id,
        )
        if lock:
            query = query.with_for_update()
        return self._db.scalar(query)

    def list_for_table(
        self,
        restaurant_id: str,
        table_id: str,
        *,
        lock: bool = False,
    ) -> Sequence[Order]:
        """
        Orders on a table, in merge-preference order: not printed first,
        then oldest first.
        """
        query = (
            select(Order)
            .where(
                Order.restaurant_id == restaurant_id,
                Order.table_id == table_id,
            )
            .order_by(
                Order.print_status.asc(),
                Order.created_at.asc(),
                Order.id.asc(),
            )
        )
        if lock:
            query = query.with_for_update()
        return self._db.execute(query).scalars().all()

    def list_source_orders(self, restaurant_id: str, table_id: str) -> Sequence[Order]:
        """Orders leaving a table, oldest first, locked."""
        query = (
            select(Order)
            .where(
                Order.restaurant_id == restaurant_id,
                Order.table_id == table_id,
            )
            .order_by(Order.created_at.asc(), Order.id.asc())
            .with_for_update()
        )
        return self._db.execute(query).scalars().all()

    def get_items(self, order: Order) -> ItemMap:
        return parse_items(order.json_data)

    def save_items(self, order: Order, items: ItemMap) -> None:
        """Replace the order's item map (the JSON column is reassigned, not mutated)."""
        json_data = dict(order.json_data or {})
        json_data.update(dump_items(items))
        order.json_data = json_data
        self._db.flush()

    def relabel_table(self, order: Order, table_id: str) -> None:
        order.table_id = table_id
        self._db.flush()

    def create(
        self,
        restaurant_id: str,
        table_id: str,
        items: ItemMap,
        order_type: str,
        instructions: str | None = None,
    ) -> Order:
        order = Order(
            restaurant_id=restaurant_id,
            table_id=table_id,
            json_data=dump_items(items),
            instructions=instructions,
            print_status=False,
            order_type=order_type,
        )
        return self.add(order)
