"""
Table Satellite Repository - relabels the per-table rows that follow a
table's state when it moves.
"""

from sqlalchemy import select, update

from pos_api.models import Captain, Discount, DynamicOffer, TableOtp
from .base import BaseRepository


class TableSatelliteRepository(BaseRepository[TableOtp]):
    """
    Relabel OTPs, discounts, dynamic offers and captain assignments from
    one table token to another.

    Each method returns the number of rows it changed. All of them are
    idempotent: a second run finds nothing left on the old token.
    """

    @property
    def model(self) -> type[TableOtp]:
        return TableOtp

    def relabel_otps(self, restaurant_id: str, old_table_id: str, new_table_id: str) -> int:
        result = self._db.execute(
            update(TableOtp)
            .where(
                TableOtp.restaurant_id == restaurant_id,
                TableOtp.table_id == old_table_id,
            )
            .values(table_id=new_table_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def relabel_discounts(self, restaurant_id: str, old_table_id: str, new_table_id: str) -> int:
        result = self._db.execute(
            update(Discount)
            .where(
                Discount.restaurant_id == restaurant_id,
                Discount.table_number == old_table_id,
                Discount.is_active.is_(True),
            )
            .values(table_number=new_table_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def relabel_dynamic_offers(
        self,
        restaurant_id: str,
        order_id: int | None,
        old_table_id: str,
        new_table_id: str,
    ) -> int:
        """Offers are tied to a single order; without one there is nothing to move."""
        if order_id is None:
            return 0
        result = self._db.execute(
            update(DynamicOffer)
            .where(
                DynamicOffer.restaurant_id == restaurant_id,
                DynamicOffer.order_id == order_id,
                DynamicOffer.table_id == old_table_id,
                DynamicOffer.active.is_(True),
            )
            .values(table_id=new_table_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def reassign_captains(self, restaurant_id: str, old_table_id: str, new_table_id: str) -> int:
        """
        Swap ``old_table_id`` for ``new_table_id`` in every captain's
        assigned tables, keeping the first occurrence of each token.
        """
        captains = self._db.execute(
            select(Captain)
            .where(Captain.restaurant_id == restaurant_id)
            .order_by(Captain.id.asc())
            .with_for_update()
        ).scalars().all()

        changed = 0
        for captain in captains:
            tables = list(captain.assigned_tables or [])
            if old_table_id not in tables:
                continue
            reassigned: list[str] = []
            for table in tables:
                token = new_table_id if table == old_table_id else table
                if token not in reassigned:
                    reassigned.append(token)
            captain.assigned_tables = reassigned
            changed += 1

        if changed:
            self._db.flush()
        return changed
