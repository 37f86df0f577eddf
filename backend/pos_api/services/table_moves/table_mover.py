"""
Table Move Service.

Moves everything on one table to another: its orders, the tickets and
ledger rows attached to them, and the per-table satellite rows (OTPs,
discounts, dynamic offers, captain assignments).
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from shared.config.constants import MoveMessages
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.events import TABLE_MOVE_COMPLETED, TABLE_MOVED
from shared.utils.schemas import MoveTableRequest, MoveTableResponse
from pos_api.repositories import (
    NotificationRepository,
    OrderRepository,
    TableSatelliteRepository,
)
from .collaborators import NotificationDispatch, SessionMigration
from .merge_resolver import MergeResolver, pick_merge_target
from .result import MoveValidationError

logger = get_logger(__name__)


class TableMoveService:
    """
    Domain service for full table moves.

    ``apply`` does all database work on the caller's transaction and can
    be reused by the partial movers when a request turns out to cover the
    whole table. ``announce`` runs the Redis side effects and must only be
    called after the transaction has committed.
    """

    def __init__(
        self,
        db: Session,
        session_migration: SessionMigration,
        dispatcher: NotificationDispatch,
    ):
        self._db = db
        self._orders = OrderRepository(db)
        self._tickets = NotificationRepository(db)
        self._satellites = TableSatelliteRepository(db)
        self._resolver = MergeResolver(db)
        self._session_migration = session_migration
        self._dispatcher = dispatcher

    @staticmethod
    def validate(request: MoveTableRequest) -> None:
        if not request.restaurant_id or not request.old_table_id or not request.new_table_id:
            raise MoveValidationError(MoveMessages.MISSING_FIELDS)

    def apply(self, request: MoveTableRequest) -> MoveTableResponse:
        """
        Move orders and satellites from the old table to the new one.

        Raises:
            MoveValidationError: If a table or restaurant id is missing.
        """
        self.validate(request)
        restaurant_id = request.restaurant_id
        old_table_id = request.old_table_id
        new_table_id = request.new_table_id

        # Lock both tables before deciding anything
        destination = self._orders.list_for_table(restaurant_id, new_table_id, lock=True)
        sources = self._orders.list_source_orders(restaurant_id, old_table_id)

        target = pick_merge_target(destination)
        for source in sources:
            if target is not None and source.id == target.id:
                continue
            if target is not None and not target.print_status:
                self._resolver.merge_into(target, source)
            else:
                self._resolver.reassign(source, new_table_id)

        notifications = self._tickets.relabel_table(restaurant_id, old_table_id, new_table_id)
        otps = self._satellites.relabel_otps(restaurant_id, old_table_id, new_table_id)
        discounts = self._satellites.relabel_discounts(restaurant_id, old_table_id, new_table_id)
        offers = self._satellites.relabel_dynamic_offers(
            restaurant_id, request.order_id, old_table_id, new_table_id
        )
        captains = self._satellites.reassign_captains(restaurant_id, old_table_id, new_table_id)

        logger.info(
            "Table moved",
            restaurant_id=restaurant_id,
            old_table_id=old_table_id,
            new_table_id=new_table_id,
            source_orders=len(sources),
            merged=target is not None and not target.print_status,
        )
        return MoveTableResponse(
            success=True,
            message=MoveMessages.TABLE_MOVED,
            orders_updated=notifications + otps + discounts + offers + captains,
            notifications_updated=notifications,
            otp_updated=otps,
            discount_updated=discounts,
            dynamic_offers_updated=offers,
            captains_updated=captains,
        )

    def announce(self, request: MoveTableRequest) -> None:
        """
        Migrate the table session and tell staff about the move.

        Failures are logged and dropped: the move itself is committed.
        """
        restaurant_id = request.restaurant_id
        old_table_id = request.old_table_id
        new_table_id = request.new_table_id

        try:
            self._session_migration.migrate(restaurant_id, old_table_id, new_table_id)
        except Exception as e:
            logger.error(
                "Table session migration failed",
                restaurant_id=restaurant_id,
                old_table_id=old_table_id,
                new_table_id=new_table_id,
                error=str(e),
                exc_info=True,
            )

        try:
            self._dispatcher.send(
                "",
                "",
                {"tableId": old_table_id},
                restaurant_id,
                settings.captain_audience,
                True,
                event_type=TABLE_MOVED,
            )
            self._dispatcher.send(
                MoveMessages.MOVE_COMPLETED_TITLE,
                f"Table move from {old_table_id} to {new_table_id} completed.",
                {"oldTable": old_table_id, "newTable": new_table_id, "tableId": new_table_id},
                restaurant_id,
                settings.biller_audience,
                event_type=TABLE_MOVE_COMPLETED,
            )
        except Exception as e:
            logger.error(
                "Table move notification failed",
                restaurant_id=restaurant_id,
                old_table_id=old_table_id,
                new_table_id=new_table_id,
                error=str(e),
                exc_info=True,
            )
