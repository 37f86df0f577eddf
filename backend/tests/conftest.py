"""
Pytest configuration and fixtures for backend tests.
"""

import itertools
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pos_api.main import app
from pos_api.models import (
    Base,
    Captain,
    Discount,
    DynamicOffer,
    Notification,
    Order,
    OrderCustomizationDelivery,
    TableOtp,
)
from pos_api.routers.tables import get_move_collaborators
from pos_api.services.table_moves import MoveCollaborators, OrderUpsertService
from shared.config.constants import NotificationAction
from shared.infrastructure.db import get_db
from shared.utils.schemas import UpsertOrderRequest, UpsertOrderResult


RESTAURANT_ID = "rest-1"


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# =============================================================================
# Recording collaborators
# =============================================================================


class RecordingUpsert:
    """Real order upsert that remembers every request."""

    def __init__(self):
        self.requests: list[UpsertOrderRequest] = []
        self._service = OrderUpsertService()

    def upsert(self, db: Session, request: UpsertOrderRequest) -> UpsertOrderResult:
        self.requests.append(request)
        return self._service.upsert(db, request)


class RecordingSessionMigration:
    def __init__(self):
        self.calls: list[tuple[str, str, str]] = []

    def migrate(self, restaurant_id: str, old_table_id: str, new_table_id: str) -> None:
        self.calls.append((restaurant_id, old_table_id, new_table_id))


class RecordingDispatcher:
    def __init__(self):
        self.sent: list[dict[str, Any]] = []

    def send(self, title, message, payload, restaurant_id, audience, active=False, *, event_type="TABLE_MOVED"):
        self.sent.append(
            {
                "title": title,
                "message": message,
                "payload": payload,
                "restaurant_id": restaurant_id,
                "audience": audience,
                "active": active,
                "event_type": event_type,
            }
        )


@pytest.fixture
def collaborators():
    return MoveCollaborators(
        upsert=RecordingUpsert(),
        session_migration=RecordingSessionMigration(),
        dispatcher=RecordingDispatcher(),
    )


@pytest.fixture(scope="function")
def client(db_session, collaborators):
    """
    Create a test client with database session and collaborator overrides.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_move_collaborators] = lambda: collaborators

    # Not used as a context manager: the lifespan would connect to PostgreSQL
    yield TestClient(app)

    app.dependency_overrides.clear()


# =============================================================================
# Seed data
# =============================================================================


class Seeder:
    """
    Builds orders, tickets, ledger rows and satellites.

    Every row gets an increasing ``created_at`` so "oldest first" is
    deterministic even within one second.
    """

    _BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __init__(self, db: Session, restaurant_id: str = RESTAURANT_ID):
        self.db = db
        self.restaurant_id = restaurant_id
        self._clock = itertools.count()

    def _tick(self) -> datetime:
        return self._BASE_TIME + timedelta(minutes=next(self._clock))

    @staticmethod
    def line(
        qty: int,
        *,
        variation: Any = None,
        addons: Any = None,
        is_basic: bool = True,
        qty_change: int | None = None,
        price: float | None = 10.0,
    ) -> dict[str, Any]:
        data: dict[str, Any] = {"qty": qty, "isBasic": is_basic}
        if variation is not None:
            data["variation"] = variation
        if addons is not None:
            data["addons"] = addons
        if qty_change is not None:
            data["qtyChange"] = qty_change
        if price is not None:
            data["price"] = price
        return data

    @staticmethod
    def item(name: str, *lines: dict[str, Any]) -> dict[str, Any]:
        return {"name": name, "customizations": list(lines)}

    def order(
        self,
        table_id: str,
        items: dict[str, dict[str, Any]],
        *,
        print_status: bool = False,
        instructions: str | None = None,
    ) -> Order:
        order = Order(
            restaurant_id=self.restaurant_id,
            table_id=table_id,
            json_data={"items": items},
            instructions=instructions,
            print_status=print_status,
            created_at=self._tick(),
        )
        self.db.add(order)
        self.db.flush()
        return order

    def ticket(
        self,
        order: Order,
        snapshot: dict[str, Any] | None,
        *,
        action_type: str = NotificationAction.CREATED,
        active: bool = True,
    ) -> Notification:
        ticket = Notification(
            restaurant_id=self.restaurant_id,
            order_id=order.id,
            table_number=order.table_id,
            action_type=action_type,
            notification_data=snapshot,
            active=active,
            created_at=self._tick(),
        )
        self.db.add(ticket)
        self.db.flush()
        return ticket

    def delivery(
        self,
        ticket: Notification,
        item_id: str,
        details: dict[str, Any],
        *,
        delivered: bool = False,
        cancelled: bool = False,
    ) -> OrderCustomizationDelivery:
        row = OrderCustomizationDelivery(
            notification_id=ticket.notification_id,
            order_id=ticket.order_id,
            item_id=item_id,
            customization_details=details,
            delivered=delivered,
            cancelled=cancelled,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def otp(self, table_id: str, otp: str = "4821") -> TableOtp:
        row = TableOtp(restaurant_id=self.restaurant_id, table_id=table_id, otp=otp)
        self.db.add(row)
        self.db.flush()
        return row

    def discount(self, table_number: str, *, is_active: bool = True) -> Discount:
        row = Discount(
            restaurant_id=self.restaurant_id,
            table_number=table_number,
            percentage=10,
            is_active=is_active,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def dynamic_offer(self, order: Order, *, active: bool = True) -> DynamicOffer:
        row = DynamicOffer(
            restaurant_id=self.restaurant_id,
            order_id=order.id,
            table_id=order.table_id,
            description="Happy hour",
            active=active,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def captain(self, name: str, tables: list[str]) -> Captain:
        row = Captain(restaurant_id=self.restaurant_id, name=name, assigned_tables=tables)
        self.db.add(row)
        self.db.flush()
        return row

    def commit(self) -> None:
        self.db.commit()


@pytest.fixture
def seed(db_session):
    return Seeder(db_session)


# =============================================================================
# Read-back helpers
# =============================================================================


class Store:
    """Fresh reads of the persisted state, bypassing the identity map."""

    def __init__(self, db: Session, restaurant_id: str = RESTAURANT_ID):
        self.db = db
        self.restaurant_id = restaurant_id

    def orders(self, table_id: str) -> list[Order]:
        self.db.expire_all()
        return list(
            self.db.execute(
                select(Order)
                .where(Order.restaurant_id == self.restaurant_id, Order.table_id == table_id)
                .order_by(Order.id)
            ).scalars()
        )

    def order(self, order_id: int) -> Order | None:
        self.db.expire_all()
        return self.db.get(Order, order_id)

    def tickets(self, order_id: int) -> list[Notification]:
        self.db.expire_all()
        return list(
            self.db.execute(
                select(Notification)
                .where(Notification.order_id == order_id)
                .order_by(Notification.notification_id)
            ).scalars()
        )

    def ticket(self, notification_id: int) -> Notification | None:
        self.db.expire_all()
        return self.db.get(Notification, notification_id)

    def delivery(self, record_id: int) -> OrderCustomizationDelivery | None:
        self.db.expire_all()
        return self.db.get(OrderCustomizationDelivery, record_id)

    def deliveries(self, order_id: int) -> list[OrderCustomizationDelivery]:
        self.db.expire_all()
        return list(
            self.db.execute(
                select(OrderCustomizationDelivery)
                .where(OrderCustomizationDelivery.order_id == order_id)
                .order_by(OrderCustomizationDelivery.id)
            ).scalars()
        )


@pytest.fixture
def store(db_session):
    return Store(db_session)


@pytest.fixture
def make_seeder(db_session):
    """Seeder for another restaurant sharing the same session."""
    def factory(restaurant_id: str) -> Seeder:
        return Seeder(db_session, restaurant_id=restaurant_id)
    return factory
