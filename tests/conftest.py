"""Shared test fixtures."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel
from sqlmodel.pool import StaticPool

from app.calendar.temporal import local_now
from app.core.config import settings
from app.core.database import create_db_engine, get_session
from app.core.identity import Actor
from app.core.notifications import LoggingNotifier
from app.events.attendance import AttendanceTracker, EventLockRegistry
from app.events.lifecycle import EventLifecycleManager
from app.events.store import SQLEventStore
from app.main import app
from app.models import CreatorRole, Event, EventStatus, EventType, Shop

OWNER_ID = "user-owner"
ADMIN_ID = "user-admin"
MEMBER_ID = "user-member"


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Create a test client with the test database session."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="store")
def store_fixture(session: Session) -> SQLEventStore:
    return SQLEventStore(session)


@pytest.fixture(name="notifier")
def notifier_fixture() -> LoggingNotifier:
    return LoggingNotifier(history=20)


@pytest.fixture(name="locks")
def locks_fixture() -> EventLockRegistry:
    return EventLockRegistry()


@pytest.fixture(name="lifecycle")
def lifecycle_fixture(store, notifier, locks) -> EventLifecycleManager:
    return EventLifecycleManager(store, notifier=notifier, locks=locks)


@pytest.fixture(name="tracker")
def tracker_fixture(store, notifier, locks) -> AttendanceTracker:
    return AttendanceTracker(store, locks=locks, notifier=notifier)


@pytest.fixture(name="shop")
def shop_fixture(session: Session) -> Shop:
    """A claimed shop owned by OWNER_ID."""
    shop = Shop(
        id="shop-1",
        name="Blue Bottle",
        address="1 Main St",
        city="Oakland",
        claimed_by=OWNER_ID,
    )
    session.add(shop)
    session.commit()
    session.refresh(shop)
    return shop


@pytest.fixture(name="other_shop")
def other_shop_fixture(session: Session) -> Shop:
    shop = Shop(id="shop-2", name="Verve Roasters", address="9 Pine St", city="Santa Cruz")
    session.add(shop)
    session.commit()
    session.refresh(shop)
    return shop


@pytest.fixture(name="owner")
def owner_fixture(shop: Shop) -> Actor:
    return Actor(user_id=OWNER_ID, owned_shop_ids=frozenset({shop.id}))


@pytest.fixture(name="admin")
def admin_fixture() -> Actor:
    return Actor(user_id=ADMIN_ID, is_admin=True)


@pytest.fixture(name="member")
def member_fixture() -> Actor:
    return Actor(user_id=MEMBER_ID)


def days_from_today(days: int, hour: int = 18) -> str:
    """A naive local start string relative to today in the configured zone."""
    now = local_now(settings.local_timezone)
    day = now.replace(hour=hour, minute=0, second=0, microsecond=0) + timedelta(days=days)
    return day.strftime("%Y-%m-%dT%H:%M")


@pytest.fixture(name="published_event")
def published_event_fixture(session: Session, shop: Shop) -> Event:
    """An approved, published event three days from now."""
    event = Event(
        shop_id=shop.id,
        title="Latte Art Throwdown",
        description="Bring your best pour",
        event_type=EventType.TASTING,
        start_date_time=days_from_today(3),
        end_date_time=days_from_today(3, hour=20),
        status=EventStatus.APPROVED,
        is_published=True,
        created_by=CreatorRole.OWNER,
        submitted_by=OWNER_ID,
    )
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


@pytest.fixture(name="pending_event")
def pending_event_fixture(session: Session, shop: Shop) -> Event:
    """A community submission awaiting review."""
    event = Event(
        shop_id=shop.id,
        title="Sunday Run Club",
        event_type=EventType.ACTIVE,
        start_date_time=days_from_today(5, hour=8),
        end_date_time=days_from_today(5, hour=9),
        submitted_by=MEMBER_ID,
    )
    session.add(event)
    session.commit()
    session.refresh(event)
    return event
