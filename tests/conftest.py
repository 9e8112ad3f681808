"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.checkins.manager import CheckInManager
from app.checkins.notifier import OutboxNotifier
from app.checkins.sharing import SessionSharer
from app.checkins.store import SqlCheckInStore
from app.core.database import get_session
from app.main import app
from app.models import EmergencyContact
from app.routes.checkins import get_manager
from app.routes.sharing import get_sharer

START = datetime(2026, 10, 18, 19, 0, tzinfo=UTC)


class FakeClock:
    """Controllable replacement for datetime.now(UTC)."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="clock")
def clock_fixture() -> FakeClock:
    return FakeClock()


@pytest.fixture(name="notifier")
def notifier_fixture() -> AsyncMock:
    """Mock notifier recording every call."""
    return AsyncMock()


@pytest.fixture(name="store")
def store_fixture(engine) -> SqlCheckInStore:
    return SqlCheckInStore(engine)


@pytest.fixture(name="manager")
def manager_fixture(notifier, store, clock) -> CheckInManager:
    """A manager wired to the mock notifier, SQL store and fake clock."""
    return CheckInManager(notifier=notifier, store=store, clock=clock)


@pytest.fixture(name="sharer")
def sharer_fixture(engine, clock) -> SessionSharer:
    """A sharer writing to the test database outbox."""
    return SessionSharer(engine, OutboxNotifier(engine, clock=clock), clock=clock)


@pytest.fixture(name="contacts")
def contacts_fixture() -> list[EmergencyContact]:
    return [
        EmergencyContact(name="Alice", phone="+15550001", email="alice@example.com"),
        EmergencyContact(name="Bob", phone="+15550002"),
        EmergencyContact(name="Carol", phone="+15550003", receive_session_alerts=False),
    ]


@pytest.fixture(name="client")
def client_fixture(session: Session, manager: CheckInManager, sharer: SessionSharer):
    """Create a test client with the test database session and manager."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_manager] = lambda: manager
    app.dependency_overrides[get_sharer] = lambda: sharer
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
