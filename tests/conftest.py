"""Shared test fixtures: an in-memory SQLite store and an API client."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from order_service.app.database import make_engine, make_session_factory
from order_service.app.main import app, get_store
from order_service.app.models import Base
from order_service.app.schemas import ItemCreate
from order_service.app.store import OrderStore

T0 = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)
T1 = datetime(2024, 2, 1, 17, 0, tzinfo=timezone.utc)


class RecordingPublisher:
    """Collects published events instead of sending them to a broker."""

    def __init__(self):
        self.events = []

    def publish(self, routing_key, message):
        self.events.append((routing_key, message))


@pytest.fixture
def engine():
    """One shared in-memory connection so every session sees the same tables."""
    engine = make_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def store(session_factory, publisher):
    return OrderStore(session_factory, publisher=publisher)


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_item(code="A1", description="Widget", quantity=3):
    return ItemCreate(item_code=code, description=description, quantity=quantity)
