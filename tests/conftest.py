import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from database import Base, create_session_factory
from core.report_archive import ReportArchive
from core.room_manager import RoomManager
from core.store import MemoryKeyValueStore, SqlKeyValueStore, get_store
from main import app
from models import TicketInput


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def sql_store():
    """SqlKeyValueStore backed by an in-memory SQLite database shared across sessions."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield SqlKeyValueStore(create_session_factory(engine))
    engine.dispose()


@pytest.fixture
def room_manager(store):
    return RoomManager(store)


@pytest.fixture
def archive(store, room_manager):
    return ReportArchive(store, room_manager)


@pytest.fixture
def client(store):
    """TestClient whose requests all share the in-memory store."""
    app.dependency_overrides[get_store] = lambda: store
    try:
        with TestClient(app) as c:
            yield c
    finally:
        del app.dependency_overrides[get_store]


def make_tickets(*keys, parent_key=None, parent_summary=None):
    return [
        TicketInput(
            id=f"id-{key}",
            key=key,
            summary=f"Summary of {key}",
            parent_key=parent_key,
            parent_summary=parent_summary,
        )
        for key in keys
    ]


@pytest.fixture
def room(room_manager):
    return room_manager.create_room("admin-1", "Ann")


@pytest.fixture
def planning_room(room_manager, room):
    """Room with three tickets and planning started."""
    room_manager.upload_tickets(room.code, make_tickets("A-1", "A-2", "A-3"))
    return room_manager.start_planning(room.code)
