# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from taskboard.config import AUTH_ALGORITHM, AUTH_SECRET
from taskboard.db.config import get_session
from taskboard.models.category import Category  # noqa: F401
from taskboard.models.task import Task  # noqa: F401
from taskboard.services.broadcaster import EventBroadcaster
from taskboard.services.category_service import CategoryService
from taskboard.services.task_service import TaskService

from .fakes import FakeCalendar, RecordingAttachmentStore, RecordingBroadcaster

OWNER = "user-alice"
OTHER_OWNER = "user-bob"


@pytest.fixture()
def engine():
    """In-memory SQLite shared by every session and thread of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def upload_dir(tmp_path: Path) -> Path:
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture()
def attachment_store(upload_dir: Path) -> RecordingAttachmentStore:
    return RecordingAttachmentStore(upload_dir)


@pytest.fixture()
def calendar() -> FakeCalendar:
    return FakeCalendar()


@pytest.fixture()
def recorder() -> RecordingBroadcaster:
    return RecordingBroadcaster()


@pytest.fixture()
def task_service(session, attachment_store, calendar, recorder) -> TaskService:
    return TaskService(session, attachment_store, calendar, recorder)


@pytest.fixture()
def category_service(session, recorder) -> CategoryService:
    return CategoryService(session, recorder)


@pytest.fixture()
def live_broadcaster() -> EventBroadcaster:
    return EventBroadcaster(queue_size=10)


@pytest.fixture()
def token_for() -> Callable[[str], str]:
    def _token(user_id: str) -> str:
        return jwt.encode({"sub": user_id, "email": f"{user_id}@example.com"}, AUTH_SECRET, algorithm=AUTH_ALGORITHM)
    return _token


@pytest.fixture()
def auth_headers(token_for) -> Callable[[str], dict]:
    def _headers(user_id: str = OWNER) -> dict:
        return {"Authorization": f"Bearer {token_for(user_id)}"}
    return _headers


@pytest.fixture()
def client(engine, attachment_store, calendar, live_broadcaster):
    """TestClient with the database, storage, calendar and broadcaster swapped for test doubles."""
    from taskboard.main import app
    from taskboard.routers.deps import get_attachment_store, get_broadcaster, get_calendar_adapter

    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_attachment_store] = lambda: attachment_store
    app.dependency_overrides[get_calendar_adapter] = lambda: calendar
    app.dependency_overrides[get_broadcaster] = lambda: live_broadcaster

    yield TestClient(app)

    app.dependency_overrides.clear()
