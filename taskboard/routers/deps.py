"""Dependencies wiring request-scoped services to shared collaborators."""
from functools import lru_cache

from fastapi import Depends
from sqlmodel import Session

from taskboard.config import UPLOAD_DIR
from taskboard.db.config import get_session
from taskboard.services.attachment_store import AttachmentStore
from taskboard.services.broadcaster import EventBroadcaster, broadcaster
from taskboard.services.calendar_adapter import CalendarAdapter, build_calendar_adapter
from taskboard.services.category_service import CategoryService
from taskboard.services.task_service import TaskService


def get_broadcaster() -> EventBroadcaster:
    return broadcaster


@lru_cache
def get_attachment_store() -> AttachmentStore:
    return AttachmentStore(UPLOAD_DIR)


@lru_cache
def get_calendar_adapter() -> CalendarAdapter:
    return build_calendar_adapter()


def get_task_service(
    session: Session = Depends(get_session),
    attachment_store: AttachmentStore = Depends(get_attachment_store),
    calendar: CalendarAdapter = Depends(get_calendar_adapter),
    event_broadcaster: EventBroadcaster = Depends(get_broadcaster),
) -> TaskService:
    """Dependency for getting TaskService instance."""
    return TaskService(session, attachment_store, calendar, event_broadcaster)


def get_category_service(
    session: Session = Depends(get_session),
    event_broadcaster: EventBroadcaster = Depends(get_broadcaster),
) -> CategoryService:
    """Dependency for getting CategoryService instance."""
    return CategoryService(session, event_broadcaster)
