"""Task schemas for requests, responses and event payloads."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taskboard.models.category import Category
from taskboard.models.task import Task
from taskboard.schemas.category import CategorySummary

camel_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskCreate(BaseModel):
    """Schema for creating a task. Semantic validation happens in the service."""
    title: str = Field(..., max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    status: Optional[str] = None
    due_date: Optional[str] = None  # ISO date or datetime string
    priority: Optional[str] = None
    category_id: Optional[str] = None
    add_to_calendar: bool = False

    model_config = camel_config


class TaskUpdate(BaseModel):
    """
    Schema for updating a task.

    Only keys present in the request end up in ``model_fields_set``; the
    router relies on that to tell "leave unchanged" apart from "clear".
    """
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    status: Optional[str] = None
    due_date: Optional[str] = None
    priority: Optional[str] = None
    category_id: Optional[str] = None

    model_config = camel_config


class AttachmentResponse(BaseModel):
    id: str
    stored_name: str
    original_name: str
    storage_path: str
    mime_type: str
    size_bytes: int
    uploaded_at: datetime

    model_config = camel_config


class TaskResponse(BaseModel):
    """Schema for task API responses and real-time event payloads."""
    id: str
    title: str
    description: str
    status: str
    due_date: Optional[datetime] = None
    priority: str
    category_id: Optional[str] = None
    category: Optional[CategorySummary] = None
    attachments: List[AttachmentResponse] = []
    google_calendar_event_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = camel_config

    @classmethod
    def from_task(cls, task: Task, category: Optional[Category] = None) -> "TaskResponse":
        """Build the response for a task with its category resolved."""
        return cls(
            id=task.id,
            title=task.title,
            description=task.description or "",
            status=task.status,
            due_date=task.due_date,
            priority=task.priority,
            category_id=task.category_id,
            category=CategorySummary.model_validate(category) if category else None,
            attachments=[
                AttachmentResponse.model_validate(item.model_dump())
                for item in task.attachment_list
            ],
            google_calendar_event_id=task.external_event_id,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )

    def to_payload(self) -> dict:
        """JSON-ready dict using wire (camelCase) names."""
        return self.model_dump(mode="json", by_alias=True)


class DeleteResponse(BaseModel):
    message: str
    id: str


class CalendarSyncResponse(BaseModel):
    message: str
    synced: int
