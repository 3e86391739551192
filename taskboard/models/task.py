"""Task model for SQLModel."""
from datetime import datetime
from typing import Any, Dict, List, Optional
import uuid

from pydantic import BaseModel
from sqlalchemy import JSON, CheckConstraint, Column, Index, Text
from sqlmodel import SQLModel, Field

TASK_STATUSES = ("pending", "in-progress", "completed")
TASK_PRIORITIES = ("low", "medium", "high")


class Attachment(BaseModel):
    """File attached to a task. Embedded in the task row, never shared."""

    id: str
    stored_name: str
    original_name: str
    storage_path: str
    mime_type: str
    size_bytes: int
    uploaded_at: datetime


class Task(SQLModel, table=True):
    """Task entity owned by a single user."""

    __table_args__ = (
        CheckConstraint("status IN ('pending','in-progress','completed')", name="ck_task_status"),
        CheckConstraint("priority IN ('low','medium','high')", name="ck_task_priority"),
        Index("idx_task_user_created", "user_id", "created_at"),
    )

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True,
        max_length=36
    )
    user_id: str = Field(index=True, max_length=255)
    title: str = Field(max_length=200)
    description: str = Field(default="", sa_column=Column(Text, nullable=False, default=""))
    status: str = Field(default="pending", max_length=20)  # pending, in-progress, completed
    priority: str = Field(default="medium", max_length=20)  # low, medium, high
    due_date: Optional[datetime] = Field(default=None)
    category_id: Optional[str] = Field(default=None, foreign_key="category.id", index=True)
    attachments: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False, default=list)
    )
    external_event_id: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def attachment_list(self) -> List[Attachment]:
        """Attachments parsed from their stored JSON form, in upload order."""
        return [Attachment.model_validate(item) for item in self.attachments or []]

    def set_attachments(self, attachments: List[Attachment]):
        """Replace the stored attachment list (a new list so the change is tracked)."""
        self.attachments = [item.model_dump(mode="json") for item in attachments]
