"""
Task aggregate service.

Owns the task lifecycle: field validation and merge rules, attachment
bookkeeping, optional calendar mirroring and real-time fan-out. Calendar and
attachment-store side effects are best-effort; their failures are logged and
never change the outcome of the enclosing operation.
"""
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Union

from sqlmodel import Session

from taskboard.models.category import Category
from taskboard.models.task import TASK_PRIORITIES, TASK_STATUSES, Attachment, Task
from taskboard.repositories.category_repository import CategoryRepository
from taskboard.repositories.task_repository import TaskFilter, TaskRepository
from taskboard.schemas.task import TaskResponse
from taskboard.services import broadcaster as events
from taskboard.services.attachment_store import AttachmentStore, IncomingFile
from taskboard.services.best_effort import attempt
from taskboard.services.calendar_adapter import CalendarAdapter
from taskboard.services.errors import InvalidReferenceError, NotFoundError, ValidationError
from taskboard.utils.logger import get_logger

logger = get_logger(__name__)


class _Unset:
    """Marker for a field absent from an update request."""

    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET: Any = _Unset()

DueDate = Union[str, date, datetime, None]


@dataclass
class TaskFields:
    """Fields accepted when creating a task."""
    title: str
    description: Optional[str] = None
    status: Optional[str] = None
    due_date: DueDate = None
    priority: Optional[str] = None
    category_id: Optional[str] = None


@dataclass
class TaskChanges:
    """
    Fields of an update request.

    ``UNSET`` means "leave unchanged". For ``description``, ``due_date`` and
    ``category_id`` an explicit None or empty string clears the value; for
    ``title``, ``status`` and ``priority`` empty values are ignored.
    """
    title: Any = UNSET
    description: Any = UNSET
    status: Any = UNSET
    due_date: Any = UNSET
    priority: Any = UNSET
    category_id: Any = UNSET


@dataclass
class DeleteResult:
    id: str
    message: str = "Task deleted successfully"
    attachments_removed: int = 0
    attachment_failures: List[str] = field(default_factory=list)


def parse_due_date(value: DueDate) -> Optional[datetime]:
    """Normalize a due date to a naive UTC datetime; empty values give None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace('Z', '+00:00'))
        except ValueError:
            raise ValidationError(
                f"Invalid due date: {value!r}. Use ISO format (YYYY-MM-DD)",
                details={"field": "dueDate"}
            )
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _require_choice(value: str, choices: Sequence[str], field_name: str) -> str:
    if value not in choices:
        raise ValidationError(
            f"{field_name} must be one of: {', '.join(choices)}",
            details={"field": field_name, "value": value}
        )
    return value


def _clean_title(title: Optional[str]) -> str:
    return (title or "").strip()


class TaskService:
    """Service class for the task aggregate, scoped per request session."""

    def __init__(
        self,
        session: Session,
        attachment_store: AttachmentStore,
        calendar: CalendarAdapter,
        broadcaster: events.EventBroadcaster
    ):
        self.tasks = TaskRepository(session)
        self.categories = CategoryRepository(session)
        self.attachment_store = attachment_store
        self.calendar = calendar
        self.broadcaster = broadcaster

    # -- reads ---------------------------------------------------------------

    def list_tasks(self, owner_id: str, task_filter: Optional[TaskFilter] = None) -> List[Task]:
        return self.tasks.find(owner_id, task_filter)

    def get_task(self, task_id: str, owner_id: str) -> Task:
        task = self.tasks.find_one(task_id, owner_id)
        if not task:
            raise NotFoundError("Task not found", details={"task_id": task_id})
        return task

    def present(self, task: Task) -> TaskResponse:
        """Task as exposed to clients, with the category summary resolved."""
        category = None
        if task.category_id:
            category = self.categories.find_one(task.category_id, task.user_id)
        return TaskResponse.from_task(task, category)

    def present_many(self, tasks: List[Task], owner_id: str) -> List[TaskResponse]:
        by_id: Dict[str, Category] = {c.id: c for c in self.categories.find(owner_id)}
        return [TaskResponse.from_task(task, by_id.get(task.category_id)) for task in tasks]

    # -- mutations -----------------------------------------------------------

    def create_task(
        self,
        owner_id: str,
        fields: TaskFields,
        new_files: Sequence[IncomingFile] = (),
        want_calendar_sync: bool = False
    ) -> Task:
        """Create a task, store its files and optionally mirror it in the calendar."""
        title = _clean_title(fields.title)
        if not title:
            raise ValidationError("Title is required", details={"field": "title"})

        status = _require_choice(fields.status or "pending", TASK_STATUSES, "status")
        priority = _require_choice(fields.priority or "medium", TASK_PRIORITIES, "priority")
        due_date = parse_due_date(fields.due_date)
        category_id = self._validated_category_id(fields.category_id, owner_id)

        now = datetime.utcnow()
        task = Task(
            user_id=owner_id,
            title=title,
            description=(fields.description or "").strip(),
            status=status,
            priority=priority,
            due_date=due_date,
            category_id=category_id,
            created_at=now,
            updated_at=now
        )

        # Files go to storage before the record references them
        task.set_attachments(self._store_files(new_files, owner_id))

        if want_calendar_sync and due_date:
            event_id = attempt(
                "Calendar event create",
                self.calendar.create_event, due_date, title,
                owner_id=owner_id
            )
            if event_id:
                task.external_event_id = event_id

        task = self.tasks.insert(task)
        logger.info("Task created", task_id=task.id, owner_id=owner_id,
                    attachments=len(task.attachments), calendar_linked=bool(task.external_event_id))

        self._publish(owner_id, events.TASK_CREATED, self.present(task).to_payload())
        return task

    def update_task(
        self,
        task_id: str,
        owner_id: str,
        changes: TaskChanges,
        new_files: Sequence[IncomingFile] = ()
    ) -> Task:
        """Merge ``changes`` into the task, append new files and resync the calendar."""
        task = self.get_task(task_id, owner_id)

        # Validate everything before touching the loaded entity
        merged: Dict[str, Any] = {}
        if changes.title is not UNSET and _clean_title(changes.title):
            merged["title"] = _clean_title(changes.title)
        if changes.status is not UNSET and changes.status:
            merged["status"] = _require_choice(changes.status, TASK_STATUSES, "status")
        if changes.priority is not UNSET and changes.priority:
            merged["priority"] = _require_choice(changes.priority, TASK_PRIORITIES, "priority")

        if changes.description is not UNSET:
            merged["description"] = (changes.description or "").strip()
        if changes.due_date is not UNSET:
            merged["due_date"] = parse_due_date(changes.due_date)
        if changes.category_id is not UNSET:
            merged["category_id"] = self._validated_category_id(changes.category_id, owner_id)

        for name, value in merged.items():
            setattr(task, name, value)

        if new_files:
            task.set_attachments(task.attachment_list + self._store_files(new_files, owner_id))

        if task.external_event_id and task.due_date:
            attempt(
                "Calendar event update",
                self.calendar.update_event, task.external_event_id, task.due_date, task.title,
                task_id=task.id, owner_id=owner_id
            )

        task.updated_at = datetime.utcnow()
        task = self.tasks.replace(task)
        logger.info("Task updated", task_id=task.id, owner_id=owner_id)

        self._publish(owner_id, events.TASK_UPDATED, self.present(task).to_payload())
        return task

    def delete_task(self, task_id: str, owner_id: str) -> DeleteResult:
        """Delete a task together with its files and calendar event."""
        task = self.get_task(task_id, owner_id)
        result = DeleteResult(id=task.id)

        for attachment in task.attachment_list:
            removed = attempt(
                "Attachment file delete",
                self.attachment_store.delete, attachment.storage_path,
                task_id=task.id, attachment_id=attachment.id
            )
            if removed:
                result.attachments_removed += 1
            else:
                result.attachment_failures.append(attachment.id)

        if task.external_event_id:
            attempt(
                "Calendar event delete",
                self.calendar.delete_event, task.external_event_id,
                task_id=task.id, owner_id=owner_id
            )

        self.tasks.delete(result.id, owner_id)
        logger.info("Task deleted", task_id=result.id, owner_id=owner_id,
                    attachments_removed=result.attachments_removed,
                    attachment_failures=len(result.attachment_failures))

        self._publish(owner_id, events.TASK_DELETED, {"id": result.id})
        return result

    def remove_attachment(self, task_id: str, attachment_id: str, owner_id: str) -> Task:
        """Remove one attachment and its backing file."""
        task = self.get_task(task_id, owner_id)

        attachments = task.attachment_list
        target = next((item for item in attachments if item.id == attachment_id), None)
        if target is None:
            raise NotFoundError("Attachment not found", details={"attachment_id": attachment_id})

        attempt(
            "Attachment file delete",
            self.attachment_store.delete, target.storage_path,
            task_id=task.id, attachment_id=target.id
        )

        task.set_attachments([item for item in attachments if item.id != attachment_id])
        task.updated_at = datetime.utcnow()
        task = self.tasks.replace(task)

        self._publish(owner_id, events.TASK_UPDATED, self.present(task).to_payload())
        return task

    # -- calendar ------------------------------------------------------------

    def link_calendar(self, task_id: str, owner_id: str) -> Task:
        """Mirror a task with a due date in the calendar."""
        task = self.get_task(task_id, owner_id)
        if not task.due_date:
            raise ValidationError("Task does not have a due date", details={"field": "dueDate"})
        if task.external_event_id:
            return task

        event_id = attempt(
            "Calendar event create",
            self.calendar.create_event, task.due_date, task.title,
            task_id=task.id, owner_id=owner_id
        )
        if not event_id:
            return task

        task.external_event_id = event_id
        task.updated_at = datetime.utcnow()
        task = self.tasks.replace(task)
        self._publish(owner_id, events.TASK_UPDATED, self.present(task).to_payload())
        return task

    def unlink_calendar(self, task_id: str, owner_id: str) -> Task:
        """Remove the calendar event and forget the link."""
        task = self.get_task(task_id, owner_id)
        if not task.external_event_id:
            raise ValidationError("Task is not linked to the calendar")

        attempt(
            "Calendar event delete",
            self.calendar.delete_event, task.external_event_id,
            task_id=task.id, owner_id=owner_id
        )

        task.external_event_id = None
        task.updated_at = datetime.utcnow()
        task = self.tasks.replace(task)
        self._publish(owner_id, events.TASK_UPDATED, self.present(task).to_payload())
        return task

    def sync_calendar(self, owner_id: str) -> int:
        """Link every unlinked task with a due date. Returns how many were linked."""
        linked = 0
        for task in self.tasks.find_unsynced_with_due_date(owner_id):
            event_id = attempt(
                "Calendar event create",
                self.calendar.create_event, task.due_date, task.title,
                task_id=task.id, owner_id=owner_id
            )
            if not event_id:
                continue
            task.external_event_id = event_id
            task.updated_at = datetime.utcnow()
            task = self.tasks.replace(task)
            self._publish(owner_id, events.TASK_UPDATED, self.present(task).to_payload())
            linked += 1
        logger.info("Calendar sync finished", owner_id=owner_id, linked=linked)
        return linked

    # -- helpers -------------------------------------------------------------

    def _validated_category_id(self, category_id: Optional[str], owner_id: str) -> Optional[str]:
        if not category_id:
            return None
        if not self.categories.find_one(category_id, owner_id):
            raise InvalidReferenceError(
                "Category does not exist",
                details={"field": "categoryId", "category_id": category_id}
            )
        return category_id

    def _store_files(self, new_files: Sequence[IncomingFile], owner_id: str) -> List[Attachment]:
        """Store uploads in order. A file that cannot be stored is skipped."""
        attachments = []
        for incoming in new_files:
            stored = attempt(
                "Attachment store",
                self.attachment_store.store, incoming.data, incoming.original_name, incoming.mime_type,
                owner_id=owner_id, original_name=incoming.original_name
            )
            if stored is None:
                continue
            attachments.append(Attachment(
                id=str(uuid.uuid4()),
                stored_name=stored.stored_name,
                original_name=incoming.original_name,
                storage_path=stored.path,
                mime_type=incoming.mime_type,
                size_bytes=stored.size,
                uploaded_at=datetime.utcnow()
            ))
        return attachments

    def _publish(self, owner_id: str, event_name: str, payload: Dict[str, Any]):
        attempt(
            "Event publish",
            self.broadcaster.publish, owner_id, event_name, payload,
            owner_id=owner_id, event_name=event_name
        )
