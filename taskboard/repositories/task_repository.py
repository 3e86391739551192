"""Task repository with owner-scoped filtering and search."""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_, update
from sqlmodel import select

from taskboard.models.task import Task
from taskboard.repositories.base import BaseRepository


@dataclass
class TaskFilter:
    """Equality filters are AND-combined; ``search`` matches title OR description."""
    status: Optional[str] = None
    category_id: Optional[str] = None
    priority: Optional[str] = None
    search: Optional[str] = None


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class TaskRepository(BaseRepository):
    """CRUD for tasks, always scoped to the owning user."""

    def find(self, owner_id: str, task_filter: Optional[TaskFilter] = None) -> List[Task]:
        """Tasks of ``owner_id`` matching the filter, newest first."""
        task_filter = task_filter or TaskFilter()
        statement = select(Task).where(Task.user_id == owner_id)

        if task_filter.status:
            statement = statement.where(Task.status == task_filter.status)
        if task_filter.category_id:
            statement = statement.where(Task.category_id == task_filter.category_id)
        if task_filter.priority:
            statement = statement.where(Task.priority == task_filter.priority)

        if task_filter.search:
            pattern = _like_pattern(task_filter.search)
            statement = statement.where(
                or_(
                    Task.title.ilike(pattern, escape="\\"),
                    Task.description.ilike(pattern, escape="\\")
                )
            )

        statement = statement.order_by(Task.created_at.desc())
        with self.guard():
            return list(self.session.exec(statement).all())

    def find_one(self, task_id: str, owner_id: str) -> Optional[Task]:
        """Get a specific task by ID, ensuring user ownership."""
        statement = (
            select(Task)
            .where(Task.id == task_id)
            .where(Task.user_id == owner_id)
        )
        with self.guard():
            return self.session.exec(statement).first()

    def find_unsynced_with_due_date(self, owner_id: str) -> List[Task]:
        """Tasks with a due date that are not mirrored in the calendar yet."""
        statement = (
            select(Task)
            .where(Task.user_id == owner_id)
            .where(Task.due_date.is_not(None))
            .where(Task.external_event_id.is_(None))
            .order_by(Task.due_date.asc())
        )
        with self.guard():
            return list(self.session.exec(statement).all())

    def insert(self, task: Task) -> Task:
        return self._save(task)

    def replace(self, task: Task) -> Task:
        return self._save(task)

    def delete(self, task_id: str, owner_id: str) -> bool:
        """Delete a task, ensuring user ownership."""
        task = self.find_one(task_id, owner_id)
        if not task:
            return False
        with self.guard():
            self.session.delete(task)
            self.session.commit()
        return True

    def clear_category(self, category_id: str, owner_id: str) -> int:
        """Unset ``category_id`` on every task of the owner in one UPDATE."""
        statement = (
            update(Task)
            .where(Task.user_id == owner_id)
            .where(Task.category_id == category_id)
            .values(category_id=None, updated_at=datetime.utcnow())
        )
        with self.guard():
            result = self.session.execute(statement)
            self.session.commit()
        return result.rowcount
