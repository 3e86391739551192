"""Owner-scoped data access for tasks and categories."""

from .category_repository import CategoryRepository
from .task_repository import TaskFilter, TaskRepository

__all__ = ["CategoryRepository", "TaskFilter", "TaskRepository"]
