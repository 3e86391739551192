"""Category service: per-owner unique names and cascade clear on delete."""
from typing import List, Optional

from sqlmodel import Session

from taskboard.models.category import DEFAULT_CATEGORY_COLOR, Category, category_name_key
from taskboard.repositories.category_repository import CategoryRepository
from taskboard.repositories.task_repository import TaskRepository
from taskboard.schemas.category import CategoryResponse
from taskboard.services import broadcaster as events
from taskboard.services.best_effort import attempt
from taskboard.services.errors import DuplicateNameError, NotFoundError, ValidationError
from taskboard.utils.logger import get_logger

logger = get_logger(__name__)


class CategoryService:
    """Service class for category CRUD."""

    def __init__(self, session: Session, broadcaster: events.EventBroadcaster):
        self.categories = CategoryRepository(session)
        self.tasks = TaskRepository(session)
        self.broadcaster = broadcaster

    def list_categories(self, owner_id: str) -> List[Category]:
        return self.categories.find(owner_id)

    def get_category(self, category_id: str, owner_id: str) -> Category:
        category = self.categories.find_one(category_id, owner_id)
        if not category:
            raise NotFoundError("Category not found", details={"category_id": category_id})
        return category

    def create_category(self, owner_id: str, name: str, color: Optional[str] = None) -> Category:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required", details={"field": "name"})
        self._ensure_unique(name, owner_id)

        category = self.categories.insert(Category(
            user_id=owner_id,
            name=name,
            name_key=category_name_key(name),
            color=(color or "").strip() or DEFAULT_CATEGORY_COLOR
        ))
        logger.info("Category created", category_id=category.id, owner_id=owner_id)

        self._publish(owner_id, events.CATEGORY_CREATED, category)
        return category

    def update_category(
        self,
        category_id: str,
        owner_id: str,
        name: Optional[str] = None,
        color: Optional[str] = None
    ) -> Category:
        """Rename or recolor a category; blank values keep the current ones."""
        category = self.get_category(category_id, owner_id)

        name = (name or "").strip()
        if name and name != category.name:
            self._ensure_unique(name, owner_id, exclude_id=category.id)
            category.name = name
            category.name_key = category_name_key(name)
        if color and color.strip():
            category.color = color.strip()

        category = self.categories.replace(category)
        logger.info("Category updated", category_id=category.id, owner_id=owner_id)

        self._publish(owner_id, events.CATEGORY_UPDATED, category)
        return category

    def delete_category(self, category_id: str, owner_id: str) -> str:
        """Delete a category after detaching it from every task that uses it."""
        category = self.get_category(category_id, owner_id)

        category_id = category.id
        cleared = self.tasks.clear_category(category_id, owner_id)
        self.categories.delete(category_id, owner_id)
        logger.info("Category deleted", category_id=category_id, owner_id=owner_id, tasks_cleared=cleared)

        attempt(
            "Event publish",
            self.broadcaster.publish, owner_id, events.CATEGORY_DELETED, {"id": category_id},
            owner_id=owner_id
        )
        return category_id

    def _ensure_unique(self, name: str, owner_id: str, exclude_id: Optional[str] = None):
        if self.categories.find_by_name_ci(name, owner_id, exclude_id=exclude_id):
            raise DuplicateNameError(
                "Category with this name already exists",
                details={"field": "name", "name": name}
            )

    def _publish(self, owner_id: str, event_name: str, category: Category):
        payload = CategoryResponse.model_validate(category).model_dump(mode="json", by_alias=True)
        attempt(
            "Event publish",
            self.broadcaster.publish, owner_id, event_name, payload,
            owner_id=owner_id
        )
