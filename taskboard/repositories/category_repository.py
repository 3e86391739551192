"""Category repository."""
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from taskboard.models.category import Category, category_name_key
from taskboard.repositories.base import BaseRepository
from taskboard.services.errors import DuplicateNameError, TaskboardError


class CategoryRepository(BaseRepository):
    """CRUD for categories, always scoped to the owning user."""

    def _conflict(self, error: IntegrityError) -> Optional[TaskboardError]:
        # uq_category_user_name_key: a concurrent create or rename won the race
        return DuplicateNameError("Category with this name already exists", details={"field": "name"})

    def find(self, owner_id: str) -> List[Category]:
        """All categories of an owner sorted by name."""
        statement = (
            select(Category)
            .where(Category.user_id == owner_id)
            .order_by(Category.name.asc())
        )
        with self.guard():
            return list(self.session.exec(statement).all())

    def find_one(self, category_id: str, owner_id: str) -> Optional[Category]:
        statement = (
            select(Category)
            .where(Category.id == category_id)
            .where(Category.user_id == owner_id)
        )
        with self.guard():
            return self.session.exec(statement).first()

    def find_by_name_ci(
        self,
        name: str,
        owner_id: str,
        exclude_id: Optional[str] = None
    ) -> Optional[Category]:
        """Category of ``owner_id`` whose name equals ``name`` ignoring case."""
        statement = (
            select(Category)
            .where(Category.user_id == owner_id)
            .where(Category.name_key == category_name_key(name))
        )
        if exclude_id:
            statement = statement.where(Category.id != exclude_id)
        with self.guard():
            return self.session.exec(statement).first()

    def insert(self, category: Category) -> Category:
        return self._save(category)

    def replace(self, category: Category) -> Category:
        return self._save(category)

    def delete(self, category_id: str, owner_id: str) -> bool:
        category = self.find_one(category_id, owner_id)
        if not category:
            return False
        with self.guard():
            self.session.delete(category)
            self.session.commit()
        return True
