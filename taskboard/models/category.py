"""Category model for SQLModel."""
from datetime import datetime
import uuid

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field

DEFAULT_CATEGORY_COLOR = "#3498db"


def category_name_key(name: str) -> str:
    """Comparison form of a category name: trimmed and Unicode case-folded."""
    return (name or "").strip().casefold()


class Category(SQLModel, table=True):
    """Owner-scoped grouping for tasks; names are unique per owner ignoring case."""

    __table_args__ = (
        UniqueConstraint("user_id", "name_key", name="uq_category_user_name_key"),
    )

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True,
        max_length=36
    )
    user_id: str = Field(index=True, max_length=255)
    name: str = Field(max_length=100)
    # Folded in Python: SQLite's lower() only folds ASCII
    name_key: str = Field(max_length=100)
    color: str = Field(default=DEFAULT_CATEGORY_COLOR, max_length=32)
    created_at: datetime = Field(default_factory=datetime.utcnow)
