"""Initialize database tables."""
import logging

from sqlmodel import SQLModel

from taskboard.db.config import engine
from taskboard.models.category import Category  # noqa: F401
from taskboard.models.task import Task  # noqa: F401

logger = logging.getLogger(__name__)


def init_db(bind=engine):
    """Create all tables in the database."""
    logger.info("Creating all tables...")
    SQLModel.metadata.create_all(bind)
    logger.info("Tables created successfully.")


if __name__ == "__main__":
    init_db()
