"""Database configuration for the Taskboard API."""
import logging
from typing import Generator

from sqlalchemy import event
from sqlmodel import Session, create_engine

from taskboard.config import DATABASE_URL

logger = logging.getLogger(__name__)

IS_SQLITE = DATABASE_URL.startswith("sqlite")

# SQLite connections are shared with the request thread pool
connect_args = {"check_same_thread": False} if IS_SQLITE else {}

engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args, pool_pre_ping=not IS_SQLITE)

if IS_SQLITE:
    logger.info(f"Using SQLite database: {DATABASE_URL}")

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        # Enable foreign keys and WAL mode for better concurrency
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()
else:
    logger.info("Using PostgreSQL database")


def get_session() -> Generator[Session, None, None]:
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session
