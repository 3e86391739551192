"""Shared repository plumbing."""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlmodel import Session

from taskboard.services.errors import StorageUnavailableError, TaskboardError

logger = logging.getLogger(__name__)


class BaseRepository:
    """Wraps a session and turns connectivity failures into StorageUnavailableError."""

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def guard(self) -> Iterator[None]:
        try:
            yield
        except (OperationalError, InterfaceError) as e:
            self.session.rollback()
            logger.error(f"Document store unavailable: {e}")
            raise StorageUnavailableError("Storage is unavailable") from e

    def _conflict(self, error: IntegrityError) -> Optional[TaskboardError]:
        """Domain error for a constraint violation, or None to propagate it."""
        return None

    def _save(self, entity):
        with self.guard():
            self.session.add(entity)
            try:
                self.session.commit()
            except IntegrityError as e:
                self.session.rollback()
                conflict = self._conflict(e)
                if conflict is None:
                    raise
                raise conflict from e
            self.session.refresh(entity)
        return entity
