"""Filesystem storage for task attachments."""
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from taskboard.config import UPLOAD_DIR, UPLOAD_URL_PREFIX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncomingFile:
    """An already-received upload: raw bytes plus client metadata."""
    data: bytes
    original_name: str
    mime_type: str = "application/octet-stream"


@dataclass(frozen=True)
class StoredFile:
    stored_name: str
    path: str
    size: int


class AttachmentStore:
    """Stores attachment bytes under generated names in a single directory."""

    def __init__(self, upload_dir: str = UPLOAD_DIR, url_prefix: str = UPLOAD_URL_PREFIX):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def store(self, data: bytes, original_name: str, mime_type: str) -> StoredFile:
        """Write ``data`` to durable storage and return its handle."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        suffix = Path(original_name or "").suffix.lower()
        stored_name = f"{uuid.uuid4().hex}{suffix}"
        (self.upload_dir / stored_name).write_bytes(data)
        logger.info(f"Stored attachment {original_name!r} as {stored_name} ({len(data)} bytes, {mime_type})")
        return StoredFile(
            stored_name=stored_name,
            path=f"{self.url_prefix}/{stored_name}",
            size=len(data)
        )

    def delete(self, path: str) -> bool:
        """
        Remove the file behind ``path``. Best-effort: never raises.

        Only the basename of ``path`` is used, so a handle can never point
        outside the upload directory.
        """
        file_path = self.upload_dir / Path(path).name
        try:
            if not file_path.is_file():
                logger.warning(f"Attachment file {file_path} does not exist")
                return False
            file_path.unlink()
            return True
        except OSError as e:
            logger.error(f"Error deleting attachment file {file_path}: {e}")
            return False
