"""
Error taxonomy for task and category operations.

Every error carries a stable ``code`` and a user-facing ``message``. Not-found
errors never reveal whether the entity exists under another owner.
"""

from typing import Any, Dict, Optional


class TaskboardError(Exception):
    """Base exception for taskboard operations"""
    code = "ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(TaskboardError):
    code = "NOT_FOUND"


class ValidationError(TaskboardError):
    code = "VALIDATION_ERROR"


class DuplicateNameError(TaskboardError):
    code = "DUPLICATE_NAME"


class InvalidReferenceError(TaskboardError):
    code = "INVALID_REFERENCE"


class StorageUnavailableError(TaskboardError):
    code = "STORAGE_UNAVAILABLE"


class ExternalSyncFailed(TaskboardError):
    """Calendar or attachment store failure. Always absorbed by the services."""
    code = "EXTERNAL_SYNC_FAILED"
