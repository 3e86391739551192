"""
Logging utilities.

Modules log through ``logging.getLogger(__name__)`` or, where a record
carries identifiers worth filtering on (task, owner, attachment), through a
``StructuredLogger`` whose keyword fields are rendered as one JSON line.
"""

import json
import logging
import sys
from datetime import datetime
from typing import Any, Dict

from taskboard.config import LOG_LEVEL

PLAIN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class JsonFormatter(logging.Formatter):
    """Render records carrying ``structured`` fields as JSON; plain records as text."""

    def format(self, record: logging.LogRecord) -> str:
        fields = getattr(record, "structured", None)
        if fields is None:
            return super().format(record)

        document: Dict[str, Any] = {
            "timestamp": datetime.utcfromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        document.update(fields)
        return json.dumps(document, default=str)


def configure_logging(level: str = LOG_LEVEL):
    """Install a single stdout handler on the ``taskboard`` logger tree."""
    root = logging.getLogger("taskboard")
    root.setLevel(level.upper())

    # Prevent adding handlers multiple times
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter(PLAIN_FORMAT))
        root.addHandler(handler)


class StructuredLogger:
    """Thin wrapper passing keyword fields through to the JSON formatter."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def log(self, level: int, message: str, **fields: Any):
        if self.logger.isEnabledFor(level):
            self.logger.log(level, message, extra={"structured": fields})

    def debug(self, message: str, **fields: Any):
        self.log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any):
        self.log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any):
        self.log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields: Any):
        self.log(logging.ERROR, message, **fields)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger.

    Args:
        name: Logger name, usually the module ``__name__``

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(name)
