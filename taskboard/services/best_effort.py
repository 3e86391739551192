"""Attempt-and-log wrapper for side effects that must never fail an operation."""
from typing import Any, Callable, Optional, TypeVar

from taskboard.utils.logger import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


def attempt(action: str, func: Callable[..., T], *args: Any, **context: Any) -> Optional[T]:
    """
    Call ``func(*args)`` once and return its result, or None if it raised.

    The error is logged together with ``context`` and is not propagated, so
    callers only ever see an optional success value.
    """
    try:
        return func(*args)
    except Exception as e:
        logger.warning(
            f"{action} failed",
            error=str(e),
            error_type=type(e).__name__,
            **context
        )
        return None
