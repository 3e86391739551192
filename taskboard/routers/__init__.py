"""Routers package for the Taskboard API."""

from .calendar import router as calendar_router
from .categories import router as categories_router
from .events import router as events_router
from .tasks import router as tasks_router

__all__ = ["calendar_router", "categories_router", "events_router", "tasks_router"]
