"""
External calendar adapters.

Tasks with a due date can be mirrored as all-day events. Every adapter call
may raise ``ExternalSyncFailed``; the task services treat that as non-fatal.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import httpx

from taskboard.config import (
    CALENDAR_TIMEOUT_SECONDS,
    GOOGLE_CALENDAR_ACCESS_TOKEN,
    GOOGLE_CALENDAR_ID,
)
from taskboard.services.errors import ExternalSyncFailed

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"


class CalendarAdapter(ABC):
    """Capability to create, update and delete calendar events for tasks."""

    @abstractmethod
    def create_event(self, due_date: datetime, title: str) -> str:
        """Create an event and return its external id."""

    @abstractmethod
    def update_event(self, event_id: str, due_date: datetime, title: str) -> bool:
        """Move or rename an existing event."""

    @abstractmethod
    def delete_event(self, event_id: str) -> bool:
        """Delete an event."""


class DisabledCalendarAdapter(CalendarAdapter):
    """Used when no calendar credentials are configured."""

    def _unavailable(self):
        raise ExternalSyncFailed("Calendar integration is not configured")

    def create_event(self, due_date: datetime, title: str) -> str:
        self._unavailable()

    def update_event(self, event_id: str, due_date: datetime, title: str) -> bool:
        self._unavailable()

    def delete_event(self, event_id: str) -> bool:
        self._unavailable()


class GoogleCalendarAdapter(CalendarAdapter):
    """Google Calendar v3 REST client with a bounded per-call timeout."""

    def __init__(
        self,
        access_token: str,
        calendar_id: str = "primary",
        timeout: float = CALENDAR_TIMEOUT_SECONDS,
        client: Optional[httpx.Client] = None
    ):
        self.calendar_id = calendar_id
        self.client = client or httpx.Client(
            base_url=GOOGLE_CALENDAR_API,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=timeout
        )

    @property
    def _events_url(self) -> str:
        return f"/calendars/{self.calendar_id}/events"

    @staticmethod
    def _event_body(due_date: datetime, title: str) -> Dict[str, Any]:
        day = due_date.date()
        return {
            "summary": title,
            "start": {"date": day.isoformat()},
            "end": {"date": (day + timedelta(days=1)).isoformat()},
        }

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ExternalSyncFailed(f"Calendar request failed: {e}") from e
        return response

    def create_event(self, due_date: datetime, title: str) -> str:
        response = self._request("POST", self._events_url, json=self._event_body(due_date, title))
        if response.status_code >= 400:
            raise ExternalSyncFailed(f"Calendar create failed with status {response.status_code}")
        event_id = response.json().get("id")
        if not event_id:
            raise ExternalSyncFailed("Calendar create returned no event id")
        logger.info(f"Created calendar event {event_id}")
        return event_id

    def update_event(self, event_id: str, due_date: datetime, title: str) -> bool:
        response = self._request(
            "PATCH",
            f"{self._events_url}/{event_id}",
            json=self._event_body(due_date, title)
        )
        if response.status_code >= 400:
            raise ExternalSyncFailed(f"Calendar update failed with status {response.status_code}")
        return True

    def delete_event(self, event_id: str) -> bool:
        response = self._request("DELETE", f"{self._events_url}/{event_id}")
        # 410 Gone: the event was already removed on the provider side
        if response.status_code >= 400 and response.status_code != 410:
            raise ExternalSyncFailed(f"Calendar delete failed with status {response.status_code}")
        return True


def build_calendar_adapter() -> CalendarAdapter:
    """Build the adapter for the current configuration."""
    if not GOOGLE_CALENDAR_ACCESS_TOKEN:
        logger.warning("GOOGLE_CALENDAR_ACCESS_TOKEN not set. Calendar sync is disabled.")
        return DisabledCalendarAdapter()
    return GoogleCalendarAdapter(GOOGLE_CALENDAR_ACCESS_TOKEN, GOOGLE_CALENDAR_ID)
