"""Tests for the attachment store, the Google Calendar adapter and logging helpers."""

import json
import logging
from datetime import datetime

import httpx
import pytest

from taskboard.services.attachment_store import AttachmentStore
from taskboard.services.best_effort import attempt
from taskboard.services.calendar_adapter import (
    GOOGLE_CALENDAR_API,
    DisabledCalendarAdapter,
    GoogleCalendarAdapter,
)
from taskboard.services.errors import ExternalSyncFailed
from taskboard.utils.logger import PLAIN_FORMAT, JsonFormatter


class TestAttachmentStore:
    def test_store_and_delete(self, tmp_path) -> None:
        store = AttachmentStore(str(tmp_path), "/uploads")

        stored = store.store(b"hello", "Notes.TXT", "text/plain")

        assert stored.stored_name.endswith(".txt")
        assert stored.path == f"/uploads/{stored.stored_name}"
        assert stored.size == 5
        assert (tmp_path / stored.stored_name).read_bytes() == b"hello"

        assert store.delete(stored.path) is True
        assert not (tmp_path / stored.stored_name).exists()

    def test_delete_missing_file_reports_failure(self, tmp_path) -> None:
        assert AttachmentStore(str(tmp_path)).delete("/uploads/nothing-here.txt") is False

    def test_delete_never_leaves_upload_dir(self, tmp_path) -> None:
        uploads = tmp_path / "uploads"
        uploads.mkdir()
        outside = tmp_path / "secret.txt"
        outside.write_text("keep")

        assert AttachmentStore(str(uploads)).delete("/uploads/../secret.txt") is False
        assert outside.exists()


def google_adapter(handler) -> GoogleCalendarAdapter:
    client = httpx.Client(base_url=GOOGLE_CALENDAR_API, transport=httpx.MockTransport(handler))
    return GoogleCalendarAdapter("token", calendar_id="primary", client=client)


class TestGoogleCalendarAdapter:
    def test_create_event_posts_all_day_event(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "google-evt"})

        event_id = google_adapter(handler).create_event(datetime(2026, 11, 3, 15, 30), "Dentist")

        assert event_id == "google-evt"
        assert seen["method"] == "POST"
        assert seen["path"] == "/calendar/v3/calendars/primary/events"
        assert seen["body"] == {
            "summary": "Dentist",
            "start": {"date": "2026-11-03"},
            "end": {"date": "2026-11-04"},
        }

    def test_error_status_raises(self) -> None:
        adapter = google_adapter(lambda request: httpx.Response(500))

        with pytest.raises(ExternalSyncFailed):
            adapter.create_event(datetime(2026, 11, 3), "x")
        with pytest.raises(ExternalSyncFailed):
            adapter.update_event("evt", datetime(2026, 11, 3), "x")

    def test_transport_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(ExternalSyncFailed):
            google_adapter(handler).delete_event("evt")

    def test_delete_of_gone_event_is_success(self) -> None:
        assert google_adapter(lambda request: httpx.Response(410)).delete_event("evt") is True

    def test_disabled_adapter_always_fails(self) -> None:
        with pytest.raises(ExternalSyncFailed):
            DisabledCalendarAdapter().create_event(datetime(2026, 11, 3), "x")


class TestAttempt:
    def test_returns_result(self) -> None:
        assert attempt("add", lambda a, b: a + b, 1, 2) == 3

    def test_swallows_errors(self) -> None:
        def broken():
            raise ExternalSyncFailed("down")

        assert attempt("broken call", broken, task_id="t1") is None

    def test_failure_is_logged_with_context(self, caplog) -> None:
        def broken():
            raise ExternalSyncFailed("down")

        with caplog.at_level(logging.WARNING, logger="taskboard"):
            attempt("Calendar event create", broken, task_id="t1")

        record = caplog.records[-1]
        assert record.getMessage() == "Calendar event create failed"
        assert record.structured == {"error": "down", "error_type": "ExternalSyncFailed", "task_id": "t1"}


class TestJsonFormatter:
    def test_structured_record_is_one_json_line(self) -> None:
        record = logging.LogRecord("taskboard.x", logging.INFO, __file__, 1, "Task created", None, None)
        record.structured = {"task_id": "t1", "attachments": 2}

        document = json.loads(JsonFormatter(PLAIN_FORMAT).format(record))

        assert document["message"] == "Task created"
        assert document["level"] == "INFO"
        assert document["task_id"] == "t1"
        assert document["attachments"] == 2

    def test_plain_record_keeps_text_format(self) -> None:
        record = logging.LogRecord("taskboard.x", logging.INFO, __file__, 1, "hello %s", ("world",), None)

        assert JsonFormatter("%(levelname)s %(message)s").format(record) == "INFO hello world"
