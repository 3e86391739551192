"""Integration tests for the HTTP and WebSocket surface."""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from .conftest import OTHER_OWNER, OWNER


def create_task(client: TestClient, headers: dict, **fields) -> dict:
    response = client.post("/api/tasks", json={"title": "Task", **fields}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestAuthentication:
    def test_missing_token_is_rejected(self, client: TestClient) -> None:
        assert client.get("/api/tasks").status_code == 401

    def test_bad_token_is_rejected(self, client: TestClient) -> None:
        response = client.get("/api/tasks", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    def test_health_is_public(self, client: TestClient) -> None:
        assert client.get("/health").json()["status"] == "healthy"


class TestTaskEndpoints:
    def test_create_returns_wire_fields(self, client: TestClient, auth_headers) -> None:
        body = create_task(client, auth_headers(), title="  Buy milk ", dueDate="2026-11-03")

        assert body["title"] == "Buy milk"
        assert body["status"] == "pending"
        assert body["priority"] == "medium"
        assert body["dueDate"].startswith("2026-11-03")
        assert body["categoryId"] is None
        assert body["category"] is None
        assert body["attachments"] == []
        assert body["googleCalendarEventId"] is None
        assert {"id", "createdAt", "updatedAt", "description"} <= body.keys()

    def test_create_validation_errors(self, client: TestClient, auth_headers) -> None:
        missing = client.post("/api/tasks", json={}, headers=auth_headers())
        blank = client.post("/api/tasks", json={"title": "   "}, headers=auth_headers())
        bad_priority = client.post("/api/tasks", json={"title": "x", "priority": "urgent"}, headers=auth_headers())

        assert missing.status_code == 422
        assert blank.status_code == 422
        assert blank.json()["code"] == "VALIDATION_ERROR"
        assert bad_priority.status_code == 422

    def test_multipart_create_with_files_and_calendar(self, client: TestClient, auth_headers, calendar, upload_dir) -> None:
        response = client.post(
            "/api/tasks",
            data={"title": "Taxes", "dueDate": "2026-11-30", "addToCalendar": "true"},
            files=[
                ("attachments", ("w2.pdf", b"%PDF-1.4", "application/pdf")),
                ("attachments", ("notes.txt", b"remember receipts", "text/plain")),
            ],
            headers=auth_headers(),
        )

        assert response.status_code == 201, response.text
        body = response.json()
        assert [a["originalName"] for a in body["attachments"]] == ["w2.pdf", "notes.txt"]
        assert body["attachments"][0]["mimeType"] == "application/pdf"
        assert body["attachments"][1]["sizeBytes"] == len(b"remember receipts")
        assert body["googleCalendarEventId"] == "evt-1"
        assert (upload_dir / body["attachments"][0]["storedName"]).exists()

    def test_too_many_files_are_rejected(self, client: TestClient, auth_headers) -> None:
        files = [("attachments", (f"{i}.txt", b"x", "text/plain")) for i in range(6)]

        response = client.post("/api/tasks", data={"title": "x"}, files=files, headers=auth_headers())

        assert response.status_code == 422

    def test_calendar_outage_still_creates(self, client: TestClient, auth_headers, calendar) -> None:
        calendar.fail = True

        body = create_task(client, auth_headers(), dueDate="2026-11-03", addToCalendar=True)

        assert body["googleCalendarEventId"] is None

    def test_update_distinguishes_omitted_from_empty(self, client: TestClient, auth_headers) -> None:
        headers = auth_headers()
        cleared = create_task(client, headers, description="details")
        kept = create_task(client, headers, description="details")

        response = client.put(f"/api/tasks/{cleared['id']}", json={"description": ""}, headers=headers)
        assert response.status_code == 200
        assert response.json()["description"] == ""

        response = client.put(f"/api/tasks/{kept['id']}", json={"status": "completed"}, headers=headers)
        assert response.json()["description"] == "details"
        assert response.json()["status"] == "completed"

    def test_multipart_update_clears_due_date_and_appends_files(self, client: TestClient, auth_headers) -> None:
        headers = auth_headers()
        task = create_task(client, headers, dueDate="2026-11-03", description="keep")

        response = client.put(
            f"/api/tasks/{task['id']}",
            data={"dueDate": ""},
            files=[("attachments", ("a.txt", b"a", "text/plain"))],
            headers=headers,
        )

        body = response.json()
        assert body["dueDate"] is None
        assert body["description"] == "keep"
        assert len(body["attachments"]) == 1

    def test_list_filters_and_search(self, client: TestClient, auth_headers) -> None:
        headers = auth_headers()
        create_task(client, headers, title="Write report", priority="high")
        create_task(client, headers, title="Groceries", description="report paper")
        create_task(client, headers, title="Gym", status="completed")
        create_task(client, auth_headers(OTHER_OWNER), title="Their report")

        searched = client.get("/api/tasks", params={"search": "REPORT"}, headers=headers).json()
        by_status = client.get("/api/tasks", params={"status": "completed"}, headers=headers).json()
        combined = client.get("/api/tasks", params={"search": "report", "priority": "high"}, headers=headers).json()

        assert sorted(t["title"] for t in searched) == ["Groceries", "Write report"]
        assert [t["title"] for t in by_status] == ["Gym"]
        assert [t["title"] for t in combined] == ["Write report"]

    def test_other_users_task_is_not_found(self, client: TestClient, auth_headers) -> None:
        task = create_task(client, auth_headers(OWNER))
        other = auth_headers(OTHER_OWNER)

        assert client.get(f"/api/tasks/{task['id']}", headers=other).status_code == 404
        assert client.put(f"/api/tasks/{task['id']}", json={"title": "x"}, headers=other).status_code == 404
        assert client.delete(f"/api/tasks/{task['id']}", headers=other).status_code == 404
        assert client.get(f"/api/tasks/{task['id']}", headers=auth_headers(OWNER)).status_code == 200

    def test_delete_and_remove_attachment(self, client: TestClient, auth_headers) -> None:
        headers = auth_headers()
        response = client.post(
            "/api/tasks",
            data={"title": "With file"},
            files=[("attachments", ("a.txt", b"a", "text/plain"))],
            headers=headers,
        )
        task = response.json()
        attachment_id = task["attachments"][0]["id"]

        missing = client.delete(f"/api/tasks/{task['id']}/attachments/nope", headers=headers)
        assert missing.status_code == 404
        assert missing.json()["message"] == "Attachment not found"

        removed = client.delete(f"/api/tasks/{task['id']}/attachments/{attachment_id}", headers=headers)
        assert removed.status_code == 200
        assert removed.json()["attachments"] == []

        deleted = client.delete(f"/api/tasks/{task['id']}", headers=headers)
        assert deleted.json() == {"message": "Task deleted successfully", "id": task["id"]}
        assert client.get("/api/tasks", headers=headers).json() == []


class TestCategoryEndpoints:
    def test_crud_and_cascade(self, client: TestClient, auth_headers) -> None:
        headers = auth_headers()
        created = client.post("/api/categories", json={"name": "Work"}, headers=headers)
        assert created.status_code == 201
        category = created.json()
        assert category["color"] == "#3498db"

        duplicate = client.post("/api/categories", json={"name": "WORK"}, headers=headers)
        assert duplicate.status_code == 400
        assert duplicate.json()["code"] == "DUPLICATE_NAME"

        task = create_task(client, headers, categoryId=category["id"])
        assert task["category"] == {"id": category["id"], "name": "Work", "color": "#3498db"}

        renamed = client.put(f"/api/categories/{category['id']}", json={"name": "Office"}, headers=headers)
        assert renamed.json()["name"] == "Office"

        deleted = client.delete(f"/api/categories/{category['id']}", headers=headers)
        assert deleted.status_code == 200
        assert client.get("/api/categories", headers=headers).json() == []

        refreshed = client.get(f"/api/tasks/{task['id']}", headers=headers).json()
        assert refreshed["categoryId"] is None
        assert refreshed["category"] is None

    def test_foreign_category_reference_is_rejected(self, client: TestClient, auth_headers) -> None:
        theirs = client.post("/api/categories", json={"name": "Theirs"}, headers=auth_headers(OTHER_OWNER)).json()

        response = client.post("/api/tasks", json={"title": "x", "categoryId": theirs["id"]}, headers=auth_headers())

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_REFERENCE"


class TestCalendarEndpoints:
    def test_link_unlink_sync(self, client: TestClient, auth_headers) -> None:
        headers = auth_headers()
        dated = create_task(client, headers, title="dated", dueDate="2026-11-03")
        undated = create_task(client, headers, title="undated")

        assert client.post(f"/api/calendar/task/{undated['id']}", headers=headers).status_code == 422

        linked = client.post(f"/api/calendar/task/{dated['id']}", headers=headers).json()
        assert linked["googleCalendarEventId"] == "evt-1"

        unlinked = client.delete(f"/api/calendar/task/{dated['id']}", headers=headers).json()
        assert unlinked["googleCalendarEventId"] is None

        synced = client.post("/api/calendar/sync", headers=headers).json()
        assert synced["synced"] == 1


class TestEventStream:
    def test_rejects_invalid_token(self, client: TestClient) -> None:
        with pytest.raises(WebSocketDisconnect) as excinfo:
            with client.websocket_connect("/ws?token=garbage"):
                pass

        assert excinfo.value.code == 4401

    def test_owner_receives_own_events_only(self, client: TestClient, auth_headers, token_for) -> None:
        with client.websocket_connect(f"/ws?token={token_for(OWNER)}") as websocket:
            greeting = websocket.receive_json()
            assert greeting["event"] == "connected"
            assert greeting["data"] == {"userId": OWNER}

            create_task(client, auth_headers(OTHER_OWNER), title="not for you")
            mine = create_task(client, auth_headers(OWNER), title="for you")

            message = websocket.receive_json()
            assert message["event"] == "taskCreated"
            assert message["data"]["id"] == mine["id"]
            assert message["data"]["title"] == "for you"

            client.delete(f"/api/tasks/{mine['id']}", headers=auth_headers(OWNER))
            assert websocket.receive_json()["event"] == "taskDeleted"

    def test_client_frames_do_not_close_the_channel(self, client: TestClient, auth_headers, token_for) -> None:
        with client.websocket_connect(f"/ws?token={token_for(OWNER)}") as websocket:
            assert websocket.receive_json()["event"] == "connected"

            websocket.send_bytes(b"\x00\x01")
            websocket.send_text("ping")
            created = create_task(client, auth_headers(OWNER), title="still listening")

            message = websocket.receive_json()
            assert message["event"] == "taskCreated"
            assert message["data"]["id"] == created["id"]
