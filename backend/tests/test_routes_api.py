from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from digital_pm.database import get_db
from digital_pm.main import app


@pytest.fixture()
def client(session_factory):
    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
def seeded(client):
    worker = client.post("/api/v1/workers", json={"name": "Alice Carter", "pin": "1111"}).json()
    project = client.post(
        "/api/v1/projects",
        json={
            "number": "2011",
            "client_name": "Jack Shippee",
            "client_address": "2690 Stuart St",
            "tasks": [
                {"description": "Full AC service", "price": 475, "estimated_hours": 5},
                {"description": "Install outlets", "quantity": 4, "price": 35.5, "estimated_hours": 4},
            ],
        },
    ).json()
    return worker, project


def _assign(client, project, task, worker, **extra):
    return client.post(
        "/api/v1/tasks/assign",
        json={"project_id": project["id"], "task_id": task["id"], "worker_id": worker["id"], **extra},
    )


def test_health_and_root(client) -> None:
    assert client.get("/api/v1/system/health").json()["status"] == "ok"
    assert client.get("/").json()["docs"] == "/docs"


def test_directory_endpoints(client, seeded) -> None:
    worker, project = seeded

    assert worker["pin"] == "1111"
    assert project["color"] == "blue"
    assert project["total_amount"] == 617.0
    assert [task["type"] for task in project["tasks"]] == ["hvac", "electrical"]

    assert client.get("/api/v1/workers/by-pin/1111").json()["id"] == worker["id"]
    missing = client.get("/api/v1/workers/by-pin/9999")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "No worker with this PIN"

    conflict = client.post("/api/v1/workers", json={"name": "Bob", "pin": "1111"})
    assert conflict.status_code == 409
    assert conflict.json()["code"] == "WORKER_PIN_TAKEN"

    assert client.delete(f"/api/v1/projects/{project['id']}").status_code == 204
    assert client.get(f"/api/v1/projects/{project['id']}").status_code == 404


def test_lifecycle_through_worker_endpoints(client, seeded) -> None:
    worker, project = seeded
    task = project["tasks"][0]

    assigned = _assign(client, project, task, worker, scheduled_date="2025-09-09")
    assert assigned.status_code == 200
    assert assigned.json()["status"] == "pending_acceptance"
    assert assigned.json()["phase"] == 1

    own = client.get("/api/v1/worker/tasks", params={"worker_id": worker["id"]}).json()
    assert [item["id"] for item in own] == [task["id"]]
    assert own[0]["project_number"] == "2011"

    for action, status in (("accept", "accepted"), ("start", "in_progress"), ("complete", "completed")):
        response = client.post(
            "/api/v1/worker/update-task",
            json={"project_id": project["id"], "task_id": task["id"], "worker_id": worker["id"], "action": action},
        )
        assert response.status_code == 200
        assert response.json()["status"] == status

    done = response.json()
    assert done["phase"] == 3
    assert [entry["action"] for entry in done["activity"]] == ["assigned", "accepted", "started", "completed"]


def test_invalid_transition_is_problem_json(client, seeded) -> None:
    worker, project = seeded
    task = project["tasks"][0]

    response = client.post(
        "/api/v1/worker/update-task",
        json={"project_id": project["id"], "task_id": task["id"], "worker_id": worker["id"], "action": "start"},
    )

    assert response.status_code == 409
    assert response.headers["content-type"].startswith("application/problem+json")
    body = response.json()
    assert body["code"] == "INVALID_TRANSITION"
    assert body["details"]["current_state"] == "unassigned"
    assert body["details"]["attempted_action"] == "start"


def test_unknown_worker_tasks_is_not_found(client) -> None:
    response = client.get("/api/v1/worker/tasks", params={"worker_id": "ghost"})

    assert response.status_code == 404
    assert response.json()["code"] == "WORKER_NOT_FOUND"


def test_calendar_week_and_schedule(client, seeded) -> None:
    worker, project = seeded
    first, second = project["tasks"]
    _assign(client, project, first, worker, scheduled_date="2025-09-09")
    _assign(client, project, second, worker)

    moved = client.post(
        "/api/v1/calendar/schedule-task",
        json={"project_id": project["id"], "task_id": second["id"], "day_index": 1, "week_start": "2025-09-08"},
    )
    assert moved.json()["scheduled_date"] == "2025-09-09"

    week = client.get("/api/v1/calendar/week", params={"start": "2025-09-14"}).json()
    assert week["week_start"] == "2025-09-08"
    assert len(week["days"]) == 5
    tuesday = week["rows"][0]["cells"][2]
    assert tuesday["total_hours"] == 9
    assert tuesday["overloaded"] is True
    assert tuesday["conflict"] is True
    assert tuesday["severity"] == "high"

    bad = client.post(
        "/api/v1/calendar/schedule-task",
        json={"project_id": project["id"], "task_id": second["id"], "day_index": 6},
    )
    assert bad.status_code == 422
    assert client.get("/api/v1/calendar/week", params={"view": "timeline"}).status_code == 422


def test_notification_endpoints(client, seeded) -> None:
    worker, project = seeded
    task = project["tasks"][0]
    _assign(client, project, task, worker)
    client.post(
        "/api/v1/worker/update-task",
        json={
            "project_id": project["id"],
            "task_id": task["id"],
            "worker_id": worker["id"],
            "action": "reject",
            "reason": "No access",
        },
    )

    admin = client.get("/api/v1/notifications").json()
    assert admin["unread_count"] == 2
    assert {item["type"] for item in admin["notifications"]} == {"task_assigned", "task_rejected"}

    # Rejected tasks are no longer assigned, so the worker feed is empty.
    feed = client.get("/api/v1/worker/notifications", params={"worker_id": worker["id"]}).json()
    assert feed == {"notifications": [], "unread_count": 0}

    target = admin["notifications"][0]["id"]
    assert client.put(f"/api/v1/notifications/{target}/read").json()["read"] is True
    assert client.put("/api/v1/notifications/read-all").json() == {"updated": 1}
    assert client.put("/api/v1/notifications/missing/read").status_code == 404


def test_worker_notification_clear_marks_read(client, seeded) -> None:
    worker, project = seeded
    _assign(client, project, project["tasks"][0], worker)
    _assign(client, project, project["tasks"][1], worker)

    feed = client.get("/api/v1/worker/notifications", params={"worker_id": worker["id"]}).json()
    assert feed["unread_count"] == 2

    single = client.put(
        "/api/v1/worker/notifications",
        json={"worker_id": worker["id"], "notification_id": feed["notifications"][0]["id"]},
    )
    assert single.json() == {"updated": 1}

    cleared = client.delete("/api/v1/worker/notifications", params={"worker_id": worker["id"]})
    assert cleared.json() == {"updated": 1}
    assert len(client.get("/api/v1/notifications").json()["notifications"]) == 2


def test_message_endpoints(client, seeded) -> None:
    worker, project = seeded
    task = project["tasks"][0]
    _assign(client, project, task, worker)

    sent = client.post(
        "/api/v1/worker/messages",
        json={"project_id": project["id"], "task_id": task["id"], "text": "Gate code 4411", "sender": "admin"},
    )
    assert sent.status_code == 201
    client.post(
        "/api/v1/worker/messages",
        json={"project_id": project["id"], "task_id": task["id"], "text": "Thanks", "sender": worker["id"]},
    )

    threads = client.get("/api/v1/worker/messages", params={"worker_id": worker["id"]}).json()
    assert len(threads) == 1
    assert threads[0]["unread_count"] == 1
    assert [message["text"] for message in threads[0]["messages"]] == ["Gate code 4411", "Thanks"]

    admin_threads = client.get("/api/v1/messages").json()
    assert admin_threads[0]["unread_count"] == 1

    marked = client.put(
        "/api/v1/worker/messages",
        json={"project_id": project["id"], "task_id": task["id"], "reader_id": worker["id"]},
    )
    assert marked.json() == {"updated": 1}

    feed = client.get("/api/v1/worker/notifications", params={"worker_id": worker["id"]}).json()
    assert "message_received" in {item["type"] for item in feed["notifications"]}


def test_changes_feed_returns_cursor(client, seeded) -> None:
    worker, project = seeded

    everything = client.get("/api/v1/changes").json()
    assert len(everything["tasks"]) == 2

    cursor = everything["server_time"]
    assert client.get("/api/v1/changes", params={"since": cursor}).json()["tasks"] == []

    _assign(client, project, project["tasks"][0], worker)
    delta = client.get("/api/v1/changes", params={"since": cursor}).json()
    assert [item["id"] for item in delta["tasks"]] == [project["tasks"][0]["id"]]
    assert delta["tasks"][0]["worker_name"] == "Alice Carter"
    assert [item["type"] for item in delta["notifications"]] == ["task_assigned"]
