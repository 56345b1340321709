"""
Tests for the planner REST service.

Runs the FastAPI app in-process through TestClient against a fresh store.
"""

import asyncio
from datetime import timedelta

import httpx
import pytest

from planner_core.config import SchedulerSettings

from conftest import REFERENCE


def _create_assignment(client, title="Essay", due="2026-03-02T17:00:00", priority="high"):
    response = client.post(
        "/assignments",
        json={"title": title, "course": "ENG 101", "dueDate": due, "priority": priority},
    )
    assert response.status_code == 201
    return response.json()


def _create_task(client, assignment_id, description="Draft", minutes=30):
    response = client.post(
        "/tasks",
        json={"assignmentId": assignment_id, "description": description, "timeAllocation": minutes},
    )
    assert response.status_code == 201
    return response.json()


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_assignment_round_trip_uses_camel_case(client):
    created = _create_assignment(client)

    fetched = client.get(f"/assignments/{created['id']}").json()

    assert fetched["dueDate"] == "2026-03-02T17:00:00"
    assert fetched["estimatedTime"] == 0
    assert fetched["completed"] is False
    assert "createdAt" in fetched


def test_missing_assignment_is_404(client):
    response = client.get("/assignments/999")

    assert response.status_code == 404
    assert response.json()["detail"] == "Assignment not found: 999"


def test_bad_priority_is_400(client):
    response = client.post(
        "/assignments",
        json={"title": "Essay", "course": "ENG", "dueDate": "2026-03-02T17:00:00", "priority": "urgent"},
    )

    assert response.status_code == 400


def test_tasks_update_estimated_time_and_completion(client):
    assignment = _create_assignment(client)
    first = _create_task(client, assignment["id"], minutes=30)
    second = _create_task(client, assignment["id"], minutes=45)

    assert client.get(f"/assignments/{assignment['id']}").json()["estimatedTime"] == 75

    client.put(f"/tasks/{first['id']}", json={"completed": True})
    assert client.get(f"/assignments/{assignment['id']}").json()["completed"] is False
    client.put(f"/tasks/{second['id']}", json={"completed": True, "timeSpent": 50})
    assert client.get(f"/assignments/{assignment['id']}").json()["completed"] is True

    client.delete(f"/tasks/{second['id']}")
    refreshed = client.get(f"/assignments/{assignment['id']}").json()
    assert refreshed["estimatedTime"] == 30


def test_task_validation(client):
    assignment = _create_assignment(client)

    zero = client.post("/tasks", json={"assignmentId": assignment["id"], "description": "x", "timeAllocation": 0})
    orphan = client.post("/tasks", json={"assignmentId": 404, "description": "x", "timeAllocation": 10})

    assert zero.status_code == 400
    assert orphan.status_code == 404


def test_reorder_tasks(client):
    assignment = _create_assignment(client)
    first = _create_task(client, assignment["id"], "first")
    second = _create_task(client, assignment["id"], "second")

    response = client.put(
        "/tasks/reorder",
        json={"tasks": [{"id": first["id"], "order": 1}, {"id": second["id"], "order": 0}, {"id": 99, "order": 2}]},
    )

    assert response.status_code == 200
    listed = client.get(f"/assignments/{assignment['id']}/tasks").json()
    assert [task["description"] for task in listed] == ["second", "first"]


def test_completing_assignment_completes_tasks(client):
    assignment = _create_assignment(client)
    task = _create_task(client, assignment["id"])

    client.put(f"/assignments/{assignment['id']}", json={"completed": True})

    listed = client.get(f"/assignments/{assignment['id']}/tasks").json()
    assert listed[0]["id"] == task["id"] and listed[0]["completed"] is True
    assert client.get("/assignments/incomplete").json() == []


def test_generate_schedule(client):
    today = _create_assignment(client, "Essay", "2026-03-02T17:00:00", "high")
    later = _create_assignment(client, "Lab", "2026-03-03T17:00:00", "medium")
    _create_task(client, today["id"], "Outline", 45)
    _create_task(client, later["id"], "Analysis", 30)

    response = client.post(
        "/schedule/generate",
        json={
            "assignmentIds": [today["id"], later["id"]],
            "startDate": "2026-03-02T08:00:00",
            "availableMinutes": 60,
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert len(body["scheduleItems"]) == 1
    item = body["scheduleItems"][0]
    assert (item["startTime"], item["endTime"]) == ("2026-03-02T09:00:00", "2026-03-02T09:45:00")
    assert item["task"]["description"] == "Outline"
    assert item["assignment"]["title"] == "Essay"
    assert body["notScheduled"] == [{"taskId": 2, "assignmentId": later["id"]}]
    assert body["totalTasksTime"] == 75
    assert body["todaysDueTasksTime"] == 45
    assert body["todaysUnscheduledCount"] == 0
    assert body["extraTasksAdded"] == 0
    assert body["unscheduledTaskDetails"][0]["assignmentTitle"] == "Lab"


def test_generate_schedule_with_start_time(client):
    assignment = _create_assignment(client, due="2026-03-05T17:00:00")
    _create_task(client, assignment["id"], "Read", 30)

    body = client.post(
        "/schedule/generate",
        json={"assignmentIds": [assignment["id"]], "startDate": "2026-03-02", "startTime": "14:30"},
    ).json()

    assert body["scheduleItems"][0]["startTime"] == "2026-03-02T14:30:00"


def test_generate_schedule_rejects_bad_requests(client):
    assert client.post("/schedule/generate", json={"assignmentIds": []}).status_code == 400
    assert client.post("/schedule/generate", json={"assignmentIds": [1], "availableMinutes": -1}).status_code == 400
    assert client.post("/schedule/generate", json={"assignmentIds": [1], "startTime": "25:00"}).status_code == 400
    assert client.post("/schedule/generate", json={"assignmentIds": [1], "startDate": "soon"}).status_code == 400


def test_get_and_update_day_schedule(client, store):
    assignment = _create_assignment(client)
    task = _create_task(client, assignment["id"], "Outline", 45)
    item = store.create_schedule_item(task["id"], REFERENCE, REFERENCE.replace(minute=45))

    day = client.get("/schedule", params={"date": "2026-03-02"}).json()
    assert [entry["id"] for entry in day] == [item.id]
    assert day[0]["task"]["id"] == task["id"]

    updated = client.put(f"/schedule/{item.id}", json={"completed": True}).json()
    assert updated["completed"] is True

    assert client.put("/schedule/999", json={"completed": True}).status_code == 404
    inverted = client.put(
        f"/schedule/{item.id}",
        json={"startTime": "2026-03-02T12:00:00", "endTime": "2026-03-02T11:00:00"},
    )
    assert inverted.status_code == 400


def test_dangling_schedule_item_serializes_nulls(client, store):
    store.create_schedule_item(123, REFERENCE, REFERENCE.replace(hour=10))

    day = client.get("/schedule", params={"date": "2026-03-02"}).json()

    assert day[0]["task"] is None
    assert day[0]["assignment"] is None


def test_show_schedule_formats_table(client, store):
    assignment = _create_assignment(client, "Essay")
    task = _create_task(client, assignment["id"], "Outline", 45)
    store.create_schedule_item(task["id"], REFERENCE, REFERENCE.replace(minute=45))

    text = client.get("/show-schedule", params={"date": "2026-03-02"}).json()["formattedSchedule"]
    empty = client.get("/show-schedule", params={"date": "2026-03-04"}).json()["formattedSchedule"]

    assert "09:00-09:45" in text
    assert "Outline" in text
    assert "Total: 1 block(s), 45 minute(s)" in text
    assert empty.startswith("📅 Nothing scheduled")


def test_deleting_assignment_cascades(client, store):
    assignment = _create_assignment(client)
    task = _create_task(client, assignment["id"])
    store.create_schedule_item(task["id"], REFERENCE, REFERENCE.replace(minute=30))

    assert client.delete(f"/assignments/{assignment['id']}").status_code == 200

    assert client.get(f"/assignments/{assignment['id']}/tasks").json() == []
    assert client.get("/schedule", params={"date": "2026-03-02"}).json() == []
    assert client.delete(f"/assignments/{assignment['id']}").status_code == 404


def test_delete_schedule_item(client, store):
    item = store.create_schedule_item(1, REFERENCE, REFERENCE.replace(minute=30))

    assert client.delete(f"/schedule/{item.id}").status_code == 200
    assert client.delete(f"/schedule/{item.id}").status_code == 404


@pytest.mark.asyncio
async def test_concurrent_generation_leaves_one_schedule(store):
    """Two generations for the same day do not leave duplicate items behind."""
    from services.planner_service.app import app, get_store

    assignment = store.create_assignment("Essay", "ENG 101", REFERENCE.replace(hour=17), "high")
    store.create_task(assignment.id, "Outline", 45)
    store.create_task(assignment.id, "Draft", 60)
    payload = {"assignmentIds": [assignment.id], "startDate": "2026-03-02T09:00:00"}

    app.dependency_overrides[get_store] = lambda: store
    try:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            responses = await asyncio.gather(
                client.post("/schedule/generate", json=payload),
                client.post("/schedule/generate", json=payload),
            )
    finally:
        app.dependency_overrides.clear()

    assert all(response.status_code == 200 for response in responses)
    stored = store.list_schedule_items_between(REFERENCE.replace(hour=0), REFERENCE.replace(hour=23))
    assert [item.task_id for item in stored] == [1, 2]


@pytest.mark.parametrize("zone", ["Etc/GMT+12", "Etc/GMT-14"])
def test_default_day_follows_configured_timezone(client, store, zone):
    """Without a date the service plans and reads 'today' in the configured zone."""
    from services.planner_service.app import app, get_settings

    settings = SchedulerSettings(timezone=zone)
    app.dependency_overrides[get_settings] = lambda: settings
    local_now = settings.now()
    assignment = _create_assignment(client, due=(local_now + timedelta(days=7)).isoformat())
    _create_task(client, assignment["id"], "Read", 30)

    body = client.post("/schedule/generate", json={"assignmentIds": [assignment["id"]]}).json()
    day = client.get("/schedule").json()

    first_start = body["scheduleItems"][0]["startTime"]
    assert first_start[:10] == local_now.date().isoformat()
    assert [entry["startTime"] for entry in day] == [first_start]
    created_at = client.get(f"/assignments/{assignment['id']}").json()["createdAt"]
    assert created_at[:10] == local_now.date().isoformat()
