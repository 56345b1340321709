"""
Tests for the planner MCP wrapper.

The wrapper's httpx client is replaced by a TestClient bound to the planner
service, so requests travel the real serialization path end to end.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from mcp_wrappers.planner import mcp_service
from planner_core.logger import reset_logging
from services.planner_service.app import app


@pytest.fixture
def wrapper(client, monkeypatch):
    """Route the wrapper's HTTP calls into the in-process service."""
    monkeypatch.setattr(mcp_service, "PLANNER_SERVICE_URL", "http://testserver")
    monkeypatch.setattr(mcp_service.httpx, "Client", lambda **kwargs: TestClient(app))
    monkeypatch.delenv("PLANNER_SEED_DEMO", raising=False)
    yield mcp_service
    reset_logging()


def test_create_assignment_and_tasks(wrapper, store):
    assignment = wrapper._create_assignment("Essay", "ENG 101", "2026-03-02T17:00:00", priority="high")
    task = wrapper._add_task(assignment.id, "Outline", 45)

    assert assignment.priority == "high"
    assert task.assignment_id == assignment.id
    assert store.get_assignment(assignment.id).estimated_time == 45
    assert [a.title for a in wrapper._list_assignments(incomplete_only=True)] == ["Essay"]


def test_generate_and_read_back(wrapper):
    essay = wrapper._create_assignment("Essay", "ENG 101", "2026-03-02T17:00:00", priority="high")
    lab = wrapper._create_assignment("Lab", "PHYS 202", "2026-03-04T17:00:00")
    wrapper._add_task(essay.id, "Outline", 45)
    wrapper._add_task(lab.id, "Analysis", 30)

    report = wrapper._generate_schedule([essay.id, lab.id], start_date="2026-03-02T09:00:00", available_minutes=60)

    assert [item.task_id for item in report.schedule_items] == [1]
    assert [entry.task_id for entry in report.not_scheduled] == [2]
    assert report.available_minutes == 60
    assert report.unscheduled_task_details[0].assignment_title == "Lab"

    day = wrapper._get_day_schedule("2026-03-02")
    assert len(day) == 1
    assert day[0].task.description == "Outline"
    assert day[0].assignment.title == "Essay"

    updated = wrapper._update_schedule_item(day[0].item.id, completed=True)
    assert updated.completed is True
    assert "Outline" in wrapper._show_day_schedule("2026-03-02")


def test_service_errors_become_runtime_errors(wrapper):
    with pytest.raises(RuntimeError, match="404"):
        wrapper._update_schedule_item(42, completed=True)
    with pytest.raises(RuntimeError, match="404"):
        wrapper._add_task(42, "orphan", 10)


def test_timeout_is_reported(monkeypatch):
    class TimingOutClient:
        def __init__(self, **kwargs):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def request(self, *args, **kwargs):
            raise httpx.ReadTimeout("slow")

    monkeypatch.setattr(mcp_service.httpx, "Client", TimingOutClient)

    with pytest.raises(RuntimeError, match="timed out"):
        mcp_service._list_assignments()


def test_add_task_forwards_progress(wrapper, store):
    """Completion and time spent reach the service unchanged."""
    assignment = wrapper._create_assignment("Lab", "PHYS 202", "2026-03-04T17:00:00")

    task = wrapper._add_task(assignment.id, "Organize data", 45, order=0, completed=True, time_spent=45)

    assert (task.completed, task.time_spent) == (True, 45)
    stored = store.get_task(task.id)
    assert (stored.completed, stored.time_spent) == (True, 45)
