"""Pytest configuration and fixtures for planner tests."""

from __future__ import annotations

import typing as t
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from planner_core.models import Assignment
from planner_core.store import InMemoryStore

# Monday morning; every test reasons relative to this instant
REFERENCE = datetime(2026, 3, 2, 9, 0)


@pytest.fixture
def store() -> InMemoryStore:
    """A fresh, empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def make_assignment(store: InMemoryStore) -> t.Callable[..., Assignment]:
    """Factory creating an assignment with tasks in one call.

    ``due_in_days`` is relative to REFERENCE; ``tasks`` is a list of
    minute allocations.
    """

    def _make(
        title: str = "Essay",
        priority: str = "medium",
        due_in_days: int = 3,
        tasks: t.Sequence[int] = (30,),
        course: str = "ENG 101",
    ) -> Assignment:
        assignment = store.create_assignment(
            title=title,
            course=course,
            due_date=REFERENCE.replace(hour=17) + timedelta(days=due_in_days),
            priority=priority,
        )
        for index, minutes in enumerate(tasks):
            store.create_task(assignment.id, f"{title} part {index + 1}", minutes)
        return assignment

    return _make


@pytest.fixture
def client(store: InMemoryStore) -> t.Iterator[TestClient]:
    """TestClient for the planner service bound to the test store."""
    from services.planner_service.app import app, get_store

    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
