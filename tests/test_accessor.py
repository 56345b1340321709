"""
Tests for reading and updating stored schedules.
"""

from datetime import timedelta

import pytest

from planner_core import accessor
from planner_core.demo import DEMO_ASSIGNMENTS, seed_demo_data
from planner_core.exceptions import NotFoundError, ValidationError

from conftest import REFERENCE


def test_day_schedule_is_expanded_and_ordered(store, make_assignment):
    essay = make_assignment("Essay", tasks=[30, 60])
    store.create_schedule_item(2, REFERENCE.replace(hour=14), REFERENCE.replace(hour=15))
    store.create_schedule_item(1, REFERENCE, REFERENCE.replace(minute=30))
    store.create_schedule_item(1, REFERENCE + timedelta(days=1), REFERENCE + timedelta(days=1, minutes=30))

    items = accessor.get_schedule_for_day(store, REFERENCE.date())

    assert [e.item.task_id for e in items] == [1, 2]
    assert items[0].task.description == "Essay part 1"
    assert items[0].assignment.id == essay.id


def test_dangling_item_has_no_task_or_assignment(store):
    """Items whose task no longer exists are returned with None instead of failing."""
    store.create_schedule_item(77, REFERENCE, REFERENCE.replace(hour=10))

    items = accessor.get_schedule_for_day(store, REFERENCE)

    assert len(items) == 1
    assert items[0].task is None
    assert items[0].assignment is None


def test_update_marks_complete(store):
    item = store.create_schedule_item(1, REFERENCE, REFERENCE.replace(hour=10))

    updated = accessor.update_schedule_item(store, item.id, completed=True)

    assert updated.completed is True
    assert updated.start_time == REFERENCE


def test_update_moves_item(store):
    item = store.create_schedule_item(1, REFERENCE, REFERENCE.replace(hour=10))

    updated = accessor.update_schedule_item(
        store, item.id, start_time=REFERENCE.replace(hour=16), end_time=REFERENCE.replace(hour=17),
    )

    assert (updated.start_time.hour, updated.end_time.hour) == (16, 17)


def test_update_rejects_bad_interval(store):
    item = store.create_schedule_item(1, REFERENCE, REFERENCE.replace(hour=10))
    with pytest.raises(ValidationError):
        accessor.update_schedule_item(store, item.id, start_time=REFERENCE.replace(hour=11))


def test_update_missing_item(store):
    with pytest.raises(NotFoundError, match="Schedule item not found: 5"):
        accessor.update_schedule_item(store, 5, completed=True)


def test_seed_demo_data(store):
    ids = seed_demo_data(store, now=REFERENCE)

    assert len(ids) == len(DEMO_ASSIGNMENTS)
    essay = store.get_assignment(ids[0])
    assert essay.priority == "high"
    assert essay.due_date == REFERENCE + timedelta(days=2)
    assert essay.estimated_time == sum(task[1] for task in DEMO_ASSIGNMENTS[0][5])
    lab_tasks = store.list_tasks_for_assignment(ids[1])
    assert [task.completed for task in lab_tasks] == [True, True, False, False]
