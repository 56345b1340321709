# -*- coding: utf-8 -*-
"""Read and update access to stored schedules."""
from __future__ import annotations

import typing as t
from datetime import date, datetime, time

from planner_core.exceptions import NotFoundError
from planner_core.models import ExpandedScheduleItem, ScheduleItem
from planner_core.store import EntityStore


def expand_schedule_items(store: EntityStore, items: t.Iterable[ScheduleItem]) -> list[ExpandedScheduleItem]:
    """Join schedule items with their task and assignment.

    Missing tasks or assignments come back as None rather than raising.
    """
    expanded = []
    for item in items:
        task = store.get_task(item.task_id)
        assignment = store.get_assignment(task.assignment_id) if task else None
        expanded.append(ExpandedScheduleItem(item=item, task=task, assignment=assignment))
    return expanded


def get_schedule_for_day(store: EntityStore, day: t.Union[date, datetime]) -> list[ExpandedScheduleItem]:
    """Return every item starting on ``day``, ordered by start time."""
    if isinstance(day, datetime):
        day = day.date()
    items = store.list_schedule_items_between(
        datetime.combine(day, time.min),
        datetime.combine(day, time.max),
    )
    return expand_schedule_items(store, items)


def update_schedule_item(
    store: EntityStore,
    item_id: int,
    completed: t.Optional[bool] = None,
    start_time: t.Optional[datetime] = None,
    end_time: t.Optional[datetime] = None,
) -> ScheduleItem:
    """Apply a partial update to one schedule item.

    :raises NotFoundError: If the item does not exist.
    :raises ValidationError: If the resulting start is not before the end.
    """
    changes: dict[str, t.Any] = {}
    if completed is not None:
        changes["completed"] = completed
    if start_time is not None:
        changes["start_time"] = start_time
    if end_time is not None:
        changes["end_time"] = end_time

    updated = store.update_schedule_item(item_id, **changes)
    if updated is None:
        raise NotFoundError("Schedule item", item_id)
    return updated
