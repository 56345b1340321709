# -*- coding: utf-8 -*-
"""
Entity store for assignments, tasks and schedule items.

Entities are kept in per-kind dicts keyed by integer ids handed out from
incrementing counters; records point at each other by id only. The
in-memory backend is the one the service runs with. In a real deployment
it would be replaced with a persistent implementation of EntityStore.
"""
from __future__ import annotations

import logging
import threading
import typing as t
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime

from planner_core.exceptions import NotFoundError, ValidationError
from planner_core.models import PRIORITIES, Assignment, ScheduleItem, Task

logger = logging.getLogger(__name__)

_ASSIGNMENT_FIELDS = {"title", "course", "description", "due_date", "priority", "estimated_time", "completed"}
_TASK_FIELDS = {"description", "time_allocation", "completed", "order", "time_spent"}
_SCHEDULE_ITEM_FIELDS = {"start_time", "end_time", "completed"}


class EntityStore(t.Protocol):
    """Repository interface the scheduler and the service depend on."""

    def create_assignment(
        self,
        title: str,
        course: str,
        due_date: datetime,
        priority: str,
        description: t.Optional[str] = None,
        completed: bool = False,
        created_at: t.Optional[datetime] = None,
    ) -> Assignment: ...

    def get_assignment(self, assignment_id: int) -> t.Optional[Assignment]: ...

    def list_assignments(self) -> list[Assignment]: ...

    def list_incomplete_assignments(self) -> list[Assignment]: ...

    def update_assignment(self, assignment_id: int, **changes: t.Any) -> t.Optional[Assignment]: ...

    def delete_assignment(self, assignment_id: int) -> bool: ...

    def create_task(
        self,
        assignment_id: int,
        description: str,
        time_allocation: int,
        completed: bool = False,
        order: t.Optional[int] = None,
        time_spent: int = 0,
    ) -> Task: ...

    def get_task(self, task_id: int) -> t.Optional[Task]: ...

    def list_tasks_for_assignment(self, assignment_id: int) -> list[Task]: ...

    def update_task(self, task_id: int, **changes: t.Any) -> t.Optional[Task]: ...

    def reorder_tasks(self, orders: t.Iterable[tuple[int, int]]) -> None: ...

    def swap_task_order(self, first_id: int, second_id: int) -> None: ...

    def delete_task(self, task_id: int) -> bool: ...

    def create_schedule_item(
        self,
        task_id: int,
        start_time: datetime,
        end_time: datetime,
        completed: bool = False,
    ) -> ScheduleItem: ...

    def get_schedule_item(self, item_id: int) -> t.Optional[ScheduleItem]: ...

    def list_schedule_items_between(self, start: datetime, end: datetime) -> list[ScheduleItem]: ...

    def update_schedule_item(self, item_id: int, **changes: t.Any) -> t.Optional[ScheduleItem]: ...

    def delete_schedule_item(self, item_id: int) -> bool: ...

    def replace_schedule_items(
        self,
        range_start: datetime,
        range_end: datetime,
        new_items: t.Iterable[tuple[int, datetime, datetime]],
    ) -> list[ScheduleItem]: ...

    def day_lock(self, day: date) -> t.ContextManager[None]: ...


def _check_allocation(value: t.Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"time_allocation must be a positive number of minutes, got {value!r}")
    return value


def _check_time_spent(value: t.Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"time_spent must be a non-negative number of minutes, got {value!r}")
    return value


def _check_priority(value: t.Any) -> str:
    if value not in PRIORITIES:
        raise ValidationError(f"priority must be one of {', '.join(PRIORITIES)}, got {value!r}")
    return value


def _check_interval(start: datetime, end: datetime) -> None:
    if start >= end:
        raise ValidationError(f"start time {start.isoformat()} must be before end time {end.isoformat()}")


def _reject_unknown(kind: str, changes: dict[str, t.Any], allowed: set[str]) -> None:
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise ValidationError(f"Cannot update {kind} field(s): {', '.join(unknown)}")


class InMemoryStore:
    """Dict-backed EntityStore with cascading deletes."""

    def __init__(self) -> None:
        self._assignments: dict[int, Assignment] = {}
        self._tasks: dict[int, Task] = {}
        self._schedule_items: dict[int, ScheduleItem] = {}
        self._next_ids = {"assignment": 1, "task": 1, "schedule_item": 1}
        self._lock = threading.RLock()
        self._day_locks: dict[date, list[t.Any]] = {}  # day -> [lock, users]

    def _allocate_id(self, kind: str) -> int:
        new_id = self._next_ids[kind]
        self._next_ids[kind] += 1
        return new_id

    # Assignments

    def create_assignment(
        self,
        title: str,
        course: str,
        due_date: datetime,
        priority: str,
        description: t.Optional[str] = None,
        completed: bool = False,
        created_at: t.Optional[datetime] = None,
    ) -> Assignment:
        _check_priority(priority)
        if not title:
            raise ValidationError("Assignment title must not be empty")
        with self._lock:
            assignment = Assignment(
                id=self._allocate_id("assignment"),
                title=title,
                course=course,
                due_date=due_date,
                priority=priority,
                description=description or None,
                completed=completed,
                created_at=created_at or datetime.now(),
            )
            self._assignments[assignment.id] = assignment
        return assignment

    def get_assignment(self, assignment_id: int) -> t.Optional[Assignment]:
        return self._assignments.get(assignment_id)

    def list_assignments(self) -> list[Assignment]:
        return list(self._assignments.values())

    def list_incomplete_assignments(self) -> list[Assignment]:
        pending = [a for a in self._assignments.values() if not a.completed]
        return sorted(pending, key=lambda a: a.due_date)

    def update_assignment(self, assignment_id: int, **changes: t.Any) -> t.Optional[Assignment]:
        _reject_unknown("assignment", changes, _ASSIGNMENT_FIELDS)
        if "priority" in changes:
            _check_priority(changes["priority"])
        with self._lock:
            assignment = self._assignments.get(assignment_id)
            if assignment is None:
                return None
            updated = replace(assignment, **changes)
            self._assignments[assignment_id] = updated
        return updated

    def delete_assignment(self, assignment_id: int) -> bool:
        with self._lock:
            if assignment_id not in self._assignments:
                return False
            for task in self.list_tasks_for_assignment(assignment_id):
                self.delete_task(task.id)
            del self._assignments[assignment_id]
        logger.debug("Deleted assignment %d with its tasks", assignment_id)
        return True

    # Tasks

    def create_task(
        self,
        assignment_id: int,
        description: str,
        time_allocation: int,
        completed: bool = False,
        order: t.Optional[int] = None,
        time_spent: int = 0,
    ) -> Task:
        _check_allocation(time_allocation)
        _check_time_spent(time_spent)
        with self._lock:
            if assignment_id not in self._assignments:
                raise NotFoundError("Assignment", assignment_id)
            if order is None:
                siblings = self.list_tasks_for_assignment(assignment_id)
                order = max((s.order for s in siblings), default=-1) + 1
            task = Task(
                id=self._allocate_id("task"),
                assignment_id=assignment_id,
                description=description,
                time_allocation=time_allocation,
                completed=completed,
                order=order,
                time_spent=time_spent,
            )
            self._tasks[task.id] = task
        return task

    def get_task(self, task_id: int) -> t.Optional[Task]:
        return self._tasks.get(task_id)

    def list_tasks_for_assignment(self, assignment_id: int) -> list[Task]:
        tasks = [task for task in self._tasks.values() if task.assignment_id == assignment_id]
        return sorted(tasks, key=lambda task: (task.order, task.id))

    def update_task(self, task_id: int, **changes: t.Any) -> t.Optional[Task]:
        _reject_unknown("task", changes, _TASK_FIELDS)
        if "time_allocation" in changes:
            _check_allocation(changes["time_allocation"])
        if "time_spent" in changes:
            _check_time_spent(changes["time_spent"])
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return None
            updated = replace(task, **changes)
            self._tasks[task_id] = updated
        return updated

    def reorder_tasks(self, orders: t.Iterable[tuple[int, int]]) -> None:
        with self._lock:
            for task_id, order in orders:
                task = self._tasks.get(task_id)
                if task is not None:
                    self._tasks[task_id] = replace(task, order=order)

    def swap_task_order(self, first_id: int, second_id: int) -> None:
        with self._lock:
            first = self._tasks.get(first_id)
            second = self._tasks.get(second_id)
            if first is None:
                raise NotFoundError("Task", first_id)
            if second is None:
                raise NotFoundError("Task", second_id)
            self._tasks[first_id] = replace(first, order=second.order)
            self._tasks[second_id] = replace(second, order=first.order)

    def delete_task(self, task_id: int) -> bool:
        with self._lock:
            if task_id not in self._tasks:
                return False
            for item_id in [i.id for i in self._schedule_items.values() if i.task_id == task_id]:
                del self._schedule_items[item_id]
            del self._tasks[task_id]
        return True

    # Schedule items

    def create_schedule_item(
        self,
        task_id: int,
        start_time: datetime,
        end_time: datetime,
        completed: bool = False,
    ) -> ScheduleItem:
        _check_interval(start_time, end_time)
        with self._lock:
            item = ScheduleItem(
                id=self._allocate_id("schedule_item"),
                task_id=task_id,
                start_time=start_time,
                end_time=end_time,
                completed=completed,
            )
            self._schedule_items[item.id] = item
        return item

    def get_schedule_item(self, item_id: int) -> t.Optional[ScheduleItem]:
        return self._schedule_items.get(item_id)

    def list_schedule_items_between(self, start: datetime, end: datetime) -> list[ScheduleItem]:
        """Items whose start time falls in [start, end], ordered by start time."""
        items = [i for i in self._schedule_items.values() if start <= i.start_time <= end]
        return sorted(items, key=lambda i: (i.start_time, i.id))

    def update_schedule_item(self, item_id: int, **changes: t.Any) -> t.Optional[ScheduleItem]:
        _reject_unknown("schedule item", changes, _SCHEDULE_ITEM_FIELDS)
        with self._lock:
            item = self._schedule_items.get(item_id)
            if item is None:
                return None
            updated = replace(item, **changes)
            _check_interval(updated.start_time, updated.end_time)
            self._schedule_items[item_id] = updated
        return updated

    def delete_schedule_item(self, item_id: int) -> bool:
        with self._lock:
            return self._schedule_items.pop(item_id, None) is not None

    def replace_schedule_items(
        self,
        range_start: datetime,
        range_end: datetime,
        new_items: t.Iterable[tuple[int, datetime, datetime]],
    ) -> list[ScheduleItem]:
        """Delete items starting inside the range, then write the new ones."""
        new_items = list(new_items)
        for _, start, end in new_items:
            _check_interval(start, end)
        with self._lock:
            stale = self.list_schedule_items_between(range_start, range_end)
            for item in stale:
                del self._schedule_items[item.id]
            created = [self.create_schedule_item(task_id, start, end) for task_id, start, end in new_items]
        logger.debug("Replaced %d schedule item(s) with %d", len(stale), len(created))
        return created

    @contextmanager
    def day_lock(self, day: date) -> t.Iterator[None]:
        """Serialize schedule generation for one target day.

        A day's lock is dropped once no caller holds or waits on it.
        """
        with self._lock:
            entry = self._day_locks.setdefault(day, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._lock:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._day_locks[day]
