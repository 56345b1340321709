# -*- coding: utf-8 -*-
"""
Data models for assignments, tasks and generated schedules.

This module contains all the dataclasses used by the planner core. Records
reference each other by integer id only; the entity store owns them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import typing as t


Priority = t.Literal["high", "medium", "low"]
PRIORITIES: tuple[str, ...] = ("high", "medium", "low")


@dataclass
class Assignment:
    """A piece of coursework with a due date, split into tasks."""
    id: int
    title: str
    course: str
    due_date: datetime
    priority: Priority
    description: t.Optional[str] = None
    estimated_time: int = 0  # minutes, sum of task allocations
    completed: bool = False
    created_at: t.Optional[datetime] = None


@dataclass
class Task:
    """A timed unit of work belonging to exactly one assignment."""
    id: int
    assignment_id: int
    description: str
    time_allocation: int  # minutes, > 0
    completed: bool = False
    order: int = 0
    time_spent: int = 0  # minutes


@dataclass
class ScheduleItem:
    """A concrete time interval assigned to one task."""
    id: int
    task_id: int
    start_time: datetime
    end_time: datetime
    completed: bool = False


@dataclass
class TaskWithContext:
    """An incomplete task annotated with its assignment's due date and priority."""
    task: Task
    due_date: datetime
    priority: Priority

    @property
    def task_id(self) -> int:
        return self.task.id

    @property
    def assignment_id(self) -> int:
        return self.task.assignment_id

    @property
    def time_allocation(self) -> int:
        return self.task.time_allocation


@dataclass
class PlannedSlot:
    """A placement decided by the packer but not yet persisted."""
    task_id: int
    start_time: datetime
    end_time: datetime
    urgent: bool


@dataclass
class NotScheduledTask:
    """A task that could not be admitted under the time budget."""
    task_id: int
    assignment_id: int


@dataclass
class UnscheduledTaskDetail:
    """Display details for a task left out of the schedule."""
    id: int
    description: str
    assignment_title: str
    time_allocation: int


@dataclass
class PackResult:
    """Output of the pure packing step."""
    slots: list[PlannedSlot] = field(default_factory=list)
    not_scheduled: list[TaskWithContext] = field(default_factory=list)
    minutes_used: int = 0
    extra_tasks_added: int = 0


@dataclass
class ExpandedScheduleItem:
    """A schedule item joined with its task and that task's assignment.

    Either reference may be None when the record was deleted after the
    schedule was generated.
    """
    item: ScheduleItem
    task: t.Optional[Task] = None
    assignment: t.Optional[Assignment] = None


@dataclass
class ScheduleReport:
    """Aggregate result of one schedule generation run."""
    schedule_items: list[ScheduleItem] = field(default_factory=list)
    not_scheduled: list[NotScheduledTask] = field(default_factory=list)
    total_tasks_time: int = 0
    todays_due_tasks_time: int = 0
    todays_unscheduled_count: int = 0
    extra_tasks_added: int = 0
    over_budget_minutes: int = 0
    unscheduled_task_details: list[UnscheduledTaskDetail] = field(default_factory=list)
    available_minutes: t.Optional[int] = None
