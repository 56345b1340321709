"""
Shared Pydantic models for REST API serialization.

This module contains Pydantic equivalents of the planner_core dataclasses,
ensuring consistent JSON serialization between the planner service and its
HTTP clients. Field names are snake_case in Python and camelCase on the wire.
"""
from __future__ import annotations

import typing as t
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Type literals for commonly used values
Priority = t.Literal["high", "medium", "low"]

HHMM_PATTERN = r"^([01]?\d|2[0-3]):[0-5]\d$"


class ApiModel(BaseModel):
    """Base model: camelCase aliases, populated from attributes or names."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Entity models
class Assignment(ApiModel):
    """A piece of coursework with a due date, split into tasks."""
    id: int
    title: str
    course: str
    description: t.Optional[str] = None
    due_date: datetime
    priority: Priority
    estimated_time: int = 0          # minutes
    completed: bool = False
    created_at: t.Optional[datetime] = None


class Task(ApiModel):
    """A timed unit of work belonging to an assignment."""
    id: int
    assignment_id: int
    description: str
    time_allocation: int             # minutes
    completed: bool = False
    order: int = 0
    time_spent: int = 0              # minutes


class ScheduleItem(ApiModel):
    """A concrete time interval assigned to one task."""
    id: int
    task_id: int
    start_time: datetime
    end_time: datetime
    completed: bool = False


class ExpandedScheduleItem(ScheduleItem):
    """Schedule item with its task and assignment (None when deleted)."""
    task: t.Optional[Task] = None
    assignment: t.Optional[Assignment] = None


class NotScheduled(ApiModel):
    """A task left out because the time budget ran out."""
    task_id: int
    assignment_id: int


class UnscheduledTaskDetail(ApiModel):
    """Display details for a task left out of the schedule."""
    id: int
    description: str
    assignment_title: str
    time_allocation: int


# Request/Response Models for API endpoints
class CreateAssignmentRequest(ApiModel):
    """Request model for creating an assignment."""
    title: str = Field(min_length=1)
    course: str
    description: t.Optional[str] = None
    due_date: datetime
    priority: Priority
    completed: bool = False


class UpdateAssignmentRequest(ApiModel):
    """Request model for a partial assignment update."""
    title: t.Optional[str] = Field(default=None, min_length=1)
    course: t.Optional[str] = None
    description: t.Optional[str] = None
    due_date: t.Optional[datetime] = None
    priority: t.Optional[Priority] = None
    completed: t.Optional[bool] = None


class CreateTaskRequest(ApiModel):
    """Request model for creating a task under an assignment."""
    assignment_id: int
    description: str
    time_allocation: int = Field(gt=0)
    completed: bool = False
    order: t.Optional[int] = None
    time_spent: int = Field(default=0, ge=0)


class UpdateTaskRequest(ApiModel):
    """Request model for a partial task update."""
    description: t.Optional[str] = None
    time_allocation: t.Optional[int] = Field(default=None, gt=0)
    completed: t.Optional[bool] = None
    order: t.Optional[int] = None
    time_spent: t.Optional[int] = Field(default=None, ge=0)


class TaskOrder(ApiModel):
    """New order value for one task."""
    id: int
    order: int


class ReorderTasksRequest(ApiModel):
    """Request model for renumbering tasks."""
    tasks: list[TaskOrder]


class GenerateScheduleRequest(ApiModel):
    """Request model for generating a schedule."""
    assignment_ids: list[int] = Field(min_length=1)
    start_date: t.Optional[str] = None             # ISO date or datetime
    available_minutes: t.Optional[int] = Field(default=None, ge=0)
    prioritize_todays_due: bool = True
    start_time: t.Optional[str] = Field(default=None, pattern=HHMM_PATTERN)


class GenerateScheduleResponse(ApiModel):
    """Response model for a generated schedule and its report."""
    schedule_items: list[ExpandedScheduleItem] = Field(default_factory=list)
    not_scheduled: list[NotScheduled] = Field(default_factory=list)
    total_tasks_time: int = 0
    todays_due_tasks_time: int = 0
    todays_unscheduled_count: int = 0
    extra_tasks_added: int = 0
    over_budget_minutes: int = 0
    unscheduled_task_details: list[UnscheduledTaskDetail] = Field(default_factory=list)
    available_minutes: t.Optional[int] = None


class UpdateScheduleItemRequest(ApiModel):
    """Request model for updating a schedule item."""
    completed: t.Optional[bool] = None
    start_time: t.Optional[datetime] = None
    end_time: t.Optional[datetime] = None


class ShowScheduleResponse(ApiModel):
    """Response model for formatted schedule display."""
    formatted_schedule: str


class MessageResponse(ApiModel):
    """Plain confirmation message."""
    message: str
