"""
MCP wrapper for the planner service.

This module exposes the planner as MCP tools but makes HTTP calls to the
planner REST service. It handles serialization/deserialization between the
planner_core dataclasses and the Pydantic models used on the wire.
"""
from __future__ import annotations

import os
import typing as t

import httpx
from fastmcp import FastMCP

# Import core dataclass models for the MCP interface
from planner_core.models import (
    Assignment,
    ExpandedScheduleItem,
    NotScheduledTask,
    ScheduleItem,
    ScheduleReport,
    Task,
    UnscheduledTaskDetail,
)
# Import Pydantic models for HTTP serialization
from services.shared.models import (
    Assignment as PydanticAssignment,
    Task as PydanticTask,
    ScheduleItem as PydanticScheduleItem,
    ExpandedScheduleItem as PydanticExpandedScheduleItem,
    CreateAssignmentRequest,
    CreateTaskRequest,
    GenerateScheduleRequest,
    GenerateScheduleResponse,
    UpdateScheduleItemRequest,
    ShowScheduleResponse,
)


mcp = FastMCP("PlannerMCPWrapper")

# Service URL - configurable via environment variable
PLANNER_SERVICE_URL = os.getenv("PLANNER_SERVICE_URL", "http://localhost:8004")

# Timeout settings for planner operations (in seconds)
STANDARD_TIMEOUT = float(os.getenv("PLANNER_SERVICE_TIMEOUT", "30"))


def _call(
    method: str,
    path: str,
    action: str,
    json: t.Optional[dict[str, t.Any]] = None,
    params: t.Optional[dict[str, t.Any]] = None,
) -> t.Any:
    """
    Make one HTTP call to the planner service and return the decoded JSON.

    Transport and HTTP failures are re-raised as RuntimeError with the
    status code and response body in the message.
    """
    try:
        with httpx.Client(timeout=STANDARD_TIMEOUT) as client:
            response = client.request(
                method,
                f"{PLANNER_SERVICE_URL}{path}",
                json=json,
                params=params,
            )
            response.raise_for_status()
        return response.json()

    except httpx.TimeoutException:
        raise RuntimeError(f"{action} timed out after {STANDARD_TIMEOUT} seconds")
    except httpx.HTTPStatusError as e:
        raise RuntimeError(f"HTTP error from planner service: {e.response.status_code} {e.response.text}")
    except Exception as e:
        raise RuntimeError(f"Error calling planner service: {str(e)}")


def _payload(request: t.Any) -> dict[str, t.Any]:
    return request.model_dump(mode="json", by_alias=True, exclude_none=True)


def _create_assignment(
    title: str,
    course: str,
    due_date: str,
    priority: str = "medium",
    description: str = "",
) -> Assignment:
    """
    Create an assignment through the planner service.

    :param due_date: Due date in ISO format.
    :param priority: One of high, medium, low.
    """
    request = CreateAssignmentRequest(
        title=title,
        course=course,
        due_date=due_date,
        priority=priority,
        description=description or None,
    )
    data = _call("POST", "/assignments", "Assignment creation", json=_payload(request))
    return _pydantic_to_dataclass_assignment(PydanticAssignment(**data))


def _add_task(
    assignment_id: int,
    description: str,
    time_allocation: int,
    order: t.Optional[int] = None,
    completed: bool = False,
    time_spent: int = 0,
) -> Task:
    """Add a timed task to an assignment."""
    request = CreateTaskRequest(
        assignment_id=assignment_id,
        description=description,
        time_allocation=time_allocation,
        completed=completed,
        order=order,
        time_spent=time_spent,
    )
    data = _call("POST", "/tasks", "Task creation", json=_payload(request))
    return _pydantic_to_dataclass_task(PydanticTask(**data))


def _list_assignments(incomplete_only: bool = False) -> list[Assignment]:
    """List assignments, optionally only the incomplete ones."""
    path = "/assignments/incomplete" if incomplete_only else "/assignments"
    data = _call("GET", path, "List assignments")
    return [_pydantic_to_dataclass_assignment(PydanticAssignment(**entry)) for entry in data]


def _generate_schedule(
    assignment_ids: list[int],
    start_date: str = "",
    available_minutes: t.Optional[int] = None,
    prioritize_todays_due: bool = True,
    start_time: str = "",
) -> ScheduleReport:
    """
    Generate a schedule for the given assignments.

    :param start_date: ISO date or datetime; empty means now.
    :param available_minutes: Optional budget for tasks not due today.
    :param start_time: Optional "HH:MM" start of the first block.
    """
    request = GenerateScheduleRequest(
        assignment_ids=assignment_ids,
        start_date=start_date or None,
        available_minutes=available_minutes,
        prioritize_todays_due=prioritize_todays_due,
        start_time=start_time or None,
    )
    data = _call("POST", "/schedule/generate", "Schedule generation", json=_payload(request))
    return _pydantic_to_dataclass_report(GenerateScheduleResponse(**data))


def _get_day_schedule(date: str = "") -> list[ExpandedScheduleItem]:
    """Get the expanded schedule items for one day (today when empty)."""
    data = _call("GET", "/schedule", "Get schedule", params={"date": date} if date else None)
    return [_pydantic_to_dataclass_expanded(PydanticExpandedScheduleItem(**entry)) for entry in data]


def _update_schedule_item(
    item_id: int,
    completed: t.Optional[bool] = None,
    start_time: str = "",
    end_time: str = "",
) -> ScheduleItem:
    """Mark a schedule item complete or move it."""
    request = UpdateScheduleItemRequest(
        completed=completed,
        start_time=start_time or None,
        end_time=end_time or None,
    )
    data = _call("PUT", f"/schedule/{item_id}", "Schedule item update", json=_payload(request))
    return _pydantic_to_dataclass_schedule_item(PydanticScheduleItem(**data))


def _show_day_schedule(date: str = "") -> str:
    """Get the formatted schedule table for one day."""
    data = _call("GET", "/show-schedule", "Show schedule", params={"date": date} if date else None)
    return ShowScheduleResponse(**data).formatted_schedule


def _pydantic_to_dataclass_assignment(pydantic_assignment: PydanticAssignment) -> Assignment:
    """Convert Pydantic Assignment to dataclass Assignment."""
    return Assignment(
        id=pydantic_assignment.id,
        title=pydantic_assignment.title,
        course=pydantic_assignment.course,
        due_date=pydantic_assignment.due_date,
        priority=pydantic_assignment.priority,
        description=pydantic_assignment.description,
        estimated_time=pydantic_assignment.estimated_time,
        completed=pydantic_assignment.completed,
        created_at=pydantic_assignment.created_at,
    )


def _pydantic_to_dataclass_task(pydantic_task: PydanticTask) -> Task:
    """Convert Pydantic Task to dataclass Task."""
    return Task(
        id=pydantic_task.id,
        assignment_id=pydantic_task.assignment_id,
        description=pydantic_task.description,
        time_allocation=pydantic_task.time_allocation,
        completed=pydantic_task.completed,
        order=pydantic_task.order,
        time_spent=pydantic_task.time_spent,
    )


def _pydantic_to_dataclass_schedule_item(pydantic_item: PydanticScheduleItem) -> ScheduleItem:
    """Convert Pydantic ScheduleItem to dataclass ScheduleItem."""
    return ScheduleItem(
        id=pydantic_item.id,
        task_id=pydantic_item.task_id,
        start_time=pydantic_item.start_time,
        end_time=pydantic_item.end_time,
        completed=pydantic_item.completed,
    )


def _pydantic_to_dataclass_expanded(pydantic_item: PydanticExpandedScheduleItem) -> ExpandedScheduleItem:
    """Convert a flat Pydantic expanded item to the nested dataclass form."""
    return ExpandedScheduleItem(
        item=_pydantic_to_dataclass_schedule_item(pydantic_item),
        task=_pydantic_to_dataclass_task(pydantic_item.task) if pydantic_item.task else None,
        assignment=(
            _pydantic_to_dataclass_assignment(pydantic_item.assignment) if pydantic_item.assignment else None
        ),
    )


def _pydantic_to_dataclass_report(response: GenerateScheduleResponse) -> ScheduleReport:
    """Convert a generate response to a dataclass ScheduleReport."""
    return ScheduleReport(
        schedule_items=[_pydantic_to_dataclass_schedule_item(item) for item in response.schedule_items],
        not_scheduled=[NotScheduledTask(entry.task_id, entry.assignment_id) for entry in response.not_scheduled],
        total_tasks_time=response.total_tasks_time,
        todays_due_tasks_time=response.todays_due_tasks_time,
        todays_unscheduled_count=response.todays_unscheduled_count,
        extra_tasks_added=response.extra_tasks_added,
        over_budget_minutes=response.over_budget_minutes,
        unscheduled_task_details=[
            UnscheduledTaskDetail(
                id=detail.id,
                description=detail.description,
                assignment_title=detail.assignment_title,
                time_allocation=detail.time_allocation,
            )
            for detail in response.unscheduled_task_details
        ],
        available_minutes=response.available_minutes,
    )


# MCP tool wrappers that call the raw functions
@mcp.tool()
def create_assignment(
    title: str,
    course: str,
    due_date: str,
    priority: str = "medium",
    description: str = "",
) -> Assignment:
    """Creates an assignment with a due date and priority (high, medium, low)."""
    return _create_assignment(title, course, due_date, priority, description)


@mcp.tool()
def add_task(assignment_id: int, description: str, time_allocation: int) -> Task:
    """Adds a task of time_allocation minutes to an assignment."""
    return _add_task(assignment_id, description, time_allocation)


@mcp.tool()
def list_assignments(incomplete_only: bool = False) -> list[Assignment]:
    """Lists assignments."""
    return _list_assignments(incomplete_only)


@mcp.tool()
def generate_schedule(
    assignment_ids: list[int],
    start_date: str = "",
    available_minutes: t.Optional[int] = None,
    prioritize_todays_due: bool = True,
    start_time: str = "",
) -> ScheduleReport:
    """Packs the pending tasks of the given assignments into a day's schedule."""
    return _generate_schedule(assignment_ids, start_date, available_minutes, prioritize_todays_due, start_time)


@mcp.tool()
def get_day_schedule(date: str = "") -> list[ExpandedScheduleItem]:
    """Lists the schedule items for a day with their tasks and assignments."""
    return _get_day_schedule(date)


@mcp.tool()
def update_schedule_item(
    item_id: int,
    completed: t.Optional[bool] = None,
    start_time: str = "",
    end_time: str = "",
) -> ScheduleItem:
    """Marks a schedule item complete or moves it."""
    return _update_schedule_item(item_id, completed, start_time, end_time)


@mcp.tool()
def show_day_schedule(date: str = "") -> str:
    """Displays a day's schedule in a nicely formatted view."""
    return _show_day_schedule(date)


if __name__ == "__main__":
    mcp.run()
