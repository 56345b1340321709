"""
FastAPI service for study planning operations.

This service exposes the planner_core entity store and schedule generator
as REST API endpoints. Everything runs against an in-memory store; the
store is provided through a dependency so it can be swapped out.
"""
from __future__ import annotations

import logging
import typing as t
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from planner_core import accessor
from planner_core.config import SchedulerSettings, load_settings
from planner_core.demo import seed_demo_data
from planner_core.exceptions import NotFoundError, PlannerError, ValidationError
from planner_core.logger import setup_logging
from planner_core.models import ExpandedScheduleItem as CoreExpandedScheduleItem
from planner_core.packer import generate_schedule as generate_core_schedule
from planner_core.selector import (
    complete_assignment,
    recompute_estimated_time,
    sync_assignment_completion,
)
from planner_core.store import EntityStore, InMemoryStore
from services.shared.models import (
    Assignment as PydanticAssignment,
    Task as PydanticTask,
    ScheduleItem as PydanticScheduleItem,
    ExpandedScheduleItem as PydanticExpandedScheduleItem,
    NotScheduled,
    UnscheduledTaskDetail,
    CreateAssignmentRequest,
    UpdateAssignmentRequest,
    CreateTaskRequest,
    UpdateTaskRequest,
    ReorderTasksRequest,
    GenerateScheduleRequest,
    GenerateScheduleResponse,
    UpdateScheduleItemRequest,
    ShowScheduleResponse,
    MessageResponse,
)

logger = logging.getLogger("planner_core.service")

# In-memory storage for assignments, tasks and schedule items
# In a distributed system, this would be replaced with a persistent backend
store: EntityStore = InMemoryStore()
settings = SchedulerSettings()


def get_store() -> EntityStore:
    """Dependency returning the active entity store."""
    return store


def get_settings() -> SchedulerSettings:
    """Dependency returning the active scheduler settings."""
    return settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load configuration on startup and optionally seed demo data."""
    global settings

    settings = load_settings()
    setup_logging(settings.log_level)
    if settings.seed_demo:
        created = seed_demo_data(store, now=settings.now())
        logger.info("Seeded %d demo assignment(s)", len(created))

    yield


app = FastAPI(
    title="Planner Service",
    description="REST API for assignments, tasks and daily schedule generation",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "service": "planner-service"}


# Assignments

@app.get("/assignments", response_model=list[PydanticAssignment])
async def list_assignments(store: EntityStore = Depends(get_store)) -> list[PydanticAssignment]:
    """List all assignments."""
    return [PydanticAssignment.model_validate(a) for a in store.list_assignments()]


@app.get("/assignments/incomplete", response_model=list[PydanticAssignment])
async def list_incomplete_assignments(store: EntityStore = Depends(get_store)) -> list[PydanticAssignment]:
    """List incomplete assignments, soonest due first."""
    return [PydanticAssignment.model_validate(a) for a in store.list_incomplete_assignments()]


@app.get("/assignments/{assignment_id}", response_model=PydanticAssignment)
async def get_assignment(assignment_id: int, store: EntityStore = Depends(get_store)) -> PydanticAssignment:
    """Get one assignment by id."""
    assignment = store.get_assignment(assignment_id)
    if assignment is None:
        raise NotFoundError("Assignment", assignment_id)
    return PydanticAssignment.model_validate(assignment)


@app.post("/assignments", response_model=PydanticAssignment, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    request: CreateAssignmentRequest,
    store: EntityStore = Depends(get_store),
    settings: SchedulerSettings = Depends(get_settings),
) -> PydanticAssignment:
    """Create an assignment. Its estimated time starts at zero and follows its tasks."""
    assignment = store.create_assignment(
        title=request.title,
        course=request.course,
        description=request.description,
        due_date=settings.to_local(request.due_date),
        priority=request.priority,
        completed=request.completed,
        created_at=settings.now(),
    )
    return PydanticAssignment.model_validate(assignment)


@app.put("/assignments/{assignment_id}", response_model=PydanticAssignment)
async def update_assignment(
    assignment_id: int,
    request: UpdateAssignmentRequest,
    store: EntityStore = Depends(get_store),
    settings: SchedulerSettings = Depends(get_settings),
) -> PydanticAssignment:
    """
    Update an assignment.

    Changing the completed flag propagates it to every task of the assignment.
    """
    changes = _changes(request)
    completed = changes.pop("completed", None)
    if changes.get("due_date") is not None:
        changes["due_date"] = settings.to_local(changes["due_date"])

    if store.update_assignment(assignment_id, **changes) is None:
        raise NotFoundError("Assignment", assignment_id)
    if completed is not None:
        complete_assignment(store, assignment_id, completed)
    return PydanticAssignment.model_validate(store.get_assignment(assignment_id))


@app.delete("/assignments/{assignment_id}", response_model=MessageResponse)
async def delete_assignment(assignment_id: int, store: EntityStore = Depends(get_store)) -> MessageResponse:
    """Delete an assignment together with its tasks and their schedule items."""
    if not store.delete_assignment(assignment_id):
        raise NotFoundError("Assignment", assignment_id)
    return MessageResponse(message="Assignment deleted successfully")


# Tasks

@app.get("/assignments/{assignment_id}/tasks", response_model=list[PydanticTask])
async def list_tasks(assignment_id: int, store: EntityStore = Depends(get_store)) -> list[PydanticTask]:
    """List an assignment's tasks in their stored order."""
    return [PydanticTask.model_validate(task) for task in store.list_tasks_for_assignment(assignment_id)]


@app.post("/tasks", response_model=PydanticTask, status_code=status.HTTP_201_CREATED)
async def create_task(request: CreateTaskRequest, store: EntityStore = Depends(get_store)) -> PydanticTask:
    """Create a task and refresh its assignment's estimated time."""
    task = store.create_task(
        assignment_id=request.assignment_id,
        description=request.description,
        time_allocation=request.time_allocation,
        completed=request.completed,
        order=request.order,
        time_spent=request.time_spent,
    )
    _refresh_assignment(store, task.assignment_id)
    return PydanticTask.model_validate(task)


@app.put("/tasks/reorder", response_model=MessageResponse)
async def reorder_tasks(request: ReorderTasksRequest, store: EntityStore = Depends(get_store)) -> MessageResponse:
    """Renumber tasks; unknown ids are ignored."""
    store.reorder_tasks((entry.id, entry.order) for entry in request.tasks)
    return MessageResponse(message="Tasks reordered successfully")


@app.put("/tasks/{task_id}", response_model=PydanticTask)
async def update_task(
    task_id: int,
    request: UpdateTaskRequest,
    store: EntityStore = Depends(get_store),
) -> PydanticTask:
    """Update a task (completion, time tracking, allocation, order)."""
    updated = store.update_task(task_id, **_changes(request))
    if updated is None:
        raise NotFoundError("Task", task_id)
    _refresh_assignment(store, updated.assignment_id)
    return PydanticTask.model_validate(updated)


@app.delete("/tasks/{task_id}", response_model=MessageResponse)
async def delete_task(task_id: int, store: EntityStore = Depends(get_store)) -> MessageResponse:
    """Delete a task and its schedule items."""
    task = store.get_task(task_id)
    if task is None or not store.delete_task(task_id):
        raise NotFoundError("Task", task_id)
    _refresh_assignment(store, task.assignment_id)
    return MessageResponse(message="Task deleted successfully")


def _refresh_assignment(store: EntityStore, assignment_id: int) -> None:
    """Recompute the derived fields of an assignment after task changes."""
    if store.get_assignment(assignment_id) is None:
        return
    recompute_estimated_time(store, assignment_id)
    sync_assignment_completion(store, assignment_id)


# Schedule

@app.get("/schedule", response_model=list[PydanticExpandedScheduleItem])
async def get_schedule(
    date: t.Optional[str] = None,
    store: EntityStore = Depends(get_store),
    settings: SchedulerSettings = Depends(get_settings),
) -> list[PydanticExpandedScheduleItem]:
    """
    Get the schedule for one day (defaults to today).

    Each item carries its task and assignment, or null where those were deleted.
    """
    day = _parse_instant(date, settings) if date else settings.now()
    return [_to_pydantic_expanded(item) for item in accessor.get_schedule_for_day(store, day)]


@app.get("/show-schedule", response_model=ShowScheduleResponse)
async def show_schedule(
    date: t.Optional[str] = None,
    store: EntityStore = Depends(get_store),
    settings: SchedulerSettings = Depends(get_settings),
) -> ShowScheduleResponse:
    """
    Show the schedule for one day in a formatted display.

    Returns a plain-text table of the day's time blocks.
    """
    day = _parse_instant(date, settings) if date else settings.now()
    items = accessor.get_schedule_for_day(store, day)
    return ShowScheduleResponse(formatted_schedule=_format_schedule(day, items))


@app.post("/schedule/generate", response_model=GenerateScheduleResponse)
async def generate_schedule(
    request: GenerateScheduleRequest,
    store: EntityStore = Depends(get_store),
    settings: SchedulerSettings = Depends(get_settings),
) -> GenerateScheduleResponse:
    """
    Generate a schedule for the selected assignments.

    Tasks due today or overdue are always scheduled; later tasks are added
    while they fit in availableMinutes. Tasks that do not fit are reported
    in notScheduled rather than treated as an error.
    """
    start_date = _parse_instant(request.start_date, settings) if request.start_date else settings.now()
    try:
        report = generate_core_schedule(
            store,
            request.assignment_ids,
            start_date,
            available_minutes=request.available_minutes,
            prioritize_todays_due=request.prioritize_todays_due,
            start_time=request.start_time,
            settings=settings,
        )
    except PlannerError:
        raise
    except Exception as e:
        logger.exception("Schedule generation failed")
        raise HTTPException(status_code=500, detail=f"Error generating schedule: {str(e)}")

    expanded = accessor.expand_schedule_items(store, report.schedule_items)
    return GenerateScheduleResponse(
        schedule_items=[_to_pydantic_expanded(item) for item in expanded],
        not_scheduled=[NotScheduled.model_validate(entry) for entry in report.not_scheduled],
        total_tasks_time=report.total_tasks_time,
        todays_due_tasks_time=report.todays_due_tasks_time,
        todays_unscheduled_count=report.todays_unscheduled_count,
        extra_tasks_added=report.extra_tasks_added,
        over_budget_minutes=report.over_budget_minutes,
        unscheduled_task_details=[
            UnscheduledTaskDetail.model_validate(detail) for detail in report.unscheduled_task_details
        ],
        available_minutes=report.available_minutes,
    )


@app.put("/schedule/{item_id}", response_model=PydanticScheduleItem)
async def update_schedule_item(
    item_id: int,
    request: UpdateScheduleItemRequest,
    store: EntityStore = Depends(get_store),
    settings: SchedulerSettings = Depends(get_settings),
) -> PydanticScheduleItem:
    """Mark a schedule item complete or move it."""
    updated = accessor.update_schedule_item(
        store,
        item_id,
        completed=request.completed,
        start_time=settings.to_local(request.start_time) if request.start_time else None,
        end_time=settings.to_local(request.end_time) if request.end_time else None,
    )
    return PydanticScheduleItem.model_validate(updated)


@app.delete("/schedule/{item_id}", response_model=MessageResponse)
async def delete_schedule_item(item_id: int, store: EntityStore = Depends(get_store)) -> MessageResponse:
    """Delete a single schedule item."""
    if not store.delete_schedule_item(item_id):
        raise NotFoundError("Schedule item", item_id)
    return MessageResponse(message="Schedule item deleted successfully")


def _changes(request: t.Any) -> dict[str, t.Any]:
    """Fields the client actually sent with a non-null value."""
    return {k: v for k, v in request.model_dump(exclude_unset=True).items() if v is not None}


def _parse_instant(value: str, settings: SchedulerSettings) -> datetime:
    """Parse an ISO-8601 date or datetime into local wall-clock time."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid date format: {value!r}")
    return settings.to_local(parsed)


def _to_pydantic_expanded(expanded: CoreExpandedScheduleItem) -> PydanticExpandedScheduleItem:
    """Convert a core expanded item to its flat JSON shape."""
    item = expanded.item
    return PydanticExpandedScheduleItem(
        id=item.id,
        task_id=item.task_id,
        start_time=item.start_time,
        end_time=item.end_time,
        completed=item.completed,
        task=PydanticTask.model_validate(expanded.task) if expanded.task else None,
        assignment=PydanticAssignment.model_validate(expanded.assignment) if expanded.assignment else None,
    )


def _format_schedule(day: datetime, items: list[CoreExpandedScheduleItem]) -> str:
    """
    Format a day's schedule as a clean table.

    Returns a formatted table string of the day's time blocks.
    """
    if not items:
        return f"📅 Nothing scheduled for {day:%a %-m/%-d}."

    lines = []
    lines.append(f"📅 SCHEDULE FOR {day:%a %-m/%-d}".upper())
    lines.append("=" * 100)
    lines.append(f"{'#':<4} {'Time':<15} {'Task':<40} {'Assignment':<28} {'Done':<6}")
    lines.append("-" * 100)

    total_minutes = 0
    for idx, expanded in enumerate(items, 1):
        item = expanded.item
        span = f"{item.start_time:%H:%M}-{item.end_time:%H:%M}"
        task = expanded.task.description if expanded.task else "(deleted task)"
        task = task[:39] if len(task) > 39 else task
        assignment = expanded.assignment.title if expanded.assignment else "—"
        assignment = assignment[:27] if len(assignment) > 27 else assignment
        done = "✔" if item.completed else ""
        lines.append(f"{idx:<4} {span:<15} {task:<40} {assignment:<28} {done:<6}")
        total_minutes += int((item.end_time - item.start_time).total_seconds() // 60)

    lines.append("=" * 100)
    lines.append(f"Total: {len(items)} block(s), {total_minutes} minute(s)")
    return "\n".join(lines)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8004)
