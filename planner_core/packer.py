# -*- coding: utf-8 -*-
"""
Schedule packer.

Walks the ordered candidate tasks and gives each one a contiguous interval
starting at a moving cursor. Breaks come from a BreakPolicy; the cursor
rolls over to the next morning once close of business is reached. Urgent
tasks (due today or overdue) are always admitted; future tasks are admitted
only while they fit in the optional time budget.
"""
from __future__ import annotations

import logging
import re
import typing as t
from datetime import datetime, time, timedelta

from planner_core.breaks import DEFAULT_BREAK_POLICY, BreakPolicy
from planner_core.config import SchedulerSettings
from planner_core.exceptions import ValidationError
from planner_core.models import (
    NotScheduledTask,
    PackResult,
    PlannedSlot,
    ScheduleReport,
    TaskWithContext,
    UnscheduledTaskDetail,
)
from planner_core.ordering import classify_and_order, order_tasks
from planner_core.selector import select_candidate_tasks
from planner_core.store import EntityStore

logger = logging.getLogger(__name__)

_HHMM = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def parse_start_time(value: str) -> time:
    """Parse an "HH:MM" 24h string."""
    match = _HHMM.match(value.strip())
    if not match:
        raise ValidationError(f"Invalid start time {value!r}, expected HH:MM")
    return time(int(match.group(1)), int(match.group(2)))


def _at_hour(day: datetime, hour: int) -> datetime:
    return datetime.combine(day.date(), time.min, tzinfo=day.tzinfo) + timedelta(hours=hour)


def resolve_start(start_date: datetime, start_time: t.Optional[str], day_start_hour: int) -> datetime:
    """Work out where the cursor begins.

    An explicit start time wins. Otherwise a start before the start of the
    working day is moved up to it, and anything later is used as given.
    """
    if start_time:
        clock = parse_start_time(start_time)
        return start_date.replace(hour=clock.hour, minute=clock.minute, second=0, microsecond=0)
    if start_date.hour < day_start_hour:
        return _at_hour(start_date, day_start_hour)
    return start_date


class _Cursor:
    """Moving insertion point shared by every admitted task."""

    def __init__(self, start: datetime, policy: BreakPolicy, day_start_hour: int, day_end_hour: int) -> None:
        self.position = start
        self.policy = policy
        self.day_start_hour = day_start_hour
        self.day_end_hour = day_end_hour
        self.placed = 0
        self.minutes_used = 0

    def admit(self, task: TaskWithContext, urgent: bool) -> PlannedSlot:
        begin = self.policy.before_task(self.position)
        end = begin + timedelta(minutes=task.time_allocation)
        slot = PlannedSlot(task_id=task.task_id, start_time=begin, end_time=end, urgent=urgent)
        logger.debug(
            "Placed task %d (%s) %s -> %s",
            task.task_id, "urgent" if urgent else "future", begin.isoformat(), end.isoformat(),
        )

        self.placed += 1
        self.position = self.policy.after_task(end, self.placed)
        self.position = self._roll_over(begin, self.position)
        self.minutes_used += task.time_allocation
        return slot

    def _roll_over(self, task_start: datetime, position: datetime) -> datetime:
        # Close of business is measured on the day the task started, so a task
        # running past midnight still triggers the rollover.
        if position < _at_hour(task_start, self.day_end_hour):
            return position
        next_start = _at_hour(position, self.day_start_hour)
        if next_start < position:
            next_start += timedelta(days=1)
        logger.debug("Rolled over from %s to %s", position.isoformat(), next_start.isoformat())
        return next_start


def pack_tasks(
    urgent: list[TaskWithContext],
    future: list[TaskWithContext],
    start: datetime,
    available_minutes: t.Optional[int] = None,
    prioritize_todays_due: bool = True,
    policy: t.Optional[BreakPolicy] = None,
    day_start_hour: int = 9,
    day_end_hour: int = 18,
) -> PackResult:
    """Place tasks on a timeline starting at ``start``.

    Pure function: nothing is read from or written to a store.

    :param urgent: Ordered tasks due on the start day or earlier.
    :param future: Ordered tasks due later.
    :param start: Initial cursor position.
    :param available_minutes: Optional budget for gated tasks; None means unlimited.
    :param prioritize_todays_due: When False urgent tasks lose their
        unconditional admission and everything goes through the budget gate.
    :param policy: Break policy; defaults to the standard lunch/micro-break policy.
    :return: A PackResult with planned slots and rejected tasks.
    """
    if policy is None:
        policy = DEFAULT_BREAK_POLICY
    cursor = _Cursor(start, policy, day_start_hour, day_end_hour)
    result = PackResult()
    urgent_ids = {task.task_id for task in urgent}

    if prioritize_todays_due:
        for task in urgent:
            result.slots.append(cursor.admit(task, urgent=True))
        gated = future
    else:
        gated = order_tasks(urgent + future)

    exhausted = False
    for task in gated:
        is_urgent = task.task_id in urgent_ids
        fits = available_minutes is None or cursor.minutes_used + task.time_allocation <= available_minutes
        if exhausted or not fits:
            if not exhausted:
                logger.debug(
                    "Budget of %s minute(s) reached at task %d (%d used, %d needed)",
                    available_minutes, task.task_id, cursor.minutes_used, task.time_allocation,
                )
            exhausted = True
            result.not_scheduled.append(task)
            continue
        result.slots.append(cursor.admit(task, urgent=is_urgent))
        if available_minutes is not None and not is_urgent:
            result.extra_tasks_added += 1

    result.minutes_used = cursor.minutes_used
    return result


def _validate_request(assignment_ids: t.Sequence[int], available_minutes: t.Optional[int]) -> None:
    if not assignment_ids:
        raise ValidationError("Assignment IDs must be a non-empty list")
    if available_minutes is not None and (isinstance(available_minutes, bool) or available_minutes < 0):
        raise ValidationError(f"available_minutes must not be negative, got {available_minutes!r}")


def generate_schedule(
    store: EntityStore,
    assignment_ids: t.Sequence[int],
    start_date: datetime,
    available_minutes: t.Optional[int] = None,
    prioritize_todays_due: bool = True,
    start_time: t.Optional[str] = None,
    policy: t.Optional[BreakPolicy] = None,
    settings: t.Optional[SchedulerSettings] = None,
) -> ScheduleReport:
    """Build and persist a schedule for the given assignments.

    Any schedule items already stored between the start of ``start_date``'s
    day and the last day the new schedule reaches are replaced.

    :param store: Entity store supplying tasks and receiving schedule items.
    :param assignment_ids: Assignments to plan; unknown ids are skipped.
    :param start_date: Reference instant; its calendar day decides urgency.
    :param available_minutes: Optional budget for future tasks.
    :param prioritize_todays_due: Admit urgent tasks regardless of budget.
    :param start_time: Optional "HH:MM" start on ``start_date``'s day.
    :param policy: Break policy overriding the one in ``settings``.
    :param settings: Workday settings; defaults are used when omitted.
    :return: The aggregate ScheduleReport.
    """
    _validate_request(assignment_ids, available_minutes)
    settings = settings or SchedulerSettings()
    if policy is None:
        policy = settings.break_policy()

    start_date = settings.to_local(start_date)
    cursor_start = resolve_start(start_date, start_time, settings.day_start_hour)

    candidates = select_candidate_tasks(store, assignment_ids)
    urgent, future = classify_and_order(candidates, start_date)

    with store.day_lock(start_date.date()):
        packed = pack_tasks(
            urgent,
            future,
            cursor_start,
            available_minutes=available_minutes,
            prioritize_todays_due=prioritize_todays_due,
            policy=policy,
            day_start_hour=settings.day_start_hour,
            day_end_hour=settings.day_end_hour,
        )
        last_day = max((slot.start_time for slot in packed.slots), default=start_date)
        items = store.replace_schedule_items(
            datetime.combine(start_date.date(), time.min),
            datetime.combine(last_day.date(), time.max),
            [(slot.task_id, slot.start_time, slot.end_time) for slot in packed.slots],
        )

    report = _build_report(store, candidates, urgent, packed, available_minutes)
    report.schedule_items = items
    logger.info(
        "Scheduled %d of %d task(s) from %s; %d left out, %d urgent minute(s)",
        len(items), len(candidates), cursor_start.isoformat(),
        len(report.not_scheduled), report.todays_due_tasks_time,
    )
    return report


def _build_report(
    store: EntityStore,
    candidates: list[TaskWithContext],
    urgent: list[TaskWithContext],
    packed: PackResult,
    available_minutes: t.Optional[int],
) -> ScheduleReport:
    urgent_ids = {task.task_id for task in urgent}

    details = []
    for task in packed.not_scheduled:
        assignment = store.get_assignment(task.assignment_id)
        details.append(UnscheduledTaskDetail(
            id=task.task_id,
            description=task.task.description,
            assignment_title=assignment.title if assignment else "",
            time_allocation=task.time_allocation,
        ))
    details.sort(key=lambda detail: -detail.time_allocation)

    over_budget = 0
    if available_minutes is not None:
        over_budget = max(0, packed.minutes_used - available_minutes)

    return ScheduleReport(
        not_scheduled=[NotScheduledTask(task.task_id, task.assignment_id) for task in packed.not_scheduled],
        total_tasks_time=sum(task.time_allocation for task in candidates),
        todays_due_tasks_time=sum(task.time_allocation for task in urgent),
        todays_unscheduled_count=sum(1 for task in packed.not_scheduled if task.task_id in urgent_ids),
        extra_tasks_added=packed.extra_tasks_added,
        over_budget_minutes=over_budget,
        unscheduled_task_details=details,
        available_minutes=available_minutes,
    )
