# -*- coding: utf-8 -*-
"""Urgent/future classification and priority ordering of candidate tasks."""
from __future__ import annotations

from datetime import datetime

from planner_core.models import TaskWithContext

PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}


def is_urgent(due_date: datetime, reference: datetime) -> bool:
    """True when the due date is on the reference calendar day or earlier."""
    return due_date.date() <= reference.date()


def priority_key(task: TaskWithContext) -> tuple[int, datetime]:
    return PRIORITY_RANK[task.priority], task.due_date


def order_tasks(tasks: list[TaskWithContext]) -> list[TaskWithContext]:
    """Sort by priority (high first), then due date; ties keep input order."""
    return sorted(tasks, key=priority_key)


def classify_and_order(
    tasks: list[TaskWithContext],
    reference: datetime,
) -> tuple[list[TaskWithContext], list[TaskWithContext]]:
    """Split candidates into urgent and future buckets, each ordered.

    :param tasks: Candidate tasks from the selector.
    :param reference: Instant whose calendar day decides urgency.
    :return: (urgent, future), both sorted by priority then due date.
    """
    urgent = [task for task in tasks if is_urgent(task.due_date, reference)]
    future = [task for task in tasks if not is_urgent(task.due_date, reference)]
    return order_tasks(urgent), order_tasks(future)
