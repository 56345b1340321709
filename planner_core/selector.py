# -*- coding: utf-8 -*-
"""Gathering candidate tasks and keeping assignment aggregates in step."""
from __future__ import annotations

import logging
import typing as t

from planner_core.exceptions import NotFoundError
from planner_core.models import TaskWithContext
from planner_core.store import EntityStore

logger = logging.getLogger(__name__)


def select_candidate_tasks(store: EntityStore, assignment_ids: t.Iterable[int]) -> list[TaskWithContext]:
    """Collect the incomplete tasks of the given assignments.

    Unknown assignment ids are skipped. Tasks keep their stored order within
    each assignment; no ordering is applied across assignments.

    :param store: The entity store to read from.
    :param assignment_ids: Ids of the assignments to plan for.
    :return: A flat list of tasks annotated with due date and priority.
    """
    candidates: list[TaskWithContext] = []
    seen: set[int] = set()
    for assignment_id in assignment_ids:
        if assignment_id in seen:
            continue
        seen.add(assignment_id)

        assignment = store.get_assignment(assignment_id)
        if assignment is None:
            logger.debug("Skipping unknown assignment %s", assignment_id)
            continue

        for task in store.list_tasks_for_assignment(assignment_id):
            if task.completed:
                continue
            candidates.append(TaskWithContext(
                task=task,
                due_date=assignment.due_date,
                priority=assignment.priority,
            ))
    return candidates


def recompute_estimated_time(store: EntityStore, assignment_id: int) -> int:
    """Set an assignment's estimated time to the sum of its task allocations."""
    total = sum(task.time_allocation for task in store.list_tasks_for_assignment(assignment_id))
    if store.update_assignment(assignment_id, estimated_time=total) is None:
        raise NotFoundError("Assignment", assignment_id)
    return total


def sync_assignment_completion(store: EntityStore, assignment_id: int) -> bool:
    """Derive an assignment's completed flag from its tasks.

    Assignments without tasks keep whatever flag they have.

    :return: The assignment's completed flag after syncing.
    """
    assignment = store.get_assignment(assignment_id)
    if assignment is None:
        raise NotFoundError("Assignment", assignment_id)

    tasks = store.list_tasks_for_assignment(assignment_id)
    if not tasks:
        return assignment.completed

    all_done = all(task.completed for task in tasks)
    if all_done != assignment.completed:
        store.update_assignment(assignment_id, completed=all_done)
    return all_done


def complete_assignment(store: EntityStore, assignment_id: int, completed: bool = True) -> None:
    """Mark an assignment and every one of its tasks (in)complete."""
    if store.update_assignment(assignment_id, completed=completed) is None:
        raise NotFoundError("Assignment", assignment_id)
    for task in store.list_tasks_for_assignment(assignment_id):
        if task.completed != completed:
            store.update_task(task.id, completed=completed)
