# -*- coding: utf-8 -*-
"""Sample assignments used for demos and manual testing."""
from __future__ import annotations

from datetime import datetime, timedelta

from planner_core.selector import recompute_estimated_time
from planner_core.store import EntityStore


# (title, course, description, days until due, priority, tasks)
# Each task is (description, minutes, completed, minutes spent).
DEMO_ASSIGNMENTS = [
    (
        "Literature Essay",
        "American Literature 301",
        "Write a 5-page essay analyzing the themes in 'The Great Gatsby'",
        2,
        "high",
        [
            ("Create outline with thesis", 45, False, 0),
            ("Research supporting evidence", 90, False, 0),
            ("Write first draft", 75, False, 0),
            ("Revise and edit", 30, False, 0),
        ],
    ),
    (
        "Physics Lab Report",
        "Physics 202",
        "Submit a lab report on the pendulum experiment",
        5,
        "medium",
        [
            ("Organize experimental data", 45, True, 45),
            ("Write methodology section", 30, True, 30),
            ("Analyze results", 60, False, 0),
            ("Write conclusion", 45, False, 0),
        ],
    ),
    (
        "Math Problem Set",
        "Calculus II",
        "Complete problems 1-20 from Chapter 7",
        1,
        "low",
        [
            ("Review lecture notes on differentiation", 15, True, 15),
            ("Solve differential equations (problems 1-5)", 45, False, 23),
            ("Complete integration problems (6-10)", 45, False, 0),
            ("Check answers and review work", 15, False, 0),
        ],
    ),
]


def seed_demo_data(store: EntityStore, now: datetime | None = None) -> list[int]:
    """Create the demo assignments and their tasks.

    :param store: Store to populate.
    :param now: Reference time for relative due dates (defaults to now).
    :return: Ids of the created assignments.
    """
    now = now or datetime.now()
    created = []
    for title, course, description, days, priority, tasks in DEMO_ASSIGNMENTS:
        assignment = store.create_assignment(
            title=title,
            course=course,
            description=description,
            due_date=now + timedelta(days=days),
            priority=priority,
            created_at=now,
        )
        for order, (task_description, minutes, completed, spent) in enumerate(tasks):
            store.create_task(
                assignment_id=assignment.id,
                description=task_description,
                time_allocation=minutes,
                completed=completed,
                order=order,
                time_spent=spent,
            )
        recompute_estimated_time(store, assignment.id)
        created.append(assignment.id)
    return created
