"""Core scheduling logic for the study task planner.

The package is free of web and MCP imports: the REST service, the MCP
wrapper and the CLI all build on the functions exported here.
"""
from planner_core.accessor import (
    expand_schedule_items,
    get_schedule_for_day,
    update_schedule_item,
)
from planner_core.breaks import DEFAULT_BREAK_POLICY, BreakPolicy, NoBreaks
from planner_core.exceptions import (
    ConfigurationError,
    NotFoundError,
    PlannerError,
    ValidationError,
)
from planner_core.ordering import classify_and_order, is_urgent
from planner_core.packer import generate_schedule, pack_tasks
from planner_core.selector import (
    recompute_estimated_time,
    select_candidate_tasks,
    sync_assignment_completion,
)
from planner_core.store import EntityStore, InMemoryStore

__all__ = [
    "BreakPolicy",
    "ConfigurationError",
    "DEFAULT_BREAK_POLICY",
    "EntityStore",
    "InMemoryStore",
    "NoBreaks",
    "NotFoundError",
    "PlannerError",
    "ValidationError",
    "classify_and_order",
    "expand_schedule_items",
    "generate_schedule",
    "get_schedule_for_day",
    "is_urgent",
    "pack_tasks",
    "recompute_estimated_time",
    "select_candidate_tasks",
    "sync_assignment_completion",
    "update_schedule_item",
]
