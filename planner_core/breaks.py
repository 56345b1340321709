# -*- coding: utf-8 -*-
"""Break placement strategies used by the schedule packer."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BreakPolicy:
    """Lunch window plus a short break after every N placed tasks.

    A lunch break is never split across a task: when the cursor lands inside
    the lunch window the whole remainder of the window is skipped before the
    next task starts.
    """
    lunch_start_hour: int = 11
    lunch_end_hour: int = 13
    micro_break_every: int = 3
    micro_break_minutes: int = 15

    def before_task(self, cursor: datetime) -> datetime:
        """Return where the next task may start given the lunch window."""
        if self.lunch_start_hour <= cursor.hour < self.lunch_end_hour:
            resumed = cursor.replace(hour=self.lunch_end_hour, minute=0, second=0, microsecond=0)
            logger.debug("Lunch break: %s -> %s", cursor.isoformat(), resumed.isoformat())
            return resumed
        return cursor

    def after_task(self, cursor: datetime, placed_count: int) -> datetime:
        """Return the cursor after an optional micro-break.

        :param cursor: End time of the task just placed.
        :param placed_count: Number of tasks placed so far, including this one.
        """
        if self.micro_break_every <= 0 or self.micro_break_minutes <= 0:
            return cursor
        if placed_count % self.micro_break_every == 0:
            logger.debug("Micro-break of %d minutes after task #%d", self.micro_break_minutes, placed_count)
            return cursor + timedelta(minutes=self.micro_break_minutes)
        return cursor


class NoBreaks(BreakPolicy):
    """Policy that never inserts breaks; intervals are back to back."""

    def before_task(self, cursor: datetime) -> datetime:
        return cursor

    def after_task(self, cursor: datetime, placed_count: int) -> datetime:
        return cursor


DEFAULT_BREAK_POLICY = BreakPolicy()
