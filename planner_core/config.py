# -*- coding: utf-8 -*-
"""Environment-driven settings for the planner.

Every knob has a module-level default and an environment override, in the
same way the service URLs are configured for the HTTP clients.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, tzinfo
import typing as t
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from planner_core.breaks import BreakPolicy, NoBreaks
from planner_core.exceptions import ConfigurationError


DEFAULT_DAY_START_HOUR = 9
DEFAULT_DAY_END_HOUR = 18
DEFAULT_LUNCH_START_HOUR = 11
DEFAULT_LUNCH_END_HOUR = 13
DEFAULT_MICRO_BREAK_EVERY = 3
DEFAULT_MICRO_BREAK_MINUTES = 15

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class SchedulerSettings:
    """Workday bounds, break policy inputs and runtime switches."""
    day_start_hour: int = DEFAULT_DAY_START_HOUR
    day_end_hour: int = DEFAULT_DAY_END_HOUR
    lunch_start_hour: int = DEFAULT_LUNCH_START_HOUR
    lunch_end_hour: int = DEFAULT_LUNCH_END_HOUR
    micro_break_every: int = DEFAULT_MICRO_BREAK_EVERY
    micro_break_minutes: int = DEFAULT_MICRO_BREAK_MINUTES
    breaks_enabled: bool = True
    timezone: t.Optional[str] = None
    seed_demo: bool = False
    log_level: str = "INFO"

    def break_policy(self) -> BreakPolicy:
        """Build the break policy these settings describe."""
        if not self.breaks_enabled:
            return NoBreaks()
        return BreakPolicy(
            lunch_start_hour=self.lunch_start_hour,
            lunch_end_hour=self.lunch_end_hour,
            micro_break_every=self.micro_break_every,
            micro_break_minutes=self.micro_break_minutes,
        )

    def tz(self) -> t.Optional[tzinfo]:
        if not self.timezone:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(f"Unknown timezone: {self.timezone}") from e

    def now(self) -> datetime:
        """Current naive wall-clock time in the configured timezone."""
        return datetime.now(self.tz()).replace(tzinfo=None)

    def to_local(self, value: datetime) -> datetime:
        """Convert an aware datetime to naive local wall-clock time.

        Naive values are assumed to already be local and are returned as is.
        """
        if value.tzinfo is None:
            return value
        return value.astimezone(self.tz()).replace(tzinfo=None)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUE_VALUES


def load_settings() -> SchedulerSettings:
    """Read settings from the environment.

    :return: A validated SchedulerSettings object.
    :raises ConfigurationError: If a value is malformed or inconsistent.
    """
    settings = SchedulerSettings(
        day_start_hour=_int_env("PLANNER_DAY_START_HOUR", DEFAULT_DAY_START_HOUR),
        day_end_hour=_int_env("PLANNER_DAY_END_HOUR", DEFAULT_DAY_END_HOUR),
        lunch_start_hour=_int_env("PLANNER_LUNCH_START_HOUR", DEFAULT_LUNCH_START_HOUR),
        lunch_end_hour=_int_env("PLANNER_LUNCH_END_HOUR", DEFAULT_LUNCH_END_HOUR),
        micro_break_every=_int_env("PLANNER_MICRO_BREAK_EVERY", DEFAULT_MICRO_BREAK_EVERY),
        micro_break_minutes=_int_env("PLANNER_MICRO_BREAK_MINUTES", DEFAULT_MICRO_BREAK_MINUTES),
        breaks_enabled=_bool_env("PLANNER_BREAKS_ENABLED", True),
        timezone=os.getenv("PLANNER_TIMEZONE") or None,
        seed_demo=_bool_env("PLANNER_SEED_DEMO", False),
        log_level=os.getenv("PLANNER_LOG_LEVEL", "INFO").upper(),
    )
    _validate(settings)
    return settings


def _validate(settings: SchedulerSettings) -> None:
    for name in ("day_start_hour", "day_end_hour"):
        value = getattr(settings, name)
        if not 0 <= value <= 24:
            raise ConfigurationError(f"{name} must be between 0 and 24, got {value}")
    # Lunch bounds become clock times, so 24 is out of range
    for name in ("lunch_start_hour", "lunch_end_hour"):
        value = getattr(settings, name)
        if not 0 <= value <= 23:
            raise ConfigurationError(f"{name} must be between 0 and 23, got {value}")
    if settings.day_end_hour <= settings.day_start_hour:
        raise ConfigurationError("day_end_hour must be after day_start_hour")
    if settings.lunch_end_hour < settings.lunch_start_hour:
        raise ConfigurationError("lunch_end_hour must not be before lunch_start_hour")
    if settings.micro_break_every < 0 or settings.micro_break_minutes < 0:
        raise ConfigurationError("micro-break settings must not be negative")
    # Surface a bad timezone at startup instead of on the first request
    settings.tz()
