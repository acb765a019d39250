"""
Domain subpackage: calendar values, the weekly template and the entities
the scheduling engine works on.
"""

from .errors import (
    BootcampError,
    CapacityExceededError,
    InvalidDateError,
    InvalidWeekdayError,
    NotFoundError,
    PersistenceError,
    ScheduleNotFoundError,
    SchedulesDisabledError,
    SessionNotFoundError,
)
from .local_date import LocalDate, Weekday, parse_date_reference
from .models import Leaderboard, LeaderboardEntry, Schedule, Session, new_session_id
from .template import BOOTCAMP_SCHEDULES, TemplateSlot, WeeklyTemplate, format_time_24h

__all__ = [
    "BOOTCAMP_SCHEDULES",
    "BootcampError",
    "CapacityExceededError",
    "InvalidDateError",
    "InvalidWeekdayError",
    "Leaderboard",
    "LeaderboardEntry",
    "LocalDate",
    "NotFoundError",
    "PersistenceError",
    "Schedule",
    "ScheduleNotFoundError",
    "SchedulesDisabledError",
    "Session",
    "SessionNotFoundError",
    "TemplateSlot",
    "Weekday",
    "WeeklyTemplate",
    "format_time_24h",
    "new_session_id",
    "parse_date_reference",
]
