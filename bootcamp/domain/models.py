"""
Domain models for the bootcamp scheduler.

Sessions and schedules are plain dataclasses. Repositories hand out
transient copies; callers must save a session after mutating it.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any

from bootcamp.domain.local_date import LocalDate, Weekday
from bootcamp.domain.template import format_time_24h


def new_session_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class Session:
    """A materialized occurrence of a template slot on a specific date."""

    session_id: str
    date: LocalDate
    hour: int | None = None  # absent on legacy sessions
    minute: int | None = None
    participants: list[str] = field(default_factory=list)
    limit: int | None = None
    presentation_handle: str | None = None

    @property
    def has_time(self) -> bool:
        return self.hour is not None and self.minute is not None

    @property
    def time_label(self) -> str | None:
        return format_time_24h(self.hour, self.minute) if self.has_time else None

    def matches(self, date: LocalDate, hour: int, minute: int) -> bool:
        return self.date == date and self.hour == hour and self.minute == minute

    def start_key(self) -> tuple[LocalDate, int, int]:
        """Comparable start; untimed sessions count as starting at midnight."""
        return (self.date, self.hour or 0, self.minute or 0)

    def sort_key(self) -> tuple:
        return (*self.start_key(), self.session_id)

    def has_participant(self, user_id: str) -> bool:
        return user_id in self.participants

    def is_full(self) -> bool:
        return self.limit is not None and len(self.participants) >= self.limit

    def to_dict(self) -> dict[str, Any]:
        """Storage shape. ``ts`` carries the presentation handle."""
        return {
            "sessionId": self.session_id,
            "date": self.date.to_iso(),
            "hour": self.hour,
            "minute": self.minute,
            "participants": list(self.participants),
            "limit": self.limit,
            "ts": self.presentation_handle,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        participants: list[str] = []
        for participant in data.get("participants") or []:
            if participant not in participants:
                participants.append(participant)

        return cls(
            session_id=str(data["sessionId"]),
            date=LocalDate.parse(data["date"]),
            hour=data.get("hour"),
            minute=data.get("minute"),
            participants=participants,
            limit=data.get("limit"),
            presentation_handle=data.get("ts"),
        )


@dataclass(slots=True)
class Schedule:
    """A user's standing opt-in to every session on one weekday."""

    user: str
    weekday: Weekday

    def to_dict(self) -> dict[str, Any]:
        return {"user": self.user, "weekday": int(self.weekday)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Schedule":
        return cls(user=str(data["user"]), weekday=Weekday.parse(data["weekday"]))


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    rank: int
    participant: str
    attendances: int


@dataclass(frozen=True, slots=True)
class Leaderboard:
    """Ranked attendance for one month. Derived, never persisted."""

    year: int
    month: int
    entries: tuple[LeaderboardEntry, ...] = ()

    def entry_for(self, participant: str) -> LeaderboardEntry | None:
        return next((e for e in self.entries if e.participant == participant), None)

    @property
    def total_attendances(self) -> int:
        return sum(e.attendances for e in self.entries)
