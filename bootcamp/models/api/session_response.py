# bootcamp/models/api/session_response.py
"""
Session, schedule and leaderboard API response models.
Used by routes for output formatting.
"""

from typing import Any

from pydantic import BaseModel, Field

from bootcamp.domain import Leaderboard, Schedule, Session


class SessionResponse(BaseModel):
    """Response model for a session."""

    session_id: str = Field(..., description="Session ID")
    date: str = Field(..., description="Session date (YYYY-MM-DD)")
    weekday: str = Field(..., description="Weekday name")
    hour: int | None = Field(None, description="Start hour, local time")
    minute: int | None = Field(None, description="Start minute")
    time: str | None = Field(None, description="Start time as HH:MM")
    participants: list[str] = Field(default_factory=list, description="Joined user ids")
    limit: int | None = Field(None, description="Capacity limit")
    is_full: bool = Field(..., description="Whether the session reached its limit")
    ts: str | None = Field(None, description="Presentation handle")

    @classmethod
    def from_domain(cls, session: Session) -> "SessionResponse":
        return cls(
            session_id=session.session_id,
            date=session.date.to_iso(),
            weekday=session.date.weekday().label,
            hour=session.hour,
            minute=session.minute,
            time=session.time_label,
            participants=list(session.participants),
            limit=session.limit,
            is_full=session.is_full(),
            ts=session.presentation_handle,
        )


class MembershipResponse(BaseModel):
    changed: bool = Field(..., description="False when the call was a no-op")
    session: SessionResponse


class ScheduleResponse(BaseModel):
    user: str
    weekday: str

    @classmethod
    def from_domain(cls, schedule: Schedule) -> "ScheduleResponse":
        return cls(user=schedule.user, weekday=schedule.weekday.label)


class LeaderboardEntryResponse(BaseModel):
    rank: int
    participant: str
    attendances: int


class LeaderboardResponse(BaseModel):
    year: int
    month: int
    total_attendances: int
    levels: list[LeaderboardEntryResponse]

    @classmethod
    def from_domain(cls, leaderboard: Leaderboard) -> "LeaderboardResponse":
        return cls(
            year=leaderboard.year,
            month=leaderboard.month,
            total_attendances=leaderboard.total_attendances,
            levels=[
                LeaderboardEntryResponse(
                    rank=e.rank, participant=e.participant, attendances=e.attendances
                )
                for e in leaderboard.entries
            ],
        )


class ReconcileResponse(BaseModel):
    created: list[SessionResponse]
    skipped_count: int
    errors: list[dict[str, Any]] = Field(default_factory=list)
