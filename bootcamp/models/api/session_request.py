# bootcamp/models/api/session_request.py
"""
Session and schedule API request models.
Used by routes for input validation.
"""

from pydantic import BaseModel, Field, field_validator

from bootcamp.domain import LocalDate, Session


class MembershipRequest(BaseModel):
    """Request body for joining or quitting a session."""

    user_id: str = Field(..., min_length=1, description="Chat user id")


class DateMembershipRequest(MembershipRequest):
    """Join/quit by date reference instead of session id."""

    date: str | None = Field(
        None,
        description="today, tomorrow, a weekday name or YYYY-MM-DD; empty means next session",
    )


class SubscribeRequest(BaseModel):
    weekday: str = Field(..., min_length=1, description="Weekday name, e.g. 'tuesday' or 'tue'")


class SessionUpdateRequest(BaseModel):
    """Full replacement of a session (administrative)."""

    date: str = Field(..., description="Session date (YYYY-MM-DD)")
    hour: int | None = Field(None, ge=0, le=23)
    minute: int | None = Field(None, ge=0, le=59)
    participants: list[str] = Field(default_factory=list)
    limit: int | None = Field(None, ge=1, description="Capacity, empty for unlimited")
    ts: str | None = Field(None, description="Presentation handle")

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        return LocalDate.parse(v).to_iso()

    def to_session(self, session_id: str) -> Session:
        return Session.from_dict({"sessionId": session_id, **self.model_dump()})
