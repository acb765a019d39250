"""
Error taxonomy for the bootcamp scheduling engine.

Idempotent no-ops (double join, quit when absent, unsubscribe when absent)
are never raised; everything here propagates to the caller, which decides
how to surface it.
"""


class BootcampError(Exception):
    """Base exception for scheduling and membership operations."""

    def __init__(self, message: str, operation: str = "unknown"):
        super().__init__(message)
        self.operation = operation


class NotFoundError(BootcampError):
    """A referenced session or schedule does not exist."""


class SessionNotFoundError(NotFoundError):
    def __init__(self, message: str, session_id: str | None = None, operation: str = "resolve_session"):
        super().__init__(message, operation=operation)
        self.session_id = session_id


class ScheduleNotFoundError(NotFoundError):
    def __init__(self, user_id: str, operation: str = "load_schedule"):
        super().__init__(f"No schedule found for user {user_id}", operation=operation)
        self.user_id = user_id


class CapacityExceededError(BootcampError):
    """Join attempted on a session that already reached its limit."""

    def __init__(self, session_id: str, limit: int):
        super().__init__(
            f"Session {session_id} is full ({limit} participants)", operation="join"
        )
        self.session_id = session_id
        self.limit = limit


class PersistenceError(BootcampError):
    """A repository call failed. Never retried by the engine."""


class SchedulesDisabledError(BootcampError):
    """Recurring subscriptions are switched off by configuration."""

    def __init__(self):
        super().__init__("Recurring schedules are disabled", operation="subscribe")


class InvalidWeekdayError(BootcampError, ValueError):
    def __init__(self, value: str):
        super().__init__(f"Unknown weekday: {value!r}", operation="parse_weekday")
        self.value = value


class InvalidDateError(BootcampError, ValueError):
    def __init__(self, value: str):
        super().__init__(f"Cannot understand date: {value!r}", operation="parse_date")
        self.value = value
