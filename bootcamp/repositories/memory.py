"""
In-memory repositories for local runs and tests.

Entities are stored in their serialized form so callers always receive a
fresh copy, the same way a key-value store would hand them out.
"""

from bootcamp.domain import Schedule, Session
from bootcamp.repositories.contracts import ScheduleRepository, SessionRepository


class InMemorySessionRepository(SessionRepository):
    def __init__(self, sessions: list[Session] | None = None):
        self._rows: dict[str, dict] = {}
        for session in sessions or []:
            self._rows[session.session_id] = session.to_dict()

    async def load_all(self) -> list[Session]:
        return [Session.from_dict(row) for row in self._rows.values()]

    async def load(self, session_id: str) -> Session | None:
        row = self._rows.get(session_id)
        return Session.from_dict(row) if row else None

    async def save(self, session: Session) -> None:
        self._rows[session.session_id] = session.to_dict()

    async def delete(self, session_id: str) -> None:
        self._rows.pop(session_id, None)


class InMemoryScheduleRepository(ScheduleRepository):
    def __init__(self, schedules: list[Schedule] | None = None):
        self._rows: dict[str, dict] = {}
        for schedule in schedules or []:
            self._rows[schedule.user] = schedule.to_dict()

    async def load_all(self) -> list[Schedule]:
        return [Schedule.from_dict(row) for row in self._rows.values()]

    async def load_by_user(self, user: str) -> Schedule | None:
        row = self._rows.get(user)
        return Schedule.from_dict(row) if row else None

    async def save(self, schedule: Schedule) -> None:
        self._rows[schedule.user] = schedule.to_dict()

    async def delete(self, user: str) -> None:
        self._rows.pop(user, None)
