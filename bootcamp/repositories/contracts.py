"""Repository interfaces.

Each call is atomic per entity; there are no cross-entity transactions and
no query-by-date, callers filter in memory. Implementations raise
PersistenceError when the backing store fails.
"""

from abc import ABC, abstractmethod

from bootcamp.domain import Schedule, Session


class SessionRepository(ABC):
    @abstractmethod
    async def load_all(self) -> list[Session]:
        """Return every stored session, in no particular order."""
        ...

    @abstractmethod
    async def load(self, session_id: str) -> Session | None:
        """Return a session by id, or None if not found."""
        ...

    @abstractmethod
    async def save(self, session: Session) -> None:
        ...

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        ...

    async def ping(self) -> bool:
        return True


class ScheduleRepository(ABC):
    @abstractmethod
    async def load_all(self) -> list[Schedule]:
        ...

    @abstractmethod
    async def load_by_user(self, user: str) -> Schedule | None:
        ...

    @abstractmethod
    async def save(self, schedule: Schedule) -> None:
        """Create or overwrite the user's schedule."""
        ...

    @abstractmethod
    async def delete(self, user: str) -> None:
        ...
