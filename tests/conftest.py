from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from bootcamp.repositories.memory import InMemoryScheduleRepository, InMemorySessionRepository
from bootcamp.services.application import BootcampApplication

AMSTERDAM = ZoneInfo("Europe/Amsterdam")


def local(year: int, month: int, day: int, hour: int = 9, minute: int = 0) -> datetime:
    """An Amsterdam wall-clock instant."""
    return datetime(year, month, day, hour, minute, tzinfo=AMSTERDAM)


# 2025-06-02 is a Monday
MONDAY_MORNING = local(2025, 6, 2, 9)
TUESDAY_MORNING = local(2025, 6, 3, 9)
WEDNESDAY_MORNING = local(2025, 6, 4, 9)


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class CapturingPresenter:
    def __init__(self):
        self.presented = []
        self.updated = []

    async def present(self, session):
        self.presented.append(session)
        return f"ts-{len(self.presented)}"

    async def update(self, session):
        self.updated.append(session)


class FakeRedis:
    """Hash subset of redis.asyncio.Redis with decode_responses=True."""

    def __init__(self):
        self.hashes: dict[str, dict[str, str]] = {}
        self.fail_with: Exception | None = None

    def _check(self):
        if self.fail_with:
            raise self.fail_with

    async def ping(self) -> bool:
        self._check()
        return True

    async def hgetall(self, key: str) -> dict[str, str]:
        self._check()
        return dict(self.hashes.get(key, {}))

    async def hget(self, key: str, field: str) -> str | None:
        self._check()
        return self.hashes.get(key, {}).get(field)

    async def hset(self, key: str, field: str, value: str) -> int:
        self._check()
        created = field not in self.hashes.setdefault(key, {})
        self.hashes[key][field] = value
        return int(created)

    async def hdel(self, key: str, field: str) -> int:
        self._check()
        return int(self.hashes.get(key, {}).pop(field, None) is not None)

    async def aclose(self):
        return None


@pytest.fixture
def clock():
    return FixedClock(MONDAY_MORNING)


@pytest.fixture
def session_repository():
    return InMemorySessionRepository()


@pytest.fixture
def schedule_repository():
    return InMemoryScheduleRepository()


@pytest.fixture
def presenter():
    return CapturingPresenter()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def make_application(session_repository, schedule_repository, presenter, clock):
    def _make(sessions=None, **options) -> BootcampApplication:
        options.setdefault("tz", AMSTERDAM)
        options.setdefault("clock", clock)
        return BootcampApplication(
            sessions or session_repository, schedule_repository, presenter, **options
        )

    return _make


@pytest.fixture
def application(make_application):
    return make_application()


@pytest.fixture
def at():
    """Build Amsterdam wall-clock instants: ``at(2025, 6, 2, 17)``."""
    return local
