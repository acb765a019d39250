"""
Redis-backed repositories.

Each entity type lives in one hash (``<prefix>:sessions``,
``<prefix>:schedules``) keyed by its identity with a JSON value, so every
load/save/delete is a single atomic command.
"""

import json

from bootcamp.domain import PersistenceError, Schedule, Session
from bootcamp.infrastructure.observability.logging import get_logger
from bootcamp.repositories.contracts import ScheduleRepository, SessionRepository
from bootcamp.services.redis_client import BootcampRedisClient

logger = get_logger(__name__)


def _decode(raw: str, key: str, field: str) -> dict:
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        raise PersistenceError(f"Corrupt record {key}/{field}: {e}", operation="decode") from e


class RedisSessionRepository(SessionRepository):
    def __init__(self, redis_client: BootcampRedisClient, key_prefix: str = "bootcamp"):
        self.redis = redis_client
        self.key = f"{key_prefix}:sessions"

    async def load_all(self) -> list[Session]:
        rows = await self.redis.hgetall(self.key)
        return [Session.from_dict(_decode(raw, self.key, field)) for field, raw in rows.items()]

    async def load(self, session_id: str) -> Session | None:
        raw = await self.redis.hget(self.key, session_id)
        if raw is None:
            return None
        return Session.from_dict(_decode(raw, self.key, session_id))

    async def save(self, session: Session) -> None:
        await self.redis.hset(self.key, session.session_id, json.dumps(session.to_dict()))
        logger.debug("Session saved", session_id=session.session_id)

    async def delete(self, session_id: str) -> None:
        removed = await self.redis.hdel(self.key, session_id)
        logger.debug("Session deleted", session_id=session_id, removed=removed)

    async def ping(self) -> bool:
        return await self.redis.ping()


class RedisScheduleRepository(ScheduleRepository):
    def __init__(self, redis_client: BootcampRedisClient, key_prefix: str = "bootcamp"):
        self.redis = redis_client
        self.key = f"{key_prefix}:schedules"

    async def load_all(self) -> list[Schedule]:
        rows = await self.redis.hgetall(self.key)
        return [Schedule.from_dict(_decode(raw, self.key, field)) for field, raw in rows.items()]

    async def load_by_user(self, user: str) -> Schedule | None:
        raw = await self.redis.hget(self.key, user)
        if raw is None:
            return None
        return Schedule.from_dict(_decode(raw, self.key, user))

    async def save(self, schedule: Schedule) -> None:
        await self.redis.hset(self.key, schedule.user, json.dumps(schedule.to_dict()))

    async def delete(self, user: str) -> None:
        await self.redis.hdel(self.key, user)
