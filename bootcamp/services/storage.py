"""Storage selection: Redis when REDIS_URL is set, in-memory otherwise."""

from dataclasses import dataclass

from bootcamp.config import Settings
from bootcamp.infrastructure.observability.logging import get_logger
from bootcamp.repositories.contracts import ScheduleRepository, SessionRepository
from bootcamp.repositories.memory import InMemoryScheduleRepository, InMemorySessionRepository
from bootcamp.repositories.redis_repository import RedisScheduleRepository, RedisSessionRepository
from bootcamp.services.redis_client import BootcampRedisClient

logger = get_logger(__name__)


@dataclass
class Storage:
    session_repository: SessionRepository
    schedule_repository: ScheduleRepository
    redis_client: BootcampRedisClient | None = None

    @property
    def backend(self) -> str:
        return "redis" if self.redis_client else "memory"

    async def ping(self) -> bool:
        return await self.session_repository.ping()

    async def close(self) -> None:
        if self.redis_client:
            await self.redis_client.close()


async def open_storage(settings: Settings) -> Storage:
    if not settings.uses_redis():
        logger.warning("REDIS_URL not set, sessions will not survive a restart")
        return Storage(InMemorySessionRepository(), InMemoryScheduleRepository())

    redis_client = BootcampRedisClient(settings.REDIS_URL)
    await redis_client.initialize()
    return Storage(
        RedisSessionRepository(redis_client, settings.REDIS_KEY_PREFIX),
        RedisScheduleRepository(redis_client, settings.REDIS_KEY_PREFIX),
        redis_client,
    )
