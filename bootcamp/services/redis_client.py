# bootcamp/services/redis_client.py
import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from bootcamp.config import settings
from bootcamp.domain import PersistenceError
from bootcamp.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class BootcampRedisClient:
    """Pooled Redis client exposing the hash operations the repositories need.

    Unlike a cache, storage failures here must reach the caller: every
    operation wraps ``redis.RedisError`` into ``PersistenceError``.
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.url = url
        self.pool = None
        self.client = client
        self._initialized = client is not None

    async def initialize(self):
        """Initialize connection pool on startup"""
        if self._initialized:
            return

        url = (self.url or settings.REDIS_URL or "").strip()
        if not url:
            raise RuntimeError("REDIS_URL is not configured")

        try:
            logger.info("Attempting Redis connection", url_preview=url[:30] + "...")

            self.pool = ConnectionPool.from_url(
                url,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                retry_on_timeout=True,
                socket_connect_timeout=10,
                socket_timeout=10,
                health_check_interval=30,
                decode_responses=True,  # Auto-decode strings
            )
            self.client = redis.Redis(connection_pool=self.pool)

            result = await self.client.ping()
            logger.info("Redis ping successful", result=result)

            self._initialized = True
            logger.info(
                "Redis client initialized successfully",
                max_connections=settings.REDIS_MAX_CONNECTIONS,
            )

        except Exception as e:
            logger.error("Failed to initialize Redis client", error=str(e))
            self._initialized = False
            raise RuntimeError("Redis initialization failed") from e

    async def close(self):
        """Clean shutdown"""
        try:
            if self.client:
                await self.client.aclose()
            if self.pool:
                await self.pool.disconnect()
            self._initialized = False
            logger.info("Redis client closed")
        except Exception as e:
            logger.error("Error closing Redis client", error=str(e))

    async def _ensure_initialized(self):
        if not self._initialized:
            logger.warning("Redis not initialized, attempting to initialize")
            await self.initialize()

    async def ping(self) -> bool:
        """Test Redis connection"""
        try:
            await self._ensure_initialized()
            return bool(await self.client.ping())
        except Exception as e:
            logger.error("Redis ping failed", error=str(e))
            return False

    async def hgetall(self, key: str) -> dict[str, str]:
        await self._ensure_initialized()
        try:
            return await self.client.hgetall(key) or {}
        except redis.RedisError as e:
            logger.error("Redis HGETALL failed", key=key, error=str(e))
            raise PersistenceError(f"Failed to load {key}: {e}", operation="hgetall") from e

    async def hget(self, key: str, field: str) -> str | None:
        await self._ensure_initialized()
        try:
            return await self.client.hget(key, field)
        except redis.RedisError as e:
            logger.error("Redis HGET failed", key=key, field=field, error=str(e))
            raise PersistenceError(f"Failed to load {key}/{field}: {e}", operation="hget") from e

    async def hset(self, key: str, field: str, value: str) -> None:
        await self._ensure_initialized()
        try:
            await self.client.hset(key, field, value)
        except redis.RedisError as e:
            logger.error("Redis HSET failed", key=key, field=field, error=str(e))
            raise PersistenceError(f"Failed to save {key}/{field}: {e}", operation="hset") from e

    async def hdel(self, key: str, field: str) -> bool:
        await self._ensure_initialized()
        try:
            return await self.client.hdel(key, field) > 0
        except redis.RedisError as e:
            logger.error("Redis HDEL failed", key=key, field=field, error=str(e))
            raise PersistenceError(f"Failed to delete {key}/{field}: {e}", operation="hdel") from e
