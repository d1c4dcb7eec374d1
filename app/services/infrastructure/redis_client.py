# app/services/infrastructure/redis_client.py
import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from app.config import Settings
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class RedisClientError(Exception):
    """Raised when a Redis command fails."""


class FastRedisClient:
    """Pooled async Redis client. Command failures raise RedisClientError."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.pool = None
        self.client = None
        self._initialized = False

    async def initialize(self):
        """Initialize connection pool on startup"""
        if self._initialized:
            return

        try:
            redis_url = self.settings.REDIS_URL
            logger.info("Attempting Redis connection", url_preview=self._redacted_url())

            self.pool = ConnectionPool.from_url(
                redis_url,
                max_connections=self.settings.REDIS_MAX_CONNECTIONS,
                socket_connect_timeout=self.settings.REDIS_SOCKET_TIMEOUT,
                socket_timeout=self.settings.REDIS_SOCKET_TIMEOUT,
                health_check_interval=30,
                decode_responses=True,
            )
            self.client = redis.Redis(connection_pool=self.pool)

            result = await self.client.ping()
            logger.info("Redis ping successful", result=result)

            self._initialized = True
            logger.info(
                "Redis client initialized successfully",
                max_connections=self.settings.REDIS_MAX_CONNECTIONS,
            )

        except Exception as e:
            logger.error("Failed to initialize Redis client", error=str(e))
            self._initialized = False
            raise RuntimeError("Redis initialization failed") from e

    def _redacted_url(self) -> str:
        """REDIS_URL with any password stripped, safe to log."""
        url = self.settings.REDIS_URL
        if "@" not in url:
            return url
        scheme, _, rest = url.partition("://")
        return f"{scheme}://***@{rest.split('@', 1)[1]}"

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

    async def get(self, key: str) -> str | None:
        """Get value, None when the key does not exist."""
        try:
            await self._ensure_initialized()
            return await self.client.get(key)
        except Exception as e:
            logger.error("Redis GET failed", key_prefix=key.split(":", 1)[0], error=str(e))
            raise RedisClientError(f"GET failed: {e}") from e

    async def set(self, key: str, value: str, ttl_s: int | None = None) -> bool:
        """Set value, with an expiry only when ttl_s is given."""
        try:
            await self._ensure_initialized()
            if ttl_s:
                result = await self.client.setex(key, ttl_s, value)
            else:
                result = await self.client.set(key, value)
            return bool(result)
        except Exception as e:
            logger.error("Redis SET failed", key_prefix=key.split(":", 1)[0], error=str(e))
            raise RedisClientError(f"SET failed: {e}") from e
