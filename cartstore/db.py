"""
Storage Module - Key-value backends for the cart snapshot

Provides:
- KeyValueStore protocol (async get/set of one value per key)
- RedisStore backed by the Upstash async Redis REST client
- MemoryStore for tests and local development
"""

from typing import Optional, Protocol, runtime_checkable

from upstash_redis.asyncio import Redis as AsyncRedis

from cartstore.config import DEFAULT_CART_KEY, get_settings
from cartstore.logging import get_logger, log_safe

logger = get_logger(__name__)


# Singleton instance
_redis_client: Optional[AsyncRedis] = None


def get_redis() -> AsyncRedis:
    """
    Get async Upstash Redis client (singleton).

    Uses standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _redis_client

    if _redis_client is None:
        settings = get_settings()
        if not settings.redis_configured:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _redis_client = AsyncRedis(
            url=settings.upstash_redis_rest_url,
            token=settings.upstash_redis_rest_token,
        )

    return _redis_client


class RedisKeys:
    """Redis key names."""

    CART = DEFAULT_CART_KEY


@runtime_checkable
class KeyValueStore(Protocol):
    """Async byte-string store the cart is persisted into."""

    async def get(self, key: str) -> bytes | str | None: ...

    async def set(self, key: str, value: bytes) -> None: ...


class RedisStore:
    """
    KeyValueStore over Upstash Redis.

    Redis REST values are text, so the UTF-8 snapshot is decoded before SET
    and returned as str on GET.
    """

    def __init__(self, redis: Optional[AsyncRedis] = None, ttl: Optional[int] = None):
        self._redis = redis  # Lazy initialization
        self.ttl = ttl

    @property
    def redis(self) -> AsyncRedis:
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            try:
                self._redis = get_redis()
            except ValueError as e:
                raise ValueError(
                    f"Redis not available: {e}. Check UPSTASH_REDIS_REST_URL and "
                    "UPSTASH_REDIS_REST_TOKEN environment variables."
                ) from e
        return self._redis

    async def get(self, key: str) -> str | None:
        return await self.redis.get(key)

    async def set(self, key: str, value: bytes) -> None:
        text = value.decode("utf-8") if isinstance(value, bytes) else value
        if self.ttl:
            await self.redis.set(key, text, ex=self.ttl)
        else:
            await self.redis.set(key, text)
        logger.debug("Stored %d bytes at %s", len(value), log_safe(key))


class MemoryStore:
    """
    In-memory KeyValueStore.

    Not suitable for persistence across process restarts.
    """

    def __init__(self, initial: Optional[dict[str, bytes]] = None):
        self._data: dict[str, bytes] = dict(initial or {})

    async def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    async def set(self, key: str, value: bytes) -> None:
        self._data[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def peek(self, key: str) -> bytes | None:
        """Synchronous read for tests and the inspect script."""
        return self._data.get(key)


def create_store() -> KeyValueStore:
    """Build the configured store: Redis when credentials exist, memory otherwise."""
    settings = get_settings()
    if settings.redis_configured:
        return RedisStore(ttl=settings.cart_ttl_seconds)
    logger.warning("Upstash Redis not configured, cart will not survive restarts")
    return MemoryStore()
