from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from redis.exceptions import RedisError

from hoarder_sync.infrastructure.redis import create_redis, redis_key

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from typing import Self

    import redis.asyncio as aioredis

    from hoarder_sync.config import RedisConfig

logger = logging.getLogger(__name__)


class CacheError(Exception):
    """Raised when the cache store is unreachable or a command fails."""


class RedisCache:
    """JSON key-value store on Redis holding dedup markers and the sync cursor.

    Unlike a read-through cache this store is fail-closed: dedup correctness
    depends on it, so every store error is raised as ``CacheError``.

    Keys are namespaced as ``<prefix>:<key>`` in Redis; callers only ever see
    the logical ``<key>``.
    """

    def __init__(
        self,
        cfg: RedisConfig,
        *,
        client_factory: Callable[[RedisConfig], aioredis.Redis] = create_redis,
    ) -> None:
        self.cfg = cfg
        self._client_factory = client_factory
        self._client: aioredis.Redis | None = None

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        if self._client is not None:
            return
        client = self._client_factory(self.cfg)
        try:
            await client.ping()
        except RedisError as exc:
            await client.aclose()
            msg = f"Failed to connect to Redis: {exc}"
            raise CacheError(msg) from exc
        self._client = client
        logger.info("redis_cache_connected", extra={"prefix": self.cfg.prefix})

    async def disconnect(self) -> None:
        client, self._client = self._client, None
        if client is None:
            return
        try:
            await client.aclose()
        except RedisError as exc:
            msg = f"Failed to close Redis connection: {exc}"
            raise CacheError(msg) from exc
        logger.info("redis_cache_disconnected")

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.disconnect()

    @property
    def client(self) -> aioredis.Redis:
        if self._client is None:
            msg = "Cache not connected. Call connect() first."
            raise CacheError(msg)
        return self._client

    def _key(self, key: str) -> str:
        return redis_key(self.cfg.prefix, key)

    async def _run(self, operation: str, key: str, call: Awaitable[Any]) -> Any:
        try:
            return await call
        except RedisError as exc:
            logger.error(
                "redis_cache_command_failed",
                extra={"operation": operation, "key": key, "error": str(exc)},
            )
            msg = f"Cache {operation} failed for {key!r}: {exc}"
            raise CacheError(msg) from exc

    async def get(self, key: str, default: Any = None) -> Any:
        """Return the decoded value stored under *key*, or *default* when absent."""
        raw = await self._run("get", key, self.client.get(self._key(key)))
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            msg = f"Cache value for {key!r} is not valid JSON"
            raise CacheError(msg) from exc

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* as JSON under *key*, expiring after *ttl* seconds when given."""
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            msg = f"Cache value for {key!r} is not JSON serializable"
            raise CacheError(msg) from exc

        if ttl:
            call = self.client.set(self._key(key), payload, ex=ttl)
        else:
            call = self.client.set(self._key(key), payload)
        await self._run("set", key, call)

    async def has(self, key: str) -> bool:
        exists = await self._run("exists", key, self.client.exists(self._key(key)))
        return bool(exists)

    async def delete(self, key: str) -> None:
        await self._run("delete", key, self.client.delete(self._key(key)))

    async def list_keys(self) -> set[str]:
        """Return every logical key stored under this cache's prefix."""
        namespace = f"{self.cfg.prefix}:"
        keys: set[str] = set()
        try:
            async for raw_key in self.client.scan_iter(match=f"{namespace}*", count=500):
                keys.add(raw_key[len(namespace) :])
        except RedisError as exc:
            msg = f"Cache key listing failed: {exc}"
            raise CacheError(msg) from exc
        return keys
