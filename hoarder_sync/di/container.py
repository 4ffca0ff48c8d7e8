"""Dependency injection container for wiring the sync components.

Every component is built from an ``AppConfig`` and handed to its consumers
explicitly; nothing is a module-level singleton.
"""

from __future__ import annotations

from contextlib import AsyncExitStack
from typing import TYPE_CHECKING

from hoarder_sync.adapters.hoarder.client import HoarderClient
from hoarder_sync.adapters.hoarder.sync.dedup import BookmarkDeduplicator
from hoarder_sync.adapters.hoarder.sync.mapping import ArticleSchema, BookmarkMapper
from hoarder_sync.adapters.hoarder.sync.service import BookmarkSyncService
from hoarder_sync.adapters.tana.client import TanaClient
from hoarder_sync.infrastructure.cache.backup import CacheBackupService
from hoarder_sync.infrastructure.cache.redis_cache import RedisCache
from hoarder_sync.infrastructure.redis import create_redis

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Self

    import httpx
    import redis.asyncio as aioredis

    from hoarder_sync.config import AppConfig, RedisConfig


class Container:
    """Builds and caches the sync components for one process.

    The HTTP clients hold connection pools, so the container is an async
    context manager that opens them on enter and closes them on exit.

    Example:
        ```python
        async with Container(load_config()) as container:
            service = container.sync_service()
            await service.initialize()
            try:
                await service.full_sync()
            finally:
                await service.cleanup()
        ```
    """

    def __init__(
        self,
        cfg: AppConfig,
        *,
        redis_factory: Callable[[RedisConfig], aioredis.Redis] = create_redis,
        hoarder_transport: httpx.AsyncBaseTransport | None = None,
        tana_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.cfg = cfg
        self._redis_factory = redis_factory
        self._hoarder_transport = hoarder_transport
        self._tana_transport = tana_transport
        self._stack: AsyncExitStack | None = None

        self._cache: RedisCache | None = None
        self._backup: CacheBackupService | None = None
        self._hoarder: HoarderClient | None = None
        self._tana: TanaClient | None = None
        self._sync_service: BookmarkSyncService | None = None

    async def __aenter__(self) -> Self:
        stack = AsyncExitStack()
        await stack.__aenter__()
        try:
            await stack.enter_async_context(self.hoarder_client())
            await stack.enter_async_context(self.tana_client())
        except BaseException:
            await stack.aclose()
            raise
        self._stack = stack
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._stack is not None:
            stack, self._stack = self._stack, None
            await stack.aclose()

    def redis_cache(self) -> RedisCache:
        if self._cache is None:
            self._cache = RedisCache(self.cfg.redis, client_factory=self._redis_factory)
        return self._cache

    def backup_service(self) -> CacheBackupService:
        if self._backup is None:
            self._backup = CacheBackupService(
                self.redis_cache(),
                self.cfg.sync.backup_dir,
                interval_sec=self.cfg.sync.backup_interval_sec,
            )
        return self._backup

    def hoarder_client(self) -> HoarderClient:
        if self._hoarder is None:
            hoarder = self.cfg.hoarder
            self._hoarder = HoarderClient(
                hoarder.base_url,
                hoarder.api_key,
                timeout=hoarder.timeout_sec,
                max_retries=hoarder.max_retries,
                transport=self._hoarder_transport,
            )
        return self._hoarder

    def tana_client(self) -> TanaClient:
        if self._tana is None:
            tana = self.cfg.tana
            self._tana = TanaClient(
                tana.api_token,
                api_url=tana.api_url,
                target_node_id=tana.target_node_id,
                timeout=tana.timeout_sec,
                min_request_interval=tana.min_request_interval_sec,
                transport=self._tana_transport,
            )
        return self._tana

    def bookmark_mapper(self) -> BookmarkMapper:
        return BookmarkMapper(
            self.hoarder_client().archive_url_for,
            ArticleSchema(supertag_id=self.cfg.tana.supertag_id),
        )

    def sync_service(self) -> BookmarkSyncService:
        if self._sync_service is None:
            cache = self.redis_cache()
            self._sync_service = BookmarkSyncService(
                source=self.hoarder_client(),
                target=self.tana_client(),
                cache=cache,
                backup=self.backup_service(),
                deduplicator=BookmarkDeduplicator(cache),
                mapper=self.bookmark_mapper(),
                batch_size=self.cfg.sync.batch_size,
                test_limit=self.cfg.sync.test_limit,
            )
        return self._sync_service
