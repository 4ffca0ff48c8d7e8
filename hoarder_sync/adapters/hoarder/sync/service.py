"""Hoarder -> Tana sync orchestrator."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from hoarder_sync.adapters.hoarder.models import SyncResult
from hoarder_sync.adapters.hoarder.sync.constants import (
    BOOKMARK_KEY_PREFIX,
    DEFAULT_BATCH_SIZE,
    DEFAULT_TEST_LIMIT,
    LAST_CURSOR_KEY,
    URL_KEY_PREFIX,
)
from hoarder_sync.adapters.hoarder.sync.errors import BookmarkSyncError, record_error
from hoarder_sync.core.logging_utils import generate_correlation_id
from hoarder_sync.infrastructure.cache.redis_cache import CacheError

if TYPE_CHECKING:
    from collections.abc import Callable

    from hoarder_sync.adapters.hoarder.models import HoarderBookmark, HoarderBookmarkPage
    from hoarder_sync.adapters.hoarder.sync.dedup import BookmarkDeduplicator
    from hoarder_sync.adapters.hoarder.sync.protocols import (
        BookmarkSource,
        CacheSnapshots,
        KeyValueCache,
        NodeTarget,
    )
    from hoarder_sync.adapters.tana.models import PlainNode

logger = logging.getLogger(__name__)


class BookmarkSyncService:
    """Copies Hoarder bookmarks into Tana as Article nodes.

    Pages are fetched sequentially and bookmarks within a page are synced one
    at a time. A bookmark is marked synced only after Tana accepted it, and the
    pagination cursor is persisted only after the whole page succeeded, so a
    failed run resumes without losing or resubmitting bookmarks.

    All collaborators are injected; the service owns none of their lifetimes
    except the cache connection and backup interval, which ``initialize`` and
    ``cleanup`` manage.
    """

    def __init__(
        self,
        *,
        source: BookmarkSource,
        target: NodeTarget,
        cache: KeyValueCache,
        backup: CacheSnapshots,
        deduplicator: BookmarkDeduplicator,
        mapper: Callable[[HoarderBookmark], PlainNode],
        batch_size: int = DEFAULT_BATCH_SIZE,
        test_limit: int = DEFAULT_TEST_LIMIT,
    ) -> None:
        self._source = source
        self._target = target
        self._cache = cache
        self._backup = backup
        self._dedup = deduplicator
        self._mapper = mapper
        self.batch_size = batch_size
        self.test_limit = test_limit
        self._cleaned_up = False

    async def initialize(self) -> None:
        """Connect the cache, restore the last snapshot and start periodic backups."""
        await self._cache.connect()
        restored = await self._backup.restore()
        await self._backup.start_interval()
        logger.info("sync_service_initialized", extra={"restored_keys": restored})

    async def cleanup(self) -> None:
        """Final backup, stop periodic backups, disconnect. Runs once."""
        if self._cleaned_up:
            return
        self._cleaned_up = True
        try:
            if self._cache.connected:
                await self._backup.backup()
        finally:
            try:
                await self._backup.stop_interval()
            finally:
                await self._cache.disconnect()
        logger.info("sync_service_cleaned_up")

    async def sync_bookmark(self, bookmark: HoarderBookmark) -> bool:
        """Sync one bookmark unless it was synced before.

        Returns:
            True if a node was created, False if the bookmark was skipped

        Raises:
            BookmarkSyncError: If mapping, submission or recording failed
        """
        if await self._dedup.is_synced(bookmark):
            return False
        await self._submit(bookmark)
        return True

    async def _submit(self, bookmark: HoarderBookmark) -> None:
        try:
            node = self._mapper(bookmark)
            await self._target.create_node(node)
            await self._dedup.mark_synced(bookmark)
        except Exception as exc:
            logger.error(
                "bookmark_sync_failed",
                extra={
                    "bookmark_id": bookmark.id,
                    "title": bookmark.display_title,
                    "url": bookmark.url,
                    "error": str(exc),
                },
            )
            raise BookmarkSyncError(bookmark.id, str(exc)) from exc
        logger.info(
            "bookmark_synced",
            extra={"bookmark_id": bookmark.id, "title": bookmark.display_title},
        )

    async def _sync_page(
        self, page: HoarderBookmarkPage, result: SyncResult, *, correlation_id: str
    ) -> None:
        """Sync every bookmark of *page* in order, then persist its cursor."""
        for bookmark in page.bookmarks:
            if await self.sync_bookmark(bookmark):
                result.items_synced += 1
            else:
                result.items_skipped += 1

        next_cursor = page.next_cursor or None
        # None marks the end of the collection
        await self._cache.set(LAST_CURSOR_KEY, next_cursor)
        result.pages += 1
        result.next_cursor = next_cursor
        logger.info(
            "sync_page_completed",
            extra={
                "correlation_id": correlation_id,
                "page": result.pages,
                "bookmarks": len(page.bookmarks),
                "synced": result.items_synced,
                "skipped": result.items_skipped,
                "has_more": next_cursor is not None,
            },
        )
        await self._backup.backup()

    async def _fetch_page(self, cursor: str | None, limit: int) -> HoarderBookmarkPage:
        return await self._source.get_bookmarks(cursor=cursor, limit=limit)

    async def full_sync(self) -> SyncResult:
        """Walk the whole collection from the first page.

        Bookmarks synced by earlier runs are skipped by the dedup markers.
        Any error aborts the run; the cursor then still points at the start of
        the failed page.
        """
        correlation_id = generate_correlation_id()
        result = SyncResult(mode="full")
        started = time.perf_counter()
        logger.info(
            "full_sync_started",
            extra={"correlation_id": correlation_id, "batch_size": self.batch_size},
        )

        cursor: str | None = None
        try:
            while True:
                page = await self._fetch_page(cursor, self.batch_size)
                await self._sync_page(page, result, correlation_id=correlation_id)
                cursor = result.next_cursor
                if cursor is None:
                    break
        except Exception as exc:
            record_error(result, str(exc))
            logger.error(
                "full_sync_failed",
                extra={
                    "correlation_id": correlation_id,
                    "pages": result.pages,
                    "synced": result.items_synced,
                    "error": str(exc),
                },
            )
            raise

        result.duration_seconds = time.perf_counter() - started
        logger.info(
            "full_sync_completed",
            extra={"correlation_id": correlation_id, **self._summary(result)},
        )
        return result

    async def incremental_sync(self) -> SyncResult:
        """Sync one page starting at the persisted cursor.

        Falls back to a full sync when no cursor is stored or the last run
        reached the end of the collection.
        """
        last_cursor = await self._cache.get(LAST_CURSOR_KEY)
        if not last_cursor:
            logger.info("incremental_sync_no_cursor_running_full_sync")
            return await self.full_sync()

        correlation_id = generate_correlation_id()
        result = SyncResult(mode="incremental")
        started = time.perf_counter()
        logger.info(
            "incremental_sync_started",
            extra={"correlation_id": correlation_id, "cursor": last_cursor},
        )
        try:
            page = await self._fetch_page(last_cursor, self.batch_size)
            await self._sync_page(page, result, correlation_id=correlation_id)
        except Exception as exc:
            record_error(result, str(exc))
            logger.error(
                "incremental_sync_failed",
                extra={"correlation_id": correlation_id, "error": str(exc)},
            )
            raise

        result.duration_seconds = time.perf_counter() - started
        logger.info(
            "incremental_sync_completed",
            extra={"correlation_id": correlation_id, **self._summary(result)},
        )
        return result

    async def test_sync(self, limit: int | None = None) -> SyncResult:
        """Submit the first *limit* bookmarks, ignoring existing dedup markers.

        Per-bookmark failures are recorded and do not stop the run. Submitted
        bookmarks are still marked synced, and the cursor is left untouched.
        """
        if limit is None:
            limit = self.test_limit
        if limit < 1:
            msg = f"Test sync limit must be at least 1, got {limit}"
            raise ValueError(msg)
        correlation_id = generate_correlation_id()
        result = SyncResult(mode="test")
        started = time.perf_counter()
        logger.info(
            "test_sync_started", extra={"correlation_id": correlation_id, "limit": limit}
        )

        try:
            page = await self._fetch_page(None, limit)
            result.pages = 1
            for bookmark in page.bookmarks[:limit]:
                try:
                    await self._submit(bookmark)
                except BookmarkSyncError as exc:
                    if isinstance(exc.__cause__, CacheError):
                        raise
                    result.items_failed += 1
                    record_error(result, str(exc))
                else:
                    result.items_synced += 1
        finally:
            await self._backup.backup()

        result.duration_seconds = time.perf_counter() - started
        logger.info(
            "test_sync_completed",
            extra={"correlation_id": correlation_id, **self._summary(result)},
        )
        return result

    async def sync_status(self) -> dict[str, Any]:
        """Report the stored cursor state and the number of dedup markers."""
        keys = await self._cache.list_keys()
        if LAST_CURSOR_KEY not in keys:
            state = "never_synced"
            cursor = None
        else:
            cursor = await self._cache.get(LAST_CURSOR_KEY)
            state = "caught_up" if cursor is None else "in_progress"
        return {
            "state": state,
            "cursor": cursor,
            "synced_bookmarks": sum(1 for key in keys if key.startswith(BOOKMARK_KEY_PREFIX)),
            "synced_urls": sum(1 for key in keys if key.startswith(URL_KEY_PREFIX)),
        }

    @staticmethod
    def _summary(result: SyncResult) -> dict[str, Any]:
        return {
            "pages": result.pages,
            "synced": result.items_synced,
            "skipped": result.items_skipped,
            "failed": result.items_failed,
            "duration_seconds": round(result.duration_seconds, 2),
        }
