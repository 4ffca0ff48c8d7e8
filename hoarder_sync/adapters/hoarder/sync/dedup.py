"""Deduplication markers for bookmarks already written to Tana."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Literal

from hoarder_sync.adapters.hoarder.sync.constants import (
    BOOKMARK_KEY_PREFIX,
    SYNCED_MARKER,
    URL_KEY_PREFIX,
)
from hoarder_sync.core.url_utils import normalize_url

if TYPE_CHECKING:
    from hoarder_sync.adapters.hoarder.models import HoarderBookmark
    from hoarder_sync.adapters.hoarder.sync.protocols import KeyValueCache

logger = logging.getLogger(__name__)

DedupMatch = Literal["id", "url"]


def bookmark_key(bookmark_id: str) -> str:
    return f"{BOOKMARK_KEY_PREFIX}{bookmark_id}"


def url_key(url: str) -> str:
    """Key of the URL marker; *url* is normalized first."""
    return f"{URL_KEY_PREFIX}{normalize_url(url)}"


class BookmarkDeduplicator:
    """Decides whether a bookmark was synced before, by id or by normalized URL.

    The id marker catches re-fetches of the same bookmark; the URL marker
    catches distinct bookmarks that point at the same page. Bookmarks without
    a URL (notes, assets) only get an id marker.
    """

    def __init__(self, cache: KeyValueCache) -> None:
        self._cache = cache

    async def match(self, bookmark: HoarderBookmark) -> DedupMatch | None:
        """Return which marker matched, or ``None`` when the bookmark is new."""
        if await self._cache.has(bookmark_key(bookmark.id)):
            logger.info(
                "bookmark_already_synced",
                extra={
                    "bookmark_id": bookmark.id,
                    "title": bookmark.display_title,
                    "matched_by": "id",
                },
            )
            return "id"

        url = bookmark.url
        if not url:
            return None

        normalized = normalize_url(url)
        if await self._cache.has(f"{URL_KEY_PREFIX}{normalized}"):
            logger.info(
                "bookmark_already_synced",
                extra={
                    "bookmark_id": bookmark.id,
                    "title": bookmark.display_title,
                    "matched_by": "url",
                    "original_url": url,
                    "normalized_url": normalized,
                },
            )
            return "url"
        return None

    async def is_synced(self, bookmark: HoarderBookmark) -> bool:
        return await self.match(bookmark) is not None

    async def mark_synced(self, bookmark: HoarderBookmark) -> None:
        """Record both markers for a bookmark that was written to Tana."""
        writes = [self._cache.set(bookmark_key(bookmark.id), SYNCED_MARKER)]
        if bookmark.url:
            writes.append(self._cache.set(url_key(bookmark.url), SYNCED_MARKER))
        await asyncio.gather(*writes)
        logger.debug(
            "bookmark_marked_synced",
            extra={"bookmark_id": bookmark.id, "url": bookmark.url},
        )
