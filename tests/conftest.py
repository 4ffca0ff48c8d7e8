"""Pytest configuration and shared fixtures.

The Redis store is replaced with fakeredis; each ``FakeServer`` stands for one
Redis instance, so a fresh server simulates a new process with an empty cache.
"""

from __future__ import annotations

from typing import Any

import fakeredis
import fakeredis.aioredis
import pytest
import pytest_asyncio

from hoarder_sync.adapters.hoarder.models import HoarderBookmark, HoarderBookmarkPage
from hoarder_sync.config import RedisConfig
from hoarder_sync.infrastructure.cache.backup import CacheBackupService
from hoarder_sync.infrastructure.cache.redis_cache import RedisCache


def fake_redis_factory(server: fakeredis.FakeServer | None = None):
    server = server or fakeredis.FakeServer()

    def factory(cfg: RedisConfig) -> fakeredis.aioredis.FakeRedis:
        return fakeredis.aioredis.FakeRedis(server=server, decode_responses=True)

    return factory


def make_bookmark(bookmark_id: str, url: str | None = None, **overrides: Any) -> HoarderBookmark:
    """Build a link bookmark the way the Hoarder API returns it."""
    data: dict[str, Any] = {
        "id": bookmark_id,
        "createdAt": "2024-05-01T10:00:00.000Z",
        "title": None,
        "tags": [],
        "content": {
            "type": "link",
            "url": url if url is not None else f"https://example.com/{bookmark_id}",
            "title": f"Title {bookmark_id}",
            "description": f"Description of {bookmark_id}",
        },
    }
    content = overrides.pop("content", None)
    if content is not None:
        data["content"] = {**data["content"], **content}
    data.update(overrides)
    return HoarderBookmark.model_validate(data)


class FakeSource:
    """In-memory bookmark source serving pre-built pages keyed by cursor."""

    def __init__(self, pages: dict[str | None, HoarderBookmarkPage] | None = None) -> None:
        self.pages = pages or {}
        self.calls: list[tuple[str | None, int]] = []
        self.fail_on: set[str | None] = set()

    @classmethod
    def paged(cls, bookmarks: list[HoarderBookmark], page_size: int) -> FakeSource:
        """Split *bookmarks* into pages chained by cursors ``c1``, ``c2``..."""
        pages: dict[str | None, HoarderBookmarkPage] = {}
        cursor: str | None = None
        chunks = [bookmarks[i : i + page_size] for i in range(0, len(bookmarks), page_size)]
        for index, chunk in enumerate(chunks or [[]]):
            next_cursor = f"c{index + 1}" if index + 1 < len(chunks) else None
            pages[cursor] = HoarderBookmarkPage(bookmarks=chunk, next_cursor=next_cursor)
            cursor = next_cursor
        return cls(pages)

    async def get_bookmarks(self, cursor: str | None = None, limit: int = 100) -> HoarderBookmarkPage:
        self.calls.append((cursor, limit))
        if cursor in self.fail_on:
            raise RuntimeError(f"source unavailable at cursor {cursor}")
        page = self.pages.get(cursor, HoarderBookmarkPage())
        return HoarderBookmarkPage(bookmarks=page.bookmarks[:limit], next_cursor=page.next_cursor)

    def archive_url_for(self, asset_id: str) -> str:
        return f"https://hoarder.test/archive/{asset_id}"


class FakeTarget:
    """Records created nodes; raises for node names listed in ``fail_names``."""

    def __init__(self) -> None:
        self.nodes: list[Any] = []
        self.fail_names: set[str] = set()

    async def create_node(self, node: Any) -> dict[str, Any]:
        if node.name in self.fail_names:
            raise RuntimeError(f"target rejected {node.name}")
        self.nodes.append(node)
        return {}

    @property
    def names(self) -> list[str]:
        return [node.name for node in self.nodes]


@pytest.fixture
def redis_server() -> fakeredis.FakeServer:
    return fakeredis.FakeServer()


@pytest.fixture
def redis_cfg() -> RedisConfig:
    return RedisConfig(prefix="test")


@pytest_asyncio.fixture
async def cache(redis_cfg: RedisConfig, redis_server: fakeredis.FakeServer):
    store = RedisCache(redis_cfg, client_factory=fake_redis_factory(redis_server))
    await store.connect()
    yield store
    await store.disconnect()


@pytest.fixture
def backup(cache: RedisCache, tmp_path) -> CacheBackupService:
    return CacheBackupService(cache, tmp_path / "backup")
