"""Protocol definitions (ports) for the bookmark sync.

The orchestrator only depends on these shapes, so tests and alternative
stores can stand in for the concrete HTTP clients and Redis cache.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from hoarder_sync.adapters.hoarder.models import HoarderBookmarkPage
    from hoarder_sync.adapters.tana.models import PlainNode


class BookmarkSource(Protocol):
    async def get_bookmarks(
        self, cursor: str | None = None, limit: int = ...
    ) -> HoarderBookmarkPage: ...

    def archive_url_for(self, asset_id: str) -> str: ...


class NodeTarget(Protocol):
    async def create_node(self, node: PlainNode) -> Any: ...


class KeyValueCache(Protocol):
    @property
    def connected(self) -> bool: ...

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def get(self, key: str, default: Any = None) -> Any: ...

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None: ...

    async def has(self, key: str) -> bool: ...

    async def delete(self, key: str) -> None: ...

    async def list_keys(self) -> set[str]: ...


class CacheSnapshots(Protocol):
    async def backup(self) -> bool: ...

    async def restore(self) -> int: ...

    async def start_interval(self) -> None: ...

    async def stop_interval(self) -> None: ...
