"""File snapshots of the dedup cache.

The live Redis cache is the source of truth during a run; the snapshot file is
the source of truth across runs. Snapshot and restore failures are logged and
absorbed so they never fail a sync call: losing a snapshot only degrades to
re-checking bookmarks as if the cache were fresh.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hoarder_sync.infrastructure.cache.redis_cache import RedisCache

logger = logging.getLogger(__name__)

SNAPSHOT_FILENAME = "cache-backup.json"


def _write_snapshot(path: Path, snapshot: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f"{path.name}.tmp")
    with tmp_path.open("w", encoding="utf-8") as fh:
        json.dump(snapshot, fh, ensure_ascii=False, indent=2)
        fh.flush()
        os.fsync(fh.fileno())
    tmp_path.replace(path)


def _read_snapshot(path: Path) -> Any:
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


class CacheBackupService:
    """Snapshots every cache entry to a JSON file and reloads it at startup."""

    def __init__(
        self,
        cache: RedisCache,
        backup_dir: str | Path,
        *,
        interval_sec: float | None = None,
    ) -> None:
        self._cache = cache
        self.backup_path = Path(backup_dir) / SNAPSHOT_FILENAME
        self.interval_sec = interval_sec
        self._lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None

    @property
    def interval_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def backup(self) -> bool:
        """Write all cache entries to the snapshot file.

        Returns:
            True if the snapshot was written, False if it failed (already logged).
        """
        async with self._lock:
            try:
                keys = await self._cache.list_keys()
                snapshot: dict[str, Any] = {}
                for key in sorted(keys):
                    snapshot[key] = await self._cache.get(key)
                await asyncio.to_thread(_write_snapshot, self.backup_path, snapshot)
            except Exception:
                logger.exception("cache_backup_failed", extra={"path": str(self.backup_path)})
                return False

        logger.debug(
            "cache_backup_written",
            extra={"path": str(self.backup_path), "entries": len(snapshot)},
        )
        return True

    async def restore(self) -> int:
        """Load the snapshot file into the cache.

        A missing snapshot is not an error.

        Returns:
            Number of entries restored.
        """
        if not self.backup_path.exists():
            logger.info("cache_restore_skipped_no_snapshot", extra={"path": str(self.backup_path)})
            return 0

        restored = 0
        try:
            snapshot = await asyncio.to_thread(_read_snapshot, self.backup_path)
            if not isinstance(snapshot, dict):
                logger.error(
                    "cache_restore_invalid_snapshot",
                    extra={"path": str(self.backup_path), "type": type(snapshot).__name__},
                )
                return 0
            for key, value in snapshot.items():
                await self._cache.set(key, value)
                restored += 1
        except Exception:
            logger.exception(
                "cache_restore_failed",
                extra={"path": str(self.backup_path), "restored": restored},
            )
            return restored

        logger.info(
            "cache_restored_from_snapshot",
            extra={"path": str(self.backup_path), "entries": restored},
        )
        return restored

    async def start_interval(self) -> None:
        """Start periodic snapshots in a background task. No-op without an interval."""
        if not self.interval_sec or self.interval_running:
            return
        self._task = asyncio.create_task(self._run_interval(), name="cache-backup-interval")
        logger.info("cache_backup_interval_started", extra={"interval_sec": self.interval_sec})

    async def stop_interval(self) -> None:
        """Cancel the periodic snapshot task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("cache_backup_interval_stopped")

    async def _run_interval(self) -> None:
        assert self.interval_sec is not None
        while True:
            await asyncio.sleep(self.interval_sec)
            await self.backup()
