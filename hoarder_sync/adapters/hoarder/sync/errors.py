"""Sync errors and error collection helpers for sync results."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hoarder_sync.adapters.hoarder.models import SyncResult


class BookmarkSyncError(Exception):
    """A single bookmark could not be synced to Tana."""

    def __init__(self, bookmark_id: str, message: str) -> None:
        super().__init__(f"Bookmark {bookmark_id}: {message}")
        self.bookmark_id = bookmark_id


def record_error(result: SyncResult, message: str) -> None:
    if message not in result.errors:
        result.errors.append(message)
