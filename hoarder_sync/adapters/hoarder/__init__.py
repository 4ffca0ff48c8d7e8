"""Hoarder integration adapter for bookmark synchronization to Tana."""

from hoarder_sync.adapters.hoarder.client import HoarderClient
from hoarder_sync.adapters.hoarder.sync.service import BookmarkSyncService

__all__ = ["BookmarkSyncService", "HoarderClient"]
