"""Dedup state storage: the Redis-backed cache and its file snapshots."""

from hoarder_sync.infrastructure.cache.backup import SNAPSHOT_FILENAME, CacheBackupService
from hoarder_sync.infrastructure.cache.redis_cache import CacheError, RedisCache

__all__ = [
    "SNAPSHOT_FILENAME",
    "CacheBackupService",
    "CacheError",
    "RedisCache",
]
