from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import redis.asyncio as aioredis

if TYPE_CHECKING:
    from hoarder_sync.config import RedisConfig

logger = logging.getLogger(__name__)


def redis_key(prefix: str, *parts: str) -> str:
    """Compose a namespaced Redis key."""
    safe_parts = [part for part in parts if part]
    return ":".join([prefix, *safe_parts])


def create_redis(cfg: RedisConfig) -> aioredis.Redis:
    """Build a Redis client for *cfg*; the connection is opened lazily on first command."""
    logger.debug("redis_client_created", extra={"prefix": cfg.prefix})
    return aioredis.from_url(
        cfg.url,
        socket_timeout=cfg.socket_timeout,
        decode_responses=True,
    )
