from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RedisConfig(BaseModel):
    """Connection settings for the Redis store that holds dedup state."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")
    prefix: str = Field(default="hoarder_sync", validation_alias="REDIS_PREFIX")
    socket_timeout: float = Field(default=5.0, validation_alias="REDIS_SOCKET_TIMEOUT")

    @field_validator("url", mode="before")
    @classmethod
    def _validate_url(cls, value: Any) -> str:
        cleaned = str(value or "").strip()
        if not cleaned:
            return "redis://localhost:6379/0"
        if len(cleaned) > 200:
            msg = "Redis URL appears too long"
            raise ValueError(msg)
        if not cleaned.startswith(("redis://", "rediss://", "unix://")):
            msg = "Redis URL must start with redis://, rediss:// or unix://"
            raise ValueError(msg)
        return cleaned

    @field_validator("socket_timeout", mode="before")
    @classmethod
    def _validate_timeout(cls, value: Any) -> float:
        default = cls.model_fields["socket_timeout"].default
        try:
            parsed = float(str(value if value not in (None, "") else default))
        except ValueError as exc:  # pragma: no cover - defensive
            msg = "Redis socket timeout must be a valid number"
            raise ValueError(msg) from exc
        if parsed <= 0 or parsed > 60:
            msg = "Redis socket timeout must be between 0 and 60 seconds"
            raise ValueError(msg)
        return parsed

    @field_validator("prefix", mode="before")
    @classmethod
    def _validate_prefix(cls, value: Any) -> str:
        prefix = str(value or "hoarder_sync").strip()
        if not prefix:
            msg = "Redis prefix cannot be empty"
            raise ValueError(msg)
        if len(prefix) > 50:
            msg = "Redis prefix appears too long"
            raise ValueError(msg)
        if any(ch in prefix for ch in (" ", "\t", "\n", "\r", "*", "?", "[", "]")):
            msg = "Redis prefix cannot contain whitespace or glob characters"
            raise ValueError(msg)
        return prefix
