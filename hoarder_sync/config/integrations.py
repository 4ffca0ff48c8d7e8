from __future__ import annotations

import re
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

TANA_INPUT_API_URL = "https://europe-west1-tagr-prod.cloudfunctions.net/addToNodeV2"

_TANA_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{7,16}$")


def _validate_token(value: Any, label: str) -> str:
    if value in (None, ""):
        return ""
    token = str(value).strip()
    if len(token) > 1000:
        msg = f"{label} appears to be too long"
        raise ValueError(msg)
    return token


class HoarderConfig(BaseModel):
    """Hoarder (source bookmarking service) connection settings."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    base_url: str = Field(default="", validation_alias="HOARDER_BASE_URL")
    api_key: str = Field(
        default="", validation_alias=AliasChoices("HOARDER_API_KEY", "HOARDER_TOKEN")
    )
    timeout_sec: float = Field(default=30.0, validation_alias="HOARDER_TIMEOUT_SEC")
    max_retries: int = Field(default=3, validation_alias="HOARDER_MAX_RETRIES")

    @field_validator("base_url", mode="before")
    @classmethod
    def _validate_base_url(cls, value: Any) -> str:
        url = str(value or "").strip()
        if url and not url.startswith(("http://", "https://")):
            msg = "Hoarder base URL must start with http:// or https://"
            raise ValueError(msg)
        return url.rstrip("/")

    @field_validator("api_key", mode="before")
    @classmethod
    def _validate_api_key(cls, value: Any) -> str:
        return _validate_token(value, "Hoarder API key")

    @field_validator("timeout_sec", mode="before")
    @classmethod
    def _validate_timeout(cls, value: Any) -> float:
        try:
            parsed = float(str(value if value not in (None, "") else 30.0))
        except ValueError as exc:
            msg = "Hoarder timeout must be a valid number"
            raise ValueError(msg) from exc
        if parsed <= 0 or parsed > 600:
            msg = "Hoarder timeout must be between 0 and 600 seconds"
            raise ValueError(msg)
        return parsed

    @field_validator("max_retries", mode="before")
    @classmethod
    def _validate_max_retries(cls, value: Any) -> int:
        try:
            parsed = int(str(value if value not in (None, "") else 3))
        except ValueError as exc:
            msg = "Hoarder max retries must be a valid integer"
            raise ValueError(msg) from exc
        if parsed < 0 or parsed > 10:
            msg = "Hoarder max retries must be between 0 and 10"
            raise ValueError(msg)
        return parsed


class TanaConfig(BaseModel):
    """Tana Input API settings and the Article schema the bookmarks map onto."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_url: str = Field(default=TANA_INPUT_API_URL, validation_alias="TANA_API_URL")
    api_token: str = Field(
        default="", validation_alias=AliasChoices("TANA_API_TOKEN", "TANA_TOKEN")
    )
    target_node_id: str | None = Field(default=None, validation_alias="TANA_TARGET_NODE_ID")
    supertag_id: str = Field(default="Jv6WSsH6CO7u", validation_alias="TANA_SUPERTAG_ID")
    timeout_sec: float = Field(default=30.0, validation_alias="TANA_TIMEOUT_SEC")
    min_request_interval_sec: float = Field(
        default=1.0,
        validation_alias="TANA_MIN_REQUEST_INTERVAL_SEC",
        description="The Input API accepts one call per second per token",
    )

    @field_validator("api_url", mode="before")
    @classmethod
    def _validate_api_url(cls, value: Any) -> str:
        url = str(value or TANA_INPUT_API_URL).strip()
        if not url.startswith(("http://", "https://")):
            msg = "Tana API URL must start with http:// or https://"
            raise ValueError(msg)
        return url

    @field_validator("api_token", mode="before")
    @classmethod
    def _validate_api_token(cls, value: Any) -> str:
        return _validate_token(value, "Tana API token")

    @field_validator("target_node_id", "supertag_id", mode="before")
    @classmethod
    def _validate_node_id(cls, value: Any, info: ValidationInfo) -> str | None:
        if value in (None, ""):
            if info.field_name == "target_node_id":
                return None
            return cls.model_fields[info.field_name].default
        node_id = str(value).strip()
        if not _TANA_ID_PATTERN.match(node_id):
            msg = f"{info.field_name.replace('_', ' ').capitalize()} is not a valid Tana node id"
            raise ValueError(msg)
        return node_id

    @field_validator("timeout_sec", "min_request_interval_sec", mode="before")
    @classmethod
    def _validate_seconds(cls, value: Any, info: ValidationInfo) -> float:
        default = cls.model_fields[info.field_name].default
        try:
            parsed = float(str(value if value not in (None, "") else default))
        except ValueError as exc:
            msg = f"{info.field_name.replace('_', ' ')} must be a valid number"
            raise ValueError(msg) from exc
        if parsed < 0 or parsed > 600:
            msg = f"{info.field_name.replace('_', ' ').capitalize()} must be between 0 and 600"
            raise ValueError(msg)
        if info.field_name == "timeout_sec" and parsed == 0:
            msg = "Tana timeout must be positive"
            raise ValueError(msg)
        return parsed
