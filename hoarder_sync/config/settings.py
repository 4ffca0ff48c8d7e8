from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .integrations import HoarderConfig, TanaConfig
from .redis import RedisConfig
from .runtime import RuntimeConfig
from .sync import SyncConfig


@dataclass(frozen=True)
class AppConfig:
    hoarder: HoarderConfig
    tana: TanaConfig
    redis: RedisConfig
    sync: SyncConfig
    runtime: RuntimeConfig

    def missing_credentials(self) -> list[str]:
        """Names of the environment variables a sync run needs but are unset."""
        missing: list[str] = []
        if not self.hoarder.base_url:
            missing.append("HOARDER_BASE_URL")
        if not self.hoarder.api_key:
            missing.append("HOARDER_API_KEY")
        if not self.tana.api_token:
            missing.append("TANA_API_TOKEN")
        return missing


class Settings(BaseSettings):
    """Application settings loaded automatically from environment variables.

    Nested models are populated by matching validation_alias on each field.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        populate_by_name=True,
        case_sensitive=True,
    )

    hoarder: HoarderConfig = Field(default_factory=HoarderConfig)
    tana: TanaConfig = Field(default_factory=TanaConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)

    @model_validator(mode="before")
    @classmethod
    def _build_nested_from_env(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Build nested config objects from flat environment variables.

        Constructor arguments take precedence over the environment.
        """
        if not isinstance(data, dict):
            return data

        result = dict(data)
        merged_source = {**dict(os.environ), **data}

        for field_name, field_info in cls.model_fields.items():
            annotation = field_info.annotation
            if not isinstance(annotation, type) or not issubclass(annotation, BaseModel):
                continue
            if field_name in result and not isinstance(result[field_name], dict):
                continue

            nested_data: dict[str, Any] = {}
            for nested_field_name, nested_field in annotation.model_fields.items():
                env_value = cls._resolve_env_value(merged_source, nested_field)
                if env_value is not None:
                    nested_data[nested_field_name] = env_value

            if nested_data:
                if field_name in result:
                    result[field_name] = {**nested_data, **result[field_name]}
                else:
                    result[field_name] = nested_data

        return result

    @staticmethod
    def _resolve_env_value(data: dict[str, Any], field: Any) -> Any | None:
        """Resolve environment variable value for a field using its aliases."""
        aliases: list[str] = []
        alias = field.validation_alias
        if isinstance(alias, AliasChoices):
            aliases.extend(choice for choice in alias.choices if isinstance(choice, str))
        elif isinstance(alias, str):
            aliases.append(alias)
        if field.alias:
            aliases.append(field.alias)

        for name in aliases:
            if name in data:
                return data[name]
        return None

    def as_app_config(self) -> AppConfig:
        return AppConfig(
            hoarder=self.hoarder,
            tana=self.tana,
            redis=self.redis,
            sync=self.sync,
            runtime=self.runtime,
        )


def load_config(**overrides: Any) -> AppConfig:
    """Load application configuration from environment variables.

    Args:
        overrides: Section overrides by field name, e.g. ``sync={"batch_size": 10}``.

    Returns:
        Immutable AppConfig instance with all configuration sections.

    Raises:
        RuntimeError: If configuration validation fails.
    """
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        msg = f"Configuration validation failed: {exc}"
        raise RuntimeError(msg) from exc

    return settings.as_app_config()
