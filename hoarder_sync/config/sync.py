from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class SyncConfig(BaseModel):
    """Bookmark sync loop, snapshot and shutdown settings."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    batch_size: int = Field(default=50, validation_alias="SYNC_BATCH_SIZE")
    test_limit: int = Field(default=5, validation_alias="SYNC_TEST_LIMIT")
    backup_dir: str = Field(default="backup", validation_alias="SYNC_BACKUP_DIR")
    backup_interval_sec: float = Field(
        default=300.0,
        validation_alias="SYNC_BACKUP_INTERVAL_SEC",
        description="Interval between periodic cache snapshots (default: 5 minutes)",
    )
    interval_sec: float = Field(
        default=300.0,
        validation_alias="SYNC_INTERVAL_SEC",
        description="Interval between incremental syncs in daemon mode (default: 5 minutes)",
    )
    shutdown_timeout_sec: float = Field(
        default=10.0, validation_alias="SYNC_SHUTDOWN_TIMEOUT_SEC"
    )

    @field_validator("batch_size", "test_limit", mode="before")
    @classmethod
    def _validate_page_size(cls, value: Any, info: ValidationInfo) -> int:
        default = cls.model_fields[info.field_name].default
        try:
            parsed = int(str(value if value not in (None, "") else default))
        except ValueError as exc:
            msg = f"{info.field_name.replace('_', ' ')} must be a valid integer"
            raise ValueError(msg) from exc
        if parsed < 1 or parsed > 100:
            msg = f"{info.field_name.replace('_', ' ').capitalize()} must be between 1 and 100"
            raise ValueError(msg)
        return parsed

    @field_validator("backup_dir", mode="before")
    @classmethod
    def _validate_backup_dir(cls, value: Any) -> str:
        trimmed = str(value or "").strip()
        if not trimmed:
            return "backup"
        if "\x00" in trimmed:
            msg = "Backup directory contains invalid characters"
            raise ValueError(msg)
        return trimmed

    @field_validator("backup_interval_sec", "interval_sec", "shutdown_timeout_sec", mode="before")
    @classmethod
    def _validate_seconds(cls, value: Any, info: ValidationInfo) -> float:
        default = cls.model_fields[info.field_name].default
        try:
            parsed = float(str(value if value not in (None, "") else default))
        except ValueError as exc:
            msg = f"{info.field_name.replace('_', ' ')} must be a valid number"
            raise ValueError(msg) from exc

        # Field-specific bounds: (min_seconds, max_seconds)
        limits: dict[str, tuple[float, float]] = {
            "backup_interval_sec": (1.0, 86_400.0),  # 1 sec to 1 day
            "interval_sec": (10.0, 86_400.0),  # 10 sec to 1 day
            "shutdown_timeout_sec": (1.0, 300.0),  # 1 sec to 5 min
        }
        min_val, max_val = limits[info.field_name]
        if parsed < min_val or parsed > max_val:
            msg = (
                f"{info.field_name.replace('_', ' ').capitalize()} must be between "
                f"{min_val:g} and {max_val:g} seconds"
            )
            raise ValueError(msg)
        return parsed
