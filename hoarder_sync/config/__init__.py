from __future__ import annotations

from .integrations import TANA_INPUT_API_URL, HoarderConfig, TanaConfig
from .redis import RedisConfig
from .runtime import RuntimeConfig
from .settings import AppConfig, Settings, load_config
from .sync import SyncConfig

__all__ = [
    "TANA_INPUT_API_URL",
    "AppConfig",
    "HoarderConfig",
    "RedisConfig",
    "RuntimeConfig",
    "Settings",
    "SyncConfig",
    "TanaConfig",
    "load_config",
]
