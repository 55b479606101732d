"""On-disk stores for lazylode configuration."""

from .base import CONFIG_DIR, CONFIG_DIR_ENV_VAR, get_config_dir
from .settings import SettingsStore, SettingsStoreProtocol

__all__ = [
    "CONFIG_DIR",
    "CONFIG_DIR_ENV_VAR",
    "SettingsStore",
    "SettingsStoreProtocol",
    "get_config_dir",
]
