"""Persistent user settings (``settings.json``)."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Protocol

from .base import JSONFileStore, get_config_dir

SETTINGS_FILE = "settings.json"


class SettingsStore(JSONFileStore):
    """Key/value settings shared by the whole process."""

    _instance: SettingsStore | None = None
    _instance_lock = threading.Lock()

    def __init__(self, file_path: Path | None = None) -> None:
        super().__init__(file_path or get_config_dir() / SETTINGS_FILE)

    @classmethod
    def get_instance(cls) -> SettingsStore:
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        with cls._instance_lock:
            cls._instance = None

    def load_all(self) -> dict[str, Any]:
        data = self._read_json()
        return data if isinstance(data, dict) else {}

    def save_all(self, settings: dict[str, Any]) -> None:
        self._write_json(settings)

    def get(self, key: str, default: Any = None) -> Any:
        return self.load_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        settings = self.load_all()
        settings[key] = value
        self.save_all(settings)


class SettingsStoreProtocol(Protocol):
    """What consumers of settings rely on."""

    def load_all(self) -> dict[str, Any]: ...

    def save_all(self, settings: dict[str, Any]) -> None: ...

    def get(self, key: str, default: Any = None) -> Any: ...
