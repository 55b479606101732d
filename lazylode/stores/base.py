"""Base helpers for JSON file stores."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

CONFIG_DIR_ENV_VAR = "LAZYLODE_CONFIG_DIR"


def get_config_dir() -> Path:
    """Config directory, honouring ``$LAZYLODE_CONFIG_DIR``."""
    override = os.environ.get(CONFIG_DIR_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "lazylode"


CONFIG_DIR = get_config_dir()


class JSONFileStore:
    """Reads and writes one JSON document on disk."""

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    @property
    def file_path(self) -> Path:
        return self._file_path

    def exists(self) -> bool:
        return self._file_path.exists()

    def _read_json(self) -> Any:
        """Read the file, returning None when it is missing or unreadable."""
        if not self._file_path.exists():
            return None
        try:
            with open(self._file_path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError):
            return None

    def _write_json(self, data: Any) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
        os.replace(tmp_path, self._file_path)
