"""Settings — load xlcell.yaml configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from xlcell.io.fileops import read_text_safe

CONFIG_FILENAME = "xlcell.yaml"
STRING_STORAGE_MODES = ("shared", "inline")


class Settings:
    """Represents a loaded configuration.

    Keys: ``string_storage`` (shared | inline), ``default_sheet``,
    ``lock_timeout`` (seconds), ``backup``, ``events``.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        data = data or {}
        self.string_storage: str = str(data.get("string_storage", "shared")).lower()
        if self.string_storage not in STRING_STORAGE_MODES:
            raise ValueError(
                f"Unknown string_storage '{self.string_storage}'. "
                f"Valid: {', '.join(STRING_STORAGE_MODES)}"
            )
        self.default_sheet: str = str(data.get("default_sheet", "Sheet1"))
        self.lock_timeout: float = float(data.get("lock_timeout", 0))
        self.backup: bool = bool(data.get("backup", False))
        self.events: bool = bool(data.get("events", False))

    @classmethod
    def load(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        data = yaml.safe_load(read_text_safe(path)) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")
        return cls(data)

    @classmethod
    def load_from_dir(cls, directory: str | Path) -> "Settings":
        """Load xlcell.yaml from a directory, or defaults if there is none."""
        path = Path(directory) / CONFIG_FILENAME
        if path.exists():
            return cls.load(path)
        return cls()
