"""Persisted organizer settings: folders with active views and the quick-access toggle."""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger


@dataclass
class Settings:
    """Organizer settings. Only additive fields are ever introduced."""

    active_folders: list[str] = field(default_factory=list)
    show_quick_access: bool = True

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> "Settings":
        """Build settings from decoded JSON, ignoring unknown keys and defaulting missing ones."""
        settings = cls()
        folders = data.get("active_folders")
        if isinstance(folders, list):
            settings.active_folders = [str(f) for f in folders]
        toggle = data.get("show_quick_access")
        if isinstance(toggle, bool):
            settings.show_quick_access = toggle
        return settings


class SettingsStore:
    """Read and write Settings as a JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> Settings:
        """Return stored settings, defaults if the file does not exist.

        Raises ValueError when the file exists but is not a JSON object.
        """
        try:
            contents = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No settings at {}, using defaults", self.path)
            return Settings()
        try:
            data = json.loads(contents)
        except json.JSONDecodeError as e:
            msg = f"Invalid settings file {str(self.path)!r}: {e}"
            raise ValueError(msg) from e
        if not isinstance(data, dict):
            msg = f"Invalid settings file {str(self.path)!r}: expected an object"
            raise ValueError(msg)
        return Settings.from_data(data)

    def save(self, settings: Settings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        contents = json.dumps(asdict(settings), sort_keys=True, indent=4) + "\n"
        self.path.write_text(contents, encoding="utf-8")
        logger.debug("Saved settings to {}", self.path)
