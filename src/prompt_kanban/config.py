"""Configuration constants for prompt-kanban."""

import os
from pathlib import Path

# Version markers are third-level headings: "### V1.2", "### Version 3", "### 版本 2.0".
MARKER_HEADING: str = "###"
VERSION_LABELS: tuple[str, ...] = ("Version", "Ver", "V", "版本")

# Card summary caps: per-version preview vs whole-document fallback.
SHORT_SUMMARY_CAP: int = 25
LONG_SUMMARY_CAP: int = 150
ELLIPSIS: str = "…"

NOT_AVAILABLE: str = "N/A"

# Only these documents show up as cards.
DOCUMENT_EXTENSION: str = "md"

NEW_DOCUMENT_PREFIX: str = "Prompt"
NEW_DOCUMENT_TEMPLATE: str = "### V 1.0\n\n```\n\nPrompt here...\n\n```"

# Bursts of store events inside this window collapse into one refresh.
DEBOUNCE_SECONDS: float = 0.3

# How often the local store rescans the tree for external edits.
POLL_INTERVAL_SECONDS: float = 1.0

VIEW_TYPE_PREFIX: str = "kanban-view"

# Settings file location. First existing file is used; otherwise the first entry is created.
SETTINGS_FILES: list[Path] = [
    Path("~/.config/prompt-kanban/settings.json").expanduser(),
    Path("~/.prompt-kanban.json").expanduser(),
]

SETTINGS_ENV_VAR: str = "PROMPT_KANBAN_SETTINGS"


def resolve_settings_path() -> Path:
    """Return the settings file to use.

    $PROMPT_KANBAN_SETTINGS wins, then the first existing entry of SETTINGS_FILES,
    then the first entry (which may not exist yet).
    """
    override = os.environ.get(SETTINGS_ENV_VAR)
    if override:
        return Path(override).expanduser()
    for candidate in SETTINGS_FILES:
        if candidate.is_file():
            return candidate
    return SETTINGS_FILES[0]
