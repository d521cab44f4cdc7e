"""Compute the next version block of a prompt document."""

from prompt_kanban.config import MARKER_HEADING
from prompt_kanban.core.versions.parser import find_last_marker, section_content
from prompt_kanban.models.card import VersionBump

# A document without any marker is treated as V0.9, so its first bump is V0.10.
DEFAULT_MAJOR = 0
DEFAULT_MINOR = 9


def format_label(major: int, minor: int) -> str:
    return f"V{major}.{minor}"


def render_block(text: str, label: str, content: str) -> str:
    """Text to append to `text` so it ends with a new version section.

    The marker is always preceded by a blank line and followed by one.
    """
    separator = "\n" if not text or text.endswith("\n") else "\n\n"
    block = f"{separator}{MARKER_HEADING} {label}\n\n"
    if content:
        block += f"{content}\n"
    return block


def next_version(text: str) -> VersionBump:
    """Return the label and block of the version following the last marker.

    The content of the last version is carried forward. Without any marker the
    whole document is carried forward; a marker with an empty body carries nothing.
    Only the last marker by position is considered, never the highest number.
    """
    lines = text.split("\n")
    found = find_last_marker(lines)

    if found is None:
        major, minor = DEFAULT_MAJOR, DEFAULT_MINOR
        content = text.strip()
    else:
        index, match = found
        major = int(match.group(1))
        minor = int(match.group(2)) if match.group(2) is not None else 0
        content = section_content(lines, index)

    minor += 1
    label = format_label(major, minor)
    return VersionBump(
        label=label,
        block=render_block(text, label, content),
        major=major,
        minor=minor,
    )
