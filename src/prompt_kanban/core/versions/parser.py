"""Locate the latest version marker of a prompt document and extract its content.

A marker is a third-level heading carrying a version number, optionally
prefixed with one of the version labels:

    ### V1.2
    ### Version 3
    ### ver 2.0 - shorter intro
    ### 版本 4.1

Documents are user-edited, so nothing here raises: a document without a
marker is treated as a single implicit version spanning the whole text.
"""

import re

from prompt_kanban.config import (
    LONG_SUMMARY_CAP,
    MARKER_HEADING,
    NOT_AVAILABLE,
    SHORT_SUMMARY_CAP,
    VERSION_LABELS,
)
from prompt_kanban.core.summary import summarize
from prompt_kanban.models.card import VersionInfo

_LABEL_ALTERNATION = "|".join(re.escape(label) for label in VERSION_LABELS)

MARKER_RE = re.compile(
    rf"^{re.escape(MARKER_HEADING)}\s*(?:{_LABEL_ALTERNATION})?\s*([0-9]+)(?:\.([0-9]+))?",
    re.IGNORECASE,
)


def match_marker(line: str) -> re.Match[str] | None:
    return MARKER_RE.match(line)


def find_last_marker(lines: list[str]) -> tuple[int, re.Match[str]] | None:
    """Return (line index, match) of the last marker by position, None if there is none."""
    for index in range(len(lines) - 1, -1, -1):
        match = match_marker(lines[index])
        if match:
            return index, match
    return None


def section_content(lines: list[str], marker_index: int) -> str:
    """Trimmed text between the marker at marker_index and the next marker (or the end)."""
    collected: list[str] = []
    for line in lines[marker_index + 1 :]:
        if match_marker(line):
            break
        collected.append(line)
    return "\n".join(collected).strip()


def marker_label(line: str) -> str:
    """Human-readable version text of a marker line: everything after the heading token."""
    return line[len(MARKER_HEADING) :].strip()


def parse(text: str) -> VersionInfo:
    """Parse a document into the info its card shows."""
    lines = text.split("\n")
    found = find_last_marker(lines)

    if found is None:
        return VersionInfo(
            label=NOT_AVAILABLE,
            content=text.strip(),
            summary=summarize(text, LONG_SUMMARY_CAP),
            marker_line=None,
        )

    index, _ = found
    content = section_content(lines, index)
    # An empty version is a valid state; it does not fall back to the whole document.
    summary = summarize(content, SHORT_SUMMARY_CAP) if content else ""
    return VersionInfo(
        label=marker_label(lines[index]),
        content=content,
        summary=summary,
        marker_line=index,
    )
