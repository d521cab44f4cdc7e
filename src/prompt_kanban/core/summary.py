"""Card previews: fence stripping and truncation."""

import re

from prompt_kanban.config import ELLIPSIS

FENCE_LINE_RE = re.compile(r"^\s*`{3,}.*$")


def strip_fences(text: str) -> str:
    """Drop code fence delimiter lines, keeping the code between them."""
    return "\n".join(line for line in text.split("\n") if not FENCE_LINE_RE.match(line))


def summarize(text: str, cap: int) -> str:
    """Fence-stripped, trimmed text cut to cap characters plus an ellipsis when cut."""
    cleaned = strip_fences(text).strip()
    if len(cleaned) <= cap:
        return cleaned
    return cleaned[:cap] + ELLIPSIS
