"""File-backed kanban of versioned prompt notes."""

from prompt_kanban.core.registry import Organizer
from prompt_kanban.core.summary import summarize
from prompt_kanban.core.versions.parser import parse
from prompt_kanban.core.versions.synthesizer import next_version
from prompt_kanban.protocols import FileStoreError, FileStoreProtocol, HostProtocol
from prompt_kanban.store.local import LocalFileStore

__all__ = [
    "FileStoreError",
    "FileStoreProtocol",
    "HostProtocol",
    "LocalFileStore",
    "Organizer",
    "next_version",
    "parse",
    "summarize",
]
