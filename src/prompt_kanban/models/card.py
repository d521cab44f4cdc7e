"""Domain models for the prompt kanban."""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import PurePosixPath

from prompt_kanban.config import NOT_AVAILABLE


@dataclass(frozen=True)
class Document:
    """A text document in the store, addressed by its vault-relative path."""

    path: str
    mtime: float = 0.0

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def basename(self) -> str:
        return PurePosixPath(self.path).stem

    @property
    def extension(self) -> str:
        return PurePosixPath(self.path).suffix.lstrip(".")

    @property
    def parent(self) -> str:
        """Folder path; "" is the store root."""
        parent = str(PurePosixPath(self.path).parent)
        return "" if parent == "." else parent


@dataclass(frozen=True)
class Folder:
    """A folder in the store."""

    path: str

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name


Entry = Document | Folder


class ChangeKind(StrEnum):
    """Store change notifications a view listens to."""

    CREATED = "create"
    DELETED = "delete"
    RENAMED = "rename"
    MODIFIED = "modify"


@dataclass(frozen=True)
class ChangeEvent:
    """A single store change. `old_path` is only set for renames."""

    kind: ChangeKind
    path: str
    old_path: str | None = None


@dataclass(frozen=True)
class VersionInfo:
    """What a card shows about the latest version of a document."""

    label: str
    content: str
    summary: str
    marker_line: int | None = None

    @property
    def has_marker(self) -> bool:
        return self.marker_line is not None

    @property
    def display_label(self) -> str | None:
        """Label to show on the card, None when the document has no marker."""
        return None if self.label == NOT_AVAILABLE else self.label


@dataclass(frozen=True)
class VersionBump:
    """Result of computing the next version of a document."""

    label: str
    block: str
    major: int
    minor: int


@dataclass(frozen=True)
class Card:
    """A document paired with its parsed version info."""

    document: Document
    info: VersionInfo


class EmptyReason(StrEnum):
    """Why a listing has no cards."""

    INVALID_FOLDER = "invalid_folder"
    NO_FILES = "no_files"
    NO_MATCHES = "no_matches"


@dataclass(frozen=True)
class Listing:
    """Ordered cards of one folder for one search query."""

    folder_path: str
    query: str
    cards: tuple[Card, ...] = ()
    empty_reason: EmptyReason | None = None

    @property
    def is_empty(self) -> bool:
        return not self.cards
