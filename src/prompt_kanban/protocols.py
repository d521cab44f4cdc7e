"""Protocols for the collaborators the organizer is wired to."""

from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from prompt_kanban.models.card import ChangeEvent, ChangeKind, Document, Entry, Listing

ChangeHandler = Callable[[ChangeEvent], None]


class FileStoreError(RuntimeError):
    """A store rejected an operation (missing file, permissions, I/O error...)."""


@runtime_checkable
class FileStoreProtocol(Protocol):
    """Protocol for the document store a folder view reads and writes."""

    async def resolve(self, path: str) -> Entry | None:
        """Return the document or folder at path, None if nothing is there."""
        ...

    async def list_children(self, folder_path: str) -> Sequence[Entry]:
        """Return the immediate children of a folder."""
        ...

    async def read(self, path: str) -> str:
        """Return the text of a document."""
        ...

    async def create(self, path: str, text: str) -> Document:
        """Create a new document. Raise FileStoreError if path exists."""
        ...

    async def modify(self, path: str, text: str) -> None:
        """Replace the text of an existing document."""
        ...

    async def delete(self, path: str) -> None:
        """Remove a document."""
        ...

    def subscribe(self, kind: ChangeKind, handler: ChangeHandler) -> None:
        """Call handler for every change of the given kind."""
        ...

    def unsubscribe(self, kind: ChangeKind, handler: ChangeHandler) -> None:
        """Stop calling handler. Unknown handlers are ignored."""
        ...


@runtime_checkable
class HostProtocol(Protocol):
    """Protocol for the surface a folder view is displayed in."""

    def render(self, title: str, listing: Listing, empty_message: str | None) -> None:
        """Show the cards of a listing, or the empty-state message."""
        ...

    def notify(self, message: str) -> None:
        """Show a transient notice."""
        ...

    async def confirm(self, title: str, message: str) -> bool:
        """Ask the user to confirm a destructive action."""
        ...

    async def open_document(self, path: str, line: int | None) -> None:
        """Open a document for editing, with the cursor on line when given."""
        ...

    def copy_to_clipboard(self, text: str) -> None:
        """Place text on the clipboard."""
        ...

    def mount_view(self, view_type: str) -> bool:
        """Reserve a display slot for a view. False if none is available."""
        ...

    def reveal_view(self, view_type: str) -> None:
        """Bring an already mounted view to the front."""
        ...

    def unmount_view(self, view_type: str) -> None:
        """Release the display slot of a closed view. Unknown view types are ignored."""
        ...
