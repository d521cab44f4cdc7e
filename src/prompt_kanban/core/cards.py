"""User actions on the cards of one folder view."""

from collections.abc import Awaitable, Callable, Collection
from datetime import UTC, datetime

from loguru import logger

from prompt_kanban.config import DOCUMENT_EXTENSION, NEW_DOCUMENT_PREFIX, NEW_DOCUMENT_TEMPLATE
from prompt_kanban.core.versions.synthesizer import next_version
from prompt_kanban.i18n import Translator
from prompt_kanban.models.card import Card, Document, Folder, VersionBump
from prompt_kanban.protocols import FileStoreError, FileStoreProtocol, HostProtocol


def timestamp_name(now: datetime) -> str:
    """Base name for a new document, e.g. "Prompt-2024-05-01T10-20-30-123Z"."""
    stamp = now.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return f"{NEW_DOCUMENT_PREFIX}-{stamp.replace(':', '-').replace('.', '-')}"


def make_unique_name(base: str, taken: Collection[str], *, suffix: str = "") -> str:
    """Append -1, -2, ... to base until base + suffix is not in taken."""
    name = base
    count = 0
    while name + suffix in taken:
        count += 1
        name = f"{base}-{count}"
    return name + suffix


class CardController:
    """Dispatch card actions to the store and the host.

    Mutations call `refresh` only once the store reported success; failures are
    logged and turned into a notice, never raised to the host.
    """

    def __init__(
        self,
        store: FileStoreProtocol,
        host: HostProtocol,
        translate: Translator,
        folder_path: str,
        refresh: Callable[[], Awaitable[None]],
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self.store = store
        self.host = host
        self.t = translate
        self.folder_path = folder_path
        self.refresh = refresh
        self.clock = clock

    async def open_at_version(self, card: Card) -> None:
        """Open the document with the cursor on its last version marker."""
        await self.host.open_document(card.document.path, card.info.marker_line)

    def copy_version_content(self, card: Card) -> bool:
        """Copy the latest version's text. An empty version copies nothing but still succeeds."""
        if card.info.content:
            self.host.copy_to_clipboard(card.info.content)
        self.host.notify(self.t("contentCopied"))
        return True

    async def iterate(self, document: Document) -> VersionBump | None:
        """Append a new version carrying the latest content forward."""
        try:
            text = await self.store.read(document.path)
            bump = next_version(text)
            await self.store.modify(document.path, text + bump.block)
        except FileStoreError:
            logger.exception("Error iterating {!r}", document.path)
            self.host.notify(self.t("iterateFileFailed"))
            return None

        logger.info("Created {} in {!r}", bump.label, document.path)
        self.host.notify(self.t("newVersionCreated", bump.label, document.basename))
        await self.refresh()
        return bump

    async def delete(self, document: Document) -> bool:
        """Delete a document after the user confirmed. Returns True if it was deleted."""
        confirmed = await self.host.confirm(
            self.t("confirmDeleteFile", document.name),
            self.t("deleteWarning"),
        )
        if not confirmed:
            logger.debug("Deletion of {!r} cancelled", document.path)
            return False

        try:
            await self.store.delete(document.path)
        except FileStoreError:
            logger.exception("Error deleting {!r}", document.path)
            self.host.notify(self.t("deleteFileFailed"))
            return False

        logger.info("Deleted {!r}", document.path)
        self.host.notify(self.t("fileDeleted", document.name))
        await self.refresh()
        return True

    async def create(self) -> Document | None:
        """Create a new prompt from the template and open it."""
        folder = await self.store.resolve(self.folder_path)
        if not isinstance(folder, Folder):
            self.host.notify(self.t("invalidFolderPath"))
            return None

        try:
            siblings = await self.store.list_children(self.folder_path)
            taken = {entry.name for entry in siblings}
            name = make_unique_name(
                timestamp_name(self.clock()), taken, suffix=f".{DOCUMENT_EXTENSION}"
            )
            path = f"{self.folder_path}/{name}" if self.folder_path else name
            document = await self.store.create(path, NEW_DOCUMENT_TEMPLATE)
        except FileStoreError:
            logger.exception("Error creating a new document in {!r}", self.folder_path)
            self.host.notify(self.t("createFileFailed"))
            return None

        logger.info("Created {!r}", document.path)
        await self.host.open_document(document.path, None)
        await self.refresh()
        self.host.notify(self.t("fileCreated", document.name))
        return document
