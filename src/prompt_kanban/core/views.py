"""A live kanban view bound to one folder."""

from pathlib import PurePosixPath

from loguru import logger

from prompt_kanban.config import DEBOUNCE_SECONDS, VIEW_TYPE_PREFIX
from prompt_kanban.core.cards import CardController
from prompt_kanban.core.reconciler import FolderNotFoundError, FolderWatcher, list_folder
from prompt_kanban.i18n import Translator
from prompt_kanban.models.card import Card, EmptyReason, Listing
from prompt_kanban.protocols import FileStoreError, FileStoreProtocol, HostProtocol


def view_type_for(folder_path: str) -> str:
    return f"{VIEW_TYPE_PREFIX}-{folder_path}"


class FolderView:
    """State and lifetime of the kanban of one folder.

    The view owns its search query, the input-method composition flag, the
    last listing and the watcher that keeps the listing in sync with the store.
    Once closed, late refreshes no longer touch the state or the host.
    """

    def __init__(
        self,
        folder_path: str,
        store: FileStoreProtocol,
        host: HostProtocol,
        translate: Translator,
        *,
        debounce: float = DEBOUNCE_SECONDS,
        scoped_events: bool = True,
    ) -> None:
        self.folder_path = folder_path
        self.store = store
        self.host = host
        self.t = translate
        self.query = ""
        self.is_composing = False
        self.listing = Listing(folder_path=folder_path, query="")
        self.closed = False
        self.watcher = FolderWatcher(
            store, folder_path, self.refresh, delay=debounce, scoped=scoped_events
        )
        self.cards = CardController(store, host, translate, folder_path, self.refresh)

    @property
    def view_type(self) -> str:
        return view_type_for(self.folder_path)

    @property
    def display_text(self) -> str:
        name = PurePosixPath(self.folder_path).name or self.folder_path or "/"
        return self.t("viewTitle", name)

    async def open(self) -> None:
        await self.refresh()
        self.watcher.start()
        logger.debug("Opened view {!r}", self.view_type)

    async def close(self) -> None:
        self.watcher.stop()
        self.closed = True
        logger.info("Kanban view for {!r} closed, folder kept for next start", self.folder_path)

    async def refresh(self) -> None:
        """Re-list the folder and render it."""
        if self.closed:
            return
        query = self.query
        try:
            listing = await list_folder(self.store, self.folder_path, query)
        except (FolderNotFoundError, FileStoreError) as e:
            logger.warning("Cannot list {!r}: {}", self.folder_path, e)
            listing = Listing(
                folder_path=self.folder_path,
                query=query,
                empty_reason=EmptyReason.INVALID_FOLDER,
            )
        if self.closed:
            logger.debug("Dropping listing of closed view {!r}", self.view_type)
            return
        self.listing = listing
        self.host.render(self.display_text, listing, self.empty_message(listing))

    def empty_message(self, listing: Listing) -> str | None:
        if listing.empty_reason is None:
            return None
        if listing.empty_reason is EmptyReason.INVALID_FOLDER:
            return self.t("folderInvalidOrNotExists", self.folder_path)
        if listing.empty_reason is EmptyReason.NO_MATCHES:
            return self.t("noMatchingFiles", listing.query)
        return self.t("noMarkdownFiles")

    async def search(self, query: str) -> None:
        """Update the query; re-list unless an input-method composition is in progress."""
        self.query = query
        if not self.is_composing:
            await self.refresh()

    def begin_composition(self) -> None:
        self.is_composing = True

    async def end_composition(self) -> None:
        self.is_composing = False
        await self.refresh()

    def find_card(self, name: str) -> Card | None:
        """Card of the current listing whose document name or basename equals name."""
        for card in self.listing.cards:
            if name in (card.document.name, card.document.basename, card.document.path):
                return card
        return None
