"""Reconcile a folder view against the store: listing and debounced change watching."""

import asyncio
from collections.abc import Awaitable, Callable

from loguru import logger

from prompt_kanban.config import DEBOUNCE_SECONDS, DOCUMENT_EXTENSION
from prompt_kanban.core.versions.parser import parse
from prompt_kanban.models.card import (
    Card,
    ChangeEvent,
    ChangeKind,
    Document,
    EmptyReason,
    Folder,
    Listing,
)
from prompt_kanban.protocols import FileStoreError, FileStoreProtocol


class FolderNotFoundError(LookupError):
    """The folder path does not resolve to a folder in the store."""

    def __init__(self, folder_path: str) -> None:
        super().__init__(f"Folder {folder_path!r} is missing or is not a folder")
        self.folder_path = folder_path


def matches_query(document: Document, query: str) -> bool:
    """Case-insensitive substring match against the basename or the full name."""
    needle = query.lower()
    return needle in document.basename.lower() or needle in document.name.lower()


def is_in_folder(path: str, folder_path: str) -> bool:
    if not folder_path:
        return True
    return path == folder_path or path.startswith(folder_path + "/")


async def list_folder(store: FileStoreProtocol, folder_path: str, query: str = "") -> Listing:
    """Cards of the documents directly inside folder_path, newest first.

    Documents the store cannot read are left out with a warning.

    Raises:
        FolderNotFoundError: folder_path is missing or is a document.
    """
    folder = await store.resolve(folder_path)
    if not isinstance(folder, Folder):
        raise FolderNotFoundError(folder_path)

    children = await store.list_children(folder_path)
    documents = [
        c for c in children if isinstance(c, Document) and c.extension == DOCUMENT_EXTENSION
    ]
    # sorted() is stable, so equal mtimes keep the store's order.
    documents = sorted(documents, key=lambda d: d.mtime, reverse=True)
    if query:
        documents = [d for d in documents if matches_query(d, query)]

    cards = []
    for document in documents:
        try:
            text = await store.read(document.path)
        except FileStoreError as e:
            logger.warning("Skipping unreadable document {!r}: {}", document.path, e)
            continue
        cards.append(Card(document=document, info=parse(text)))

    if not cards:
        reason = EmptyReason.NO_MATCHES if query else EmptyReason.NO_FILES
        return Listing(folder_path=folder_path, query=query, empty_reason=reason)

    logger.debug("Listed {} card(s) in {!r} for query {!r}", len(cards), folder_path, query)
    return Listing(folder_path=folder_path, query=query, cards=tuple(cards))


class FolderWatcher:
    """Turn store change events into debounced refreshes of one folder view.

    Every relevant event re-arms a timer; the refresh runs once the events
    stop for `delay` seconds. With `scoped=True` only events touching the
    folder are relevant; otherwise every store event is.
    """

    KINDS: tuple[ChangeKind, ...] = (
        ChangeKind.CREATED,
        ChangeKind.DELETED,
        ChangeKind.RENAMED,
        ChangeKind.MODIFIED,
    )

    def __init__(
        self,
        store: FileStoreProtocol,
        folder_path: str,
        refresh: Callable[[], Awaitable[None]],
        *,
        delay: float = DEBOUNCE_SECONDS,
        scoped: bool = True,
    ) -> None:
        self.store = store
        self.folder_path = folder_path
        self.refresh = refresh
        self.delay = delay
        self.scoped = scoped
        self._handler: Callable[[ChangeEvent], None] | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._handler is not None

    @property
    def is_pending(self) -> bool:
        return self._timer is not None

    def start(self) -> None:
        if self._handler is not None:
            return
        self._handler = self._on_event
        for kind in self.KINDS:
            self.store.subscribe(kind, self._handler)
        logger.debug("Watching {!r} (scoped={})", self.folder_path, self.scoped)

    def stop(self) -> None:
        """Unsubscribe and drop any pending refresh. Safe to call repeatedly."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._handler is None:
            return
        for kind in self.KINDS:
            self.store.unsubscribe(kind, self._handler)
        self._handler = None
        logger.debug("Stopped watching {!r}", self.folder_path)

    def is_relevant(self, event: ChangeEvent) -> bool:
        if not self.scoped:
            return True
        if is_in_folder(event.path, self.folder_path):
            return True
        return event.old_path is not None and is_in_folder(event.old_path, self.folder_path)

    def _on_event(self, event: ChangeEvent) -> None:
        if self.is_relevant(event):
            self.schedule()

    def schedule(self) -> None:
        """(Re)arm the debounce timer."""
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._fire)

    def _fire(self) -> None:
        self._timer = None
        self._task = asyncio.ensure_future(self._run_refresh())

    async def _run_refresh(self) -> None:
        try:
            await self.refresh()
        except Exception:
            logger.exception("Refresh of {!r} after store change failed", self.folder_path)

    async def wait_idle(self) -> None:
        """Wait for the refresh started by the last timer, if any."""
        if self._task is not None:
            await self._task
