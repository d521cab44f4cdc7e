"""Directory-backed document store."""

import asyncio
import os
from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from prompt_kanban.config import POLL_INTERVAL_SECONDS
from prompt_kanban.models.card import ChangeEvent, ChangeKind, Document, Entry, Folder
from prompt_kanban.protocols import ChangeHandler, FileStoreError


class LocalFileStore:
    """Store documents as files below a root directory.

    Paths are relative to the root, "/"-separated, with "" for the root itself.
    Mutations made through the store emit change events right away; edits
    made by other programs are picked up by `poll()` / `watch()`, which compare
    modification times between scans (a rename shows up as delete + create).
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser().resolve()
        if not self.root.is_dir():
            msg = f"Store root {str(self.root)!r} not found"
            raise ValueError(msg)
        self._handlers: dict[ChangeKind, list[ChangeHandler]] = {kind: [] for kind in ChangeKind}
        self._snapshot: dict[str, float] | None = None
        logger.debug("Store ready, root {!r}", str(self.root))

    # --- path helpers ---

    def absolute(self, path: str) -> Path:
        """Absolute filesystem path of a store path. Raises FileStoreError if it escapes root."""
        full = (self.root / path).resolve() if path else self.root
        if full != self.root and self.root not in full.parents:
            msg = f"Path escapes store root: {path!r}"
            raise FileStoreError(msg)
        return full

    def relative(self, full: Path) -> str:
        rel = full.relative_to(self.root).as_posix()
        return "" if rel == "." else rel

    def _entry(self, full: Path) -> Entry | None:
        try:
            stat = full.stat()
        except FileNotFoundError:
            return None
        if full.is_dir():
            return Folder(path=self.relative(full))
        if full.is_file():
            return Document(path=self.relative(full), mtime=stat.st_mtime)
        return None

    # --- reads ---

    async def resolve(self, path: str) -> Entry | None:
        try:
            full = self.absolute(path)
        except FileStoreError:
            return None
        return await asyncio.to_thread(self._entry, full)

    def _list_children(self, folder_path: str) -> list[Entry]:
        full = self.absolute(folder_path)
        try:
            names = sorted(os.listdir(full))
        except OSError as e:
            msg = f"Cannot list {folder_path!r}: {e}"
            raise FileStoreError(msg) from e
        entries = [self._entry(full / name) for name in names]
        return [e for e in entries if e is not None]

    async def list_children(self, folder_path: str) -> Sequence[Entry]:
        return await asyncio.to_thread(self._list_children, folder_path)

    def _read(self, path: str) -> str:
        try:
            return self.absolute(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Cannot read {path!r}: {e}"
            raise FileStoreError(msg) from e

    async def read(self, path: str) -> str:
        return await asyncio.to_thread(self._read, path)

    # --- writes ---

    def _create(self, path: str, text: str) -> Document:
        full = self.absolute(path)
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            with open(full, "x", encoding="utf-8") as f:
                f.write(text)
            return Document(path=self.relative(full), mtime=full.stat().st_mtime)
        except OSError as e:
            msg = f"Cannot create {path!r}: {e}"
            raise FileStoreError(msg) from e

    async def create(self, path: str, text: str) -> Document:
        document = await asyncio.to_thread(self._create, path, text)
        self._remember(document.path, document.mtime)
        self.emit(ChangeEvent(ChangeKind.CREATED, document.path))
        return document

    def _modify(self, path: str, text: str) -> float:
        full = self.absolute(path)
        if not full.is_file():
            msg = f"Cannot modify {path!r}: no such document"
            raise FileStoreError(msg)
        try:
            full.write_text(text, encoding="utf-8")
            return full.stat().st_mtime
        except OSError as e:
            msg = f"Cannot modify {path!r}: {e}"
            raise FileStoreError(msg) from e

    async def modify(self, path: str, text: str) -> None:
        mtime = await asyncio.to_thread(self._modify, path, text)
        self._remember(path, mtime)
        self.emit(ChangeEvent(ChangeKind.MODIFIED, path))

    def _delete(self, path: str) -> None:
        try:
            self.absolute(path).unlink()
        except OSError as e:
            msg = f"Cannot delete {path!r}: {e}"
            raise FileStoreError(msg) from e

    async def delete(self, path: str) -> None:
        await asyncio.to_thread(self._delete, path)
        self._remember(path, None)
        self.emit(ChangeEvent(ChangeKind.DELETED, path))

    # --- change notifications ---

    def subscribe(self, kind: ChangeKind, handler: ChangeHandler) -> None:
        self._handlers[kind].append(handler)

    def unsubscribe(self, kind: ChangeKind, handler: ChangeHandler) -> None:
        if handler in self._handlers[kind]:
            self._handlers[kind].remove(handler)

    def handler_count(self, kind: ChangeKind) -> int:
        return len(self._handlers[kind])

    def emit(self, event: ChangeEvent) -> None:
        for handler in list(self._handlers[event.kind]):
            handler(event)

    def _remember(self, path: str, mtime: float | None) -> None:
        """Keep the poll snapshot in line with our own writes so they are not reported twice."""
        if self._snapshot is None:
            return
        if mtime is None:
            self._snapshot.pop(path, None)
        else:
            self._snapshot[path] = mtime

    def scan(self) -> dict[str, float]:
        """Modification time of every file below root, hidden directories and files skipped."""
        found: dict[str, float] = {}
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = [d for d in dirnames if not d.startswith(".")]
            for name in filenames:
                if name.startswith("."):
                    continue
                full = Path(dirpath) / name
                try:
                    found[self.relative(full)] = full.stat().st_mtime
                except FileNotFoundError:
                    continue
        return found

    async def poll(self) -> list[ChangeEvent]:
        """Compare the tree with the previous scan and emit events for the differences.

        The first call only records the baseline.
        """
        current = await asyncio.to_thread(self.scan)
        previous = self._snapshot
        self._snapshot = current
        if previous is None:
            return []

        events = [ChangeEvent(ChangeKind.DELETED, p) for p in sorted(previous.keys() - current.keys())]
        events += [ChangeEvent(ChangeKind.CREATED, p) for p in sorted(current.keys() - previous.keys())]
        events += [
            ChangeEvent(ChangeKind.MODIFIED, p)
            for p in sorted(current.keys() & previous.keys())
            if current[p] != previous[p]
        ]
        for event in events:
            logger.debug("External change: {} {!r}", event.kind, event.path)
            self.emit(event)
        return events

    async def watch(
        self,
        interval: float = POLL_INTERVAL_SECONDS,
        *,
        stop: asyncio.Event | None = None,
    ) -> None:
        """Poll until `stop` is set (or forever)."""
        await self.poll()
        while stop is None or not stop.is_set():
            await asyncio.sleep(interval)
            await self.poll()
