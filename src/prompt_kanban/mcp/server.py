"""MCP server exposing the prompt kanban of a store to assistants."""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from prompt_kanban.core.cards import CardController
from prompt_kanban.core.reconciler import FolderNotFoundError, list_folder
from prompt_kanban.core.versions.parser import parse
from prompt_kanban.i18n import Translator, detect_locale
from prompt_kanban.models.card import Card, Document, Listing
from prompt_kanban.protocols import FileStoreError, FileStoreProtocol
from prompt_kanban.store.local import LocalFileStore

ROOT_ENV_VAR = "PROMPT_KANBAN_ROOT"


@dataclass
class ToolHost:
    """Host for tool calls: notices are collected and returned with the result.

    Confirmation is given up front by the caller (`confirmed`), so delete
    needs two tool calls.
    """

    confirmed: bool = False
    notices: list[str] = field(default_factory=list)
    copied: str | None = None

    def render(self, title: str, listing: Listing, empty_message: str | None) -> None:
        logger.debug("{}: {} card(s)", title, len(listing.cards))

    def notify(self, message: str) -> None:
        self.notices.append(message)

    async def confirm(self, title: str, message: str) -> bool:
        return self.confirmed

    async def open_document(self, path: str, line: int | None) -> None:
        return None

    def copy_to_clipboard(self, text: str) -> None:
        self.copied = text

    def mount_view(self, view_type: str) -> bool:
        return True

    def reveal_view(self, view_type: str) -> None:
        return None

    def unmount_view(self, view_type: str) -> None:
        return None


def _iso(mtime: float) -> str:
    return datetime.fromtimestamp(mtime, tz=UTC).isoformat()


def _serialize_card(card: Card, *, detailed: bool = False) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "path": card.document.path,
        "name": card.document.basename,
        "version": card.info.display_label,
        "summary": card.info.summary,
        "modified": _iso(card.document.mtime),
    }
    if detailed:
        entry["content"] = card.info.content
        entry["marker_line"] = card.info.marker_line
    return entry


def _controller(
    store: FileStoreProtocol, host: ToolHost, translate: Translator, folder_path: str
) -> CardController:
    async def refresh() -> None:
        return None

    return CardController(store, host, translate, folder_path, refresh)


async def _document(store: FileStoreProtocol, path: str) -> Document | None:
    entry = await store.resolve(path)
    return entry if isinstance(entry, Document) else None


# --- Core functions (testable without MCP context) ---


async def kanban_list(
    store: FileStoreProtocol,
    *,
    folder: str = "",
    query: str = "",
    translate: Translator | None = None,
) -> dict[str, Any]:
    """List the cards of a folder, newest first, optionally filtered by file name."""
    t = translate or Translator()
    try:
        listing = await list_folder(store, folder, query)
    except FolderNotFoundError:
        return {"error": t("folderInvalidOrNotExists", folder), "cards": [], "count": 0}

    output: dict[str, Any] = {
        "folder": folder,
        "cards": [_serialize_card(c) for c in listing.cards],
        "count": len(listing.cards),
    }
    if listing.empty_reason is not None:
        output["empty_reason"] = str(listing.empty_reason)
        output["message"] = (
            t("noMatchingFiles", query) if query else t("noMarkdownFiles")
        )
    return output


async def kanban_read(store: FileStoreProtocol, *, path: str) -> dict[str, Any]:
    """Return the latest version of a document."""
    document = await _document(store, path)
    if document is None:
        return {"error": f"Document '{path}' not found."}
    try:
        text = await store.read(path)
    except FileStoreError as e:
        return {"error": str(e)}
    return _serialize_card(Card(document=document, info=parse(text)), detailed=True)


async def kanban_create(
    store: FileStoreProtocol,
    *,
    folder: str = "",
    translate: Translator | None = None,
) -> dict[str, Any]:
    """Create a new prompt document from the template."""
    host = ToolHost()
    controller = _controller(store, host, translate or Translator(), folder)
    document = await controller.create()
    if document is None:
        return {"success": False, "error": " ".join(host.notices)}
    return {"success": True, "path": document.path, "notices": host.notices}


async def kanban_iterate(
    store: FileStoreProtocol,
    *,
    path: str,
    translate: Translator | None = None,
) -> dict[str, Any]:
    """Append a new version carrying the latest content forward."""
    document = await _document(store, path)
    if document is None:
        return {"success": False, "error": f"Document '{path}' not found."}
    host = ToolHost()
    controller = _controller(store, host, translate or Translator(), document.parent)
    bump = await controller.iterate(document)
    if bump is None:
        return {"success": False, "error": " ".join(host.notices)}
    return {"success": True, "path": path, "version": bump.label, "notices": host.notices}


async def kanban_delete(
    store: FileStoreProtocol,
    *,
    path: str,
    confirm: bool = False,
    translate: Translator | None = None,
) -> dict[str, Any]:
    """Delete a document. Without confirm=True only the confirmation request is returned."""
    t = translate or Translator()
    document = await _document(store, path)
    if document is None:
        return {"success": False, "error": f"Document '{path}' not found."}
    if not confirm:
        return {
            "success": False,
            "confirmation_required": True,
            "message": f"{t('confirmDeleteFile', document.name)} {t('deleteWarning')}",
        }
    host = ToolHost(confirmed=True)
    controller = _controller(store, host, t, document.parent)
    deleted = await controller.delete(document)
    if not deleted:
        return {"success": False, "error": " ".join(host.notices)}
    return {"success": True, "path": path, "notices": host.notices}


# --- Server wiring ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    store: LocalFileStore
    translate: Translator


def _resolve_root() -> Path:
    root = os.environ.get(ROOT_ENV_VAR)
    return Path(root).expanduser() if root else Path.cwd()


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Open the store on startup."""
    store = LocalFileStore(_resolve_root())
    logger.info("Serving prompts from {}", store.root)
    yield ServerContext(store=store, translate=Translator(detect_locale()))


mcp_server = FastMCP(
    "prompt-kanban",
    instructions="""\
Each Markdown file is a prompt with an embedded version history: every version
starts with a heading like "### V1.2" and the last one is the current version.

- kanban_list_tool shows the prompts of a folder with a short summary.
- kanban_read_tool returns the full text of the current version.
- kanban_iterate_tool appends a new version (minor number + 1) that starts as a
  copy of the current one; edit the file afterwards to change it.
- kanban_delete_tool needs confirm=true; call it once without to see what will go.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


@mcp_server.tool()
async def kanban_list_tool(ctx: Context, folder: str = "", query: str = "") -> dict[str, Any]:
    """List prompt cards of a folder, newest first.

    Args:
        folder: Folder path relative to the store root ("" for the root).
        query: Case-insensitive file name filter.
    """
    server = _ctx(ctx)
    return await kanban_list(server.store, folder=folder, query=query, translate=server.translate)


@mcp_server.tool()
async def kanban_read_tool(ctx: Context, path: str) -> dict[str, Any]:
    """Read the current version of a prompt.

    Args:
        path: Document path relative to the store root.
    """
    return await kanban_read(_ctx(ctx).store, path=path)


@mcp_server.tool()
async def kanban_create_tool(ctx: Context, folder: str = "") -> dict[str, Any]:
    """Create a new prompt from the template.

    Args:
        folder: Folder path relative to the store root.
    """
    server = _ctx(ctx)
    return await kanban_create(server.store, folder=folder, translate=server.translate)


@mcp_server.tool()
async def kanban_iterate_tool(ctx: Context, path: str) -> dict[str, Any]:
    """Start a new version of a prompt.

    Args:
        path: Document path relative to the store root.
    """
    server = _ctx(ctx)
    return await kanban_iterate(server.store, path=path, translate=server.translate)


@mcp_server.tool()
async def kanban_delete_tool(ctx: Context, path: str, confirm: bool = False) -> dict[str, Any]:
    """Delete a prompt file permanently.

    Args:
        path: Document path relative to the store root.
        confirm: Must be true to actually delete.
    """
    server = _ctx(ctx)
    return await kanban_delete(
        server.store, path=path, confirm=confirm, translate=server.translate
    )


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from prompt_kanban.logging_config import configure_logging

    configure_logging(quiet=True)
    mcp_server.run(transport="stdio")
