"""CLI for the prompt kanban (list, iterate, create, delete, live views, MCP server)."""

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from prompt_kanban.config import POLL_INTERVAL_SECONDS, resolve_settings_path
from prompt_kanban.core.reconciler import FolderNotFoundError, list_folder
from prompt_kanban.core.registry import Organizer
from prompt_kanban.core.versions.parser import parse
from prompt_kanban.core.views import FolderView
from prompt_kanban.i18n import Translator, detect_locale
from prompt_kanban.logging_config import configure_logging
from prompt_kanban.models.card import Card, Document
from prompt_kanban.protocols import FileStoreError
from prompt_kanban.settings import SettingsStore
from prompt_kanban.store.local import LocalFileStore
from prompt_kanban.terminal import TerminalHost

app = typer.Typer(help="Prompt kanban: versioned prompt notes, one card per file.")


@dataclass
class CliState:
    root: Path
    settings_path: Path
    translate: Translator


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj  # type: ignore[no-any-return]


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    root: Annotated[
        Path | None,
        typer.Option("--root", "-r", help="Store root directory (default: current directory)"),
    ] = None,
    settings: Annotated[
        Path | None,
        typer.Option("--settings", help="Settings file (default: ~/.config/prompt-kanban)"),
    ] = None,
) -> None:
    configure_logging(verbose=verbose)
    ctx.obj = CliState(
        root=(root or Path.cwd()).expanduser().resolve(),
        settings_path=settings or resolve_settings_path(),
        translate=Translator(detect_locale()),
    )


def _open_store(state: CliState) -> LocalFileStore:
    try:
        return LocalFileStore(state.root)
    except ValueError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e


def _store_path(store: LocalFileStore, path: Path) -> str:
    """Store-relative path of a path given on the command line (relative paths start at root)."""
    full = path.expanduser()
    if not full.is_absolute():
        full = store.root / full
    try:
        return store.relative(full.resolve())
    except ValueError as e:
        logger.error("{} is outside the store root {}", path, store.root)
        raise typer.Exit(1) from e


async def _document(store: LocalFileStore, path: str) -> Document:
    entry = await store.resolve(path)
    if not isinstance(entry, Document):
        logger.error("Document not found: {}", path)
        raise typer.Exit(1)
    return entry


async def _card(store: LocalFileStore, path: str) -> Card:
    document = await _document(store, path)
    try:
        text = await store.read(document.path)
    except FileStoreError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e
    return Card(document=document, info=parse(text))


def _view(state: CliState, store: LocalFileStore, folder_path: str, **host_kwargs: bool) -> FolderView:
    host = TerminalHost(state.root, state.translate, **host_kwargs)
    return FolderView(folder_path, store, host, state.translate)


def _card_json(card: Card) -> dict[str, object]:
    return {
        "path": card.document.path,
        "name": card.document.basename,
        "modified": card.document.mtime,
        "version": card.info.display_label,
        "summary": card.info.summary,
        "marker_line": card.info.marker_line,
    }


@app.command(name="list")
def list_cmd(
    ctx: typer.Context,
    folder: Path = typer.Argument(Path("."), help="Folder to list"),
    search: str = typer.Option("", "--search", "-s", help="Filter by file name"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Show the cards of a folder, newest first."""
    state = _state(ctx)
    store = _open_store(state)
    folder_path = _store_path(store, folder)

    if not output_json:
        view = _view(state, store, folder_path)
        view.query = search
        asyncio.run(view.refresh())
        return

    try:
        listing = asyncio.run(list_folder(store, folder_path, search))
    except FolderNotFoundError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e
    data = {
        "folder": listing.folder_path,
        "query": listing.query,
        "cards": [_card_json(c) for c in listing.cards],
        "empty_reason": listing.empty_reason,
    }
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


@app.command()
def show(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Prompt document"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Show the latest version of a document."""
    state = _state(ctx)
    store = _open_store(state)
    card = asyncio.run(_card(store, _store_path(store, file)))
    if output_json:
        data = {**_card_json(card), "content": card.info.content}
        typer.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return
    typer.secho(f"{card.document.basename}  {card.info.display_label or ''}".rstrip(), bold=True)
    typer.echo(card.info.content)


@app.command()
def copy(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Prompt document"),
) -> None:
    """Print the latest version's text (pipe it into your clipboard tool)."""
    state = _state(ctx)
    store = _open_store(state)
    card = asyncio.run(_card(store, _store_path(store, file)))
    _view(state, store, card.document.parent).cards.copy_version_content(card)


@app.command(name="open")
def open_cmd(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Prompt document"),
) -> None:
    """Open a document in $EDITOR at its latest version."""
    state = _state(ctx)
    store = _open_store(state)
    card = asyncio.run(_card(store, _store_path(store, file)))
    asyncio.run(_view(state, store, card.document.parent).cards.open_at_version(card))


@app.command()
def new(
    ctx: typer.Context,
    folder: Path = typer.Argument(Path("."), help="Folder to create the prompt in"),
    no_edit: bool = typer.Option(False, "--no-edit", help="Do not open the new file"),
) -> None:
    """Create a new prompt from the template."""
    state = _state(ctx)
    store = _open_store(state)
    view = _view(state, store, _store_path(store, folder), edit=not no_edit)
    document = asyncio.run(view.cards.create())
    if document is None:
        raise typer.Exit(1)


@app.command()
def iterate(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Prompt document"),
) -> None:
    """Append a new version that carries the latest content forward."""
    state = _state(ctx)
    store = _open_store(state)

    async def run() -> bool:
        document = await _document(store, _store_path(store, file))
        bump = await _view(state, store, document.parent).cards.iterate(document)
        return bump is not None

    if not asyncio.run(run()):
        raise typer.Exit(1)


@app.command()
def delete(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Prompt document"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete a prompt document."""
    state = _state(ctx)
    store = _open_store(state)

    async def run() -> bool:
        document = await _document(store, _store_path(store, file))
        view = _view(state, store, document.parent, assume_yes=yes)
        return await view.cards.delete(document)

    if not asyncio.run(run()):
        raise typer.Exit(1)


def _organizer(state: CliState, store: LocalFileStore) -> Organizer:
    host = TerminalHost(state.root, state.translate)
    try:
        organizer = Organizer(store, host, SettingsStore(state.settings_path), state.translate)
        organizer.load()
    except ValueError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e
    return organizer


async def _live(store: LocalFileStore, organizer: Organizer, interval: float) -> None:
    try:
        await store.watch(interval)
    finally:
        await organizer.unload()


def _run_live(store: LocalFileStore, organizer: Organizer, interval: float) -> None:
    if not organizer.views:
        raise typer.Exit(1)
    try:
        asyncio.run(_live(store, organizer, interval))
    except KeyboardInterrupt:
        typer.echo("Stopped.", err=True)


@app.command()
def generate(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Any document of the folder to watch"),
    search: str = typer.Option("", "--search", "-s", help="Filter by file name"),
    interval: float = typer.Option(POLL_INTERVAL_SECONDS, "--interval", help="Poll seconds"),
) -> None:
    """Open a live kanban for the folder containing FILE and remember it."""
    state = _state(ctx)
    store = _open_store(state)
    organizer = _organizer(state, store)

    async def open_view() -> None:
        view = await organizer.generate_for_document(_store_path(store, file))
        if view is not None and search:
            await view.search(search)

    asyncio.run(open_view())
    _run_live(store, organizer, interval)


@app.command()
def restore(
    ctx: typer.Context,
    interval: float = typer.Option(POLL_INTERVAL_SECONDS, "--interval", help="Poll seconds"),
) -> None:
    """Reopen live kanbans for every remembered folder."""
    state = _state(ctx)
    store = _open_store(state)
    organizer = _organizer(state, store)
    asyncio.run(organizer.restore())
    if not organizer.views:
        typer.echo("No remembered folders.", err=True)
    _run_live(store, organizer, interval)


@app.command()
def views(ctx: typer.Context) -> None:
    """List remembered folders."""
    state = _state(ctx)
    organizer = _organizer(state, _open_store(state))
    for folder_path in organizer.settings.active_folders:
        typer.echo(folder_path or ".")


@app.command()
def forget(
    ctx: typer.Context,
    folder: Path = typer.Argument(..., help="Folder to stop restoring"),
) -> None:
    """Stop restoring the kanban of a folder."""
    state = _state(ctx)
    store = _open_store(state)
    organizer = _organizer(state, store)
    asyncio.run(organizer.close_view(_store_path(store, folder), forget=True))


@app.command()
def config(
    ctx: typer.Context,
    quick_access: Annotated[
        bool | None,
        typer.Option("--quick-access/--no-quick-access", help="Toggle the quick-access command"),
    ] = None,
) -> None:
    """Show or change settings."""
    state = _state(ctx)
    organizer = _organizer(state, _open_store(state))
    if quick_access is not None:
        organizer.set_show_quick_access(quick_access)
    t = state.translate
    typer.echo(f"{t('showRibbonIcon')}: {organizer.settings.show_quick_access}")
    typer.echo(f"settings: {state.settings_path}")


@app.command()
def quick(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="The document you are working on"),
    interval: float = typer.Option(POLL_INTERVAL_SECONDS, "--interval", help="Poll seconds"),
) -> None:
    """Quick access: open (or reveal) the kanban of FILE's folder."""
    state = _state(ctx)
    store = _open_store(state)
    organizer = _organizer(state, store)
    asyncio.run(organizer.quick_access(_store_path(store, file)))
    _run_live(store, organizer, interval)


@app.command()
def mcp() -> None:
    """Run the MCP server over stdio (store root from $PROMPT_KANBAN_ROOT)."""
    from prompt_kanban.mcp.server import run_mcp_server

    run_mcp_server()
