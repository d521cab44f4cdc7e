"""Terminal host: renders kanban views as text and talks to the user through the console."""

import asyncio
import os
import shlex
import subprocess
from pathlib import Path

import typer
from loguru import logger

from prompt_kanban.i18n import Translator
from prompt_kanban.models.card import Card, Listing


def format_card(card: Card) -> str:
    label = card.info.display_label
    parts = [card.document.basename]
    if label:
        parts.append(f"[{label}]")
    if card.info.summary:
        parts.append(card.info.summary.replace("\n", " "))
    return "  ".join(parts)


class TerminalHost:
    """Host for the CLI.

    Copied text goes to stdout so it can be piped; notices go to stderr.
    Documents are opened with $VISUAL / $EDITOR ("+line" positioning), or the
    system launcher when neither is set.
    """

    def __init__(
        self,
        root: Path,
        translate: Translator,
        *,
        assume_yes: bool = False,
        edit: bool = True,
        max_views: int = 8,
    ) -> None:
        self.root = root
        self.t = translate
        self.assume_yes = assume_yes
        self.edit = edit
        self.max_views = max_views
        self.mounted: set[str] = set()

    def render(self, title: str, listing: Listing, empty_message: str | None) -> None:
        typer.secho(title, bold=True)
        if listing.is_empty:
            typer.echo(f"  {self.t('empty')}: {empty_message or ''}")
            return
        for card in listing.cards:
            typer.echo(f"  - {format_card(card)}")

    def notify(self, message: str) -> None:
        typer.echo(message, err=True)

    async def confirm(self, title: str, message: str) -> bool:
        if self.assume_yes:
            return True
        typer.echo(message, err=True)
        return await asyncio.to_thread(typer.confirm, title, default=False)

    def _open(self, full: Path, line: int | None) -> None:
        editor = os.environ.get("VISUAL") or os.environ.get("EDITOR")
        if not editor:
            typer.launch(str(full))
            return
        cmd = shlex.split(editor)
        if line is not None:
            cmd.append(f"+{line + 1}")
        cmd.append(str(full))
        logger.debug("Running: {}", " ".join(map(shlex.quote, cmd)))
        subprocess.run(cmd, check=False)

    async def open_document(self, path: str, line: int | None) -> None:
        if not self.edit:
            logger.debug("Not opening {!r}", path)
            return
        await asyncio.to_thread(self._open, self.root / path, line)

    def copy_to_clipboard(self, text: str) -> None:
        typer.echo(text)

    def mount_view(self, view_type: str) -> bool:
        if len(self.mounted) >= self.max_views:
            return False
        self.mounted.add(view_type)
        return True

    def reveal_view(self, view_type: str) -> None:
        logger.debug("Showing {}", view_type)

    def unmount_view(self, view_type: str) -> None:
        self.mounted.discard(view_type)
