"""Tests for the folder view: rendering, search and its lifetime."""

import asyncio

import pytest

from prompt_kanban.core.views import FolderView, view_type_for
from prompt_kanban.i18n import Translator
from prompt_kanban.models.card import Document, EmptyReason
from prompt_kanban.protocols import FileStoreError
from tests.unit.fakes import FakeFileStore, FakeHost


@pytest.fixture
def view(store: FakeFileStore, host: FakeHost, translate: Translator) -> FolderView:
    return FolderView("prompts", store, host, translate, debounce=0.02)


def _rendered_names(host: FakeHost) -> list[str]:
    return [c.document.name for c in host.last_listing.cards]


def test_view_type_for() -> None:
    assert view_type_for("notes/prompts") == "kanban-view-notes/prompts"


def test_display_text_uses_folder_name(store: FakeFileStore, host: FakeHost) -> None:
    view = FolderView("notes/prompts", store, host, Translator("en"))

    assert view.display_text == "Kanban: prompts"
    assert FolderView("notes/prompts", store, host, Translator("zh")).display_text == (
        "看板: prompts"
    )


@pytest.mark.asyncio
async def test_open_renders_and_starts_watching(
    view: FolderView, store: FakeFileStore, host: FakeHost
) -> None:
    await view.open()

    assert host.rendered[0][0] == "Kanban: prompts"
    assert _rendered_names(host) == ["translate.md", "draft.md", "summarizer.md"]
    assert host.last_empty_message is None
    assert view.watcher.is_running
    await view.close()


@pytest.mark.asyncio
async def test_search_filters_and_clears(view: FolderView, host: FakeHost) -> None:
    await view.open()

    await view.search("sum")
    assert _rendered_names(host) == ["summarizer.md"]

    await view.search("")
    assert len(host.last_listing.cards) == 3
    await view.close()


@pytest.mark.asyncio
async def test_search_without_matches_shows_message(view: FolderView, host: FakeHost) -> None:
    await view.open()

    await view.search("zzz")

    assert host.last_listing.empty_reason is EmptyReason.NO_MATCHES
    assert host.last_empty_message == 'No files matching "zzz" found.'
    await view.close()


@pytest.mark.asyncio
async def test_search_waits_for_composition_to_end(view: FolderView, host: FakeHost) -> None:
    await view.open()
    renders = len(host.rendered)

    view.begin_composition()
    await view.search("s")
    await view.search("su")
    assert len(host.rendered) == renders

    await view.end_composition()

    assert len(host.rendered) == renders + 1
    assert host.last_listing.query == "su"
    await view.close()


@pytest.mark.asyncio
async def test_empty_folder_message(store: FakeFileStore, host: FakeHost) -> None:
    view = FolderView("empty", store, host, Translator("en"))

    await view.refresh()

    assert host.last_listing.empty_reason is EmptyReason.NO_FILES
    assert host.last_empty_message == "This folder has no Markdown files yet."


@pytest.mark.asyncio
async def test_missing_folder_renders_invalid_state(store: FakeFileStore, host: FakeHost) -> None:
    view = FolderView("missing", store, host, Translator("en"))

    await view.refresh()

    assert host.last_listing.empty_reason is EmptyReason.INVALID_FOLDER
    assert host.last_empty_message == "Folder missing is invalid or does not exist."


@pytest.mark.asyncio
async def test_store_changes_refresh_view_once(
    view: FolderView, store: FakeFileStore, host: FakeHost
) -> None:
    await view.open()
    before = len(host.rendered)

    await store.create("prompts/new.md", "### V1\nnew")
    await store.modify("prompts/new.md", "### V1\nnewer")
    await asyncio.sleep(0.2)
    await view.watcher.wait_idle()

    assert len(host.rendered) == before + 1
    assert _rendered_names(host)[0] == "new.md"
    await view.close()


@pytest.mark.asyncio
async def test_iterate_refreshes_view_with_new_label(view: FolderView, host: FakeHost) -> None:
    await view.open()
    card = view.find_card("draft")
    assert card is not None

    await view.cards.iterate(card.document)

    refreshed = view.find_card("draft.md")
    assert refreshed is not None
    assert refreshed.info.label == "V0.10"
    assert _rendered_names(host)[0] == "draft.md"
    await view.close()


@pytest.mark.asyncio
async def test_closed_view_ignores_refresh(
    view: FolderView, store: FakeFileStore, host: FakeHost
) -> None:
    await view.open()
    renders = len(host.rendered)

    await view.close()
    await store.create("prompts/late.md", "late")
    await view.refresh()
    await asyncio.sleep(0.1)

    assert view.closed
    assert len(host.rendered) == renders
    assert store.handler_count() == 0


@pytest.mark.asyncio
async def test_close_during_listing_drops_result(
    view: FolderView, store: FakeFileStore, host: FakeHost
) -> None:
    original_read = store.read

    async def read_then_close(path: str) -> str:
        await view.close()
        return await original_read(path)

    store.read = read_then_close  # type: ignore[method-assign]

    await view.refresh()

    assert host.rendered == []


def test_find_card_on_fresh_view_is_none(view: FolderView) -> None:
    assert view.find_card("draft") is None


@pytest.mark.asyncio
async def test_unreadable_sibling_does_not_break_the_view(
    view: FolderView, store: FakeFileStore, host: FakeHost
) -> None:
    store.add_file("prompts/broken.md", "### V1\nunreadable", mtime=500.0)
    store.unreadable.add("prompts/broken.md")

    await view.open()
    bump = await view.cards.iterate(Document(path="prompts/summarizer.md"))

    assert bump is not None
    assert bump.label == "V1.2"
    assert host.notices == ["New version V1.2 created in file summarizer"]
    assert "broken.md" not in _rendered_names(host)
    assert _rendered_names(host)[0] == "summarizer.md"
    await view.close()


@pytest.mark.asyncio
async def test_failed_listing_renders_invalid_state(
    view: FolderView, store: FakeFileStore, host: FakeHost
) -> None:
    async def broken(folder_path: str) -> list:
        raise FileStoreError("Cannot list 'prompts'")

    store.list_children = broken  # type: ignore[method-assign]

    await view.refresh()

    assert host.last_listing.empty_reason is EmptyReason.INVALID_FOLDER
