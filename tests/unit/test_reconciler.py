"""Tests for folder listing and debounced change watching."""

import asyncio

import pytest

from prompt_kanban.core.reconciler import (
    FolderNotFoundError,
    FolderWatcher,
    is_in_folder,
    list_folder,
    matches_query,
)
from prompt_kanban.models.card import ChangeEvent, ChangeKind, Document, EmptyReason
from tests.unit.fakes import FakeFileStore


def _names(listing) -> list[str]:
    return [c.document.name for c in listing.cards]


@pytest.mark.asyncio
async def test_list_folder_sorts_newest_first_and_skips_other_files(
    store: FakeFileStore,
) -> None:
    listing = await list_folder(store, "prompts")

    assert _names(listing) == ["translate.md", "draft.md", "summarizer.md"]
    assert listing.empty_reason is None
    assert listing.cards[0].info.label == "Version 2"
    assert listing.cards[1].info.label == "N/A"


@pytest.mark.asyncio
async def test_list_folder_only_reads_immediate_children(store: FakeFileStore) -> None:
    store.add_file("prompts/archive/old.md", "### V1\nold")

    listing = await list_folder(store, "prompts")

    assert "old.md" not in _names(listing)


@pytest.mark.asyncio
async def test_list_folder_ties_keep_store_order() -> None:
    store = FakeFileStore()
    store.add_file("p/b.md", "b", mtime=5.0)
    store.add_file("p/a.md", "a", mtime=5.0)
    store.add_file("p/c.md", "c", mtime=9.0)

    listing = await list_folder(store, "p")

    assert _names(listing) == ["c.md", "b.md", "a.md"]


@pytest.mark.asyncio
async def test_list_folder_filters_case_insensitively(store: FakeFileStore) -> None:
    listing = await list_folder(store, "prompts", "TRANS")

    assert _names(listing) == ["translate.md"]


@pytest.mark.asyncio
async def test_list_folder_query_matches_full_name(store: FakeFileStore) -> None:
    listing = await list_folder(store, "prompts", "t.md")

    assert _names(listing) == ["draft.md"]


@pytest.mark.asyncio
async def test_list_folder_reports_no_matches(store: FakeFileStore) -> None:
    listing = await list_folder(store, "prompts", "nothing-like-this")

    assert listing.is_empty
    assert listing.empty_reason is EmptyReason.NO_MATCHES


@pytest.mark.asyncio
async def test_list_folder_reports_no_files(store: FakeFileStore) -> None:
    listing = await list_folder(store, "empty")

    assert listing.is_empty
    assert listing.empty_reason is EmptyReason.NO_FILES


@pytest.mark.asyncio
async def test_list_folder_does_not_read_filtered_documents(store: FakeFileStore) -> None:
    await list_folder(store, "prompts", "draft")

    assert store.reads == ["prompts/draft.md"]


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["missing", "prompts/draft.md"])
async def test_list_folder_raises_for_non_folder(store: FakeFileStore, path: str) -> None:
    with pytest.raises(FolderNotFoundError, match="missing or is not a folder"):
        await list_folder(store, path)


@pytest.mark.asyncio
async def test_list_folder_after_delete_has_one_card_less(store: FakeFileStore) -> None:
    before = await list_folder(store, "prompts")
    await store.delete("prompts/draft.md")

    after = await list_folder(store, "prompts")

    assert len(after.cards) == len(before.cards) - 1
    assert "draft.md" not in _names(after)


def test_matches_query() -> None:
    document = Document(path="p/Daily-Summary.md")

    assert matches_query(document, "summary")
    assert matches_query(document, "y-s")
    assert matches_query(document, ".MD")
    assert not matches_query(document, "weekly")


def test_is_in_folder() -> None:
    assert is_in_folder("prompts/a.md", "prompts")
    assert is_in_folder("prompts", "prompts")
    assert is_in_folder("prompts/sub/a.md", "prompts")
    assert not is_in_folder("prompts-old/a.md", "prompts")
    assert is_in_folder("anything.md", "")


# --- FolderWatcher ---


class RefreshCounter:
    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self) -> None:
        self.calls += 1


@pytest.mark.asyncio
async def test_watcher_subscribes_to_four_event_kinds(store: FakeFileStore) -> None:
    watcher = FolderWatcher(store, "prompts", RefreshCounter(), delay=0.05)

    watcher.start()
    watcher.start()

    assert watcher.is_running
    for kind in ChangeKind:
        assert store.handler_count(kind) == 1


@pytest.mark.asyncio
async def test_watcher_collapses_burst_into_one_refresh(store: FakeFileStore) -> None:
    refresh = RefreshCounter()
    watcher = FolderWatcher(store, "prompts", refresh, delay=0.05)
    watcher.start()

    for kind in ChangeKind:
        store.emit(ChangeEvent(kind, "prompts/draft.md"))
        await asyncio.sleep(0.005)
    assert refresh.calls == 0

    await asyncio.sleep(0.3)
    await watcher.wait_idle()

    assert refresh.calls == 1
    assert not watcher.is_pending


@pytest.mark.asyncio
async def test_watcher_separate_bursts_refresh_separately(store: FakeFileStore) -> None:
    refresh = RefreshCounter()
    watcher = FolderWatcher(store, "prompts", refresh, delay=0.02)
    watcher.start()

    store.emit(ChangeEvent(ChangeKind.MODIFIED, "prompts/a.md"))
    await asyncio.sleep(0.2)
    store.emit(ChangeEvent(ChangeKind.MODIFIED, "prompts/a.md"))
    await asyncio.sleep(0.2)
    await watcher.wait_idle()

    assert refresh.calls == 2


@pytest.mark.asyncio
async def test_watcher_ignores_other_folders_when_scoped(store: FakeFileStore) -> None:
    watcher = FolderWatcher(store, "prompts", RefreshCounter(), delay=0.05)
    watcher.start()

    store.emit(ChangeEvent(ChangeKind.CREATED, "elsewhere/a.md"))
    store.emit(ChangeEvent(ChangeKind.MODIFIED, "prompts-old/a.md"))

    assert not watcher.is_pending


@pytest.mark.asyncio
async def test_watcher_rename_out_of_folder_is_relevant(store: FakeFileStore) -> None:
    watcher = FolderWatcher(store, "prompts", RefreshCounter(), delay=0.05)
    watcher.start()

    store.emit(ChangeEvent(ChangeKind.RENAMED, "elsewhere/a.md", old_path="prompts/a.md"))

    assert watcher.is_pending
    watcher.stop()


@pytest.mark.asyncio
async def test_watcher_unscoped_reacts_to_any_change(store: FakeFileStore) -> None:
    watcher = FolderWatcher(store, "prompts", RefreshCounter(), delay=0.05, scoped=False)
    watcher.start()

    store.emit(ChangeEvent(ChangeKind.CREATED, "elsewhere/a.md"))

    assert watcher.is_pending
    watcher.stop()


@pytest.mark.asyncio
async def test_watcher_stop_cancels_pending_refresh_and_unsubscribes(
    store: FakeFileStore,
) -> None:
    refresh = RefreshCounter()
    watcher = FolderWatcher(store, "prompts", refresh, delay=0.05)
    watcher.start()
    store.emit(ChangeEvent(ChangeKind.MODIFIED, "prompts/draft.md"))

    watcher.stop()
    watcher.stop()
    await asyncio.sleep(0.15)

    assert refresh.calls == 0
    assert store.handler_count() == 0
    assert not watcher.is_running


@pytest.mark.asyncio
async def test_watcher_stop_leaves_other_handlers(store: FakeFileStore) -> None:
    seen: list[ChangeEvent] = []
    store.subscribe(ChangeKind.MODIFIED, seen.append)
    watcher = FolderWatcher(store, "prompts", RefreshCounter(), delay=0.05)
    watcher.start()

    watcher.stop()
    store.emit(ChangeEvent(ChangeKind.MODIFIED, "prompts/draft.md"))

    assert store.handler_count() == 1
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_watcher_survives_failing_refresh(store: FakeFileStore) -> None:
    async def broken() -> None:
        raise RuntimeError("boom")

    watcher = FolderWatcher(store, "prompts", broken, delay=0.01)
    watcher.start()
    store.emit(ChangeEvent(ChangeKind.MODIFIED, "prompts/draft.md"))
    await asyncio.sleep(0.1)

    await watcher.wait_idle()
    watcher.stop()


@pytest.mark.asyncio
async def test_list_folder_skips_unreadable_documents(store: FakeFileStore) -> None:
    store.unreadable.add("prompts/translate.md")

    listing = await list_folder(store, "prompts")

    assert _names(listing) == ["draft.md", "summarizer.md"]
    assert listing.empty_reason is None


@pytest.mark.asyncio
async def test_list_folder_with_only_unreadable_documents_is_empty(
    store: FakeFileStore,
) -> None:
    store.unreadable.update({"prompts/translate.md", "prompts/draft.md"})

    listing = await list_folder(store, "prompts", "t")

    assert listing.is_empty
    assert listing.empty_reason is EmptyReason.NO_MATCHES
