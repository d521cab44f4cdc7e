"""Folder view registry and organizer lifecycle."""

from collections.abc import Callable

from loguru import logger

from prompt_kanban.config import DEBOUNCE_SECONDS
from prompt_kanban.core.views import FolderView, view_type_for
from prompt_kanban.i18n import Translator
from prompt_kanban.models.card import Document, Folder
from prompt_kanban.protocols import FileStoreProtocol, HostProtocol
from prompt_kanban.settings import Settings, SettingsStore

ViewFactory = Callable[[], FolderView]


class Organizer:
    """Map folders to live views and keep the set of active folders persisted.

    Factories are registered per view type ("kanban-view-<folder>"); a view is
    only built when it is activated.
    """

    def __init__(
        self,
        store: FileStoreProtocol,
        host: HostProtocol,
        settings_store: SettingsStore,
        translate: Translator,
        *,
        debounce: float = DEBOUNCE_SECONDS,
    ) -> None:
        self.store = store
        self.host = host
        self.settings_store = settings_store
        self.t = translate
        self.debounce = debounce
        self.settings = Settings()
        self.factories: dict[str, ViewFactory] = {}
        self.views: dict[str, FolderView] = {}

    def load(self) -> None:
        """Read settings and register a view factory for every persisted folder."""
        self.settings = self.settings_store.load()
        for folder_path in self.settings.active_folders:
            self.register_view(folder_path)

    def save(self) -> None:
        self.settings_store.save(self.settings)

    def register_view(self, folder_path: str) -> None:
        view_type = view_type_for(folder_path)
        if view_type in self.factories:
            return

        def factory() -> FolderView:
            return FolderView(
                folder_path, self.store, self.host, self.t, debounce=self.debounce
            )

        self.factories[view_type] = factory

    def get_view(self, folder_path: str) -> FolderView | None:
        return self.views.get(view_type_for(folder_path))

    async def restore(self) -> list[FolderView]:
        """Forget persisted folders that are gone, then reopen views for the rest."""
        valid = []
        for folder_path in self.settings.active_folders:
            if isinstance(await self.store.resolve(folder_path), Folder):
                valid.append(folder_path)
            else:
                logger.info("Dropping missing folder {!r} from active views", folder_path)

        if len(valid) != len(self.settings.active_folders):
            self.settings.active_folders = valid
            self.save()

        restored = []
        for folder_path in valid:
            view = await self.activate_view(folder_path, save=False)
            if view is not None:
                restored.append(view)
        return restored

    async def activate_view(self, folder_path: str, *, save: bool = True) -> FolderView | None:
        """Reveal the view of folder_path, opening it first if needed.

        Returns None when the host has no room for another view.
        """
        existing = self.get_view(folder_path)
        if existing is not None:
            self.host.reveal_view(existing.view_type)
            return existing

        self.register_view(folder_path)
        view_type = view_type_for(folder_path)
        if not self.host.mount_view(view_type):
            logger.warning("No room to open the view of {!r}", folder_path)
            self.host.notify(self.t("cannotOpenKanban"))
            return None

        view = self.factories[view_type]()
        try:
            await view.open()
        except Exception:
            await view.close()
            self.host.unmount_view(view_type)
            raise
        self.views[view_type] = view
        self.host.reveal_view(view_type)

        if save and folder_path not in self.settings.active_folders:
            self.settings.active_folders.append(folder_path)
            self.save()
        return view

    async def _folder_of(self, document_path: str | None) -> str | None:
        if not document_path:
            return None
        entry = await self.store.resolve(document_path)
        if not isinstance(entry, Document):
            return None
        return entry.parent

    async def generate_for_document(self, document_path: str | None) -> FolderView | None:
        """Command: open the kanban of the folder containing the current document."""
        folder_path = await self._folder_of(document_path)
        if folder_path is None:
            self.host.notify(self.t("cannotGetFolderPath"))
            return None
        return await self.activate_view(folder_path)

    async def quick_access(self, document_path: str | None) -> FolderView | None:
        """Quick-access affordance: reveal the active document's kanban or open it."""
        if not self.settings.show_quick_access:
            self.host.notify(self.t("quickAccessDisabled"))
            return None
        folder_path = await self._folder_of(document_path)
        if folder_path is None:
            self.host.notify(self.t("cannotGetFolderPath"))
            return None

        if self.get_view(folder_path) is not None:
            view = await self.activate_view(folder_path)
            self.host.notify(self.t("kanbanActivated"))
            return view

        view = await self.activate_view(folder_path)
        if view is not None:
            self.host.notify(self.t("kanbanOpened"))
        return view

    async def close_view(self, folder_path: str, *, forget: bool = False) -> None:
        """Close the view of folder_path. `forget` also drops it from the persisted set."""
        view = self.views.pop(view_type_for(folder_path), None)
        if view is not None:
            await view.close()
            self.host.unmount_view(view.view_type)
        if forget and folder_path in self.settings.active_folders:
            self.settings.active_folders.remove(folder_path)
            self.save()

    def set_show_quick_access(self, value: bool) -> None:
        self.settings.show_quick_access = value
        self.save()

    async def unload(self) -> None:
        """Close every open view; the active folder set is kept for the next start."""
        for view in list(self.views.values()):
            await view.close()
            self.host.unmount_view(view.view_type)
        self.views.clear()
