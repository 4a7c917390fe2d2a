"""Browser session: the coordinating model behind one viewer window.

A :class:`BrowserSession` owns the classpath, the open views with their
navigation histories, and the current workspace file. All mutation happens
on the coordinating thread; only the read of a workspace document is pushed
to a worker thread by :meth:`BrowserSession.open_workspace`.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable, Iterator

from .classpath.classfile import read_class_name
from .classpath.entries import ClassLocation, FileKind
from .classpath.resolver import ClasspathConfig, class_output_path, read_class_bytes
from .commands import Command, CommandRegistry
from .errors import InvalidClassFileError, MalformedSessionError, StorageFailureError
from .events import (
    ClasspathChanged,
    EventBus,
    HistoryChanged,
    NoticePosted,
    ViewClosed,
    ViewOpened,
    WindowTitleChanged,
    WorkspaceOpened,
    WorkspaceSaved,
)
from .navigation.history import NavigationEntry
from .services.settings import Settings, SettingsStore, WindowBounds
from .session.document import WorkspaceStore
from .session.model import SessionState, SplitLayout, ViewSession
from .session.recent import RecentEntries
from .session.windows import WindowHandle, WindowRegistry

__all__ = ["BrowserSession", "APPLICATION_TITLE"]

LOGGER = logging.getLogger(__name__)
APPLICATION_TITLE = "classlens"


class BrowserSession:
    """Model of a single browser window and its workspace."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        settings_store: SettingsStore | None = None,
        workspace_store: WorkspaceStore | None = None,
        event_bus: EventBus | None = None,
        windows: WindowRegistry | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._settings_store = settings_store
        self._store = workspace_store or WorkspaceStore()
        self.bus: EventBus = event_bus or EventBus()
        self.windows = windows or WindowRegistry()
        self.window: WindowHandle = self.windows.create()

        self.config = ClasspathConfig(modules_root=self.settings.modules_root)
        self.config.add_listener(self._on_classpath_changed)
        self.recent = RecentEntries()
        self.recent.load(self.settings.recent_workspaces)

        self._views: list[ViewSession] = []
        self._active_view_id: str | None = None
        self._workspace_file: Path | None = None

    # ------------------------------------------------------------------
    # Opening files
    # ------------------------------------------------------------------
    def open_file(self, path: Path | str) -> ViewSession | None:
        """Open a class file, archive or workspace file by its kind."""

        kind = FileKind.detect(path)
        if kind is FileKind.CLASS:
            return self.open_class_file(path)
        if kind is FileKind.ARCHIVE:
            self.open_archive(path)
            return None
        if kind is FileKind.WORKSPACE:
            self.load_workspace(path)
            return self.active_view
        raise ValueError(f"Please select a class file or a JAR file: {path}")

    def open_class_file(self, path: Path | str) -> ViewSession:
        """Open a loose class file and register the classpath root it implies.

        Root inference is best-effort: when the class name cannot be read or
        the directories do not mirror the package, the file opens on its own.
        """

        target = Path(path)
        view = self.open_location(ClassLocation(str(target)))
        self.settings.classes_chooser_path = str(target.parent)
        try:
            class_name = read_class_name(target)
        except (InvalidClassFileError, OSError) as exc:
            LOGGER.debug("Skipping root inference for %s: %s", target, exc)
            return view
        root = self.config.infer_root_directory(target, class_name)
        if root is not None:
            self.config.add_directory(root)
        else:
            LOGGER.debug("No classpath root for %s (class %s)", target, class_name)
        return view

    def open_archive(self, path: Path | str, class_names: Iterable[str] = ()) -> list[ViewSession]:
        """Register an archive and open the selected classes from it."""

        target = Path(path)
        entry = self.config.add_archive(target)
        self.settings.classes_chooser_path = str(target.parent)
        return [
            self.open_location(ClassLocation.for_archive(entry.key, name)) for name in class_names
        ]

    def open_class(self, qualified_name: str, prefer_module_path: bool = False) -> ViewSession | None:
        """Resolve ``qualified_name`` on the classpath and open it in a new view."""

        location = self.config.find_class(qualified_name, prefer_module_path)
        if location is None:
            self.bus.publish(NoticePosted(f"Error loading {qualified_name}", level="error"))
            return None
        return self.open_location(location)

    def open_location(self, location: ClassLocation, layout: SplitLayout | None = None) -> ViewSession:
        view = ViewSession.open(location, layout)
        self._attach(view)
        self._views.append(view)
        self.activate_view(view.view_id)
        self.bus.publish(ViewOpened(view.view_id, location.file_name))
        return view

    def open_paths(self, paths: Iterable[Path | str]) -> list[ViewSession]:
        """Open dropped or command-line paths, skipping anything that fails."""

        opened: list[ViewSession] = []
        for raw in paths:
            path = Path(raw)
            if not path.exists():
                LOGGER.info("Ignoring missing path %s", path)
                continue
            try:
                view = self.open_file(path)
            except (ValueError, OSError, MalformedSessionError, StorageFailureError) as exc:
                LOGGER.warning("Could not open %s: %s", path, exc)
                continue
            if view is not None:
                opened.append(view)
        return opened

    # ------------------------------------------------------------------
    # Views and navigation
    # ------------------------------------------------------------------
    @property
    def views(self) -> tuple[ViewSession, ...]:
        return tuple(self._views)

    def iter_views(self) -> Iterator[ViewSession]:
        return iter(tuple(self._views))

    @property
    def active_view(self) -> ViewSession | None:
        if self._active_view_id is None:
            return None
        return self._find_view(self._active_view_id)

    def activate_view(self, view_id: str) -> ViewSession:
        view = self._find_view(view_id)
        if view is None:
            raise KeyError(f"Unknown view_id: {view_id}")
        self._active_view_id = view_id
        self._publish_history(view)
        return view

    def close_view(self, view_id: str) -> ViewSession:
        view = self._find_view(view_id)
        if view is None:
            raise KeyError(f"Unknown view_id: {view_id}")
        index = self._views.index(view)
        self._views.pop(index)
        if self._active_view_id == view_id:
            if self._views:
                fallback = self._views[min(index, len(self._views) - 1)]
                self.activate_view(fallback.view_id)
            else:
                self._active_view_id = None
        self.bus.publish(ViewClosed(view_id))
        return view

    def close_all_views(self) -> None:
        for view in list(self._views):
            self.close_view(view.view_id)

    def browse_to(
        self, qualified_name: str, prefer_module_path: bool = False
    ) -> NavigationEntry | None:
        """Resolve a class and visit it in the active view's history."""

        view = self.active_view
        if view is None:
            opened = self.open_class(qualified_name, prefer_module_path)
            return opened.history.current if opened is not None else None
        location = self.config.find_class(qualified_name, prefer_module_path)
        if location is None:
            self.bus.publish(NoticePosted(f"Error loading {qualified_name}", level="error"))
            return None
        return view.history.visit(location)

    def back(self) -> NavigationEntry | None:
        view = self.active_view
        return view.history.back() if view is not None else None

    def forward(self) -> NavigationEntry | None:
        view = self.active_view
        return view.history.forward() if view is not None else None

    def can_go_back(self) -> bool:
        view = self.active_view
        return view is not None and view.history.can_go_back

    def can_go_forward(self) -> bool:
        view = self.active_view
        return view is not None and view.history.can_go_forward

    def _find_view(self, view_id: str) -> ViewSession | None:
        for view in self._views:
            if view.view_id == view_id:
                return view
        return None

    def _attach(self, view: ViewSession) -> None:
        def _on_history(_back: bool, _forward: bool) -> None:
            if self._active_view_id == view.view_id:
                self._publish_history(view)

        view.history.add_listener(_on_history)

    def _publish_history(self, view: ViewSession) -> None:
        self.bus.publish(
            HistoryChanged(view.view_id, view.history.can_go_back, view.history.can_go_forward)
        )

    def _on_classpath_changed(self, entries: tuple) -> None:
        self.bus.publish(ClasspathChanged(len(entries)))

    # ------------------------------------------------------------------
    # Workspace lifecycle
    # ------------------------------------------------------------------
    @property
    def workspace_file(self) -> Path | None:
        return self._workspace_file

    @property
    def title(self) -> str:
        if self._workspace_file is None:
            return APPLICATION_TITLE
        return f"{APPLICATION_TITLE} [{self._workspace_file.name}]"

    def snapshot(self) -> SessionState:
        """Capture the live model as a :class:`SessionState`."""

        active_index = 0
        for index, view in enumerate(self._views):
            if view.view_id == self._active_view_id:
                active_index = index
                break
        return SessionState(
            entries=list(self.config.entries),
            views=list(self._views),
            active_view_index=active_index,
        )

    def new_workspace(self) -> None:
        self.close_all_views()
        self.config.clear()
        self._set_workspace_file(None)

    def save_workspace(self, path: Path | str | None = None) -> Path:
        """Write the workspace to ``path`` or to the current workspace file.

        Raises:
            StorageFailureError: the document could not be written; the live
                session is unchanged and still unsaved.
        """

        if path is None:
            if self._workspace_file is None:
                raise ValueError("No workspace file selected")
            target = self._workspace_file
        else:
            target = self._store.ensure_suffix(path)
        try:
            written = self._store.save(self.snapshot(), target)
        except StorageFailureError as exc:
            self.bus.publish(NoticePosted(exc.message, level="error"))
            raise
        self._set_workspace_file(written)
        self.settings.workspace_chooser_path = str(written.parent)
        self._remember_workspace(written)
        self.bus.publish(WorkspaceSaved(str(written)))
        self.bus.publish(NoticePosted(f"Workspace saved to {written}"))
        return written

    def save_classes_to_directory(self, directory: Path | str) -> list[Path]:
        """Write the class shown by every open view beneath ``directory``.

        Files are laid out by package. Views showing the same class write it
        once.

        Raises:
            StorageFailureError: a class could not be read or written.
        """

        root = Path(directory)
        written: list[Path] = []
        seen: set[ClassLocation] = set()
        try:
            for view in self._views:
                location = view.current_location
                if location in seen:
                    continue
                seen.add(location)
                data = read_class_bytes(location)
                parts = [
                    part
                    for part in class_output_path(location, data).split("/")
                    if part not in ("", ".", "..")
                ]
                target = root.joinpath(*parts)
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(data)
                written.append(target)
        except OSError as exc:
            LOGGER.warning("Failed to save classes to %s: %s", root, exc)
            error = StorageFailureError(
                message=f"An error occurred while saving classes to {root}",
                details={"reason": str(exc)},
                path=str(root),
            )
            self.bus.publish(NoticePosted(error.message, level="error"))
            raise error from exc
        LOGGER.debug("Saved %d classes to %s", len(written), root)
        self.bus.publish(NoticePosted(f"Saved {len(written)} classes to {root}"))
        return written

    def load_workspace(self, path: Path | str) -> SessionState:
        """Read and apply a workspace document on the calling thread."""

        target = Path(path)
        state = self._read_or_report(target)
        self.apply_workspace(state, target)
        return state

    async def open_workspace(self, path: Path | str) -> SessionState:
        """Read a workspace document off-thread, then apply it here.

        The worker only parses; the live model is replaced after the await,
        on the thread running the event loop. On failure the current session
        is left as it was.
        """

        target = Path(path)
        try:
            state = await asyncio.to_thread(self._store.read, target)
        except (MalformedSessionError, StorageFailureError) as exc:
            self.bus.publish(NoticePosted(exc.message, level="error"))
            raise
        self.apply_workspace(state, target)
        return state

    def apply_workspace(self, state: SessionState, path: Path | str | None = None) -> None:
        """Replace the live model with ``state`` wholesale."""

        self.close_all_views()
        self.config.replace(state.entries)
        for view in state.views:
            self._attach(view)
            self._views.append(view)
            self.bus.publish(ViewOpened(view.view_id, view.current_location.file_name))
        active = state.active_view
        if active is not None:
            self.activate_view(active.view_id)
        if path is not None:
            target = Path(path)
            self._set_workspace_file(target)
            self.settings.workspace_chooser_path = str(target.parent)
            self._remember_workspace(target)
            self.bus.publish(WorkspaceOpened(str(target), len(state.views)))

    def _read_or_report(self, path: Path) -> SessionState:
        try:
            return self._store.read(path)
        except (MalformedSessionError, StorageFailureError) as exc:
            self.bus.publish(NoticePosted(exc.message, level="error"))
            raise

    def _set_workspace_file(self, path: Path | None) -> None:
        self._workspace_file = path
        self.bus.publish(WindowTitleChanged(self.title))

    def _remember_workspace(self, path: Path) -> None:
        self.recent.touch(path)
        self.settings.recent_workspaces = self.recent.list()
        self.settings.last_workspace = str(path)
        self.persist_settings()

    # ------------------------------------------------------------------
    # Windows and preferences
    # ------------------------------------------------------------------
    def new_window(self, screen_size: tuple[int, int] | None = None) -> "BrowserSession":
        """Open another browser window sharing settings, windows and events."""

        if self.settings.window_bounds is not None and not self.settings.window_bounds.maximized:
            self.settings.window_bounds = WindowRegistry.offset_bounds(self.settings.window_bounds)
        elif screen_size is not None:
            self.settings.window_bounds = WindowRegistry.offset_bounds(
                WindowBounds.default_for(*screen_size)
            )
        self.persist_settings()
        return BrowserSession(
            settings=self.settings,
            settings_store=self._settings_store,
            workspace_store=self._store,
            event_bus=self.bus,
            windows=self.windows,
        )

    def next_window(self) -> WindowHandle:
        return self.windows.activate(self.windows.next(self.window))

    def previous_window(self) -> WindowHandle:
        return self.windows.activate(self.windows.previous(self.window))

    def close_window(self) -> bool:
        """Unregister this window; returns ``True`` when it was the last one."""

        self.persist_settings()
        self.windows.unregister(self.window)
        return len(self.windows) == 0

    def restore_window_bounds(self, screen_width: int, screen_height: int) -> WindowBounds:
        """Return saved bounds fitted to the screen, or centred defaults."""

        saved = self.settings.window_bounds
        if saved is None:
            return WindowBounds.default_for(screen_width, screen_height)
        return saved.sanitize(screen_width, screen_height)

    def remember_window_bounds(self, bounds: WindowBounds) -> None:
        if bounds.maximized and self.settings.window_bounds is not None:
            self.settings.window_bounds.maximized = True
        else:
            self.settings.window_bounds = bounds
        self.persist_settings()

    def persist_settings(self) -> bool:
        if self._settings_store is None:
            return False
        try:
            self._settings_store.save(self.settings)
        except OSError as exc:
            LOGGER.warning("Failed to persist settings: %s", exc)
            return False
        return True

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def build_commands(self) -> CommandRegistry:
        """Return the window's commands wired to this session."""

        return CommandRegistry(
            [
                Command("backward", "Backward", self.back, self.can_go_back, shortcut="Alt+Left"),
                Command("forward", "Forward", self.forward, self.can_go_forward, shortcut="Alt+Right"),
                Command("new_workspace", "New workspace", self.new_workspace),
                Command(
                    "save_workspace",
                    "Save workspace",
                    self.save_workspace,
                    lambda: self._workspace_file is not None,
                ),
                Command(
                    "save_workspace_as",
                    "Save workspace as",
                    self.save_workspace,
                    lambda: self._workspace_file is not None,
                ),
                Command(
                    "save_classes",
                    "Save all open classes",
                    self.save_classes_to_directory,
                    lambda: bool(self._views),
                    status_tip="Save all open classes to a selected directory",
                ),
                Command(
                    "close_view",
                    "Close view",
                    lambda: self.close_view(self._active_view_id or ""),
                    lambda: self._active_view_id is not None,
                ),
                Command("close_all_views", "Close all views", self.close_all_views),
                Command(
                    "previous_window",
                    "Previous window",
                    self.previous_window,
                    self.windows.has_multiple,
                    shortcut="F2",
                ),
                Command(
                    "next_window",
                    "Next window",
                    self.next_window,
                    self.windows.has_multiple,
                    shortcut="F3",
                ),
            ]
        )
