from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from tabsync.backend.protocol import (
    Backend,
    BackendEvent,
    TabActivated,
    TabClosed,
    TabSaved,
    TabUnsaved,
    TabUpdated,
    WindowClosed,
    WindowsChanged,
)
from tabsync.domain.construct import from_bookmark_folder, from_live_window
from tabsync.domain.models import BookmarkNode, LiveWindow, TabWindow
from tabsync.domain.mutators import (
    close_tab,
    save_tab,
    set_active_tab,
    unsave_tab,
    update_tab_item,
)
from tabsync.domain.reconcile import (
    attach_saved_folder,
    remove_open_window_state,
    remove_saved_window_state,
    update_window,
)
from tabsync.domain.search import FilteredTabWindow, filter_tab_windows

logger = logging.getLogger(__name__)


@dataclass
class TabManagerState:
    windows: list[TabWindow] = field(default_factory=list)
    query: str = ""

    def find(self, pred: Callable[[TabWindow], bool]) -> Optional[int]:
        for i, window in enumerate(self.windows):
            if pred(window):
                return i
        return None


class TabManager:
    """Holds the current TabWindow values and applies events one at a time.

    Every update replaces the stored window with the value returned by a pure
    transition, so readers holding an older TabWindow are never affected.
    """

    def __init__(self, backend: Optional[Backend] = None) -> None:
        self.backend = backend
        self.state = TabManagerState()

    @property
    def windows(self) -> Sequence[TabWindow]:
        return tuple(self.state.windows)

    def open_window(self, window_id: int) -> Optional[TabWindow]:
        i = self._open_index(window_id)
        return None if i is None else self.state.windows[i]

    def saved_window(self, folder_id: str) -> Optional[TabWindow]:
        i = self._saved_index(folder_id)
        return None if i is None else self.state.windows[i]

    def filtered(self) -> list[FilteredTabWindow]:
        return filter_tab_windows(self.state.windows, self.state.query)

    def set_query(self, query: str) -> None:
        self.state.query = query

    def load_saved_folders(self, folders: Sequence[BookmarkNode]) -> None:
        for folder in folders:
            window = from_bookmark_folder(folder)
            i = self._saved_index(folder.id)
            if i is None:
                self.state.windows.append(window)
            elif not self.state.windows[i].open:
                self.state.windows[i] = window
            else:
                logger.debug("Folder %s already attached to an open window", folder.id)

    def sync_live_windows(self, live_windows: Sequence[LiveWindow]) -> None:
        seen: set[int] = set()
        for live in live_windows:
            seen.add(live.id)
            i = self._open_index(live.id)
            if i is None:
                self.state.windows.append(from_live_window(live))
            else:
                self.state.windows[i] = update_window(self.state.windows[i], live)

        for window in list(self.state.windows):
            if window.open and window.open_window_id not in seen:
                self._close_window(window.open_window_id)  # type: ignore[arg-type]

    def attach_folder(self, window_id: int, folder: BookmarkNode) -> None:
        i = self._open_index(window_id)
        if i is None:
            logger.warning("attach_folder: no open window %s", window_id)
            return
        saved = attach_saved_folder(self.state.windows[i], folder)
        self.state.windows[i] = saved

        stale = self.state.find(
            lambda w: w is not saved and not w.open and w.saved_folder_id == folder.id
        )
        if stale is not None:
            del self.state.windows[stale]

    def unsave_window(self, folder_id: str) -> None:
        i = self._saved_index(folder_id)
        if i is None:
            logger.warning("unsave_window: no saved window for folder %s", folder_id)
            return
        window = remove_saved_window_state(self.state.windows[i])
        if window.is_valid:
            self.state.windows[i] = window
        else:
            del self.state.windows[i]

    def apply_event(self, event: BackendEvent) -> None:
        if isinstance(event, WindowsChanged):
            self.sync_live_windows(event.windows)
        elif isinstance(event, WindowClosed):
            self._close_window(event.window_id)
        elif isinstance(event, TabClosed):
            self._update(event.window_id, lambda w: close_tab(w, event.tab_id))
        elif isinstance(event, TabActivated):
            self._update(event.window_id, lambda w: set_active_tab(w, event.tab_id))
        elif isinstance(event, TabUpdated):
            self._update(event.tab.window_id, lambda w: update_tab_item(w, event.tab))
        elif isinstance(event, TabSaved):
            self._update(event.window_id, lambda w: save_tab(w, event.tab_item, event.bookmark))
        elif isinstance(event, TabUnsaved):
            self._update(event.window_id, lambda w: unsave_tab(w, event.tab_item))
        else:
            logger.warning("Ignoring unknown event %r", event)

    async def refresh(self) -> None:
        if self.backend is None:
            logger.warning("refresh: no backend configured")
            return
        folders = await self.backend.saved_folders()
        live = await self.backend.live_windows()
        self.load_saved_folders(folders)
        self.sync_live_windows(live)

    async def run(self) -> None:
        if self.backend is None:
            logger.warning("run: no backend configured")
            return
        async for event in self.backend.events():
            self.apply_event(event)

    def _open_index(self, window_id: int) -> Optional[int]:
        return self.state.find(lambda w: w.open and w.open_window_id == window_id)

    def _saved_index(self, folder_id: str) -> Optional[int]:
        return self.state.find(lambda w: w.saved and w.saved_folder_id == folder_id)

    def _update(self, window_id: int, fn: Callable[[TabWindow], TabWindow]) -> None:
        i = self._open_index(window_id)
        if i is None:
            logger.warning("No open window %s", window_id)
            return
        self.state.windows[i] = fn(self.state.windows[i])

    def _close_window(self, window_id: int) -> None:
        i = self._open_index(window_id)
        if i is None:
            logger.warning("No open window %s to close", window_id)
            return
        window = self.state.windows[i]
        if window.saved:
            self.state.windows[i] = remove_open_window_state(window)
        else:
            del self.state.windows[i]
