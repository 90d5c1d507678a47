from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Protocol

from tabsync.domain.models import BookmarkNode, LiveTab, LiveWindow, TabItem


@dataclass(frozen=True)
class BackendError(Exception):
    message: str

    def __str__(self) -> str:  # pragma: no cover
        return self.message


@dataclass(frozen=True)
class BackendEvent:
    pass


@dataclass(frozen=True)
class TabClosed(BackendEvent):
    window_id: int
    tab_id: int


@dataclass(frozen=True)
class TabActivated(BackendEvent):
    window_id: int
    tab_id: int


@dataclass(frozen=True)
class TabUpdated(BackendEvent):
    tab: LiveTab


@dataclass(frozen=True)
class TabSaved(BackendEvent):
    window_id: int
    tab_item: TabItem
    bookmark: BookmarkNode


@dataclass(frozen=True)
class TabUnsaved(BackendEvent):
    window_id: int
    tab_item: TabItem


@dataclass(frozen=True)
class WindowClosed(BackendEvent):
    window_id: int


@dataclass(frozen=True)
class WindowsChanged(BackendEvent):
    """Fresh snapshot of every live window, sent when windows open or tabs move."""

    windows: tuple[LiveWindow, ...]


class Backend(Protocol):
    async def live_windows(self) -> list[LiveWindow]: ...

    async def saved_folders(self) -> list[BookmarkNode]: ...

    def events(self) -> AsyncIterator[BackendEvent]: ...
