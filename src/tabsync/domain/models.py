from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SavedTabState:
    """Tab state persisted as a bookmark."""

    bookmark_id: str
    bookmark_index: int = 0
    title: str = ""
    url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "bookmark_id": self.bookmark_id,
            "bookmark_index": self.bookmark_index,
            "title": self.title,
            "url": self.url,
        }


@dataclass(frozen=True)
class OpenTabState:
    """Tab state of a tab currently open in the browser."""

    url: str
    open_tab_id: int
    active: bool = False
    open_tab_index: int = 0
    fav_icon_url: str = ""
    title: str = ""
    audible: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "open_tab_id": self.open_tab_id,
            "active": self.active,
            "open_tab_index": self.open_tab_index,
            "fav_icon_url": self.fav_icon_url,
            "title": self.title,
            "audible": self.audible,
        }


@dataclass(frozen=True)
class TabItem:
    """A logical tab, backed by an open tab, a bookmark, or both.

    ``saved`` and ``open`` are derived from which facets are present, so the
    flag and its payload can never disagree. An item with neither facet is
    logically deleted and must not stay in a window.
    """

    saved_state: Optional[SavedTabState] = None
    open_state: Optional[OpenTabState] = None

    @property
    def saved(self) -> bool:
        return self.saved_state is not None

    @property
    def open(self) -> bool:
        return self.open_state is not None

    @property
    def url(self) -> str:
        if self.open_state is not None:
            return self.open_state.url
        if self.saved_state is not None:
            return self.saved_state.url
        return ""

    @property
    def title(self) -> str:
        if self.open_state is not None:
            return self.open_state.title
        if self.saved_state is not None:
            return self.saved_state.title
        return ""

    @property
    def active(self) -> bool:
        return self.open_state is not None and self.open_state.active

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "saved": self.saved,
            "saved_state": self.saved_state.to_dict() if self.saved_state else None,
            "open": self.open,
            "open_state": self.open_state.to_dict() if self.open_state else None,
        }


def reset_saved_item(item: TabItem) -> TabItem:
    """Return the base saved state of an item (no open tab info)."""
    return replace(item, open_state=None)


def reset_open_item(item: TabItem) -> TabItem:
    """Return the base open state of an item (no saved tab info)."""
    return replace(item, saved_state=None)


@dataclass(frozen=True)
class TabWindow:
    """A logical window: open/saved metadata plus an ordered tuple of items.

    Valid states are (open, not saved), (open, saved) and (not open, saved).
    """

    saved: bool = False
    saved_title: str = ""
    saved_folder_id: Optional[str] = None

    open: bool = False
    open_window_id: Optional[int] = None
    window_type: str = ""

    tab_items: tuple[TabItem, ...] = ()

    @property
    def title(self) -> str:
        if self.saved:
            return self.saved_title

        active = next((ti for ti in self.tab_items if ti.active), None)
        if active is not None:
            return active.title

        logger.warning("No active tab found in window %s", self.open_window_id)
        first_open = next((ti for ti in self.tab_items if ti.open), None)
        if first_open is None:
            return ""
        return first_open.title

    @property
    def open_tab_count(self) -> int:
        return sum(1 for ti in self.tab_items if ti.open)

    @property
    def is_valid(self) -> bool:
        return self.open or self.saved

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "saved": self.saved,
            "saved_title": self.saved_title,
            "saved_folder_id": self.saved_folder_id,
            "open": self.open,
            "open_window_id": self.open_window_id,
            "window_type": self.window_type,
            "tab_items": [ti.to_dict() for ti in self.tab_items],
        }


@dataclass(frozen=True)
class BookmarkNode:
    """A bookmark tree node. Folders carry ``children`` and no ``url``."""

    id: str
    index: int = 0
    title: Optional[str] = None
    url: Optional[str] = None
    children: Optional[Sequence["BookmarkNode"]] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> BookmarkNode:
        children = data.get("children")
        return cls(
            id=str(data.get("id", "")),
            index=int(data.get("index") or 0),
            title=data.get("title"),
            url=data.get("url"),
            children=(
                tuple(cls.from_mapping(child) for child in children)
                if children is not None
                else None
            ),
        )


@dataclass(frozen=True)
class LiveTab:
    id: int
    index: int = 0
    window_id: int = -1
    url: Optional[str] = None
    title: Optional[str] = None
    fav_icon_url: Optional[str] = None
    active: bool = False
    audible: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> LiveTab:
        return cls(
            id=int(data.get("id", -1)),
            index=int(data.get("index") or 0),
            window_id=int(data.get("windowId", -1)),
            url=data.get("url"),
            title=data.get("title"),
            fav_icon_url=data.get("favIconUrl"),
            active=bool(data.get("active", False)),
            audible=bool(data.get("audible", False)),
        )


@dataclass(frozen=True)
class LiveWindow:
    id: int
    type: str = "normal"
    tabs: Optional[Sequence[LiveTab]] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> LiveWindow:
        tabs = data.get("tabs")
        return cls(
            id=int(data.get("id", -1)),
            type=str(data.get("type", "normal")),
            tabs=tuple(LiveTab.from_mapping(t) for t in tabs) if tabs is not None else None,
        )
