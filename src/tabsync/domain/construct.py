from __future__ import annotations

import logging

from tabsync.domain.models import (
    BookmarkNode,
    LiveTab,
    LiveWindow,
    OpenTabState,
    SavedTabState,
    TabItem,
    TabWindow,
)

logger = logging.getLogger(__name__)


def make_saved_tab_state(node: BookmarkNode) -> SavedTabState:
    url = node.url or ""
    if not url:
        logger.warning("Malformed bookmark %s: missing URL", node.id)
    return SavedTabState(
        bookmark_id=node.id,
        bookmark_index=node.index,
        title=node.title if node.title is not None else url,
        url=url,
    )


def make_open_tab_state(tab: LiveTab) -> OpenTabState:
    url = tab.url or ""
    if not url:
        logger.warning("No URL for tab %s", tab.id)
    return OpenTabState(
        url=url,
        open_tab_id=tab.id,
        active=tab.active,
        open_tab_index=tab.index,
        fav_icon_url=tab.fav_icon_url or "",
        title=tab.title if tab.title is not None else url,
        audible=tab.audible,
    )


def make_open_tab_item(tab: LiveTab) -> TabItem:
    return TabItem(open_state=make_open_tab_state(tab))


def from_bookmark(node: BookmarkNode) -> TabItem:
    """Build a closed, saved-only item from a bookmark."""
    return TabItem(saved_state=make_saved_tab_state(node))


def from_bookmark_folder(folder: BookmarkNode) -> TabWindow:
    """Build a closed, saved window from a bookmark folder.

    Sub-folders are ignored; only children carrying a URL become tab items.
    """
    children = folder.children or ()
    tab_items = tuple(from_bookmark(node) for node in children if node.url is not None)

    title = folder.title
    if title is None:
        logger.error("Malformed bookmark folder %s: missing title", folder.id)
        title = tab_items[0].title if tab_items else ""

    return TabWindow(
        saved=True,
        saved_title=title,
        saved_folder_id=folder.id,
        tab_items=tab_items,
    )


def from_live_window(window: LiveWindow) -> TabWindow:
    """Build an open, unsaved window from a live browser window."""
    tabs = window.tabs or ()
    return TabWindow(
        open=True,
        open_window_id=window.id,
        window_type=window.type,
        tab_items=tuple(make_open_tab_item(tab) for tab in tabs),
    )
