from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Sequence

from tabsync.domain.construct import from_bookmark_folder, make_open_tab_item
from tabsync.domain.models import (
    BookmarkNode,
    LiveTab,
    LiveWindow,
    TabItem,
    TabWindow,
    reset_open_item,
    reset_saved_item,
)

logger = logging.getLogger(__name__)


def _group_by_url(items: Iterable[TabItem]) -> dict[str, list[TabItem]]:
    groups: dict[str, list[TabItem]] = {}
    for item in items:
        groups.setdefault(item.url, []).append(item)
    return groups


def merge_tab_items(
    open_items: Sequence[TabItem], prior_items: Sequence[TabItem]
) -> tuple[TabItem, ...]:
    """Merge open-only items with the saved items of a prior sequence by URL.

    When several open tabs share a URL they all get the saved state of the
    first saved item with that URL; any further saved items at that URL are
    absorbed. Open items come first ordered by tab index, then closed items
    ordered by bookmark index.
    """
    open_url_map = _group_by_url(open_items)

    # Only pick up open tab info from open_items, never from the prior state.
    base_saved_items = [reset_saved_item(ti) for ti in prior_items if ti.saved]
    saved_url_map = _group_by_url(base_saved_items)

    merged: dict[str, list[TabItem]] = dict(open_url_map)
    for url, saved_items in saved_url_map.items():
        matching_open = merged.get(url)
        if matching_open is None:
            merged[url] = saved_items
            continue
        if len(matching_open) > 1 or len(saved_items) > 1:
            logger.debug(
                "URL %s shared by %d open and %d saved tabs",
                url,
                len(matching_open),
                len(saved_items),
            )
        saved_state = saved_items[0].saved_state
        merged[url] = [replace(ti, saved_state=saved_state) for ti in matching_open]

    flat = [ti for items in merged.values() for ti in items]
    open_sorted = sorted(
        (ti for ti in flat if ti.open), key=lambda ti: ti.open_state.open_tab_index  # type: ignore[union-attr]
    )
    closed_sorted = sorted(
        (ti for ti in flat if not ti.open),
        key=lambda ti: ti.saved_state.bookmark_index,  # type: ignore[union-attr]
    )
    return tuple(open_sorted + closed_sorted)


def reconcile(
    prior_tab_items: Sequence[TabItem], live_tabs: Sequence[LiveTab]
) -> tuple[TabItem, ...]:
    live_items = [make_open_tab_item(tab) for tab in live_tabs]
    return merge_tab_items(live_items, prior_tab_items)


def update_window(tab_window: TabWindow, live_window: LiveWindow) -> TabWindow:
    """Update a window from a current snapshot of the live browser window."""
    merged = reconcile(tab_window.tab_items, live_window.tabs or ())
    return replace(
        tab_window,
        tab_items=merged,
        window_type=live_window.type,
        open=True,
        open_window_id=live_window.id,
    )


def remove_open_window_state(tab_window: TabWindow) -> TabWindow:
    """Reset a window to its base saved state after the window was closed."""
    saved_items = tuple(reset_saved_item(ti) for ti in tab_window.tab_items if ti.saved)
    return replace(
        tab_window,
        open=False,
        open_window_id=None,
        window_type="",
        tab_items=saved_items,
    )


def remove_saved_window_state(tab_window: TabWindow) -> TabWindow:
    """Drop all saved state, keeping only open tab and window state."""
    open_items = tuple(reset_open_item(ti) for ti in tab_window.tab_items if ti.open)
    return replace(
        tab_window,
        saved=False,
        saved_title="",
        saved_folder_id=None,
        tab_items=open_items,
    )


def attach_saved_folder(tab_window: TabWindow, folder: BookmarkNode) -> TabWindow:
    """Mark an open window as saved to the given bookmark folder."""
    folder_window = from_bookmark_folder(folder)
    open_items = [reset_open_item(ti) for ti in tab_window.tab_items if ti.open]
    return replace(
        tab_window,
        saved=True,
        saved_title=folder_window.saved_title,
        saved_folder_id=folder_window.saved_folder_id,
        tab_items=merge_tab_items(open_items, folder_window.tab_items),
    )
