"""Single-event transitions applied to one TabWindow.

Each function returns a new TabWindow and leaves its arguments untouched.
A lookup that finds nothing is logged and returns the window unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional

from tabsync.domain.construct import make_open_tab_item, make_saved_tab_state
from tabsync.domain.models import (
    BookmarkNode,
    LiveTab,
    TabItem,
    TabWindow,
    reset_open_item,
    reset_saved_item,
)

logger = logging.getLogger(__name__)


def _find_entry(
    tab_window: TabWindow, pred: Callable[[TabItem], bool]
) -> Optional[tuple[int, TabItem]]:
    for i, item in enumerate(tab_window.tab_items):
        if pred(item):
            return i, item
    return None


def _find_open_tab(tab_window: TabWindow, tab_id: int) -> Optional[tuple[int, TabItem]]:
    return _find_entry(
        tab_window,
        lambda ti: ti.open_state is not None and ti.open_state.open_tab_id == tab_id,
    )


def _splice(
    items: tuple[TabItem, ...], index: int, delete: int, *insert: TabItem
) -> tuple[TabItem, ...]:
    return items[:index] + insert + items[index + delete :]


def close_tab(tab_window: TabWindow, tab_id: int) -> TabWindow:
    entry = _find_open_tab(tab_window, tab_id)
    if entry is None:
        logger.warning("close_tab: could not find closed tab id %s", tab_id)
        return tab_window
    index, item = entry

    if item.saved:
        items = _splice(tab_window.tab_items, index, 1, reset_saved_item(item))
    else:
        items = _splice(tab_window.tab_items, index, 1)
    return replace(tab_window, tab_items=items)


def save_tab(tab_window: TabWindow, tab_item: TabItem, node: BookmarkNode) -> TabWindow:
    """Attach saved state from a newly created bookmark to an open tab."""
    if tab_item.open_state is None:
        logger.warning("save_tab: tab item is not open: %s", tab_item.url)
        return tab_window
    entry = _find_open_tab(tab_window, tab_item.open_state.open_tab_id)
    if entry is None:
        logger.warning("save_tab: could not find tab id %s", tab_item.open_state.open_tab_id)
        return tab_window
    index, item = entry

    saved = replace(item, saved_state=make_saved_tab_state(node))
    return replace(tab_window, tab_items=_splice(tab_window.tab_items, index, 1, saved))


def unsave_tab(tab_window: TabWindow, tab_item: TabItem) -> TabWindow:
    """Drop the saved state of a tab whose bookmark was removed."""
    if tab_item.saved_state is None:
        logger.warning("unsave_tab: tab item is not saved: %s", tab_item.url)
        return tab_window
    bookmark_id = tab_item.saved_state.bookmark_id
    entry = _find_entry(
        tab_window,
        lambda ti: ti.saved_state is not None and ti.saved_state.bookmark_id == bookmark_id,
    )
    if entry is None:
        logger.warning("unsave_tab: could not find bookmark id %s", bookmark_id)
        return tab_window
    index, item = entry

    updated = reset_open_item(item)
    if updated.open:
        items = _splice(tab_window.tab_items, index, 1, updated)
    else:
        # neither open nor saved
        items = _splice(tab_window.tab_items, index, 1)
    return replace(tab_window, tab_items=items)


def set_active_tab(tab_window: TabWindow, tab_id: int) -> TabWindow:
    entry = _find_open_tab(tab_window, tab_id)
    if entry is None:
        logger.warning("set_active_tab: tab id not found: %s", tab_id)
        return tab_window
    index, item = entry
    if item.active:
        logger.debug("set_active_tab: tab %s was already active, ignoring", tab_id)
        return tab_window

    items = list(tab_window.tab_items)
    for i, other in enumerate(items):
        if other.active and other.open_state is not None:
            items[i] = replace(other, open_state=replace(other.open_state, active=False))

    items[index] = replace(item, open_state=replace(item.open_state, active=True))  # type: ignore[arg-type]
    return replace(tab_window, tab_items=tuple(items))


def update_tab_item(tab_window: TabWindow, tab: LiveTab) -> TabWindow:
    """Bring a new or existing tab up to date with the live tab state.

    An existing item is replaced wholesale, which drops any saved state it
    carried.
    """
    # TODO: a URL change on an existing tab should split it from its bookmark
    # or merge it with another saved item instead of replacing it.
    item = make_open_tab_item(tab)
    entry = _find_open_tab(tab_window, tab.id)

    if entry is None:
        index = max(0, min(tab.index, len(tab_window.tab_items)))
        items = _splice(tab_window.tab_items, index, 0, item)
    else:
        index, _ = entry
        logger.debug("update_tab_item: replacing tab %s at %d", tab.id, index)
        items = _splice(tab_window.tab_items, index, 1, item)
    return replace(tab_window, tab_items=items)
