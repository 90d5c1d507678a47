from __future__ import annotations

from tabsync.domain.construct import from_bookmark_folder, from_live_window
from tabsync.domain.models import BookmarkNode, LiveTab, LiveWindow, TabItem
from tabsync.domain.reconcile import (
    attach_saved_folder,
    reconcile,
    remove_open_window_state,
    remove_saved_window_state,
    update_window,
)


def _folder(*urls: str) -> BookmarkNode:
    return BookmarkNode(
        id="f1",
        title="Saved",
        children=[BookmarkNode(id=f"b{i}", index=i, title=u, url=u) for i, u in enumerate(urls)],
    )


def _tab(tab_id: int, url: str, index: int, active: bool = False) -> LiveTab:
    return LiveTab(id=tab_id, index=index, window_id=1, url=url, title=url, active=active)


def _assert_ordered(items: tuple[TabItem, ...]) -> None:
    open_flags = [ti.open for ti in items]
    assert open_flags == sorted(open_flags, reverse=True)
    open_idx = [ti.open_state.open_tab_index for ti in items if ti.open_state]
    closed_idx = [ti.saved_state.bookmark_index for ti in items if not ti.open and ti.saved_state]
    assert open_idx == sorted(open_idx)
    assert closed_idx == sorted(closed_idx)


def test_saved_tab_merges_with_matching_live_tab() -> None:
    prior = from_bookmark_folder(_folder("https://a.com"))
    saved_state = prior.tab_items[0].saved_state

    merged = reconcile(
        prior.tab_items,
        [_tab(7, "https://a.com", 0, active=True), _tab(8, "https://b.com", 1)],
    )

    assert [ti.url for ti in merged] == ["https://a.com", "https://b.com"]
    assert merged[0].open and merged[0].saved
    assert merged[0].saved_state == saved_state
    assert merged[0].open_state.open_tab_id == 7
    assert merged[1].open and not merged[1].saved


def test_unmatched_saved_tab_stays_closed() -> None:
    prior = from_bookmark_folder(_folder("https://a.com"))
    merged = reconcile(prior.tab_items, [_tab(8, "https://b.com", 0)])

    assert [(ti.url, ti.open, ti.saved) for ti in merged] == [
        ("https://b.com", True, False),
        ("https://a.com", False, True),
    ]
    assert merged[1].saved_state == prior.tab_items[0].saved_state


def test_no_live_tabs_closes_everything() -> None:
    prior = from_bookmark_folder(_folder("https://a.com", "https://b.com"))
    merged = reconcile(prior.tab_items, [])
    assert merged == prior.tab_items


def test_output_is_partitioned_and_sorted() -> None:
    prior = from_bookmark_folder(_folder("https://c.com", "https://a.com", "https://d.com"))
    merged = reconcile(
        prior.tab_items,
        [_tab(3, "https://x.com", 2), _tab(1, "https://a.com", 0), _tab(2, "https://y.com", 1)],
    )
    _assert_ordered(merged)
    assert [ti.url for ti in merged] == [
        "https://a.com",
        "https://y.com",
        "https://x.com",
        "https://c.com",
        "https://d.com",
    ]


def test_live_tabs_sharing_a_url_share_one_saved_state() -> None:
    prior = from_bookmark_folder(_folder("https://a.com"))
    merged = reconcile(prior.tab_items, [_tab(1, "https://a.com", 0), _tab(2, "https://a.com", 1)])
    assert len(merged) == 2
    assert merged[0].saved_state == merged[1].saved_state == prior.tab_items[0].saved_state


def test_prior_open_state_is_discarded() -> None:
    window = from_live_window(LiveWindow(id=1, tabs=[_tab(1, "https://a.com", 0, active=True)]))
    merged = reconcile(window.tab_items, [_tab(2, "https://b.com", 0)])
    # open-only items from the prior state are not carried over
    assert [ti.url for ti in merged] == ["https://b.com"]


def test_round_trip_is_noop_on_content() -> None:
    live = LiveWindow(id=4, tabs=[_tab(1, "https://a.com", 0, active=True), _tab(2, "https://b.com", 1)])
    window = from_live_window(live)
    updated = update_window(window, live)
    assert updated.tab_items == window.tab_items


def test_update_window_keeps_saved_facets() -> None:
    saved = from_bookmark_folder(_folder("https://a.com"))
    live = LiveWindow(id=9, type="normal", tabs=[_tab(1, "https://a.com", 0, active=True)])
    updated = update_window(saved, live)

    assert updated.open and updated.saved
    assert updated.open_window_id == 9
    assert updated.window_type == "normal"
    assert updated.saved_title == "Saved"
    assert updated.saved_folder_id == "f1"
    assert saved.open is False


def test_update_window_without_tab_list() -> None:
    saved = from_bookmark_folder(_folder("https://a.com"))
    updated = update_window(saved, LiveWindow(id=2))
    assert updated.open
    assert [ti.open for ti in updated.tab_items] == [False]


def test_remove_open_window_state_keeps_saved_items_only() -> None:
    saved = from_bookmark_folder(_folder("https://a.com"))
    live = LiveWindow(id=9, tabs=[_tab(1, "https://a.com", 0, active=True), _tab(2, "https://b.com", 1)])
    closed = remove_open_window_state(update_window(saved, live))

    assert not closed.open
    assert closed.open_window_id is None
    assert closed.tab_items == saved.tab_items


def test_remove_saved_window_state_prunes_closed_items() -> None:
    saved = from_bookmark_folder(_folder("https://a.com", "https://b.com"))
    live = LiveWindow(id=9, tabs=[_tab(1, "https://a.com", 0, active=True)])
    unsaved = remove_saved_window_state(update_window(saved, live))

    assert not unsaved.saved
    assert unsaved.saved_folder_id is None
    assert [(ti.url, ti.open, ti.saved) for ti in unsaved.tab_items] == [("https://a.com", True, False)]


def test_attach_saved_folder_marks_open_tabs_saved() -> None:
    window = from_live_window(
        LiveWindow(id=3, tabs=[_tab(1, "https://a.com", 0, active=True), _tab(2, "https://b.com", 1)])
    )
    attached = attach_saved_folder(window, _folder("https://a.com", "https://b.com"))

    assert attached.saved and attached.open
    assert attached.saved_folder_id == "f1"
    assert attached.title == "Saved"
    assert [ti.saved_state.bookmark_id for ti in attached.tab_items] == ["b0", "b1"]
    assert not window.saved
