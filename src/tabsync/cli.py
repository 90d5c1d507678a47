from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from tabsync.domain.construct import from_bookmark_folder, from_live_window
from tabsync.domain.models import BookmarkNode, LiveWindow, TabWindow
from tabsync.domain.reconcile import update_window
from tabsync.domain.search import filter_tab_windows


def _print_error(message: str) -> None:
    print(f"tabsync: {message}", file=sys.stderr)


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        _print_error(f"cannot read {path}: {e}")
        raise SystemExit(1)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tabsync",
        description="Reconcile a live browser window snapshot with its saved bookmark folder.",
    )
    parser.add_argument("window", type=Path, help="JSON snapshot of a live window (with tabs)")
    parser.add_argument("--bookmarks", type=Path, help="JSON bookmark folder the window is saved to")
    parser.add_argument("--query", default="", help="only print tabs matching this query")
    parser.add_argument("--indent", type=int, default=2)
    parser.add_argument("-v", "--verbose", action="store_true", help="log diagnostics")
    return parser


def build_window(window_data: Any, folder_data: Optional[Any] = None) -> TabWindow:
    if not isinstance(window_data, dict):
        raise ValueError("window snapshot must be a JSON object")
    live = LiveWindow.from_mapping(window_data)
    if folder_data is None:
        return from_live_window(live)
    if not isinstance(folder_data, dict):
        raise ValueError("bookmark folder must be a JSON object")
    return update_window(from_bookmark_folder(BookmarkNode.from_mapping(folder_data)), live)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    window_data = _load_json(args.window)
    folder_data = _load_json(args.bookmarks) if args.bookmarks else None
    try:
        window = build_window(window_data, folder_data)
    except (TypeError, ValueError) as e:
        _print_error(str(e))
        raise SystemExit(1)

    out = window.to_dict()
    if args.query:
        matches = filter_tab_windows([window], args.query)
        out["tab_items"] = [ti.to_dict() for m in matches for ti in m.item_matches]
    print(json.dumps(out, indent=args.indent))
