from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from rapidfuzz.fuzz import WRatio

from tabsync.domain.models import TabItem, TabWindow


@dataclass(frozen=True)
class FilteredTabWindow:
    tab_window: TabWindow
    item_matches: tuple[TabItem, ...]
    title_match: bool
    score: float


def _normalize(query: str) -> str:
    return query.strip().lower()


def _candidate_text(item: TabItem) -> str:
    parts = [item.title, item.url]
    return " ".join(p for p in parts if p).lower()


def _score(q: str, text: str, min_score: float) -> float:
    if not text:
        return 0.0
    if q in text:
        return 100.0 + (10.0 if text.startswith(q) else 0.0)
    score = float(WRatio(q, text))
    return score if score >= min_score else 0.0


def filter_tab_windows(
    windows: Sequence[TabWindow], query: str, min_score: float = 40.0
) -> list[FilteredTabWindow]:
    q = _normalize(query)
    if not q:
        return [
            FilteredTabWindow(tab_window=w, item_matches=w.tab_items, title_match=False, score=0.0)
            for w in windows
        ]

    scored: list[tuple[int, FilteredTabWindow]] = []
    for position, window in enumerate(windows):
        title_score = _score(q, window.title.lower(), min_score)
        matches: list[TabItem] = []
        best = title_score
        for item in window.tab_items:
            item_score = _score(q, _candidate_text(item), min_score)
            if item_score > 0.0:
                matches.append(item)
                best = max(best, item_score)
        if not matches and title_score == 0.0:
            continue
        scored.append(
            (
                position,
                FilteredTabWindow(
                    tab_window=window,
                    item_matches=tuple(matches),
                    title_match=title_score > 0.0,
                    score=best,
                ),
            )
        )

    scored.sort(key=lambda x: (-x[1].score, x[0]))
    return [s for _, s in scored]
