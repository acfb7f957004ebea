"""Filtering for workspace listings."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from wsrecall.shared.models.workspace import WorkspaceFilter, WorkspaceItem, WorkspaceView

RECENT_WINDOW = timedelta(days=7)


def matches_search(item: WorkspaceItem, search_text: str) -> bool:
    needle = search_text.lower()
    haystack = [item.name, item.path, item.description or ""] + item.tags
    return any(needle in value.lower() for value in haystack)


def matches_view(item: WorkspaceItem, view: WorkspaceView, now: datetime) -> bool:
    if view == WorkspaceView.RECENT:
        return now - item.last_opened <= RECENT_WINDOW
    if view == WorkspaceView.FAVORITES:
        return item.is_favorite
    if view == WorkspaceView.PINNED:
        return item.is_pinned
    return True


def filter_workspaces(
    items: List[WorkspaceItem],
    flt: Optional[WorkspaceFilter] = None,
    now: Optional[datetime] = None,
) -> List[WorkspaceItem]:
    """Apply every non-empty criterion of ``flt``; order is preserved."""
    if flt is None:
        return list(items)
    now = now or datetime.now(timezone.utc)

    result = []
    for item in items:
        if flt.search_text and not matches_search(item, flt.search_text):
            continue
        if flt.tags and not any(tag in item.tags for tag in flt.tags):
            continue
        if flt.location is not None and item.location.kind != flt.location:
            continue
        if not matches_view(item, flt.view, now):
            continue
        if flt.types and item.type not in flt.types:
            continue
        if flt.favorites_only and not item.is_favorite:
            continue
        if flt.pinned_only and not item.is_pinned:
            continue
        result.append(item)
    return result
