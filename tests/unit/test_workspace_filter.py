"""Tests for workspace list filtering."""
from datetime import datetime, timedelta, timezone

import pytest

from wsrecall.shared.models.location import LocationKind
from wsrecall.shared.models.workspace import WorkspaceFilter, WorkspaceItem, WorkspaceType, WorkspaceView
from wsrecall.pipeline.catalog.workspace_filter import filter_workspaces
from wsrecall.resolver.location_classifier import classify

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def item(workspace_id, path, days_ago=0, **kwargs):
    return WorkspaceItem(
        id=workspace_id,
        name=kwargs.pop("name", workspace_id),
        path=path,
        type=kwargs.pop("type", WorkspaceType.FOLDER),
        location=classify(path),
        last_opened=NOW - timedelta(days=days_ago),
        **kwargs,
    )


@pytest.fixture
def items():
    return [
        item("api", "vscode-remote://wsl+Ubuntu/home/me/api", tags=["backend"], is_favorite=True),
        item("web", "c:/code/web", days_ago=10, description="Marketing site", is_pinned=True),
        item("infra", "vscode-remote://ssh-remote+devbox/srv/infra", days_ago=2, type=WorkspaceType.WORKSPACE),
    ]


def ids(result):
    return [w.id for w in result]


def test_no_filter_returns_everything(items):
    assert ids(filter_workspaces(items, None)) == ["api", "web", "infra"]
    assert ids(filter_workspaces(items, WorkspaceFilter(), NOW)) == ["api", "web", "infra"]


@pytest.mark.parametrize("text,expected", [
    ("API", ["api"]),
    ("marketing", ["web"]),
    ("backend", ["api"]),
    ("devbox", ["infra"]),
    ("nothing-matches", []),
])
def test_search_text(items, text, expected):
    assert ids(filter_workspaces(items, WorkspaceFilter(search_text=text), NOW)) == expected


def test_tags_match_any(items):
    result = filter_workspaces(items, WorkspaceFilter(tags=["backend", "other"]), NOW)
    assert ids(result) == ["api"]


def test_location(items):
    assert ids(filter_workspaces(items, WorkspaceFilter(location=LocationKind.REMOTE), NOW)) == ["infra"]
    assert ids(filter_workspaces(items, WorkspaceFilter(location=LocationKind.LOCAL), NOW)) == ["web"]


def test_views(items):
    assert ids(filter_workspaces(items, WorkspaceFilter(view=WorkspaceView.RECENT), NOW)) == ["api", "infra"]
    assert ids(filter_workspaces(items, WorkspaceFilter(view=WorkspaceView.FAVORITES), NOW)) == ["api"]
    assert ids(filter_workspaces(items, WorkspaceFilter(view=WorkspaceView.PINNED), NOW)) == ["web"]


def test_types_and_flags(items):
    assert ids(filter_workspaces(items, WorkspaceFilter(types=[WorkspaceType.WORKSPACE]), NOW)) == ["infra"]
    assert ids(filter_workspaces(items, WorkspaceFilter(favorites_only=True), NOW)) == ["api"]
    assert ids(filter_workspaces(items, WorkspaceFilter(pinned_only=True), NOW)) == ["web"]


def test_criteria_combine(items):
    flt = WorkspaceFilter(search_text="me", location=LocationKind.WSL, view=WorkspaceView.RECENT)
    assert ids(filter_workspaces(items, flt, NOW)) == ["api"]
