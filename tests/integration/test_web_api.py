"""Tests for the web API (FastAPI TestClient over an isolated catalog)."""
import time

import pytest

from wsrecall.__version__ import __version__

pytestmark = pytest.mark.integration

HISTORY = [
    {"folderUri": "vscode-remote://wsl%2Bubuntu/home/me/api"},
    {"folderUri": "file:///c%3A/code/web"},
]


def synced_client(web_client, make_state_db, **kwargs):
    client = web_client(state_db=make_state_db(HISTORY), **kwargs)
    response = client.post("/api/sync")
    assert response.status_code == 200
    assert response.json() == {"synced": 2}
    return client


def workspace_id(client, **params):
    return client.get("/api/workspaces", params=params).json()["workspaces"][0]["id"]


def test_version(web_client):
    response = web_client().get("/api/version")
    assert response.status_code == 200
    assert response.json() == {"version": __version__}


def test_distributions(web_client):
    response = web_client(distributions=["Ubuntu", "Debian"]).get("/api/system/distributions")
    assert response.json() == {"distributions": ["Ubuntu", "Debian"]}


def test_resolve(web_client):
    client = web_client(distributions=["Ubuntu"])
    response = client.post("/api/resolve", json={"reference": "\\\\wsl$\\ubuntu\\home\\user\\proj"})

    assert response.status_code == 200
    data = response.json()
    assert data["location"]["kind"] == "wsl"
    assert data["target"]["uri"] == "vscode-remote://wsl+Ubuntu/home/user/proj"


def test_resolve_workspace_file(web_client):
    client = web_client(distributions=["Ubuntu"])
    response = client.post("/api/resolve", json={
        "reference": "\\\\wsl$\\wsl%2Bubuntu\\root\\next-chat\\workspace.code-workspace",
        "is_workspace_file": True,
    })
    assert response.json()["target"]["uri"] == "file:///root/next-chat/workspace.code-workspace"


def test_list_and_filter(web_client, make_state_db):
    client = synced_client(web_client, make_state_db)

    data = client.get("/api/workspaces").json()
    assert data["total_count"] == 2
    assert data["total_pages"] == 1

    local = client.get("/api/workspaces", params={"location": "local"}).json()
    assert [w["path"] for w in local["workspaces"]] == ["c:/code/web"]

    paged = client.get("/api/workspaces", params={"page": 2, "page_size": 1}).json()
    assert len(paged["workspaces"]) == 1
    assert paged["total_pages"] == 2


def test_invalid_filter_value(web_client):
    response = web_client().get("/api/workspaces", params={"location": "moon"})
    assert response.status_code == 422


def test_get_unknown_workspace(web_client):
    assert web_client().get("/api/workspaces/nope").status_code == 404


def test_open(web_client, make_state_db):
    client = synced_client(web_client, make_state_db, distributions=["Ubuntu"])
    ws_id = workspace_id(client, location="wsl")

    response = client.post(f"/api/workspaces/{ws_id}/open", json={"new_window": True})
    assert response.status_code == 200
    data = response.json()
    assert data["target"]["uri"] == "vscode-remote://wsl+Ubuntu/home/me/api"
    assert data["command"][:2] == ["code", "-n"]


def test_open_dry_run_without_body(web_client, make_state_db):
    client = synced_client(web_client, make_state_db)
    ws_id = workspace_id(client, location="local")

    response = client.post(f"/api/workspaces/{ws_id}/open")
    assert response.status_code == 200
    assert response.json()["dry_run"] is False

    response = client.post(f"/api/workspaces/{ws_id}/open", json={"dry_run": True})
    assert response.json()["dry_run"] is True


def test_open_failure_returns_guidance(web_client, make_state_db):
    client = synced_client(web_client, make_state_db, distributions=["Ubuntu"], editor_fails=True)
    ws_id = workspace_id(client, location="wsl")

    response = client.post(f"/api/workspaces/{ws_id}/open")
    assert response.status_code == 502
    body = response.json()
    assert "could not resolve authority" in body["detail"]
    assert "WSL extension" in body["guidance"]


def test_open_unknown_workspace(web_client):
    assert web_client().post("/api/workspaces/nope/open").status_code == 404


def test_patch_and_delete(web_client, make_state_db):
    client = synced_client(web_client, make_state_db)
    ws_id = workspace_id(client, location="local")

    response = client.patch(f"/api/workspaces/{ws_id}", json={
        "is_favorite": True,
        "tags": ["frontend"],
        "description": "Company site",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["is_favorite"] is True
    assert data["is_pinned"] is False
    assert data["tags"] == ["frontend"]

    favorites = client.get("/api/workspaces", params={"view": "favorites"}).json()
    assert favorites["total_count"] == 1

    assert client.delete(f"/api/workspaces/{ws_id}").status_code == 200
    assert client.delete(f"/api/workspaces/{ws_id}").status_code == 404
    assert client.patch(f"/api/workspaces/{ws_id}", json={"is_pinned": True}).status_code == 404


def test_tags(web_client):
    client = web_client()

    created = client.post("/api/tags", json={"name": "work", "color": "#123456"})
    assert created.status_code == 201
    assert created.json()["name"] == "work"

    assert client.post("/api/tags", json={"name": "Work"}).status_code == 409
    assert client.post("/api/tags", json={"name": "  "}).status_code == 400

    names = [t["name"] for t in client.get("/api/tags").json()["tags"]]
    assert "work" in names and "Python" in names


def test_delete_tag(web_client):
    client = web_client()
    tag_id = client.post("/api/tags", json={"name": "work"}).json()["id"]

    response = client.delete(f"/api/tags/{tag_id}")
    assert response.status_code == 200
    assert response.json() == {"removed": tag_id}
    assert client.delete(f"/api/tags/{tag_id}").status_code == 404

    system_tag = next(t for t in client.get("/api/tags").json()["tags"] if t["is_system"])
    assert client.delete(f"/api/tags/{system_tag['id']}").status_code == 400


def test_sync_with_unreadable_history(web_client, tmp_path):
    bad_db = tmp_path / "bad.vscdb"
    bad_db.write_bytes(b"not sqlite" * 200)
    response = web_client(state_db=bad_db).post("/api/sync")
    assert response.status_code == 500


def test_export_import(web_client, make_state_db):
    client = synced_client(web_client, make_state_db)
    exported = client.get("/api/export").json()
    assert len(exported["workspaces"]) == 2

    response = client.post("/api/import", json={"workspaces": exported["workspaces"][:1]})
    assert response.json() == {"imported": 1}
    assert client.get("/api/workspaces").json()["total_count"] == 1


def test_import_malformed_document_leaves_catalog(web_client, make_state_db):
    client = synced_client(web_client, make_state_db)
    valid = client.get("/api/export").json()["workspaces"][0]

    response = client.post(
        "/api/import",
        json={"workspaces": [valid, {"name": "no-id", "path": "/tmp/x"}], "tags": []},
    )
    assert response.status_code == 400
    assert client.get("/api/workspaces").json()["total_count"] == 2
    assert any(t["name"] == "Python" for t in client.get("/api/tags").json()["tags"])


def wait_for_total(client, expected, timeout=10.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        total = client.get("/api/workspaces").json()["total_count"]
        if total == expected:
            return total
        time.sleep(0.05)
    return total


def test_auto_sync_fills_catalog_on_startup(web_client, make_state_db):
    client = web_client(state_db=make_state_db(HISTORY), sync={"auto_sync": True, "interval_minutes": 60})
    assert wait_for_total(client, 2) == 2


def test_auto_sync_disabled_leaves_catalog_empty(web_client, make_state_db):
    client = web_client(state_db=make_state_db(HISTORY))
    time.sleep(0.2)
    assert client.get("/api/workspaces").json()["total_count"] == 0


def test_auto_sync_survives_unreadable_history(web_client, tmp_path):
    bad_db = tmp_path / "bad.vscdb"
    bad_db.write_bytes(b"not sqlite" * 200)
    client = web_client(state_db=bad_db, sync={"auto_sync": True, "interval_minutes": 0.001})
    time.sleep(0.3)
    assert client.get("/api/version").status_code == 200
