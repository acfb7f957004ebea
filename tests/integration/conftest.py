"""Shared test configuration and fixtures for integration tests."""

import json
import sqlite3
import subprocess
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml

import pytest

_project_root = Path(__file__).parent.parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from wsrecall.shared.config.config_loader import Config
from wsrecall.pipeline.context import build_context
from wsrecall.web.app import create_app

# Prints the given names the way `wsl -l -q` does (UTF-16-LE)
FAKE_WSL_SCRIPT = (
    "import sys; "
    "sys.stdout.buffer.write(''.join(n + '\\r\\n' for n in sys.argv[1:]).encode('utf-16-le'))"
)


def get_project_root() -> Path:
    """Get the project root directory."""
    return _project_root


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (subprocess CLI or web client)"
    )


@pytest.fixture
def make_state_db(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating a VS Code global state database with history entries."""
    def _make(entries: List[Dict[str, Any]]) -> Path:
        db_path = tmp_path / "state.vscdb"
        conn = sqlite3.connect(str(db_path))
        conn.execute("CREATE TABLE IF NOT EXISTS ItemTable (key TEXT UNIQUE ON CONFLICT REPLACE, value BLOB)")
        conn.execute(
            "INSERT INTO ItemTable (key, value) VALUES (?, ?)",
            ("history.recentlyOpenedPathsList", json.dumps({"entries": entries})),
        )
        conn.commit()
        conn.close()
        return db_path

    return _make


@pytest.fixture
def test_config_data(tmp_path: Path) -> Callable[..., Dict[str, Any]]:
    """Factory for isolated configuration dicts."""
    def _make(
        state_db: Optional[Path] = None,
        distributions: Optional[List[str]] = None,
        code_command: Optional[str] = None,
        sync: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        return {
            "history": {"state_db": str(state_db or tmp_path / "missing.vscdb")},
            "sync": {"auto_sync": False, **(sync or {})},
            "wsl": {
                "list_command": [sys.executable, "-c", FAKE_WSL_SCRIPT, *(distributions or [])],
                "timeout_seconds": 30,
            },
            "launch": {"code_command": code_command or "code", "timeout_seconds": 30},
            "storage": {"store_path": str(tmp_path / "store" / "wsrecall.db")},
            "logging": {"level": "INFO"},
        }

    return _make


@pytest.fixture
def make_test_config(tmp_path: Path, test_config_data) -> Callable[..., Path]:
    """Factory fixture to create per-test config files."""
    def _make_config(**kwargs) -> Path:
        config_path = tmp_path / "test_config.yaml"
        with open(config_path, "w") as f:
            yaml.dump(test_config_data(**kwargs), f)
        return config_path

    return _make_config


@pytest.fixture
def cli_runner() -> Callable[..., subprocess.CompletedProcess]:
    """CLI runner fixture for subprocess invocation."""
    def run_cli(*args: str, config_path: Path) -> subprocess.CompletedProcess:
        cmd = [sys.executable, str(get_project_root() / "run_cli.py"), "--config", str(config_path), *args]

        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            cwd=str(get_project_root()),
        )

    return run_cli


@pytest.fixture
def fake_editor_runner():
    """Records editor invocations; ``fail=True`` simulates a non-zero exit."""
    def _make(fail: bool = False):
        calls = []

        async def runner(command, timeout):
            calls.append(list(command))
            return (1, "could not resolve authority") if fail else (0, "")

        runner.calls = calls
        return runner

    return _make


@pytest.fixture
def web_client(test_config_data, fake_editor_runner):
    """Factory for a FastAPI TestClient over an isolated catalog."""
    clients = []

    def _make(
        state_db: Optional[Path] = None,
        distributions: Optional[List[str]] = None,
        editor_fails: bool = False,
        sync: Optional[Dict[str, Any]] = None,
    ):
        from fastapi.testclient import TestClient

        config = Config(test_config_data(state_db=state_db, distributions=distributions, sync=sync))
        context = build_context(config, editor_runner=fake_editor_runner(fail=editor_fails))
        client = TestClient(create_app(context=context))
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
