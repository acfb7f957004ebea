"""Pytest fixtures for wsrecall unit tests.

- fake_wsl_runner: stands in for ``wsl -l -q`` (UTF-16-LE output)
- fake_editor_runner: records editor invocations instead of launching
- make_state_db: synthetic VS Code ``state.vscdb`` with a recently-opened list
- make_config / app_context: isolated configuration and component wiring
"""
import json
import sqlite3
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add project root to sys.path for proper imports
# tests/unit/conftest.py -> parent.parent.parent = project root
_project_root = Path(__file__).parent.parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest

from wsrecall.shared.config.config_loader import Config
from wsrecall.pipeline.context import build_context
from wsrecall.resolver.distribution_validator import DistributionQueryError


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (subprocess CLI or web client)"
    )


def encode_wsl_list(names: List[str]) -> bytes:
    """Encode distribution names the way ``wsl -l -q`` prints them."""
    return "".join(f"{name}\r\n" for name in names).encode("utf-16-le")


@pytest.fixture
def fake_wsl_runner():
    """Factory for async runners replacing the ``wsl -l -q`` subprocess.

    ``fake_wsl_runner(["Ubuntu"])`` reports Ubuntu installed;
    ``fake_wsl_runner(fail=True)`` behaves like a missing ``wsl`` executable.
    Every runner records its calls in ``runner.calls``.
    """
    def _make(names: Optional[List[str]] = None, fail: bool = False, raw: Optional[bytes] = None):
        calls = []

        async def runner(command, timeout):
            calls.append((list(command), timeout))
            if fail:
                raise DistributionQueryError("wsl not found")
            if raw is not None:
                return raw
            return encode_wsl_list(names or [])

        runner.calls = calls
        return runner

    return _make


@pytest.fixture
def fake_editor_runner():
    """Factory for async runners replacing the editor subprocess.

    ``fake_editor_runner(returncode=1, stderr="boom")`` simulates a failed
    launch; ``fake_editor_runner(error=FileNotFoundError())`` a missing editor.
    """
    def _make(returncode: int = 0, stderr: str = "", error: Optional[BaseException] = None):
        calls = []

        async def runner(command, timeout):
            calls.append(list(command))
            if error is not None:
                raise error
            return returncode, stderr

        runner.calls = calls
        return runner

    return _make


@pytest.fixture
def make_state_db(tmp_path):
    """Factory creating a VS Code global state database.

    Args:
        entries: Raw ``history.recentlyOpenedPathsList`` entries
        value: Raw stored value (overrides ``entries``), e.g. invalid JSON
    """
    def _make(entries: Optional[List[Dict[str, Any]]] = None, value: Optional[str] = None) -> Path:
        db_path = tmp_path / "globalStorage" / "state.vscdb"
        db_path.parent.mkdir(parents=True, exist_ok=True)
        if value is None:
            value = json.dumps({"entries": entries or []})

        conn = sqlite3.connect(str(db_path))
        conn.execute("CREATE TABLE IF NOT EXISTS ItemTable (key TEXT UNIQUE ON CONFLICT REPLACE, value BLOB)")
        conn.execute(
            "INSERT INTO ItemTable (key, value) VALUES (?, ?)",
            ("history.recentlyOpenedPathsList", value),
        )
        conn.commit()
        conn.close()
        return db_path

    return _make


@pytest.fixture
def make_config(tmp_path):
    """Factory for an isolated in-memory Config."""
    def _make(**sections: Dict[str, Any]) -> Config:
        data: Dict[str, Any] = {
            "history": {"state_db": str(tmp_path / "missing.vscdb")},
            "storage": {"store_path": str(tmp_path / "store" / "wsrecall.db")},
        }
        for name, values in sections.items():
            data.setdefault(name, {}).update(values)
        return Config(data)

    return _make


@pytest.fixture
def app_context(make_config, fake_wsl_runner, fake_editor_runner):
    """Fully wired components with Ubuntu installed and a succeeding editor."""
    return build_context(
        make_config(),
        wsl_runner=fake_wsl_runner(["Ubuntu", "Debian"]),
        editor_runner=fake_editor_runner(),
    )
