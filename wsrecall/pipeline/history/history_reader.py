"""Editor history source.

Reads VS Code's recently-opened list from the global ``state.vscdb`` and
turns it into raw workspace references, most recent first.
"""
from __future__ import annotations

import json
import os
import platform
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from wsrecall.shared.config.models import HistoryConfig
from wsrecall.shared.errors import HistoryReadError
from wsrecall.shared.io.paths import VSCODE_REMOTE_SCHEME, decode_file_uri, decode_remote_authority
from wsrecall.shared.logging.logger import get_logger
from wsrecall.shared.models.workspace import WorkspaceType

logger = get_logger(__name__)

RECENTLY_OPENED_KEY = "history.recentlyOpenedPathsList"


def default_state_db_path() -> Path:
    """Get the VS Code global state database path for the current platform."""
    system = platform.system()
    if system == "Windows":
        return Path(os.environ.get("APPDATA", "")) / "Code/User/globalStorage/state.vscdb"
    elif system == "Darwin":
        return Path.home() / "Library/Application Support/Code/User/globalStorage/state.vscdb"
    else:
        return Path.home() / ".config/Code/User/globalStorage/state.vscdb"


def decode_history_uri(uri: str) -> str:
    """Convert a URI from the history store into a workspace reference.

    file:///c%3A/code/app            -> c:/code/app
    file://wsl%24/Ubuntu/home/me     -> \\\\wsl$\\Ubuntu\\home\\me
    vscode-remote://wsl%2Bubuntu/x   -> vscode-remote://wsl+ubuntu/x
    """
    if uri.lower().startswith("file:"):
        return decode_file_uri(uri)
    if uri.startswith(VSCODE_REMOTE_SCHEME):
        return decode_remote_authority(uri)
    return uri


def recency_timestamp(rank: int, now: Optional[datetime] = None) -> datetime:
    """Relative timestamp for a history position (rank 0 = most recent)."""
    now = now or datetime.now(timezone.utc)
    return now - timedelta(minutes=rank)


@dataclass
class HistoryEntry:
    """One entry of the recently-opened list."""
    reference: str
    kind: WorkspaceType
    rank: int
    label: Optional[str] = None


def parse_history_entries(data: Dict[str, Any]) -> List[HistoryEntry]:
    """Parse the JSON value of ``history.recentlyOpenedPathsList``."""
    entries: List[HistoryEntry] = []
    for raw in data.get("entries", []):
        if not isinstance(raw, dict):
            continue

        workspace = raw.get("workspace")
        if isinstance(workspace, dict) and workspace.get("configPath"):
            uri, kind = workspace["configPath"], WorkspaceType.WORKSPACE
        elif raw.get("folderUri"):
            uri, kind = raw["folderUri"], WorkspaceType.FOLDER
            if "/.vscode/" in uri:
                continue
        elif raw.get("fileUri"):
            uri, kind = raw["fileUri"], WorkspaceType.FILE
        else:
            continue

        entries.append(HistoryEntry(
            reference=decode_history_uri(uri),
            kind=kind,
            rank=len(entries),
            label=raw.get("label"),
        ))
    return entries


class HistoryReader:
    """Reads recently opened workspaces from the editor's state database."""

    def __init__(self, config: Optional[HistoryConfig] = None):
        self.config = config or HistoryConfig()

    @property
    def db_path(self) -> Path:
        if self.config.state_db:
            return Path(self.config.state_db)
        return default_state_db_path()

    def read_raw(self) -> Optional[Dict[str, Any]]:
        """Load the raw JSON value, or None if there is no history yet.

        Raises:
            HistoryReadError: The database exists but cannot be queried or parsed
        """
        db_path = self.db_path
        if not db_path.exists():
            logger.info(f"[HISTORY] State database not found: {db_path}")
            return None

        try:
            conn = sqlite3.connect(f"{db_path.resolve().as_uri()}?mode=ro", uri=True)
            try:
                row = conn.execute(
                    "SELECT value FROM ItemTable WHERE key = ?", (RECENTLY_OPENED_KEY,)
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise HistoryReadError(f"Cannot read {db_path}: {e}") from e

        if not row or not row[0]:
            return None

        try:
            data = json.loads(row[0])
        except json.JSONDecodeError as e:
            raise HistoryReadError(f"Invalid history JSON in {db_path}: {e}") from e
        if not isinstance(data, dict):
            raise HistoryReadError(f"Unexpected history format in {db_path}")
        return data

    def read_entries(self) -> List[HistoryEntry]:
        """Recently opened entries, most recent first."""
        data = self.read_raw()
        if data is None:
            return []
        entries = parse_history_entries(data)
        logger.info(f"[HISTORY] Read {len(entries)} history entries from {self.db_path}")
        return entries
