"""
Catalog storage on a flat SQLite key-value table.

Mirrors the editor's own ``state.vscdb`` layout: one ``ItemTable`` of
``(key, value)`` rows where every value is a JSON document.
"""

import json
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from wsrecall.__version__ import __version__
from wsrecall.shared.errors import ImportDataError
from wsrecall.shared.logging.logger import get_logger
from wsrecall.shared.models.workspace import SYSTEM_TAGS, Tag, WorkspaceItem

logger = get_logger(__name__)

WORKSPACES_KEY = "workspaces"
TAGS_KEY = "tags"


def connect_store(db_path: Path) -> sqlite3.Connection:
    """Connect to the catalog database, creating it and its table if needed."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    is_new = not db_path.exists()

    conn = sqlite3.connect(str(db_path))
    conn.execute("CREATE TABLE IF NOT EXISTS ItemTable (key TEXT PRIMARY KEY, value TEXT)")
    conn.commit()

    if is_new:
        logger.info(f"[STORE] Initialized new catalog: {db_path}")
    return conn


class WorkspaceStore:
    """Key-value persistence for workspaces and tags.

    Each call opens and closes its own connection so the store can be shared
    between CLI handlers and web requests without connection state.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._seed_system_tags()

    # -------------------- raw key-value access --------------------

    def _get(self, key: str, default: Any) -> Any:
        conn = connect_store(self.db_path)
        try:
            row = conn.execute("SELECT value FROM ItemTable WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        if not row or row[0] is None:
            return default
        return json.loads(row[0])

    def _put(self, key: str, value: Any) -> None:
        self._put_many({key: value})

    def _put_many(self, values: Dict[str, Any]) -> None:
        """Write several keys in one transaction."""
        conn = connect_store(self.db_path)
        try:
            conn.executemany(
                "INSERT OR REPLACE INTO ItemTable (key, value) VALUES (?, ?)",
                [(key, json.dumps(value)) for key, value in values.items()],
            )
            conn.commit()
        finally:
            conn.close()

    # -------------------- workspaces --------------------

    def get_workspaces(self) -> List[WorkspaceItem]:
        return [WorkspaceItem.from_dict(d) for d in self._get(WORKSPACES_KEY, [])]

    def save_workspaces(self, workspaces: List[WorkspaceItem]) -> None:
        self._put(WORKSPACES_KEY, [w.to_dict() for w in workspaces])

    def get_workspace(self, workspace_id: str) -> Optional[WorkspaceItem]:
        return next((w for w in self.get_workspaces() if w.id == workspace_id), None)

    def save_workspace(self, workspace: WorkspaceItem) -> None:
        """Add or replace a workspace by id."""
        workspaces = self.get_workspaces()
        for i, existing in enumerate(workspaces):
            if existing.id == workspace.id:
                workspaces[i] = workspace
                break
        else:
            workspaces.append(workspace)
        self.save_workspaces(workspaces)

    def remove_workspace(self, workspace_id: str) -> bool:
        workspaces = self.get_workspaces()
        remaining = [w for w in workspaces if w.id != workspace_id]
        self.save_workspaces(remaining)
        return len(remaining) != len(workspaces)

    # -------------------- tags --------------------

    def get_tags(self) -> List[Tag]:
        return [Tag.from_dict(d) for d in self._get(TAGS_KEY, [])]

    def save_tags(self, tags: List[Tag]) -> None:
        self._put(TAGS_KEY, [t.to_dict() for t in tags])

    def save_tag(self, tag: Tag) -> None:
        tags = self.get_tags()
        for i, existing in enumerate(tags):
            if existing.id == tag.id:
                tags[i] = tag
                break
        else:
            tags.append(tag)
        self.save_tags(tags)

    def remove_tag(self, tag_id: str) -> bool:
        tags = self.get_tags()
        remaining = [t for t in tags if t.id != tag_id]
        self.save_tags(remaining)
        return len(remaining) != len(tags)

    def increment_tag_usage(self, tag_name: str) -> None:
        tags = self.get_tags()
        for tag in tags:
            if tag.name == tag_name:
                tag.usage_count += 1
                self.save_tags(tags)
                return

    def _seed_system_tags(self) -> None:
        """Add any system tag that is not in the store yet."""
        tags = self.get_tags()
        present = {t.name.lower() for t in tags if t.is_system}
        missing = [
            Tag(id=str(uuid.uuid4()), name=info.name, description=info.description, is_system=True)
            for info in SYSTEM_TAGS.values()
            if info.name.lower() not in present
        ]
        if missing:
            self.save_tags(tags + missing)

    # -------------------- export / import --------------------

    def export_data(self) -> Dict[str, Any]:
        return {
            "workspaces": [w.to_dict() for w in self.get_workspaces()],
            "tags": [t.to_dict() for t in self.get_tags()],
            "export_date": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
        }

    def import_data(self, data: Dict[str, Any]) -> None:
        """Replace workspaces and/or tags with an exported document.

        Every record is parsed before anything is written, and both lists are
        saved in one transaction.

        Raises:
            ImportDataError: The document or one of its records is malformed
        """
        if not isinstance(data, dict):
            raise ImportDataError("Export document must be a JSON object")

        values: Dict[str, Any] = {}
        if "workspaces" in data:
            workspaces = _parse_records(data["workspaces"], WorkspaceItem, "workspace")
            values[WORKSPACES_KEY] = [w.to_dict() for w in workspaces]
        if "tags" in data:
            tags = _parse_records(data["tags"], Tag, "tag")
            values[TAGS_KEY] = [t.to_dict() for t in tags]

        if values:
            self._put_many(values)
        self._seed_system_tags()


def _parse_records(records: Any, model: Any, label: str) -> List[Any]:
    if not isinstance(records, list):
        raise ImportDataError(f"'{label}s' must be a list")

    parsed = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ImportDataError(f"{label} #{index} is not an object")
        try:
            parsed.append(model.from_dict(record))
        except KeyError as e:
            raise ImportDataError(f"{label} #{index} is missing field {e}") from e
        except (TypeError, ValueError) as e:
            raise ImportDataError(f"{label} #{index} is invalid: {e}") from e
    return parsed
