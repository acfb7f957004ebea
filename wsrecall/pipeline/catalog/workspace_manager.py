"""
Workspace manager.

Catalog operations shared by the CLI and the web API: listing, opening and
editing workspaces, and managing tags.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from wsrecall.shared.errors import DuplicateTagError, TagNotFoundError, WorkspaceNotFoundError
from wsrecall.shared.logging.logger import get_logger
from wsrecall.shared.models.dataclass_mixin import DataclassIO
from wsrecall.shared.models.location import LaunchTarget, ResolvedLocation
from wsrecall.shared.models.workspace import Tag, WorkspaceFilter, WorkspaceItem
from wsrecall.shared.storage.workspace_store import WorkspaceStore
from wsrecall.pipeline.catalog.workspace_filter import filter_workspaces
from wsrecall.pipeline.launch.launcher import WorkspaceLauncher

logger = get_logger(__name__)


@dataclass
class OpenResult(DataclassIO):
    """Outcome of opening a workspace."""
    workspace_id: str
    location: ResolvedLocation
    target: LaunchTarget
    command: List[str]
    dry_run: bool = False


class WorkspaceManager:
    def __init__(self, store: WorkspaceStore, launcher: WorkspaceLauncher):
        self.store = store
        self.launcher = launcher

    # -------------------- queries --------------------

    def get_workspaces(self, flt: Optional[WorkspaceFilter] = None) -> List[WorkspaceItem]:
        """Workspaces matching ``flt``: pinned first, then most recently opened."""
        items = filter_workspaces(self.store.get_workspaces(), flt)
        items.sort(key=lambda w: w.last_opened, reverse=True)
        items.sort(key=lambda w: not w.is_pinned)
        return items

    def get_workspace(self, workspace_id: str) -> WorkspaceItem:
        workspace = self.store.get_workspace(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(workspace_id)
        return workspace

    # -------------------- open --------------------

    async def open_workspace(self, workspace_id: str, new_window: bool = False, dry_run: bool = False) -> OpenResult:
        """Resolve and launch a workspace.

        A dry run resolves the target and builds the command without starting
        the editor or touching the catalog.

        Raises:
            WorkspaceNotFoundError: Unknown id
            LaunchError: The editor could not open the target
        """
        workspace = self.get_workspace(workspace_id)
        location, target = await self.launcher.resolve(workspace.path, workspace.is_workspace_file)

        if dry_run:
            command = self.launcher.build_command(target, new_window)
            return OpenResult(workspace.id, location, target, command, dry_run=True)

        command = await self.launcher.launch(target, location, new_window)

        workspace.last_opened = datetime.now(timezone.utc)
        self.store.save_workspace(workspace)
        for tag in workspace.tags:
            self.store.increment_tag_usage(tag)

        logger.info(f"[OPEN] Opened {workspace.name} ({location.display_name})")
        return OpenResult(workspace.id, location, target, command)

    # -------------------- edits --------------------

    def _update(self, workspace_id: str, **changes: Any) -> WorkspaceItem:
        workspace = self.get_workspace(workspace_id)
        for name, value in changes.items():
            setattr(workspace, name, value)
        self.store.save_workspace(workspace)
        return workspace

    def set_favorite(self, workspace_id: str, is_favorite: bool) -> WorkspaceItem:
        return self._update(workspace_id, is_favorite=is_favorite)

    def set_pinned(self, workspace_id: str, is_pinned: bool) -> WorkspaceItem:
        return self._update(workspace_id, is_pinned=is_pinned)

    def set_tags(self, workspace_id: str, tags: List[str]) -> WorkspaceItem:
        unique = list(dict.fromkeys(t.strip() for t in tags if t.strip()))
        return self._update(workspace_id, tags=unique)

    def set_description(self, workspace_id: str, description: Optional[str]) -> WorkspaceItem:
        return self._update(workspace_id, description=description or None)

    def remove_workspace(self, workspace_id: str) -> None:
        if not self.store.remove_workspace(workspace_id):
            raise WorkspaceNotFoundError(workspace_id)
        logger.info(f"[CATALOG] Removed workspace {workspace_id}")

    # -------------------- tags --------------------

    def get_tags(self) -> List[Tag]:
        return sorted(self.store.get_tags(), key=lambda t: (not t.is_system, t.name.lower()))

    def add_custom_tag(self, name: str, color: Optional[str] = None, description: Optional[str] = None) -> Tag:
        """Create a user tag.

        Raises:
            DuplicateTagError: A tag with the same name (any case) exists
            ValueError: Empty name
        """
        name = name.strip()
        if not name:
            raise ValueError("Tag name must not be empty")
        if any(t.name.lower() == name.lower() for t in self.store.get_tags()):
            raise DuplicateTagError(name)

        tag = Tag(id=str(uuid.uuid4()), name=name, color=color, description=description)
        self.store.save_tag(tag)
        return tag

    def remove_tag(self, tag_id: str) -> Tag:
        """Delete a user tag. Workspaces keep the tag name in their tag lists.

        Raises:
            TagNotFoundError: Unknown id
            ValueError: The tag is a system tag
        """
        tag = next((t for t in self.store.get_tags() if t.id == tag_id), None)
        if tag is None:
            raise TagNotFoundError(tag_id)
        if tag.is_system:
            raise ValueError(f'System tag "{tag.name}" cannot be removed')

        self.store.remove_tag(tag_id)
        logger.info(f"[CATALOG] Removed tag {tag.name}")
        return tag

    # -------------------- export / import --------------------

    def export_data(self) -> Dict[str, Any]:
        return self.store.export_data()

    def import_data(self, data: Dict[str, Any]) -> None:
        self.store.import_data(data)
        logger.info(f"[CATALOG] Imported {len(data.get('workspaces', []))} workspaces")
