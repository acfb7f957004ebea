"""
Workspace sync.

Discovers workspaces from the editor's history and merges them into the
catalog without losing user data (favorites, pins, descriptions, tags).
"""

import base64
from datetime import datetime, timezone
from typing import Dict, List, Optional

from wsrecall.shared.config.models import HistoryConfig, SyncConfig
from wsrecall.shared.io.paths import reference_basename
from wsrecall.shared.logging.logger import get_logger
from wsrecall.shared.models.location import LocationKind
from wsrecall.shared.models.workspace import WorkspaceItem, WorkspaceType
from wsrecall.shared.storage.workspace_store import WorkspaceStore
from wsrecall.pipeline.history.history_reader import HistoryEntry, HistoryReader, recency_timestamp
from wsrecall.pipeline.sync.project_detection import detect_auto_tags, detect_project_info
from wsrecall.resolver.location_classifier import classify

logger = get_logger(__name__)


def make_workspace_id(reference: str) -> str:
    """Stable id for a reference: URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(reference.encode("utf-8")).decode("ascii").rstrip("=")


def is_excluded(reference: str, excluded_folders: List[str]) -> bool:
    lowered = reference.lower()
    return any(folder.lower() in lowered for folder in excluded_folders)


class WorkspaceSyncService:
    """Keeps the catalog in step with the editor's recently-opened list."""

    def __init__(
        self,
        history_config: HistoryConfig,
        sync_config: SyncConfig,
        store: WorkspaceStore,
        reader: Optional[HistoryReader] = None,
    ):
        self.history_config = history_config
        self.sync_config = sync_config
        self.store = store
        self.reader = reader or HistoryReader(history_config)

    def build_item(self, entry: HistoryEntry, now: datetime) -> WorkspaceItem:
        location = classify(entry.reference)

        project_info = None
        tags = list(self.sync_config.default_tags)
        if location.kind == LocationKind.LOCAL and entry.kind == WorkspaceType.FOLDER:
            project_info = detect_project_info(entry.reference)
            if self.sync_config.auto_tagging:
                for tag in detect_auto_tags(project_info):
                    if tag not in tags:
                        tags.append(tag)

        return WorkspaceItem(
            id=make_workspace_id(entry.reference),
            name=entry.label or reference_basename(entry.reference),
            path=entry.reference,
            type=entry.kind,
            location=location,
            last_opened=recency_timestamp(entry.rank, now),
            tags=tags,
            project_info=project_info,
        )

    def discover(self, now: Optional[datetime] = None) -> List[WorkspaceItem]:
        """Build catalog entries from the history, most recent first.

        Raises:
            HistoryReadError: The history database cannot be read
        """
        now = now or datetime.now(timezone.utc)
        items: List[WorkspaceItem] = []
        seen = set()

        for entry in self.reader.read_entries():
            if is_excluded(entry.reference, self.history_config.excluded_folders):
                logger.debug(f"[SYNC] Excluded: {entry.reference}")
                continue
            if entry.reference in seen:
                continue
            seen.add(entry.reference)
            items.append(self.build_item(entry, now))

        logger.info(f"[SYNC] Discovered {len(items)} workspaces")
        return items

    def merge(self, existing: List[WorkspaceItem], discovered: List[WorkspaceItem]) -> List[WorkspaceItem]:
        """Merge discovered entries over the existing catalog.

        Matching is by path. User-owned fields of existing entries win; tags
        are unioned. Existing entries absent from the history are kept.
        """
        by_path: Dict[str, WorkspaceItem] = {w.path: w for w in existing}
        merged: List[WorkspaceItem] = []

        for item in discovered:
            previous = by_path.pop(item.path, None)
            if previous is not None:
                item.id = previous.id
                item.is_favorite = previous.is_favorite
                item.is_pinned = previous.is_pinned
                item.description = previous.description
                item.tags = previous.tags + [t for t in item.tags if t not in previous.tags]
                if item.project_info is None:
                    item.project_info = previous.project_info
            merged.append(item)

        merged.extend(by_path.values())
        merged.sort(key=lambda w: w.last_opened, reverse=True)

        limit = self.history_config.max_recent_workspaces
        if limit > 0 and len(merged) > limit:
            kept = merged[:limit]
            # Favorites and pins survive truncation
            kept.extend(w for w in merged[limit:] if w.is_favorite or w.is_pinned)
            merged = kept
        return merged

    def sync(self, now: Optional[datetime] = None) -> List[WorkspaceItem]:
        """Discover, merge and save. Returns the saved catalog."""
        logger.banner("WORKSPACE SYNC")
        discovered = self.discover(now)
        merged = self.merge(self.store.get_workspaces(), discovered)
        self.store.save_workspaces(merged)
        logger.progress(f"[SYNC] Catalog now holds {len(merged)} workspaces")
        return merged
