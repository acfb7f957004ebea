"""Workspace catalog models.

Models for catalog entries, tags and list filters.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from .dataclass_mixin import DataclassIO
from .location import LocationKind, ResolvedLocation


class WorkspaceType(str, Enum):
    WORKSPACE = "workspace"  # .code-workspace file
    FOLDER = "folder"
    FILE = "file"


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return datetime.now(timezone.utc)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return datetime.now(timezone.utc)


@dataclass
class ProjectInfo(DataclassIO):
    """Project details detected from a local workspace folder."""
    framework: Optional[str] = None
    language: Optional[str] = None
    package_manager: Optional[str] = None
    git_repository: Optional[str] = None
    has_package_json: bool = False
    has_dockerfile: bool = False

    def is_empty(self) -> bool:
        return self == ProjectInfo()


@dataclass
class WorkspaceItem(DataclassIO):
    """A tracked workspace.

    ``path`` holds the raw workspace reference exactly as recorded; it is
    resolved into a launch target only when the workspace is opened.
    """
    id: str
    name: str
    path: str
    type: WorkspaceType
    location: ResolvedLocation
    last_opened: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    is_favorite: bool = False
    is_pinned: bool = False
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    project_info: Optional[ProjectInfo] = None

    @property
    def is_workspace_file(self) -> bool:
        return self.type == WorkspaceType.WORKSPACE

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None = None) -> "WorkspaceItem":
        data = data or {}
        project_info = data.get("project_info")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            path=data.get("path", ""),
            type=WorkspaceType(data.get("type", WorkspaceType.FOLDER.value)),
            location=ResolvedLocation.from_dict(data.get("location") or {}),
            last_opened=_parse_datetime(data.get("last_opened")),
            is_favorite=bool(data.get("is_favorite", False)),
            is_pinned=bool(data.get("is_pinned", False)),
            description=data.get("description"),
            tags=list(data.get("tags") or []),
            project_info=ProjectInfo.from_dict(project_info) if project_info else None,
        )


@dataclass
class Tag(DataclassIO):
    """A tag that can be attached to workspaces."""
    id: str
    name: str
    color: Optional[str] = None
    description: Optional[str] = None
    is_system: bool = False
    usage_count: int = 0


class SystemTag(str, Enum):
    """Tags derived automatically from detected frameworks and languages."""
    VUE = "vue"
    REACT = "react"
    ANGULAR = "angular"
    SVELTE = "svelte"
    DOTNET = "dotnet"
    JAVA = "java"
    PYTHON = "python"
    NODEJS = "nodejs"
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"
    GO = "go"
    RUST = "rust"
    PHP = "php"
    SPRINGBOOT = "springboot"
    DJANGO = "django"


@dataclass(frozen=True)
class SystemTagInfo:
    name: str
    description: str


SYSTEM_TAGS: Dict[SystemTag, SystemTagInfo] = {
    SystemTag.VUE: SystemTagInfo("Vue", "Vue.js project"),
    SystemTag.REACT: SystemTagInfo("React", "React project"),
    SystemTag.ANGULAR: SystemTagInfo("Angular", "Angular project"),
    SystemTag.SVELTE: SystemTagInfo("Svelte", "Svelte project"),
    SystemTag.DOTNET: SystemTagInfo(".NET", ".NET project"),
    SystemTag.JAVA: SystemTagInfo("Java", "Java project"),
    SystemTag.PYTHON: SystemTagInfo("Python", "Python project"),
    SystemTag.NODEJS: SystemTagInfo("Node.js", "Node.js project"),
    SystemTag.TYPESCRIPT: SystemTagInfo("TypeScript", "TypeScript project"),
    SystemTag.JAVASCRIPT: SystemTagInfo("JavaScript", "JavaScript project"),
    SystemTag.GO: SystemTagInfo("Go", "Go project"),
    SystemTag.RUST: SystemTagInfo("Rust", "Rust project"),
    SystemTag.PHP: SystemTagInfo("PHP", "PHP project"),
    SystemTag.SPRINGBOOT: SystemTagInfo("Spring Boot", "Spring Boot project"),
    SystemTag.DJANGO: SystemTagInfo("Django", "Django project"),
}


class WorkspaceView(str, Enum):
    ALL = "all"
    RECENT = "recent"
    FAVORITES = "favorites"
    PINNED = "pinned"


@dataclass
class WorkspaceFilter(DataclassIO):
    """Criteria for listing workspaces. Empty fields do not filter."""
    search_text: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    location: Optional[LocationKind] = None
    view: WorkspaceView = WorkspaceView.ALL
    types: List[WorkspaceType] = field(default_factory=list)
    favorites_only: bool = False
    pinned_only: bool = False
