"""Location models produced by the resolver.

A workspace reference is a plain string (UNC WSL path, mount path, remote
URI, file URI or native path). Classification turns it into a
``ResolvedLocation``; reconstruction turns that into a ``LaunchTarget``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .dataclass_mixin import DataclassIO

# Distribution sentinels
DEFAULT_DISTRIBUTION = "default"
UNKNOWN_DISTRIBUTION = "Unknown"
MOUNTED_DRIVE_DISTRIBUTION = "WSL"


class LocationKind(str, Enum):
    LOCAL = "local"
    WSL = "wsl"
    REMOTE = "remote"

    @property
    def display_name(self) -> str:
        return LOCATION_DISPLAY_NAMES[self]

    @property
    def icon(self) -> str:
        return LOCATION_ICONS[self]


LOCATION_DISPLAY_NAMES: Dict[LocationKind, str] = {
    LocationKind.LOCAL: "Local",
    LocationKind.WSL: "WSL",
    LocationKind.REMOTE: "Remote",
}

LOCATION_ICONS: Dict[LocationKind, str] = {
    LocationKind.LOCAL: "💻",
    LocationKind.WSL: "🐧",
    LocationKind.REMOTE: "🌐",
}


@dataclass(frozen=True)
class LocationMetadata(DataclassIO):
    """Location-specific details; which fields are set depends on the kind."""
    distribution: Optional[str] = None   # WSL
    authority: Optional[str] = None      # Remote
    drive_letter: Optional[str] = None   # Local


@dataclass(frozen=True)
class ResolvedLocation(DataclassIO):
    """Result of classifying a workspace reference.

    ``distribution`` of ``"Unknown"`` or an empty ``drive_letter`` are
    low-confidence signals, not errors.
    """
    kind: LocationKind
    display_name: str
    metadata: LocationMetadata = field(default_factory=LocationMetadata)

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None = None) -> "ResolvedLocation":
        data = data or {}
        kind = LocationKind(data.get("kind", LocationKind.LOCAL.value))
        return cls(
            kind=kind,
            display_name=data.get("display_name") or kind.display_name,
            metadata=LocationMetadata.from_dict(data.get("metadata") or {}),
        )


@dataclass(frozen=True)
class LaunchTarget(DataclassIO):
    """What the editor is asked to open."""
    uri: str
    is_workspace_file: bool = False
