"""
Configuration data models.

All configuration dataclasses are defined here for consistency.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _to_list(val: Any) -> List[str]:
    """Normalize a config value to a list of strings.

    Accepts either a YAML list or a comma-separated string.
    """
    if isinstance(val, str):
        return [p.strip() for p in val.split(",") if p.strip()]
    if isinstance(val, list):
        return [str(p).strip() for p in val if str(p).strip()]
    return []


def _to_command(val: Any, default: List[str]) -> List[str]:
    """Commands may be written as a list or as a single space-separated string."""
    if isinstance(val, str):
        return val.split() or list(default)
    if isinstance(val, list) and val:
        return [str(p) for p in val]
    return list(default)


# ============================================================================
# Resolver / Launch Configuration
# ============================================================================


@dataclass
class WslConfig:
    """Configuration for querying installed WSL distributions."""

    list_command: List[str] = field(default_factory=lambda: ["wsl", "-l", "-q"])
    timeout_seconds: float = 5.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WslConfig":
        return cls(
            list_command=_to_command(data.get("list_command"), ["wsl", "-l", "-q"]),
            timeout_seconds=float(data.get("timeout_seconds", 5.0)),
        )


@dataclass
class LaunchConfig:
    """Configuration for starting the editor on a launch target."""

    code_command: str = "code"
    force_new_window: bool = False
    timeout_seconds: float = 30.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LaunchConfig":
        return cls(
            code_command=data.get("code_command", "code"),
            force_new_window=bool(data.get("force_new_window", False)),
            timeout_seconds=float(data.get("timeout_seconds", 30.0)),
        )


# ============================================================================
# History / Sync Configuration
# ============================================================================


@dataclass
class HistoryConfig:
    """Configuration for reading the editor's recently-opened history."""

    state_db: Optional[str] = None  # None -> platform default
    max_recent_workspaces: int = 50
    excluded_folders: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryConfig":
        state_db = data.get("state_db") or None
        # Unset ${VAR} placeholders survive substitution verbatim
        if state_db and state_db.startswith("${"):
            state_db = None
        return cls(
            state_db=state_db,
            max_recent_workspaces=int(data.get("max_recent_workspaces", 50)),
            excluded_folders=_to_list(data.get("excluded_folders", [])),
        )


@dataclass
class SyncConfig:
    """Configuration for merging history into the catalog."""

    auto_tagging: bool = True
    default_tags: List[str] = field(default_factory=list)
    auto_sync: bool = True  # periodic background sync while the web server runs
    interval_minutes: float = 5.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SyncConfig":
        return cls(
            auto_tagging=bool(data.get("auto_tagging", True)),
            default_tags=_to_list(data.get("default_tags", [])),
            auto_sync=bool(data.get("auto_sync", True)),
            interval_minutes=float(data.get("interval_minutes", 5.0)),
        )


# ============================================================================
# Utility Configuration Models
# ============================================================================


@dataclass
class StorageConfig:
    """Configuration for the catalog store."""

    store_path: str = "data/wsrecall.db"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StorageConfig":
        return cls(store_path=data.get("store_path", "data/wsrecall.db"))


@dataclass
class WebConfig:
    """Configuration for the web API."""

    port: int = 8000

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WebConfig":
        return cls(port=int(data.get("port", 8000)))


@dataclass
class LoggingConfig:
    """Configuration for application logging."""

    level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        return cls(level=data.get("level", "INFO"))
