"""Domain errors.

Only ``LaunchError`` is meant to reach the end user; the resolver recovers
from decode and distribution-query failures on its own.
"""


class WsRecallError(Exception):
    """Base class for all wsrecall errors."""
    pass


class ConfigurationError(WsRecallError):
    """Raised when configuration is invalid or missing required values."""
    pass


class HistoryReadError(WsRecallError):
    """Raised when the editor's history store exists but cannot be read."""
    pass


class WorkspaceNotFoundError(WsRecallError):
    """Raised when a workspace id is not in the catalog."""

    def __init__(self, workspace_id: str):
        super().__init__(f"Workspace not found: {workspace_id}")
        self.workspace_id = workspace_id


class TagNotFoundError(WsRecallError):
    """Raised when a tag id is not in the catalog."""

    def __init__(self, tag_id: str):
        super().__init__(f"Tag not found: {tag_id}")
        self.tag_id = tag_id


class DuplicateTagError(WsRecallError):
    """Raised when adding a tag whose name already exists (case-insensitive)."""

    def __init__(self, name: str):
        super().__init__(f'Tag "{name}" already exists')
        self.name = name


class LaunchError(WsRecallError):
    """Raised when the editor could not be started for a launch target.

    Carries actionable guidance for the user alongside the failure message.
    """

    def __init__(self, message: str, guidance: str = ""):
        super().__init__(message)
        self.message = message
        self.guidance = guidance

    def __str__(self) -> str:
        if self.guidance:
            return f"{self.message}\n{self.guidance}"
        return self.message


class ImportDataError(WsRecallError):
    """Raised when an export document cannot be imported."""
    pass
