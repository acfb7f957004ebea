"""Path and URI string utilities shared by the resolver and the history reader.

Everything here is pure string manipulation; nothing touches the filesystem.
"""
import re
from typing import Optional, Tuple
from urllib.parse import unquote, urlparse

VSCODE_REMOTE_SCHEME = "vscode-remote://"

# A '%' not followed by two hex digits
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def percent_decode(value: str) -> str:
    """Strictly percent-decode a string.

    Unlike ``urllib.parse.unquote`` this refuses malformed input instead of
    passing it through, so callers can tell a clean decode from a guess.

    Raises:
        ValueError: On a malformed escape or an escape sequence that is not UTF-8
    """
    if _MALFORMED_ESCAPE.search(value):
        raise ValueError(f"Malformed percent-encoding in: {value!r}")
    # UnicodeDecodeError is a ValueError subclass
    return unquote(value, errors="strict")


def safe_percent_decode(value: str) -> str:
    """Percent-decode, returning the input unchanged if it cannot be decoded."""
    try:
        return percent_decode(value)
    except ValueError:
        return value


def normalize_path(path: str) -> str:
    """Normalize path: backslashes to forward slashes, lowercase drive letter.

    Examples:
        C:\\Users\\code -> c:/Users/code
        /c:/path -> c:/path
    """
    if not path:
        return ""
    path = path.replace("\\", "/")
    # /c:/ -> c:/
    if len(path) >= 3 and path[0] == "/" and path[2] == ":":
        path = path[1:]
    if len(path) >= 2 and path[1] == ":":
        path = path[0].lower() + path[1:]
    return path


def decode_file_uri(uri: str) -> str:
    """Convert a file URI to a native path.

    Examples:
        file:///c%3A/path -> c:/path
        file:///home/user -> /home/user
        file://wsl%24/Ubuntu/home/user -> \\\\wsl$\\Ubuntu\\home\\user
    """
    if not uri:
        return ""

    parsed = urlparse(uri)
    if parsed.scheme.lower() != "file":
        return normalize_path(safe_percent_decode(uri))

    path = safe_percent_decode(parsed.path or "")
    host = safe_percent_decode(parsed.netloc or "")
    if host:
        # UNC share such as \\wsl$\Ubuntu\... keeps Windows separators
        return "\\\\" + host + path.replace("/", "\\")
    return normalize_path(path)


def parse_vscode_remote_uri(uri: str) -> Optional[Tuple[str, str]]:
    """Split a VS Code remote URI into (authority, path).

    Args:
        uri: A URI like 'vscode-remote://ssh-remote+host/home/me/project'

    Returns:
        Tuple of (authority, path) or None if not a remote URI. The path
        keeps its leading slash and is empty when the URI has none.
    """
    if not uri or not uri.startswith(VSCODE_REMOTE_SCHEME):
        return None

    rest = uri[len(VSCODE_REMOTE_SCHEME):]
    slash_idx = rest.find("/")
    if slash_idx == -1:
        return (rest, "")
    return (rest[:slash_idx], rest[slash_idx:])


def decode_remote_authority(uri: str) -> str:
    """Percent-decode only the authority of a vscode-remote URI.

    The editor stores 'wsl%2Bubuntu'; decoding just the authority exposes the
    'wsl+' marker while leaving the path a valid URI path.
    """
    parsed = parse_vscode_remote_uri(uri)
    if parsed is None:
        return uri
    authority, path = parsed
    return f"{VSCODE_REMOTE_SCHEME}{safe_percent_decode(authority)}{path}"


def reference_basename(reference: str) -> str:
    """Last non-empty path segment of any reference form (used as display name)."""
    if not reference:
        return ""
    text = reference
    remote = parse_vscode_remote_uri(text)
    if remote is not None:
        text = remote[1] or remote[0]
    elif "://" in text:
        text = text.split("://", 1)[1]
    segments = [s for s in re.split(r"[\\/]", text) if s]
    if not segments:
        return reference
    return safe_percent_decode(segments[-1])
