"""Location classifier.

Decides whether a raw workspace reference is a WSL, remote or local
location, purely from string patterns, and extracts the metadata each kind
needs downstream. Priority is WSL > Remote > Local: a reference carrying any
WSL marker is never classified as remote, even if it also contains '@'.
"""

import re
from typing import Optional
from urllib.parse import urlparse

from wsrecall.shared.io.paths import parse_vscode_remote_uri, safe_percent_decode
from wsrecall.shared.models.location import (
    MOUNTED_DRIVE_DISTRIBUTION,
    UNKNOWN_DISTRIBUTION,
    LocationKind,
    LocationMetadata,
    ResolvedLocation,
)

# \\wsl$\<segment> and the newer \\wsl.localhost\<segment>
WSL_UNC_PATTERN = re.compile(r"^\\\\wsl(?:\$|\.localhost)\\([^\\]+)", re.IGNORECASE)
WSL_UNC_PREFIXES = ("\\\\wsl$\\", "\\\\wsl.localhost\\")
WSL_AUTHORITY_PATTERN = re.compile(r"wsl\+([^:/]+)")
WSL_AUTHORITY_PREFIX = "wsl+"
WSL_MOUNT_PREFIX = "/mnt/wsl/"
WSL_DRIVE_MOUNTS = ("/mnt/c/", "/mnt/d/")

REMOTE_PREFIXES = ("ssh://", "github://")
REMOTE_MARKERS = ("ssh-remote", "vscode-remote", "codespaces", "dev-container")


def is_wsl_unc_path(reference: str) -> bool:
    return reference.lower().startswith(WSL_UNC_PREFIXES)


def is_wsl_reference(reference: str) -> bool:
    return (
        WSL_UNC_PATTERN.match(reference) is not None
        or reference.startswith(WSL_MOUNT_PREFIX)
        or WSL_AUTHORITY_PREFIX in reference
        or any(mount in reference for mount in WSL_DRIVE_MOUNTS)
    )


def is_remote_reference(reference: str) -> bool:
    return (
        reference.startswith(REMOTE_PREFIXES)
        or "@" in reference
        or any(marker in reference for marker in REMOTE_MARKERS)
    )


def extract_wsl_distribution(reference: str) -> str:
    """Extract the WSL distribution name from a reference.

    Examples:
        \\\\wsl$\\Ubuntu-20.04\\home\\user -> Ubuntu-20.04
        \\\\wsl$\\wsl%2Bubuntu\\root       -> ubuntu
        vscode-remote://wsl+Debian/home   -> Debian
        /mnt/c/Users/me/project           -> WSL (distribution unknown)
        anything else                     -> Unknown
    """
    match = WSL_UNC_PATTERN.match(reference)
    if match:
        distribution = safe_percent_decode(match.group(1))
        if distribution.startswith(WSL_AUTHORITY_PREFIX):
            distribution = distribution[len(WSL_AUTHORITY_PREFIX):]
        return distribution

    match = WSL_AUTHORITY_PATTERN.search(reference)
    if match:
        return match.group(1)

    if "/mnt/" in reference:
        return MOUNTED_DRIVE_DISTRIBUTION

    return UNKNOWN_DISTRIBUTION


def extract_remote_authority(reference: str) -> Optional[str]:
    """Connection target of a remote reference, if one can be read off it."""
    remote = parse_vscode_remote_uri(reference)
    if remote is not None:
        return safe_percent_decode(remote[0]) or None

    if "://" in reference:
        return urlparse(reference).netloc or None

    # scp-style user@host:/path
    if "@" in reference:
        return re.split(r"[:/\\]", reference, maxsplit=1)[0] or None

    return None


def classify(reference: str) -> ResolvedLocation:
    """Classify a raw workspace reference. Pure; never raises.

    Unrecognized input falls through to a best-guess Local classification.
    """
    if is_wsl_reference(reference):
        kind = LocationKind.WSL
        metadata = LocationMetadata(distribution=extract_wsl_distribution(reference))
    elif is_remote_reference(reference):
        kind = LocationKind.REMOTE
        metadata = LocationMetadata(authority=extract_remote_authority(reference))
    else:
        kind = LocationKind.LOCAL
        # Best effort; meaningless for POSIX paths
        metadata = LocationMetadata(drive_letter=reference[:1].upper())

    return ResolvedLocation(kind=kind, display_name=kind.display_name, metadata=metadata)
