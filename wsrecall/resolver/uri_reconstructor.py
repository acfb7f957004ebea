"""URI reconstructor.

Turns a classified workspace reference into a launch target the editor can
open. WSL references are decoded, reduced to a canonical Unix path and
paired with a validated distribution name; remote references are rewritten
to the scheme of their connection kind; local references pass through.

WSL ``.code-workspace`` files get a ``file://`` reference; WSL folders get a
``vscode-remote://wsl+<distribution>`` URI.
"""

from typing import Awaitable, Callable

from wsrecall.shared.io.paths import parse_vscode_remote_uri, safe_percent_decode
from wsrecall.shared.logging.logger import get_logger
from wsrecall.shared.models.location import (
    DEFAULT_DISTRIBUTION,
    LaunchTarget,
    LocationKind,
    ResolvedLocation,
)
from wsrecall.resolver.location_classifier import WSL_MOUNT_PREFIX, classify, is_wsl_unc_path

logger = get_logger(__name__)

DistributionValidatorFn = Callable[[str], Awaitable[str]]

SSH_AUTHORITY_PREFIX = "ssh-remote+"
CODESPACES_AUTHORITY_PREFIXES = ("codespaces", "github")

# Segments 0-3 of a split UNC path: '', '', 'wsl$', '<distribution>'
_UNC_CONSUMED_SEGMENTS = 4


def canonical_wsl_path(decoded_reference: str, distribution: str) -> str:
    """Reduce a decoded WSL reference to an absolute Unix path.

    Idempotent: an already-canonical path comes back unchanged.

    Examples:
        \\\\wsl$\\Ubuntu\\home\\user\\proj        -> /home/user/proj
        /mnt/wsl/Ubuntu/home/user/proj (Ubuntu) -> /home/user/proj
        vscode-remote://wsl+Ubuntu/home/proj    -> /home/proj
        home\\user\\proj                        -> /home/user/proj
    """
    path = decoded_reference

    if is_wsl_unc_path(path):
        path = "/" + "/".join(path.split("\\")[_UNC_CONSUMED_SEGMENTS:])
    elif path.startswith(WSL_MOUNT_PREFIX):
        prefix = WSL_MOUNT_PREFIX + distribution
        if path.startswith(prefix):
            path = path[len(prefix):]
    elif parse_vscode_remote_uri(path) is not None:
        path = parse_vscode_remote_uri(path)[1]
    elif "\\" in path:
        path = path.replace("\\", "/")

    if not path.startswith("/"):
        path = "/" + path
    return path


async def _reconstruct_wsl(
    reference: str,
    location: ResolvedLocation,
    is_workspace_file: bool,
    distribution_validator: DistributionValidatorFn,
) -> LaunchTarget:
    decoded = safe_percent_decode(reference)
    if decoded == reference and "%" in reference:
        logger.debug(f"[RESOLVE] Could not percent-decode, using as-is: {reference}")

    declared = location.metadata.distribution or DEFAULT_DISTRIBUTION
    # Sentinels ("default"/"Unknown") are resolved to the host default by the validator
    distribution = await distribution_validator(declared)

    canonical = canonical_wsl_path(decoded, declared)

    if is_workspace_file:
        return LaunchTarget(uri=f"file://{canonical}", is_workspace_file=True)
    return LaunchTarget(uri=f"vscode-remote://wsl+{distribution}{canonical}", is_workspace_file=False)


def _reconstruct_remote(reference: str, is_workspace_file: bool) -> LaunchTarget:
    parsed = parse_vscode_remote_uri(reference)
    if parsed is None:
        # Not a vscode-remote URI: trust the original scheme
        return LaunchTarget(uri=reference, is_workspace_file=is_workspace_file)

    authority, remote_path = parsed
    if authority.startswith(SSH_AUTHORITY_PREFIX):
        uri = f"ssh://{authority[len(SSH_AUTHORITY_PREFIX):]}{remote_path}"
    elif authority.startswith(CODESPACES_AUTHORITY_PREFIXES):
        uri = f"codespaces://{authority}{remote_path}"
    else:
        uri = reference
    return LaunchTarget(uri=uri, is_workspace_file=is_workspace_file)


async def reconstruct(
    reference: str,
    location: ResolvedLocation,
    is_workspace_file: bool,
    distribution_validator: DistributionValidatorFn,
) -> LaunchTarget:
    """Build the launch target for a classified reference.

    Suspends at most once, awaiting ``distribution_validator`` for WSL
    references. Never raises on malformed input.

    Args:
        reference: The raw workspace reference
        location: Its classification (see ``classify``)
        is_workspace_file: Whether the reference names a .code-workspace file
        distribution_validator: Async callable correcting a distribution name

    Returns:
        LaunchTarget for the editor's open primitive
    """
    if location.kind == LocationKind.WSL:
        target = await _reconstruct_wsl(reference, location, is_workspace_file, distribution_validator)
    elif location.kind == LocationKind.REMOTE:
        target = _reconstruct_remote(reference, is_workspace_file)
    else:
        target = LaunchTarget(uri=reference, is_workspace_file=is_workspace_file)

    logger.debug(f"[RESOLVE] {reference} -> {target.uri}")
    return target


async def resolve_reference(
    reference: str,
    is_workspace_file: bool,
    distribution_validator: DistributionValidatorFn,
) -> LaunchTarget:
    """Classify and reconstruct in one step."""
    return await reconstruct(reference, classify(reference), is_workspace_file, distribution_validator)
