"""
Workspace launcher.

Resolves a stored workspace reference into a launch target and starts the
editor on it. The editor is an external executable (``code`` by default);
failures are reported as ``LaunchError`` with guidance for the location kind.
"""

import asyncio
from typing import List, Optional, Sequence, Tuple

from wsrecall.shared.config.models import LaunchConfig
from wsrecall.shared.errors import LaunchError
from wsrecall.shared.logging.logger import get_logger
from wsrecall.shared.models.location import LaunchTarget, LocationKind, ResolvedLocation
from wsrecall.resolver.distribution_validator import DistributionValidator
from wsrecall.resolver.location_classifier import classify
from wsrecall.resolver.uri_reconstructor import DistributionValidatorFn, reconstruct

logger = get_logger(__name__)

FOLDER_URI_SCHEMES = ("vscode-remote://", "ssh://", "codespaces://")
FILE_URI_SCHEME = "file://"

GUIDANCE = {
    LocationKind.WSL: (
        "Make sure the WSL extension is installed and the distribution is running "
        "(check with 'wsl -l -v')."
    ),
    LocationKind.REMOTE: (
        "Make sure the Remote Development extensions are installed and the remote "
        "host is reachable."
    ),
    LocationKind.LOCAL: "Check that the path still exists.",
}

MISSING_EDITOR_GUIDANCE = "Make sure the editor's command line launcher is installed and on PATH."


def build_command(code_command: str, target: LaunchTarget, new_window: bool = False) -> List[str]:
    """Editor command line for a launch target.

    >>> build_command("code", LaunchTarget("vscode-remote://wsl+Ubuntu/home/me"))
    ['code', '--folder-uri', 'vscode-remote://wsl+Ubuntu/home/me']
    """
    command = [code_command]
    if new_window:
        command.append("-n")

    uri = target.uri
    if uri.startswith(FOLDER_URI_SCHEMES):
        command += ["--folder-uri", uri]
    elif uri.startswith(FILE_URI_SCHEME):
        command += ["--file-uri" if target.is_workspace_file else "--folder-uri", uri]
    else:
        command.append(uri)
    return command


async def run_editor(command: Sequence[str], timeout: float) -> Tuple[int, str]:
    """Run the editor command; returns (exit code, stderr text)."""
    process = await asyncio.create_subprocess_exec(
        *command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        _stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise
    return process.returncode, stderr.decode("utf-8", errors="replace").strip()


class WorkspaceLauncher:
    """Opens workspaces in the editor."""

    def __init__(
        self,
        config: Optional[LaunchConfig] = None,
        validator: Optional[DistributionValidatorFn] = None,
        runner=None,
    ):
        self.config = config or LaunchConfig()
        self.validator = validator or DistributionValidator()
        self._runner = runner or run_editor

    async def resolve(self, reference: str, is_workspace_file: bool = False) -> Tuple[ResolvedLocation, LaunchTarget]:
        location = classify(reference)
        target = await reconstruct(reference, location, is_workspace_file, self.validator)
        return location, target

    def build_command(self, target: LaunchTarget, new_window: bool = False) -> List[str]:
        return build_command(self.config.code_command, target, new_window or self.config.force_new_window)

    async def launch(self, target: LaunchTarget, location: ResolvedLocation, new_window: bool = False) -> List[str]:
        """Start the editor on ``target``. Returns the command that was run.

        Raises:
            LaunchError: Editor missing, timed out or exited with an error
        """
        command = self.build_command(target, new_window)
        logger.info(f"[LAUNCH] {' '.join(command)}")
        guidance = GUIDANCE[location.kind]

        try:
            returncode, stderr = await self._runner(command, self.config.timeout_seconds)
        except FileNotFoundError as e:
            raise LaunchError(
                f"Editor command '{self.config.code_command}' not found", MISSING_EDITOR_GUIDANCE
            ) from e
        except asyncio.TimeoutError as e:
            raise LaunchError(
                f"Editor did not start within {self.config.timeout_seconds}s", guidance
            ) from e
        except OSError as e:
            raise LaunchError(f"Failed to start editor: {e}", MISSING_EDITOR_GUIDANCE) from e

        if returncode != 0:
            detail = f": {stderr}" if stderr else ""
            raise LaunchError(
                f"Failed to open {location.display_name} workspace {target.uri} "
                f"(exit code {returncode}){detail}",
                guidance,
            )
        return command
