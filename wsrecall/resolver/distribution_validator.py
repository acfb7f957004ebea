"""Distribution validator.

Corrects a declared WSL distribution name against the distributions that
are actually installed on the host, as reported by ``wsl -l -q``.

Matching policy, in order:
1. Exact match -> the declared name
2. Case-insensitive match -> the host's canonical casing
3. No match, non-empty list -> the first entry (the host default). This
   opens a *different* distribution than requested, so it is logged.
4. Empty list or failed query -> the declared name unchanged

The sentinels "default" and "Unknown" skip straight to the host default.
Query failures never propagate: WSL tooling may simply be absent while the
workspace is still usable.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence

from wsrecall.shared.config.models import WslConfig
from wsrecall.shared.logging.logger import get_logger
from wsrecall.shared.models.location import DEFAULT_DISTRIBUTION, UNKNOWN_DISTRIBUTION

logger = get_logger(__name__)

DEFAULT_SENTINELS = frozenset({DEFAULT_DISTRIBUTION, UNKNOWN_DISTRIBUTION})

# Runs a command and returns its raw stdout; raises on any failure
CommandRunner = Callable[[Sequence[str], float], Awaitable[bytes]]


class MatchKind(str, Enum):
    EXACT = "exact"
    CASE_INSENSITIVE = "case_insensitive"
    DEFAULT = "default"
    FALLBACK = "fallback"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class DistributionMatch:
    name: str
    kind: MatchKind


class DistributionQueryError(Exception):
    """The distribution list command could not be run or failed."""
    pass


def decode_distribution_list(raw: bytes) -> List[str]:
    """Decode ``wsl -l -q`` output (UTF-16-LE, one name per line)."""
    text = raw.decode("utf-16-le", errors="ignore")
    text = text.replace("\ufeff", "").replace("\x00", "")
    return [line.strip() for line in text.splitlines() if line.strip()]


def match_distribution(declared: str, available: Sequence[str]) -> DistributionMatch:
    """Pick the installed distribution to use for a declared name. Pure."""
    if not available:
        return DistributionMatch(declared, MatchKind.UNCHANGED)

    if declared in DEFAULT_SENTINELS:
        return DistributionMatch(available[0], MatchKind.DEFAULT)

    if declared in available:
        return DistributionMatch(declared, MatchKind.EXACT)

    declared_lower = declared.lower()
    for name in available:
        if name.lower() == declared_lower:
            return DistributionMatch(name, MatchKind.CASE_INSENSITIVE)

    return DistributionMatch(available[0], MatchKind.FALLBACK)


async def run_command(command: Sequence[str], timeout: float) -> bytes:
    """Run a command and collect stdout, killing it after ``timeout`` seconds.

    Raises:
        DistributionQueryError: Executable missing, timeout or non-zero exit
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise DistributionQueryError(f"Cannot run {command[0]!r}: {e}") from e

    try:
        stdout, _stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as e:
        process.kill()
        await process.wait()
        raise DistributionQueryError(f"{' '.join(command)} timed out after {timeout}s") from e

    if process.returncode != 0:
        raise DistributionQueryError(f"{' '.join(command)} exited with code {process.returncode}")
    return stdout


class DistributionValidator:
    """Validates WSL distribution names against the host.

    Instances are callable, so one can be passed wherever the reconstructor
    expects a ``(name) -> Awaitable[str]`` validator. Nothing is cached:
    distributions may be installed or removed between calls.
    """

    def __init__(self, config: Optional[WslConfig] = None, runner: Optional[CommandRunner] = None):
        self.config = config or WslConfig()
        self._runner = runner or run_command

    async def list_distributions(self) -> List[str]:
        """Installed distributions, default first; ``[]`` if the query fails."""
        command = self.config.list_command
        try:
            raw = await self._runner(command, self.config.timeout_seconds)
        except DistributionQueryError as e:
            logger.warning(f"[WSL] Distribution query failed: {e}")
            return []
        except Exception as e:
            logger.warning(f"[WSL] Unexpected error querying distributions: {e}")
            return []

        distributions = decode_distribution_list(raw)
        if not distributions:
            logger.warning(f"[WSL] {' '.join(command)} returned no distributions")
        else:
            logger.debug(f"[WSL] Installed distributions: {distributions}")
        return distributions

    async def match(self, declared_name: str) -> DistributionMatch:
        available = await self.list_distributions()
        result = match_distribution(declared_name, available)

        if result.kind == MatchKind.FALLBACK:
            logger.warning(
                f"[WSL] Distribution '{declared_name}' is not installed; "
                f"falling back to default distribution '{result.name}'"
            )
        elif result.kind == MatchKind.CASE_INSENSITIVE:
            logger.debug(f"[WSL] Corrected distribution casing '{declared_name}' -> '{result.name}'")
        elif result.kind == MatchKind.DEFAULT:
            logger.debug(f"[WSL] Resolved '{declared_name}' to default distribution '{result.name}'")
        elif result.kind == MatchKind.UNCHANGED:
            logger.debug(f"[WSL] No distribution list available; keeping '{declared_name}'")
        return result

    async def validate(self, declared_name: str) -> str:
        """Return the case-exact installed name to use for ``declared_name``."""
        return (await self.match(declared_name)).name

    async def __call__(self, declared_name: str) -> str:
        return await self.validate(declared_name)
