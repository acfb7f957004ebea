"""
Component wiring shared by the CLI and the web app.

Everything is built from an explicit ``Config``; there is no process-wide
configuration object.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from wsrecall.shared.config.config_loader import Config
from wsrecall.shared.storage.workspace_store import WorkspaceStore
from wsrecall.pipeline.catalog.workspace_manager import WorkspaceManager
from wsrecall.pipeline.history.history_reader import HistoryReader
from wsrecall.pipeline.launch.launcher import WorkspaceLauncher
from wsrecall.pipeline.sync.workspace_sync import WorkspaceSyncService
from wsrecall.resolver.distribution_validator import CommandRunner, DistributionValidator


@dataclass
class AppContext:
    config: Config
    store: WorkspaceStore
    validator: DistributionValidator
    launcher: WorkspaceLauncher
    manager: WorkspaceManager
    sync_service: WorkspaceSyncService


def build_context(
    config: Config,
    wsl_runner: Optional[CommandRunner] = None,
    editor_runner=None,
) -> AppContext:
    """Build all components for ``config``.

    The runners replace the ``wsl`` and editor subprocesses (used in tests).
    """
    store = WorkspaceStore(Path(config.storage.store_path))
    validator = DistributionValidator(config.wsl, runner=wsl_runner)
    launcher = WorkspaceLauncher(config.launch, validator, runner=editor_runner)
    return AppContext(
        config=config,
        store=store,
        validator=validator,
        launcher=launcher,
        manager=WorkspaceManager(store, launcher),
        sync_service=WorkspaceSyncService(
            config.history, config.sync, store, HistoryReader(config.history)
        ),
    )
