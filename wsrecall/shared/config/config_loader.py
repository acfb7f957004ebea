"""
Configuration loader with environment variable substitution.

Provides typed configuration sections for every component. There is no
process-wide instance: call ``load_config()`` once at the entry point and
hand the typed sections to the components that need them.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from wsrecall.shared.errors import ConfigurationError
from wsrecall.shared.config.models import (
    HistoryConfig,
    LaunchConfig,
    LoggingConfig,
    StorageConfig,
    SyncConfig,
    WebConfig,
    WslConfig,
)

DEFAULT_CONFIG_PATH = "config/config.yaml"
DEFAULT_ENV_PATH = "config/.env"


def _substitute_env(text: str) -> str:
    """Replace ${VAR_NAME} with environment values, keeping unset placeholders."""
    def replace_env(match):
        value = os.getenv(match.group(1))
        if value is None:
            return match.group(0)
        # Windows backslashes would be escape sequences in double-quoted YAML
        return value.replace('\\', '/')

    return re.sub(r'\$\{(\w+)\}', replace_env, text)


class Config:
    """Loaded configuration with typed, lazily built sections.

    Available typed properties:
        - history: HistoryConfig - Editor history source
        - sync: SyncConfig - Catalog sync behaviour
        - wsl: WslConfig - Distribution query command and timeout
        - launch: LaunchConfig - Editor launch command
        - storage: StorageConfig - Catalog store location
        - web: WebConfig - Web API settings
        - logging: LoggingConfig - Console logging

    Usage:
        config = load_config("config/config.yaml")
        validator = DistributionValidator(config.wsl)

        # Raw access for ad-hoc values
        value = config.get("logging.level")
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None, config_path: Optional[Path] = None):
        self.config_path = config_path
        self._config: Dict[str, Any] = data or {}

        self._history: Optional[HistoryConfig] = None
        self._sync: Optional[SyncConfig] = None
        self._wsl: Optional[WslConfig] = None
        self._launch: Optional[LaunchConfig] = None
        self._storage: Optional[StorageConfig] = None
        self._web: Optional[WebConfig] = None
        self._logging: Optional[LoggingConfig] = None

    @classmethod
    def from_file(cls, config_path: Path) -> "Config":
        """Load YAML config with environment variable substitution."""
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        with open(config_path, encoding='utf-8') as f:
            config_str = _substitute_env(f.read())

        try:
            data = yaml.safe_load(config_str) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config root must be a mapping: {config_path}")
        return cls(data, config_path)

    @property
    def history(self) -> HistoryConfig:
        if self._history is None:
            self._history = HistoryConfig.from_dict(self.get("history", {}))
        return self._history

    @property
    def sync(self) -> SyncConfig:
        if self._sync is None:
            self._sync = SyncConfig.from_dict(self.get("sync", {}))
        return self._sync

    @property
    def wsl(self) -> WslConfig:
        if self._wsl is None:
            self._wsl = WslConfig.from_dict(self.get("wsl", {}))
        return self._wsl

    @property
    def launch(self) -> LaunchConfig:
        if self._launch is None:
            self._launch = LaunchConfig.from_dict(self.get("launch", {}))
        return self._launch

    @property
    def storage(self) -> StorageConfig:
        if self._storage is None:
            self._storage = StorageConfig.from_dict(self.get("storage", {}))
        return self._storage

    @property
    def web(self) -> WebConfig:
        if self._web is None:
            self._web = WebConfig.from_dict(self.get("web", {}))
        return self._web

    @property
    def logging(self) -> LoggingConfig:
        if self._logging is None:
            self._logging = LoggingConfig.from_dict(self.get("logging", {}))
        return self._logging

    def get(self, path: str, default=None) -> Any:
        """
        Get config value by dot notation (e.g., 'wsl.timeout_seconds').

        Args:
            path: Dot-separated path to config value
            default: Default value if path not found

        Returns:
            Configuration value or default
        """
        value = self._config
        for key in path.split('.'):
            if isinstance(value, dict):
                value = value.get(key)
            else:
                return default
            if value is None:
                return default
        return value

    def get_all(self) -> Dict[str, Any]:
        """Get entire configuration dictionary."""
        return self._config.copy()


def load_env(env_path: str = DEFAULT_ENV_PATH) -> None:
    """Load environment variables from the .env file if it exists."""
    env_file = Path(env_path)
    if env_file.exists():
        load_dotenv(env_file)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load a fresh Config.

    An explicitly requested file must exist. When no path is given the
    default ``config/config.yaml`` is used if present, otherwise every
    section falls back to its defaults.

    Raises:
        ConfigurationError: If an explicit file is missing or invalid
    """
    load_env()

    if config_path is not None:
        return Config.from_file(Path(config_path))

    default_path = Path(DEFAULT_CONFIG_PATH)
    if default_path.exists():
        return Config.from_file(default_path)
    return Config()
