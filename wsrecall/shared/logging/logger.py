"""Logger implementation for wsrecall.

Provides a custom logger class that:
- Outputs to the console with colored formatting
- Has a special 'progress' level for user-facing CLI output
- Can be pointed at stderr so JSON output on stdout stays clean
"""

import logging
import sys
import threading
from typing import IO, Optional, Union

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "PROGRESS": 25,  # Between INFO and WARNING
}

logging.addLevelName(LOG_LEVELS["PROGRESS"], "PROGRESS")


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"
    GRAY = "\033[90m"


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the message by level."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.GRAY,
        logging.INFO: Colors.CYAN,
        LOG_LEVELS["PROGRESS"]: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.RED + Colors.BOLD,
    }

    def __init__(self, fmt: str = None, datefmt: str = None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if not self.use_colors:
            return message
        color = self.LEVEL_COLORS.get(record.levelno, Colors.RESET)
        return f"{color}{message}{Colors.RESET}"


class RecallLogger(logging.Logger):
    """Logger with progress/banner/section helpers for CLI output."""

    def progress(self, msg: str, *args, **kwargs):
        """Log a user-facing progress message."""
        if self.isEnabledFor(LOG_LEVELS["PROGRESS"]):
            self._log(LOG_LEVELS["PROGRESS"], msg, args, **kwargs)

    def banner(self, text: str, char: str = "=", width: int = 72):
        line = char * width
        self.progress(line)
        self.progress(text)
        self.progress(line)

    def section(self, text: str):
        self.progress(f"\n{text}")
        self.progress("-" * len(text))


class LoggingManager:
    """Thread-safe singleton owning the console handler."""

    _instance: Optional["LoggingManager"] = None
    _lock = threading.Lock()

    def __init__(self):
        self._console_handler: Optional[logging.Handler] = None
        self._root_logger: Optional[logging.Logger] = None
        self._initialized = False

    @classmethod
    def get_instance(cls) -> "LoggingManager":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def initialize(self, stream: Optional[IO] = None):
        """Install the console handler on the root logger (once)."""
        with self._lock:
            if self._initialized:
                return

            logging.setLoggerClass(RecallLogger)

            self._root_logger = logging.getLogger()
            self._root_logger.setLevel(logging.DEBUG)

            self._console_handler = logging.StreamHandler(stream or sys.stdout)
            self._console_handler.setLevel(logging.INFO)
            self._console_handler.setFormatter(ColoredFormatter("%(message)s", use_colors=True))
            self._root_logger.addHandler(self._console_handler)

            self._initialized = True

    def reset(self):
        """Remove the console handler (used by tests and stream switches)."""
        with self._lock:
            if self._root_logger and self._console_handler:
                self._root_logger.removeHandler(self._console_handler)
            self._console_handler = None
            self._root_logger = None
            self._initialized = False

    def set_level(self, level: int):
        if self._console_handler:
            self._console_handler.setLevel(level)

    def set_colors(self, use_colors: bool):
        if self._console_handler:
            self._console_handler.setFormatter(ColoredFormatter("%(message)s", use_colors=use_colors))

    @property
    def is_initialized(self) -> bool:
        return self._initialized


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    level_upper = level.upper()
    if level_upper not in LOG_LEVELS:
        raise ValueError(
            f"Invalid log level: {level}. "
            f"Valid levels: {', '.join(LOG_LEVELS.keys())}"
        )
    return LOG_LEVELS[level_upper]


def setup_logging(
    level: Union[int, str] = "INFO",
    use_colors: bool = True,
    stream: Optional[IO] = None,
) -> None:
    """Configure console logging.

    The level is passed in explicitly (usually ``config.logging.level``);
    there is no global configuration lookup.

    Args:
        level: Console log level (int or name such as 'DEBUG')
        use_colors: Whether to color console output
        stream: Target stream; a new stream replaces the current handler

    Raises:
        ValueError: If an invalid log level name is provided
    """
    manager = LoggingManager.get_instance()
    if stream is not None and manager.is_initialized:
        manager.reset()
    manager.initialize(stream)
    manager.set_level(_resolve_level(level))
    manager.set_colors(use_colors)


def set_log_level(level: Union[int, str]) -> None:
    """Set the console log level.

    Raises:
        ValueError: If an invalid log level name is provided
    """
    manager = LoggingManager.get_instance()
    manager.initialize()
    manager.set_level(_resolve_level(level))


def get_logger(name: str) -> RecallLogger:
    """Get a RecallLogger for the given module name.

    Raises:
        RuntimeError: If the logger class was not installed before the logger was created
    """
    manager = LoggingManager.get_instance()
    manager.initialize()

    logger = logging.getLogger(name)
    if not isinstance(logger, RecallLogger):
        raise RuntimeError(
            f"Logger '{name}' is not a RecallLogger instance. "
            f"Got {type(logger)} instead. This indicates a logging configuration issue."
        )
    return logger


def reset_logging() -> None:
    """Reset logging configuration. Primarily for testing purposes."""
    LoggingManager.get_instance().reset()
