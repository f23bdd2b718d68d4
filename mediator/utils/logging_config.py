"""
Logging Configuration

Configurable logging levels, optional rotating log file and debug helpers
for the semantic mediator. Library modules only create module loggers;
the CLI and the API configure handlers once through ``configure_logging``.
"""

import logging
import logging.handlers
import sys
import time
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, Optional


class LogLevel(Enum):
    """Supported logging levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


SENSITIVE_MARKERS = ("key", "password", "secret", "token")


class LoggingConfig:
    """
    Centralized logging configuration.

    Configures the root logger once per process; later calls are ignored
    until ``reset()``.
    """

    def __init__(self):
        self._configured = False
        self._log_file_handler: Optional[logging.Handler] = None
        self._console_handler: Optional[logging.Handler] = None

    @property
    def configured(self) -> bool:
        return self._configured

    def configure_logging(
        self,
        level: str = "info",
        log_file: Optional[str] = None,
        include_timestamps: bool = True,
        max_log_file_size: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5
    ) -> None:
        """
        Configure logging for the application.

        Args:
            level: Logging level (debug, info, warning, error)
            log_file: Optional log file path
            include_timestamps: Whether to include timestamps in console messages
            max_log_file_size: Maximum log file size before rotation
            backup_count: Number of backup log files to keep
        """
        if self._configured:
            return

        log_level = self._get_log_level(level)

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        root_logger.handlers.clear()

        self._console_handler = logging.StreamHandler(sys.stderr)
        self._console_handler.setLevel(log_level)
        self._console_handler.setFormatter(
            self._create_console_formatter(include_timestamps, level.lower() == "debug")
        )
        root_logger.addHandler(self._console_handler)

        if log_file:
            self._configure_file_logging(log_file, log_level, max_log_file_size, backup_count)

        self._configured = True
        logging.getLogger(__name__).debug(f"Logging configured: level={level}, file={log_file}")

    def reset(self) -> None:
        """Remove installed handlers so logging can be configured again."""
        root_logger = logging.getLogger()
        for handler in (self._console_handler, self._log_file_handler):
            if handler is not None:
                root_logger.removeHandler(handler)
                handler.close()
        root_logger.setLevel(logging.WARNING)
        self._console_handler = None
        self._log_file_handler = None
        self._configured = False

    def _get_log_level(self, level_str: str) -> int:
        level_map = {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR
        }
        return level_map.get((level_str or "").lower(), logging.INFO)

    def _create_console_formatter(self, include_timestamps: bool, debug_mode: bool) -> logging.Formatter:
        parts = []
        if include_timestamps:
            parts.append("%(asctime)s")
        if debug_mode:
            parts.append("%(name)s")
        parts.extend(["%(levelname)s", "%(message)s"])

        return logging.Formatter(
            " - ".join(parts),
            datefmt="%H:%M:%S" if not debug_mode else "%Y-%m-%d %H:%M:%S"
        )

    def _configure_file_logging(
        self,
        log_file: str,
        log_level: int,
        max_size: int,
        backup_count: int
    ) -> None:
        """Configure file logging with rotation."""
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            self._log_file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=max_size,
                backupCount=backup_count,
                encoding='utf-8'
            )
            self._log_file_handler.setLevel(log_level)
            self._log_file_handler.setFormatter(logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            ))
            logging.getLogger().addHandler(self._log_file_handler)

        except OSError as e:
            # Continue with console only
            logging.getLogger(__name__).warning(f"Failed to setup log file {log_file}: {e}")

    def log_configuration_details(self, config: Dict[str, Any], prefix: str = "") -> None:
        """Log configuration details at debug level, masking secrets."""
        logger = logging.getLogger(__name__)
        if not logger.isEnabledFor(logging.DEBUG):
            return

        if not prefix:
            logger.debug("=== Configuration Details ===")
        for key, value in config.items():
            name = f"{prefix}{key}"
            if isinstance(value, dict):
                self.log_configuration_details(value, prefix=f"{name}.")
                continue
            logger.debug(f"  {name}: {mask_value(key, value)}")
        if not prefix:
            logger.debug("=== End Configuration ===")

    def log_operation_timing(self, operation: str, duration: float) -> None:
        logger = logging.getLogger(__name__)
        if duration < 1.0:
            logger.debug(f"{operation} completed in {duration*1000:.0f}ms")
        else:
            logger.info(f"{operation} completed in {duration:.1f}s")

    @contextmanager
    def timed(self, operation: str) -> Iterator[None]:
        """Log the duration of the enclosed block."""
        start = time.time()
        try:
            yield
        finally:
            self.log_operation_timing(operation, time.time() - start)

    def is_debug_enabled(self) -> bool:
        return logging.getLogger().isEnabledFor(logging.DEBUG)


def mask_value(key: str, value: Any) -> Any:
    """Mask values whose key names a secret."""
    if any(marker in key.lower() for marker in SENSITIVE_MARKERS):
        return "***MASKED***" if value else None
    return value


# Global logging configuration instance
logging_config = LoggingConfig()


def configure_logging(level: str = "info", log_file: Optional[str] = None) -> None:
    """
    Convenience function to configure logging.

    Args:
        level: Logging level (debug, info, warning, error)
        log_file: Optional log file path
    """
    logging_config.configure_logging(level=level, log_file=log_file)
