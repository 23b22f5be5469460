"""
Logging configuration for sftpdash.

Console output goes through rich's ``RichHandler`` when rich is installed,
with an optional plain-text file log alongside it.
"""

import logging
import sys
import traceback
from pathlib import Path
from typing import Any

try:
    import importlib.util

    RICH_AVAILABLE = importlib.util.find_spec("rich.logging") is not None
except Exception:
    RICH_AVAILABLE = False

ROOT_LOGGER_NAME = "sftpdash"


class FileFormatter(logging.Formatter):
    """Formatter for file logs - clean and parseable."""

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with full exception info for errors."""
        result = super().format(record)
        if record.exc_info and not record.exc_text:
            result += "\n" + "".join(traceback.format_exception(*record.exc_info))
        return result


class ConsoleFormatter(logging.Formatter):
    """``level: timestamp - msg``, with file:line added for errors."""

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        base = f"{record.levelname}: {self.formatTime(record)} - {record.getMessage()}"
        if record.levelno >= logging.ERROR and record.pathname:
            base = (
                f"{record.levelname}: {self.formatTime(record)} - "
                f"{Path(record.pathname).name}:{record.lineno} - {record.getMessage()}"
            )
        return base


LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _parse_level(level: str | int) -> int:
    """
    Parse logging level from string or int.

    Unknown names fall back to INFO.
    """
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level_upper = level.upper()
        if level_upper in LEVEL_MAP:
            return LEVEL_MAP[level_upper]
    return logging.INFO


def setup_logging(
    level: str | int = logging.INFO,
    log_file: str | Path | None = None,
    format_string: str | None = None,
    file_mode: str = "a",
    console_enabled: bool = True,
    use_rich: bool = True,
) -> logging.Logger:
    """
    Setup logging for the ``sftpdash`` logger tree.

    Args:
        level: Logging level as string (DEBUG, INFO, etc.) or int (default: INFO)
        log_file: Optional file path to write logs to (default: None, console only)
        format_string: Optional custom console format string
        file_mode: 'a' to append to the log file, 'w' to overwrite (default: 'a')
        console_enabled: Whether to log to the console (default: True)
        use_rich: Use rich's RichHandler for the console when available (default: True)

    Returns:
        The ``sftpdash`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    level_int = _parse_level(level)
    logger.setLevel(level_int)

    if console_enabled:
        if use_rich and RICH_AVAILABLE and format_string is None:
            from rich.logging import RichHandler

            console_handler: logging.Handler = RichHandler(
                level=level_int,
                show_time=True,
                show_path=False,
                markup=False,
                rich_tracebacks=True,
                tracebacks_show_locals=False,
                log_time_format="[%X]",
            )
        else:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(level_int)
            if format_string is None:
                console_handler.setFormatter(ConsoleFormatter())
            else:
                console_handler.setFormatter(logging.Formatter(format_string))
        logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode=file_mode)
        # File captures everything the logger lets through
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(FileFormatter())
        logger.addHandler(file_handler)

    # paramiko is chatty at INFO; keep it to warnings unless we are debugging
    logging.getLogger("paramiko").setLevel(logging.DEBUG if level_int <= logging.DEBUG else logging.WARNING)

    return logger


def setup_logging_from_config(config: dict[str, Any], project_dir: Path | None = None) -> logging.Logger:
    """
    Setup logging from the ``logging:`` section of the configuration.

    Recognised keys: ``level``, ``file``, ``file_mode``, ``format``,
    ``console_enabled``, ``console_type`` (``rich`` or ``plain``).
    Relative log file paths are resolved against ``project_dir``.
    """
    logging_config = config.get("logging") or {}

    log_file = logging_config.get("file") or logging_config.get("log_file")
    if log_file and project_dir:
        log_file = Path(log_file)
        if not log_file.is_absolute():
            log_file = project_dir / log_file

    return setup_logging(
        level=logging_config.get("level", logging.INFO),
        log_file=log_file,
        format_string=logging_config.get("format"),
        file_mode=logging_config.get("file_mode", "a"),
        console_enabled=logging_config.get("console_enabled", True),
        use_rich=logging_config.get("console_type", "rich") == "rich",
    )


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (default: "sftpdash")

    Returns:
        Logger instance that propagates to the ``sftpdash`` handlers
    """
    logger = logging.getLogger(name)
    logger.propagate = True
    return logger
