"""
Logging service for HoleMark.

Sets up the root logger once with a console handler and a dated file
handler (~/.local/share/holemark/logs/holemark_YYYYMMDD.log), and routes
Qt's own diagnostics (image plugin errors, painter warnings) into the same
log under the "qt" logger.

The level can be changed after startup with set_log_level(), which is how
the "log_level" config key is applied once the ConfigService is loaded.
"""

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional, Union

from PySide6.QtCore import QtMsgType, qInstallMessageHandler


# Default log directory following XDG Base Directory Specification
DEFAULT_LOG_DIR = Path.home() / ".local" / "share" / "holemark" / "logs"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}

_logging_initialized = False
# Handlers installed by setup_logging; set_log_level only touches these
_handlers: List[logging.Handler] = []


def parse_log_level(level: Union[int, str, None], default: int = logging.INFO) -> int:
    """
    Resolve a level given as an int or a name ("debug", "WARNING").

    Unknown names fall back to default.
    """
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if isinstance(resolved, int):
            return resolved
    return default


def log_file_path(log_dir: Path, day: Optional[date] = None) -> Path:
    """One log file per day."""
    day = day or date.today()
    return log_dir / f"holemark_{day.strftime('%Y%m%d')}.log"


def qt_message_handler(mode: QtMsgType, context, message: str) -> None:
    """Forward a Qt diagnostic to the "qt" logger."""
    logging.getLogger("qt").log(_QT_LEVELS.get(mode, logging.WARNING), message)


def setup_logging(
    log_level: Union[int, str] = logging.INFO,
    log_to_file: bool = True,
    log_dir: Optional[Path] = None,
) -> None:
    """
    Configure the logging system for HoleMark.

    Args:
        log_level: Level as an int or a name.
        log_to_file: Whether to also log to a file.
        log_dir: Directory for log files. Defaults to ~/.local/share/holemark/logs/

    Calling this more than once is a no-op.
    """
    global _logging_initialized

    if _logging_initialized:
        return

    level = parse_log_level(log_level)
    log_dir = log_dir or DEFAULT_LOG_DIR
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    _handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
    _handlers.append(console_handler)

    if log_to_file:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file_path(log_dir), encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            _handlers.append(file_handler)
        except OSError as e:
            root_logger.warning(f"Could not create log file: {e}. Logging to console only.")

    qInstallMessageHandler(qt_message_handler)
    _logging_initialized = True


def set_log_level(level: Union[int, str]) -> int:
    """
    Change the root level and the level of the handlers set up here.

    Returns the level that was applied.
    """
    resolved = parse_log_level(level)
    logging.getLogger().setLevel(resolved)
    for handler in _handlers:
        handler.setLevel(resolved)
    return resolved


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: The name for the logger, typically __name__ of the calling module.

    Returns:
        A configured Logger instance.
    """
    return logging.getLogger(name)
