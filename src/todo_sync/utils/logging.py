"""Logging configuration for todo-sync."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from todo_sync.utils.storage import DEFAULT_CONFIG_DIR

LOG_FILE_NAME = "todo-sync.log"
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 3

# httpx logs every request at INFO
_CHATTY_LOGGERS = ("httpx", "httpcore")


def setup_logging(log_level: int = logging.INFO, config_dir: Path | None = None) -> Path:
    """Send log records to a rotating file in the config directory and to stderr.

    Every sync appends to the same file, so it is rotated once it reaches
    LOG_MAX_BYTES. The console only shows warnings and errors unless
    log_level is DEBUG, since the CLI prints its own summary tables.

    Args:
        log_level: Level for the todo-sync loggers, e.g. logging.DEBUG for --verbose.
        config_dir: Directory holding the log file. Defaults to ~/.todo-sync/

    Returns:
        Path of the log file.
    """
    config_dir = config_dir or DEFAULT_CONFIG_DIR
    config_dir.mkdir(parents=True, exist_ok=True)
    log_file = config_dir / LOG_FILE_NAME

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root_logger.addHandler(console_handler)

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(
            logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
        )

    return log_file
