"""
Logging setup and the in-memory operation journal.

Every command is logged through the standard ``logging`` module. The root
logger writes to a rotating file in the configuration directory, and an
``OperationLog`` handler keeps the most recent records in memory so the
``log`` command can show them without reading the file back.
"""

import logging
import os
import sys
from collections import deque
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from file_commander.config import AppConfig

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

log = logging.getLogger("file_commander")

_installed: List[logging.Handler] = []


class OperationLog(logging.Handler):
    """Bounded journal of log records tagged with an ``operation``."""

    def __init__(self, capacity: int = 1000, level=logging.INFO):
        super().__init__(level)
        self.records: deque = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(record, "operation", None) is None:
            return
        self.records.append(record)

    def entries(self, limit: Optional[int] = None) -> List[logging.LogRecord]:
        """Most recent records, oldest first; a non-positive limit returns all."""
        records = list(self.records)
        if limit is None or limit <= 0 or limit >= len(records):
            return records
        return records[-limit:]

    def clear(self) -> None:
        self.records.clear()


def format_entry(record: logging.LogRecord) -> str:
    timestamp = datetime.fromtimestamp(record.created).strftime(DATE_FORMAT)
    return f"[{timestamp}] [{record.levelname}] {record.getMessage()}"


def record_operation(level: int, operation: str, message: str, path="", error="") -> None:
    """Log one command outcome; the journal picks up anything tagged with ``operation``."""
    text = f"{operation}: {message}"
    if path:
        text += f" (path: {path})"
    if error:
        text += f" [error: {error}]"
    log.log(level, text, extra={"operation": operation})


def _install(logger: logging.Logger, handler: logging.Handler) -> None:
    logger.addHandler(handler)
    _installed.append(handler)


def shutdown_logging() -> None:
    """Detach and close the handlers installed by ``setup_logging``."""
    logger = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        logger.removeHandler(handler)
        handler.close()


def setup_logging(config: AppConfig, journal: Optional[OperationLog] = None) -> OperationLog:
    """Configure the rotating log file, optional stderr output and the journal."""
    journal = journal or OperationLog(config.journal_capacity)
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, config.log_level, logging.INFO))
    shutdown_logging()
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    if config.verbose:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        _install(logger, console_handler)

    try:
        config.ensure_dirs()
        file_handler = RotatingFileHandler(
            config.log_file,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
        )
        file_handler.setFormatter(formatter)
        _install(logger, file_handler)
        os.chmod(config.log_file, 0o600)
    except OSError as e:
        # the session still works without a log file
        log.warning(f"Could not set up log file {config.log_file}: {e}")

    _install(logger, journal)
    return journal
