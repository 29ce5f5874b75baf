"""
Logging setup for the backup run.

Records from every thread go through a ``QueueHandler`` on the package
logger; a ``QueueListener`` owns the real handlers (an appending log file and
the console) so worker threads never write to the sinks directly.

Usage:
>>> from rsync_backup.core.logging_setup import configure_logging, shutdown_logging
>>> configure_logging(Path("/var/log/backup-rsync.log"))
>>> ...
>>> shutdown_logging()  # flushes and closes handlers
"""

from __future__ import annotations

import logging
import logging.handlers
import queue
from pathlib import Path

LOGGER_NAME = "rsync_backup"
LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(threadName)s] %(message)s"

_listener: logging.handlers.QueueListener | None = None


def configure_logging(log_file: Path | None, level: int = logging.INFO) -> logging.Logger:
    """
    Route the package logger to ``log_file`` and the console.

    Calling it again replaces the previous configuration.

    Args:
        log_file: File to append to, or None for console only.
        level: Threshold for the package logger.

    Raises:
        SystemExit: if the log file cannot be opened.
    """
    global _listener

    shutdown_logging()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = []

    if log_file is not None:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            raise SystemExit(f"Cannot open log file {log_file}: {exc}") from exc
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    logger.addHandler(logging.handlers.QueueHandler(log_queue))

    _listener = logging.handlers.QueueListener(log_queue, *handlers)
    _listener.start()
    return logger


def shutdown_logging() -> None:
    """Stop the listener and close every handler on the package logger."""
    global _listener

    if _listener is not None:
        _listener.stop()
        for handler in _listener.handlers:
            handler.flush()
            handler.close()
        _listener = None

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
