"""Logging for libraryapi: rotating ``libraryapi.log`` plus a rich console."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

LOG_FILENAME = "libraryapi.log"
FILE_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)s - %(message)s"

_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "alembic.runtime.migration")


def _file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / LOG_FILENAME,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _console_handler(level: int) -> logging.Handler:
    console = Console(theme=Theme({"logging.level.info": "bold cyan"}))
    handler = RichHandler(console=console, rich_tracebacks=True, show_time=False, show_path=False)
    handler.setLevel(level)
    return handler


def setup_logging(log_dir: Path, log_level: str = "INFO") -> None:
    """Attach the file and console handlers to the root logger (once per process).

    Args:
        log_dir: directory for libraryapi.log (DATA_DIR in the CLI)
        log_level: console level (DEBUG, INFO, WARNING, ERROR); the file gets everything
    """
    root_logger = logging.getLogger()
    if getattr(root_logger, "_libraryapi_configured", False):
        return

    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(_file_handler(log_dir))
    root_logger.addHandler(_console_handler(getattr(logging, log_level.upper(), logging.INFO)))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger._libraryapi_configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
