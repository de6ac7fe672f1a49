"""Alembic schema management for libraryapi.

All helpers work on ``database.get_engine()``, so they follow whatever
engine the application (or a test) has installed.
"""

from __future__ import annotations

import shutil
from typing import Optional, Tuple

from alembic import command as alembic_command
from alembic.config import Config as AlembicConfig
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import inspect

from .config import PROJECT_ROOT
from .logging_config import get_logger
from . import database

logger = get_logger(__name__)


def _alembic_cfg() -> AlembicConfig:
    cfg = AlembicConfig(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    return cfg


def head_revision() -> str:
    return ScriptDirectory.from_config(_alembic_cfg()).get_current_head() or "unknown"


def current_revision() -> Optional[str]:
    """Revision recorded in the database, or None if it was never stamped."""
    with database.get_engine().connect() as conn:
        return MigrationContext.configure(conn).get_current_revision()


def get_status() -> Tuple[Optional[str], str]:
    """Return (current_revision, head_revision)."""
    return current_revision(), head_revision()


def run_migrations(backup: bool = True) -> None:
    """Upgrade the database to head, copying library.db to library.db.bak first."""
    db_file = database.database_file()
    if backup and db_file.exists():
        shutil.copy2(db_file, db_file.with_suffix(".db.bak"))
    alembic_command.upgrade(_alembic_cfg(), "head")


def stamp_if_needed() -> None:
    """Mark a schema built by ``init_db()`` (tables, no version row) as head."""
    tables = set(inspect(database.get_engine()).get_table_names())
    if "books" in tables and "alembic_version" not in tables:
        logger.info("Unversioned schema found, stamping as head")
        alembic_command.stamp(_alembic_cfg(), "head")
