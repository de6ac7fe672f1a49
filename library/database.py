"""SQLite engine and sessions for libraryapi.

Every connection runs with ``PRAGMA foreign_keys=ON`` so a loan can never
point at a book that does not exist, and a book that still has loans cannot
be deleted out from under them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from .config import DATABASE_PATH


def _enable_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def make_engine(db_path: Path) -> Engine:
    """Engine for the SQLite file at *db_path* with foreign keys enforced."""
    # check_same_thread=False: sessions are used from FastAPI's threadpool
    new_engine = create_engine(
        f"sqlite:///{db_path}", connect_args={"check_same_thread": False}
    )
    event.listen(new_engine, "connect", _enable_sqlite_pragmas)
    return new_engine


engine = make_engine(DATABASE_PATH)


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request."""
    with Session(engine) as session:
        yield session


def get_engine() -> Engine:
    """Return the global engine (looked up at call time so tests can swap it)."""
    return engine


def database_file() -> Path:
    return Path(engine.url.database)


def init_db() -> None:
    """Create any missing tables from the SQLModel metadata."""
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def reset_database() -> None:
    """Delete the database file and recreate an empty schema."""
    engine.dispose()
    database_file().unlink(missing_ok=True)
    init_db()
