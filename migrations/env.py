"""Alembic environment for the books/loans schema.

Runs against ``library.database.get_engine()`` so ``libraryapi migrate``
and the test suite upgrade the same database the app is using. Offline mode
renders SQL for that engine's URL.
"""

from __future__ import annotations

from alembic import context
from sqlmodel import SQLModel

from library import models as _models  # noqa: F401  (registers books/loans)
from library.database import get_engine

target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=str(get_engine().url),
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    with get_engine().connect() as conn:
        # batch mode: SQLite cannot ALTER constraints in place
        context.configure(
            connection=conn,
            target_metadata=target_metadata,
            render_as_batch=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
