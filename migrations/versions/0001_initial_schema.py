"""Initial schema: books, loans

Revision ID: 0001
Revises: None
Create Date: 2026-10-19 00:00:00
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None


def _table_exists(name: str) -> bool:
    """Check whether a table already exists in the database."""
    conn = op.get_bind()
    result = conn.execute(
        sa.text("SELECT 1 FROM sqlite_master WHERE type='table' AND name=:n"),
        {"n": name},
    )
    return result.fetchone() is not None


def upgrade() -> None:
    # Guarded so the migration also runs on a DB created by init_db()'s create_all()

    if not _table_exists("books"):
        op.create_table(
            "books",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("title", sa.String(), nullable=False),
            sa.Column("author", sa.String(), nullable=False),
            sa.Column("isbn", sa.String(), nullable=False),
        )
        op.create_index("ix_books_isbn", "books", ["isbn"], unique=False)

    if not _table_exists("loans"):
        op.create_table(
            "loans",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("customer", sa.String(), nullable=False),
            sa.Column("customer_email", sa.String(), nullable=True),
            sa.Column("loan_date", sa.Date(), nullable=False),
            sa.Column("returned", sa.Boolean(), nullable=True),
            sa.Column("book_id", sa.Integer(), sa.ForeignKey("books.id"), nullable=True),
        )
        op.create_index("ix_loans_book_id", "loans", ["book_id"], unique=False)


def downgrade() -> None:
    op.drop_table("loans")
    op.drop_table("books")
