"""libraryapi CLI entry point."""

from __future__ import annotations

import configparser
import logging
from pathlib import Path
from typing import Optional

import typer
from sqlmodel import Session

from library.config import DATA_DIR, DEFAULT_CONFIG_PATH, LibraryApiConfig, load_config
from library.database import get_engine, init_db, reset_database
from library.migrations import get_status, run_migrations, stamp_if_needed
from library.app import run_server
from library.repository import BookRepository, LoanRepository
from library.schedule import run_late_loans_job, start_late_loans_scheduler
from library.services import LoanService
from library.logging_config import setup_logging


__version__ = "0.1.0"

app = typer.Typer(add_completion=False, help="Library management API")
logger = logging.getLogger("libraryapi")


def _ensure_config() -> LibraryApiConfig:
    try:
        return load_config()
    except FileNotFoundError:
        typer.echo("[ERROR] config.ini not found. Run: libraryapi init")
        raise typer.Exit(code=1)


def _write_config(config_path: Path, library_name: str) -> None:
    parser = configparser.ConfigParser(interpolation=None)

    parser["library"] = {
        "name": library_name,
    }
    parser["server"] = {
        "host": "0.0.0.0",
        "port": "8080",
    }
    parser["loans"] = {
        "late_after_days": "4",
    }
    parser["mail"] = {
        "host": "localhost",
        "port": "25",
        "username": "",
        "password": "",
        "use_tls": "false",
        "sender": "library@localhost",
    }
    parser["schedule"] = {
        "enabled": "true",
        "run_at": "00:00",
    }

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as handle:
        parser.write(handle)


def _migrate_to_head() -> None:
    stamp_if_needed()
    current, head = get_status()
    if current != head:
        logger.info(f"Migrating database {current} -> {head} ...")
        run_migrations(backup=True)
        logger.info("Migration complete.")
    else:
        logger.info(f"Database at {head} (up to date).")


@app.command()
def init(
    name: str = typer.Option("My Library", "--name", help="Library name"),
) -> None:
    """Initialize config.ini with default settings."""
    _write_config(DEFAULT_CONFIG_PATH, name)
    typer.echo(f"[OK] Config created at {DEFAULT_CONFIG_PATH}")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Server host"),
    port: Optional[int] = typer.Option(None, "--port", help="Server port"),
    no_schedule: bool = typer.Option(
        False, "--no-schedule", help="Disable daily late-loan emails"
    ),
) -> None:
    """Start the REST API with the daily late-loan job."""
    setup_logging(DATA_DIR)

    config = _ensure_config()
    typer.echo(typer.style(config.library.name, fg=typer.colors.CYAN, bold=True))
    init_db()
    _migrate_to_head()

    scheduler = None
    if not no_schedule:
        scheduler = start_late_loans_scheduler(config)
    if scheduler is None:
        logger.info("Late-loan notifications disabled")

    try:
        run_server(config, host=host, port=port, scheduler_enabled=scheduler is not None)
    except KeyboardInterrupt:
        pass
    finally:
        if scheduler:
            worker, stop_event = scheduler
            stop_event.set()
            worker.join(timeout=5)


@app.command()
def notify() -> None:
    """Email every customer with a late loan now."""
    setup_logging(DATA_DIR)

    config = _ensure_config()
    init_db()
    recipients = run_late_loans_job(config)
    typer.echo(f"[INFO] Late-loan notice sent to {len(recipients)} customer(s)")


@app.command()
def stats() -> None:
    """Show library statistics."""
    config = _ensure_config()
    init_db()

    with Session(get_engine()) as session:
        total_books = BookRepository(session).count()
        loan_repo = LoanRepository(session)
        total_loans = loan_repo.count()
        outstanding = loan_repo.count(outstanding_only=True)
        late = len(
            LoanService(
                loan_repo, late_after_days=config.loans.late_after_days
            ).get_all_late_loans()
        )

    typer.echo("Library Statistics:")
    typer.echo(f"  Database: {config.database_path}")
    typer.echo(f"  Total books: {total_books}")
    typer.echo(f"  Total loans: {total_loans}")
    typer.echo(f"  Outstanding loans: {outstanding}")
    typer.echo(f"  Late loans: {late}")


@app.command()
def migrate(
    check: bool = typer.Option(False, "--check", help="Print status and exit (1 if not at head)"),
) -> None:
    """Run pending database migrations (or check status with --check)."""
    _ensure_config()
    init_db()

    current, head = get_status()

    if check:
        if current == head:
            typer.echo(f"[OK] Database at {head} (head).")
            raise typer.Exit(code=0)
        typer.echo(f"[WARN] Database behind, current: {current}, head: {head}")
        raise typer.Exit(code=1)

    if current == head:
        logger.info(f"Database already at {head} (head). Nothing to do.")
        raise typer.Exit(code=0)

    logger.info(f"Migrating database {current} -> {head} ...")
    run_migrations(backup=True)
    logger.info("Migration complete.")


@app.command()
def reset(
    confirm: bool = typer.Option(False, "--confirm", help="Confirm destructive reset"),
) -> None:
    """Delete every book and loan by recreating the database."""
    if not confirm:
        typer.echo("[ERROR] This will delete your database. Use --confirm.")
        raise typer.Exit(code=1)

    _ensure_config()
    reset_database()
    typer.echo("[INFO] Database reset.")


if __name__ == "__main__":
    app()
