"""Config management for libraryapi.

Reads `config.ini` from DATA_DIR (the project root unless the DATA_DIR
environment variable says otherwise).
"""

from __future__ import annotations

import configparser
import dataclasses
import datetime
import os
import pathlib
from typing import Optional

from .logging_config import get_logger

logger = get_logger(__name__)

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]

# DATA_DIR holds all persistent state (config.ini, library.db, logs).
DATA_DIR = pathlib.Path(os.environ.get("DATA_DIR", str(PROJECT_ROOT)))
DEFAULT_CONFIG_PATH = DATA_DIR / "config.ini"
DATABASE_PATH = DATA_DIR / "library.db"

DEFAULT_LATE_LOANS_MESSAGE = "Atenção! Você tem um empréstimo atrasado. Favor devolver o livro o mais rápido possível."


@dataclasses.dataclass
class LibraryConfig:
    name: str = "My Library"


@dataclasses.dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8080


@dataclasses.dataclass
class LoansConfig:
    # A loan is late once its date is strictly before today minus this many days
    late_after_days: int = 4


@dataclasses.dataclass
class MailConfig:
    host: str = "localhost"
    port: int = 25
    username: str = ""
    password: str = ""
    use_tls: bool = False
    sender: str = "library@localhost"
    subject: str = "Livro com empréstimo atrasado"
    late_loans_message: str = DEFAULT_LATE_LOANS_MESSAGE

    @property
    def login_enabled(self) -> bool:
        return bool(self.username.strip() and self.password)


@dataclasses.dataclass
class ScheduleConfig:
    enabled: bool = True
    run_at: datetime.time = datetime.time(0, 0)


@dataclasses.dataclass
class LibraryApiConfig:
    library: LibraryConfig
    server: ServerConfig
    loans: LoansConfig
    mail: MailConfig
    schedule: ScheduleConfig

    @property
    def server_host(self) -> str:
        return self.server.host

    @property
    def server_port(self) -> int:
        return self.server.port

    @property
    def database_path(self) -> pathlib.Path:
        return DATABASE_PATH


def default_config() -> LibraryApiConfig:
    return LibraryApiConfig(
        library=LibraryConfig(),
        server=ServerConfig(),
        loans=LoansConfig(),
        mail=MailConfig(),
        schedule=ScheduleConfig(),
    )


def _parse_bool(value: str, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_time(value: str, default: datetime.time) -> datetime.time:
    """Parse an ``HH:MM`` string; fall back to *default* on bad input."""
    try:
        hours, minutes = value.strip().split(":", 1)
        return datetime.time(int(hours), int(minutes))
    except (AttributeError, ValueError):
        logger.warning(f"Invalid schedule time {value!r}, using {default:%H:%M}")
        return default


def load_config(config_path: Optional[pathlib.Path] = None) -> LibraryApiConfig:
    """Load configuration from config.ini.

    Defaults to `config.ini` in DATA_DIR.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    parser = configparser.ConfigParser(interpolation=None)
    parser.read(path, encoding="utf-8")

    library = LibraryConfig(
        name=parser.get("library", "name", fallback="My Library"),
    )

    server = ServerConfig(
        host=parser.get("server", "host", fallback="0.0.0.0"),
        port=parser.getint("server", "port", fallback=8080),
    )

    loans = LoansConfig(
        late_after_days=parser.getint("loans", "late_after_days", fallback=4),
    )

    mail = MailConfig(
        host=parser.get("mail", "host", fallback="localhost"),
        port=parser.getint("mail", "port", fallback=25),
        username=parser.get("mail", "username", fallback="").strip(),
        password=parser.get("mail", "password", fallback="").strip(),
        use_tls=_parse_bool(parser.get("mail", "use_tls", fallback="false"), False),
        sender=parser.get("mail", "sender", fallback="library@localhost"),
        subject=parser.get("mail", "subject", fallback=MailConfig.subject),
        late_loans_message=parser.get(
            "mail", "late_loans_message", fallback=DEFAULT_LATE_LOANS_MESSAGE
        ),
    )

    schedule = ScheduleConfig(
        enabled=_parse_bool(
            parser.get("schedule", "enabled", fallback="true"), True
        ),
        run_at=_parse_time(
            parser.get("schedule", "run_at", fallback="00:00"), datetime.time(0, 0)
        ),
    )

    return LibraryApiConfig(
        library=library,
        server=server,
        loans=loans,
        mail=mail,
        schedule=schedule,
    )


_cached_config: Optional[LibraryApiConfig] = None


def get_config() -> LibraryApiConfig:
    """Return the cached config singleton. Loads from disk on first call."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reset_config_cache() -> None:
    """Clear the cached config (useful for tests)."""
    global _cached_config
    _cached_config = None
