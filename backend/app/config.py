"""Server-level configuration from environment variables.

Only contains settings needed before the database is available:
database URL, server host/port, log location and debug mode. All fields
have defaults; no .env file is required.

All user-configurable settings (TMDB key, scan extensions, scan schedule)
live in the database via AppConfig (see models/app_config.py).
"""

import sys
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _data_dir() -> Path:
    return Path.home() / ".reelvault"


def _default_database_url() -> str:
    """Return the default database URL, using ~/.reelvault/ for frozen builds."""
    if getattr(sys, "frozen", False):
        db_dir = _data_dir()
        db_dir.mkdir(parents=True, exist_ok=True)
        return f"sqlite+aiosqlite:///{db_dir / 'reelvault.db'}"
    return "sqlite+aiosqlite:///./reelvault.db"


class Settings(BaseSettings):
    """Server infrastructure settings. Loaded from environment variables; optionally from .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="REELVAULT_",
        case_sensitive=False,
    )

    # Database
    database_url: str = _default_database_url()

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Logging
    log_dir: Path = _data_dir()

    # Run the scheduled scanner inside the API process
    scheduler_enabled: bool = True


settings = Settings()
