"""Configuration service for managing app settings.

Provides functions to get and update configuration stored in SQLite.
"""

import logging
from functools import lru_cache

from sqlmodel import select

from app.core.errors import ConfigurationError
from app.database import async_session
from app.models.app_config import AppConfig

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = {"tmdb_api_key"}


def validate_config_values(values: dict) -> None:
    """Reject values the scanner could not work with."""
    if "scan_interval_minutes" in values and values["scan_interval_minutes"] < 0:
        raise ConfigurationError("scan_interval_minutes must be >= 0")
    if "tmdb_rate_limit" in values and values["tmdb_rate_limit"] < 1:
        raise ConfigurationError("tmdb_rate_limit must be >= 1")
    if "scan_file_extensions" in values:
        parsed = AppConfig(scan_file_extensions=values["scan_file_extensions"])
        if not parsed.file_extensions:
            raise ConfigurationError("scan_file_extensions must list at least one extension")


async def get_config() -> AppConfig:
    """Get the current configuration, creating defaults if none exists."""
    async with async_session() as session:
        result = await session.execute(select(AppConfig).limit(1))
        config = result.scalar_one_or_none()

        if config is None:
            config = AppConfig()
            session.add(config)
            await session.commit()
            await session.refresh(config)
            logger.info("Created default configuration")

        return config


@lru_cache(maxsize=1)
def _sync_engine():
    from sqlmodel import create_engine

    from app.config import settings

    # Transform 'sqlite+aiosqlite:///...' to 'sqlite:///...'
    return create_engine(settings.database_url.replace("+aiosqlite", ""))


def get_config_sync() -> AppConfig:
    """Get configuration synchronously for worker threads (TMDB client)."""
    from sqlmodel import Session

    with Session(_sync_engine()) as session:
        config = session.exec(select(AppConfig).limit(1)).first()

        if config is None:
            config = AppConfig()
            session.add(config)
            session.commit()
            session.refresh(config)

        return config


async def update_config(**kwargs) -> AppConfig:
    """Update configuration with provided values.

    Args:
        **kwargs: Field names and values to update

    Returns:
        Updated AppConfig instance

    Raises:
        ConfigurationError: If a value is out of range
    """
    validate_config_values({k: v for k, v in kwargs.items() if v is not None})

    async with async_session() as session:
        result = await session.execute(select(AppConfig).limit(1))
        config = result.scalar_one_or_none()

        if config is None:
            config = AppConfig()
            session.add(config)

        for key, value in kwargs.items():
            if not hasattr(config, key) or key == "id":
                continue
            if value is None:
                continue
            # Skip empty strings for sensitive fields (keep existing value)
            if key in SENSITIVE_FIELDS and isinstance(value, str) and not value.strip():
                continue
            setattr(config, key, value)

        await session.commit()
        await session.refresh(config)

        logger.info(f"Updated configuration: {list(kwargs.keys())}")
        return config
