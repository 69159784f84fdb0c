"""Tests for the startup schema migration.

The migration must detect column mismatches, preserve app_config data across
a rebuild and never drop durable library tables.
"""

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.database import _migrate_schema
from app.models.app_config import AppConfig


@pytest.fixture
async def migration_engine():
    """Create a fresh engine for migration testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    await engine.dispose()


@pytest.fixture
async def migration_factory(migration_engine):
    """Create a session factory for migration testing."""
    return sessionmaker(migration_engine, class_=AsyncSession, expire_on_commit=False)


async def _columns(session, table_name: str) -> set[str]:
    result = await session.execute(text(f"PRAGMA table_info('{table_name}')"))
    return {row[1] for row in result.fetchall()}


class TestSchemaMigration:
    async def test_migration_is_idempotent_on_correct_schema(self, migration_engine):
        async with migration_engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

        await _migrate_schema(migration_engine)
        await _migrate_schema(migration_engine)

        async with migration_engine.connect() as conn:
            result = await conn.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))
            tables = {row[0] for row in result.fetchall()}
        assert {
            "app_config",
            "media_folders",
            "scanning_conflicts",
            "movies",
            "tv_series",
            "episodes",
        } <= tables

    async def test_migration_preserves_app_config_data(self, migration_engine, migration_factory):
        async with migration_engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
            await conn.execute(
                text("ALTER TABLE app_config ADD COLUMN obsolete_field VARCHAR DEFAULT ''")
            )

        async with migration_factory() as session:
            session.add(
                AppConfig(
                    tmdb_api_key="eyJtest",
                    tmdb_language="de-DE",
                    scan_file_extensions=".mkv",
                    scan_interval_minutes=15,
                )
            )
            await session.commit()

        await _migrate_schema(migration_engine)

        async with migration_factory() as session:
            row = (
                await session.execute(
                    text(
                        "SELECT tmdb_api_key, tmdb_language, scan_file_extensions, "
                        "scan_interval_minutes FROM app_config LIMIT 1"
                    )
                )
            ).fetchone()
            assert tuple(row) == ("eyJtest", "de-DE", ".mkv", 15)
            assert "obsolete_field" not in await _columns(session, "app_config")

    async def test_migration_fills_missing_columns_with_defaults(
        self, migration_engine, migration_factory
    ):
        async with migration_engine.begin() as conn:
            await conn.execute(
                text(
                    """
                    CREATE TABLE app_config (
                        id INTEGER PRIMARY KEY,
                        tmdb_api_key VARCHAR DEFAULT '',
                        tmdb_language VARCHAR DEFAULT 'en-US'
                    )
                """
                )
            )
            await conn.execute(
                text("INSERT INTO app_config (tmdb_api_key, tmdb_language) VALUES ('old', 'fr-FR')")
            )

        await _migrate_schema(migration_engine)

        async with migration_factory() as session:
            row = (
                await session.execute(
                    text(
                        "SELECT tmdb_api_key, tmdb_language, tmdb_rate_limit, "
                        "scan_interval_minutes FROM app_config LIMIT 1"
                    )
                )
            ).fetchone()
            assert tuple(row) == ("old", "fr-FR", 30, 60)

    async def test_durable_tables_are_never_dropped(self, migration_engine, migration_factory):
        async with migration_engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
            await conn.execute(text("ALTER TABLE movies ADD COLUMN legacy_col VARCHAR DEFAULT ''"))
            await conn.execute(
                text(
                    "INSERT INTO media_folders (path, type, active, created_at, updated_at) "
                    "VALUES ('/media/movies', 'MOVIES', 1, datetime('now'), datetime('now'))"
                )
            )

        await _migrate_schema(migration_engine)

        async with migration_factory() as session:
            count = (await session.execute(text("SELECT COUNT(*) FROM media_folders"))).scalar()
            assert count == 1
            assert "legacy_col" in await _columns(session, "movies")
