"""Database setup with SQLModel and async SQLite."""

import logging

import sqlalchemy
from sqlalchemy import text as sa_text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from app.config import settings

# Import all models so their tables are registered with SQLModel.metadata
from app.models import (  # noqa: F401
    AppConfig,
    Episode,
    MediaFolder,
    Movie,
    ScanningConflict,
    TvSeries,
)

logger = logging.getLogger(__name__)

# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    future=True,
    connect_args={"check_same_thread": False},  # Needed for SQLite
)


@sqlalchemy.event.listens_for(engine.sync_engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Async session factory
async_session = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Initialize the database, creating all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    await _migrate_schema(engine)

    logger.info("Database initialized successfully")


def _get_expected_columns(table_name: str) -> set[str]:
    """Get expected column names from the SQLModel metadata for a table."""
    table = SQLModel.metadata.tables.get(table_name)
    if table is None:
        return set()
    return {col.name for col in table.columns}


async def _get_actual_columns(conn, table_name: str) -> set[str]:
    """Get actual column names from the database for a table."""
    result = await conn.execute(sa_text(f"PRAGMA table_info('{table_name}')"))
    rows = result.fetchall()
    return {row[1] for row in rows}  # column name is at index 1


async def _migrate_schema(target_engine: AsyncEngine | None = None) -> None:
    """Compare live schema against SQLModel models and resolve mismatches.

    - **app_config**: Preserve data: read existing rows, drop/recreate table,
      restore values (mapping by column name). Users never lose their API key.
    - **catalog / conflict / folder tables**: Durable library data is never
      dropped automatically; a mismatch is logged for the operator.
    - Idempotent: no-op when schema already matches.
    """
    eng = target_engine or engine

    async with eng.begin() as conn:
        result = await conn.execute(sa_text("SELECT name FROM sqlite_master WHERE type='table'"))
        existing_tables = {row[0] for row in result.fetchall()}

        if "app_config" in existing_tables:
            actual_cols = await _get_actual_columns(conn, "app_config")
            expected_cols = _get_expected_columns("app_config")

            if actual_cols != expected_cols:
                extra = actual_cols - expected_cols
                missing = expected_cols - actual_cols
                logger.info(
                    f"Schema mismatch in app_config: "
                    f"extra: {extra or 'none'}, missing: {missing or 'none'}"
                )

                rows = (await conn.execute(sa_text("SELECT * FROM app_config"))).fetchall()
                col_result = await conn.execute(sa_text("PRAGMA table_info('app_config')"))
                old_col_names = [row[1] for row in col_result.fetchall()]

                await conn.execute(sa_text("DROP TABLE app_config"))
                await conn.run_sync(
                    lambda sync_conn: AppConfig.__table__.create(sync_conn, checkfirst=True)
                )

                # Restore via model defaults so new NOT NULL columns get values
                new_fields = set(AppConfig.model_fields.keys())
                for row in rows:
                    old_data = dict(zip(old_col_names, row, strict=False))
                    config = AppConfig()
                    for key, value in old_data.items():
                        if key == "id":
                            continue
                        if key in new_fields and value is not None:
                            setattr(config, key, value)
                    insert_data = {
                        name: getattr(config, name) for name in new_fields if name != "id"
                    }
                    cols_str = ", ".join(insert_data.keys())
                    placeholders = ", ".join(f":{k}" for k in insert_data.keys())
                    await conn.execute(
                        sa_text(f"INSERT INTO app_config ({cols_str}) VALUES ({placeholders})"),
                        insert_data,
                    )
                    logger.info(f"Restored app_config row with {len(insert_data)} fields")

        durable_tables = ["media_folders", "scanning_conflicts", "movies", "tv_series", "episodes"]
        for table_name in durable_tables:
            if table_name not in existing_tables:
                continue
            actual_cols = await _get_actual_columns(conn, table_name)
            expected_cols = _get_expected_columns(table_name)
            if actual_cols != expected_cols:
                logger.warning(
                    f"Schema mismatch in {table_name} (extra: "
                    f"{actual_cols - expected_cols or 'none'}, missing: "
                    f"{expected_cols - actual_cols or 'none'}); migrate it manually"
                )
