"""Shared fixtures for pipeline tests.

These tests wire the real parser, matcher, conflict store, catalog sync and
scanner around an in-memory database and the fake metadata provider, then
walk real (empty) media files created under tmp_path.
"""

from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import app.database  # noqa: F401  (registers every table on SQLModel.metadata)
from app.api.websocket import ConnectionManager
from app.services.pipeline import build_pipeline

PIPELINE_DB_URL = "sqlite+aiosqlite:///:memory:"


class RecordingConnectionManager(ConnectionManager):
    """Keeps every broadcast message instead of sending it."""

    def __init__(self) -> None:
        super().__init__()
        self.messages: list[dict[str, Any]] = []

    async def broadcast(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    def invalidations(self, resource: str) -> list[dict[str, Any]]:
        return [
            m for m in self.messages if m["type"] == "invalidate" and m["resource"] == resource
        ]

    def scan_events(self) -> list[str]:
        return [m["event"] for m in self.messages if m["type"] == "scan_event"]


@pytest.fixture
async def pipeline_engine():
    engine = create_async_engine(
        PIPELINE_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    await engine.dispose()


@pytest.fixture
async def pipeline_session_maker(pipeline_engine):
    async with pipeline_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield sessionmaker(pipeline_engine, class_=AsyncSession, expire_on_commit=False)

    async with pipeline_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


@pytest.fixture
def ws_recorder():
    return RecordingConnectionManager()


@pytest.fixture
async def pipeline(pipeline_session_maker, ws_recorder, fake_provider):
    """A fully wired pipeline backed by the fake provider."""
    pipeline = build_pipeline(pipeline_session_maker, ws_recorder, provider=fake_provider)
    yield pipeline
    await pipeline.scanner.stop()
