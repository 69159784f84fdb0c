"""Unit tests for the periodic scan scheduler."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core.errors import FolderEnumerationError, ScanInProgressError
from app.models import AppConfig
from app.services.scan_scheduler import DISABLED_POLL_SECONDS, ScanScheduler
from app.services.scanner import ScanSummary


def _loader(**values):
    async def load():
        return AppConfig(**values)

    return load


@pytest.fixture
def orchestrator():
    mock = MagicMock()
    mock.scan_active_folders = AsyncMock(return_value=ScanSummary(files_found=3))
    return mock


class TestRunOnce:
    async def test_skips_without_api_key(self, orchestrator):
        scheduler = ScanScheduler(orchestrator, _loader(tmdb_api_key="  "))

        assert await scheduler.run_once() is None
        orchestrator.scan_active_folders.assert_not_awaited()

    async def test_runs_scan(self, orchestrator):
        scheduler = ScanScheduler(orchestrator, _loader(tmdb_api_key="key"))

        summary = await scheduler.run_once()

        assert summary.files_found == 3
        orchestrator.scan_active_folders.assert_awaited_once()

    async def test_overlapping_scan_is_skipped(self, orchestrator):
        orchestrator.scan_active_folders.side_effect = ScanInProgressError(["/media/movies"])
        scheduler = ScanScheduler(orchestrator, _loader(tmdb_api_key="key"))

        assert await scheduler.run_once() is None

    async def test_unreadable_folders_do_not_escape(self, orchestrator):
        orchestrator.scan_active_folders.side_effect = FolderEnumerationError(
            "Could not enumerate", paths=["/mnt/gone"]
        )
        scheduler = ScanScheduler(orchestrator, _loader(tmdb_api_key="key"))

        assert await scheduler.run_once() is None


class TestPollLoop:
    async def test_start_and_stop(self, orchestrator):
        scheduler = ScanScheduler(orchestrator, _loader(scan_interval_minutes=0))

        scheduler.start()
        assert scheduler.running is True
        await asyncio.sleep(0)
        await scheduler.stop()

        assert scheduler.running is False
        orchestrator.scan_active_folders.assert_not_awaited()

    async def test_waits_configured_interval_then_scans(self, orchestrator):
        real_sleep = asyncio.sleep
        delays = []

        async def fake_sleep(delay):
            delays.append(delay)
            await real_sleep(0)

        scheduler = ScanScheduler(
            orchestrator, _loader(tmdb_api_key="key", scan_interval_minutes=5)
        )
        with patch("app.services.scan_scheduler.asyncio.sleep", new=fake_sleep):
            scheduler.start()
            for _ in range(50):
                if orchestrator.scan_active_folders.await_count:
                    break
                await real_sleep(0)
            await scheduler.stop()

        assert delays[0] == 300
        assert orchestrator.scan_active_folders.await_count >= 1

    async def test_disabled_interval_keeps_polling(self, orchestrator):
        real_sleep = asyncio.sleep
        delays = []

        async def fake_sleep(delay):
            delays.append(delay)
            await real_sleep(0)

        scheduler = ScanScheduler(
            orchestrator, _loader(tmdb_api_key="key", scan_interval_minutes=0)
        )
        with patch("app.services.scan_scheduler.asyncio.sleep", new=fake_sleep):
            scheduler.start()
            for _ in range(20):
                await real_sleep(0)
            await scheduler.stop()

        assert delays
        assert set(delays) == {DISABLED_POLL_SECONDS}
        orchestrator.scan_active_folders.assert_not_awaited()
