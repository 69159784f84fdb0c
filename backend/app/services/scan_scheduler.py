"""Scan scheduler - re-runs the library scan on a fixed interval.

The interval is read from AppConfig before every wait, so changing it in
Settings takes effect after the current wait. An interval of 0 disables
scheduled scans; the scheduler keeps polling the setting in case it is
turned back on.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from app.core.errors import FolderEnumerationError, ScanInProgressError
from app.models import AppConfig
from app.services.config_service import get_config
from app.services.scanner import ScanOrchestrator, ScanSummary

logger = logging.getLogger(__name__)

# How often a disabled scheduler re-reads its interval
DISABLED_POLL_SECONDS = 60


class ScanScheduler:
    def __init__(
        self,
        orchestrator: ScanOrchestrator,
        config_loader: Callable[[], Awaitable[AppConfig]] = get_config,
    ) -> None:
        self._orchestrator = orchestrator
        self._config_loader = config_loader
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Start the scheduling loop on the running event loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._poll_loop())
        logger.info("Scan scheduler started")

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Scan scheduler stopped")

    async def _poll_loop(self) -> None:
        while self._running:
            try:
                config = await self._config_loader()
                interval = config.scan_interval_minutes
                if interval <= 0:
                    await asyncio.sleep(DISABLED_POLL_SECONDS)
                    continue

                await asyncio.sleep(interval * 60)
                await self.run_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in scan scheduler: {e}", exc_info=True)
                await asyncio.sleep(DISABLED_POLL_SECONDS)

    async def run_once(self) -> ScanSummary | None:
        """Run one scheduled scan; returns None when the tick was skipped."""
        config = await self._config_loader()
        if not config.tmdb_api_key.strip():
            logger.warning("Scheduled scan skipped: TMDB API key not configured")
            return None

        try:
            return await self._orchestrator.scan_active_folders()
        except ScanInProgressError as e:
            logger.info(f"Scheduled scan skipped: {e}")
        except FolderEnumerationError as e:
            logger.error(f"Scheduled scan finished with unreadable folders: {e.paths}")
        return None
