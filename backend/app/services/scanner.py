"""Scan orchestrator - walks media folders and drives parse, match and sync.

Movie folders are scanned before series folders, one file at a time. A file
that fails is logged and counted; it never stops the rest of the scan. A
folder that cannot be enumerated is recorded and the scan moves on to the
next folder; the failed roots are raised together once everything else ran.
"""

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path

from app.core.errors import FolderEnumerationError, ScanInProgressError, error_context
from app.core.parser import FilenameParser, ParsedEpisode, ParsedMovie
from app.matcher.metadata_matcher import MatchOutcome, MetadataMatcher, classify
from app.models import AppConfig, FolderType, MediaType
from app.models.app_config import DEFAULT_FILE_EXTENSIONS
from app.models.timestamps import utc_now
from app.repositories import FolderRepository
from app.services.catalog_sync import CatalogSync, UpsertResult
from app.services.config_service import get_config
from app.services.conflict_store import ConflictStore
from app.services.event_broadcaster import EventBroadcaster

logger = logging.getLogger(__name__)


@dataclass
class ScanConfig:
    movie_paths: list[str] = field(default_factory=list)
    series_paths: list[str] = field(default_factory=list)
    file_extensions: list[str] = field(
        default_factory=lambda: DEFAULT_FILE_EXTENSIONS.split(",")
    )

    @property
    def all_paths(self) -> list[str]:
        return [*self.movie_paths, *self.series_paths]


@dataclass
class ScanSummary:
    started_at: datetime = field(default_factory=utc_now)
    finished_at: datetime | None = None
    files_found: int = 0
    unparseable: int = 0
    created: int = 0
    updated: int = 0
    conflicts: int = 0
    errors: int = 0
    failed_folders: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        data = asdict(self)
        data["started_at"] = self.started_at.isoformat()
        data["finished_at"] = self.finished_at.isoformat() if self.finished_at else None
        return data


def collect_media_files(root: str, extensions: list[str]) -> list[str]:
    """Recursively list files under ``root`` whose extension is whitelisted.

    Raises:
        FolderEnumerationError: ``root`` (or a directory below it) is missing
            or unreadable.
    """
    wanted = {ext.lower() for ext in extensions}
    with error_context(
        error_types=(OSError,),
        default_message=f"Failed to enumerate media folder {root}",
        wrap_as=FolderEnumerationError,
    ):
        return _walk(root, wanted)


def _walk(directory: str, wanted: set[str]) -> list[str]:
    files: list[str] = []
    with os.scandir(directory) as entries:
        for entry in sorted(entries, key=lambda e: e.name):
            if entry.is_dir(follow_symlinks=False):
                files.extend(_walk(entry.path, wanted))
            elif entry.is_file(follow_symlinks=False) and Path(entry.name).suffix.lower() in wanted:
                files.append(entry.path)
    return files


def _normalize(path: str) -> str:
    return os.path.realpath(path)


def _overlaps(a: str, b: str) -> bool:
    """True when one normalized path is the other or lies below it."""
    return a == b or _is_below(a, b) or _is_below(b, a)


def _is_below(path: str, parent: str) -> bool:
    return path.startswith(parent.rstrip(os.sep) + os.sep)


class ScanOrchestrator:
    """Runs scans and keeps the advisory lock over the folders being scanned."""

    def __init__(
        self,
        parser: FilenameParser,
        matcher: MetadataMatcher,
        conflicts: ConflictStore,
        catalog: CatalogSync,
        folders: FolderRepository | None = None,
        events: EventBroadcaster | None = None,
        config_loader: Callable[[], Awaitable[AppConfig]] = get_config,
    ) -> None:
        self._parser = parser
        self._matcher = matcher
        self._conflicts = conflicts
        self._catalog = catalog
        self._folders = folders
        self._events = events
        self._config_loader = config_loader

        self._active_paths: set[str] = set()
        self._task: asyncio.Task | None = None
        self._current: ScanSummary | None = None
        self._last_summary: ScanSummary | None = None

    # --- Lock ---

    @property
    def is_scanning(self) -> bool:
        return bool(self._active_paths)

    def _acquire(self, paths: list[str]) -> None:
        busy = sorted(
            {p for p in paths if any(_overlaps(_normalize(p), a) for a in self._active_paths)}
        )
        if busy:
            raise ScanInProgressError(busy)
        self._active_paths.update(_normalize(p) for p in paths)

    def _release(self, paths: list[str]) -> None:
        self._active_paths.difference_update(_normalize(p) for p in paths)

    # --- Entry points ---

    async def build_config(self) -> ScanConfig:
        """Scan config from the active folders and the stored extension list."""
        app_config = await self._config_loader()
        folders = await self._folders.list(active_only=True) if self._folders else []
        return ScanConfig(
            movie_paths=[f.path for f in folders if f.type == FolderType.MOVIES],
            series_paths=[f.path for f in folders if f.type == FolderType.SERIES],
            file_extensions=app_config.file_extensions,
        )

    async def scan_all(self, config: ScanConfig) -> ScanSummary:
        """Scan the given folders to completion.

        Raises:
            ScanInProgressError: One of the folders is already being scanned.
            FolderEnumerationError: One or more roots could not be walked
                (raised after every other folder was processed).
        """
        paths = config.all_paths
        self._acquire(paths)
        try:
            return await self._run(config)
        finally:
            self._release(paths)

    async def scan_active_folders(self) -> ScanSummary:
        return await self.scan_all(await self.build_config())

    async def start_background_scan(self) -> ScanConfig:
        """Take the lock now and run the scan as a background task.

        Raises ScanInProgressError before anything is scheduled when the
        folder set overlaps a running scan.
        """
        config = await self.build_config()
        paths = config.all_paths
        self._acquire(paths)

        task = asyncio.create_task(self._run_locked(config, paths))
        task.add_done_callback(self._on_task_done)
        self._task = task
        logger.info(f"Background scan started over {len(paths)} folders")
        return config

    def status(self) -> dict:
        return {
            "scanning": self.is_scanning,
            "active_paths": sorted(self._active_paths),
            "current": self._current.as_dict() if self._current else None,
            "last_summary": self._last_summary.as_dict() if self._last_summary else None,
        }

    async def stop(self) -> None:
        """Cancel a running background scan (used on shutdown)."""
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

    # --- Scan internals ---

    async def _run_locked(self, config: ScanConfig, paths: list[str]) -> ScanSummary:
        try:
            return await self._run(config)
        finally:
            self._release(paths)

    def _on_task_done(self, task: asyncio.Task) -> None:
        """Callback for background scans to log any unhandled exceptions."""
        if task.cancelled():
            logger.info("Background scan was cancelled")
        elif exc := task.exception():
            logger.error(f"Background scan failed: {exc}", exc_info=exc)

    async def _run(self, config: ScanConfig) -> ScanSummary:
        summary = ScanSummary()
        self._current = summary
        if self._events:
            await self._events.broadcast_scan_started(config.all_paths)

        try:
            for root in config.movie_paths:
                await self._scan_folder(root, MediaType.MOVIE, config.file_extensions, summary)
            for root in config.series_paths:
                await self._scan_folder(root, MediaType.SERIES, config.file_extensions, summary)
        finally:
            summary.finished_at = utc_now()
            self._current = None
            self._last_summary = summary

        logger.info(
            f"Scan finished: {summary.files_found} files, {summary.created} created, "
            f"{summary.updated} updated, {summary.conflicts} conflicts, "
            f"{summary.unparseable} unparseable, {summary.errors} errors"
        )

        if summary.failed_folders:
            error = FolderEnumerationError(
                f"Could not enumerate {len(summary.failed_folders)} media folder(s): "
                f"{', '.join(summary.failed_folders)}",
                paths=summary.failed_folders,
            )
            if self._events:
                await self._events.broadcast_scan_failed(str(error))
            raise error

        if self._events:
            await self._events.broadcast_scan_completed(summary.as_dict())
        return summary

    async def _scan_folder(
        self, root: str, media_type: MediaType, extensions: list[str], summary: ScanSummary
    ) -> None:
        try:
            files = await asyncio.to_thread(collect_media_files, root, extensions)
        except FolderEnumerationError:
            summary.failed_folders.append(root)
            return

        logger.info(f"Scanning {media_type.value} folder {root}: {len(files)} media files")
        summary.files_found += len(files)

        for file_path in files:
            try:
                await self._process_file(file_path, media_type, summary)
            except Exception:
                summary.errors += 1
                logger.exception(f"Error processing {media_type.value} file {file_path}")

    async def _process_file(self, file_path: str, media_type: MediaType, summary: ScanSummary):
        parsed = self._parser.parse(file_path, media_type)
        if parsed is None:
            summary.unparseable += 1
            logger.debug(f"Skipping unparseable file {file_path}")
            return

        # A human already picked the match for this file; don't ask again
        selected_id = await self._conflicts.resolved_selection(parsed.file_path)
        if selected_id is None:
            if isinstance(parsed, ParsedMovie):
                candidates = await self._matcher.search_movie(parsed.title, parsed.year)
            else:
                candidates = await self._matcher.search_series(parsed.series_name)

            if classify(candidates) != MatchOutcome.SINGLE:
                await self._conflicts.record(
                    parsed.file_name, parsed.file_path, media_type, candidates
                )
                summary.conflicts += 1
                return
            selected_id = candidates[0].external_id
            result = await self._ingest(selected_id, parsed)
            await self._conflicts.settle(parsed.file_path, selected_id)
        else:
            result = await self._ingest(selected_id, parsed)

        if result.created:
            summary.created += 1
        else:
            summary.updated += 1

    async def _ingest(self, tmdb_id: int, parsed: ParsedMovie | ParsedEpisode) -> UpsertResult:
        if isinstance(parsed, ParsedEpisode):
            return await self._catalog.ingest_episode(tmdb_id, parsed)
        return await self._catalog.ingest_movie(tmdb_id, parsed)
