"""Transcode status manager.

The transcoding worker owns the lifecycle, so any status may follow any
other; nothing here validates transitions. The series cascade is the one
multi-row write and runs in a single transaction.
"""

import logging

from app.core.errors import CatalogEntryNotFoundError
from app.models import Episode, Movie, TranscodeStatus, TvSeries
from app.repositories import CatalogRepository
from app.services.event_broadcaster import EventBroadcaster

logger = logging.getLogger(__name__)


class TranscodeStatusManager:
    def __init__(self, repository: CatalogRepository, events: EventBroadcaster | None = None):
        self._repo = repository
        self._events = events

    async def _set(self, model, kind: str, resource: str, entry_id: int, status: TranscodeStatus):
        entry = await self._repo.set_status(model, entry_id, status)
        if entry is None:
            raise CatalogEntryNotFoundError(kind, entry_id)
        logger.info(f"{kind.capitalize()} {entry_id} transcode status -> {status.value}")
        if self._events:
            await self._events.broadcast_status_changed(resource, entry_id)
        return entry

    async def set_movie_status(self, movie_id: int, status: TranscodeStatus) -> Movie:
        return await self._set(Movie, "movie", "movies", movie_id, status)

    async def set_episode_status(self, episode_id: int, status: TranscodeStatus) -> Episode:
        return await self._set(Episode, "episode", "episodes", episode_id, status)

    async def set_series_status(self, series_id: int, status: TranscodeStatus) -> TvSeries:
        """Set the status of the series row only; episodes are left alone."""
        return await self._set(TvSeries, "series", "series", series_id, status)

    async def cascade_series_status(self, series_id: int, status: TranscodeStatus) -> int:
        """Set the status of a series and every one of its episodes atomically.

        Raises:
            CascadeTargetMissingError: The series does not exist or has no
                episodes. No row is changed.
        """
        count = await self._repo.cascade_series_status(series_id, status)
        logger.info(f"Series {series_id} and {count} episodes transcode status -> {status.value}")
        if self._events:
            await self._events.broadcast_status_changed("series", series_id)
            await self._events.broadcast_status_changed("episodes", None)
        return count

    async def get_movies_by_status(self, status: TranscodeStatus) -> list[Movie]:
        return await self._repo.list_movies_by_status(status)

    async def get_episodes_by_status(self, status: TranscodeStatus) -> list[Episode]:
        return await self._repo.list_episodes_by_status(status)

    async def get_items_by_status(self, status: TranscodeStatus) -> dict[str, list]:
        """Movies and episodes currently in ``status``."""
        return {
            "movies": await self.get_movies_by_status(status),
            "episodes": await self.get_episodes_by_status(status),
        }
