"""Catalog synchronization - idempotent upserts of confirmed matches.

Catalog metadata is written once, when a row is created. File metadata is
rewritten on every upsert. Transcode status starts at PENDING and is never
touched here afterwards.
"""

import json
import logging
from dataclasses import dataclass

from app.core.parser import ParsedEpisode, ParsedMovie
from app.matcher.metadata_matcher import MetadataMatcher
from app.matcher.models import EpisodeDetails, MovieDetails, SeriesDetails
from app.models import Episode, Movie, TranscodeStatus, TvSeries
from app.models.timestamps import utc_now
from app.repositories import CatalogRepository
from app.services.event_broadcaster import EventBroadcaster

logger = logging.getLogger(__name__)


@dataclass
class UpsertResult:
    entry: Movie | TvSeries | Episode
    created: bool


def file_fields(parsed: ParsedMovie | ParsedEpisode) -> dict[str, str | None]:
    """File metadata columns for a parsed file."""
    return {"file_path": parsed.file_path, "file_name": parsed.file_name, **parsed.fields.as_dict()}


def _apply_file_fields(entry: Movie | Episode, parsed: ParsedMovie | ParsedEpisode) -> None:
    for name, value in file_fields(parsed).items():
        setattr(entry, name, value)
    entry.updated_at = utc_now()


class CatalogSync:
    def __init__(
        self,
        repository: CatalogRepository,
        matcher: MetadataMatcher | None = None,
        events: EventBroadcaster | None = None,
    ):
        self._repo = repository
        self._matcher = matcher
        self._events = events

    async def ingest_movie(self, tmdb_id: int, parsed: ParsedMovie) -> UpsertResult:
        """Fetch details for a confirmed movie match and upsert it."""
        details = await self._matcher.get_movie_details(tmdb_id)
        return await self.upsert_movie(details, parsed)

    async def ingest_episode(self, series_tmdb_id: int, parsed: ParsedEpisode) -> UpsertResult:
        """Fetch series and episode details for a confirmed match and upsert both."""
        series_details = await self._matcher.get_series_details(series_tmdb_id)
        episode_details = await self._matcher.get_episode_details(
            series_tmdb_id, parsed.season_number, parsed.episode_number
        )
        series = (await self.upsert_series(series_details)).entry
        return await self.upsert_episode(series, episode_details, parsed)

    async def upsert_movie(self, details: MovieDetails, parsed: ParsedMovie) -> UpsertResult:
        movie = await self._repo.get_movie_by_tmdb_id(details.id)
        created = movie is None

        if movie is None:
            movie = Movie(
                tmdb_id=details.id,
                title=details.title,
                year=details.year or parsed.year,
                overview=details.overview,
                poster_path=details.poster_path,
                backdrop_path=details.backdrop_path,
                genres_json=json.dumps(details.genres),
                runtime=details.runtime,
                rating=details.vote_average,
                transcode_status=TranscodeStatus.PENDING,
                **file_fields(parsed),
            )
        else:
            _apply_file_fields(movie, parsed)

        movie = await self._repo.save(movie)
        logger.info(
            f"{'Created' if created else 'Updated'} movie {movie.title} "
            f"(tmdb {movie.tmdb_id}) from {parsed.file_name}"
        )
        if self._events:
            await self._events.broadcast_catalog_upserted("movies", movie.id, created)
        return UpsertResult(entry=movie, created=created)

    async def upsert_series(self, details: SeriesDetails) -> UpsertResult:
        series = await self._repo.get_series_by_tmdb_id(details.id)
        if series is not None:
            # A series row carries no file facts; nothing to refresh
            return UpsertResult(entry=series, created=False)

        series = await self._repo.save(
            TvSeries(
                tmdb_id=details.id,
                title=details.name,
                overview=details.overview,
                poster_path=details.poster_path,
                backdrop_path=details.backdrop_path,
                genres_json=json.dumps(details.genres),
                first_air_date=details.first_air_date,
                last_air_date=details.last_air_date,
                status=details.status,
                transcode_status=TranscodeStatus.PENDING,
            )
        )
        logger.info(f"Created series {series.title} (tmdb {series.tmdb_id})")
        if self._events:
            await self._events.broadcast_catalog_upserted("series", series.id, True)
        return UpsertResult(entry=series, created=True)

    async def upsert_episode(
        self, series: TvSeries, details: EpisodeDetails, parsed: ParsedEpisode
    ) -> UpsertResult:
        """Create or refresh one episode of ``series``.

        The row is looked up by its TMDB id and slot first, then by the
        (series, season, episode) slot alone, so an episode whose TMDB id
        changed is still updated in place instead of violating the slot key.
        """
        season, number = parsed.season_number, parsed.episode_number

        episode = await self._repo.find_episode(details.id, season, number)
        if episode is None:
            episode = await self._repo.find_episode_slot(series.id, season, number)
        created = episode is None

        if episode is None:
            episode = Episode(
                series_id=series.id,
                tmdb_id=details.id,
                season_number=season,
                episode_number=number,
                title=details.name,
                overview=details.overview,
                air_date=details.air_date,
                transcode_status=TranscodeStatus.PENDING,
                **file_fields(parsed),
            )
        else:
            _apply_file_fields(episode, parsed)

        episode = await self._repo.save(episode)
        logger.info(
            f"{'Created' if created else 'Updated'} episode {series.title} "
            f"S{season:02d}E{number:02d} from {parsed.file_name}"
        )
        if self._events:
            await self._events.broadcast_catalog_upserted("episodes", episode.id, created)
        return UpsertResult(entry=episode, created=created)
