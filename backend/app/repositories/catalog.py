"""Catalog persistence: movies, series, episodes and their transcode status."""


from sqlalchemy import update
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel, func, select

from app.core.errors import CascadeTargetMissingError
from app.models import Episode, Movie, TranscodeStatus, TvSeries
from app.models.timestamps import utc_now


class CatalogRepository:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    # Lookups

    async def get_movie(self, movie_id: int) -> Movie | None:
        async with self._session_factory() as session:
            return await session.get(Movie, movie_id)

    async def get_series(self, series_id: int) -> TvSeries | None:
        async with self._session_factory() as session:
            return await session.get(TvSeries, series_id)

    async def get_episode(self, episode_id: int) -> Episode | None:
        async with self._session_factory() as session:
            return await session.get(Episode, episode_id)

    async def get_movie_by_tmdb_id(self, tmdb_id: int) -> Movie | None:
        async with self._session_factory() as session:
            result = await session.execute(select(Movie).where(Movie.tmdb_id == tmdb_id))
            return result.scalar_one_or_none()

    async def get_series_by_tmdb_id(self, tmdb_id: int) -> TvSeries | None:
        async with self._session_factory() as session:
            result = await session.execute(select(TvSeries).where(TvSeries.tmdb_id == tmdb_id))
            return result.scalar_one_or_none()

    async def find_episode(
        self, tmdb_id: int, season_number: int, episode_number: int
    ) -> Episode | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Episode).where(
                    Episode.tmdb_id == tmdb_id,
                    Episode.season_number == season_number,
                    Episode.episode_number == episode_number,
                )
            )
            return result.scalars().first()

    async def find_episode_slot(
        self, series_id: int, season_number: int, episode_number: int
    ) -> Episode | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Episode).where(
                    Episode.series_id == series_id,
                    Episode.season_number == season_number,
                    Episode.episode_number == episode_number,
                )
            )
            return result.scalar_one_or_none()

    async def list_episodes(self, series_id: int) -> list[Episode]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Episode)
                .where(Episode.series_id == series_id)
                .order_by(Episode.season_number, Episode.episode_number)
            )
            return list(result.scalars().all())

    async def list_movies_by_status(self, status: TranscodeStatus) -> list[Movie]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Movie).where(Movie.transcode_status == status).order_by(Movie.id)
            )
            return list(result.scalars().all())

    async def list_episodes_by_status(self, status: TranscodeStatus) -> list[Episode]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Episode).where(Episode.transcode_status == status).order_by(Episode.id)
            )
            return list(result.scalars().all())

    # Writes

    async def save(self, entry: SQLModel) -> SQLModel:
        """Insert or update a single catalog row."""
        async with self._session_factory() as session:
            session.add(entry)
            await session.commit()
            await session.refresh(entry)
            return entry

    async def set_status(self, model: type[SQLModel], entry_id: int, status: TranscodeStatus):
        """Set transcode_status on one row; returns the row or None if absent."""
        async with self._session_factory() as session:
            entry = await session.get(model, entry_id)
            if entry is None:
                return None
            entry.transcode_status = status
            entry.updated_at = utc_now()
            await session.commit()
            await session.refresh(entry)
            return entry

    async def cascade_series_status(self, series_id: int, status: TranscodeStatus) -> int:
        """Set status on a series and all its episodes in one transaction.

        Returns the number of episodes updated. Nothing is written when the
        series is missing or has no episodes.
        """
        async with self._session_factory() as session:
            async with session.begin():
                series = await session.get(TvSeries, series_id)
                if series is None:
                    raise CascadeTargetMissingError(
                        series_id, "series does not exist", series_missing=True
                    )

                count = await session.scalar(
                    select(func.count()).select_from(Episode).where(Episode.series_id == series_id)
                )
                if not count:
                    raise CascadeTargetMissingError(series_id, "series has no episodes")

                now = utc_now()
                series.transcode_status = status
                series.updated_at = now
                await session.execute(
                    update(Episode)
                    .where(Episode.series_id == series_id)
                    .values(transcode_status=status, updated_at=now)
                )
            return count
