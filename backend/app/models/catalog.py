"""Catalog models - confirmed library entries and their transcode status.

Fields fall in two groups. Catalog metadata (title, overview, artwork,
genres, dates) is written once from TMDB when the row is created. File
metadata (path, name, resolution, quality, rip, sound, provider) comes from
the local file and is overwritten on every scan.
"""

import json
from datetime import date, datetime
from enum import Enum

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from app.models.timestamps import utc_now


class TranscodeStatus(str, Enum):
    """Readiness of an entry's playable media, owned by the transcoder."""

    PENDING = "PENDING"
    QUEUED = "QUEUED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Movie(SQLModel, table=True):
    """A matched movie file."""

    __tablename__ = "movies"

    id: int | None = Field(default=None, primary_key=True)
    tmdb_id: int = Field(index=True, unique=True)

    # Catalog metadata
    title: str
    year: int | None = None
    overview: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    genres_json: str = "[]"
    runtime: int | None = None  # Minutes
    rating: float | None = None

    # File metadata
    file_path: str
    file_name: str
    resolution: str | None = None
    quality: str | None = None
    rip: str | None = None
    sound: str | None = None
    provider: str | None = None

    transcode_status: TranscodeStatus = Field(default=TranscodeStatus.PENDING, index=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def genres(self) -> list[str]:
        return json.loads(self.genres_json)


class TvSeries(SQLModel, table=True):
    """A matched series; episodes hang off it."""

    __tablename__ = "tv_series"

    id: int | None = Field(default=None, primary_key=True)
    tmdb_id: int = Field(index=True, unique=True)

    title: str
    overview: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    genres_json: str = "[]"
    first_air_date: date | None = None
    last_air_date: date | None = None
    status: str | None = None  # TMDB production status, e.g. "Ended"

    transcode_status: TranscodeStatus = Field(default=TranscodeStatus.PENDING, index=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def genres(self) -> list[str]:
        return json.loads(self.genres_json)


class Episode(SQLModel, table=True):
    """A matched episode file of a series."""

    __tablename__ = "episodes"
    __table_args__ = (
        UniqueConstraint("series_id", "season_number", "episode_number", name="uq_episode_slot"),
    )

    id: int | None = Field(default=None, primary_key=True)
    series_id: int = Field(foreign_key="tv_series.id", index=True)
    tmdb_id: int = Field(index=True)
    season_number: int
    episode_number: int

    # Catalog metadata
    title: str
    overview: str | None = None
    air_date: date | None = None

    # File metadata
    file_path: str
    file_name: str
    resolution: str | None = None
    quality: str | None = None
    rip: str | None = None
    sound: str | None = None
    provider: str | None = None

    transcode_status: TranscodeStatus = Field(default=TranscodeStatus.PENDING, index=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
