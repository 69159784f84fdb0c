from datetime import date

from pydantic import BaseModel, Field, field_validator


def _year_of(value: str | None) -> int | None:
    if value and len(value) >= 4 and value[:4].isdigit():
        return int(value[:4])
    return None


def _genre_names(value) -> list[str]:
    return [g["name"] if isinstance(g, dict) else g for g in value or []]


class Candidate(BaseModel):
    """One search hit, with enough fields to render a disambiguation choice."""

    external_id: int
    title: str
    release_date: str | None = None
    release_year: int | None = None
    overview: str | None = None
    poster_path: str | None = None
    score: float = 0.0

    @classmethod
    def from_movie_result(cls, result: dict) -> "Candidate":
        release_date = result.get("release_date") or None
        return cls(
            external_id=result["id"],
            title=result.get("title") or result.get("original_title") or "",
            release_date=release_date,
            release_year=_year_of(release_date),
            overview=result.get("overview"),
            poster_path=result.get("poster_path"),
            score=result.get("popularity") or 0.0,
        )

    @classmethod
    def from_tv_result(cls, result: dict) -> "Candidate":
        first_air_date = result.get("first_air_date") or None
        return cls(
            external_id=result["id"],
            title=result.get("name") or result.get("original_name") or "",
            release_date=first_air_date,
            release_year=_year_of(first_air_date),
            overview=result.get("overview"),
            poster_path=result.get("poster_path"),
            score=result.get("popularity") or 0.0,
        )


class MovieDetails(BaseModel):
    """Full TMDB movie record (subset we persist)."""

    id: int
    title: str
    release_date: date | None = None
    overview: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    genres: list[str] = Field(default_factory=list)
    runtime: int | None = None
    vote_average: float | None = None

    @field_validator("release_date", mode="before")
    @classmethod
    def blank_date_is_none(cls, value):
        # TMDB sends "" for unknown dates
        return value or None

    @field_validator("genres", mode="before")
    @classmethod
    def genre_names(cls, value):
        return _genre_names(value)

    @property
    def year(self) -> int | None:
        return self.release_date.year if self.release_date else None


class SeriesDetails(BaseModel):
    """Full TMDB tv record (subset we persist)."""

    id: int
    name: str
    overview: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    genres: list[str] = Field(default_factory=list)
    first_air_date: date | None = None
    last_air_date: date | None = None
    status: str | None = None

    @field_validator("first_air_date", "last_air_date", mode="before")
    @classmethod
    def blank_date_is_none(cls, value):
        return value or None

    @field_validator("genres", mode="before")
    @classmethod
    def genre_names(cls, value):
        return _genre_names(value)


class EpisodeDetails(BaseModel):
    """TMDB episode record."""

    id: int
    name: str
    overview: str | None = None
    season_number: int
    episode_number: int
    air_date: date | None = None

    @field_validator("air_date", mode="before")
    @classmethod
    def blank_date_is_none(cls, value):
        return value or None
