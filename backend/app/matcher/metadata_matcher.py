"""Metadata matching - searches the external catalog and classifies the hits.

The matcher never picks among several hits. Zero or many results are
handed to the conflict store for a human to decide.
"""

import asyncio
import logging
from enum import Enum
from typing import Protocol

import requests

from app.core.errors import MetadataError, handle_errors
from app.matcher.models import Candidate, EpisodeDetails, MovieDetails, SeriesDetails

logger = logging.getLogger(__name__)


class MetadataProvider(Protocol):
    """Blocking catalog client (TmdbClient in production, fakes in tests)."""

    def search_movie(self, title: str, year: int | None = None) -> list[Candidate]: ...

    def search_series(self, name: str) -> list[Candidate]: ...

    def get_movie_details(self, movie_id: int) -> MovieDetails: ...

    def get_series_details(self, series_id: int) -> SeriesDetails: ...

    def get_episode_details(
        self, series_id: int, season_number: int, episode_number: int
    ) -> EpisodeDetails: ...


class MatchOutcome(str, Enum):
    """Classification of a search result set."""

    NO_MATCH = "no_match"
    SINGLE = "single"
    AMBIGUOUS = "ambiguous"


def classify(candidates: list[Candidate]) -> MatchOutcome:
    if not candidates:
        return MatchOutcome.NO_MATCH
    if len(candidates) == 1:
        return MatchOutcome.SINGLE
    return MatchOutcome.AMBIGUOUS


_network_errors = (requests.RequestException, ConnectionError, TimeoutError)


class MetadataMatcher:
    """Async facade over a blocking provider; calls run in worker threads."""

    def __init__(self, provider: MetadataProvider) -> None:
        self._provider = provider

    @handle_errors(
        error_types=_network_errors,
        default_message="TMDB movie search failed",
        wrap_as=MetadataError,
    )
    async def search_movie(self, title: str, year: int | None = None) -> list[Candidate]:
        return await asyncio.to_thread(self._provider.search_movie, title, year)

    @handle_errors(
        error_types=_network_errors,
        default_message="TMDB series search failed",
        wrap_as=MetadataError,
    )
    async def search_series(self, name: str) -> list[Candidate]:
        return await asyncio.to_thread(self._provider.search_series, name)

    @handle_errors(
        error_types=_network_errors,
        default_message="TMDB movie details lookup failed",
        wrap_as=MetadataError,
    )
    async def get_movie_details(self, movie_id: int) -> MovieDetails:
        return await asyncio.to_thread(self._provider.get_movie_details, movie_id)

    @handle_errors(
        error_types=_network_errors,
        default_message="TMDB series details lookup failed",
        wrap_as=MetadataError,
    )
    async def get_series_details(self, series_id: int) -> SeriesDetails:
        return await asyncio.to_thread(self._provider.get_series_details, series_id)

    @handle_errors(
        error_types=_network_errors,
        default_message="TMDB episode details lookup failed",
        wrap_as=MetadataError,
    )
    async def get_episode_details(
        self, series_id: int, season_number: int, episode_number: int
    ) -> EpisodeDetails:
        return await asyncio.to_thread(
            self._provider.get_episode_details, series_id, season_number, episode_number
        )
