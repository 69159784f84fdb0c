"""Unit tests for search-result classification and the async matcher facade."""

import inspect

import pytest
import requests

from app.core.errors import ConfigurationError, MetadataError, handle_errors
from app.matcher import MatchOutcome, MetadataMatcher, classify
from tests.fixtures.fake_provider import movie_candidate


class TestClassify:
    def test_no_candidates(self):
        assert classify([]) == MatchOutcome.NO_MATCH

    def test_single_candidate(self):
        assert classify([movie_candidate(27205, "Inception", 2010)]) == MatchOutcome.SINGLE

    def test_many_candidates_are_never_auto_picked(self):
        candidates = [movie_candidate(438631, "Dune", 2021), movie_candidate(841, "Dune", 1984)]

        assert classify(candidates) == MatchOutcome.AMBIGUOUS


class TestMetadataMatcher:
    async def test_search_passes_title_and_year(self, fake_provider):
        fake_provider.add_movie(27205, "Inception", 2010)
        matcher = MetadataMatcher(fake_provider)

        candidates = await matcher.search_movie("Inception", 2010)

        assert [c.external_id for c in candidates] == [27205]
        assert fake_provider.calls == [("search_movie", "Inception", 2010)]

    async def test_series_details(self, fake_provider):
        fake_provider.add_series(1396, "Breaking Bad")
        fake_provider.add_episode(1396, 1, 2, tmdb_id=62086, name="Cat's in the Bag...")
        matcher = MetadataMatcher(fake_provider)

        series = await matcher.get_series_details(1396)
        episode = await matcher.get_episode_details(1396, 1, 2)

        assert series.name == "Breaking Bad"
        assert episode.id == 62086

    async def test_connection_error_becomes_metadata_error(self, fake_provider):
        fake_provider.fail_titles.add("lost")
        matcher = MetadataMatcher(fake_provider)

        with pytest.raises(MetadataError, match="TMDB series search failed"):
            await matcher.search_series("Lost")

    async def test_requests_error_becomes_metadata_error(self, fake_provider):
        def boom(movie_id):
            raise requests.Timeout("read timed out")

        fake_provider.get_movie_details = boom
        matcher = MetadataMatcher(fake_provider)

        with pytest.raises(MetadataError) as exc_info:
            await matcher.get_movie_details(27205)

        assert isinstance(exc_info.value.__cause__, requests.Timeout)

    async def test_missing_resource_propagates_unchanged(self, fake_provider):
        matcher = MetadataMatcher(fake_provider)

        with pytest.raises(MetadataError, match="not found"):
            await matcher.get_movie_details(999)

    def test_wrapped_methods_stay_coroutines(self):
        assert inspect.iscoroutinefunction(MetadataMatcher.search_movie)
        assert MetadataMatcher.search_movie.__name__ == "search_movie"


class TestHandleErrors:
    async def test_unlisted_errors_pass_through(self):
        @handle_errors(
            error_types=(requests.RequestException,),
            default_message="lookup failed",
            wrap_as=MetadataError,
        )
        async def lookup():
            raise ConfigurationError("TMDB API key is not configured")

        with pytest.raises(ConfigurationError):
            await lookup()

    async def test_reraise_false_returns_none(self):
        @handle_errors(
            error_types=(ValueError,),
            default_message="ignored",
            log_level="warning",
            reraise=False,
        )
        async def lookup():
            raise ValueError("bad")

        assert await lookup() is None
