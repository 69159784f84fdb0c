"""Unit tests for the filename parser."""

import pytest

from app.core.parser import (
    EPISODE_PATTERNS,
    MOVIE_PATTERNS,
    FileFields,
    FilenameParser,
    ParsedEpisode,
    ParsedMovie,
    bracketed_movie,
    clean_title,
    dotted_movie,
)
from app.models import MediaType


@pytest.fixture
def parser():
    return FilenameParser()


@pytest.mark.unit
class TestMoviePatterns:
    def test_bracketed_with_all_fields(self, parser):
        result = parser.parse_movie(
            "/media/movies/Inception (2010) [1080p] [BluRay] [x264] [DTS] [GROUP].mkv"
        )

        assert isinstance(result, ParsedMovie)
        assert result.title == "Inception"
        assert result.year == 2010
        assert result.file_name == "Inception (2010) [1080p] [BluRay] [x264] [DTS] [GROUP]"
        assert result.file_path.endswith(".mkv")
        assert result.fields == FileFields("1080p", "BluRay", "x264", "DTS", "GROUP")

    def test_bracketed_missing_fields_default_to_none(self, parser):
        result = parser.parse_movie("/m/The Matrix (1999) [720p].mp4")

        assert result.title == "The Matrix"
        assert result.year == 1999
        assert result.fields.resolution == "720p"
        assert result.fields.quality is None
        assert result.fields.provider is None

    def test_bracketed_without_tokens(self, parser):
        result = parser.parse_movie("/m/Alien (1979).avi")

        assert result.title == "Alien"
        assert result.fields == FileFields()

    def test_dotted(self, parser):
        result = parser.parse_movie("/m/The.Dark.Knight.2008.1080p.BluRay.x264.DTS.GROUP.mkv")

        assert result.title == "The Dark Knight"
        assert result.year == 2008
        assert result.fields == FileFields("1080p", "BluRay", "x264", "DTS", "GROUP")

    def test_dotted_extra_tokens_fold_into_provider(self, parser):
        result = parser.parse_movie("/m/Heat.1995.2160p.WEB-DL.x265.AAC.NTb.REPACK.mkv")

        assert result.fields.sound == "AAC"
        assert result.fields.provider == "NTb.REPACK"

    def test_dotted_year_must_be_whole_token(self, parser):
        # "20101" is not a year; nothing else matches either
        assert parser.parse_movie("/m/Some.Movie.20101.1080p.mkv") is None

    def test_title_underscores_are_cleaned(self, parser):
        result = parser.parse_movie("/m/Blade_Runner (1982) [1080p].mkv")

        assert result.title == "Blade Runner"

    def test_first_pattern_wins(self, parser):
        # Both shapes match; the bracketed reading comes first
        result = parser.parse_movie("/m/Movie.2012.Remake (2019) [1080p].mkv")

        assert result.title == "Movie 2012 Remake"
        assert result.year == 2019
        assert result.fields.resolution == "1080p"

    @pytest.mark.parametrize(
        "path",
        ["/m/sample.mkv", "/m/README.mp4", "/m/Just A Title.mkv", "/m/(2010).mkv"],
    )
    def test_unparseable_returns_none(self, parser, path):
        assert parser.parse_movie(path) is None


@pytest.mark.unit
class TestEpisodePatterns:
    def test_sxxeyy_dotted(self, parser):
        result = parser.parse_episode("/tv/Breaking.Bad.S01E02.720p.mkv")

        assert isinstance(result, ParsedEpisode)
        assert result.series_name == "Breaking Bad"
        assert result.season_number == 1
        assert result.episode_number == 2
        assert result.file_name == "Breaking.Bad.S01E02.720p"

    def test_sxxeyy_spaces_lowercase(self, parser):
        result = parser.parse_episode("/tv/The Wire s3e11.mp4")

        assert result.series_name == "The Wire"
        assert result.season_number == 3
        assert result.episode_number == 11

    def test_cross_marker(self, parser):
        result = parser.parse_episode("/tv/Firefly.1x05.avi")

        assert result.series_name == "Firefly"
        assert result.season_number == 1
        assert result.episode_number == 5

    def test_bracket_tokens_are_scanned_anywhere(self, parser):
        result = parser.parse_episode("/tv/Dark.S02E03 [1080p] [WEB] [x265].mkv")
        assert result.series_name == "Dark"
        assert result.fields.resolution == "1080p"
        assert result.fields.quality == "WEB"
        assert result.fields.rip == "x265"
        assert result.fields.sound is None

    def test_unparseable_episode(self, parser):
        assert parser.parse_episode("/tv/Breaking Bad Pilot.mkv") is None


@pytest.mark.unit
class TestParseDispatch:
    def test_movie_mode_ignores_episode_names(self, parser):
        assert parser.parse("/m/Breaking.Bad.S01E02.mkv", MediaType.MOVIE) is None

    def test_series_mode_uses_episode_patterns(self, parser):
        result = parser.parse("/tv/Lost.S04E01.mkv", MediaType.SERIES)
        assert isinstance(result, ParsedEpisode)

    def test_custom_pattern_order(self):
        parser = FilenameParser(movie_patterns=(dotted_movie, bracketed_movie))
        result = parser.parse_movie("/m/Mr.Nobody.2009.1080p.mkv")
        assert result.title == "Mr Nobody"

    def test_default_pattern_order(self):
        assert MOVIE_PATTERNS[0] is bracketed_movie
        assert len(EPISODE_PATTERNS) == 2


@pytest.mark.unit
class TestCleanTitle:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Show.Name", "Show Name"),
            ("Show_Name", "Show Name"),
            ("  Show . . Name  ", "Show Name"),
        ],
    )
    def test_clean_title(self, raw, expected):
        assert clean_title(raw) == expected
