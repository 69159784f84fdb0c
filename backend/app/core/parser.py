"""Filename parser - turns a media file path into a typed parse result.

Each naming convention is a small pure function ``str -> parsed | None``.
The functions are kept in ordered tuples and the first one that recognises
the name wins; there is no scoring across patterns.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from app.models.scanning_conflict import MediaType

FILE_FIELD_NAMES = ("resolution", "quality", "rip", "sound", "provider")


@dataclass
class FileFields:
    """Technical facts read off the filename; all optional."""

    resolution: str | None = None
    quality: str | None = None
    rip: str | None = None
    sound: str | None = None
    provider: str | None = None

    @classmethod
    def from_tokens(cls, tokens: list[str]) -> "FileFields":
        """Assign tokens positionally; anything past the last slot joins provider."""
        tokens = [t.strip() for t in tokens if t and t.strip()]
        if len(tokens) > len(FILE_FIELD_NAMES):
            head = tokens[: len(FILE_FIELD_NAMES) - 1]
            tokens = head + [".".join(tokens[len(FILE_FIELD_NAMES) - 1 :])]
        return cls(**dict(zip(FILE_FIELD_NAMES, tokens, strict=False)))

    def as_dict(self) -> dict[str, str | None]:
        return {name: getattr(self, name) for name in FILE_FIELD_NAMES}


@dataclass
class ParsedMovie:
    file_path: str
    file_name: str
    title: str
    year: int
    fields: FileFields


@dataclass
class ParsedEpisode:
    file_path: str
    file_name: str
    series_name: str
    season_number: int
    episode_number: int
    fields: FileFields


# (stem) -> (title, year, tokens) | None
MoviePattern = Callable[[str], tuple[str, int, list[str]] | None]
# (stem) -> (series name, season, episode) | None
EpisodePattern = Callable[[str], tuple[str, int, int] | None]


def clean_title(raw: str) -> str:
    """Turn separator-laden names into plain titles ("Show.Name_x" -> "Show Name x")."""
    title = raw.replace(".", " ").replace("_", " ")
    return re.sub(r"\s+", " ", title).strip()


_BRACKETED_MOVIE = re.compile(r"^(.+?)\s*\((\d{4})\)\s*(.*)$")
_BRACKET_TOKEN = re.compile(r"\[(.*?)\]")
_DOTTED_MOVIE = re.compile(r"^(.+?)\.(\d{4})(?=\.|$)(.*)$")


def bracketed_movie(stem: str) -> tuple[str, int, list[str]] | None:
    """``Movie Name (2010) [1080p] [BluRay] [x264] [DTS] [GROUP]``"""
    match = _BRACKETED_MOVIE.match(stem)
    if not match:
        return None
    title, year, rest = match.groups()
    return title, int(year), _BRACKET_TOKEN.findall(rest)


def dotted_movie(stem: str) -> tuple[str, int, list[str]] | None:
    """``Movie.Name.2010.1080p.BluRay.x264-GROUP``"""
    match = _DOTTED_MOVIE.match(stem)
    if not match:
        return None
    title, year, rest = match.groups()
    return title, int(year), [t for t in rest.split(".") if t]


_SXXEYY = re.compile(r"^(.+?)[.\s][Ss](\d{1,2})[Ee](\d{1,2})")
_NXNN = re.compile(r"^(.+?)[.\s](\d{1,2})x(\d{1,2})", re.IGNORECASE)


def season_episode_marker(stem: str) -> tuple[str, int, int] | None:
    """``Show.Name.S02E05`` / ``Show Name s2e5``"""
    match = _SXXEYY.match(stem)
    if not match:
        return None
    name, season, episode = match.groups()
    return name, int(season), int(episode)


def cross_marker(stem: str) -> tuple[str, int, int] | None:
    """``Show.Name.2x05``"""
    match = _NXNN.match(stem)
    if not match:
        return None
    name, season, episode = match.groups()
    return name, int(season), int(episode)


MOVIE_PATTERNS: tuple[MoviePattern, ...] = (bracketed_movie, dotted_movie)
EPISODE_PATTERNS: tuple[EpisodePattern, ...] = (season_episode_marker, cross_marker)


class FilenameParser:
    """Parses file paths with the pattern family chosen by the caller."""

    def __init__(
        self,
        movie_patterns: tuple[MoviePattern, ...] = MOVIE_PATTERNS,
        episode_patterns: tuple[EpisodePattern, ...] = EPISODE_PATTERNS,
    ) -> None:
        self.movie_patterns = movie_patterns
        self.episode_patterns = episode_patterns

    def parse(self, file_path: str, media_type: MediaType) -> ParsedMovie | ParsedEpisode | None:
        if media_type == MediaType.MOVIE:
            return self.parse_movie(file_path)
        return self.parse_episode(file_path)

    def parse_movie(self, file_path: str) -> ParsedMovie | None:
        stem = Path(file_path).stem
        for pattern in self.movie_patterns:
            result = pattern(stem)
            if result is None:
                continue
            title, year, tokens = result
            title = clean_title(title)
            if not title:
                continue
            return ParsedMovie(
                file_path=str(file_path),
                file_name=stem,
                title=title,
                year=year,
                fields=FileFields.from_tokens(tokens),
            )
        return None

    def parse_episode(self, file_path: str) -> ParsedEpisode | None:
        stem = Path(file_path).stem
        for pattern in self.episode_patterns:
            result = pattern(stem)
            if result is None:
                continue
            name, season, episode = result
            series_name = clean_title(name)
            if not series_name:
                continue
            return ParsedEpisode(
                file_path=str(file_path),
                file_name=stem,
                series_name=series_name,
                season_number=season,
                episode_number=episode,
                # Bracket tokens can sit anywhere in an episode name
                fields=FileFields.from_tokens(_BRACKET_TOKEN.findall(stem)),
            )
        return None
