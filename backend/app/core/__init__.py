"""Core modules for Reelvault."""

from app.core.parser import FilenameParser, ParsedEpisode, ParsedMovie

__all__ = ["FilenameParser", "ParsedEpisode", "ParsedMovie"]
