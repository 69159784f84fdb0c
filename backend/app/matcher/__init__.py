"""Metadata matching against TMDB."""

from app.matcher.metadata_matcher import MatchOutcome, MetadataMatcher, MetadataProvider, classify
from app.matcher.tmdb_client import TmdbClient

__all__ = ["MatchOutcome", "MetadataMatcher", "MetadataProvider", "TmdbClient", "classify"]
