"""Data models for Reelvault."""

from app.models.app_config import AppConfig
from app.models.catalog import Episode, Movie, TranscodeStatus, TvSeries
from app.models.media_folder import FolderType, MediaFolder
from app.models.scanning_conflict import MediaType, ScanningConflict

__all__ = [
    "AppConfig",
    "Episode",
    "FolderType",
    "MediaFolder",
    "MediaType",
    "Movie",
    "ScanningConflict",
    "TranscodeStatus",
    "TvSeries",
]
