"""ScanningConflict model - files waiting for a human to pick their match."""

import json
from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel

from app.matcher.models import Candidate
from app.models.timestamps import utc_now


class MediaType(str, Enum):
    """Media type of a conflicting file."""

    MOVIE = "movie"
    SERIES = "series"


class ScanningConflict(SQLModel, table=True):
    """A file that matched zero or several catalog entries.

    ``file_path`` is unique: rescanning the same file refreshes the row
    instead of adding another one.
    """

    __tablename__ = "scanning_conflicts"

    id: int | None = Field(default=None, primary_key=True)
    file_name: str
    file_path: str = Field(index=True, unique=True)
    media_type: MediaType

    # List of Candidate dicts (JSON stored as string for simplicity)
    possible_matches_json: str = "[]"

    resolved: bool = Field(default=False, index=True)
    selected_id: int | None = None  # TMDB id chosen by the resolver

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def possible_matches(self) -> list[Candidate]:
        return [Candidate.model_validate(item) for item in json.loads(self.possible_matches_json)]

    def set_possible_matches(self, candidates: list[Candidate]) -> None:
        self.possible_matches_json = json.dumps([c.model_dump() for c in candidates])
