"""MediaFolder model - configured library roots the scanner walks."""

from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel

from app.models.timestamps import utc_now


class FolderType(str, Enum):
    """Kind of content a folder holds; selects the parser family."""

    MOVIES = "movies"
    SERIES = "series"


class MediaFolder(SQLModel, table=True):
    """A root directory to scan recursively."""

    __tablename__ = "media_folders"

    id: int | None = Field(default=None, primary_key=True)
    path: str = Field(index=True, unique=True)
    type: FolderType
    active: bool = True

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
