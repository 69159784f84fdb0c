"""Application configuration stored in SQLite.

This model stores user-configurable settings that persist across restarts
and can be modified via the UI.
"""

from sqlmodel import Field, SQLModel

DEFAULT_FILE_EXTENSIONS = ".mp4,.mkv,.avi"


class AppConfig(SQLModel, table=True):
    """User-configurable application settings stored in database."""

    __tablename__ = "app_config"

    id: int | None = Field(default=None, primary_key=True)

    # TMDB API (v3 key or v4 read access token)
    tmdb_api_key: str = ""
    tmdb_language: str = "en-US"
    tmdb_rate_limit: int = 30  # Requests per second

    # Scanning
    scan_file_extensions: str = DEFAULT_FILE_EXTENSIONS  # Comma separated, leading dot
    scan_interval_minutes: int = 60  # 0 disables the scheduled scan

    @property
    def file_extensions(self) -> list[str]:
        """Normalized extension whitelist: lowercase, each with a leading dot."""
        extensions = []
        for raw in self.scan_file_extensions.split(","):
            ext = raw.strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                ext = f".{ext}"
            extensions.append(ext)
        return extensions
