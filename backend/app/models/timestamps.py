"""Timestamp helper shared by the table models and the services writing them."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time in UTC; the column binding rejects naive datetimes."""
    return datetime.now(UTC)
