"""Core pytest fixtures shared by unit and pipeline tests."""

from pathlib import Path

import pytest

from tests.fixtures.fake_provider import FakeProvider


@pytest.fixture
def fake_provider():
    """Empty in-memory metadata provider; tests register titles on it."""
    return FakeProvider()


@pytest.fixture
def media_tree(tmp_path):
    """Factory that creates empty media files below a fresh library root.

    Usage: ``root = media_tree("movies", ["Inception (2010) [1080p].mkv", "sub/x.mp4"])``
    """

    def _make(folder: str, files: list[str]) -> Path:
        root = tmp_path / folder
        root.mkdir(parents=True, exist_ok=True)
        for relative in files:
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"")
        return root

    return _make
