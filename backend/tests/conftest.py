"""Shared fixtures for the feedback processor test suite."""
from pathlib import Path

import pytest

from models.event import decode_event
from preprocessing.archive import ReadingArchive
from preprocessing.io import PreprocessingIo


@pytest.fixture
def io(tmp_path: Path) -> PreprocessingIo:
    """Input and output directories below a fresh tmp dir."""
    return PreprocessingIo(tmp_path / "raw", tmp_path / "clean")


@pytest.fixture
def read_events():
    """Decode every entry of an archive, failing loudly on broken entries."""

    def _read(path):
        with ReadingArchive(path) as ra:
            return [decode_event(raw) for _, raw in ra]

    return _read
