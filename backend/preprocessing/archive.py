"""
Zip archives of serialized IDE events.

An archive holds one JSON-encoded event per entry, named ``0.json``,
``1.json``, ... in storage order. ReadingArchive hands out raw entries and
leaves decoding to its caller; WritingArchive serializes events and only
moves the finished file into place once every entry has been written.
"""

import logging
import os
import zipfile
from pathlib import Path
from typing import Iterable, Iterator, Union

from models.event import IDEEvent, encode_event

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class ArchiveError(Exception):
    """The archive container itself cannot be used."""


class ArchiveNotFoundError(ArchiveError, FileNotFoundError):
    pass


# ---------- Reading ----------

class ReadingArchive:
    """Sequential access to the raw entries of an existing archive."""

    def __init__(self, path: PathLike):
        self.path = Path(path)
        if not self.path.is_file():
            raise ArchiveNotFoundError(f"archive does not exist: {self.path}")
        try:
            self._zip = zipfile.ZipFile(self.path)
        except zipfile.BadZipFile as exc:
            raise ArchiveError(f"cannot open archive {self.path}: {exc}") from exc
        self._names = [info.filename for info in self._zip.infolist() if not info.is_dir()]

    def __len__(self) -> int:
        return len(self._names)

    @property
    def entry_names(self) -> list[str]:
        """Entry names in storage order."""
        return list(self._names)

    def read_entry(self, name: str) -> bytes:
        return self._zip.read(name)

    def __iter__(self) -> Iterator[tuple[str, bytes]]:
        for name in self._names:
            yield name, self.read_entry(name)

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> "ReadingArchive":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ---------- Writing ----------

class WritingArchive:
    """
    Writes events to ``path``, creating missing parent directories.

    Entries go to a temporary sibling file that replaces ``path`` on a clean
    exit; if the block raises, the temporary file is removed and any previous
    archive at ``path`` is left untouched.
    """

    def __init__(self, path: PathLike):
        self.path = Path(path)
        self._tmp_path = self.path.with_name(self.path.name + ".part")
        self._zip = None
        self._count = 0

    @property
    def num_entries(self) -> int:
        return self._count

    def __enter__(self) -> "WritingArchive":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._zip = zipfile.ZipFile(self._tmp_path, "w", compression=zipfile.ZIP_DEFLATED)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._zip.close()
        if exc_type is None:
            os.replace(self._tmp_path, self.path)
        else:
            logger.debug("Discarding partial archive %s", self._tmp_path)
            self._tmp_path.unlink(missing_ok=True)

    def add(self, event: IDEEvent) -> None:
        self.add_as_plain_text(encode_event(event))

    def add_all(self, events: Iterable[IDEEvent]) -> None:
        for event in events:
            self.add(event)

    def add_as_plain_text(self, text: str) -> None:
        if self._zip is None:
            raise ArchiveError("WritingArchive must be used as a context manager")
        self._zip.writestr(f"{self._count}.json", text)
        self._count += 1


def write_archive(path: PathLike, events: Iterable[IDEEvent]) -> int:
    """Write ``events`` to a fresh archive and return the number of entries."""
    with WritingArchive(path) as wa:
        wa.add_all(events)
    return wa.num_entries
