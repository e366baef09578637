"""
Failure-tolerant reading of event archives.

Opening the archive is all-or-nothing: a missing or broken container raises
before any event is produced. Once open, every entry is decoded on its own;
an entry that cannot be decoded becomes a FailedEntry (read_entries) or a
call to the failure callback (read_all_lazy), and reading carries on with
the next entry.
"""

from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Union

from models.event import IDEEvent, decode_event
from preprocessing.archive import PathLike, ReadingArchive

FailureCallback = Callable[[str, Exception], None]


@dataclass(frozen=True)
class DecodedEntry:
    name: str
    event: IDEEvent


@dataclass(frozen=True)
class FailedEntry:
    name: str
    error: Exception


EntryResult = Union[DecodedEntry, FailedEntry]


class FailsafeEventReader:
    """
    Usage:

        with FailsafeEventReader(path, on_failure) as reader:
            for event in reader.read_all_lazy():
                ...
    """

    def __init__(self, path: PathLike, on_failure: FailureCallback):
        self.path = path
        self._on_failure = on_failure
        self._archive: Optional[ReadingArchive] = None

    def __enter__(self) -> "FailsafeEventReader":
        self._archive = ReadingArchive(self.path)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._archive is not None:
            self._archive.close()
            self._archive = None

    def read_entries(self) -> Iterator[EntryResult]:
        """One result per entry, in storage order."""
        if self._archive is None:
            raise RuntimeError("FailsafeEventReader is not open")
        for name in self._archive.entry_names:
            try:
                event = decode_event(self._archive.read_entry(name))
            except Exception as exc:
                # any decoding or decompression error spoils only this entry
                yield FailedEntry(name=name, error=exc)
            else:
                yield DecodedEntry(name=name, event=event)

    def read_all_lazy(self) -> Iterator[IDEEvent]:
        for result in self.read_entries():
            if isinstance(result, FailedEntry):
                self._on_failure(result.name, result.error)
            else:
                yield result.event
