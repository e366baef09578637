"""
Cleaner: turns one raw event archive into a cleaned one.

Pipeline per archive, in this order:
  read      events decoded from the input archive; broken entries are logged
            and skipped
  filters   each registered filter, in registration order
  fixers    each registered fixer, in registration order
  dedup     structurally equal events collapse onto their first occurrence
  order     stable sort by trigger time
  write     the result goes to the same relative path below the output dir

The stages are chained generators, so nothing is evaluated before the write
step pulls the stream (dedup and ordering buffer what they need). After every
stage a checkpoint records how many events made it that far; the counts of
one call are handed to the logger when the archive has been written.

A Cleaner is not meant to be shared between threads: run one per worker.
"""

import logging
from typing import Iterable, Iterator, Optional

from models.event import IDEEvent
from models.statistics import MIN_DATE
from preprocessing.archive import WritingArchive
from preprocessing.cleaner_logger import CleanerLogger
from preprocessing.filters import BaseFilter
from preprocessing.fixers import BaseFixer
from preprocessing.io import PreprocessingIo
from preprocessing.reader import FailsafeEventReader

logger = logging.getLogger(__name__)

BEFORE_FILTERS = "before applying any filter"
AFTER_DEDUP = "after removing duplicates"
AFTER_ORDERING = "after ordering"


class DuplicateStageError(ValueError):
    pass


def after_stage(name: str) -> str:
    return f"after applying '{name}'"


class Cleaner:
    def __init__(self, io: PreprocessingIo, log: Optional[CleanerLogger] = None):
        self._io = io
        self._log = log if log is not None else CleanerLogger()
        self._filters: list[BaseFilter] = []
        self._fixers: list[BaseFixer] = []
        self._has_reported_config = False

        self._log.working_in(io.full_path_in(), io.full_path_out())

    # ---------- Configuration ----------

    @property
    def filters(self) -> tuple[BaseFilter, ...]:
        return tuple(self._filters)

    @property
    def fixers(self) -> tuple[BaseFixer, ...]:
        return tuple(self._fixers)

    def add_filter(self, stage: BaseFilter) -> "Cleaner":
        self._check_unique(stage.name)
        self._filters.append(stage)
        return self

    def add_fixer(self, stage: BaseFixer) -> "Cleaner":
        self._check_unique(stage.name)
        self._fixers.append(stage)
        return self

    def _check_unique(self, name: str) -> None:
        taken = {s.name for s in self._filters} | {s.name for s in self._fixers}
        if name in taken:
            raise DuplicateStageError(f"a stage named {name!r} is already registered")

    def _report_config(self) -> None:
        if not self._has_reported_config:
            self._log.registered_config(
                [f.name for f in self._filters],
                [f.name for f in self._fixers],
            )
            self._has_reported_config = True

    # ---------- Cleaning ----------

    def clean(self, rel_archive: str) -> dict[str, int]:
        """
        Clean one archive and return its checkpoint counts.

        Raises ArchiveNotFoundError (or ArchiveError for an unreadable
        container) before anything is counted or written.
        """
        self._report_config()
        self._log.reading_archive(rel_archive)

        path_in = self._io.full_path_in(rel_archive)
        counts: dict[str, int] = {}

        def on_failure(entry: str, error: Exception) -> None:
            self._log.deserialization_error(path_in, entry, error)

        with FailsafeEventReader(path_in, on_failure) as reader:
            events: Iterable[IDEEvent] = reader.read_all_lazy()
            events = self._apply_filters(events, counts)
            events = self._apply_fixers(events, counts)
            events = self._checkpoint(remove_duplicates(events), AFTER_DEDUP, counts)
            events = self._checkpoint(order_events(events), AFTER_ORDERING, counts)
            self._write(events, rel_archive)

        self._log.finished_writing(counts)
        return counts

    def _apply_filters(self, events: Iterable[IDEEvent], counts: dict[str, int]) -> Iterable[IDEEvent]:
        events = self._checkpoint(events, BEFORE_FILTERS, counts)
        for stage in self._filters:
            events = self._checkpoint(filter(stage, events), after_stage(stage.name), counts)
        return events

    def _apply_fixers(self, events: Iterable[IDEEvent], counts: dict[str, int]) -> Iterable[IDEEvent]:
        for stage in self._fixers:
            events = self._checkpoint(stage.process(events), after_stage(stage.name), counts)
        return events

    @staticmethod
    def _checkpoint(events: Iterable[IDEEvent], label: str, counts: dict[str, int]) -> Iterator[IDEEvent]:
        # labels are registered eagerly so the counts keep pipeline order
        counts[label] = 0

        def counting() -> Iterator[IDEEvent]:
            for event in events:
                counts[label] += 1
                yield event

        return counting()

    def _write(self, events: Iterable[IDEEvent], rel_archive: str) -> None:
        self._log.writing_events()
        path_out = self._io.full_path_out(rel_archive)
        self._io.ensure_parent_exists(path_out)
        with WritingArchive(path_out) as wa:
            wa.add_all(events)
        logger.debug("Wrote %d events to %s", wa.num_entries, path_out)

    # ---------- Lifecycle ----------

    def close(self) -> None:
        """Emit the summary over every archive cleaned with this logger."""
        self._log.close()

    def __enter__(self) -> "Cleaner":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ---------- Stream stages ----------

def remove_duplicates(events: Iterable[IDEEvent]) -> Iterator[IDEEvent]:
    seen: set[IDEEvent] = set()
    for event in events:
        if event not in seen:
            seen.add(event)
            yield event


def _trigger_time(event: IDEEvent):
    return event.triggered_at if event.triggered_at is not None else MIN_DATE


def order_events(events: Iterable[IDEEvent]) -> Iterator[IDEEvent]:
    """Stable sort by trigger time; events without one come first."""
    yield from sorted(events, key=_trigger_time)
