"""
Lifecycle reporting for the cleaning pipeline.

The Cleaner tells a CleanerLogger what it is doing; the logger renders it
through the standard logging module and keeps a running total of every
checkpoint count so that close() can print one summary over all archives.
One logger may be shared by the cleaners of several workers; the folders and
the stage configuration are then reported by whichever cleaner comes first.
"""

import logging
import threading
from typing import Iterable, Mapping

logger = logging.getLogger(__name__)

_RULE = "#" * 60


class CleanerLogger:
    def __init__(self, log: logging.Logger = logger):
        self._log = log
        self._lock = threading.Lock()
        self._aggregated_counts: dict[str, int] = {}
        self._reported_folders = False
        self._reported_config = False

    @property
    def aggregated_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._aggregated_counts)

    def working_in(self, dir_in, dir_out) -> None:
        with self._lock:
            if self._reported_folders:
                return
            self._reported_folders = True
            self._log.info(_RULE)
            self._log.info("# started cleaning...")
            self._log.info(_RULE)
            self._log.info("folders:")
            self._log.info("- in: %s", dir_in)
            self._log.info("- out: %s", dir_out)

    def registered_config(self, filters: Iterable[str], fixers: Iterable[str]) -> None:
        with self._lock:
            if self._reported_config:
                return
            self._reported_config = True
            self._log.info("registered filters:")
            for name in filters:
                self._log.info("- %s", name)
            self._log.info("registered fixers:")
            for name in fixers:
                self._log.info("- %s", name)

    def reading_archive(self, rel_archive: str) -> None:
        self._log.info("#### archive: %s", rel_archive)
        self._log.info("reading...")

    def writing_events(self) -> None:
        self._log.info("writing...")

    def finished_writing(self, counts: Mapping[str, int]) -> None:
        self._log.info("done")
        with self._lock:
            for label, count in counts.items():
                self._log.info("- %s: %d", label, count)
                self._aggregated_counts[label] = self._aggregated_counts.get(label, 0) + count

    def deserialization_error(self, archive, entry: str, error: Exception) -> None:
        self._log.warning(
            "%s during deserialization of %s (%s): %s",
            type(error).__name__, archive, entry, error,
        )

    def close(self) -> None:
        self._log.info("#### cleaning stats over all files ####")
        for label, count in self.aggregated_counts.items():
            self._log.info("- %s: %d", label, count)
