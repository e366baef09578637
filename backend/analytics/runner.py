"""
Computes one InteractionStatistics snapshot per cleaned archive.

Runs on the output of the preprocessing step, with the same worker pool
shape. Entries that cannot be decoded are logged and left out.
"""

import logging
from typing import Callable

from analytics.extractor import InteractionStatisticsExtractor
from models.statistics import InteractionStatistics
from preprocessing.archive import PathLike
from preprocessing.io import PreprocessingIo
from preprocessing.reader import FailsafeEventReader
from preprocessing.workers import run_workers

logger = logging.getLogger(__name__)


class InteractionStatisticsRunner:
    def __init__(self, dir_in: PathLike, num_workers: int):
        self.io = PreprocessingIo(dir_in, dir_in)
        self.num_workers = num_workers

    def _make_handler(self, worker_id: int) -> Callable[[str], InteractionStatistics]:
        extractor = InteractionStatisticsExtractor()

        def handle(rel_archive: str) -> InteractionStatistics:
            path = self.io.full_path_in(rel_archive)

            def on_failure(entry: str, error: Exception) -> None:
                logger.warning(
                    "%s during deserialization of %s (%s): %s",
                    type(error).__name__, path, entry, error,
                )

            with FailsafeEventReader(path, on_failure) as reader:
                stats = extractor.create_statistics(reader.read_all_lazy())
            logger.info(
                "%s: %d events on %d days, active %s",
                rel_archive, stats.num_events_total, stats.num_days, stats.active_time,
            )
            return stats

        return handle

    def run(self) -> dict[str, InteractionStatistics]:
        archives = self.io.find_archives()
        logger.info("Extracting statistics for %d archives", len(archives))
        return run_workers(archives, self.num_workers, self._make_handler)


def summarize(results: dict[str, InteractionStatistics]) -> dict[str, object]:
    """Totals over all archives, for the end-of-run log line."""
    return {
        "archives": len(results),
        "events": sum(s.num_events_total for s in results.values()),
        "code_completions": sum(s.num_code_completion for s in results.values()),
        "test_runs": sum(s.num_test_runs for s in results.values()),
        "active_hours": round(sum(s.active_time.total_seconds() for s in results.values()) / 3600, 2),
    }
