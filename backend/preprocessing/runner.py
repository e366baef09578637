"""
Cleans every archive below the input directory in parallel.

One Cleaner per worker thread; all of them report to a single CleanerLogger
so the end-of-run summary covers the whole input directory.
"""

import logging
from typing import Callable, Optional

from preprocessing.archive import PathLike
from preprocessing.cleaner import Cleaner
from preprocessing.cleaner_logger import CleanerLogger
from preprocessing.io import PreprocessingIo
from preprocessing.workers import run_workers

logger = logging.getLogger(__name__)

CleanerSetup = Callable[[Cleaner], None]


class PreprocessingRunner:
    def __init__(
        self,
        dir_in: PathLike,
        dir_out: PathLike,
        num_workers: int,
        setup: Optional[CleanerSetup] = None,
        log: Optional[CleanerLogger] = None,
    ):
        self.io = PreprocessingIo(dir_in, dir_out)
        self.num_workers = num_workers
        self._setup = setup
        self._log = log if log is not None else CleanerLogger()

    def _make_cleaner(self, worker_id: int) -> Callable[[str], dict[str, int]]:
        cleaner = Cleaner(self.io, self._log)
        if self._setup is not None:
            self._setup(cleaner)
        logger.debug("Worker %d cleaner ready: %s %s", worker_id, cleaner.filters, cleaner.fixers)
        return cleaner.clean

    def run(self) -> dict[str, dict[str, int]]:
        """Clean all archives; returns relative archive name -> checkpoint counts."""
        archives = self.io.find_archives()
        logger.info("Cleaning %d archives with %d workers", len(archives), self.num_workers)
        try:
            return run_workers(archives, self.num_workers, self._make_cleaner)
        finally:
            self._log.close()
