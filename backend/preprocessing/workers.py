"""
Fixed-size worker pool over a shared queue of archive names.

Each worker claims one name at a time under the queue lock, processes it
outside the lock and repeats until the queue is empty. There is no retry:
an error ends the loop of the worker that hit it, the other workers drain
the rest of the queue, and run_workers() re-raises the first error once the
pool has shut down.
"""

import logging
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WorkQueue:
    def __init__(self, items: Iterable[str]):
        self._items = deque(items)
        self._lock = threading.Lock()

    def claim(self) -> Optional[str]:
        with self._lock:
            return self._items.popleft() if self._items else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def run_workers(
    items: Iterable[str],
    num_workers: int,
    make_handler: Callable[[int], Callable[[str], T]],
) -> dict[str, T]:
    """
    Process ``items`` with ``num_workers`` threads.

    make_handler(worker_id) is called once inside each worker thread and
    returns the function that worker applies to every item it claims, so
    per-worker state (e.g. a Cleaner) never crosses threads.

    Returns item -> handler result for every item that was processed.
    """
    queue = WorkQueue(items)
    results: dict[str, T] = {}
    results_lock = threading.Lock()

    def work(worker_id: int) -> int:
        handle = make_handler(worker_id)
        done = 0
        while True:
            item = queue.claim()
            if item is None:
                break
            try:
                result = handle(item)
            except Exception:
                logger.exception("Worker %d failed on %s, stopping", worker_id, item)
                raise
            with results_lock:
                results[item] = result
            done += 1
        logger.debug("Worker %d finished after %d items", worker_id, done)
        return done

    with ThreadPoolExecutor(max_workers=max(1, num_workers)) as executor:
        futures = [executor.submit(work, i) for i in range(max(1, num_workers))]

    for future in futures:
        future.result()
    return results
