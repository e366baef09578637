"""
Tests for the worker pool, the preprocessing runner and the statistics
runner. Archives live in pytest's tmp_path.
"""

import logging
import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from analytics.runner import InteractionStatisticsRunner, summarize
from main import configure_cleaner
from models.event import (
    CommandEvent,
    CompletionEvent,
    IDEEvent,
    VersionControlAction,
    VersionControlActionType,
    VersionControlEvent,
)
from preprocessing.archive import ArchiveError, write_archive
from preprocessing.cleaner import AFTER_ORDERING, BEFORE_FILTERS, Cleaner
from preprocessing.cleaner_logger import CleanerLogger
from preprocessing.filters import BaseFilter, UnnamedCommandFilter
from preprocessing.fixers import VersionControlEventSplitter
from preprocessing.runner import PreprocessingRunner
from preprocessing.workers import WorkQueue, run_workers

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _e(command_id: str, offset: int) -> CommandEvent:
    return CommandEvent(command_id=command_id, triggered_at=T0 + timedelta(seconds=offset))


class _SlowFilter(BaseFilter):
    def accepts(self, event: IDEEvent) -> bool:
        time.sleep(0.05)
        return True


# ── Worker pool ────────────────────────────────────────────────────────────


class TestWorkQueue:
    def test_claims_in_order_until_empty(self):
        q = WorkQueue(["a", "b"])
        assert q.claim() == "a"
        assert q.claim() == "b"
        assert q.claim() is None
        assert len(q) == 0


class TestRunWorkers:
    def test_every_item_is_processed_once(self):
        seen = []
        lock = threading.Lock()

        def make_handler(worker_id):
            def handle(item):
                with lock:
                    seen.append(item)
                return item.upper()
            return handle

        items = [f"item{i}" for i in range(50)]
        results = run_workers(items, 4, make_handler)
        assert sorted(seen) == sorted(items)
        assert results == {i: i.upper() for i in items}

    def test_handler_is_built_once_per_worker(self):
        built = []

        def make_handler(worker_id):
            built.append(worker_id)
            return lambda item: item

        run_workers(["a", "b", "c"], 3, make_handler)
        assert sorted(built) == [0, 1, 2]

    def test_failure_stops_the_worker_and_is_raised(self):
        handled = []

        def make_handler(worker_id):
            def handle(item):
                if item == "b":
                    raise ValueError("broken item")
                handled.append(item)
            return handle

        with pytest.raises(ValueError):
            run_workers(["a", "b", "c"], 1, make_handler)
        # no retry, no requeue: the single worker is gone after "b"
        assert handled == ["a"]

    def test_empty_queue(self):
        assert run_workers([], 2, lambda worker_id: (lambda item: item)) == {}


# ── Preprocessing runner ───────────────────────────────────────────────────


class TestPreprocessingRunner:
    def test_cleans_every_archive(self, tmp_path, read_events):
        dir_in, dir_out = tmp_path / "raw", tmp_path / "clean"
        write_archive(dir_in / "a.zip", [_e("a", 2), _e("b", 1)])
        write_archive(dir_in / "sub" / "b.zip", [_e("c", 1), _e("c", 1)])
        write_archive(dir_in / "c.zip", [_e("{guid}:331:", 1), _e("d", 2)])

        log = CleanerLogger()
        results = PreprocessingRunner(dir_in, dir_out, num_workers=2, setup=configure_cleaner, log=log).run()

        assert set(results) == {"a.zip", "c.zip", "sub/b.zip"}
        assert read_events(dir_out / "a.zip") == [_e("b", 1), _e("a", 2)]
        assert read_events(dir_out / "sub" / "b.zip") == [_e("c", 1)]
        assert read_events(dir_out / "c.zip") == [_e("d", 2)]
        assert log.aggregated_counts[BEFORE_FILTERS] == 6
        assert log.aggregated_counts[AFTER_ORDERING] == 4

    def test_splits_version_control_events(self, tmp_path, read_events):
        dir_in, dir_out = tmp_path / "raw", tmp_path / "clean"
        actions = (
            VersionControlAction(action_type=VersionControlActionType.COMMIT, executed_at=T0 + timedelta(seconds=9)),
            VersionControlAction(action_type=VersionControlActionType.CHECKOUT, executed_at=T0 + timedelta(seconds=3)),
        )
        write_archive(dir_in / "a.zip", [VersionControlEvent(triggered_at=T0 + timedelta(seconds=10), actions=actions)])

        PreprocessingRunner(dir_in, dir_out, num_workers=1, setup=configure_cleaner).run()

        out = read_events(dir_out / "a.zip")
        assert [e.actions[0].action_type for e in out] == [
            VersionControlActionType.CHECKOUT,
            VersionControlActionType.COMMIT,
        ]

    def test_broken_archive_stops_its_worker(self, tmp_path):
        dir_in, dir_out = tmp_path / "raw", tmp_path / "clean"
        write_archive(dir_in / "a.zip", [_e("a", 1)])
        (dir_in / "b.zip").write_bytes(b"not a zip")
        write_archive(dir_in / "c.zip", [_e("c", 1)])

        with pytest.raises(ArchiveError):
            PreprocessingRunner(dir_in, dir_out, num_workers=1).run()

        assert (dir_out / "a.zip").exists()
        assert not (dir_out / "b.zip").exists()
        assert not (dir_out / "c.zip").exists()

    def test_summary_is_logged_even_on_failure(self, tmp_path):
        dir_in = tmp_path / "raw"
        dir_in.mkdir()
        (dir_in / "b.zip").write_bytes(b"not a zip")

        class RecordingLogger(CleanerLogger):
            closed = False

            def close(self):
                super().close()
                self.closed = True

        log = RecordingLogger()
        with pytest.raises(ArchiveError):
            PreprocessingRunner(dir_in, tmp_path / "clean", num_workers=1, log=log).run()
        assert log.closed

    def test_config_is_logged_once_per_run(self, tmp_path, caplog):
        caplog.set_level(logging.INFO, logger="preprocessing.cleaner_logger")
        dir_in = tmp_path / "raw"
        for i in range(8):
            write_archive(dir_in / f"{i}.zip", [_e("a", 1), _e("b", 2)])

        PreprocessingRunner(dir_in, tmp_path / "clean", num_workers=4, setup=lambda c: c.add_filter(_SlowFilter())).run()

        messages = [r.getMessage() for r in caplog.records if r.name == "preprocessing.cleaner_logger"]
        assert messages.count("folders:") == 1
        assert messages.count("registered filters:") == 1
        assert messages.count("- _SlowFilter") == 1
        assert messages.count("done") == 8

    def test_missing_input_dir_means_nothing_to_do(self, tmp_path):
        assert PreprocessingRunner(tmp_path / "nope", tmp_path / "clean", num_workers=2).run() == {}


class TestConfigureCleaner:
    def test_registers_default_stages(self, io):
        cleaner = Cleaner(io)
        configure_cleaner(cleaner)
        assert [type(f) for f in cleaner.filters] == [UnnamedCommandFilter]
        assert [type(f) for f in cleaner.fixers] == [VersionControlEventSplitter]


# ── Statistics runner ──────────────────────────────────────────────────────


class TestInteractionStatisticsRunner:
    def test_one_snapshot_per_archive(self, tmp_path):
        write_archive(tmp_path / "a.zip", [_e("a", 1), CompletionEvent(triggered_at=T0 + timedelta(seconds=2))])
        write_archive(tmp_path / "sub" / "b.zip", [_e("b", 1)])

        results = InteractionStatisticsRunner(tmp_path, num_workers=2).run()

        assert set(results) == {"a.zip", "sub/b.zip"}
        assert results["a.zip"].num_events_total == 2
        assert results["a.zip"].num_code_completion == 1
        assert results["sub/b.zip"].num_events_detailed["command"] == 1

    def test_summarize(self, tmp_path):
        write_archive(tmp_path / "a.zip", [
            CommandEvent(triggered_at=T0, duration=timedelta(minutes=30)),
            CompletionEvent(triggered_at=T0 + timedelta(minutes=10), duration=timedelta(minutes=50)),
        ])
        results = InteractionStatisticsRunner(tmp_path, num_workers=1).run()
        assert summarize(results) == {
            "archives": 1,
            "events": 2,
            "code_completions": 1,
            "test_runs": 0,
            "active_hours": 1.0,
        }
