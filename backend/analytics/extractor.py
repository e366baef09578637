"""
Interaction statistics over one developer's cleaned event stream.

The input must already be ordered by trigger time (the Cleaner writes it
that way). Every event is counted per kind and dated; events that carry
both a trigger and a termination time also feed the active-time estimate:

  Spans closer than TIMEOUT to the currently open interval are merged into
  it; a larger gap closes the interval and adds its length to the active
  time. The gap itself is never counted.

Education and position keep the last known value; an "unknown" profile
answer does not erase an earlier one.
"""

from datetime import datetime, timedelta
from typing import Iterable, Optional

from models.event import (
    CompletionEvent,
    Education,
    IDEEvent,
    Position,
    TestRunEvent,
    UserProfileEvent,
)
from models.statistics import MIN_DATE, InteractionStatistics

TIMEOUT = timedelta(seconds=16)

# Every kind here is reported, with zero if it never occurs. Keep in sync
# with the AnyEvent union in models/event.py.
ALL_EVENT_KINDS: tuple[str, ...] = (
    "completion",
    "test_run",
    "user_profile",
    "version_control",

    "build",
    "debugger",
    "document",
    "edit",
    "find",
    "ide_state",
    "install",
    "solution",
    "update",
    "window",

    "activity",
    "command",
    "error",
    "info",
    "navigation",
    "system",
)


class UnorderedEventsError(AssertionError):
    """The extractor was handed a stream that is not sorted by trigger time."""


# ---------- Helpers ----------

def day_of(ts: datetime) -> datetime:
    """Midnight of ``ts``'s calendar day, in ``ts``'s own offset."""
    return ts.replace(hour=0, minute=0, second=0, microsecond=0)


def first_of_month(day: datetime) -> datetime:
    return day.replace(day=1)


class _ActiveTime:
    """Merges [start, end] spans separated by at most TIMEOUT."""

    def __init__(self, timeout: timedelta = TIMEOUT):
        self.timeout = timeout
        self.total = timedelta(0)
        self._start: Optional[datetime] = None
        self._end: Optional[datetime] = None

    def add(self, start: datetime, end: datetime) -> None:
        if self._start is not None and self._end + self.timeout < start:
            self.flush()
        if self._start is None:
            self._start, self._end = start, end
        else:
            self._end = max(self._end, end)

    def flush(self) -> None:
        if self._start is not None:
            self.total += self._end - self._start
            self._start = self._end = None


# ---------- Extraction ----------

class InteractionStatisticsExtractor:
    all_event_kinds = ALL_EVENT_KINDS
    timeout = TIMEOUT

    def create_statistics(self, events: Iterable[IDEEvent]) -> InteractionStatistics:
        counts = {kind: 0 for kind in self.all_event_kinds}
        days: set[datetime] = set()
        months: set[datetime] = set()
        day_first = MIN_DATE
        day_last = MIN_DATE
        education = Education.UNKNOWN
        position = Position.UNKNOWN
        num_code_completion = 0
        num_test_runs = 0

        active = _ActiveTime(self.timeout)
        last_triggered_at = MIN_DATE

        for e in events:
            triggered_at = e.triggered_at
            terminated_at = e.terminated_at

            if triggered_at is not None and terminated_at is not None:
                if triggered_at < last_triggered_at:
                    raise UnorderedEventsError(
                        f"event triggered at {triggered_at.isoformat()} follows one "
                        f"triggered at {last_triggered_at.isoformat()}"
                    )
                last_triggered_at = triggered_at
                active.add(triggered_at, terminated_at)

            counts[e.kind] = counts.get(e.kind, 0) + 1

            day = day_of(triggered_at if triggered_at is not None else MIN_DATE)
            days.add(day)
            months.add(first_of_month(day))
            # MIN_DATE doubles as "not set yet"
            if day_first == MIN_DATE or day < day_first:
                day_first = day
            if day_last == MIN_DATE or day > day_last:
                day_last = day

            if isinstance(e, UserProfileEvent):
                if e.education != Education.UNKNOWN:
                    education = e.education
                if e.position != Position.UNKNOWN:
                    position = e.position
            elif isinstance(e, CompletionEvent):
                num_code_completion += 1
            elif isinstance(e, TestRunEvent):
                num_test_runs += 1

        active.flush()

        return InteractionStatistics(
            day_first=day_first,
            day_last=day_last,
            num_days=len(days),
            num_month=len(months),
            num_events_detailed=counts,
            education=education,
            position=position,
            num_code_completion=num_code_completion,
            num_test_runs=num_test_runs,
            active_time=active.total,
        )


def create_statistics(events: Iterable[IDEEvent]) -> InteractionStatistics:
    return InteractionStatisticsExtractor().create_statistics(events)
