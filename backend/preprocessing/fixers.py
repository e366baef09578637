"""
Fixers rewrite the event stream.

process_event() maps one event to zero, one or many events. The default
process() is the flat-map of process_event() over the stream, in input
order; stateful fixers override process() directly.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Iterator

from models.event import IDEEvent, VersionControlEvent


class BaseFixer(ABC):
    @property
    def name(self) -> str:
        return type(self).__name__

    def process(self, events: Iterable[IDEEvent]) -> Iterator[IDEEvent]:
        for event in events:
            yield from self.process_event(event)

    @abstractmethod
    def process_event(self, event: IDEEvent) -> Iterable[IDEEvent]:
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class VersionControlEventSplitter(BaseFixer):
    """
    Expands a version-control event into one event per recorded action.

    Each resulting event keeps every field of the original, is triggered at
    the time its action was executed and carries only that action. Events
    without actions are dropped; other kinds pass through unchanged.
    """

    def process_event(self, event: IDEEvent) -> Iterator[IDEEvent]:
        if not isinstance(event, VersionControlEvent):
            yield event
            return
        for action in event.actions:
            yield event.model_copy(update={
                "triggered_at": action.executed_at,
                "actions": (action,),
            })
