"""
Filters decide per event whether it stays in the stream.

A filter is pure: accepts() looks at one event and returns True to keep it.
"""

from abc import ABC, abstractmethod

from models.event import CommandEvent, IDEEvent


class BaseFilter(ABC):
    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def accepts(self, event: IDEEvent) -> bool:
        ...

    def __call__(self, event: IDEEvent) -> bool:
        return self.accepts(event)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class UnnamedCommandFilter(BaseFilter):
    """
    Drops command events whose identifier carries no command name.

    Command ids look like ``{guid}:<number>:<name>``; IDE-internal commands
    are recorded with an empty name (``{guid}:331:``) and say nothing about
    what the developer did.
    """

    def accepts(self, event: IDEEvent) -> bool:
        if not isinstance(event, CommandEvent) or event.command_id is None:
            return True
        return not event.command_id.endswith(":")
