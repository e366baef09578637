from models.event import (
    AnyEvent,
    CommandEvent,
    CompletionEvent,
    Education,
    IDEEvent,
    Position,
    TestRunEvent,
    UserProfileEvent,
    VersionControlAction,
    VersionControlActionType,
    VersionControlEvent,
    decode_event,
    encode_event,
)
from models.statistics import MIN_DATE, InteractionStatistics

__all__ = [
    "AnyEvent",
    "CommandEvent",
    "CompletionEvent",
    "Education",
    "IDEEvent",
    "Position",
    "TestRunEvent",
    "UserProfileEvent",
    "VersionControlAction",
    "VersionControlActionType",
    "VersionControlEvent",
    "decode_event",
    "encode_event",
    "InteractionStatistics",
    "MIN_DATE",
]
