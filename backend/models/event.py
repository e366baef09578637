"""
IDE interaction events as recorded by the feedback tooling.

Every event shares one envelope (identity, session, timestamps, trigger
source, active document/window). The concrete variants form a closed
catalogue discriminated by ``kind``; archives store one JSON-serialized
event per entry and ``decode_event`` turns such an entry back into the
matching variant.

Events are frozen, so equality and hashing are structural.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, TypeAdapter


# ---------- Enumerations ----------

class EventTrigger(str, Enum):
    UNKNOWN = "unknown"
    CLICK = "click"
    SHORTCUT = "shortcut"
    TYPING = "typing"
    AUTOMATIC = "automatic"


class Education(str, Enum):
    UNKNOWN = "unknown"
    NONE = "none"
    AUTODIDACT = "autodidact"
    TRAINING = "training"
    BACHELOR = "bachelor"
    MASTER = "master"
    PHD = "phd"


class Position(str, Enum):
    UNKNOWN = "unknown"
    STUDENT = "student"
    RESEARCHER_ACADEMIC = "researcher_academic"
    RESEARCHER_INDUSTRY = "researcher_industry"
    SOFTWARE_ENGINEER = "software_engineer"
    HOBBY_PROGRAMMER = "hobby_programmer"
    OTHER = "other"


class VersionControlActionType(str, Enum):
    UNKNOWN = "unknown"
    BRANCH = "branch"
    CHECKOUT = "checkout"
    CLONE = "clone"
    COMMIT = "commit"
    COMMIT_AMEND = "commit_amend"
    COMMIT_INITIAL = "commit_initial"
    MERGE = "merge"
    REBASE = "rebase"
    REBASE_FINISHED = "rebase_finished"
    RESET = "reset"


# ---------- Envelope ----------

class IDEEvent(BaseModel):
    """Fields common to every event kind."""

    model_config = ConfigDict(frozen=True)

    kind: str
    id: Optional[str] = None
    session_id: Optional[str] = None
    tool_version: Optional[str] = None
    triggered_at: Optional[AwareDatetime] = None
    triggered_by: EventTrigger = EventTrigger.UNKNOWN
    duration: Optional[timedelta] = None
    active_document: Optional[str] = None
    active_window: Optional[str] = None

    @property
    def terminated_at(self) -> Optional[datetime]:
        if self.triggered_at is None or self.duration is None:
            return None
        return self.triggered_at + self.duration


# ---------- Payload value types ----------

class VersionControlAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    action_type: VersionControlActionType = VersionControlActionType.UNKNOWN
    executed_at: Optional[AwareDatetime] = None


class TestCaseResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    test_name: str
    passed: bool
    duration: Optional[timedelta] = None


# ---------- Variants with payload ----------

class CommandEvent(IDEEvent):
    kind: Literal["command"] = "command"
    command_id: Optional[str] = None


class VersionControlEvent(IDEEvent):
    kind: Literal["version_control"] = "version_control"
    solution: Optional[str] = None
    actions: tuple[VersionControlAction, ...] = ()


class UserProfileEvent(IDEEvent):
    kind: Literal["user_profile"] = "user_profile"
    profile_id: Optional[str] = None
    education: Education = Education.UNKNOWN
    position: Position = Position.UNKNOWN


class CompletionEvent(IDEEvent):
    kind: Literal["completion"] = "completion"
    proposal_count: int = 0
    selected: Optional[str] = None
    terminated_state: str = "unknown"     # "applied" | "cancelled" | "filtered" | "unknown"


class TestRunEvent(IDEEvent):
    kind: Literal["test_run"] = "test_run"
    was_aborted: bool = False
    tests: tuple[TestCaseResult, ...] = ()


# ---------- Structural IDE events (count buckets) ----------

class BuildEvent(IDEEvent):
    kind: Literal["build"] = "build"
    scope: Optional[str] = None
    action: Optional[str] = None


class DebuggerEvent(IDEEvent):
    kind: Literal["debugger"] = "debugger"
    mode: Optional[str] = None
    reason: Optional[str] = None


class DocumentEvent(IDEEvent):
    kind: Literal["document"] = "document"
    document: Optional[str] = None
    action: Optional[str] = None


class EditEvent(IDEEvent):
    kind: Literal["edit"] = "edit"
    number_of_changes: int = 0
    size_of_changes: int = 0


class FindEvent(IDEEvent):
    kind: Literal["find"] = "find"
    cancelled: bool = False


class IDEStateEvent(IDEEvent):
    kind: Literal["ide_state"] = "ide_state"
    lifecycle_phase: Optional[str] = None


class InstallEvent(IDEEvent):
    kind: Literal["install"] = "install"
    plugin_version: Optional[str] = None


class SolutionEvent(IDEEvent):
    kind: Literal["solution"] = "solution"
    target: Optional[str] = None
    action: Optional[str] = None


class UpdateEvent(IDEEvent):
    kind: Literal["update"] = "update"
    old_version: Optional[str] = None
    new_version: Optional[str] = None


class WindowEvent(IDEEvent):
    kind: Literal["window"] = "window"
    window: Optional[str] = None
    action: Optional[str] = None


class ActivityEvent(IDEEvent):
    kind: Literal["activity"] = "activity"


class ErrorEvent(IDEEvent):
    kind: Literal["error"] = "error"
    content: Optional[str] = None
    stack_trace: tuple[str, ...] = ()


class InfoEvent(IDEEvent):
    kind: Literal["info"] = "info"
    info: Optional[str] = None


class NavigationEvent(IDEEvent):
    kind: Literal["navigation"] = "navigation"
    target: Optional[str] = None
    location: Optional[str] = None


class SystemEvent(IDEEvent):
    kind: Literal["system"] = "system"
    type: Optional[str] = None


# ---------- Decoding ----------

AnyEvent = Annotated[
    Union[
        CompletionEvent,
        TestRunEvent,
        UserProfileEvent,
        VersionControlEvent,
        BuildEvent,
        DebuggerEvent,
        DocumentEvent,
        EditEvent,
        FindEvent,
        IDEStateEvent,
        InstallEvent,
        SolutionEvent,
        UpdateEvent,
        WindowEvent,
        ActivityEvent,
        CommandEvent,
        ErrorEvent,
        InfoEvent,
        NavigationEvent,
        SystemEvent,
    ],
    Field(discriminator="kind"),
]

_EVENT_ADAPTER = TypeAdapter(AnyEvent)


def decode_event(data: Union[str, bytes]) -> IDEEvent:
    """Parse one JSON document into its concrete event variant.

    Raises pydantic.ValidationError for malformed JSON, unknown kinds and
    invalid field values.
    """
    return _EVENT_ADAPTER.validate_json(data)


def encode_event(event: IDEEvent) -> str:
    return event.model_dump_json()
