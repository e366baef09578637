from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer, field_validator

from models.event import Education, Position

# Stands in for "no date observed" and for events without a trigger time.
MIN_DATE = datetime.min.replace(tzinfo=timezone.utc)


class InteractionStatistics(BaseModel):
    """Aggregate snapshot over one ordered event stream. Frozen once built."""

    model_config = ConfigDict(frozen=True)

    day_first: datetime = MIN_DATE
    day_last: datetime = MIN_DATE
    num_days: int = 0
    num_month: int = 0
    num_events_detailed: Mapping[str, int] = Field(default_factory=dict, validate_default=True)   # kind -> count
    education: Education = Education.UNKNOWN
    position: Position = Position.UNKNOWN
    num_code_completion: int = 0
    num_test_runs: int = 0
    active_time: timedelta = timedelta(0)

    @field_validator("num_events_detailed", mode="after")
    @classmethod
    def freeze_counts(cls, counts: Mapping[str, int]) -> Mapping[str, int]:
        # read-only view over a private copy
        return MappingProxyType(dict(counts))

    @field_serializer("num_events_detailed")
    def dump_counts(self, counts: Mapping[str, int]) -> dict[str, int]:
        return dict(counts)

    @computed_field
    @property
    def num_events_total(self) -> int:
        return sum(self.num_events_detailed.values())

    def __hash__(self) -> int:
        return hash((
            self.day_first,
            self.day_last,
            self.num_days,
            self.num_month,
            frozenset(self.num_events_detailed.items()),
            self.education,
            self.position,
            self.num_code_completion,
            self.num_test_runs,
            self.active_time,
        ))
