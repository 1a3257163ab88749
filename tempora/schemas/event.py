from datetime import datetime
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..models.enums import RepeatFrequency
from ..utils.constants import AppConstants
from ..utils.validation import ValidationHelpers
from .common import CamelModel, utc_datetime


class TimeSlot(CamelModel):
    """One start/end pair; naive values are read as UTC"""

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def normalize(cls, v: datetime) -> datetime:
        return utc_datetime(v)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end <= self.start:
            raise ValueError("Event end time must be after the start time.")
        return self


class EventCreate(CamelModel):
    schedule_id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=AppConstants.MAX_EVENT_NAME_LENGTH)
    description: Optional[str] = Field(
        None, max_length=AppConstants.MAX_DESCRIPTION_LENGTH
    )
    time_slots: List[TimeSlot] = Field(
        ..., min_length=1, max_length=AppConstants.MAX_TIME_SLOTS
    )
    repeated: RepeatFrequency = RepeatFrequency.NEVER
    repeat_until: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Event name is required.")
        return v

    @field_validator("repeat_until")
    @classmethod
    def normalize_repeat_until(cls, v: Optional[datetime]) -> Optional[datetime]:
        return utc_datetime(v)

    @model_validator(mode="after")
    def repeat_until_after_first_slot(self):
        error = ValidationHelpers.validate_repeat_until(
            self.repeat_until, self.time_slots[0].start if self.time_slots else None
        )
        if error:
            raise ValueError(error)
        return self


class EventUpdate(CamelModel):
    """Partial update; omitted fields keep their stored value"""

    _identity_fields: ClassVar[FrozenSet[str]] = frozenset()

    name: Optional[str] = Field(
        None, min_length=1, max_length=AppConstants.MAX_EVENT_NAME_LENGTH
    )
    description: Optional[str] = Field(
        None, max_length=AppConstants.MAX_DESCRIPTION_LENGTH
    )
    time_slots: Optional[List[TimeSlot]] = Field(
        None, min_length=1, max_length=AppConstants.MAX_TIME_SLOTS
    )
    repeated: Optional[RepeatFrequency] = None
    repeat_until: Optional[datetime] = None
    target_schedule_id: Optional[int] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Event name is required.")
        return v

    @field_validator("repeat_until")
    @classmethod
    def normalize_repeat_until(cls, v: Optional[datetime]) -> Optional[datetime]:
        return utc_datetime(v)

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.changes:
            raise ValueError("Provide at least one field to update.")
        for required in ("name", "time_slots", "repeated"):
            if required in self.changes and getattr(self, required) is None:
                raise ValueError(f"{to_camel(required)} cannot be empty.")
        return self

    @property
    def changes(self) -> Dict[str, Any]:
        """Explicitly provided fields, including ones set to null"""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set - self._identity_fields
        }


class EventRangeQuery(CamelModel):
    start: Optional[datetime] = Field(None, alias="from")
    end: Optional[datetime] = Field(None, alias="to")

    @field_validator("start", "end")
    @classmethod
    def normalize(cls, v: Optional[datetime]) -> Optional[datetime]:
        return utc_datetime(v)

    @model_validator(mode="after")
    def ordered(self):
        error = ValidationHelpers.validate_time_range(self.start, self.end)
        if error:
            raise ValueError(error)
        return self

