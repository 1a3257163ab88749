from pydantic import BaseModel, Field, field_validator

from ..utils.constants import AppConstants


class ScheduleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=AppConstants.MAX_SCHEDULE_NAME_LENGTH)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Schedule name is required")
        return v
