from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator


class AdminUpdateRequest(BaseModel):
    table: str = Field(..., min_length=1)
    id: Union[int, str]
    field: str = Field(..., min_length=1)
    value: Optional[Any] = None

    @field_validator("table", "field")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return v.strip().lower()
