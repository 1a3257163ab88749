from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..utils.date_helpers import DateHelpers


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys while keeping snake_case attributes"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def utc_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """Field validator helper: every incoming timestamp becomes naive UTC"""
    return DateHelpers.to_utc_naive(value)

