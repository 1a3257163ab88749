from typing import ClassVar, FrozenSet, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .common import CamelModel
from .event import EventCreate, EventRangeQuery, EventUpdate


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message content cannot be empty")
        return v


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1)


# Tool argument models. Their JSON schema (camelCase) is what the model sees.


class ListUserSchedulesArgs(CamelModel):
    """List every schedule owned by the signed-in user"""


class ListScheduleEventsArgs(EventRangeQuery):
    """List events on one of the user's schedules, optionally within [from, to]"""

    schedule_id: int


class CreateCalendarEventArgs(EventCreate):
    """Create an event; omit scheduleId to use the user's primary schedule"""


class UpdateCalendarEventArgs(EventUpdate):
    """Update an existing event; only the provided fields change"""

    _identity_fields: ClassVar[FrozenSet[str]] = frozenset({"event_id"})

    event_id: int


class DeleteCalendarEventArgs(CamelModel):
    """Delete one of the user's events"""

    event_id: int


class ListFriendsArgs(CamelModel):
    """List accepted friends and their schedules"""


class GetFriendEventsArgs(EventRangeQuery):
    """List events on a confirmed friend's schedule"""

    friend_id: int
    schedule_id: int


class CreateSharedEventArgs(EventCreate):
    """Create the same event on the user's and a confirmed friend's schedules"""

    friend_id: int
    friend_schedule_id: Optional[int] = None
