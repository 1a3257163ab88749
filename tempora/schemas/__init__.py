from .auth import SignupRequest, LoginRequest
from .schedule import ScheduleCreate
from .event import TimeSlot, EventCreate, EventUpdate, EventRangeQuery
from .friendship import FriendRequestCreate, FriendRequestRespond
from .chat import ChatMessage, ChatRequest
from .admin import AdminUpdateRequest

__all__ = [
    "SignupRequest",
    "LoginRequest",
    "ScheduleCreate",
    "TimeSlot",
    "EventCreate",
    "EventUpdate",
    "EventRangeQuery",
    "FriendRequestCreate",
    "FriendRequestRespond",
    "ChatMessage",
    "ChatRequest",
    "AdminUpdateRequest",
]
