from .user import User
from .schedule import Schedule
from .event import Event, EventTimeSlot
from .friendship import Friendship


__all__ = [
    "User",
    "Schedule",
    "Event",
    "EventTimeSlot",
    "Friendship",
]
