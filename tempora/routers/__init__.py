# Import all router modules to make them available
from . import auth
from . import schedules
from . import events
from . import calendar
from . import friends
from . import chatbot
from . import admin

__all__ = [
    "auth",
    "schedules",
    "events",
    "calendar",
    "friends",
    "chatbot",
    "admin",
]
