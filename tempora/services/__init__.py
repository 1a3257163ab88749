from .admin_service import AdminService
from .calendar_service import CalendarService
from .chat_service import ChatService
from .chat_tools import ChatToolRouter
from .event_service import EventService
from .friendship_service import FriendshipService
from .schedule_service import ScheduleService
from .user_service import UserService

__all__ = [
    "AdminService",
    "CalendarService",
    "ChatService",
    "ChatToolRouter",
    "EventService",
    "FriendshipService",
    "ScheduleService",
    "UserService",
]
