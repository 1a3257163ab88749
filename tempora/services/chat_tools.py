"""Calendar operations exposed to the assistant as function-calling tools.

The model only ever supplies IDs and values. Every handler re-checks
ownership (or friendship) against the signed-in user before touching data,
and every failure is handed back to the model as ``{"error": "..."}`` so it
can correct itself or ask the user a follow-up question.
"""

from dataclasses import dataclass
from sqlalchemy.orm import Session
from pydantic import BaseModel, ValidationError
from typing import Any, Callable, Dict, List, Optional, Type, Union
import json
import logging

from ..models.user import User
from ..schemas.chat import (
    ListUserSchedulesArgs,
    ListScheduleEventsArgs,
    CreateCalendarEventArgs,
    UpdateCalendarEventArgs,
    DeleteCalendarEventArgs,
    ListFriendsArgs,
    GetFriendEventsArgs,
    CreateSharedEventArgs,
)
from ..utils.validation import ValidationHelpers
from .errors import ServiceError
from .event_service import EventService
from .friendship_service import FriendshipService
from .schedule_service import ScheduleService

logger = logging.getLogger(__name__)


class SharedEventError(ServiceError):
    """First half of a shared event was saved, the friend's copy was not"""

    pass


@dataclass
class ChatTool:
    name: str
    description: str
    args_model: Type[BaseModel]
    handler: Callable[[Any], Any]

    def definition(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.args_model.model_json_schema(),
            },
        }


def shared_description(description: Optional[str], other_party: str) -> str:
    note = f"Shared with {other_party}"
    return f"{description}\n\n{note}" if description else note


class ChatToolRouter:
    """Dispatches tool calls for one authenticated user"""

    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user
        self.schedule_service = ScheduleService(db)
        self.event_service = EventService(db)
        self.friendship_service = FriendshipService(db)

        tools = [
            ChatTool(
                "list_user_schedules",
                "List every schedule owned by the signed-in user along with a few example events.",
                ListUserSchedulesArgs,
                self.list_user_schedules,
            ),
            ChatTool(
                "list_schedule_events",
                "Fetch the events for a specific schedule, optionally within a `from` to `to` range.",
                ListScheduleEventsArgs,
                self.list_schedule_events,
            ),
            ChatTool(
                "create_calendar_event",
                "Create an event with one or more time slots on one of the user's schedules.",
                CreateCalendarEventArgs,
                self.create_calendar_event,
            ),
            ChatTool(
                "update_calendar_event",
                "Change an existing event's details or time slots, or move it to another schedule.",
                UpdateCalendarEventArgs,
                self.update_calendar_event,
            ),
            ChatTool(
                "delete_calendar_event",
                "Permanently delete one of the user's events.",
                DeleteCalendarEventArgs,
                self.delete_calendar_event,
            ),
            ChatTool(
                "list_friends",
                "List the user's confirmed friends and the schedules they own.",
                ListFriendsArgs,
                self.list_friends,
            ),
            ChatTool(
                "get_friend_events",
                "Fetch events from a confirmed friend's schedule, optionally within a `from` to `to` range.",
                GetFriendEventsArgs,
                self.get_friend_events,
            ),
            ChatTool(
                "create_shared_event",
                "Create the same event on the user's schedule and on a confirmed friend's schedule.",
                CreateSharedEventArgs,
                self.create_shared_event,
            ),
        ]
        self.tools: Dict[str, ChatTool] = {tool.name: tool for tool in tools}

    def tool_specs(self) -> List[Dict[str, Any]]:
        return [tool.definition() for tool in self.tools.values()]

    def execute(self, name: str, arguments: Union[str, Dict[str, Any], None]) -> str:
        """Run one tool call and return its JSON-encoded result or error"""
        tool = self.tools.get(name)
        if tool is None:
            logger.warning(f"Model requested unknown tool {name!r}")
            return json.dumps({"error": f"Tool {name} not found"})

        try:
            payload = self._parse_arguments(arguments)
            args = tool.args_model.model_validate(payload)
            result = tool.handler(args)
        except ValidationError as e:
            logger.warning(f"Tool {name} rejected arguments: {e.error_count()} errors")
            return json.dumps({"error": ValidationHelpers.join_error_messages(e.errors())})
        except (ServiceError, ValueError) as e:
            logger.warning(f"Tool {name} failed for user {self.user.id}: {str(e)}")
            return json.dumps({"error": str(e)})

        logger.info(f"Tool {name} succeeded for user {self.user.id}")
        return json.dumps(result)

    @staticmethod
    def _parse_arguments(arguments: Union[str, Dict[str, Any], None]) -> Dict[str, Any]:
        if arguments is None:
            return {}
        if isinstance(arguments, dict):
            return arguments
        if not arguments.strip():
            return {}
        try:
            payload = json.loads(arguments)
        except json.JSONDecodeError:
            raise ValueError("Tool arguments must be a JSON object.")
        if not isinstance(payload, dict):
            raise ValueError("Tool arguments must be a JSON object.")
        return payload

    # Handlers

    def list_user_schedules(self, args: ListUserSchedulesArgs):
        return self.schedule_service.get_schedule_summaries(self.user.id)

    def list_schedule_events(self, args: ListScheduleEventsArgs):
        events = self.event_service.list_events(
            self.user.id, args.schedule_id, args.start, args.end
        )
        return {
            "scheduleId": args.schedule_id,
            "events": [event.to_dict() for event in events],
        }

    def create_calendar_event(self, args: CreateCalendarEventArgs):
        event = self.event_service.create_event(self.user.id, args)
        return {"message": "Event created", "event": event.to_dict()}

    def update_calendar_event(self, args: UpdateCalendarEventArgs):
        event = self.event_service.update_event(args.event_id, self.user.id, args)
        return {"message": "Event updated", "event": event.to_dict()}

    def delete_calendar_event(self, args: DeleteCalendarEventArgs):
        self.event_service.delete_event(args.event_id, self.user.id)
        return {"message": "Event deleted", "eventId": args.event_id}

    def list_friends(self, args: ListFriendsArgs):
        return self.friendship_service.get_friends_with_schedules(self.user.id)

    def get_friend_events(self, args: GetFriendEventsArgs):
        events = self.friendship_service.get_friend_events(
            self.user.id, args.friend_id, args.schedule_id, args.start, args.end
        )
        return {
            "friendId": args.friend_id,
            "scheduleId": args.schedule_id,
            "events": [event.to_dict() for event in events],
        }

    def create_shared_event(self, args: CreateSharedEventArgs):
        """Two independent commits; a failed second insert leaves the first row"""
        friend = self.friendship_service.ensure_friends(self.user.id, args.friend_id)

        own_schedule = self.schedule_service.resolve_schedule(
            self.user.id, args.schedule_id
        )
        if args.friend_schedule_id is not None:
            friend_schedule = self.friendship_service.ensure_friend_schedule(
                friend.id, args.friend_schedule_id
            )
        else:
            friend_schedule = self.schedule_service.get_or_create_primary_schedule(
                friend.id
            )

        own_event = self.event_service.insert_event(
            own_schedule, args, description=shared_description(args.description, friend.name)
        )

        try:
            friend_event = self.event_service.insert_event(
                friend_schedule,
                args,
                description=shared_description(args.description, self.user.name),
            )
        except ServiceError as e:
            logger.error(
                f"Shared event {own_event.id} saved for user {self.user.id} "
                f"but the copy for user {friend.id} failed: {str(e)}",
                exc_info=True,
            )
            raise SharedEventError(
                f"The event was added to your schedule (id {own_event.id}) "
                f"but could not be added to {friend.name}'s schedule: {str(e)}"
            )

        return {
            "message": "Shared event created",
            "event": own_event.to_dict(),
            "friendEvent": friend_event.to_dict(),
        }
