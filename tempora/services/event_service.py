from sqlalchemy.orm import Session
from sqlalchemy import and_
from typing import List, Optional, Sequence, Tuple
from datetime import datetime
import logging

from ..models.event import Event, EventTimeSlot
from ..models.schedule import Schedule
from ..schemas.event import EventCreate, EventUpdate
from ..utils.validation import ValidationHelpers
from .errors import ServiceError, NotFoundError, BusinessRuleViolationError
from .schedule_service import ScheduleService

logger = logging.getLogger(__name__)

SlotPair = Tuple[datetime, datetime]


class EventServiceError(ServiceError):
    """Base exception for event service errors"""

    pass


class EventNotFoundError(EventServiceError, NotFoundError):
    """Event not found, or not owned by the caller"""

    pass


class InvalidEventError(EventServiceError, BusinessRuleViolationError):
    """Event violates a time slot or recurrence invariant"""

    pass


class EventService:
    def __init__(self, db: Session):
        self.db = db
        self.schedule_service = ScheduleService(db)

    def list_events(
        self,
        user_id: int,
        schedule_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Event]:
        """Events on the user's schedules with any slot overlapping [start, end]"""
        range_error = ValidationHelpers.validate_time_range(start, end)
        if range_error:
            raise InvalidEventError(range_error)

        query = (
            self.db.query(Event)
            .join(Schedule, Event.schedule_id == Schedule.id)
            .filter(Schedule.user_id == user_id)
        )

        if schedule_id is not None:
            self.schedule_service.ensure_schedule_ownership(schedule_id, user_id)
            query = query.filter(Event.schedule_id == schedule_id)

        slot_conditions = []
        if start is not None:
            slot_conditions.append(EventTimeSlot.end >= start)
        if end is not None:
            slot_conditions.append(EventTimeSlot.start <= end)
        if slot_conditions:
            query = query.filter(Event.time_slots.any(and_(*slot_conditions)))

        return query.order_by(Event.id).all()

    def get_owned_event(self, event_id: int, user_id: int) -> Event:
        event = (
            self.db.query(Event)
            .join(Schedule, Event.schedule_id == Schedule.id)
            .filter(Event.id == event_id, Schedule.user_id == user_id)
            .first()
        )
        if not event:
            raise EventNotFoundError("No event with that ID belongs to this user.")
        return event

    def create_event(self, user_id: int, event_data: EventCreate) -> Event:
        """Create an event on one of the user's schedules (primary when unset)"""
        schedule = self.schedule_service.resolve_schedule(
            user_id, event_data.schedule_id
        )
        return self.insert_event(schedule, event_data)

    def insert_event(
        self,
        schedule: Schedule,
        event_data: EventCreate,
        description: Optional[str] = None,
    ) -> Event:
        """Insert and commit an event on a schedule the caller already vetted"""
        slots = [(slot.start, slot.end) for slot in event_data.time_slots]
        self._validate_event(slots, event_data.repeat_until)

        try:
            event = Event(
                schedule_id=schedule.id,
                name=event_data.name,
                description=(
                    description if description is not None else event_data.description
                ),
                repeated=event_data.repeated.value,
                repeat_until=event_data.repeat_until,
                time_slots=self._build_slots(slots),
            )

            self.db.add(event)
            self.db.commit()
            self.db.refresh(event)
            return event

        except Exception as e:
            self.db.rollback()
            raise EventServiceError(f"Failed to create event: {str(e)}")

    def update_event(self, event_id: int, user_id: int, updates: EventUpdate) -> Event:
        """Apply a partial update; invariants are checked on the merged values"""
        event = self.get_owned_event(event_id, user_id)
        changes = updates.changes

        target_schedule_id = changes.get("target_schedule_id")
        if target_schedule_id is not None:
            self.schedule_service.ensure_schedule_ownership(target_schedule_id, user_id)

        if "time_slots" in changes:
            slots = [(slot.start, slot.end) for slot in changes["time_slots"]]
        else:
            slots = [(slot.start, slot.end) for slot in event.time_slots]
        repeat_until = changes.get("repeat_until", event.repeat_until)
        self._validate_event(slots, repeat_until)

        try:
            if "name" in changes:
                event.name = changes["name"]
            if "description" in changes:
                event.description = changes["description"]
            if "repeated" in changes:
                event.repeated = changes["repeated"].value
            if "repeat_until" in changes:
                event.repeat_until = repeat_until
            if "time_slots" in changes:
                event.time_slots = self._build_slots(slots)
            if target_schedule_id is not None:
                event.schedule_id = target_schedule_id

            self.db.commit()
            self.db.refresh(event)
            return event

        except Exception as e:
            self.db.rollback()
            raise EventServiceError(f"Failed to update event: {str(e)}")

    def delete_event(self, event_id: int, user_id: int) -> None:
        event = self.get_owned_event(event_id, user_id)

        try:
            self.db.delete(event)
            self.db.commit()

        except Exception as e:
            self.db.rollback()
            raise EventServiceError(f"Failed to delete event: {str(e)}")

    @staticmethod
    def _validate_event(slots: Sequence[SlotPair], repeat_until: Optional[datetime]):
        errors = ValidationHelpers.validate_time_slots(slots)
        if errors:
            raise InvalidEventError(" ".join(errors))

        repeat_error = ValidationHelpers.validate_repeat_until(repeat_until, slots[0][0])
        if repeat_error:
            raise InvalidEventError(repeat_error)

    @staticmethod
    def _build_slots(slots: Sequence[SlotPair]) -> List[EventTimeSlot]:
        return [
            EventTimeSlot(position=position, start=start, end=end)
            for position, (start, end) in enumerate(slots)
        ]
