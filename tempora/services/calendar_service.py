from sqlalchemy.orm import Session
from datetime import date, datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

from ..config import get_settings
from ..utils.calendar_view import (
    CalendarView,
    ScheduleColorAssigner,
    build_calendar_view,
)
from ..utils.recurrence import BaseEvent, expand_repeating_events
from .errors import BusinessRuleViolationError
from .schedule_service import ScheduleService

logger = logging.getLogger(__name__)


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """IANA zone by name; falls back to the configured default"""
    name = (name or get_settings().default_timezone).strip()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise BusinessRuleViolationError(f"Unknown time zone: {name}")


class CalendarService:
    def __init__(self, db: Session):
        self.db = db
        self.schedule_service = ScheduleService(db)

    def get_calendar_view(
        self,
        user_id: int,
        anchor: Optional[date] = None,
        tz_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CalendarView:
        """Expand the user's events and group them for the calendar page"""
        tz = resolve_timezone(tz_name)
        now = now or datetime.now(timezone.utc)

        schedules = self.schedule_service.list_user_schedules(user_id)
        color_for = ScheduleColorAssigner()
        base_events = [
            BaseEvent.from_model(event, color_for(schedule.id))
            for schedule in schedules
            for event in schedule.events
        ]

        occurrences = expand_repeating_events(base_events, now)
        logger.debug(
            f"Expanded {len(base_events)} events into {len(occurrences)} occurrences for user {user_id}"
        )

        return build_calendar_view(
            occurrences, now, tz, anchor=anchor, schedule_count=len(schedules)
        )
