from sqlalchemy.orm import Session
from datetime import datetime
from typing import List, Dict, Any, Optional
import logging

from ..models.schedule import Schedule
from ..schemas.schedule import ScheduleCreate
from ..utils.constants import AppConstants
from ..utils.date_helpers import DateHelpers
from .errors import ServiceError, PermissionDeniedError

logger = logging.getLogger(__name__)


class ScheduleServiceError(ServiceError):
    """Base exception for schedule service errors"""

    pass


class SchedulePermissionError(ScheduleServiceError, PermissionDeniedError):
    """Schedule exists but belongs to someone else (or does not exist)"""

    pass


class ScheduleService:
    def __init__(self, db: Session):
        self.db = db

    def list_user_schedules(self, user_id: int) -> List[Schedule]:
        return (
            self.db.query(Schedule)
            .filter(Schedule.user_id == user_id)
            .order_by(Schedule.id)
            .all()
        )

    def get_schedule_summaries(self, user_id: int) -> List[Dict[str, Any]]:
        """Schedules with event counts and a few sample events, oldest first"""
        summaries = []
        for schedule in self.list_user_schedules(user_id):
            events = sorted(
                schedule.events,
                key=lambda event: (event.first_start is None, event.first_start or datetime.min),
            )
            summaries.append(
                {
                    "id": schedule.id,
                    "name": schedule.name,
                    "createdAt": DateHelpers.to_iso(schedule.created_at),
                    "eventCount": len(schedule.events),
                    "sampleEvents": [
                        event.to_dict()
                        for event in events[: AppConstants.SAMPLE_EVENTS_PER_SCHEDULE]
                    ],
                }
            )
        return summaries

    def ensure_schedule_ownership(self, schedule_id: int, user_id: int) -> Schedule:
        """Return the schedule if the user owns it"""
        schedule = (
            self.db.query(Schedule)
            .filter(Schedule.id == schedule_id, Schedule.user_id == user_id)
            .first()
        )
        if not schedule:
            raise SchedulePermissionError(
                "No schedule with that ID belongs to this user."
            )
        return schedule

    def get_or_create_primary_schedule(self, user_id: int) -> Schedule:
        """The user's oldest schedule, created on first use"""
        schedule = (
            self.db.query(Schedule)
            .filter(Schedule.user_id == user_id)
            .order_by(Schedule.id)
            .first()
        )
        if schedule:
            return schedule

        logger.info(f"Creating primary schedule for user {user_id}")
        return self.create_schedule(
            user_id, ScheduleCreate(name=AppConstants.DEFAULT_SCHEDULE_NAME)
        )

    def resolve_schedule(self, user_id: int, schedule_id: Optional[int]) -> Schedule:
        if schedule_id is None:
            return self.get_or_create_primary_schedule(user_id)
        return self.ensure_schedule_ownership(schedule_id, user_id)

    def create_schedule(self, user_id: int, schedule_data: ScheduleCreate) -> Schedule:
        try:
            schedule = Schedule(name=schedule_data.name, user_id=user_id)
            self.db.add(schedule)
            self.db.commit()
            self.db.refresh(schedule)
            return schedule

        except Exception as e:
            self.db.rollback()
            raise ScheduleServiceError(f"Failed to create schedule: {str(e)}")
