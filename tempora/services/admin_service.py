from sqlalchemy.orm import Session
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from ..models.user import User
from ..models.schedule import Schedule
from ..models.event import Event
from ..models.friendship import Friendship
from ..models.enums import UserType, FriendshipStatus, RepeatFrequency
from ..schemas.admin import AdminUpdateRequest
from ..utils.constants import AppConstants
from ..utils.date_helpers import DateHelpers
from ..utils.validation import ValidationHelpers
from .errors import ServiceError, NotFoundError, BusinessRuleViolationError

logger = logging.getLogger(__name__)


class AdminServiceError(ServiceError):
    """Base exception for admin service errors"""

    pass


class RecordNotFoundError(AdminServiceError, NotFoundError):
    """Row addressed by an admin edit does not exist"""

    pass


class InvalidAdminEditError(AdminServiceError, BusinessRuleViolationError):
    """Unknown table or field, malformed id or value"""

    pass


# Converters: raw JSON value -> column value. Each raises ValueError on bad input.


def _text(max_length: Optional[int] = None, required: bool = True) -> Callable:
    def convert(value: Any) -> Optional[str]:
        if value is None or (isinstance(value, str) and not value.strip()):
            if required:
                raise ValueError("Value cannot be empty")
            return None
        text = str(value).strip()
        if max_length and len(text) > max_length:
            raise ValueError(f"Value must be at most {max_length} characters")
        return text

    return convert


def _choice(enum_cls) -> Callable:
    allowed = [member.value for member in enum_cls]

    def convert(value: Any) -> str:
        text = str(value or "").strip().upper()
        if text not in allowed:
            raise ValueError(f"Value must be one of: {', '.join(allowed)}")
        return text

    return convert


def _email(value: Any) -> str:
    text = str(value or "").strip().lower()
    if not ValidationHelpers.validate_email(text):
        raise ValueError("Invalid email address")
    return text


def _optional_datetime(value: Any):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return DateHelpers.to_utc_naive(
        ValidationHelpers.parse_iso_datetime(value, "timestamp")
    )


EDITABLE_FIELDS: Dict[str, Dict[str, Callable]] = {
    "users": {
        "email": _email,
        "fname": _text(100, required=False),
        "lname": _text(100, required=False),
        "type": _choice(UserType),
    },
    "friendships": {
        "status": _choice(FriendshipStatus),
    },
    "schedules": {
        "name": _text(AppConstants.MAX_SCHEDULE_NAME_LENGTH),
    },
    "events": {
        "name": _text(AppConstants.MAX_EVENT_NAME_LENGTH),
        "description": _text(AppConstants.MAX_DESCRIPTION_LENGTH, required=False),
        "repeated": _choice(RepeatFrequency),
        "repeat_until": _optional_datetime,
    },
}


class AdminService:
    def __init__(self, db: Session):
        self.db = db

    def get_all_data(self) -> Dict[str, List[Dict[str, Any]]]:
        """Every table the admin panel shows; password hashes are never included"""
        return {
            "users": [user.to_dict() for user in self.db.query(User).order_by(User.id)],
            "friendships": [
                friendship.to_dict()
                for friendship in self.db.query(Friendship).order_by(
                    Friendship.user_id1, Friendship.user_id2
                )
            ],
            "schedules": [
                {**schedule.to_dict(), "userId": schedule.user_id}
                for schedule in self.db.query(Schedule).order_by(Schedule.id)
            ],
            "events": [event.to_dict() for event in self.db.query(Event).order_by(Event.id)],
        }

    def update_field(self, update: AdminUpdateRequest) -> Dict[str, Any]:
        """Edit one allow-listed column of one row"""
        fields = EDITABLE_FIELDS.get(update.table)
        if fields is None:
            raise InvalidAdminEditError("Invalid table")

        convert = fields.get(update.field)
        if convert is None:
            raise InvalidAdminEditError(
                f"Field {update.field!r} cannot be edited on {update.table}"
            )

        try:
            value = convert(update.value)
        except ValueError as e:
            raise InvalidAdminEditError(str(e))

        record = self._get_record(update.table, update.id)

        if update.table == "users" and update.field == "email":
            existing = User.find_by_email(self.db, value)
            if existing and existing.id != record.id:
                raise InvalidAdminEditError("Email already registered")

        if update.table == "events" and update.field in ("repeat_until", "repeated"):
            repeat_until = value if update.field == "repeat_until" else record.repeat_until
            repeat_error = ValidationHelpers.validate_repeat_until(
                repeat_until, record.first_start
            )
            if repeat_error:
                raise InvalidAdminEditError(repeat_error)

        try:
            setattr(record, update.field, value)
            self.db.commit()
            self.db.refresh(record)

            logger.info(
                f"Admin edit: {update.table}[{update.id}].{update.field} updated"
            )
            return record.to_dict()

        except Exception as e:
            self.db.rollback()
            raise AdminServiceError(f"Failed to update data: {str(e)}")

    def _get_record(self, table: str, record_id: Any):
        if table == "friendships":
            user_id1, user_id2 = self._parse_friendship_id(record_id)
            record = self.db.get(Friendship, (user_id1, user_id2))
        else:
            model = {"users": User, "schedules": Schedule, "events": Event}[table]
            record = self.db.get(model, self._parse_int_id(record_id))

        if record is None:
            raise RecordNotFoundError(f"No {table} row with id {record_id}")
        return record

    @staticmethod
    def _parse_int_id(record_id: Any) -> int:
        try:
            return int(str(record_id).strip())
        except ValueError:
            raise InvalidAdminEditError("Invalid id")

    @staticmethod
    def _parse_friendship_id(record_id: Any) -> Tuple[int, int]:
        parts = str(record_id).split("-")
        if len(parts) != 2 or not all(part.strip().isdigit() for part in parts):
            raise InvalidAdminEditError("Invalid friendship ID format")
        return int(parts[0]), int(parts[1])
