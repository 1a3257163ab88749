import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from datetime import datetime

from .constants import AppConstants


class ValidationHelpers:
    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format"""
        pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
        return re.match(pattern, email or "") is not None

    @staticmethod
    def validate_password(password: str) -> Dict[str, Any]:
        """Validate password strength"""
        if not password or len(password) < AppConstants.MIN_PASSWORD_LENGTH:
            return {
                "valid": False,
                "error": f"Password must be at least {AppConstants.MIN_PASSWORD_LENGTH} characters long",
            }
        return {"valid": True}

    @staticmethod
    def parse_iso_datetime(value: Any, label: str) -> datetime:
        """Parse an ISO-8601 timestamp ("Z" suffix or explicit offset accepted)"""
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Invalid {label}. Use an ISO-8601 timestamp.")

        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid {label}. Use an ISO-8601 timestamp.")

    @staticmethod
    def validate_time_slots(slots: Sequence[Tuple[datetime, datetime]]) -> List[str]:
        """Check every slot ends after it starts. Returns error messages (empty when valid)."""
        errors = []

        if not slots:
            errors.append("At least one time slot is required.")
            return errors

        if len(slots) > AppConstants.MAX_TIME_SLOTS:
            errors.append(
                f"An event can have at most {AppConstants.MAX_TIME_SLOTS} time slots."
            )

        for index, (start, end) in enumerate(slots):
            if end <= start:
                errors.append(
                    f"Time slot {index + 1}: end time must be after start time."
                )

        return errors

    @staticmethod
    def validate_repeat_until(
        repeat_until: Optional[datetime], first_start: Optional[datetime]
    ) -> Optional[str]:
        """repeat_until, when set, must come after the first slot's start"""
        if repeat_until is None or first_start is None:
            return None
        if repeat_until <= first_start:
            return "repeatUntil must be after the first time slot."
        return None

    @staticmethod
    def validate_time_range(
        start: Optional[datetime], end: Optional[datetime]
    ) -> Optional[str]:
        if start and end and start > end:
            return "The `from` time must be earlier than the `to` time."
        return None

    @staticmethod
    def join_error_messages(errors: Iterable[Dict[str, Any]]) -> str:
        """Flatten pydantic error dicts into one ", "-separated message"""
        messages = []
        for error in errors:
            message = str(error.get("msg", "Invalid value"))
            if message.startswith("Value error, "):
                message = message[len("Value error, ") :]

            if error.get("type") == "missing":
                location = [
                    str(part) for part in error.get("loc", ()) if part not in ("body", "query")
                ]
                field = location[-1] if location else "value"
                message = f"{field} is required"

            messages.append(message)
        return ", ".join(messages)
