from datetime import datetime, timedelta, date, timezone
from typing import Any, Optional, Tuple
from dateutil.relativedelta import relativedelta
import calendar

from .constants import AppConstants

# Same values as models.enums.RepeatFrequency
DAILY = "DAILY"
WEEKLY = "WEEKLY"
MONTHLY = "MONTHLY"


def _frequency_value(frequency: Any) -> str:
    return getattr(frequency, "value", frequency)


class DateHelpers:
    @staticmethod
    def get_next_occurrence(
        start_date: datetime, frequency: Any, occurrences: int = 1
    ) -> datetime:
        """Start of the N-th repetition, always measured from the original start.

        Monthly steps are taken from the original start so a slot on the 31st
        lands on the last day of short months and comes back to the 31st
        afterwards. Unknown frequencies jump 100 years per step, which ends
        any expansion after the first occurrence.
        """
        value = _frequency_value(frequency)

        if value == DAILY:
            return start_date + timedelta(days=occurrences)
        elif value == WEEKLY:
            return start_date + timedelta(weeks=occurrences)
        elif value == MONTHLY:
            return start_date + relativedelta(months=occurrences)
        else:
            return start_date + relativedelta(
                years=AppConstants.UNKNOWN_FREQUENCY_JUMP_YEARS * occurrences
            )

    @staticmethod
    def periods_before(
        start_date: datetime, frequency: Any, target: datetime
    ) -> int:
        """Number of whole periods that can be skipped without passing target"""
        if start_date >= target:
            return 0

        value = _frequency_value(frequency)
        if value == DAILY:
            return (target - start_date) // timedelta(days=1)
        if value == WEEKLY:
            return (target - start_date) // timedelta(weeks=1)
        if value == MONTHLY:
            months = (target.year - start_date.year) * 12 + (
                target.month - start_date.month
            )
            # One month of slack for day-of-month clamping
            return max(0, months - 1)
        return 0

    @staticmethod
    def get_month_boundaries(year: int, month: int) -> Tuple[date, date]:
        """First and last calendar day of a month"""
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, 1), date(year, month, last_day)

    @staticmethod
    def get_week_boundaries(target_date: date) -> Tuple[date, date]:
        """Get start (Sunday) and end (Saturday) of the week containing target_date"""
        days_since_sunday = (target_date.weekday() + 1) % 7
        start_of_week = target_date - timedelta(days=days_since_sunday)
        return start_of_week, start_of_week + timedelta(days=6)

    @staticmethod
    def get_relative_day_label(target: date, today: date) -> str:
        """Get human-readable day distance, e.g. "Tomorrow" or "3 days ago" """
        diff = (target - today).days

        if diff == 0:
            return "Today"
        if diff == 1:
            return "Tomorrow"
        if diff == -1:
            return "Yesterday"

        distance = f"{abs(diff)} day{'s' if abs(diff) != 1 else ''}"
        return f"In {distance}" if diff > 0 else f"{distance} ago"

    @staticmethod
    def format_duration(minutes: int) -> str:
        """Format duration in minutes to human readable string"""
        if minutes < 60:
            return f"{minutes} minute{'s' if minutes != 1 else ''}"

        hours = minutes // 60
        remaining_minutes = minutes % 60

        if remaining_minutes == 0:
            return f"{hours} hour{'s' if hours != 1 else ''}"
        else:
            return f"{hours}h {remaining_minutes}m"

    @staticmethod
    def duration_minutes(start: datetime, end: datetime) -> int:
        return round((end - start).total_seconds() / 60)

    @staticmethod
    def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
        """Normalize to the storage format: naive UTC. Naive input is taken as UTC."""
        if value is None:
            return None
        if value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def as_utc(value: Optional[datetime]) -> Optional[datetime]:
        """Attach UTC to a stored naive datetime"""
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @staticmethod
    def to_iso(value: Optional[datetime]) -> Optional[str]:
        """ISO-8601 UTC with a Z suffix"""
        if value is None:
            return None
        return (
            DateHelpers.to_utc_naive(value).isoformat(timespec="milliseconds") + "Z"
        )
