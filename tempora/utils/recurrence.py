"""Expansion of stored events into concrete calendar occurrences.

An event owns one or more time slots that share a single recurrence rule.
Expansion walks every slot across the rule and keeps the occurrences that
fall inside a display window around ``today``:

    [today - 90 days, today + 365 days]

Events that repeat forever are only capped for display; nothing here is
persisted. The functions are pure and never raise: malformed slots are logged
and skipped because this path only feeds rendering.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..models.enums import RepeatFrequency
from .constants import AppConstants
from .date_helpers import DateHelpers

logger = logging.getLogger(__name__)

SlotTimes = Tuple[Optional[datetime], Optional[datetime]]


@dataclass
class BaseEvent:
    """Stored event as seen by the expander"""

    id: Any
    schedule_id: Any
    schedule_name: str
    name: str
    description: Optional[str] = None
    repeated: str = RepeatFrequency.NEVER.value
    repeat_until: Optional[datetime] = None
    time_slots: Sequence[SlotTimes] = field(default_factory=list)
    color_token: str = "primary"

    @classmethod
    def from_model(cls, event, color_token: str = "primary") -> "BaseEvent":
        schedule = event.schedule
        return cls(
            id=event.id,
            schedule_id=event.schedule_id,
            schedule_name=schedule.name if schedule else "",
            name=event.name,
            description=event.description,
            repeated=event.repeated,
            repeat_until=event.repeat_until,
            time_slots=[(slot.start, slot.end) for slot in event.time_slots],
            color_token=color_token,
        )


@dataclass
class Occurrence:
    """One concrete appearance of an event on the calendar"""

    event_id: Any
    schedule_id: Any
    schedule_name: str
    name: str
    description: Optional[str]
    repeated: str
    repeat_until: Optional[datetime]
    color_token: str
    start: datetime
    end: datetime
    slot_index: int
    occurrence_index: Optional[int] = None
    slot_count: int = 1

    @property
    def key(self) -> str:
        if self.occurrence_index is not None:
            return f"{self.event_id}-slot-{self.slot_index}-occ-{self.occurrence_index}"
        if self.slot_count == 1:
            return str(self.event_id)
        return f"{self.event_id}-slot-{self.slot_index}"

    @property
    def duration_minutes(self) -> int:
        return DateHelpers.duration_minutes(self.start, self.end)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.key,
            "eventId": self.event_id,
            "scheduleId": self.schedule_id,
            "scheduleName": self.schedule_name,
            "name": self.name,
            "description": self.description,
            "repeated": self.repeated,
            "repeatUntil": DateHelpers.to_iso(self.repeat_until),
            "colorToken": self.color_token,
            "start": DateHelpers.to_iso(self.start),
            "end": DateHelpers.to_iso(self.end),
            "durationMinutes": self.duration_minutes,
            "durationLabel": DateHelpers.format_duration(self.duration_minutes),
            "slotIndex": self.slot_index,
        }


def expand_repeating_events(
    events: Iterable[BaseEvent], today: datetime
) -> List[Occurrence]:
    """Expand every slot of every event into occurrences, sorted by start."""
    today = DateHelpers.as_utc(today)
    window_start = today - timedelta(days=AppConstants.DISPLAY_WINDOW_PAST_DAYS)
    window_end = today + timedelta(days=AppConstants.DISPLAY_WINDOW_FUTURE_DAYS)

    expanded: List[Occurrence] = []

    for event in events:
        slots = list(event.time_slots or [])

        for slot_index, slot in enumerate(slots):
            bounds = _slot_bounds(event, slot_index, slot)
            if bounds is None:
                continue
            start, end = bounds

            if getattr(event.repeated, "value", event.repeated) == RepeatFrequency.NEVER.value:
                if window_start <= start <= window_end:
                    expanded.append(
                        _build_occurrence(
                            event, slot_index, start, end, slot_count=len(slots)
                        )
                    )
                continue

            expanded.extend(
                _expand_slot(event, slot_index, start, end, window_start, window_end)
            )

    # sort() is stable, ties keep input order
    expanded.sort(key=lambda occurrence: occurrence.start)
    return expanded


def _expand_slot(
    event: BaseEvent,
    slot_index: int,
    start: datetime,
    end: datetime,
    window_start: datetime,
    window_end: datetime,
) -> List[Occurrence]:
    duration = end - start
    last_day = _repeat_last_day(event)

    # Skip whole periods that end before the window so the cap is spent inside it
    first_index = DateHelpers.periods_before(start, event.repeated, window_start)

    occurrences = []
    for index in range(first_index, first_index + AppConstants.MAX_OCCURRENCES_PER_SLOT):
        current = DateHelpers.get_next_occurrence(start, event.repeated, index)

        if current > window_end:
            break
        if last_day is not None and current.date() > last_day:
            break
        if current < window_start:
            continue

        occurrences.append(
            _build_occurrence(
                event, slot_index, current, current + duration, occurrence_index=index
            )
        )

    return occurrences


def _repeat_last_day(event: BaseEvent) -> Optional[date]:
    """Last calendar day on which a repetition may start; inclusive.

    The day is taken in UTC, not in the viewer's zone. An occurrence starting
    late on the repeat-until date in UTC is kept even when the calendar view
    buckets it on the following local day.
    """
    if event.repeat_until is None:
        return None
    if not isinstance(event.repeat_until, datetime):
        logger.warning(
            f"Ignoring malformed repeat_until {event.repeat_until!r} on event {event.id}"
        )
        return None
    return DateHelpers.as_utc(event.repeat_until).date()


def _slot_bounds(
    event: BaseEvent, slot_index: int, slot: Any
) -> Optional[Tuple[datetime, datetime]]:
    try:
        start, end = slot
    except (TypeError, ValueError):
        start = end = None

    if not isinstance(start, datetime) or not isinstance(end, datetime):
        logger.warning(
            f"Skipping malformed time slot {slot_index} on event {event.id}: {slot!r}"
        )
        return None

    start, end = DateHelpers.as_utc(start), DateHelpers.as_utc(end)
    if end < start:
        logger.warning(
            f"Skipping time slot {slot_index} on event {event.id}: ends before it starts"
        )
        return None

    return start, end


def _build_occurrence(
    event: BaseEvent,
    slot_index: int,
    start: datetime,
    end: datetime,
    occurrence_index: Optional[int] = None,
    slot_count: int = 1,
) -> Occurrence:
    return Occurrence(
        event_id=event.id,
        schedule_id=event.schedule_id,
        schedule_name=event.schedule_name,
        name=event.name,
        description=event.description,
        repeated=getattr(event.repeated, "value", event.repeated),
        repeat_until=event.repeat_until,
        color_token=event.color_token,
        start=start,
        end=end,
        slot_index=slot_index,
        occurrence_index=occurrence_index,
        slot_count=slot_count,
    )
