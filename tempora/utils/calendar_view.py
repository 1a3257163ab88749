"""Month/week/day groupings of expanded occurrences.

Day bucketing happens in the viewer's time zone: an occurrence that crosses
local midnight is attached to every day it touches. No attempt is made to
reconcile viewers and owners in different zones.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Dict, List, Optional, Sequence

from .constants import AppConstants
from .date_helpers import DateHelpers
from .recurrence import Occurrence

EventsByDate = Dict[date, List[Occurrence]]


class ScheduleColorAssigner:
    """Hands out colour tokens round-robin, stable per schedule"""

    def __init__(self, palette: Optional[Sequence[str]] = None):
        self.palette = list(palette or AppConstants.COLOR_TOKENS)
        self._lookup: Dict[Any, str] = {}

    def __call__(self, schedule_id: Any) -> str:
        if schedule_id not in self._lookup:
            self._lookup[schedule_id] = self.palette[len(self._lookup) % len(self.palette)]
        return self._lookup[schedule_id]


@dataclass
class CalendarDay:
    date: date
    events: List[Occurrence]
    is_current_month: bool
    is_today: bool

    @property
    def key(self) -> str:
        return self.date.isoformat()

    @property
    def weekday_label(self) -> str:
        return f"{self.date:%A}"

    @property
    def month_day_label(self) -> str:
        return f"{self.date:%a}, {self.date:%b} {self.date.day}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.key,
            "isCurrentMonth": self.is_current_month,
            "isToday": self.is_today,
            "weekdayLabel": self.weekday_label,
            "monthDayLabel": self.month_day_label,
            "events": [occurrence.to_dict() for occurrence in self.events],
        }


@dataclass
class TimelinePlacement:
    left: float
    width: float


@dataclass
class TimelineEntry:
    occurrence: Occurrence
    placement: TimelinePlacement
    lane: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.occurrence.to_dict(),
            "left": self.placement.left,
            "width": self.placement.width,
            "lane": self.lane,
        }


@dataclass
class CalendarView:
    today: date
    anchor: date
    tz: tzinfo
    events_by_date: EventsByDate
    month_matrix: List[List[CalendarDay]]
    week_days: List[CalendarDay]
    focused_day: Optional[CalendarDay]
    timeline: List[TimelineEntry]
    upcoming: List[Occurrence]
    highlighted: Optional[Occurrence]
    stats: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        focused = self.focused_day
        return {
            "today": self.today.isoformat(),
            "anchor": self.anchor.isoformat(),
            "timezone": self.timezone,
            "monthLabel": f"{self.anchor:%B} {self.anchor.year}",
            "weekRangeLabel": format_week_range_label(self.week_days),
            "month": [[day.to_dict() for day in week] for week in self.month_matrix],
            "week": [day.to_dict() for day in self.week_days],
            "focusedDay": (
                {
                    "date": focused.key,
                    "label": f"{focused.date:%A}, {focused.date:%B} {focused.date.day}",
                    "relativeLabel": DateHelpers.get_relative_day_label(
                        focused.date, self.today
                    ),
                    "timeline": [entry.to_dict() for entry in self.timeline],
                }
                if focused
                else None
            ),
            "highlighted": self.highlighted.to_dict() if self.highlighted else None,
            "upcoming": [
                {
                    **occurrence.to_dict(),
                    "relativeLabel": DateHelpers.get_relative_day_label(
                        local_day(occurrence.start, self.tz), self.today
                    ),
                }
                for occurrence in self.upcoming
            ],
            "stats": self.stats,
        }

    @property
    def timezone(self) -> str:
        return getattr(self.tz, "key", None) or str(self.tz)


def local_day(value: datetime, tz: tzinfo) -> date:
    return DateHelpers.as_utc(value).astimezone(tz).date()


def group_events_by_date(occurrences: Sequence[Occurrence], tz: tzinfo) -> EventsByDate:
    """Attach each occurrence to every local day from its start day to its end day"""
    buckets: EventsByDate = {}

    for occurrence in occurrences:
        start_day = local_day(occurrence.start, tz)
        end_day = local_day(occurrence.end, tz)
        span_days = max(0, (end_day - start_day).days)

        for offset in range(span_days + 1):
            buckets.setdefault(start_day + timedelta(days=offset), []).append(occurrence)

    for bucket in buckets.values():
        bucket.sort(key=lambda occurrence: occurrence.start)

    return buckets


def build_month_matrix(
    anchor: date, events_by_date: EventsByDate, today: Optional[date] = None
) -> List[List[CalendarDay]]:
    """Sunday-first weeks covering anchor's month, padded with adjacent-month days"""
    today = today or anchor
    start_of_month, end_of_month = DateHelpers.get_month_boundaries(
        anchor.year, anchor.month
    )
    grid_start, _ = DateHelpers.get_week_boundaries(start_of_month)
    _, grid_end = DateHelpers.get_week_boundaries(end_of_month)
    total_days = (grid_end - grid_start).days + 1

    weeks = []
    for offset in range(0, total_days, 7):
        week = []
        for day_index in range(7):
            current = grid_start + timedelta(days=offset + day_index)
            week.append(
                CalendarDay(
                    date=current,
                    events=events_by_date.get(current, []),
                    is_current_month=current.month == anchor.month,
                    is_today=current == today,
                )
            )
        weeks.append(week)

    return weeks


def build_week_days(
    anchor: date, events_by_date: EventsByDate, today: Optional[date] = None
) -> List[CalendarDay]:
    """The seven days (Sunday to Saturday) of the week containing anchor"""
    today = today or anchor
    week_start, _ = DateHelpers.get_week_boundaries(anchor)

    columns = []
    for index in range(7):
        current = week_start + timedelta(days=index)
        columns.append(
            CalendarDay(
                date=current,
                events=events_by_date.get(current, []),
                is_current_month=current.month == anchor.month,
                is_today=current == today,
            )
        )
    return columns


def resolve_focused_day(week_days: Sequence[CalendarDay]) -> Optional[CalendarDay]:
    """Today if it is in the week, else the first busy day, else the first day"""
    for day in week_days:
        if day.is_today:
            return day
    for day in week_days:
        if day.events:
            return day
    return week_days[0] if week_days else None


def get_timeline_placement(
    occurrence: Occurrence, reference_day: date, tz: tzinfo
) -> TimelinePlacement:
    """Left offset and width (percent of 24h) of an occurrence on one day"""
    day_start = datetime.combine(reference_day, time.min, tzinfo=tz)
    minutes_in_day = AppConstants.MINUTES_IN_DAY

    def minutes_since_start(value: datetime) -> float:
        return (DateHelpers.as_utc(value) - day_start).total_seconds() / 60

    def clamp(value: float, low: float, high: float) -> float:
        return min(max(value, low), high)

    start_minutes = clamp(minutes_since_start(occurrence.start), 0, minutes_in_day)
    raw_end_minutes = clamp(minutes_since_start(occurrence.end), 0, minutes_in_day)
    # Short and zero-length events stay wide enough to click
    ensured_end = min(
        max(raw_end_minutes, start_minutes + AppConstants.MIN_TIMELINE_BLOCK_MINUTES),
        minutes_in_day,
    )
    width_minutes = ensured_end - start_minutes

    return TimelinePlacement(
        left=start_minutes / minutes_in_day * 100,
        width=width_minutes / minutes_in_day * 100,
    )


def format_week_range_label(week_days: Sequence[CalendarDay]) -> str:
    if not week_days:
        return ""
    first, last = week_days[0].date, week_days[-1].date
    return f"{first:%b} {first.day} - {last:%b} {last.day}"


def build_calendar_view(
    occurrences: Sequence[Occurrence],
    now: datetime,
    tz: tzinfo,
    anchor: Optional[date] = None,
    schedule_count: int = 0,
) -> CalendarView:
    """Build every calendar grouping for one viewer"""
    today = local_day(now, tz)
    anchor = anchor or today

    events_by_date = group_events_by_date(occurrences, tz)
    month_matrix = build_month_matrix(anchor, events_by_date, today=today)
    week_days = build_week_days(anchor, events_by_date, today=today)
    focused_day = resolve_focused_day(week_days)

    timeline = []
    if focused_day:
        timeline = [
            TimelineEntry(
                occurrence=occurrence,
                placement=get_timeline_placement(occurrence, focused_day.date, tz),
                lane=index % 2,
            )
            for index, occurrence in enumerate(focused_day.events)
        ]

    now_utc = DateHelpers.as_utc(now)
    upcoming = [o for o in occurrences if DateHelpers.as_utc(o.end) >= now_utc]
    highlighted = upcoming[0] if upcoming else (occurrences[0] if occurrences else None)
    limit = AppConstants.UPCOMING_EVENTS_LIMIT
    prioritized = list(upcoming[:limit]) if upcoming else list(occurrences[:limit])

    stats = {
        "totalSchedules": schedule_count,
        "totalEvents": len(occurrences),
        "eventsThisMonth": sum(
            1 for o in occurrences if _same_month(local_day(o.start, tz), anchor)
        ),
        "activeDaysThisMonth": sum(
            1
            for week in month_matrix
            for day in week
            if day.is_current_month and day.events
        ),
        "weekEventCount": sum(len(day.events) for day in week_days),
    }

    return CalendarView(
        today=today,
        anchor=anchor,
        tz=tz,
        events_by_date=events_by_date,
        month_matrix=month_matrix,
        week_days=week_days,
        focused_day=focused_day,
        timeline=timeline,
        upcoming=prioritized,
        highlighted=highlighted,
        stats=stats,
    )


def _same_month(a: date, b: date) -> bool:
    return (a.year, a.month) == (b.year, b.month)
