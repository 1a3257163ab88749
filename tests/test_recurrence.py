"""Tests for tempora.utils.recurrence: expanding stored events into occurrences."""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from tempora.utils.constants import AppConstants
from tempora.utils.recurrence import BaseEvent, expand_repeating_events


TODAY = datetime(2024, 12, 1, tzinfo=timezone.utc)


def make_event(slots, repeated="NEVER", repeat_until=None, event_id=1, **kwargs):
    return BaseEvent(
        id=event_id,
        schedule_id=kwargs.pop("schedule_id", 10),
        schedule_name=kwargs.pop("schedule_name", "Work"),
        name=kwargs.pop("name", "Standup"),
        repeated=repeated,
        repeat_until=repeat_until,
        time_slots=slots,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Non-repeating events
# ---------------------------------------------------------------------------


class TestNeverRepeating:
    def test_one_occurrence_per_slot_inside_window(self):
        event = make_event(
            [
                (datetime(2024, 12, 2, 9), datetime(2024, 12, 2, 10)),
                (datetime(2024, 12, 3, 9), datetime(2024, 12, 3, 10)),
            ]
        )
        occurrences = expand_repeating_events([event], TODAY)

        assert len(occurrences) == 2
        assert [o.slot_index for o in occurrences] == [0, 1]
        assert occurrences[0].key == "1-slot-0"
        assert occurrences[1].key == "1-slot-1"

    def test_single_slot_key_is_event_id(self):
        event = make_event([(datetime(2024, 12, 2, 9), datetime(2024, 12, 2, 10))])
        (occurrence,) = expand_repeating_events([event], TODAY)
        assert occurrence.key == "1"
        assert occurrence.occurrence_index is None

    def test_slot_outside_window_is_dropped(self):
        too_old = datetime(2024, 12, 1) - timedelta(days=91)
        too_far = datetime(2024, 12, 1) + timedelta(days=366)
        event = make_event(
            [
                (too_old, too_old + timedelta(hours=1)),
                (too_far, too_far + timedelta(hours=1)),
            ]
        )
        assert expand_repeating_events([event], TODAY) == []

    def test_window_edges_are_inclusive(self):
        start_edge = datetime(2024, 12, 1) - timedelta(days=90)
        end_edge = datetime(2024, 12, 1) + timedelta(days=365)
        event = make_event(
            [
                (start_edge, start_edge + timedelta(hours=1)),
                (end_edge, end_edge + timedelta(hours=1)),
            ]
        )
        assert len(expand_repeating_events([event], TODAY)) == 2

    def test_naive_datetimes_are_read_as_utc(self):
        event = make_event([(datetime(2024, 12, 2, 9), datetime(2024, 12, 2, 10))])
        (occurrence,) = expand_repeating_events([event], TODAY)
        assert occurrence.start == datetime(2024, 12, 2, 9, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Repeating events
# ---------------------------------------------------------------------------


class TestRepeating:
    def test_weekly_until_is_inclusive(self):
        event = make_event(
            [(datetime(2024, 12, 2, 14), datetime(2024, 12, 2, 15))],
            repeated="WEEKLY",
            repeat_until=datetime(2024, 12, 23, 0, 0),
        )
        occurrences = expand_repeating_events([event], TODAY)

        assert [o.start.date().day for o in occurrences] == [2, 9, 16, 23]
        assert all(o.duration_minutes == 60 for o in occurrences)
        assert [o.key for o in occurrences] == [
            "1-slot-0-occ-0",
            "1-slot-0-occ-1",
            "1-slot-0-occ-2",
            "1-slot-0-occ-3",
        ]

    def test_until_day_is_compared_in_utc(self):
        # 23:30 UTC on the last Monday is already Tuesday in Paris; it is still kept
        event = make_event(
            [(datetime(2024, 12, 2, 23, 30), datetime(2024, 12, 2, 23, 45))],
            repeated="WEEKLY",
            repeat_until=datetime(2024, 12, 23, 0, 0),
        )
        occurrences = expand_repeating_events([event], TODAY)

        assert len(occurrences) == 4
        assert occurrences[-1].start == datetime(2024, 12, 23, 23, 30, tzinfo=timezone.utc)

    def test_two_slot_weekly_class(self):
        tuesday = (datetime(2024, 9, 3, 10), datetime(2024, 9, 3, 11, 30))
        thursday = (datetime(2024, 9, 5, 10), datetime(2024, 9, 5, 11, 30))
        event = make_event([tuesday, thursday], repeated="WEEKLY")

        occurrences = expand_repeating_events([event], TODAY)
        by_slot = {
            index: [o for o in occurrences if o.slot_index == index] for index in (0, 1)
        }

        assert len(by_slot[0]) == 65
        assert len(by_slot[1]) == 65
        assert {o.start.weekday() for o in by_slot[0]} == {1}
        assert {o.start.weekday() for o in by_slot[1]} == {3}
        assert by_slot[0][-1].start.date() == datetime(2025, 11, 25).date()
        assert by_slot[1][-1].start.date() == datetime(2025, 11, 27).date()
        assert all(o.duration_minutes == 90 for o in occurrences)

    def test_occurrences_are_whole_periods_from_original_start(self):
        start = datetime(2024, 10, 1, 8, tzinfo=timezone.utc)
        event = make_event(
            [(start, start + timedelta(minutes=30))],
            repeated="DAILY",
            repeat_until=datetime(2024, 12, 31),
        )
        for occurrence in expand_repeating_events([event], TODAY):
            delta = occurrence.start - start
            assert delta % timedelta(days=1) == timedelta(0)
            assert occurrence.start.date() <= datetime(2024, 12, 31).date()

    def test_nothing_after_window_end_when_until_is_later(self):
        event = make_event(
            [(datetime(2024, 12, 1, 8), datetime(2024, 12, 1, 9))],
            repeated="DAILY",
            repeat_until=datetime(2030, 1, 1),
        )
        occurrences = expand_repeating_events([event], TODAY)
        window_end = TODAY + timedelta(days=AppConstants.DISPLAY_WINDOW_FUTURE_DAYS)
        assert occurrences
        assert max(o.start for o in occurrences) <= window_end

    def test_monthly_keeps_day_of_month(self):
        event = make_event(
            [(datetime(2025, 1, 31, 10), datetime(2025, 1, 31, 11))],
            repeated="MONTHLY",
            repeat_until=datetime(2025, 4, 30),
        )
        occurrences = expand_repeating_events([event], TODAY)
        assert [o.start.date().isoformat() for o in occurrences] == [
            "2025-01-31",
            "2025-02-28",
            "2025-03-31",
            "2025-04-30",
        ]

    def test_old_forever_event_is_fast_forwarded_into_window(self):
        event = make_event(
            [(datetime(2000, 1, 1, 10), datetime(2000, 1, 1, 11))], repeated="DAILY"
        )
        occurrences = expand_repeating_events([event], TODAY)

        assert len(occurrences) == 455
        assert occurrences[0].start.date() == datetime(2024, 9, 2).date()
        assert occurrences[-1].start.date() == datetime(2025, 11, 30).date()

    def test_cap_per_slot(self, monkeypatch):
        monkeypatch.setattr(AppConstants, "MAX_OCCURRENCES_PER_SLOT", 10)
        event = make_event(
            [
                (datetime(2024, 12, 1, 8), datetime(2024, 12, 1, 9)),
                (datetime(2024, 12, 1, 18), datetime(2024, 12, 1, 19)),
            ],
            repeated="DAILY",
        )
        occurrences = expand_repeating_events([event], TODAY)
        assert len([o for o in occurrences if o.slot_index == 0]) == 10
        assert len([o for o in occurrences if o.slot_index == 1]) == 10

    def test_default_cap_bounds_forever_event(self):
        event = make_event(
            [(datetime(2024, 9, 2, 0), datetime(2024, 9, 2, 1))], repeated="DAILY"
        )
        occurrences = expand_repeating_events([event], TODAY)
        assert len(occurrences) <= AppConstants.MAX_OCCURRENCES_PER_SLOT

    def test_unknown_frequency_yields_single_occurrence(self):
        event = make_event(
            [(datetime(2024, 12, 5, 10), datetime(2024, 12, 5, 11))], repeated="YEARLY"
        )
        occurrences = expand_repeating_events([event], TODAY)
        assert len(occurrences) == 1
        assert occurrences[0].start == datetime(2024, 12, 5, 10, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Ordering and malformed input
# ---------------------------------------------------------------------------


class TestOrderingAndMalformedInput:
    def test_sorted_by_start_across_events(self):
        later = make_event(
            [(datetime(2024, 12, 5, 9), datetime(2024, 12, 5, 10))], event_id=1
        )
        earlier = make_event(
            [(datetime(2024, 12, 3, 9), datetime(2024, 12, 3, 10))], event_id=2
        )
        occurrences = expand_repeating_events([later, earlier], TODAY)
        assert [o.event_id for o in occurrences] == [2, 1]

    def test_ties_keep_input_order(self):
        slot = (datetime(2024, 12, 3, 9), datetime(2024, 12, 3, 10))
        events = [make_event([slot], event_id=i) for i in (3, 1, 2)]
        occurrences = expand_repeating_events(events, TODAY)
        assert [o.event_id for o in occurrences] == [3, 1, 2]

    def test_malformed_slots_are_skipped_with_warning(self, caplog):
        event = make_event(
            [
                (None, datetime(2024, 12, 3, 10)),
                (datetime(2024, 12, 3, 11), datetime(2024, 12, 3, 10)),
                "not-a-slot",
                (datetime(2024, 12, 4, 9), datetime(2024, 12, 4, 10)),
            ]
        )
        with caplog.at_level(logging.WARNING, logger="tempora.utils.recurrence"):
            occurrences = expand_repeating_events([event], TODAY)

        assert len(occurrences) == 1
        assert occurrences[0].slot_index == 3
        assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 3

    def test_empty_input(self):
        assert expand_repeating_events([], TODAY) == []

    def test_occurrence_carries_event_attributes(self):
        event = make_event(
            [(datetime(2024, 12, 2, 9), datetime(2024, 12, 2, 10))],
            name="Review",
            description="Quarterly",
            color_token="warning",
        )
        data = expand_repeating_events([event], TODAY)[0].to_dict()

        assert data["name"] == "Review"
        assert data["description"] == "Quarterly"
        assert data["scheduleName"] == "Work"
        assert data["colorToken"] == "warning"
        assert data["start"] == "2024-12-02T09:00:00.000Z"
        assert data["durationMinutes"] == 60
