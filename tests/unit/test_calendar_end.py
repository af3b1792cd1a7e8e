"""Unit tests for meetings_calendar.domain.calendar_end.get_calendar_end."""
from datetime import UTC, datetime

import pytest

from meetings_calendar.domain.calendar_end import get_calendar_end

pytestmark = pytest.mark.unit


def test_empty_calendar_has_no_end() -> None:
    assert get_calendar_end([]) is None


def test_single_event(entry_factory) -> None:
    assert get_calendar_end([entry_factory()]) == datetime(2020, 1, 9, 11, 0, tzinfo=UTC)


def test_infinite_series_never_ends(entry_factory) -> None:
    """One unbounded series hides every finite contribution."""
    calendar = [
        entry_factory(dtstart="20300109T100000", dtend="20300109T110000"),
        entry_factory(uid="entry-1", rrule="FREQ=DAILY"),
    ]

    assert get_calendar_end(calendar) is None


def test_finite_series_ends_with_last_occurrence(entry_factory) -> None:
    calendar = [entry_factory(rrule="FREQ=DAILY;COUNT=3")]

    assert get_calendar_end(calendar) == datetime(2020, 1, 11, 11, 0, tzinfo=UTC)


def test_series_bounded_by_until(entry_factory) -> None:
    calendar = [entry_factory(rrule="FREQ=WEEKLY;UNTIL=20200201T000000Z")]

    assert get_calendar_end(calendar) == datetime(2020, 1, 30, 11, 0, tzinfo=UTC)


def test_override_moved_after_last_occurrence_extends_end(entry_factory) -> None:
    calendar = [
        entry_factory(rrule="FREQ=DAILY;COUNT=3"),
        entry_factory(dtstart="20200131T150000", dtend="20200131T163000", recurrence_id="20200111T100000"),
    ]

    assert get_calendar_end(calendar) == datetime(2020, 1, 31, 16, 30, tzinfo=UTC)


def test_override_with_unknown_recurrence_id_is_ignored(entry_factory) -> None:
    calendar = [
        entry_factory(rrule="FREQ=DAILY;COUNT=3"),
        entry_factory(dtstart="20200131T150000", dtend="20200131T163000", recurrence_id="20200128T100000"),
    ]

    assert get_calendar_end(calendar) == datetime(2020, 1, 11, 11, 0, tzinfo=UTC)


def test_series_without_occurrences_contributes_nothing(entry_factory) -> None:
    calendar = [entry_factory(rrule="FREQ=DAILY;COUNT=1", exdate=["20200109T100000"])]

    assert get_calendar_end(calendar) is None


def test_latest_end_across_entries(entry_factory) -> None:
    calendar = [
        entry_factory(uid="single", dtstart="20200301T100000", dtend="20200301T120000"),
        entry_factory(uid="series", rrule="FREQ=DAILY;COUNT=2"),
    ]

    assert get_calendar_end(calendar) == datetime(2020, 3, 1, 12, 0, tzinfo=UTC)


def test_end_of_series_in_local_zone(entry_factory) -> None:
    calendar = [
        entry_factory(
            dtstart="20200327T100000",
            dtend="20200327T110000",
            rrule="FREQ=DAILY;COUNT=3",
            tzid="Europe/Berlin",
        )
    ]

    # 29th is already summer time
    assert get_calendar_end(calendar) == datetime(2020, 3, 29, 9, 0, tzinfo=UTC)
