"""Unit tests for meetings_calendar.domain.meeting_times."""
from datetime import datetime

import pytest

from meetings_calendar.domain.meeting_times import (
    get_force_deletion_time,
    get_meeting_end_time,
    get_meeting_start_time,
)

pytestmark = pytest.mark.unit


def _epoch_ms(iso: str) -> int:
    return int(datetime.fromisoformat(iso).timestamp()) * 1000


@pytest.fixture
def berlin_calendar(entry_factory):
    return [entry_factory(dtstart="20200102T000000", dtend="20200102T010000", tzid="Europe/Berlin")]


@pytest.fixture
def berlin_series(entry_factory):
    return [
        entry_factory(
            dtstart="20200102T000000",
            dtend="20200102T010000",
            rrule="FREQ=DAILY;COUNT=3",
            tzid="Europe/Berlin",
        )
    ]


def test_start_time_from_calendar(berlin_calendar) -> None:
    assert get_meeting_start_time("2000-01-01T00:00:00Z", berlin_calendar) == "2020-01-01T23:00:00Z"


def test_end_time_from_calendar(berlin_calendar) -> None:
    assert get_meeting_end_time(None, berlin_calendar) == "2020-01-02T00:00:00Z"


@pytest.mark.parametrize("calendar", [None, []])
def test_times_fall_back_without_calendar(calendar) -> None:
    assert get_meeting_start_time("2020-01-01T10:00:00Z", calendar) == "2020-01-01T10:00:00Z"
    assert get_meeting_end_time("2020-01-01T11:00:00Z", calendar) == "2020-01-01T11:00:00Z"


def test_times_require_value_or_calendar() -> None:
    with pytest.raises(ValueError, match="start_time and calendar"):
        get_meeting_start_time(None, None)
    with pytest.raises(ValueError, match="end_time and calendar"):
        get_meeting_end_time(None, [])


def test_force_deletion_time(berlin_calendar) -> None:
    assert get_force_deletion_time(60, berlin_calendar) == _epoch_ms("2020-01-02T02:00:00+01:00")


def test_force_deletion_time_for_series(berlin_series) -> None:
    assert get_force_deletion_time(60, berlin_series) == _epoch_ms("2020-01-04T02:00:00+01:00")


@pytest.mark.parametrize("offset", [0, -1])
def test_force_deletion_time_offset_not_below_zero(berlin_calendar, offset: int) -> None:
    assert get_force_deletion_time(offset, berlin_calendar) == _epoch_ms("2020-01-02T01:00:00+01:00")


@pytest.mark.parametrize("offset,use_calendar", [(None, True), (60, False), (None, False)])
def test_force_deletion_time_skipped_without_input(berlin_calendar, offset, use_calendar) -> None:
    assert get_force_deletion_time(offset, berlin_calendar if use_calendar else None) is None


def test_force_deletion_time_skipped_for_endless_series(entry_factory) -> None:
    assert get_force_deletion_time(60, [entry_factory(rrule="FREQ=WEEKLY")]) is None
