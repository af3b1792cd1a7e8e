"""Shared fixtures for meetings_calendar tests."""

from collections.abc import Callable, Generator
from datetime import UTC, datetime
from typing import Any, Optional

import pytest

from meetings_calendar.calendar.models import CalendarEntry, DateTimeEntry
from meetings_calendar.core.timezone_utils import TEST_TIME_ENV

EntryFactory = Callable[..., CalendarEntry]


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")


def make_entry(
    uid: str = "entry-0",
    dtstart: str = "20200109T100000",
    dtend: str = "20200109T110000",
    rrule: Optional[str] = None,
    exdate: Optional[list[str]] = None,
    recurrence_id: Optional[str] = None,
    tzid: str = "UTC",
) -> CalendarEntry:
    """Build a CalendarEntry whose date-times all share one tzid.

    Values use the compact iCal form, e.g. "20200109T100000".
    """
    return CalendarEntry(
        uid=uid,
        dtstart=DateTimeEntry(tzid=tzid, value=dtstart),
        dtend=DateTimeEntry(tzid=tzid, value=dtend),
        rrule=rrule,
        exdate=[DateTimeEntry(tzid=tzid, value=value) for value in exdate] if exdate is not None else None,
        recurrence_id=DateTimeEntry(tzid=tzid, value=recurrence_id) if recurrence_id is not None else None,
    )


@pytest.fixture
def entry_factory() -> EntryFactory:
    """Return the make_entry builder."""
    return make_entry


@pytest.fixture
def make_calendar() -> Callable[..., list[CalendarEntry]]:
    """Return a builder that turns keyword dicts into a calendar list."""

    def builder(*entries: dict[str, Any]) -> list[CalendarEntry]:
        return [make_entry(**entry) for entry in entries]

    return builder


@pytest.fixture
def fixed_now() -> datetime:
    """The instant returned by fixed_clock."""
    return datetime(2020, 1, 10, 12, 0, tzinfo=UTC)


@pytest.fixture
def fixed_clock(fixed_now: datetime) -> Callable[[], datetime]:
    """A Clock returning fixed_now."""
    return lambda: fixed_now


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, Any, None]:
    """Keep time and configuration overrides from leaking between tests."""
    for name in (
        TEST_TIME_ENV,
        "MEETINGS_CALENDAR_TIMEZONE",
        "MEETINGS_CALENDAR_FIRST_DAY_OF_WEEK",
        "MEETINGS_CALENDAR_LOG_LEVEL",
        "MEETINGS_CALENDAR_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
