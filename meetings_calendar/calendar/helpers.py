"""Entry classification and window filtering helpers - meetings_calendar."""

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Optional

from .datetime_utils import Instant, parse_instant
from .models import CalendarEntry, CalendarEvent


def is_single_entry(entry: CalendarEntry) -> bool:
    """A meeting that does not recur and does not override anything."""
    return entry.rrule is None and entry.recurrence_id is None


def is_rrule_entry(entry: CalendarEntry) -> bool:
    """The row that defines a recurring series."""
    return entry.rrule is not None and entry.recurrence_id is None


def is_rrule_override_entry(entry: CalendarEntry) -> bool:
    """A row replacing one occurrence of a series."""
    return entry.recurrence_id is not None


def is_finite_series(rrule_options: Mapping[str, str]) -> bool:
    """A rule is finite when it is bounded by COUNT or UNTIL."""
    return "COUNT" in rrule_options or "UNTIL" in rrule_options


def is_recurring_meeting(calendar: Sequence[CalendarEntry]) -> bool:
    """A meeting recurs if its calendar has several rows or any row carries a rule."""
    return len(calendar) > 1 or any(entry.rrule is not None for entry in calendar)


def create_time_filter(
    from_date: Instant, to_date: Optional[Instant] = None
) -> Callable[[CalendarEvent], bool]:
    """Build a predicate matching events that intersect [from_date, to_date].

    Event ends are exclusive: an event ending exactly at from_date does not
    match, while one still running at from_date does. Without to_date every
    event that has not ended by from_date matches.
    """
    from_dt = parse_instant(from_date)
    to_dt: Optional[datetime] = parse_instant(to_date) if to_date is not None else None

    def filter_event(event: CalendarEvent) -> bool:
        return from_dt < event.end and (to_dt is None or event.start <= to_dt)

    return filter_event
