"""Normalization of stored series start times - meetings_calendar."""

from ..calendar.datetime_utils import format_ical_date, parse_ical_date
from ..calendar.models import CalendarEntry
from .calculate_events import calculate_calendar_events


def normalize_calendar_entry(entry: CalendarEntry) -> CalendarEntry:
    """Move dtstart/dtend of a series to its first real occurrence.

    A series stored as "every Saturday" with a Friday dtstart is snapped
    forward to the first Saturday. Both fields keep their own tzid.

    Returns:
        A new entry, or the entry itself if it has no rule or no occurrence
    """
    if entry.rrule is None:
        return entry

    events = calculate_calendar_events([entry], from_date=parse_ical_date(entry.dtstart), limit=1)
    if not events:
        return entry

    first_event = events[0]
    return entry.model_copy(
        update={
            "dtstart": format_ical_date(first_event.start, entry.dtstart.tzid),
            "dtend": format_ical_date(first_event.end, entry.dtend.tzid),
        }
    )
