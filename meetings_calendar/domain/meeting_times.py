"""Meeting metadata derived from a calendar - meetings_calendar."""

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Optional

from ..calendar.datetime_utils import parse_ical_date, to_iso_string
from ..calendar.models import CalendarEntry
from .calendar_end import get_calendar_end

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def get_meeting_start_time(
    start_time: Optional[str], calendar: Optional[Sequence[CalendarEntry]]
) -> str:
    """Start of the first calendar row as ISO instant, else start_time.

    Raises:
        ValueError: If both start_time and calendar are missing
    """
    if calendar:
        return to_iso_string(parse_ical_date(calendar[0].dtstart))

    if start_time is None:
        raise ValueError("Unexpected input: Both start_time and calendar are undefined")

    return start_time


def get_meeting_end_time(
    end_time: Optional[str], calendar: Optional[Sequence[CalendarEntry]]
) -> str:
    """End of the first calendar row as ISO instant, else end_time.

    Raises:
        ValueError: If both end_time and calendar are missing
    """
    if calendar:
        return to_iso_string(parse_ical_date(calendar[0].dtend))

    if end_time is None:
        raise ValueError("Unexpected input: Both end_time and calendar are undefined")

    return end_time


def get_force_deletion_time(
    auto_deletion_offset: Optional[int], calendar: Optional[Sequence[CalendarEntry]]
) -> Optional[int]:
    """Time at which a meeting room may be removed.

    Args:
        auto_deletion_offset: Minutes after the end of the calendar; negative
            values count as 0
        calendar: Entries of the meeting

    Returns:
        Unix timestamp in milliseconds, or None if the offset or calendar is
        missing or the calendar never ends
    """
    if auto_deletion_offset is None or not calendar:
        return None

    calendar_end = get_calendar_end(calendar)
    if calendar_end is None:
        return None

    deletion_time = calendar_end + timedelta(minutes=max(0, auto_deletion_offset))
    return (deletion_time - _EPOCH) // timedelta(milliseconds=1)
