"""DateTime codec for calendar entries - meetings_calendar.

Converts between the wire format of a DateTimeEntry ({tzid, value} with a
timezone-less YYYYMMDDTHHMMSS value) and absolute instants. Instants are
aware datetimes normalized to UTC throughout the engine, so timedelta
arithmetic on them is always absolute rather than wall-clock.
"""

import logging
from datetime import UTC, datetime
from typing import Union

from dateutil import parser as date_parser

from ..core.exceptions import InvalidDateTimeEntryError
from ..core.timezone_utils import resolve_timezone
from .models import DateTimeEntry

logger = logging.getLogger(__name__)

ICAL_DATE_FORMAT = "%Y%m%dT%H%M%S"

Instant = Union[datetime, str]


def ensure_timezone_aware(dt: datetime) -> datetime:
    """Return dt as an aware UTC datetime, treating naive values as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_instant(value: Instant) -> datetime:
    """Parse an ISO-8601 string or datetime into an aware UTC datetime.

    Raises:
        InvalidDateTimeEntryError: If a string cannot be parsed
    """
    if isinstance(value, datetime):
        return ensure_timezone_aware(value)

    try:
        parsed = date_parser.isoparse(value)
    except (TypeError, ValueError) as e:
        raise InvalidDateTimeEntryError(f"Invalid ISO instant: {value!r}") from e
    return ensure_timezone_aware(parsed)


def parse_ical_date(entry: DateTimeEntry) -> datetime:
    """Interpret a DateTimeEntry as wall-clock time in its zone and return the instant.

    Nonexistent local times (spring forward gap) resolve with the offset in
    effect before the transition, which moves them forward by the gap.
    Ambiguous local times (fall back) resolve to the earlier instant.

    Raises:
        InvalidDateTimeEntryError: If the value is not YYYYMMDDTHHMMSS
        InvalidTimezoneError: If the tzid is unknown
    """
    zone = resolve_timezone(entry.tzid)
    try:
        local = datetime.strptime(entry.value, ICAL_DATE_FORMAT)
    except ValueError as e:
        raise InvalidDateTimeEntryError(f"Invalid iCal date value: {entry.value!r}") from e

    return local.replace(tzinfo=zone).astimezone(UTC)


def format_ical_date(instant: Instant, target_tzid: str = "UTC") -> DateTimeEntry:
    """Project an instant into the wall-clock time of target_tzid.

    Args:
        instant: Aware datetime or ISO string
        target_tzid: Timezone for the resulting entry

    Returns:
        New DateTimeEntry carrying target_tzid
    """
    zone = resolve_timezone(target_tzid)
    local = parse_instant(instant).astimezone(zone)
    return DateTimeEntry(tzid=target_tzid, value=local.strftime(ICAL_DATE_FORMAT))


def to_iso_string(instant: Instant) -> str:
    """Format an instant as a UTC ISO string, e.g. 2020-01-09T10:00:00Z.

    Milliseconds are only included when non-zero.
    """
    dt = parse_instant(instant)
    timespec = "milliseconds" if dt.microsecond else "seconds"
    return dt.isoformat(timespec=timespec).replace("+00:00", "Z")


def is_same_instant(a: Instant, b: Instant) -> bool:
    """Compare two instants independent of their representation."""
    return parse_instant(a) == parse_instant(b)
