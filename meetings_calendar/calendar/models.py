"""Data models for calendar entries and computed events - meetings_calendar.

The wire representation (as stored in room state) uses camelCase field names,
e.g. ``recurrenceId`` and ``startTime``. Models accept both the wire names and
the Python attribute names and serialize back to the wire names.
"""

from datetime import UTC, datetime
from typing import Any, Optional

from dateutil.parser import isoparse
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

ICAL_DATE_PATTERN = r"^\d{8}T\d{6}$"


def _parse_utc(value: str) -> datetime:
    """Parse an ISO instant of a computed event, treating naive values as UTC."""
    parsed = isoparse(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


class DateTimeEntry(BaseModel):
    """A timezone-less date-time value interpreted in a named timezone.

    Corresponds to the iCalendar DATE-TIME type with a TZID parameter.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    tzid: str = Field(..., description="Timezone the value is interpreted in, e.g. Europe/Berlin")
    value: str = Field(
        ...,
        pattern=ICAL_DATE_PATTERN,
        description="Local date and time in the format YYYYMMDDTHHMMSS, e.g. 20220101T100000",
    )


class CalendarEntry(BaseModel):
    """One row of a calendar: a single meeting, a series or an override.

    The kind is decided by field presence:
    - single: neither rrule nor recurrence_id
    - series: rrule without recurrence_id (at most one per uid)
    - override: recurrence_id, replacing the series occurrence starting at that instant
    """

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    uid: str = Field(..., description="Groups all rows of one series or single event (UID)")
    dtstart: DateTimeEntry = Field(..., description="Inclusive start of the first occurrence (DTSTART)")
    dtend: DateTimeEntry = Field(..., description="Exclusive end of the first occurrence (DTEND)")
    rrule: Optional[str] = Field(default=None, description="Recurrence rule in iCalendar format (RRULE)")
    exdate: Optional[list[DateTimeEntry]] = Field(
        default=None, description="Occurrences excluded from the series (EXDATE)"
    )
    recurrence_id: Optional[DateTimeEntry] = Field(
        default=None, description="Start of the series occurrence this row replaces (RECURRENCE-ID)"
    )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire representation, omitting absent fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CalendarEvent(BaseModel):
    """A concrete occurrence computed from one or two calendar entries.

    Computed per query and never persisted.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    uid: str
    start_time: str = Field(..., description="Inclusive start as ISO instant")
    end_time: str = Field(..., description="Exclusive end as ISO instant")
    entries: list[CalendarEntry] = Field(
        ...,
        description=(
            "Entries used for this event. With two entries the event is an "
            "overridden occurrence: the series comes first, the override last."
        ),
    )
    recurrence_id: Optional[str] = Field(
        default=None,
        description="ISO instant identifying the occurrence; only set for series events",
    )

    @property
    def start(self) -> datetime:
        """Start as an aware UTC datetime."""
        return _parse_utc(self.start_time)

    @property
    def end(self) -> datetime:
        """End as an aware UTC datetime."""
        return _parse_utc(self.end_time)

    @property
    def is_override(self) -> bool:
        """Whether this occurrence diverges from its series."""
        return len(self.entries) > 1

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire representation, omitting absent fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


_calendar_adapter = TypeAdapter(list[CalendarEntry])


def parse_calendar(data: Any) -> list[CalendarEntry]:
    """Validate plain calendar data (e.g. loaded from JSON) into CalendarEntry models.

    Raises:
        pydantic.ValidationError: If the data does not have the calendar shape
    """
    return _calendar_adapter.validate_python(data)
