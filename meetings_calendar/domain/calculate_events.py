"""Event calculation for calendar rooms - meetings_calendar.

Expands single entries, series and their overrides into the concrete,
ordered events that intersect a query window.
"""

import logging
from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime
from typing import Optional

from ..calendar.datetime_utils import Instant, parse_ical_date, parse_instant, to_iso_string
from ..calendar.helpers import (
    create_time_filter,
    is_rrule_entry,
    is_rrule_override_entry,
    is_single_entry,
)
from ..calendar.models import CalendarEntry, CalendarEvent
from ..calendar.rrule_set import generate_rrule_set
from ..core.exceptions import CalendarQueryError

logger = logging.getLogger(__name__)


def calculate_calendar_events(
    calendar: Sequence[CalendarEntry],
    from_date: Instant,
    to_date: Optional[Instant] = None,
    limit: Optional[int] = None,
) -> list[CalendarEvent]:
    """Calculate the events of a calendar that intersect a window.

    Args:
        calendar: All entries of a calendar room
        from_date: Inclusive window start; events still running at this
            instant are included
        to_date: Inclusive window end; may be omitted if limit is given
        limit: Maximum number of events, counted after global sorting; may
            be omitted if to_date is given

    Returns:
        Events sorted ascending by start time

    Raises:
        CalendarQueryError: If neither to_date nor limit is given, or limit is negative
        InvalidRecurrenceRuleError: If a series carries an unparsable rule
    """
    if to_date is None and limit is None:
        raise CalendarQueryError("Either limit or toDate must be defined")
    if limit is not None and limit < 0:
        raise CalendarQueryError(f"limit must not be negative, got {limit}")

    from_dt = parse_instant(from_date)
    to_dt = parse_instant(to_date) if to_date is not None else None
    filter_event = create_time_filter(from_dt, to_dt)

    overrides_by_uid: dict[str, list[CalendarEntry]] = defaultdict(list)
    for entry in calendar:
        if is_rrule_override_entry(entry):
            overrides_by_uid[entry.uid].append(entry)

    events: list[CalendarEvent] = []

    for entry in calendar:
        if not is_single_entry(entry):
            continue

        event = CalendarEvent(
            uid=entry.uid,
            start_time=to_iso_string(parse_ical_date(entry.dtstart)),
            end_time=to_iso_string(parse_ical_date(entry.dtend)),
            entries=[entry],
        )
        if filter_event(event):
            events.append(event)

    for entry in calendar:
        if not is_rrule_entry(entry):
            continue

        series_events = _calculate_series_events(
            entry, overrides_by_uid.get(entry.uid, []), from_dt, to_dt, limit
        )
        events.extend(event for event in series_events if filter_event(event))

    # Overrides can move events across series, so order and limit globally
    events.sort(key=lambda event: event.start)

    if limit is not None:
        return events[:limit]
    return events


def _calculate_series_events(
    entry: CalendarEntry,
    overrides: list[CalendarEntry],
    from_dt: datetime,
    to_dt: Optional[datetime],
    limit: Optional[int],
) -> list[CalendarEvent]:
    """Expand one series and substitute its overrides, before window filtering."""
    rrule_set = generate_rrule_set(entry)
    duration = parse_ical_date(entry.dtend) - parse_ical_date(entry.dtstart)

    # Move the search back by one duration so occurrences that are already
    # running at from_dt are found as well
    search_start = from_dt - duration

    if to_dt is not None:
        occurrences = rrule_set.between(search_start, to_dt, inclusive=True)
    else:
        # Overrides can move occurrences out of the limit, so fetch extra ones
        occurrences = rrule_set.xafter(search_start, count=limit + len(overrides), inclusive=True)

    recurrence_events: dict[str, CalendarEvent] = {}

    for occurrence in occurrences:
        recurrence_id = to_iso_string(occurrence)
        recurrence_events[recurrence_id] = CalendarEvent(
            uid=entry.uid,
            start_time=recurrence_id,
            end_time=to_iso_string(occurrence + duration),
            entries=[entry],
            recurrence_id=recurrence_id,
        )

    for override in overrides:
        recurrence_instant = parse_ical_date(override.recurrence_id)

        if not rrule_set.is_occurrence(recurrence_instant):
            logger.debug(
                "Skipping override of %s: recurrence id %s is not an occurrence of the series",
                entry.uid,
                override.recurrence_id.value,
            )
            continue

        recurrence_id = to_iso_string(recurrence_instant)
        recurrence_events[recurrence_id] = CalendarEvent(
            uid=override.uid,
            start_time=to_iso_string(parse_ical_date(override.dtstart)),
            end_time=to_iso_string(parse_ical_date(override.dtend)),
            entries=[entry, override],
            recurrence_id=recurrence_id,
        )

    logger.debug(
        "Expanded series %s: %d occurrences, %d overrides",
        entry.uid,
        len(occurrences),
        len(overrides),
    )

    return list(recurrence_events.values())
