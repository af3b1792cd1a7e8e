"""Lookup of a single event of a calendar - meetings_calendar."""

import logging
from collections.abc import Sequence
from datetime import timedelta
from typing import Optional

from ..calendar.datetime_utils import Instant, is_same_instant, parse_ical_date, parse_instant
from ..calendar.helpers import is_rrule_override_entry
from ..calendar.models import CalendarEntry, CalendarEvent
from ..core.timezone_utils import Clock, now_utc
from .calculate_events import calculate_calendar_events
from .calendar_end import get_calendar_end

logger = logging.getLogger(__name__)


def get_calendar_event(
    calendar: Sequence[CalendarEntry],
    uid: Optional[str] = None,
    recurrence_id: Optional[Instant] = None,
    clock: Clock = now_utc,
) -> Optional[CalendarEvent]:
    """Find exactly one event of a calendar.

    With a recurrence_id the occurrence with that id is returned. Otherwise
    the event running now is returned, else the next upcoming one, else the
    last one if the calendar has already ended.

    Args:
        calendar: Entries of a calendar room
        uid: Restrict the lookup to the entries of this uid
        recurrence_id: ISO instant identifying a series occurrence
        clock: Provider of the current instant

    Returns:
        The matching event or None
    """
    related_calendar = (
        list(calendar) if uid is None else [entry for entry in calendar if entry.uid == uid]
    )

    if recurrence_id is not None:
        return _find_recurrence(related_calendar, uid, recurrence_id)

    now = parse_instant(clock())

    # running or next upcoming event
    events = calculate_calendar_events(related_calendar, from_date=now, limit=1)
    if events:
        return events[0]

    # the last event, after the calendar has ended
    calendar_end = get_calendar_end(related_calendar)
    if calendar_end is not None and calendar_end < now:
        # event ends are exclusive, so look just before the end
        events = calculate_calendar_events(
            related_calendar,
            from_date=calendar_end - timedelta(milliseconds=1),
            limit=1,
        )
        if events:
            return events[0]

    return None


def _find_recurrence(
    calendar: list[CalendarEntry], uid: Optional[str], recurrence_id: Instant
) -> Optional[CalendarEvent]:
    recurrence_instant = parse_instant(recurrence_id)

    override = next(
        (
            entry
            for entry in calendar
            if is_rrule_override_entry(entry)
            and entry.uid == uid
            and parse_ical_date(entry.recurrence_id) == recurrence_instant
        ),
        None,
    )

    # an override may have moved the occurrence away from its recurrence id
    if override is not None:
        from_date = parse_ical_date(override.dtstart)
        to_date = parse_ical_date(override.dtend)
    else:
        from_date = to_date = recurrence_instant

    events = calculate_calendar_events(calendar, from_date=from_date, to_date=to_date)

    # overlapping meetings may be found as well
    match = next(
        (
            event
            for event in events
            if event.recurrence_id is not None and is_same_instant(event.recurrence_id, recurrence_instant)
        ),
        None,
    )
    if match is None:
        logger.debug("No occurrence of %s with recurrence id %s", uid, recurrence_id)
    return match
