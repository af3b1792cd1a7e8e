"""Deletion of single occurrences from a series - meetings_calendar."""

import logging
from collections.abc import Sequence
from typing import Optional

from ..calendar.datetime_utils import Instant, format_ical_date, parse_ical_date, parse_instant
from ..calendar.helpers import is_rrule_entry, is_rrule_override_entry
from ..calendar.models import CalendarEntry
from ..core.config_manager import CalendarEngineConfig
from .calendar_event import get_calendar_event

logger = logging.getLogger(__name__)


def delete_calendar_event(
    calendar: Sequence[CalendarEntry],
    uid: str,
    recurrence_id: Instant,
    config: Optional[CalendarEngineConfig] = None,
) -> list[CalendarEntry]:
    """Remove one occurrence of a series.

    An overridden occurrence is removed by dropping its override row. A plain
    occurrence is added to the EXDATE list of the series, formatted in the
    configured display timezone.

    Args:
        calendar: Entries of a calendar room
        uid: Uid of the series
        recurrence_id: ISO instant identifying the occurrence
        config: Engine configuration, defaults apply if omitted

    Returns:
        New list of entries; unchanged if the occurrence does not exist
    """
    if get_calendar_event(calendar, uid, recurrence_id) is None:
        logger.debug("No occurrence %s of %s to delete", recurrence_id, uid)
        return list(calendar)

    recurrence_instant = parse_instant(recurrence_id)

    def is_target_override(entry: CalendarEntry) -> bool:
        return (
            is_rrule_override_entry(entry)
            and entry.uid == uid
            and parse_ical_date(entry.recurrence_id) == recurrence_instant
        )

    if any(is_target_override(entry) for entry in calendar):
        return [entry for entry in calendar if not is_target_override(entry)]

    config = config or CalendarEngineConfig()
    exdate = format_ical_date(recurrence_instant, config.effective_timezone)

    return [
        entry.model_copy(update={"exdate": [*(entry.exdate or []), exdate]})
        if entry.uid == uid and is_rrule_entry(entry)
        else entry
        for entry in calendar
    ]
