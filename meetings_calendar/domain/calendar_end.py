"""End of a calendar across all of its entries - meetings_calendar."""

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Optional

from ..calendar.datetime_utils import parse_ical_date
from ..calendar.helpers import is_rrule_entry, is_rrule_override_entry, is_single_entry
from ..calendar.models import CalendarEntry
from ..calendar.rrule_set import generate_rrule_set

logger = logging.getLogger(__name__)


def get_calendar_end(calendar: Sequence[CalendarEntry]) -> Optional[datetime]:
    """Get the latest end instant of a calendar.

    Considers the end of every single entry and, for each finite series, the
    end of its last occurrence and of its latest valid override.

    Returns:
        The latest end as an aware UTC datetime, or None if the calendar is
        empty or contains a series that never ends
    """
    end_dates: list[datetime] = [
        parse_ical_date(entry.dtend) for entry in calendar if is_single_entry(entry)
    ]

    for entry in calendar:
        if not is_rrule_entry(entry):
            continue

        rrule_set = generate_rrule_set(entry)

        if not rrule_set.is_finite:
            logger.debug("Series %s has no COUNT or UNTIL; calendar never ends", entry.uid)
            return None

        last_occurrence = rrule_set.last()
        if last_occurrence is None:
            continue

        duration = parse_ical_date(entry.dtend) - parse_ical_date(entry.dtstart)
        end_dates.append(last_occurrence + duration)

        end_dates.extend(
            parse_ical_date(override.dtend)
            for override in calendar
            if is_rrule_override_entry(override)
            and override.uid == entry.uid
            and rrule_set.is_occurrence(parse_ical_date(override.recurrence_id))
        )

    return max(end_dates, default=None)
