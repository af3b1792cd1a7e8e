"""Insertion of new or replacement entries into a calendar - meetings_calendar."""

from collections.abc import Sequence

from ..calendar.datetime_utils import parse_ical_date
from ..calendar.helpers import is_rrule_override_entry
from ..calendar.models import CalendarEntry


def override_calendar_entries(
    calendar: Sequence[CalendarEntry], new_entry: CalendarEntry
) -> list[CalendarEntry]:
    """Insert an entry, replacing what it supersedes.

    An override replaces an existing override of the same occurrence. Any
    other entry replaces every row of its uid, including the overrides of a
    previous series.

    Returns:
        New list of entries with new_entry appended
    """
    if is_rrule_override_entry(new_entry):
        new_recurrence = parse_ical_date(new_entry.recurrence_id)
        kept = [
            entry
            for entry in calendar
            if not (
                is_rrule_override_entry(entry)
                and entry.uid == new_entry.uid
                and parse_ical_date(entry.recurrence_id) == new_recurrence
            )
        ]
        return [*kept, new_entry]

    return [*(entry for entry in calendar if entry.uid != new_entry.uid), new_entry]
