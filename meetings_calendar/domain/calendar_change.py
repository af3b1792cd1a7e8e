"""Detection of changes between two versions of a calendar - meetings_calendar.

Collaborators use the change list to describe an edit to participants, e.g.
"the meeting on Tuesday was moved" or "the meeting on Friday was cancelled".
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..calendar.datetime_utils import format_ical_date, parse_ical_date
from ..calendar.helpers import is_rrule_entry, is_rrule_override_entry, is_single_entry
from ..calendar.models import CalendarEntry, DateTimeEntry

logger = logging.getLogger(__name__)


class _ChangeBase(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class EntryTimes(_ChangeBase):
    dtstart: DateTimeEntry
    dtend: DateTimeEntry


class UpdateSingleOrRecurringTimeChange(_ChangeBase):
    """Start or end of a single meeting or a series changed."""

    change_type: Literal["updateSingleOrRecurringTime"] = "updateSingleOrRecurringTime"
    uid: str
    old_value: EntryTimes
    new_value: EntryTimes


class UpdateSingleOrRecurringRruleChange(_ChangeBase):
    """The recurrence rule was added, removed or changed."""

    change_type: Literal["updateSingleOrRecurringRrule"] = "updateSingleOrRecurringRrule"
    uid: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None


class AddOverrideChange(_ChangeBase):
    """An occurrence of a series was modified for the first time."""

    change_type: Literal["addOverride"] = "addOverride"
    value: CalendarEntry
    old_dtstart: DateTimeEntry = Field(..., description="Start of the occurrence before the override")
    old_dtend: DateTimeEntry = Field(..., description="End of the occurrence before the override")


class UpdateOverrideChange(_ChangeBase):
    """An already overridden occurrence was modified again."""

    change_type: Literal["updateOverride"] = "updateOverride"
    value: CalendarEntry
    old_value: CalendarEntry


class DeleteOverrideChange(_ChangeBase):
    """An overridden occurrence was excluded from its series."""

    change_type: Literal["deleteOverride"] = "deleteOverride"
    value: CalendarEntry


class AddExdateChange(_ChangeBase):
    """A plain occurrence was excluded from its series."""

    change_type: Literal["addExdate"] = "addExdate"
    dtstart: DateTimeEntry
    dtend: DateTimeEntry


CalendarChange = Annotated[
    Union[
        UpdateSingleOrRecurringTimeChange,
        UpdateSingleOrRecurringRruleChange,
        AddOverrideChange,
        UpdateOverrideChange,
        DeleteOverrideChange,
        AddExdateChange,
    ],
    Field(discriminator="change_type"),
]


@dataclass
class _UidEntries:
    single_or_recurring_entry: Optional[CalendarEntry] = None
    overrides: dict[datetime, CalendarEntry] = field(default_factory=dict)


def _index_calendar(calendar: Sequence[CalendarEntry]) -> dict[str, _UidEntries]:
    index: dict[str, _UidEntries] = {}
    for entry in calendar:
        uid_entries = index.setdefault(entry.uid, _UidEntries())
        if is_single_entry(entry) or is_rrule_entry(entry):
            uid_entries.single_or_recurring_entry = entry
        if is_rrule_override_entry(entry):
            uid_entries.overrides[parse_ical_date(entry.recurrence_id)] = entry
    return index


def _occurrence_end(series: CalendarEntry, start: DateTimeEntry) -> DateTimeEntry:
    duration = parse_ical_date(series.dtend) - parse_ical_date(series.dtstart)
    return format_ical_date(parse_ical_date(start) + duration, start.tzid)


def extract_calendar_change(
    calendar: Sequence[CalendarEntry], new_calendar: Sequence[CalendarEntry]
) -> list[CalendarChange]:
    """List the changes that turn calendar into new_calendar.

    Args:
        calendar: Previous entries
        new_calendar: Updated entries

    Returns:
        Changes in the order of new_calendar
    """
    index = _index_calendar(calendar)
    changes: list[CalendarChange] = []

    for new_entry in new_calendar:
        uid_entries = index.get(new_entry.uid, _UidEntries())
        old_entry = uid_entries.single_or_recurring_entry

        if is_rrule_override_entry(new_entry):
            old_override = uid_entries.overrides.get(parse_ical_date(new_entry.recurrence_id))
            if old_override is not None:
                if new_entry != old_override:
                    changes.append(UpdateOverrideChange(value=new_entry, old_value=old_override))
            elif old_entry is not None and is_rrule_entry(old_entry):
                changes.append(
                    AddOverrideChange(
                        value=new_entry,
                        old_dtstart=new_entry.recurrence_id,
                        old_dtend=_occurrence_end(old_entry, new_entry.recurrence_id),
                    )
                )
            continue

        if old_entry is None:
            continue

        if is_rrule_entry(new_entry) and is_rrule_entry(old_entry):
            old_exdates = old_entry.exdate or []
            for exdate in new_entry.exdate or []:
                if exdate in old_exdates:
                    continue
                override = uid_entries.overrides.get(parse_ical_date(exdate))
                if override is not None:
                    changes.append(DeleteOverrideChange(value=override))
                else:
                    changes.append(
                        AddExdateChange(dtstart=exdate, dtend=_occurrence_end(old_entry, exdate))
                    )

        if (new_entry.dtstart, new_entry.dtend) != (old_entry.dtstart, old_entry.dtend):
            changes.append(
                UpdateSingleOrRecurringTimeChange(
                    uid=new_entry.uid,
                    old_value=EntryTimes(dtstart=old_entry.dtstart, dtend=old_entry.dtend),
                    new_value=EntryTimes(dtstart=new_entry.dtstart, dtend=new_entry.dtend),
                )
            )

        if new_entry.rrule != old_entry.rrule:
            changes.append(
                UpdateSingleOrRecurringRruleChange(
                    uid=new_entry.uid,
                    old_value=old_entry.rrule,
                    new_value=new_entry.rrule,
                )
            )

    logger.debug("Extracted %d calendar changes", len(changes))
    return changes
