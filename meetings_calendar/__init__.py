"""meetings_calendar - recurrence engine for meeting room calendars.

Expands single meetings, recurring series and their per-occurrence overrides
into concrete events, and edits calendars by occurrence (delete, override,
normalize). Calendars are plain lists of CalendarEntry rows as stored in the
room state; every operation returns new lists instead of mutating its input.
"""

__version__ = "0.1.0"

from .calendar.datetime_utils import (
    format_ical_date,
    is_same_instant,
    parse_ical_date,
    parse_instant,
    to_iso_string,
)
from .calendar.helpers import (
    create_time_filter,
    is_finite_series,
    is_recurring_meeting,
    is_rrule_entry,
    is_rrule_override_entry,
    is_single_entry,
)
from .calendar.models import CalendarEntry, CalendarEvent, DateTimeEntry, parse_calendar
from .calendar.rrule_set import RRuleSetAdapter, generate_rrule_set, parse_rrule_options
from .core.config_manager import CalendarEngineConfig, ConfigManager, load_config
from .core.exceptions import (
    CalendarEngineError,
    CalendarQueryError,
    ConfigurationError,
    InvalidDateTimeEntryError,
    InvalidRecurrenceRuleError,
    InvalidTimezoneError,
)
from .core.logging_config import configure_calendar_logging
from .core.timezone_utils import Clock, get_local_timezone, now_utc, resolve_timezone
from .domain.calculate_events import calculate_calendar_events
from .domain.calendar_change import CalendarChange, extract_calendar_change
from .domain.calendar_end import get_calendar_end
from .domain.calendar_event import get_calendar_event
from .domain.delete_event import delete_calendar_event
from .domain.filter_range import FilterRange, generate_filter_range
from .domain.meeting_times import (
    get_force_deletion_time,
    get_meeting_end_time,
    get_meeting_start_time,
)
from .domain.normalize_entry import normalize_calendar_entry
from .domain.override_entries import override_calendar_entries

__all__ = [
    "CalendarChange",
    "CalendarEngineConfig",
    "CalendarEngineError",
    "CalendarEntry",
    "CalendarEvent",
    "CalendarQueryError",
    "Clock",
    "ConfigManager",
    "ConfigurationError",
    "DateTimeEntry",
    "FilterRange",
    "InvalidDateTimeEntryError",
    "InvalidRecurrenceRuleError",
    "InvalidTimezoneError",
    "RRuleSetAdapter",
    "__version__",
    "calculate_calendar_events",
    "configure_calendar_logging",
    "create_time_filter",
    "delete_calendar_event",
    "extract_calendar_change",
    "format_ical_date",
    "generate_filter_range",
    "generate_rrule_set",
    "get_calendar_end",
    "get_calendar_event",
    "get_force_deletion_time",
    "get_local_timezone",
    "get_meeting_end_time",
    "get_meeting_start_time",
    "is_finite_series",
    "is_recurring_meeting",
    "is_rrule_entry",
    "is_rrule_override_entry",
    "is_same_instant",
    "is_single_entry",
    "load_config",
    "normalize_calendar_entry",
    "now_utc",
    "override_calendar_entries",
    "parse_calendar",
    "parse_ical_date",
    "parse_instant",
    "parse_rrule_options",
    "resolve_timezone",
    "to_iso_string",
]
