"""Custom exception hierarchy for the calendar recurrence engine.

Every error raised on purpose by meetings_calendar derives from
CalendarEngineError so collaborators can catch engine failures in one place.
Input errors additionally derive from ValueError.
"""


class CalendarEngineError(Exception):
    """Base exception for all calendar engine errors."""


class InvalidRecurrenceRuleError(CalendarEngineError, ValueError):
    """Recurrence rule text could not be parsed.

    Raised when:
    - The RRULE text is empty or malformed
    - The text contains more than one rule

    An unparsable rule means upstream validation failed, so no partial
    recovery is attempted.
    """


class InvalidDateTimeEntryError(CalendarEngineError, ValueError):
    """A date-time value could not be interpreted.

    Raised when:
    - A DateTimeEntry value does not match YYYYMMDDTHHMMSS
    - An ISO-8601 instant string cannot be parsed
    """


class InvalidTimezoneError(InvalidDateTimeEntryError):
    """A tzid does not name a known IANA, alias or Windows timezone."""


class CalendarQueryError(CalendarEngineError, ValueError):
    """Query parameters for the event calculator are inconsistent.

    Raised when:
    - Neither a to_date nor a limit is given
    - The limit is negative
    """


class ConfigurationError(CalendarEngineError):
    """Configuration file could not be turned into a configuration mapping."""
