"""Recurrence rule set construction for series entries - meetings_calendar.

dateutil evaluates rules on naive datetimes. A series must be evaluated on
the wall-clock time of its own DTSTART zone, otherwise every occurrence
after a DST transition shifts by the change in offset. RRuleSetAdapter
keeps that naive frame internal: callers pass and receive absolute
(UTC-aware) instants only.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from dateutil.rrule import rrule, rruleset, rrulestr

from ..core.exceptions import InvalidRecurrenceRuleError
from ..core.timezone_utils import resolve_timezone
from .datetime_utils import ICAL_DATE_FORMAT, Instant, parse_ical_date, parse_instant
from .helpers import is_finite_series
from .models import CalendarEntry

logger = logging.getLogger(__name__)

# Upper bound used to look up the last occurrence of a finite series
_END_OF_TIME = datetime(9999, 2, 1)


def _rule_line(rrule_text: str) -> str:
    """Extract the single rule line, dropping an optional DTSTART line."""
    lines = [line.strip() for line in rrule_text.strip().splitlines() if line.strip()]
    rule_lines = [line for line in lines if not line.upper().startswith("DTSTART")]
    if len(rule_lines) != 1:
        raise InvalidRecurrenceRuleError(
            f"Expected exactly one recurrence rule, got {len(rule_lines)}: {rrule_text!r}"
        )
    return rule_lines[0]


def parse_rrule_options(rrule_text: str) -> dict[str, str]:
    """Split rule text such as ``FREQ=DAILY;COUNT=3`` into upper-cased options.

    Accepts an optional ``RRULE:`` prefix.

    Raises:
        InvalidRecurrenceRuleError: If the text is not KEY=VALUE pairs with a FREQ
    """
    if not rrule_text or not rrule_text.strip():
        raise InvalidRecurrenceRuleError("Empty recurrence rule")

    line = _rule_line(rrule_text)
    if line.upper().startswith("RRULE:"):
        line = line[len("RRULE:"):]

    options: dict[str, str] = {}
    for part in line.split(";"):
        if not part.strip():
            continue
        if "=" not in part:
            raise InvalidRecurrenceRuleError(f"Malformed recurrence rule part {part!r} in {rrule_text!r}")
        key, value = part.split("=", 1)
        options[key.strip().upper()] = value.strip()

    if not options.get("FREQ"):
        raise InvalidRecurrenceRuleError(f"Recurrence rule without FREQ: {rrule_text!r}")

    return options


@dataclass(frozen=True)
class RRuleSetAdapter:
    """A series rule set that answers occurrence queries in absolute instants.

    Attributes:
        rule_set: dateutil rule set operating on naive wall-clock time of zone
        zone: Timezone of the series DTSTART, the frame occurrences are computed in
        is_finite: Whether the rule is bounded by COUNT or UNTIL
    """

    rule_set: rruleset
    zone: ZoneInfo
    is_finite: bool

    def to_rule_set_date(self, instant: Instant) -> datetime:
        """Translate an instant into the naive wall-clock frame of the rule set."""
        return parse_instant(instant).astimezone(self.zone).replace(tzinfo=None)

    def from_rule_set_date(self, local: datetime) -> datetime:
        """Translate a naive wall-clock value of the rule set back into a UTC instant."""
        return local.replace(tzinfo=self.zone).astimezone(UTC)

    def after(self, instant: Instant, inclusive: bool = False) -> Optional[datetime]:
        """The first occurrence after (or at, when inclusive) the instant."""
        local = self.rule_set.after(self.to_rule_set_date(instant), inc=inclusive)
        return self.from_rule_set_date(local) if local is not None else None

    def before(self, instant: Instant, inclusive: bool = False) -> Optional[datetime]:
        """The last occurrence before (or at, when inclusive) the instant."""
        local = self.rule_set.before(self.to_rule_set_date(instant), inc=inclusive)
        return self.from_rule_set_date(local) if local is not None else None

    def between(self, start: Instant, end: Instant, inclusive: bool = False) -> list[datetime]:
        """All occurrences between start and end."""
        locals_ = self.rule_set.between(
            self.to_rule_set_date(start), self.to_rule_set_date(end), inc=inclusive
        )
        return [self.from_rule_set_date(local) for local in locals_]

    def xafter(self, instant: Instant, count: int, inclusive: bool = False) -> list[datetime]:
        """Up to count consecutive occurrences after (or at, when inclusive) the instant."""
        locals_ = self.rule_set.xafter(self.to_rule_set_date(instant), count=count, inc=inclusive)
        return [self.from_rule_set_date(local) for local in locals_]

    def is_occurrence(self, instant: Instant) -> bool:
        """Whether the rule set, after its exclusions, produces exactly this instant."""
        local = self.to_rule_set_date(instant)
        return self.rule_set.after(local, inc=True) == local

    def last(self) -> Optional[datetime]:
        """The last occurrence of a finite series, None for an infinite or empty one."""
        if not self.is_finite:
            return None
        local = self.rule_set.before(_END_OF_TIME)
        return self.from_rule_set_date(local) if local is not None else None


def generate_rrule_set(entry: CalendarEntry) -> RRuleSetAdapter:
    """Build the rule set of a series entry, including its exclusion dates.

    Args:
        entry: Series-defining calendar entry (rrule present)

    Returns:
        RRuleSetAdapter evaluating the rule in the zone of entry.dtstart

    Raises:
        InvalidRecurrenceRuleError: If the rule is missing or cannot be parsed
    """
    if entry.rrule is None:
        raise InvalidRecurrenceRuleError(f"Entry {entry.uid!r} has no recurrence rule")

    zone = resolve_timezone(entry.dtstart.tzid)
    options = parse_rrule_options(entry.rrule)

    def to_local(instant: datetime) -> datetime:
        return instant.astimezone(zone).replace(tzinfo=None)

    dtstart = to_local(parse_ical_date(entry.dtstart))

    try:
        # UNTIL is re-applied below in the local frame; ignoretz keeps every
        # value naive so dateutil accepts it next to a naive DTSTART
        rule = rrulestr(_rule_line(entry.rrule), dtstart=dtstart, ignoretz=True)
    except (ValueError, TypeError, KeyError, IndexError) as e:
        raise InvalidRecurrenceRuleError(f"Invalid recurrence rule {entry.rrule!r}: {e}") from e

    if not isinstance(rule, rrule):
        raise InvalidRecurrenceRuleError(f"Expected a single recurrence rule: {entry.rrule!r}")

    until = options.get("UNTIL", "")
    if until.upper().endswith("Z"):
        try:
            until_utc = datetime.strptime(until[:-1], ICAL_DATE_FORMAT).replace(tzinfo=UTC)
        except ValueError as e:
            raise InvalidRecurrenceRuleError(f"Invalid UNTIL value {until!r}") from e
        rule = rule.replace(until=to_local(until_utc))

    rule_set = rruleset()
    rule_set.rrule(rule)

    for exdate in entry.exdate or []:
        rule_set.exdate(to_local(parse_ical_date(exdate)))

    logger.debug(
        "Built rule set for %s: rrule=%r tzid=%s exdates=%d",
        entry.uid,
        entry.rrule,
        entry.dtstart.tzid,
        len(entry.exdate or []),
    )

    return RRuleSetAdapter(
        rule_set=rule_set,
        zone=zone,
        is_finite=is_finite_series(options),
    )
