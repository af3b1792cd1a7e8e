"""Date ranges of the calendar views (day, work week, week, month) - meetings_calendar."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Literal, Optional

from dateutil.relativedelta import relativedelta

from ..calendar.datetime_utils import Instant, parse_instant
from ..core.config_manager import CalendarEngineConfig
from ..core.exceptions import CalendarQueryError
from ..core.timezone_utils import resolve_timezone

CalendarViewType = Literal["day", "workWeek", "week", "month"]

_END_OF_DAY = time(23, 59, 59, 999000)

# datetime.weekday() counts from Monday = 0, the configuration from Sunday = 0
_MONDAY = 1


@dataclass(frozen=True)
class FilterRange:
    """Inclusive range of a view, as aware datetimes in the display timezone."""

    start_date: datetime
    end_date: datetime


def _start_of_week(day: date, first_day_of_week: int) -> date:
    weekday = (day.weekday() + 1) % 7
    return day - timedelta(days=(weekday - first_day_of_week) % 7)


def generate_filter_range(
    view: CalendarViewType,
    date_value: Instant,
    config: Optional[CalendarEngineConfig] = None,
    previous_view: Optional[str] = None,
) -> FilterRange:
    """Calculate the range shown by a calendar view around an instant.

    The instant is interpreted in the display timezone of config, so day
    boundaries follow the local calendar, including DST days.

    Args:
        view: One of "day", "workWeek", "week" or "month"
        date_value: Reference instant
        config: Engine configuration supplying timezone and first weekday
        previous_view: View the user switched from; a week reached from the
            month view starts at the first week boundary not before date_value

    Returns:
        FilterRange from the first to the last millisecond of the view

    Raises:
        CalendarQueryError: If view is not a known view
    """
    config = config or CalendarEngineConfig()
    zone = resolve_timezone(config.effective_timezone)
    reference = parse_instant(date_value).astimezone(zone).date()

    def day_range(first: date, last: date) -> FilterRange:
        return FilterRange(
            start_date=datetime.combine(first, time.min, tzinfo=zone),
            end_date=datetime.combine(last, _END_OF_DAY, tzinfo=zone),
        )

    if view == "day":
        return day_range(reference, reference)

    if view == "week":
        start = _start_of_week(reference, config.first_day_of_week)
        if previous_view == "month" and start != reference:
            start += timedelta(weeks=1)
        return day_range(start, start + timedelta(days=6))

    if view == "workWeek":
        # always Monday to Friday of the configured week
        start = _start_of_week(reference, config.first_day_of_week)
        start += timedelta(days=(_MONDAY - config.first_day_of_week))
        return day_range(start, start + timedelta(days=4))

    if view == "month":
        return day_range(reference.replace(day=1), reference + relativedelta(day=31))

    raise CalendarQueryError(f"unexpected view: {view}")
