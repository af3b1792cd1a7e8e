"""Timezone resolution, host timezone detection and clock utilities for meetings_calendar."""

from __future__ import annotations

import datetime
import logging
import os
import time
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import ClassVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as date_parser

from .exceptions import InvalidTimezoneError

logger = logging.getLogger(__name__)

# Fallback when the host timezone cannot be detected
DEFAULT_LOCAL_TIMEZONE = "UTC"

TEST_TIME_ENV = "MEETINGS_CALENDAR_TEST_TIME"

# A zero-argument provider of the current instant
Clock = Callable[[], datetime.datetime]


class TimezoneDetector:
    """Resolves timezone names and detects the host timezone."""

    # Timezone abbreviation to IANA identifier mapping
    TZ_ABBREV_MAP: ClassVar[dict[str, str]] = {
        "PST": "America/Los_Angeles",
        "PDT": "America/Los_Angeles",
        "EST": "America/New_York",
        "EDT": "America/New_York",
        "CST": "America/Chicago",
        "CDT": "America/Chicago",
        "MST": "America/Denver",
        "MDT": "America/Denver",
        "CET": "Europe/Berlin",
        "CEST": "Europe/Berlin",
        "GMT": "UTC",
        "UTC": "UTC",
    }

    # Windows timezone names to IANA identifier mapping
    # Calendar exports from Outlook/Exchange carry these as TZID
    WINDOWS_TZ_MAP: ClassVar[dict[str, str]] = {
        "Pacific Standard Time": "America/Los_Angeles",
        "Mountain Standard Time": "America/Denver",
        "Central Standard Time": "America/Chicago",
        "Eastern Standard Time": "America/New_York",
        "Alaskan Standard Time": "America/Anchorage",
        "Hawaiian Standard Time": "Pacific/Honolulu",
        "US Mountain Standard Time": "America/Phoenix",
        "Atlantic Standard Time": "America/Halifax",
        "GMT Standard Time": "Europe/London",
        "Central European Standard Time": "Europe/Warsaw",
        "W. Europe Standard Time": "Europe/Berlin",
        "Romance Standard Time": "Europe/Paris",
        "Central Europe Standard Time": "Europe/Budapest",
        "E. Europe Standard Time": "Europe/Bucharest",
        "FLE Standard Time": "Europe/Helsinki",
        "GTB Standard Time": "Europe/Athens",
        "Russian Standard Time": "Europe/Moscow",
        "China Standard Time": "Asia/Shanghai",
        "Tokyo Standard Time": "Asia/Tokyo",
        "India Standard Time": "Asia/Kolkata",
        "Singapore Standard Time": "Asia/Singapore",
        "AUS Eastern Standard Time": "Australia/Sydney",
        "New Zealand Standard Time": "Pacific/Auckland",
        "UTC": "UTC",
    }

    # Obsolete or alternative names mapped to canonical IANA names
    TZ_ALIAS_MAP: ClassVar[dict[str, str]] = {
        "US/Pacific": "America/Los_Angeles",
        "US/Mountain": "America/Denver",
        "US/Central": "America/Chicago",
        "US/Eastern": "America/New_York",
        "US/Alaska": "America/Anchorage",
        "US/Hawaii": "Pacific/Honolulu",
        "US/Arizona": "America/Phoenix",
        "GMT": "UTC",
        "Z": "UTC",
        "Etc/UTC": "UTC",
        "Etc/GMT": "UTC",
        "Etc/Universal": "UTC",
        "Universal": "UTC",
        "Zulu": "UTC",
    }

    # UTC offset (hours) to IANA identifier mapping, used as a last resort
    OFFSET_TO_TZ_MAP: ClassVar[dict[int, str]] = {
        -8: "America/Los_Angeles",
        -7: "America/Denver",
        -6: "America/Chicago",
        -5: "America/New_York",
        0: "UTC",
        1: "Europe/Berlin",
    }

    def canonical_name(self, tzid: str) -> str:
        """Map a Windows name or alias to its IANA identifier; other names pass through."""
        name = tzid.strip()
        if name in self.WINDOWS_TZ_MAP:
            return self.WINDOWS_TZ_MAP[name]
        return self.TZ_ALIAS_MAP.get(name, name)

    def get_local_timezone(self) -> str:
        """Get the host's timezone as an IANA timezone identifier.

        Strategies, in order:
        1. The TZ environment variable
        2. The target of the /etc/localtime symlink
        3. The abbreviation reported by the C library
        4. The current UTC offset

        Returns:
            IANA timezone string, "UTC" if detection fails.
        """
        tz_env = os.environ.get("TZ", "").lstrip(":")
        if tz_env and self._is_valid(tz_env):
            return self.canonical_name(tz_env)

        localtime = Path("/etc/localtime")
        try:
            if localtime.is_symlink():
                target = str(localtime.resolve())
                if "zoneinfo/" in target:
                    candidate = target.split("zoneinfo/", 1)[1]
                    if self._is_valid(candidate):
                        return candidate
        except OSError:
            logger.debug("Could not inspect /etc/localtime", exc_info=True)

        local_tz_name = time.tzname[time.daylight] if time.daylight else time.tzname[0]
        if local_tz_name in self.TZ_ABBREV_MAP:
            return self.TZ_ABBREV_MAP[local_tz_name]

        offset = datetime.datetime.now().astimezone().utcoffset() or datetime.timedelta()
        offset_hours = round(offset.total_seconds() / 3600)
        if offset_hours in self.OFFSET_TO_TZ_MAP:
            return self.OFFSET_TO_TZ_MAP[offset_hours]

        logger.warning(
            "Could not detect local timezone, offset=%dh, falling back to %s",
            offset_hours,
            DEFAULT_LOCAL_TIMEZONE,
        )
        return DEFAULT_LOCAL_TIMEZONE

    def _is_valid(self, tzid: str) -> bool:
        try:
            ZoneInfo(self.canonical_name(tzid))
        except (ZoneInfoNotFoundError, ValueError):
            return False
        return True


class TimeProvider:
    """Provides the current time with test time override support."""

    def now_utc(self) -> datetime.datetime:
        """Return current UTC time with tzinfo.

        Can be overridden via the MEETINGS_CALENDAR_TEST_TIME environment variable.
        Format: ISO 8601 datetime string (e.g., "2022-01-02T10:00:00+01:00")

        Returns:
            Current time in UTC with timezone info
        """
        test_time = os.environ.get(TEST_TIME_ENV)
        if test_time:
            try:
                dt = date_parser.isoparse(test_time)
                if dt.tzinfo is not None:
                    return dt.astimezone(datetime.UTC)
                # Naive override is taken as UTC
                return dt.replace(tzinfo=datetime.UTC)
            except ValueError as e:
                logger.warning("Failed to parse %s=%r: %s", TEST_TIME_ENV, test_time, e)

        return datetime.datetime.now(datetime.UTC)


# Singleton instances for global use
_detector = TimezoneDetector()
_time_provider = TimeProvider()


@lru_cache(maxsize=256)
def resolve_timezone(tzid: str) -> ZoneInfo:
    """Resolve a TZID to a ZoneInfo instance.

    Accepts IANA identifiers, "UTC", common aliases ("US/Pacific", "GMT")
    and Windows timezone names ("W. Europe Standard Time").

    Args:
        tzid: Timezone identifier as stored in a DateTimeEntry

    Returns:
        ZoneInfo for the timezone

    Raises:
        InvalidTimezoneError: If the identifier cannot be resolved
    """
    if not tzid or not tzid.strip():
        raise InvalidTimezoneError("Empty timezone identifier")

    name = _detector.canonical_name(tzid)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTimezoneError(f"Unknown timezone: {tzid!r}") from e


def get_local_timezone() -> str:
    """Get the host timezone (convenience function).

    Returns:
        IANA timezone string
    """
    return _detector.get_local_timezone()


def now_utc() -> datetime.datetime:
    """Get current UTC time (convenience function, the default Clock).

    Returns:
        Current time in UTC
    """
    return _time_provider.now_utc()
