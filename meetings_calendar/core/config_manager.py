"""Configuration management for meetings_calendar.

Replaces any process-wide locale state with an explicit configuration value
that is passed to the operations which need it (display timezone for
formatting exclusion dates, first day of the week for view ranges).

Sources, lowest to highest precedence:
- dataclass defaults
- a YAML configuration file
- a .env file (only for variables not already in the environment)
- MEETINGS_CALENDAR_* environment variables
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError, InvalidTimezoneError
from .timezone_utils import get_local_timezone, resolve_timezone

logger = logging.getLogger(__name__)

ENV_TIMEZONE = "MEETINGS_CALENDAR_TIMEZONE"
ENV_FIRST_DAY_OF_WEEK = "MEETINGS_CALENDAR_FIRST_DAY_OF_WEEK"
ENV_LOG_LEVEL = "MEETINGS_CALENDAR_LOG_LEVEL"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class CalendarEngineConfig:
    """Typed configuration for the calendar engine.

    Fields:
        timezone: display timezone used when formatting exclusion dates and
            computing view ranges; None detects the host timezone
        first_day_of_week: 0 = Sunday ... 6 = Saturday
        log_level: logging level name
    """

    timezone: str | None = None
    first_day_of_week: int = 1
    log_level: str = "INFO"

    @property
    def effective_timezone(self) -> str:
        """The configured timezone, or the detected host timezone."""
        if self.timezone:
            return self.timezone
        return get_local_timezone()

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> CalendarEngineConfig:
        """Create a config from a plain mapping, applying defaults and validation.

        Invalid values are logged and replaced with their defaults.
        """
        if data is None:
            data = {}

        timezone = data.get("timezone")
        if timezone is not None:
            timezone = str(timezone)
            try:
                resolve_timezone(timezone)
            except InvalidTimezoneError:
                logger.warning("Config timezone=%r is not a known timezone; ignoring", timezone)
                timezone = None

        first_day_raw = data.get("first_day_of_week", 1)
        try:
            first_day_of_week = int(first_day_raw)
        except (TypeError, ValueError):
            logger.warning("Config first_day_of_week=%r is not an int; using 1", first_day_raw)
            first_day_of_week = 1
        if not 0 <= first_day_of_week <= 6:
            logger.warning("Config first_day_of_week=%d out of range 0..6; using 1", first_day_of_week)
            first_day_of_week = 1

        log_level = str(data.get("log_level") or "INFO").upper()
        if log_level not in VALID_LOG_LEVELS:
            logger.warning("Config log_level=%r is not a level name; using INFO", log_level)
            log_level = "INFO"

        return cls(
            timezone=timezone,
            first_day_of_week=first_day_of_week,
            log_level=log_level,
        )


def parse_env_file(path: Path) -> dict[str, str]:
    """Parse a .env file and return key-value pairs.

    Skips blank lines, comments and lines without "=". Surrounding quotes
    are stripped from values.

    Args:
        path: Path to .env file

    Returns:
        Dictionary of key-value pairs, empty if the file doesn't exist or cannot be read.
    """
    if not path.exists():
        return {}

    result: dict[str, str] = {}

    try:
        content = path.read_text(encoding="utf-8")
    except OSError:
        logger.debug("Failed to read .env file (continuing): %s", str(path), exc_info=True)
        return result

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, val = line.split("=", 1)
        key = key.strip()
        val = val.strip().strip('"').strip("'")
        if key:
            result[key] = val

    return result


class ConfigManager:
    """Builds configuration from a YAML file, a .env file and environment variables."""

    def __init__(self, config_path: Path | None = None, env_file_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional YAML configuration file
            env_file_path: Optional path to .env file (defaults to .env in current directory)
        """
        self.config_path = config_path
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Load the .env file into the environment without overriding existing variables.

        Returns:
            List of environment variable keys that were loaded from the .env file
        """
        if not self.env_file_path.exists():
            logger.debug("No .env file found at %s", self.env_file_path)
            return []

        set_keys = []
        for key, val in parse_env_file(self.env_file_path).items():
            if key not in os.environ:
                os.environ[key] = val
                set_keys.append(key)

        if set_keys:
            logger.debug("Loaded .env defaults for keys: %s", ", ".join(set_keys))

        return set_keys

    def load_file(self) -> dict[str, Any]:
        """Load the YAML configuration file.

        Returns:
            The top-level mapping, empty if no file is configured or it doesn't exist

        Raises:
            ConfigurationError: If the file does not contain a mapping
        """
        if self.config_path is None:
            return {}
        if not self.config_path.exists():
            logger.info("Config file %s not found; using defaults", self.config_path)
            return {}

        loaded = yaml.safe_load(self.config_path.read_text(encoding="utf-8"))
        # safe_load returns None for empty files
        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Config file {self.config_path} must contain a mapping at top level"
            )
        logger.debug("Loaded configuration from %s", self.config_path)
        return loaded

    def build_config_from_env(self) -> dict[str, Any]:
        """Build a configuration mapping from environment variables.

        Recognizes:
        - MEETINGS_CALENDAR_TIMEZONE -> 'timezone'
        - MEETINGS_CALENDAR_FIRST_DAY_OF_WEEK -> 'first_day_of_week'
        - MEETINGS_CALENDAR_LOG_LEVEL -> 'log_level'
        """
        cfg: dict[str, Any] = {}

        timezone = os.environ.get(ENV_TIMEZONE)
        if timezone:
            cfg["timezone"] = timezone

        first_day = os.environ.get(ENV_FIRST_DAY_OF_WEEK)
        if first_day:
            cfg["first_day_of_week"] = first_day

        log_level = os.environ.get(ENV_LOG_LEVEL)
        if log_level:
            cfg["log_level"] = log_level

        return cfg

    def load_full_config(self) -> CalendarEngineConfig:
        """Merge all configuration sources into a CalendarEngineConfig.

        This is the main entry point for loading configuration.
        """
        data = self.load_file()
        self.load_env_file()
        data.update(self.build_config_from_env())
        return CalendarEngineConfig.from_dict(data)


def load_config(path: str | None = None) -> CalendarEngineConfig:
    """Load configuration from an optional YAML file, .env file and the environment.

    Args:
        path: Optional path to a YAML configuration file

    Returns:
        CalendarEngineConfig with merged values
    """
    manager = ConfigManager(config_path=Path(path) if path else None)
    return manager.load_full_config()
