"""
Central logging configuration for meetings_calendar.

Installs a colorized console handler when the host application has not
configured logging itself, and keeps third-party loggers quiet.
"""

import logging
import os
import sys
from typing import Optional

from colorlog import ColoredFormatter

LOG_FORMAT = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def configure_calendar_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure logging levels for meetings_calendar.

    Args:
        debug_mode: Whether to enable debug logging for meetings_calendar modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        MEETINGS_CALENDAR_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        MEETINGS_CALENDAR_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("MEETINGS_CALENDAR_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("MEETINGS_CALENDAR_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    # Only add a handler if the host application hasn't configured one
    if not root_logger.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setLevel(root_level)
        handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt="%H:%M:%S", log_colors=LOG_COLORS))
        root_logger.addHandler(handler)

    logger_config: dict[str, int] = {
        "dateutil": logging.WARNING,
        "meetings_calendar": logging.DEBUG if final_debug else logging.INFO,
    }

    for logger_name, level in logger_config.items():
        logging.getLogger(logger_name).setLevel(level)

    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(root_level)
    )
