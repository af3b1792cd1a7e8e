"""Unit tests for meetings_calendar.core.logging_config.configure_calendar_logging."""
import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

import pytest
from colorlog import ColoredFormatter

from meetings_calendar.core.logging_config import configure_calendar_logging

pytestmark = pytest.mark.unit


@contextmanager
def _bare_root_logger() -> Iterator[logging.Logger]:
    """Detach the root handlers (including pytest's capture handlers) for the block."""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    root.handlers[:] = []
    try:
        yield root
    finally:
        root.handlers[:] = saved_handlers


@pytest.fixture(autouse=True)
def restore_levels() -> Generator[None, None, None]:
    loggers = [logging.getLogger(), logging.getLogger("meetings_calendar"), logging.getLogger("dateutil")]
    saved_levels = [logger.level for logger in loggers]
    yield
    for logger, level in zip(loggers, saved_levels):
        logger.setLevel(level)


def test_installs_colored_console_handler() -> None:
    with _bare_root_logger() as root:
        configure_calendar_logging()
        handlers = root.handlers[:]

    assert len(handlers) == 1
    assert isinstance(handlers[0].formatter, ColoredFormatter)
    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("dateutil").level == logging.WARNING


def test_keeps_existing_handlers() -> None:
    existing = logging.NullHandler()

    with _bare_root_logger() as root:
        root.addHandler(existing)
        configure_calendar_logging()
        handlers = root.handlers[:]

    assert handlers == [existing]


def test_debug_mode() -> None:
    configure_calendar_logging(debug_mode=True)

    assert logging.getLogger("meetings_calendar").level == logging.DEBUG
    assert logging.getLogger().level == logging.DEBUG


def test_debug_environment_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEETINGS_CALENDAR_DEBUG", "yes")

    configure_calendar_logging()

    assert logging.getLogger("meetings_calendar").level == logging.DEBUG


def test_force_debug_wins_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEETINGS_CALENDAR_DEBUG", "1")

    configure_calendar_logging(force_debug=False)

    assert logging.getLogger("meetings_calendar").level == logging.INFO


def test_log_level_environment_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEETINGS_CALENDAR_LOG_LEVEL", "warning")

    configure_calendar_logging()

    assert logging.getLogger().level == logging.WARNING
