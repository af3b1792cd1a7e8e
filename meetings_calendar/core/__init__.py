"""Core infrastructure for meetings_calendar: configuration, timezones, logging and errors."""
