"""Shared constants and display helpers for the task list."""

from datetime import date

DATE_DISPLAY_FORMAT = "%Y-%m-%d"
DATE_RANGE_SEPARATOR = " ~ "


def format_date(value: date | None) -> str:
    """Format a date for display, or "" when absent."""
    return value.strftime(DATE_DISPLAY_FORMAT) if value else ""


def format_date_range(start: date | None, end: date | None) -> str:
    """Label for a task's date badge: "start ~ end", a single date, or ""."""
    if start and end:
        return f"{format_date(start)}{DATE_RANGE_SEPARATOR}{format_date(end)}"
    return format_date(start or end)
