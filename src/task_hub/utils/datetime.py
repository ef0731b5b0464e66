"""Calendar-day date utilities for Task Hub.

Annotation dates carry no time or timezone: a task is due on a calendar day.
This module centralizes the two accepted textual formats and the notion of
"today" so that filtering, sorting and closed-date stamping agree.
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional


ISO_DATE_FORMAT = "%Y-%m-%d"
US_DATE_FORMAT = "%m-%d-%Y"

# Tried in order: ISO first, then US month-first.
DATE_PATTERNS = [
    (re.compile(r"^\d{4}-\d{2}-\d{2}$"), ISO_DATE_FORMAT),
    (re.compile(r"^\d{2}-\d{2}-\d{4}$"), US_DATE_FORMAT),
]


def local_today() -> date:
    """Return the current local calendar day.

    Returns:
        Today's date with the time of day stripped
    """
    return datetime.now().date()


def parse_task_date(value: Optional[str]) -> Optional[date]:
    """Parse an annotation date value.

    Args:
        value: Raw text from a ``@created``/``@due``/``@closed`` token

    Returns:
        The calendar day, or None if the value is missing or not in one
        of the accepted formats
    """
    if not value:
        return None

    value = value.strip()
    for pattern, fmt in DATE_PATTERNS:
        if pattern.match(value):
            try:
                return datetime.strptime(value, fmt).date()
            except ValueError:
                # Right shape, impossible day (e.g. 2024-02-30)
                return None

    return None


def format_task_date(day: date) -> str:
    """Render a calendar day in the canonical annotation format."""
    return day.strftime(ISO_DATE_FORMAT)


def days_from(day: date, days: int) -> date:
    """Return the day ``days`` calendar days after ``day``."""
    return day + timedelta(days=days)
