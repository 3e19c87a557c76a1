"""Calendar-day key helpers.

Keys are zero-padded ``YYYY-MM-DD`` strings, so plain string comparison
orders them. Weekdays count from Sunday=0.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta

DAYS_SHORT = ["SUN", "MON", "TUE", "WED", "THU", "FRI", "SAT"]
DAYS_FULL = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def date_key(d: date) -> str:
    return d.isoformat()


def parse_key(key: str) -> date:
    return date.fromisoformat(key)


def is_date_key(value: str | None) -> bool:
    if not value or not _KEY_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def weekday(key: str) -> int:
    """Sunday=0 .. Saturday=6."""
    return (parse_key(key).weekday() + 1) % 7


def add_days(key: str, n: int) -> str:
    return date_key(parse_key(key) + timedelta(days=n))


def inclusive_day_count(start: str, end: str) -> int:
    return (parse_key(end) - parse_key(start)).days + 1


def days_between(start: str, end: str) -> int:
    return (parse_key(end) - parse_key(start)).days


def month_keys(year: int, month: int) -> list[str]:
    """Every day key of a calendar month (month is 1-12)."""
    _, last = calendar.monthrange(year, month)
    return [date_key(date(year, month, d)) for d in range(1, last + 1)]


def parse_due(due: str) -> datetime:
    return datetime.fromisoformat(due)
