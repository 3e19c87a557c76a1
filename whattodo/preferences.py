"""Target date, first-run setup, and focus-timer presets."""

from __future__ import annotations

from whattodo.dates import days_between, is_date_key
from whattodo.errors import ValidationError
from whattodo.models import Document

TIMER_KEYS = {"focus": "focus", "shortBreak": "short_break"}


def set_target_date(doc: Document, date_key: str) -> Document:
    """Set the countdown target. Also used to finish first-run setup."""
    if not date_key:
        raise ValidationError("Please select a goal date")
    if not is_date_key(date_key):
        raise ValidationError(f"Invalid date: {date_key!r}")
    nxt = doc.copy()
    nxt.target_date = date_key
    return nxt


def days_left(target: str, today: str) -> int:
    """Days from today to the target; negative once it has passed."""
    return days_between(today, target)


def adjust_timer_preset(doc: Document, key: str, delta: int) -> Document:
    """Shift a preset by ``delta`` minutes, never below one minute."""
    attr = TIMER_KEYS.get(key)
    if attr is None:
        raise ValidationError(f"Unknown timer preset: {key}")
    nxt = doc.copy()
    value = getattr(nxt.timer_presets, attr)
    setattr(nxt.timer_presets, attr, max(1, value + delta))
    return nxt
