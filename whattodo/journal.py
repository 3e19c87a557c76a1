"""Daily journal: one text entry per date key."""

from __future__ import annotations

from whattodo.dates import is_date_key
from whattodo.errors import ValidationError
from whattodo.models import Document


def save_journal(doc: Document, date_key: str, text: str) -> Document:
    """Store trimmed text for the day; blank text deletes the entry."""
    if not is_date_key(date_key):
        raise ValidationError(f"Invalid date: {date_key!r}")
    nxt = doc.copy()
    text = (text or "").strip()
    if text:
        nxt.journal[date_key] = text
    else:
        nxt.journal.pop(date_key, None)
    return nxt


def get_journal(doc: Document, date_key: str) -> str:
    return doc.journal.get(date_key, "")
