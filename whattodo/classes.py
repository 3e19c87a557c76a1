"""Weekly class schedule."""

from __future__ import annotations

from whattodo.errors import NotFoundError, ValidationError
from whattodo.models import ClassSession, Document, new_id


def validate_class(name: str, days: list[int]) -> list[str]:
    errors = []
    if not (name or "").strip():
        errors.append("Missing required field: name")
    if not days:
        errors.append("Select at least one day")
    for d in days or []:
        if not isinstance(d, int) or d < 0 or d > 6:
            errors.append(f"Invalid weekday: {d!r}")
    return errors


def add_or_update_class(
    doc: Document,
    name: str,
    days: list[int],
    code: str = "",
    time: str = "",
    location: str = "",
    color: str = "",
    edit_id: str | None = None,
) -> Document:
    """Insert or replace a class. Names need not be unique."""
    errors = validate_class(name, days)
    if errors:
        raise ValidationError("; ".join(errors))
    session = ClassSession(
        id=edit_id or new_id(),
        code=code,
        name=name,
        time=time,
        location=location,
        days=sorted(set(days)),
        color=color,
    )
    nxt = doc.copy()
    if edit_id:
        for i, c in enumerate(nxt.classes):
            if c.id == edit_id:
                nxt.classes[i] = session
                break
        else:
            raise NotFoundError(f"Class not found: {edit_id}")
    else:
        nxt.classes.append(session)
    return nxt


def delete_class(doc: Document, class_id: str) -> Document:
    """Remove a class. Not undoable."""
    nxt = doc.copy()
    nxt.classes = [c for c in nxt.classes if c.id != class_id]
    return nxt


def has_class_on(doc: Document, weekday: int) -> bool:
    return any(weekday in c.days for c in doc.classes)


def classes_on(doc: Document, weekday: int) -> tuple[list[ClassSession], list[ClassSession]]:
    """Split classes into (meeting on ``weekday``, the rest)."""
    today = [c for c in doc.classes if weekday in c.days]
    others = [c for c in doc.classes if weekday not in c.days]
    return today, others
