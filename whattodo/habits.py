"""Goal (habit) mutations and listing.

Every mutation takes a Document and returns the next one; the input is
never modified.
"""

from __future__ import annotations

from whattodo.dates import is_date_key
from whattodo.errors import DuplicateNameError, NotFoundError, ValidationError
from whattodo.models import CATEGORIES, Document, Habit, new_id


# ── Validation ────────────────────────────────────────────────


def validate_habit(name: str, category: str, specific_days: list[int] | None = None) -> list[str]:
    """Validate habit fields and return list of errors (empty if valid)."""
    errors = []
    if not (name or "").strip():
        errors.append("Missing required field: name")
    if not category:
        errors.append("Missing required field: category")
    elif category not in CATEGORIES:
        errors.append(f"Invalid category: {category}")
    for d in specific_days or []:
        if not isinstance(d, int) or d < 0 or d > 6:
            errors.append(f"Invalid weekday: {d!r}")
    return errors


def find_duplicate(doc: Document, name: str, exclude_id: str | None = None) -> Habit | None:
    wanted = name.strip().lower()
    for h in doc.habits:
        if h.name.lower() == wanted and h.id != exclude_id:
            return h
    return None


# ── CRUD ──────────────────────────────────────────────────────


def add_or_update_habit(
    doc: Document,
    name: str,
    category: str,
    specific_days: list[int] | None = None,
    edit_id: str | None = None,
) -> Document:
    """Insert a new goal, or update ``edit_id`` in place.

    An empty weekday selection is stored as None, meaning every day.
    """
    errors = validate_habit(name, category, specific_days)
    if errors:
        raise ValidationError("; ".join(errors))
    name = name.strip()
    if find_duplicate(doc, name, exclude_id=edit_id):
        raise DuplicateNameError(name)

    days = sorted(set(specific_days)) if specific_days else None
    nxt = doc.copy()
    if edit_id:
        habit = nxt.find_habit(edit_id)
        if habit is None:
            raise NotFoundError(f"Goal not found: {edit_id}")
        habit.name = name
        habit.category = category
        habit.specific_days = days
    else:
        nxt.habits.append(Habit(id=new_id(), name=name, category=category, specific_days=days))
    return nxt


def delete_habit(doc: Document, habit_id: str) -> tuple[Document, Habit | None]:
    """Remove a goal and purge it from the history ledger.

    Returns (next document, removed snapshot). The snapshot is None and the
    document unchanged when the id is unknown.
    """
    habit = doc.find_habit(habit_id)
    if habit is None:
        return doc, None
    nxt = doc.copy()
    nxt.habits = [h for h in nxt.habits if h.id != habit_id]
    for day in list(nxt.history):
        ids = [i for i in nxt.history[day] if i != habit_id]
        if ids:
            nxt.history[day] = ids
        else:
            del nxt.history[day]
    return nxt, Habit.from_dict(habit.to_dict())


def restore_habit(doc: Document, habit: Habit) -> Document:
    """Re-insert a deleted goal at the end of the list."""
    nxt = doc.copy()
    nxt.habits.append(Habit.from_dict(habit.to_dict()))
    return nxt


def toggle_habit_for_date(doc: Document, habit_id: str, date_key: str) -> Document:
    """Mark a goal done on a day, or unmark it if already done."""
    if not is_date_key(date_key):
        raise ValidationError(f"Invalid date: {date_key!r}")
    nxt = doc.copy()
    ids = list(nxt.history.get(date_key, []))
    if habit_id in ids:
        ids.remove(habit_id)
    else:
        ids.append(habit_id)
    if ids:
        nxt.history[date_key] = ids
    else:
        nxt.history.pop(date_key, None)
    return nxt


def toggle_pin(doc: Document, habit_id: str) -> Document:
    nxt = doc.copy()
    habit = nxt.find_habit(habit_id)
    if habit is None:
        raise NotFoundError(f"Goal not found: {habit_id}")
    habit.pinned = not habit.pinned
    return nxt


# ── Listing ───────────────────────────────────────────────────


def filter_habits(doc: Document, category: str = "all") -> list[Habit]:
    """Pinned goals first (stable), optionally limited to one category."""
    ordered = sorted(doc.habits, key=lambda h: 0 if h.pinned else 1)
    return [h for h in ordered if category == "all" or h.category == category]


def categories_in_use(doc: Document) -> list[str]:
    seen: list[str] = []
    for h in doc.habits:
        if h.category and h.category not in seen:
            seen.append(h.category)
    return seen


def is_done(doc: Document, habit_id: str, date_key: str) -> bool:
    return habit_id in doc.history.get(date_key, [])
