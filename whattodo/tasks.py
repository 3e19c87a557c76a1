"""Task CRUD, validation, subtasks, and listing."""

from __future__ import annotations

from datetime import datetime

from whattodo.dates import is_date_key, parse_due
from whattodo.errors import ConfirmationRequired, NotFoundError, ValidationError
from whattodo.models import TIERS, Document, Subtask, Task, new_id
from whattodo.vacation import is_vacation_day


# ── Validation ────────────────────────────────────────────────


VALID_STATUSES = {"all", "open", "done", "overdue"}


def validate_task(name: str, due: str, tier: int) -> list[str]:
    """Validate task fields and return list of errors (empty if valid)."""
    errors = []
    if not (name or "").strip():
        errors.append("Missing required field: name")
    if not due:
        errors.append("Missing required field: due")
    elif "T" not in due or not is_date_key(due.split("T")[0]):
        errors.append(f"Invalid due: {due!r}")
    else:
        try:
            parse_due(due)
        except ValueError:
            errors.append(f"Invalid due: {due!r}")
    if tier not in TIERS:
        errors.append("tier must be 1, 2 or 3")
    return errors


def validate_subtasks(subtasks: list[Subtask]) -> list[str]:
    """Subtask ids must be non-blank and unique within the task."""
    errors = []
    seen: set[str] = set()
    for s in subtasks:
        if not s.id:
            errors.append("Subtask id must not be blank")
        elif s.id in seen:
            errors.append(f"Duplicate subtask id: {s.id}")
        seen.add(s.id)
    return errors


def build_due(date_key: str, hour: int | str = 9, minute: int | str = 0, meridiem: str = "AM") -> str:
    """Turn 12-hour form input into a ``YYYY-MM-DDTHH:MM:SS`` due value."""
    if not is_date_key(date_key):
        raise ValidationError(f"Invalid due date: {date_key!r}")
    h = int(hour)
    m = int(minute)
    if not 1 <= h <= 12 or not 0 <= m <= 59:
        raise ValidationError(f"Invalid time: {hour}:{minute}")
    meridiem = meridiem.upper()
    if meridiem == "PM" and h != 12:
        h += 12
    elif meridiem == "AM" and h == 12:
        h = 0
    return f"{date_key}T{h:02d}:{m:02d}:00"


# ── CRUD ──────────────────────────────────────────────────────


def add_or_update_task(
    doc: Document,
    name: str,
    due: str,
    tier: int = 2,
    subtasks: list[Subtask] | None = None,
    edit_id: str | None = None,
    confirm: bool = False,
) -> Document:
    """Insert a new task, or update ``edit_id``.

    An open task due inside the active vacation needs ``confirm=True``;
    otherwise ConfirmationRequired is raised and nothing is applied.
    """
    errors = validate_task(name, due, tier) + validate_subtasks(subtasks or [])
    if errors:
        raise ValidationError("; ".join(errors))

    existing = doc.find_task(edit_id) if edit_id else None
    if edit_id and existing is None:
        raise NotFoundError(f"Task not found: {edit_id}")

    due_day = due.split("T")[0]
    done = existing.done if existing else False
    if not done and not confirm and is_vacation_day(due_day, doc.vacation_mode):
        raise ConfirmationRequired(conflict_date=due_day)

    items = [Subtask.from_dict(s.to_dict()) for s in (subtasks or [])]
    nxt = doc.copy()
    if existing:
        task = nxt.find_task(edit_id)
        task.name = name.strip()
        task.due = due
        task.tier = tier
        task.subtasks = items
    else:
        nxt.tasks.append(Task(id=new_id(), name=name.strip(), due=due, tier=tier, subtasks=items))
    return nxt


def delete_task(doc: Document, task_id: str) -> tuple[Document, Task | None]:
    """Remove a task. Returns (next document, removed snapshot)."""
    task = doc.find_task(task_id)
    if task is None:
        return doc, None
    nxt = doc.copy()
    nxt.tasks = [t for t in nxt.tasks if t.id != task_id]
    return nxt, Task.from_dict(task.to_dict())


def restore_task(doc: Document, task: Task) -> Document:
    """Re-insert a deleted task at the end of the list."""
    nxt = doc.copy()
    nxt.tasks.append(Task.from_dict(task.to_dict()))
    return nxt


def toggle_task_done(doc: Document, task_id: str) -> Document:
    nxt = doc.copy()
    task = nxt.find_task(task_id)
    if task is None:
        raise NotFoundError(f"Task not found: {task_id}")
    task.done = not task.done
    return nxt


# ── Subtasks (form state, saved with the task) ────────────────


def add_subtask(subtasks: list[Subtask], text: str) -> list[Subtask]:
    text = (text or "").strip()
    if not text:
        return list(subtasks)
    taken = {s.id for s in subtasks}
    sid = new_id()
    while sid in taken:
        sid = new_id()
    return [*subtasks, Subtask(id=sid, text=text)]


def toggle_subtask(subtasks: list[Subtask], subtask_id: str) -> list[Subtask]:
    return [
        Subtask(id=s.id, text=s.text, done=not s.done) if s.id == subtask_id else s
        for s in subtasks
    ]


def delete_subtask(subtasks: list[Subtask], subtask_id: str) -> list[Subtask]:
    return [s for s in subtasks if s.id != subtask_id]


# ── Listing ───────────────────────────────────────────────────


def is_overdue(task: Task, now: datetime) -> bool:
    if task.done or not task.due:
        return False
    return parse_due(task.due) < now


def filter_tasks(
    doc: Document,
    now: datetime,
    search: str = "",
    tier: int | str = "all",
    status: str = "all",
) -> list[Task]:
    """Open tasks first, each group by due; then search/tier/status filters.

    ``now`` must be naive local time, matching the stored due values.
    """
    if status not in VALID_STATUSES:
        raise ValidationError(f"Invalid status filter: {status}")
    ordered = sorted(doc.tasks, key=lambda t: (t.done, t.due))
    needle = search.lower()
    out = []
    for t in ordered:
        if needle not in t.name.lower():
            continue
        if tier != "all" and str(t.tier) != str(tier):
            continue
        overdue = is_overdue(t, now)
        if status == "done" and not t.done:
            continue
        if status == "open" and (t.done or overdue):
            continue
        if status == "overdue" and not overdue:
            continue
        out.append(t)
    return out
