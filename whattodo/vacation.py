"""Vacation mode: window checks, status, conflict check, archival, monitor.

A vacation is scheduled (inactive -> active) and archived once it is over
(active -> inactive plus a VacationRecord). Archival happens at most once
per period; the monitor re-evaluates after every document change.
"""

from __future__ import annotations

import logging
from typing import Callable

from whattodo.dates import inclusive_day_count, is_date_key
from whattodo.errors import ConfirmationRequired, ValidationError
from whattodo.models import (
    Document,
    Task,
    VacationPeriod,
    VacationRecord,
    VacationState,
    VacationStatus,
)

logger = logging.getLogger(__name__)


# ── Derived values ────────────────────────────────────────────


def is_vacation_day(date_key: str, period: VacationPeriod) -> bool:
    if not period.is_complete:
        return False
    return period.start_date <= date_key <= period.end_date


def vacation_days(period: VacationPeriod) -> int:
    if not period.is_complete:
        return 0
    return inclusive_day_count(period.start_date, period.end_date)


def duration_label(days: int) -> str:
    if days == 1:
        return "1 day"
    if days == 7:
        return "a week"
    if days == 14:
        return "2 weeks"
    return f"{days} days"


def vacation_status(period: VacationPeriod, today: str) -> VacationStatus | None:
    """Upcoming / Ongoing / Past for an active period, else None."""
    if not period.is_complete:
        return None
    days = vacation_days(period)
    if period.start_date <= today <= period.end_date:
        state = VacationState.ONGOING
    elif today > period.end_date:
        state = VacationState.PAST
    else:
        state = VacationState.UPCOMING
    return VacationStatus(state=state, duration=duration_label(days), days=days)


def vacation_summary(doc: Document, today: str) -> str:
    """One-line widget text: current status or the archived count."""
    total = len(doc.vacation_history)
    plural = "s" if total != 1 else ""
    status = vacation_status(doc.vacation_mode, today)
    if status is not None:
        if total:
            return f"{status.sentence} · Total: {total} vacation{plural} taken"
        return status.sentence
    if total:
        return f"{total} vacation{plural} completed"
    return "No vacations"


def conflicting_tasks(doc: Document, start: str, end: str) -> list[Task]:
    """Open tasks whose due date lies in [start, end]."""
    out = []
    for t in doc.tasks:
        if not t.due or t.done:
            continue
        if start <= t.due_date <= end:
            out.append(t)
    return out


# ── Mutations ─────────────────────────────────────────────────


def schedule_vacation(doc: Document, start: str, end: str, confirm: bool = False) -> Document:
    """Activate a vacation window.

    Raises ConfirmationRequired when open tasks fall inside the window and
    ``confirm`` is not set.
    """
    if not start or not end:
        raise ValidationError("Missing vacation start or end date")
    if not is_date_key(start) or not is_date_key(end):
        raise ValidationError(f"Invalid vacation dates: {start!r} - {end!r}")
    if start > end:
        raise ValidationError("Vacation start must not be after its end")

    clashes = conflicting_tasks(doc, start, end)
    if clashes and not confirm:
        raise ConfirmationRequired(task_count=len(clashes))

    nxt = doc.copy()
    nxt.vacation_mode = VacationPeriod(active=True, start_date=start, end_date=end)
    return nxt


def archive_vacation(doc: Document) -> Document:
    """Deactivate the current period and record it. No-op when inactive."""
    period = doc.vacation_mode
    if not period.active:
        return doc
    nxt = doc.copy()
    if period.is_complete:
        nxt.vacation_history.append(
            VacationRecord(
                start_date=period.start_date,
                end_date=period.end_date,
                days=vacation_days(period),
            )
        )
    nxt.vacation_mode = VacationPeriod()
    return nxt


# ── Monitor ───────────────────────────────────────────────────


class VacationMonitor:
    """Archives the active vacation once its end date has passed.

    Attach it to a TrackerStore; it runs on attach (i.e. after load) and
    after every committed document.
    """

    def __init__(self, today: Callable[[], str]) -> None:
        self._today = today
        self._store = None
        self._unsubscribe: Callable[[], None] | None = None

    def attach(self, store) -> None:
        self._store = store
        self._unsubscribe = store.subscribe(self.check)
        self.check(store.get())

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._store = None

    def check(self, doc: Document) -> bool:
        """Archive if due. Returns True if an archival was applied."""
        if self._store is None:
            return False
        period = doc.vacation_mode
        status = vacation_status(period, self._today())
        if status is None or status.state is not VacationState.PAST or not period.active:
            return False
        # The listener may be handed an older snapshot; decide on the live one.
        if not self._store.get().vacation_mode.active:
            return False
        logger.info("Vacation %s..%s is over, archiving", period.start_date, period.end_date)
        self._store.apply(archive_vacation)
        return True
