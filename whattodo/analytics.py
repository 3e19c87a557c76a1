"""Analytics engine for the tracker.

Pure, read-only projections over a Document snapshot: streaks,
completion ratios, day previews, insights, and the yearly heatmap.
"""

from __future__ import annotations

from datetime import date, timedelta

from whattodo.classes import has_class_on
from whattodo.dates import DAYS_FULL, add_days, date_key, is_date_key, month_keys, weekday
from whattodo.errors import ValidationError
from whattodo.models import (
    DayPreview,
    Document,
    Habit,
    HeatmapCell,
    Insight,
    MonthCompletion,
    Streaks,
)
from whattodo.vacation import is_vacation_day

STREAK_WINDOW_DAYS = 365
TOP_GOAL_MIN_STREAK = 3


# ── Streaks ───────────────────────────────────────────────────


def streaks(doc: Document, habit_id: str, today: str) -> Streaks:
    """Current and best run of consecutive done days over the last year.

    Walks back from ``today`` by ledger presence only. A goal's weekday
    restriction is not consulted: an unscheduled day without a mark still
    breaks the run.
    """
    current = best = run = 0
    unbroken = True
    for i in range(STREAK_WINDOW_DAYS):
        day = add_days(today, -i)
        if habit_id in doc.history.get(day, []):
            run += 1
            if unbroken:
                current = run
        else:
            # today not done means no current streak at all
            unbroken = False
            best = max(best, run)
            run = 0
    return Streaks(current=current, best=max(best, run))


# ── Completion ────────────────────────────────────────────────


def applicable_habits(doc: Document, date_key: str) -> list[Habit]:
    wd = weekday(date_key)
    return [h for h in doc.habits if h.applies_on(wd)]


def _check_key(key: str) -> None:
    if not is_date_key(key):
        raise ValidationError(f"Invalid date: {key!r}")


def day_completion(doc: Document, date_key: str) -> tuple[int, int]:
    """(done, applicable) goal counts for one day."""
    _check_key(date_key)
    applicable = applicable_habits(doc, date_key)
    ids = {h.id for h in applicable}
    done = sum(1 for i in doc.history.get(date_key, []) if i in ids)
    return done, len(applicable)


def completion_ratio(doc: Document, date_key: str) -> float | None:
    """Share of applicable goals done that day; None if nothing applies."""
    done, applicable = day_completion(doc, date_key)
    if applicable == 0:
        return None
    return done / applicable


def month_completion(doc: Document, year: int, month: int) -> MonthCompletion:
    total_done = total_possible = 0
    for key in month_keys(year, month):
        done, applicable = day_completion(doc, key)
        total_done += done
        total_possible += applicable
    ratio = total_done / total_possible if total_possible > 0 else 0.0
    return MonthCompletion(done=total_done, possible=total_possible, ratio=ratio)


def year_heatmap(doc: Document, year: int) -> list[HeatmapCell]:
    """365 cells from Jan 1, scored against the total goal count."""
    total = len(doc.habits) or 1
    known = {h.id for h in doc.habits}
    jan1 = date(year, 1, 1)
    cells = []
    for d in range(365):
        key = date_key(jan1 + timedelta(days=d))
        done = sum(1 for i in doc.history.get(key, []) if i in known)
        cells.append(HeatmapCell(date=key, done=done, pct=done / total))
    return cells


# ── Day preview ───────────────────────────────────────────────


def day_preview(doc: Document, date_key: str) -> DayPreview:
    """Everything shown for one calendar day, from a single read path."""
    _check_key(date_key)
    return DayPreview(
        date=date_key,
        habits=applicable_habits(doc, date_key),
        tasks=[t for t in doc.tasks if t.due and t.due.startswith(date_key)],
        has_journal=bool(doc.journal.get(date_key)),
        has_class=has_class_on(doc, weekday(date_key)),
        is_vacation=is_vacation_day(date_key, doc.vacation_mode),
        completed_habits=len(doc.history.get(date_key, [])),
    )


# ── Insights ──────────────────────────────────────────────────


def best_weekday(doc: Document) -> int | None:
    """Weekday with the highest average done count, lowest index on ties."""
    known = {h.id for h in doc.habits}
    totals = [0] * 7
    counts = [0] * 7
    for key, ids in doc.history.items():
        wd = weekday(key)
        totals[wd] += sum(1 for i in ids if i in known)
        counts[wd] += 1
    avgs = [totals[i] / counts[i] if counts[i] > 0 else 0 for i in range(7)]
    best = avgs.index(max(avgs))
    return best if avgs[best] > 0 else None


def perfect_days(doc: Document) -> int:
    """Days on which every existing goal was marked done.

    Compared against the total goal count, not against the goals that
    applied that weekday.
    """
    known = {h.id for h in doc.habits}
    count = 0
    for ids in doc.history.values():
        done = sum(1 for i in ids if i in known)
        if done > 0 and done == len(doc.habits):
            count += 1
    return count


def insights(doc: Document, today: str) -> list[Insight]:
    res = []

    wd = best_weekday(doc)
    if wd is not None:
        res.append(Insight(kind="best_day", title="Best Day", text=f"You perform best on {DAYS_FULL[wd]}s"))

    ranked = [(h, streaks(doc, h.id, today).best) for h in doc.habits]
    top = sorted([r for r in ranked if r[1] > TOP_GOAL_MIN_STREAK], key=lambda r: r[1], reverse=True)
    if top:
        habit, best = top[0]
        res.append(Insight(kind="top_goal", title="Top Goal", text=f'"{habit.name}": {best}-day best streak'))

    perf = perfect_days(doc)
    if perf > 0:
        res.append(Insight(kind="perfect_days", title="Perfect Days", text=f"{perf} days with 100% completion"))

    return res
