"""Typed dataclasses for the What-To-Do data model.

All models use from_dict/to_dict for JSON serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
The top-level Document keeps unknown keys so exports round-trip.
"""

from __future__ import annotations

import copy
import enum
import uuid
from dataclasses import dataclass, field
from typing import Any


CATEGORIES = {
    "health": "Health",
    "study": "Study",
    "work": "Work",
    "social": "Social",
    "personal": "Personal",
    "creative": "Creative",
    "finance": "Finance",
    "home": "Home",
}

TIERS = (1, 2, 3)


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def _weekdays(raw: Any) -> list[int] | None:
    if not raw:
        return None
    return sorted({int(d) for d in raw})


# ── Goals ─────────────────────────────────────────────────────


@dataclass
class Habit:
    id: str = ""
    name: str = ""
    category: str = ""
    specific_days: list[int] | None = None  # None = every day
    pinned: bool = False

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Habit:
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            category=str(d.get("category", "") or ""),
            specific_days=_weekdays(d.get("specificDays")),
            pinned=bool(d.get("pinned", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "specificDays": list(self.specific_days) if self.specific_days else None,
            "pinned": self.pinned,
        }

    def applies_on(self, weekday: int) -> bool:
        return not self.specific_days or weekday in self.specific_days


# ── Tasks ─────────────────────────────────────────────────────


@dataclass
class Subtask:
    id: str = ""
    text: str = ""
    done: bool = False

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Subtask:
        return cls(
            id=str(d.get("id", "")),
            text=str(d.get("text", "")),
            done=bool(d.get("done", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "done": self.done}


@dataclass
class Task:
    id: str = ""
    name: str = ""
    due: str = ""  # YYYY-MM-DDTHH:MM:SS
    tier: int = 2
    done: bool = False
    subtasks: list[Subtask] = field(default_factory=list)
    # passthrough, not used by the engine
    class_id: str | None = None
    recurring: Any = None
    depends_on: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Task:
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            due=str(d.get("due", "") or ""),
            tier=int(d.get("tier", 2)),
            done=bool(d.get("done", False)),
            subtasks=[Subtask.from_dict(s) for s in (d.get("subtasks") or [])],
            class_id=d.get("classId"),
            recurring=d.get("recurring"),
            depends_on=list(d.get("dependsOn") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "due": self.due,
            "tier": self.tier,
            "done": self.done,
            "subtasks": [s.to_dict() for s in self.subtasks],
        }
        if self.class_id is not None:
            d["classId"] = self.class_id
        if self.recurring is not None:
            d["recurring"] = self.recurring
        if self.depends_on:
            d["dependsOn"] = list(self.depends_on)
        return d

    @property
    def due_date(self) -> str:
        return self.due.split("T")[0] if self.due else ""

    def subtask_progress(self) -> tuple[int, int]:
        return sum(1 for s in self.subtasks if s.done), len(self.subtasks)


# ── Schedule ──────────────────────────────────────────────────


@dataclass
class ClassSession:
    id: str = ""
    code: str = ""
    name: str = ""
    time: str = ""
    location: str = ""
    days: list[int] = field(default_factory=list)
    color: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ClassSession:
        return cls(
            id=str(d.get("id", "")),
            code=str(d.get("code", "") or ""),
            name=str(d.get("name", "") or ""),
            time=str(d.get("time", "") or ""),
            location=str(d.get("location", "") or ""),
            days=_weekdays(d.get("days")) or [],
            color=str(d.get("color", "") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "time": self.time,
            "location": self.location,
            "days": list(self.days),
        }
        if self.color:
            d["color"] = self.color
        return d


# ── Vacation ──────────────────────────────────────────────────


@dataclass
class VacationPeriod:
    active: bool = False
    start_date: str | None = None
    end_date: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> VacationPeriod:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            active=bool(d.get("active", False)),
            start_date=d.get("startDate") or None,
            end_date=d.get("endDate") or None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"active": self.active, "startDate": self.start_date, "endDate": self.end_date}

    @property
    def is_complete(self) -> bool:
        """Active with both bounds set."""
        return self.active and bool(self.start_date) and bool(self.end_date)


@dataclass(frozen=True)
class VacationRecord:
    start_date: str = ""
    end_date: str = ""
    days: int = 0

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> VacationRecord:
        return cls(
            start_date=str(d.get("startDate", "") or ""),
            end_date=str(d.get("endDate", "") or ""),
            days=int(d.get("days", 0) or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"startDate": self.start_date, "endDate": self.end_date, "days": self.days}


# ── Preferences ───────────────────────────────────────────────


@dataclass
class TimerPresets:
    focus: int = 25
    short_break: int = 5

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TimerPresets:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            focus=int(d.get("focus", 25)),
            short_break=int(d.get("shortBreak", 5)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"focus": self.focus, "shortBreak": self.short_break}


# ── Document ──────────────────────────────────────────────────


_KNOWN_KEYS = {
    "habits",
    "tasks",
    "history",
    "journal",
    "targetDate",
    "semesterStart",
    "semesterEnd",
    "classes",
    "timerPresets",
    "vacationMode",
    "vacationHistory",
    "assignments",
    "deletedItems",
}


@dataclass
class Document:
    habits: list[Habit] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    history: dict[str, list[str]] = field(default_factory=dict)
    journal: dict[str, str] = field(default_factory=dict)
    target_date: str = "2026-08-31"
    semester_start: str = "2026-01-06"
    semester_end: str = "2026-05-01"
    classes: list[ClassSession] = field(default_factory=list)
    timer_presets: TimerPresets = field(default_factory=TimerPresets)
    vacation_mode: VacationPeriod = field(default_factory=VacationPeriod)
    vacation_history: list[VacationRecord] = field(default_factory=list)
    # passthrough, not used by the engine
    assignments: list[dict[str, Any]] = field(default_factory=list)
    deleted_items: list[dict[str, Any]] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Document:
        if not d or not isinstance(d, dict):
            return cls()
        history: dict[str, list[str]] = {}
        for day, ids in (d.get("history") or {}).items():
            if ids:
                history[str(day)] = [str(i) for i in ids]
        journal: dict[str, str] = {}
        for day, entry in (d.get("journal") or {}).items():
            text = entry.get("text", "") if isinstance(entry, dict) else str(entry or "")
            if text:
                journal[str(day)] = text
        defaults = cls()
        return cls(
            habits=[Habit.from_dict(h) for h in (d.get("habits") or [])],
            tasks=[Task.from_dict(t) for t in (d.get("tasks") or [])],
            history=history,
            journal=journal,
            target_date=str(d.get("targetDate") or defaults.target_date),
            semester_start=str(d.get("semesterStart") or defaults.semester_start),
            semester_end=str(d.get("semesterEnd") or defaults.semester_end),
            classes=[ClassSession.from_dict(c) for c in (d.get("classes") or [])],
            timer_presets=TimerPresets.from_dict(d.get("timerPresets") or {}),
            vacation_mode=VacationPeriod.from_dict(d.get("vacationMode") or {}),
            vacation_history=[VacationRecord.from_dict(v) for v in (d.get("vacationHistory") or [])],
            assignments=list(d.get("assignments") or []),
            deleted_items=list(d.get("deletedItems") or []),
            extra={k: v for k, v in d.items() if k not in _KNOWN_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "habits": [h.to_dict() for h in self.habits],
            "tasks": [t.to_dict() for t in self.tasks],
            "history": {k: list(v) for k, v in self.history.items()},
            "journal": {k: {"text": v} for k, v in self.journal.items()},
            "targetDate": self.target_date,
            "semesterStart": self.semester_start,
            "semesterEnd": self.semester_end,
            "classes": [c.to_dict() for c in self.classes],
            "timerPresets": self.timer_presets.to_dict(),
            "vacationMode": self.vacation_mode.to_dict(),
            "vacationHistory": [v.to_dict() for v in self.vacation_history],
            "assignments": copy.deepcopy(self.assignments),
            "deletedItems": copy.deepcopy(self.deleted_items),
        }
        d.update(copy.deepcopy(self.extra))
        return d

    def copy(self) -> Document:
        """Deep copy; mutations work on the copy and return it."""
        return copy.deepcopy(self)

    def find_habit(self, habit_id: str) -> Habit | None:
        for h in self.habits:
            if h.id == habit_id:
                return h
        return None

    def find_task(self, task_id: str) -> Task | None:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None


# ── Undo ──────────────────────────────────────────────────────


@dataclass
class DeleteQueueEntry:
    type: str = ""  # habit, task
    item: Habit | Task | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "item": self.item.to_dict() if self.item else None}


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    timezone: str = "UTC"
    undo_timeout_seconds: float = 5.0
    storage_key: str = "what-to-do-tracker"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            timezone=str(d.get("timezone", "UTC")),
            undo_timeout_seconds=float(d.get("undo_timeout_seconds", 5.0)),
            storage_key=str(d.get("storage_key", "what-to-do-tracker")),
            log_level=str(d.get("log_level", "INFO")).upper(),
        )


# ── Analytics ─────────────────────────────────────────────────


@dataclass
class Streaks:
    current: int = 0
    best: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"current": self.current, "best": self.best}


@dataclass
class MonthCompletion:
    done: int = 0
    possible: int = 0
    ratio: float = 0.0

    @property
    def percent(self) -> int:
        return round(self.ratio * 100)

    def to_dict(self) -> dict[str, Any]:
        return {"done": self.done, "possible": self.possible, "ratio": round(self.ratio, 3), "percent": self.percent}


class VacationState(enum.Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    PAST = "past"


@dataclass
class VacationStatus:
    state: VacationState
    duration: str
    days: int

    @property
    def verb(self) -> str:
        return {
            VacationState.UPCOMING: "Scheduled",
            VacationState.ONGOING: "Taking",
            VacationState.PAST: "Took",
        }[self.state]

    @property
    def sentence(self) -> str:
        return f"{self.verb} a break for {self.duration}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "duration": self.duration,
            "days": self.days,
            "verb": self.verb,
            "sentence": self.sentence,
        }


@dataclass
class DayPreview:
    date: str = ""
    habits: list[Habit] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    has_journal: bool = False
    has_class: bool = False
    is_vacation: bool = False
    completed_habits: int = 0

    @property
    def pending_tasks(self) -> list[Task]:
        return [t for t in self.tasks if not t.done]

    @property
    def top_task(self) -> Task | None:
        """Highest-tier pending task, first one wins on ties."""
        top = None
        for t in self.pending_tasks:
            if top is None or t.tier > top.tier:
                top = t
        return top

    @property
    def is_empty(self) -> bool:
        return not (
            self.is_vacation or self.has_class or self.habits or self.pending_tasks or self.has_journal
        )

    def summary(self) -> str:
        parts = []
        if self.is_vacation:
            parts.append("Vacation day")
        if self.has_class:
            parts.append("Class scheduled")
        if self.habits:
            n = len(self.habits)
            parts.append(f"{n} goal{'s' if n != 1 else ''}")
        pending = len(self.pending_tasks)
        if pending:
            parts.append(f"{pending} task{'s' if pending != 1 else ''}")
        if self.has_journal:
            parts.append("Journal entry")
        return " · ".join(parts) if parts else "Nothing scheduled"

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "habits": [h.to_dict() for h in self.habits],
            "tasks": [t.to_dict() for t in self.tasks],
            "pendingTasks": [t.id for t in self.pending_tasks],
            "completedHabits": self.completed_habits,
            "hasJournal": self.has_journal,
            "hasClass": self.has_class,
            "isVacation": self.is_vacation,
            "isEmpty": self.is_empty,
            "summary": self.summary(),
        }


@dataclass
class Insight:
    kind: str = ""  # best_day, top_goal, perfect_days
    title: str = ""
    text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "title": self.title, "text": self.text}


@dataclass
class HeatmapCell:
    date: str = ""
    done: int = 0
    pct: float = 0.0

    @property
    def level(self) -> str:
        if self.pct >= 1:
            return "full"
        if self.pct >= 0.75:
            return "high"
        if self.pct >= 0.5:
            return "half"
        if self.pct > 0:
            return "low"
        return "none"

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "done": self.done, "pct": round(self.pct, 3), "level": self.level}
