from __future__ import annotations

import logging
import os
import secrets
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from pydantic import BaseModel, Field

from whattodo import (
    ConfirmationRequired,
    DuplicateNameError,
    ImportParseError,
    NotFoundError,
    Subtask,
    Tracker,
    TrackerError,
    ValidationError,
    add_or_update_class,
    add_or_update_habit,
    add_or_update_task,
    adjust_timer_preset,
    build_due,
    categories_in_use,
    classes_on,
    day_completion,
    day_preview,
    days_left,
    delete_class,
    filter_habits,
    filter_tasks,
    insights,
    month_completion,
    now_local,
    open_tracker,
    save_journal,
    schedule_vacation,
    set_target_date,
    setup_logging,
    streaks,
    toggle_habit_for_date,
    toggle_pin,
    toggle_task_done,
    vacation_status,
    vacation_summary,
    year_heatmap,
)
from whattodo.dates import weekday

logger = logging.getLogger(__name__)

app = FastAPI(title="What-To-Do", version="0.1.0")

security = HTTPBasic(auto_error=False)

_tracker: Tracker | None = None


def get_tracker() -> Tracker:
    global _tracker
    if _tracker is None:
        _tracker = open_tracker()
        setup_logging(_tracker.settings)
        logger.info("Tracker loaded from %s", _tracker.store.backend.root)
    return _tracker


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("WHATTODO_USERNAME", "")
    expected_password = os.environ.get("WHATTODO_PASSWORD", "")

    if credentials is None:
        if not expected_username or not expected_password:
            return "guest"
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    if not expected_username or not expected_password:
        return "guest"

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


# ── Error mapping ─────────────────────────────────────────────


@app.exception_handler(ConfirmationRequired)
async def _confirmation_required(_request: Request, exc: ConfirmationRequired) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=exc.to_dict())


@app.exception_handler(TrackerError)
async def _tracker_error(_request: Request, exc: TrackerError) -> JSONResponse:
    if isinstance(exc, DuplicateNameError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ImportParseError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, ValidationError):
        code = 422
    else:
        code = status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=code, content={"ok": False, "error": str(exc)})


# ── Request bodies ────────────────────────────────────────────


class HabitIn(BaseModel):
    name: str = ""
    category: str = ""
    specific_days: list[int] | None = Field(default=None, alias="specificDays")
    edit_id: str | None = Field(default=None, alias="editId")


class ToggleIn(BaseModel):
    habit_id: str = Field(alias="habitId")
    date: str


class SubtaskIn(BaseModel):
    id: str
    text: str
    done: bool = False


class TaskIn(BaseModel):
    name: str = ""
    due: str | None = None
    date: str | None = None
    hour: int = 9
    minute: int = 0
    meridiem: str = "AM"
    tier: int = 2
    subtasks: list[SubtaskIn] = Field(default_factory=list)
    edit_id: str | None = Field(default=None, alias="editId")
    confirm: bool = False


class JournalIn(BaseModel):
    text: str = ""


class ClassIn(BaseModel):
    name: str = ""
    days: list[int] = Field(default_factory=list)
    code: str = ""
    time: str = ""
    location: str = ""
    color: str = ""
    edit_id: str | None = Field(default=None, alias="editId")


class VacationIn(BaseModel):
    start: str = ""
    end: str = ""
    confirm: bool = False


class TargetIn(BaseModel):
    date: str = ""


class PresetIn(BaseModel):
    delta: int


# ── Document ──────────────────────────────────────────────────


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/document")
async def document(tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    doc = tracker.store.get()
    today = tracker.today()
    status_ = vacation_status(doc.vacation_mode, today)
    return {
        "document": doc.to_dict(),
        "firstRun": tracker.store.first_run,
        "today": today,
        "daysLeft": days_left(doc.target_date, today),
        "vacation": status_.to_dict() if status_ else None,
        "vacationSummary": vacation_summary(doc, today),
    }


@app.get("/export", response_class=PlainTextResponse)
async def export_data(tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> PlainTextResponse:
    return PlainTextResponse(
        tracker.store.export_text(),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="what-to-do-backup.json"'},
    )


@app.post("/import")
async def import_data(
    request: Request,
    tracker: Tracker = Depends(get_tracker),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    payload = (await request.body()).decode("utf-8", errors="replace")
    tracker.store.import_text(payload)
    return {"ok": True}


@app.post("/reset")
async def reset(tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    tracker.reset()
    return {"ok": True}


# ── Goals ─────────────────────────────────────────────────────


@app.get("/habits")
async def list_habits(
    category: str = "all",
    tracker: Tracker = Depends(get_tracker),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    doc = tracker.store.get()
    today = tracker.today()
    done_today = set(doc.history.get(today, []))
    habits = []
    for h in filter_habits(doc, category):
        d = h.to_dict()
        d["doneToday"] = h.id in done_today
        d["streaks"] = streaks(doc, h.id, today).to_dict()
        habits.append(d)
    return {"habits": habits, "categories": categories_in_use(doc)}


@app.post("/habits")
async def save_habit(body: HabitIn, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    tracker.store.apply(add_or_update_habit, body.name, body.category, body.specific_days, body.edit_id)
    return {"ok": True, "message": "Goal updated" if body.edit_id else "Goal added"}


@app.delete("/habits/{habit_id}")
async def remove_habit(habit_id: str, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    removed = tracker.undo.delete_habit(habit_id)
    if removed is None:
        raise NotFoundError(f"Goal not found: {habit_id}")
    return {"ok": True, "undoSeconds": tracker.undo.seconds_left()}


@app.post("/habits/{habit_id}/pin")
async def pin_habit(habit_id: str, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    tracker.store.apply(toggle_pin, habit_id)
    return {"ok": True}


@app.post("/history/toggle")
async def toggle_history(body: ToggleIn, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    doc = tracker.store.apply(toggle_habit_for_date, body.habit_id, body.date)
    done, applicable = day_completion(doc, body.date)
    return {"ok": True, "done": body.habit_id in doc.history.get(body.date, []), "completed": done, "applicable": applicable}


@app.get("/habits/{habit_id}/streaks")
async def habit_streaks(habit_id: str, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    doc = tracker.store.get()
    if doc.find_habit(habit_id) is None:
        raise NotFoundError(f"Goal not found: {habit_id}")
    return streaks(doc, habit_id, tracker.today()).to_dict()


# ── Tasks ─────────────────────────────────────────────────────


@app.get("/tasks")
async def list_tasks(
    search: str = "",
    tier: str = "all",
    status_filter: str = "all",
    tracker: Tracker = Depends(get_tracker),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    tasks = filter_tasks(tracker.store.get(), now_local(), search=search, tier=tier, status=status_filter)
    return {"tasks": [t.to_dict() for t in tasks]}


@app.post("/tasks")
async def save_task(body: TaskIn, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    due = body.due
    if not due and body.date:
        due = build_due(body.date, body.hour, body.minute, body.meridiem)
    subtasks = [Subtask(id=s.id, text=s.text, done=s.done) for s in body.subtasks]
    tracker.store.apply(
        add_or_update_task,
        body.name,
        due or "",
        tier=body.tier,
        subtasks=subtasks,
        edit_id=body.edit_id,
        confirm=body.confirm,
    )
    return {"ok": True, "message": "Task updated" if body.edit_id else "Task added"}


@app.delete("/tasks/{task_id}")
async def remove_task(task_id: str, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    removed = tracker.undo.delete_task(task_id)
    if removed is None:
        raise NotFoundError(f"Task not found: {task_id}")
    return {"ok": True, "undoSeconds": tracker.undo.seconds_left()}


@app.post("/tasks/{task_id}/toggle")
async def toggle_task(task_id: str, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    tracker.store.apply(toggle_task_done, task_id)
    return {"ok": True}


# ── Undo ──────────────────────────────────────────────────────


@app.get("/undo")
async def undo_state(tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    entry = tracker.undo.pending
    return {"pending": entry.to_dict() if entry else None, "secondsLeft": tracker.undo.seconds_left()}


@app.post("/undo")
async def undo(tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    restored = tracker.undo.undo()
    return {"ok": restored is not None, "restored": restored.to_dict() if restored else None}


# ── Journal & classes ─────────────────────────────────────────


@app.put("/journal/{date}")
async def put_journal(date: str, body: JournalIn, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    tracker.store.apply(save_journal, date, body.text)
    return {"ok": True, "message": "Journal saved" if body.text.strip() else "Entry deleted"}


@app.get("/classes")
async def list_classes(tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    today, others = classes_on(tracker.store.get(), weekday(tracker.today()))
    return {"today": [c.to_dict() for c in today], "others": [c.to_dict() for c in others]}


@app.post("/classes")
async def save_class(body: ClassIn, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    tracker.store.apply(
        add_or_update_class,
        body.name,
        body.days,
        code=body.code,
        time=body.time,
        location=body.location,
        color=body.color,
        edit_id=body.edit_id,
    )
    return {"ok": True}


@app.delete("/classes/{class_id}")
async def remove_class(class_id: str, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    tracker.store.apply(delete_class, class_id)
    return {"ok": True, "message": "Class deleted"}


# ── Vacation & preferences ────────────────────────────────────


@app.post("/vacation")
async def post_vacation(body: VacationIn, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    tracker.store.apply(schedule_vacation, body.start, body.end, confirm=body.confirm)
    current = tracker.store.get().vacation_mode
    status_ = vacation_status(current, tracker.today())
    return {
        "ok": True,
        "archived": not current.active,
        "vacation": status_.to_dict() if status_ else None,
    }


@app.put("/target")
async def put_target(body: TargetIn, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    doc = tracker.store.apply(set_target_date, body.date)
    return {"ok": True, "daysLeft": days_left(doc.target_date, tracker.today())}


@app.post("/timer-presets/{key}")
async def post_preset(key: str, body: PresetIn, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    doc = tracker.store.apply(adjust_timer_preset, key, body.delta)
    return doc.timer_presets.to_dict()


# ── Analytics ─────────────────────────────────────────────────


@app.get("/preview/{date}")
async def preview(date: str, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    return day_preview(tracker.store.get(), date).to_dict()


@app.get("/months/{year}/{month}")
async def month_stats(year: int, month: int, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month: {month}")
    return month_completion(tracker.store.get(), year, month).to_dict()


@app.get("/heatmap/{year}")
async def heatmap(year: int, tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    return {"cells": [c.to_dict() for c in year_heatmap(tracker.store.get(), year)]}


@app.get("/insights")
async def get_insights(tracker: Tracker = Depends(get_tracker), username: str = Depends(get_current_user)) -> dict[str, Any]:
    found = insights(tracker.store.get(), tracker.today())
    return {"insights": [i.to_dict() for i in found]}
