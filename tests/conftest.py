"""Shared test fixtures for the tracker tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml

from whattodo.models import ClassSession, Document, Habit, Subtask, Task, VacationPeriod
from whattodo.store import MemoryBackend, TrackerStore
from whattodo.timers import ManualScheduler
from whattodo.tracker import open_tracker

TODAY = "2026-07-03"  # a Friday


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Temporary data root with a settings file."""
    root = tmp_path / "whattodo"
    root.mkdir(parents=True)
    settings = {
        "timezone": "UTC",
        "undo_timeout_seconds": 5,
        "storage_key": "what-to-do-tracker",
        "log_level": "DEBUG",
    }
    (root / "settings.yaml").write_text(yaml.dump(settings, default_flow_style=False), encoding="utf-8")

    os.environ["WHATTODO_ROOT"] = str(root)
    yield root
    if "WHATTODO_ROOT" in os.environ:
        del os.environ["WHATTODO_ROOT"]


@pytest.fixture
def doc() -> Document:
    """Three goals, a few tasks, some history, one class."""
    return Document(
        habits=[
            Habit(id="run", name="Run", category="health"),
            Habit(id="read", name="Read", category="study", specific_days=[1, 3, 5]),
            Habit(id="save", name="Save money", category="finance", pinned=True),
        ],
        tasks=[
            Task(id="t1", name="Submit essay", due="2026-07-04T10:00:00", tier=3),
            Task(
                id="t2",
                name="Buy groceries",
                due="2026-07-03T18:30:00",
                tier=1,
                subtasks=[Subtask(id="s1", text="Milk"), Subtask(id="s2", text="Eggs", done=True)],
            ),
            Task(id="t3", name="Old report", due="2026-06-20T09:00:00", tier=2, done=True),
        ],
        history={
            "2026-07-01": ["run", "read", "save"],
            "2026-07-02": ["run"],
            "2026-07-03": ["run", "save"],
        },
        journal={"2026-07-02": "Long day."},
        classes=[ClassSession(id="c1", code="COP3502", name="Data Structures", days=[1, 3])],
    )


@pytest.fixture
def vacation_doc(doc: Document) -> Document:
    doc.vacation_mode = VacationPeriod(active=True, start_date="2026-07-01", end_date="2026-07-07")
    return doc


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def store(doc: Document) -> TrackerStore:
    from whattodo.store import export_document

    backend = MemoryBackend({"what-to-do-tracker": export_document(doc)})
    return TrackerStore(backend)


@pytest.fixture
def tracker(workspace: Path, scheduler: ManualScheduler):
    t = open_tracker(workspace, scheduler=scheduler, today=lambda: TODAY)
    yield t
    t.close()
