"""Wires the store, undo controller, and vacation monitor together."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from whattodo.models import Settings
from whattodo.store import JsonFileBackend, KeyValueBackend, TrackerStore
from whattodo.timers import AsyncioScheduler, Scheduler
from whattodo.undo import UndoController
from whattodo.vacation import VacationMonitor
from whattodo.workspace import data_root, load_settings, today_str


@dataclass
class Tracker:
    store: TrackerStore
    undo: UndoController
    monitor: VacationMonitor
    settings: Settings
    today: Callable[[], str]

    def reset(self) -> None:
        """Delete all data and drop any pending undo."""
        self.undo.discard()
        self.store.reset()

    def close(self) -> None:
        self.monitor.detach()


def open_tracker(
    root: Path | None = None,
    scheduler: Scheduler | None = None,
    backend: KeyValueBackend | None = None,
    today: Callable[[], str] | None = None,
) -> Tracker:
    """Load the document from ``root`` and start the vacation monitor."""
    if root is None:
        root = data_root()
    settings = load_settings(root)
    if today is None:
        def today() -> str:
            return today_str(root)
    store = TrackerStore(backend or JsonFileBackend(root), key=settings.storage_key)
    undo = UndoController(store, scheduler or AsyncioScheduler(), timeout=settings.undo_timeout_seconds)
    monitor = VacationMonitor(today)
    monitor.attach(store)
    return Tracker(store=store, undo=undo, monitor=monitor, settings=settings, today=today)
