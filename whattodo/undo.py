"""Single-slot, time-boxed undo for goal and task deletion.

States: Empty, or Pending(entry, deadline). A new delete replaces the
pending entry outright; the replaced one cannot be recovered. Restores
append to the end of the collection. History marks purged on goal
deletion are not brought back.
"""

from __future__ import annotations

import logging

from whattodo.habits import delete_habit, restore_habit
from whattodo.models import DeleteQueueEntry, Habit, Task
from whattodo.store import TrackerStore
from whattodo.tasks import delete_task, restore_task
from whattodo.timers import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

UNDO_TIMEOUT_SECONDS = 5.0


class UndoController:
    def __init__(
        self,
        store: TrackerStore,
        scheduler: Scheduler,
        timeout: float = UNDO_TIMEOUT_SECONDS,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self.timeout = timeout
        self._entry: DeleteQueueEntry | None = None
        self._deadline: float | None = None
        self._timer: TimerHandle | None = None

    @property
    def pending(self) -> DeleteQueueEntry | None:
        return self._entry

    def seconds_left(self) -> float:
        if self._deadline is None:
            return 0.0
        return max(0.0, self._deadline - self._scheduler.time())

    def delete_habit(self, habit_id: str) -> Habit | None:
        nxt, removed = delete_habit(self._store.get(), habit_id)
        if removed is None:
            return None
        self._store.apply(lambda _doc: nxt)
        self._hold(DeleteQueueEntry(type="habit", item=removed))
        return removed

    def delete_task(self, task_id: str) -> Task | None:
        nxt, removed = delete_task(self._store.get(), task_id)
        if removed is None:
            return None
        self._store.apply(lambda _doc: nxt)
        self._hold(DeleteQueueEntry(type="task", item=removed))
        return removed

    def undo(self) -> Habit | Task | None:
        """Restore the pending entity. No-op when nothing is pending."""
        entry = self._entry
        if entry is None:
            return None
        self._clear()
        if entry.type == "habit":
            self._store.apply(restore_habit, entry.item)
        else:
            self._store.apply(restore_task, entry.item)
        logger.info("Restored %s %r", entry.type, entry.item.name)
        return entry.item

    def discard(self) -> None:
        """Drop the pending entry without restoring it."""
        if self._entry is not None:
            logger.debug("Discarding pending undo for %s", self._entry.type)
        self._clear()

    def _hold(self, entry: DeleteQueueEntry) -> None:
        if self._entry is not None:
            logger.debug("Dropping pending undo for %s", self._entry.type)
        self._clear()
        self._entry = entry
        self._deadline = self._scheduler.time() + self.timeout
        self._timer = self._scheduler.call_later(self.timeout, self._expire)

    def _expire(self) -> None:
        self._timer = None
        self._clear()

    def _clear(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._entry = None
        self._deadline = None
