"""Tests for whattodo/workspace.py, whattodo/timers.py and whattodo/tracker.py"""

import asyncio
import json

from whattodo.habits import add_or_update_habit
from whattodo.models import Settings, VacationPeriod
from whattodo.store import export_document
from whattodo.timers import AsyncioScheduler, ManualScheduler
from whattodo.tracker import open_tracker
from whattodo.workspace import data_root, get_user_timezone, load_settings, save_settings, today_str


def test_data_root_from_env(workspace):
    assert data_root() == workspace.resolve()


def test_load_settings(workspace):
    s = load_settings(workspace)
    assert s.timezone == "UTC"
    assert s.log_level == "DEBUG"
    assert s.undo_timeout_seconds == 5.0


def test_missing_settings_file_gives_defaults(tmp_path):
    assert load_settings(tmp_path) == Settings()


def test_save_settings_round_trip(tmp_path):
    s = Settings(timezone="Asia/Tokyo", undo_timeout_seconds=8, storage_key="k", log_level="WARNING")
    save_settings(s, tmp_path)
    assert load_settings(tmp_path) == s


def test_bad_timezone_falls_back_to_utc(tmp_path):
    save_settings(Settings(timezone="Mars/Olympus"), tmp_path)
    assert get_user_timezone(tmp_path).key == "UTC"


def test_today_str_format(workspace):
    key = today_str(workspace)
    assert len(key) == 10 and key[4] == "-" and key[7] == "-"


# ── Timers ────────────────────────────────────────────────────


def test_manual_scheduler_fires_in_order():
    sched = ManualScheduler()
    fired = []
    sched.call_later(3, lambda: fired.append("b"))
    sched.call_later(1, lambda: fired.append("a"))
    handle = sched.call_later(2, lambda: fired.append("never"))
    handle.cancel()

    assert sched.advance(1) == 1
    assert sched.advance(5) == 1
    assert fired == ["a", "b"]
    assert sched.time() == 6
    assert sched.pending == 0


# ── Tracker wiring ────────────────────────────────────────────


def test_open_tracker_first_run(tracker):
    assert tracker.store.first_run is True
    assert tracker.today() == "2026-07-03"
    assert tracker.undo.timeout == 5.0


def test_open_tracker_archives_finished_vacation(workspace, doc):
    doc.vacation_mode = VacationPeriod(active=True, start_date="2026-06-01", end_date="2026-06-07")
    path = workspace / "what-to-do-tracker.json"
    path.write_text(export_document(doc), encoding="utf-8")

    t = open_tracker(workspace, scheduler=ManualScheduler(), today=lambda: "2026-07-03")
    try:
        saved = json.loads(path.read_text(encoding="utf-8"))
        assert saved["vacationMode"]["active"] is False
        assert saved["vacationHistory"] == [{"startDate": "2026-06-01", "endDate": "2026-06-07", "days": 7}]
    finally:
        t.close()


def test_asyncio_scheduler_runs_on_loop():
    async def main():
        sched = AsyncioScheduler()
        fired = []
        sched.call_later(0, lambda: fired.append("a"))
        dropped = sched.call_later(0, lambda: fired.append("b"))
        dropped.cancel()
        await asyncio.sleep(0.01)
        return fired, dropped.cancelled

    assert asyncio.run(main()) == (["a"], True)


def test_tracker_reset_drops_pending_undo(tracker):
    tracker.store.apply(add_or_update_habit, "Stretch", "health")
    tracker.undo.delete_habit(tracker.store.get().habits[0].id)
    tracker.reset()
    assert tracker.undo.undo() is None
    assert tracker.store.get().habits == []
