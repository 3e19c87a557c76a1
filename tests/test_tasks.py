"""Tests for whattodo/tasks.py — CRUD, validation, vacation conflicts, subtasks."""

from datetime import datetime

import pytest

from whattodo.errors import ConfirmationRequired, NotFoundError, ValidationError
from whattodo.models import Document, Subtask
from whattodo.tasks import (
    add_or_update_task,
    add_subtask,
    build_due,
    delete_subtask,
    delete_task,
    filter_tasks,
    restore_task,
    toggle_subtask,
    toggle_task_done,
    validate_task,
)


def test_validate_task_valid():
    assert validate_task("Essay", "2026-07-04T10:00:00", 2) == []


def test_validate_task_missing_fields():
    errors = validate_task("", "", 2)
    assert any("name" in e for e in errors)
    assert any("due" in e for e in errors)


def test_validate_task_bad_due_and_tier():
    errors = validate_task("Essay", "2026-07-04", 4)
    assert any("due" in e.lower() for e in errors)
    assert any("tier" in e for e in errors)


def test_build_due_twelve_hour():
    assert build_due("2026-07-04", 9, 0, "AM") == "2026-07-04T09:00:00"
    assert build_due("2026-07-04", "12", "05", "AM") == "2026-07-04T00:05:00"
    assert build_due("2026-07-04", 12, 30, "PM") == "2026-07-04T12:30:00"
    assert build_due("2026-07-04", 3, 45, "pm") == "2026-07-04T15:45:00"


def test_build_due_invalid():
    with pytest.raises(ValidationError):
        build_due("", 9, 0, "AM")
    with pytest.raises(ValidationError):
        build_due("2026-07-04", 13, 0, "AM")


def test_add_task():
    nxt = add_or_update_task(Document(), " Essay ", "2026-07-04T10:00:00", tier=3)
    t = nxt.tasks[0]
    assert t.name == "Essay"
    assert t.tier == 3
    assert t.done is False
    assert t.subtasks == []


def test_add_task_validation_error():
    with pytest.raises(ValidationError):
        add_or_update_task(Document(), "", "2026-07-04T10:00:00")


def test_edit_task_keeps_done_and_passthrough(doc):
    doc.tasks[2].class_id = "c1"
    nxt = add_or_update_task(doc, "Old report v2", "2026-06-21T09:00:00", tier=1, edit_id="t3")
    t = nxt.find_task("t3")
    assert t.name == "Old report v2"
    assert t.done is True
    assert t.class_id == "c1"
    assert len(nxt.tasks) == 3


def test_edit_missing_task(doc):
    with pytest.raises(NotFoundError):
        add_or_update_task(doc, "X", "2026-06-21T09:00:00", edit_id="nope")


def test_task_in_vacation_requires_confirmation(vacation_doc):
    with pytest.raises(ConfirmationRequired) as exc:
        add_or_update_task(vacation_doc, "Beach cleanup", "2026-07-04T10:00:00")
    assert exc.value.conflict_date == "2026-07-04"
    assert len(vacation_doc.tasks) == 3


def test_task_in_vacation_confirmed(vacation_doc):
    nxt = add_or_update_task(vacation_doc, "Beach cleanup", "2026-07-04T10:00:00", confirm=True)
    assert len(nxt.tasks) == 4


def test_task_outside_vacation_no_confirmation(vacation_doc):
    nxt = add_or_update_task(vacation_doc, "After trip", "2026-07-08T10:00:00")
    assert len(nxt.tasks) == 4


def test_editing_done_task_inside_vacation_needs_no_confirmation(vacation_doc):
    nxt = add_or_update_task(vacation_doc, "Old report", "2026-07-02T09:00:00", edit_id="t3")
    assert nxt.find_task("t3").due == "2026-07-02T09:00:00"


def test_delete_and_restore_task(doc):
    nxt, removed = delete_task(doc, "t1")
    assert removed.name == "Submit essay"
    assert nxt.find_task("t1") is None
    back = restore_task(nxt, removed)
    assert [t.id for t in back.tasks] == ["t2", "t3", "t1"]


def test_delete_unknown_task(doc):
    nxt, removed = delete_task(doc, "nope")
    assert removed is None
    assert nxt is doc


def test_toggle_task_done_leaves_subtasks(doc):
    nxt = toggle_task_done(doc, "t2")
    t = nxt.find_task("t2")
    assert t.done is True
    assert [s.done for s in t.subtasks] == [False, True]
    with pytest.raises(NotFoundError):
        toggle_task_done(doc, "nope")


def test_subtask_operations():
    items = add_subtask([], "Outline")
    items = add_subtask(items, "  Draft ")
    items = add_subtask(items, "   ")
    assert [s.text for s in items] == ["Outline", "Draft"]
    assert len({s.id for s in items}) == 2

    toggled = toggle_subtask(items, items[0].id)
    assert toggled[0].done is True
    assert items[0].done is False

    remaining = delete_subtask(toggled, items[0].id)
    assert [s.text for s in remaining] == ["Draft"]


def test_subtasks_saved_with_task():
    subs = [Subtask(id="a", text="One"), Subtask(id="b", text="Two", done=True)]
    nxt = add_or_update_task(Document(), "Essay", "2026-07-04T10:00:00", subtasks=subs)
    assert nxt.tasks[0].subtask_progress() == (1, 2)
    subs[0].text = "changed"
    assert nxt.tasks[0].subtasks[0].text == "One"


def test_filter_tasks_order_and_status(doc):
    now = datetime(2026, 7, 3, 20, 0)
    assert [t.id for t in filter_tasks(doc, now)] == ["t2", "t1", "t3"]
    assert [t.id for t in filter_tasks(doc, now, status="overdue")] == ["t2"]
    assert [t.id for t in filter_tasks(doc, now, status="open")] == ["t1"]
    assert [t.id for t in filter_tasks(doc, now, status="done")] == ["t3"]


def test_filter_tasks_search_and_tier(doc):
    now = datetime(2026, 7, 1, 8, 0)
    assert [t.id for t in filter_tasks(doc, now, search="ESSAY")] == ["t1"]
    assert [t.id for t in filter_tasks(doc, now, tier="1")] == ["t2"]
    with pytest.raises(ValidationError):
        filter_tasks(doc, now, status="later")


def test_subtask_ids_must_be_unique():
    subs = [Subtask(id="s", text="One"), Subtask(id="s", text="Two")]
    with pytest.raises(ValidationError, match="Duplicate subtask id"):
        add_or_update_task(Document(), "Essay", "2026-07-04T10:00:00", subtasks=subs)


def test_subtask_ids_must_not_be_blank(doc):
    with pytest.raises(ValidationError):
        add_or_update_task(doc, "Essay", "2026-07-04T10:00:00", subtasks=[Subtask(id="", text="One")], edit_id="t1")
    assert doc.find_task("t1").subtasks == []
