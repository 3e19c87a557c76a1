"""Tests for whattodo/journal.py, whattodo/classes.py and whattodo/preferences.py"""

import pytest

from whattodo.classes import add_or_update_class, classes_on, delete_class, has_class_on
from whattodo.errors import NotFoundError, ValidationError
from whattodo.journal import get_journal, save_journal
from whattodo.preferences import adjust_timer_preset, days_left, set_target_date


# ── Journal ───────────────────────────────────────────────────


def test_save_journal_trims(doc):
    nxt = save_journal(doc, "2026-07-03", "  Good run today.\n")
    assert get_journal(nxt, "2026-07-03") == "Good run today."
    assert get_journal(doc, "2026-07-03") == ""


def test_blank_journal_deletes_entry(doc):
    nxt = save_journal(doc, "2026-07-02", "   ")
    assert "2026-07-02" not in nxt.journal
    assert nxt.to_dict()["journal"] == {}


def test_journal_bad_date(doc):
    with pytest.raises(ValidationError):
        save_journal(doc, "yesterday", "text")


# ── Classes ───────────────────────────────────────────────────


def test_add_class(doc):
    nxt = add_or_update_class(doc, "Calculus", [4, 2, 2], code="MAC2311", time="10:40 AM")
    c = nxt.classes[-1]
    assert c.days == [2, 4]
    assert c.code == "MAC2311"
    assert "color" not in c.to_dict()


def test_class_names_may_repeat(doc):
    nxt = add_or_update_class(doc, "Data Structures", [5])
    assert len(nxt.classes) == 2


def test_class_validation(doc):
    with pytest.raises(ValidationError):
        add_or_update_class(doc, "", [1])
    with pytest.raises(ValidationError):
        add_or_update_class(doc, "Calculus", [])


def test_edit_class_replaces(doc):
    nxt = add_or_update_class(doc, "DS II", [2], color="#ff0000", edit_id="c1")
    assert len(nxt.classes) == 1
    assert nxt.classes[0].id == "c1"
    assert nxt.classes[0].to_dict()["color"] == "#ff0000"
    with pytest.raises(NotFoundError):
        add_or_update_class(doc, "DS II", [2], edit_id="nope")


def test_delete_class(doc):
    assert delete_class(doc, "c1").classes == []


def test_classes_on_weekday(doc):
    assert has_class_on(doc, 1)
    assert not has_class_on(doc, 5)
    today, others = classes_on(doc, 5)
    assert today == []
    assert [c.id for c in others] == ["c1"]


# ── Preferences ───────────────────────────────────────────────


def test_set_target_date(doc):
    nxt = set_target_date(doc, "2026-12-31")
    assert nxt.target_date == "2026-12-31"
    with pytest.raises(ValidationError, match="Please select a goal date"):
        set_target_date(doc, "")


def test_days_left():
    assert days_left("2026-08-31", "2026-07-03") == 59
    assert days_left("2026-07-01", "2026-07-03") == -2


def test_timer_presets_clamp(doc):
    nxt = adjust_timer_preset(doc, "focus", 5)
    assert nxt.timer_presets.focus == 30
    nxt = adjust_timer_preset(nxt, "shortBreak", -10)
    assert nxt.timer_presets.short_break == 1
    with pytest.raises(ValidationError):
        adjust_timer_preset(doc, "longBreak", 1)
