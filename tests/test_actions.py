from __future__ import annotations
from datetime import timedelta

import pytest

from actions import add_subject, change_task_status, delete_subject, regenerate_plan, update_settings
from models import AppState, PlannerSettings
from profiles import load_profile, profile_store


@pytest.fixture
def state():
    return AppState(profile="default")


@pytest.fixture
def store():
    return profile_store("default")


def test_add_subject_regenerates_and_persists(state, store, today):
    subject = add_subject(state, store, "  Chemistry ", "high", "hard", today + timedelta(days=9), today=today)

    assert subject.name == "Chemistry"
    assert len(state.plan) == 9
    loaded = load_profile("default")
    assert loaded.subjects == [subject]
    assert loaded.plan == state.plan


def test_add_subject_rejects_bad_input(state, store, today):
    with pytest.raises(ValueError):
        add_subject(state, store, "   ", "low", "easy", today, today=today)
    with pytest.raises(ValueError):
        add_subject(state, store, "Art", "low", "easy", today - timedelta(days=1), today=today)
    assert state.subjects == []


def test_delete_subject_drops_its_tasks(state, store, today):
    keep = add_subject(state, store, "Math", "medium", "medium", today + timedelta(days=5), today=today)
    gone = add_subject(state, store, "Biology", "high", "easy", today + timedelta(days=20), today=today)

    delete_subject(state, store, gone.id, today=today)

    remaining_ids = {t.subject_id for tasks in state.plan.values() for t in tasks}
    assert remaining_ids == {keep.id}
    assert load_profile("default").subjects == [keep]


def test_delete_resets_statuses_by_regenerating(state, store, today):
    math = add_subject(state, store, "Math", "medium", "medium", today + timedelta(days=5), today=today)
    other = add_subject(state, store, "Art", "low", "easy", today + timedelta(days=5), today=today)
    change_task_status(state, store, f"{math.id}-{today.isoformat()}", "completed", today=today)

    delete_subject(state, store, other.id, today=today)

    assert all(t.status == "pending" for tasks in state.plan.values() for t in tasks)


def test_change_task_status_skips_and_persists(state, store, today):
    yesterday = today - timedelta(days=1)
    subject = add_subject(state, store, "Math", "low", "easy", today + timedelta(days=3), today=yesterday)
    task_id = f"{subject.id}-{yesterday.isoformat()}"

    change_task_status(state, store, task_id, "skipped", today=today)

    clones = [t for t in state.plan[today.isoformat()] if t.original_date == yesterday]
    assert len(clones) == 1
    assert clones[0].status == "pending"
    assert load_profile("default").plan == state.plan


def test_update_settings_applies_on_regeneration(state, store, today):
    add_subject(state, store, "Math", "low", "easy", today + timedelta(days=100), today=today)
    update_settings(state, store, PlannerSettings(base_hours=5))

    assert load_profile("default").settings.base_hours == 5
    assert sum(t.hours for tasks in state.plan.values() for t in tasks) == 10

    regenerate_plan(state, store, today=today)

    assert sum(t.hours for tasks in state.plan.values() for t in tasks) == 5
