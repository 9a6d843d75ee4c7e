"""
State changes triggered from the UI. Each one updates the in-memory AppState
and overwrites the affected collections in the profile's store.
"""
from __future__ import annotations
import logging
from datetime import date
from uuid import uuid4
from models import AppState, Difficulty, PlannerSettings, Priority, Subject, TaskStatus
from planner import apply_status_change, generate_study_plan
from profiles import save_plan, save_settings, save_subjects
from storage import KeyValueStore

logger = logging.getLogger(__name__)


def _regenerate(state: AppState, store: KeyValueStore, today: date | None) -> None:
    state.plan = generate_study_plan(state.subjects, state.settings, today)
    save_subjects(store, state.subjects)
    save_plan(store, state.plan)


def add_subject(
    state: AppState,
    store: KeyValueStore,
    name: str,
    priority: Priority,
    difficulty: Difficulty,
    exam_date: date,
    today: date | None = None,
) -> Subject:
    today = today or date.today()
    name = name.strip()
    if not name:
        raise ValueError("Subject name is required.")
    if exam_date < today:
        raise ValueError("Exam date cannot be in the past.")

    subject = Subject(
        id=str(uuid4()),
        name=name,
        priority=priority,
        difficulty=difficulty,
        exam_date=exam_date,
    )
    state.subjects = state.subjects + [subject]
    _regenerate(state, store, today)
    logger.info("Added subject %s (exam %s)", subject.name, subject.exam_date)
    return subject


def delete_subject(
    state: AppState,
    store: KeyValueStore,
    subject_id: str,
    today: date | None = None,
) -> None:
    state.subjects = [s for s in state.subjects if s.id != subject_id]
    _regenerate(state, store, today)
    logger.info("Deleted subject %s", subject_id)


def change_task_status(
    state: AppState,
    store: KeyValueStore,
    task_id: str,
    status: TaskStatus,
    today: date | None = None,
) -> None:
    state.plan = apply_status_change(
        state.plan, task_id, status, state.subjects, state.settings, today
    )
    save_plan(store, state.plan)


def regenerate_plan(state: AppState, store: KeyValueStore, today: date | None = None) -> None:
    _regenerate(state, store, today)
    logger.info("Plan regenerated for %d subject(s)", len(state.subjects))


def update_settings(state: AppState, store: KeyValueStore, settings: PlannerSettings) -> None:
    # Takes effect on the next regeneration
    state.settings = settings
    save_settings(store, settings)
