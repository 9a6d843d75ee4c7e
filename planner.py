from __future__ import annotations
import calendar
import logging
import math
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Set, Tuple
from models import PlannerSettings, StudyPlan, StudyTask, Subject, TaskStatus, ViewMode

logger = logging.getLogger(__name__)

# Remaining hours below this count as fully scheduled
_EPSILON = 1e-9


def _round_hours(hours: float) -> float:
    # half-up to one decimal
    return math.floor(hours * 10 + 0.5) / 10


def _day_key(d: date) -> str:
    return d.isoformat()


def days_until(exam_date: date, today: date | None = None) -> int:
    today = today or date.today()
    return (exam_date - today).days


def total_hours_for(subject: Subject, settings: PlannerSettings) -> float:
    return (
        settings.difficulty_weights[subject.difficulty]
        * settings.priority_weights[subject.priority]
        * settings.base_hours
    )


def generate_study_plan(
    subjects: List[Subject],
    settings: PlannerSettings | None = None,
    today: date | None = None,
) -> StudyPlan:
    """
    Spread each subject's hour budget evenly over the days left before its exam.
    Sessions never drop below settings.min_session_hours, so small budgets
    finish ahead of the exam.
    """
    settings = settings or PlannerSettings()
    today = today or date.today()
    plan: StudyPlan = {}

    for s in subjects:
        days_left = max(1, (s.exam_date - today).days)
        total_hours = total_hours_for(s, settings)
        hours_per_day = max(settings.min_session_hours, total_hours / days_left)

        remaining = total_hours
        cursor = today
        while remaining > _EPSILON and cursor <= s.exam_date:
            session = min(hours_per_day, remaining)
            if _round_hours(session) <= 0:
                break
            key = _day_key(cursor)
            plan.setdefault(key, []).append(StudyTask(
                id=f"{s.id}-{key}",
                subject_id=s.id,
                subject_name=s.name,
                day=cursor,
                hours=_round_hours(session),
                status="pending",
                priority=s.priority,
                difficulty=s.difficulty,
            ))
            remaining -= session
            cursor = cursor + timedelta(days=1)

    logger.info(
        "Generated plan for %d subject(s) across %d day(s)", len(subjects), len(plan)
    )
    return plan


def _source_key(task: StudyTask) -> str:
    # Clones of one subject can share an id and a day, never also an original date
    key = f"{task.id}@{task.day.isoformat()}"
    if task.original_date:
        key += f"<{task.original_date.isoformat()}"
    return key


def _clone_index(plan: StudyPlan) -> Tuple[Set[str], Set[Tuple[str, date]]]:
    """
    Sources that already have a clone. Clones saved before rescheduled_from
    existed can only be matched by subject and original date.
    """
    sources: Set[str] = set()
    legacy: Set[Tuple[str, date]] = set()
    for tasks in plan.values():
        for t in tasks:
            if t.rescheduled_from:
                sources.add(t.rescheduled_from)
            elif t.original_date:
                legacy.add((t.subject_id, t.original_date))
    return sources, legacy


def reschedule_skipped_tasks(
    plan: StudyPlan,
    subjects: List[Subject],
    settings: PlannerSettings | None = None,
    today: date | None = None,
) -> StudyPlan:
    """
    Copy overdue skipped tasks forward onto the first day between today and
    the exam that is still under the daily capacity. The skipped originals
    stay where they are; the input plan is left untouched.
    """
    settings = settings or PlannerSettings()
    today = today or date.today()
    new_plan: StudyPlan = {key: list(tasks) for key, tasks in plan.items()}
    by_id: Dict[str, Subject] = {s.id: s for s in subjects}
    placed = 0
    cloned, legacy_clones = _clone_index(new_plan)

    for key in list(new_plan.keys()):
        for task in list(new_plan[key]):
            if task.status != "skipped" or task.day >= today:
                continue
            subject = by_id.get(task.subject_id)
            if subject is None:
                logger.debug("Subject %s is gone, leaving %s in place", task.subject_id, task.id)
                continue
            source = _source_key(task)
            if source in cloned or (task.subject_id, task.day) in legacy_clones:
                continue

            cursor = today
            moved = False
            while cursor <= subject.exam_date:
                target = _day_key(cursor)
                day_total = sum(t.hours for t in new_plan.get(target, []))
                if day_total < settings.daily_capacity_hours:
                    new_plan.setdefault(target, []).append(task.model_copy(update={
                        "id": f"{task.subject_id}-{target}-rescheduled",
                        "day": cursor,
                        "status": "pending",
                        "original_date": task.day,
                        "rescheduled_from": source,
                    }))
                    cloned.add(source)
                    moved = True
                    placed += 1
                    break
                cursor = cursor + timedelta(days=1)

            if not moved:
                logger.debug("No capacity left before %s for %s", subject.exam_date, task.id)

    if placed:
        logger.info("Rescheduled %d skipped task(s)", placed)
    return new_plan


def apply_status_change(
    plan: StudyPlan,
    task_id: str,
    status: TaskStatus,
    subjects: List[Subject],
    settings: PlannerSettings | None = None,
    today: date | None = None,
) -> StudyPlan:
    found = False
    updated: StudyPlan = {}
    for key, tasks in plan.items():
        bucket = []
        for t in tasks:
            if t.id == task_id:
                found = True
                t = t.model_copy(update={"status": status})
            bucket.append(t)
        updated[key] = bucket

    if not found:
        logger.warning("Status change for unknown task %s ignored", task_id)
        return updated
    if status == "skipped":
        return reschedule_skipped_tasks(updated, subjects, settings, today)
    return updated


def get_date_range_for_view(
    view_mode: ViewMode,
    reference: date | datetime | None = None,
) -> Tuple[datetime, datetime]:
    """
    Inclusive (start, end) bounds of the view containing reference.
    Weeks start on Sunday.
    """
    if reference is None:
        reference = date.today()
    if isinstance(reference, datetime):
        reference = reference.date()

    if view_mode == "daily":
        first = last = reference
    elif view_mode == "weekly":
        # date.weekday() is 0 for Monday
        first = reference - timedelta(days=(reference.weekday() + 1) % 7)
        last = first + timedelta(days=6)
    elif view_mode == "monthly":
        first = reference.replace(day=1)
        last = reference.replace(day=calendar.monthrange(reference.year, reference.month)[1])
    else:
        raise ValueError(f"Unknown view mode: {view_mode!r}")

    start = datetime.combine(first, time.min)
    end = datetime.combine(last, time(23, 59, 59, 999000))
    return start, end


def dates_in_range(start: date | datetime, end: date | datetime) -> List[date]:
    if isinstance(start, datetime):
        start = start.date()
    if isinstance(end, datetime):
        end = end.date()
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def shift_reference_date(view_mode: ViewMode, reference: date, direction: int) -> date:
    """Move the reference one view back (direction < 0) or forward."""
    step = 1 if direction > 0 else -1
    if view_mode == "daily":
        return reference + timedelta(days=step)
    if view_mode == "weekly":
        return reference + timedelta(days=7 * step)
    if view_mode == "monthly":
        month_index = reference.year * 12 + (reference.month - 1) + step
        year, month = divmod(month_index, 12)
        month += 1
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, min(reference.day, last_day))
    raise ValueError(f"Unknown view mode: {view_mode!r}")


def tasks_for_range(
    plan: StudyPlan,
    start: date | datetime,
    end: date | datetime,
) -> List[Tuple[date, List[StudyTask]]]:
    out = []
    for d in dates_in_range(start, end):
        tasks = plan.get(_day_key(d), [])
        if tasks:
            out.append((d, tasks))
    return out


def compute_progress(plan: StudyPlan) -> dict:
    all_tasks = [t for tasks in plan.values() for t in tasks]
    counts = {status: 0 for status in ("pending", "working", "completed", "skipped")}
    for t in all_tasks:
        counts[t.status] += 1

    total_hours = sum(t.hours for t in all_tasks)
    completed_hours = sum(t.hours for t in all_tasks if t.status == "completed")
    percent = (completed_hours / total_hours * 100) if total_hours > 0 else 0.0
    return {
        **counts,
        "total_tasks": len(all_tasks),
        "total_hours": round(total_hours, 1),
        "completed_hours": round(completed_hours, 1),
        "percent": round(percent, 1),
    }
