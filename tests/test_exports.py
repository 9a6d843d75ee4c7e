from __future__ import annotations
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from icalendar import Calendar

from calendar_export import plan_to_ics
from conftest import make_subject
from models import PlannerSettings
from pdf_export import plan_to_pdf
from planner import compute_progress, generate_study_plan, get_date_range_for_view, reschedule_skipped_tasks


WARSAW = ZoneInfo("Europe/Warsaw")


def _events(ics_bytes):
    return [c for c in Calendar.from_ical(ics_bytes).walk() if c.name == "VEVENT"]


def test_ics_stacks_sessions_from_preferred_hour(today, monkeypatch):
    monkeypatch.setenv("STUDY_PLANNER_TZ", "Europe/Warsaw")
    subjects = [
        make_subject(sid="a", name="Math", priority="high", difficulty="hard", days_out=9),
        make_subject(sid="b", name="Art", priority="low", difficulty="easy", days_out=100),
    ]
    plan = generate_study_plan(subjects, today=today)
    start, end = get_date_range_for_view("daily", today)

    events = _events(plan_to_ics(plan, start, end, PlannerSettings(preferred_start_hour=8)))

    assert [str(e["SUMMARY"]) for e in events] == ["Study: Math", "Study: Art"]
    assert events[0].decoded("DTSTART") == datetime.combine(today, time(8), tzinfo=WARSAW)
    assert events[0].decoded("DTEND") == events[1].decoded("DTSTART")
    assert events[1].decoded("DTEND") - events[1].decoded("DTSTART") == timedelta(minutes=30)


def test_ics_only_covers_requested_range(today):
    plan = generate_study_plan([make_subject(days_out=30)], today=today)
    start, end = get_date_range_for_view("weekly", today)

    events = _events(plan_to_ics(plan, start, end, PlannerSettings()))

    # Wednesday through Saturday of the current week
    assert len(events) == 4


def test_ics_mentions_reschedule(today):
    yesterday = today - timedelta(days=1)
    subject = make_subject(priority="low", difficulty="easy", days_out=5, today=yesterday)
    plan = generate_study_plan([subject], today=yesterday)
    plan[yesterday.isoformat()] = [
        t.model_copy(update={"status": "skipped"}) for t in plan[yesterday.isoformat()]
    ]
    plan = reschedule_skipped_tasks(plan, [subject], today=today)
    start, end = get_date_range_for_view("daily", today)

    events = _events(plan_to_ics(plan, start, end, PlannerSettings()))

    assert any(f"rescheduled from {yesterday.isoformat()}" in str(e["DESCRIPTION"]) for e in events)


def test_pdf_export_produces_document(today):
    plan = generate_study_plan([make_subject(days_out=10)], today=today)
    start, end = get_date_range_for_view("monthly", today)

    pdf = plan_to_pdf(plan, start, end, compute_progress(plan))

    assert pdf.startswith(b"%PDF")


def test_pdf_export_empty_range(today):
    start, end = get_date_range_for_view("daily", today)

    pdf = plan_to_pdf({}, start, end, compute_progress({}))

    assert pdf.startswith(b"%PDF")


def test_ics_sessions_never_run_past_midnight(today, monkeypatch):
    monkeypatch.setenv("STUDY_PLANNER_TZ", "Europe/Warsaw")
    plan = generate_study_plan(
        [make_subject(priority="high", difficulty="hard", days_out=9)], today=today
    )
    start, end = get_date_range_for_view("daily", today)

    events = _events(plan_to_ics(plan, start, end, PlannerSettings(preferred_start_hour=18)))

    assert events[0].decoded("DTSTART") == datetime.combine(today, time(14), tzinfo=WARSAW)
    assert events[0].decoded("DTEND") == datetime.combine(today + timedelta(days=1), time.min, tzinfo=WARSAW)


def test_ics_clamps_sessions_longer_than_a_day(today, monkeypatch):
    monkeypatch.setenv("STUDY_PLANNER_TZ", "Europe/Warsaw")
    plan = generate_study_plan(
        [make_subject(priority="high", difficulty="hard", days_out=0)], today=today
    )
    start, end = get_date_range_for_view("daily", today)

    events = _events(plan_to_ics(plan, start, end, PlannerSettings()))

    assert events[0].decoded("DTSTART").time() == time.min
    assert events[0].decoded("DTEND") - events[0].decoded("DTSTART") == timedelta(days=1)


def test_ics_times_are_timezone_aware_without_override(today, monkeypatch):
    monkeypatch.delenv("STUDY_PLANNER_TZ", raising=False)
    plan = generate_study_plan([make_subject(days_out=3)], today=today)
    start, end = get_date_range_for_view("daily", today)

    events = _events(plan_to_ics(plan, start, end, PlannerSettings()))

    assert events[0].decoded("DTSTART").utcoffset() == timedelta(0)
