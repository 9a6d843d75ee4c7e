from __future__ import annotations
from datetime import date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo
from icalendar import Calendar, Event as IcsEvent
from models import PlannerSettings, StudyPlan
from paths import get_timezone
from planner import tasks_for_range


def _localize(wall: datetime, tz: tzinfo | None) -> datetime:
    if tz is not None:
        return wall.replace(tzinfo=tz)
    # naive astimezone() reads the machine's local offset for that date
    return wall.astimezone().astimezone(ZoneInfo("UTC"))


def plan_to_ics(
    plan: StudyPlan,
    start: date | datetime,
    end: date | datetime,
    settings: PlannerSettings,
) -> bytes:
    """
    Export the tasks between start and end as calendar events. Each day's
    sessions are stacked back to back from the preferred start hour, moved
    earlier when they would run past midnight.
    """
    cal = Calendar()
    cal.add("PRODID", "-//Study Planner//Local//")
    cal.add("version", "2.0")
    cal.add("X-WR-CALNAME", "Study Plan")
    tz = get_timezone()

    for day, tasks in tasks_for_range(plan, start, end):
        day_start = datetime.combine(day, time.min)
        day_end = day_start + timedelta(days=1)
        total = timedelta(minutes=sum(round(t.hours * 60) for t in tasks))
        preferred = datetime.combine(day, time(hour=settings.preferred_start_hour))
        cursor = max(day_start, min(preferred, day_end - total))

        for task in tasks:
            finish = min(day_end, cursor + timedelta(minutes=round(task.hours * 60)))
            if finish <= cursor:
                break
            event = IcsEvent()
            event.add("uid", f"{task.id}@study-planner")
            event.add("summary", f"Study: {task.subject_name}")
            event.add("dtstart", _localize(cursor, tz))
            event.add("dtend", _localize(finish, tz))
            desc = f"{task.hours}h planned, {task.priority} priority, {task.difficulty}. Status: {task.status}"
            if task.original_date:
                desc += f" (rescheduled from {task.original_date.isoformat()})"
            event.add("description", desc + ".")
            cal.add_component(event)
            cursor = finish

    return cal.to_ical()
