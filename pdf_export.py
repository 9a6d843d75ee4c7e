from __future__ import annotations
from datetime import date, datetime
from io import BytesIO
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from models import StudyPlan
from planner import tasks_for_range


def plan_to_pdf(
    plan: StudyPlan,
    start: date | datetime,
    end: date | datetime,
    progress: dict,
) -> bytes:
    if isinstance(start, datetime):
        start = start.date()
    if isinstance(end, datetime):
        end = end.date()

    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=letter,
        leftMargin=40,
        rightMargin=40,
        topMargin=40,
        bottomMargin=40,
    )
    styles = getSampleStyleSheet()
    elems = []

    elems.append(Paragraph(f"Study Plan: {start.isoformat()} - {end.isoformat()}", styles["Title"]))
    elems.append(Spacer(1, 10))
    elems.append(Paragraph(
        f"Overall completion: {progress['percent']}% "
        f"({progress['completed_hours']}h of {progress['total_hours']}h) | "
        f"Completed: {progress['completed']} | Working: {progress['working']} | "
        f"Pending: {progress['pending']} | Skipped: {progress['skipped']}",
        styles["Normal"],
    ))
    elems.append(Spacer(1, 12))

    days = tasks_for_range(plan, start, end)
    if not days:
        elems.append(Paragraph("No tasks scheduled for this period.", styles["Normal"]))

    for day, tasks in days:
        elems.append(Paragraph(day.strftime("%A, %Y-%m-%d"), styles["Heading3"]))
        table_data = [["Subject", "Hours", "Priority", "Difficulty", "Status", "Notes"]]
        total = 0.0
        for task in tasks:
            total += task.hours
            note = f"from {task.original_date.isoformat()}" if task.original_date else ""
            table_data.append([
                task.subject_name,
                f"{task.hours:.1f}",
                task.priority,
                task.difficulty,
                task.status,
                note,
            ])
        table_data.append(["Total", f"{total:.1f}", "", "", "", ""])

        table = Table(table_data, hAlign="LEFT", colWidths=[150, 50, 60, 60, 70, 90])
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("BACKGROUND", (0, -1), (-1, -1), colors.whitesmoke),
            ("ALIGN", (1, 1), (1, -1), "RIGHT"),
        ]))
        elems.append(table)
        elems.append(Spacer(1, 8))

    doc.build(elems)
    return buf.getvalue()
