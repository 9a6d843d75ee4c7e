from __future__ import annotations
import logging
import streamlit as st
import pandas as pd
from datetime import date

from actions import (
    add_subject,
    change_task_status,
    delete_subject,
    regenerate_plan,
    update_settings,
)
from calendar_export import plan_to_ics
from models import AppState, DIFFICULTIES, PRIORITIES, TASK_STATUSES, VIEW_MODES, PlannerSettings, Subject
from paths import get_log_level
from pdf_export import plan_to_pdf
from planner import (
    compute_progress,
    dates_in_range,
    days_until,
    get_date_range_for_view,
    shift_reference_date,
)
from profiles import (
    create_profile,
    delete_profile,
    list_profiles,
    load_profile,
    profile_store,
)
from storage import StateLoadError


logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("study_planner")

STATUS_ICONS = {"pending": "🕒", "working": "▶️", "completed": "✅", "skipped": "⏭️"}
PRIORITY_BADGES = {"high": "🔴 high", "medium": "🟠 medium", "low": "🟢 low"}

st.set_page_config(page_title="Study Planner", page_icon="📚", layout="wide")


def _load_or_stop(name: str) -> AppState:
    try:
        return load_profile(name)
    except StateLoadError as e:
        logger.error("Profile %s could not be loaded: %s", name, e)
        st.error(f"Stored data for profile '{name}' is damaged: {e}")
        st.stop()


def _ensure_session_state() -> list[str]:
    profiles = list_profiles()

    if "profile_name" not in st.session_state:
        st.session_state.profile_name = profiles[0]

    if st.session_state.profile_name not in profiles:
        st.session_state.profile_name = profiles[0]

    if "state" not in st.session_state:
        st.session_state.state = _load_or_stop(st.session_state.profile_name)

    if "view_mode" not in st.session_state:
        st.session_state.view_mode = "daily"
    if "reference_date" not in st.session_state:
        st.session_state.reference_date = date.today()

    return profiles


def _switch_profile(name: str) -> None:
    st.session_state.profile_name = name
    st.session_state.state = _load_or_stop(name)


def _queue_toast(message: str) -> None:
    st.session_state.toast_message = message


def _flush_toast() -> None:
    message = st.session_state.pop("toast_message", None)
    if message:
        st.toast(message)


def render_progress_summary(state: AppState) -> None:
    stats = compute_progress(state.plan)
    st.subheader("Your progress")
    st.progress(min(1.0, stats["percent"] / 100), text=f"Overall completion {stats['percent']:.1f}%")
    a, b, c, d = st.columns(4)
    a.metric("Completed", stats["completed"])
    b.metric("Working", stats["working"])
    c.metric("Pending", stats["pending"])
    d.metric("Hours done", f"{stats['completed_hours']:.1f}h")


@st.dialog("Delete subject?")
def _confirm_subject_delete(target: Subject) -> None:
    st.write(f"Delete '{target.name}'? The plan will be regenerated.")
    if st.button("Delete", type="primary"):
        delete_subject(
            st.session_state.state,
            profile_store(st.session_state.profile_name),
            target.id,
        )
        _queue_toast("Subject deleted.")
        st.rerun()


def render_subjects(state: AppState) -> None:
    st.header("Subjects")

    st.subheader("Add subject")
    with st.form("add_subject_form", clear_on_submit=True):
        name = st.text_input("Subject name", placeholder="e.g. Mathematics, Physics...")
        col1, col2, col3 = st.columns(3)
        with col1:
            priority = st.selectbox("Priority", PRIORITIES, index=1)
        with col2:
            difficulty = st.selectbox("Difficulty", DIFFICULTIES, index=1)
        with col3:
            exam_date = st.date_input("Exam date", value=date.today(), min_value=date.today())
        submitted = st.form_submit_button("Add subject", type="primary")
        if submitted:
            try:
                add_subject(state, store, name, priority, difficulty, exam_date)
            except ValueError as e:
                st.warning(str(e))
            else:
                _queue_toast("Subject added, plan regenerated.")
                st.rerun()

    st.divider()
    st.subheader("Your subjects")
    if not state.subjects:
        st.info("No subjects yet. Add one to generate your study plan.")
        return

    today = date.today()
    for subject in state.subjects:
        info_col, delete_col = st.columns([5, 1])
        with info_col:
            st.markdown(f"**{subject.name}**")
            st.caption(
                f"{PRIORITY_BADGES[subject.priority]} priority · {subject.difficulty} · "
                f"📅 {days_until(subject.exam_date, today)} days (exam {subject.exam_date.isoformat()})"
            )
        with delete_col:
            if st.button("Delete", key=f"delete_subject_{subject.id}"):
                _confirm_subject_delete(subject)


def _render_task(state: AppState, task, slot: str) -> None:
    with st.container(border=True):
        st.markdown(f"**{task.subject_name}** · {task.hours}h · {task.difficulty}")
        st.caption(f"{STATUS_ICONS[task.status]} {task.status} · {task.priority} priority")
        cols = st.columns(len(TASK_STATUSES))
        for col, status in zip(cols, TASK_STATUSES):
            if col.button(
                status.capitalize(),
                key=f"status_{slot}_{status}",
                type="primary" if task.status == status else "secondary",
                disabled=task.status == status,
            ):
                change_task_status(state, store, task.id, status)
                if status == "skipped":
                    _queue_toast("Task skipped. Overdue skips were moved forward.")
                st.rerun()
        if task.original_date:
            st.caption(f"Rescheduled from {task.original_date.strftime('%b %d, %Y')}")


def render_plan(state: AppState) -> None:
    st.header("Study plan")
    if state.subjects:
        render_progress_summary(state)
        st.divider()

    mode_col, nav_col = st.columns([1, 2])
    with mode_col:
        st.radio(
            "View",
            VIEW_MODES,
            horizontal=True,
            format_func=str.capitalize,
            key="view_mode",
        )
    view_mode = st.session_state.view_mode
    with nav_col:
        prev_col, today_col, next_col = st.columns(3)
        if prev_col.button("◀ Previous"):
            st.session_state.reference_date = shift_reference_date(
                view_mode, st.session_state.reference_date, -1
            )
        if today_col.button("Today"):
            st.session_state.reference_date = date.today()
        if next_col.button("Next ▶"):
            st.session_state.reference_date = shift_reference_date(
                view_mode, st.session_state.reference_date, 1
            )

    start, end = get_date_range_for_view(view_mode, st.session_state.reference_date)
    if view_mode == "daily":
        st.caption(start.strftime("%A, %b %d, %Y"))
    elif view_mode == "weekly":
        st.caption(f"{start.strftime('%b %d, %Y')} - {end.strftime('%b %d, %Y')}")
    else:
        st.caption(start.strftime("%B %Y"))

    today = date.today()
    days = dates_in_range(start, end)
    if not any(state.plan.get(d.isoformat()) for d in days):
        st.info("No tasks scheduled for this period. Add subjects to generate your study plan.")
        return

    for d in days:
        tasks = state.plan.get(d.isoformat(), [])
        if not tasks:
            continue
        total = sum(t.hours for t in tasks)
        label = d.strftime("%A, %b %d")
        if d == today:
            label += " · Today"
        st.subheader(label)
        st.caption(f"Total: {total:.1f}h")
        cols = st.columns(2)
        for i, task in enumerate(tasks):
            with cols[i % 2]:
                _render_task(state, task, f"{d.isoformat()}_{i}")

    st.divider()
    st.subheader("Exports")
    export_col1, export_col2 = st.columns(2)
    export_col1.download_button(
        "Download ICS",
        data=plan_to_ics(state.plan, start, end, state.settings),
        file_name=f"study_plan_{start.date().isoformat()}.ics",
        mime="text/calendar",
    )
    export_col2.download_button(
        "Download PDF",
        data=plan_to_pdf(state.plan, start, end, compute_progress(state.plan)),
        file_name=f"study_plan_{start.date().isoformat()}.pdf",
        mime="application/pdf",
    )


def render_progress(state: AppState) -> None:
    st.header("Progress")
    render_progress_summary(state)

    st.divider()
    st.subheader("By subject")
    all_tasks = [t for tasks in state.plan.values() for t in tasks]
    if not all_tasks:
        st.info("No tasks yet.")
        return

    df = pd.DataFrame([
        {
            "Subject": t.subject_name,
            "Hours": t.hours,
            "Done (h)": t.hours if t.status == "completed" else 0.0,
            "Skipped": int(t.status == "skipped"),
            "Sessions": 1,
        }
        for t in all_tasks
    ])
    summary = df.groupby("Subject", as_index=False).sum()
    summary["Completion %"] = (summary["Done (h)"] / summary["Hours"] * 100).round(1)
    st.dataframe(
        summary.sort_values(by="Completion %"),
        use_container_width=True,
        hide_index=True,
        column_config={
            "Hours": st.column_config.NumberColumn("Hours", format="%.1f"),
            "Done (h)": st.column_config.NumberColumn("Done (h)", format="%.1f"),
            "Completion %": st.column_config.NumberColumn("Completion %", format="%.1f%%"),
        },
    )


def render_settings(state: AppState) -> None:
    st.header("Settings")
    current = state.settings

    with st.form("settings_form"):
        base_hours = st.number_input(
            "Base hours per subject", min_value=1.0, max_value=100.0, value=current.base_hours, step=1.0
        )
        min_session = st.number_input(
            "Minimum session (hours)", min_value=0.1, max_value=8.0, value=current.min_session_hours, step=0.1
        )
        capacity = st.number_input(
            "Daily capacity for rescheduling (hours)",
            min_value=1.0, max_value=24.0, value=current.daily_capacity_hours, step=0.5,
        )
        start_hour = st.slider("Calendar export start hour", 0, 23, current.preferred_start_hour)
        st.caption("Weights multiply the base hours: difficulty x priority x base.")
        weight_cols = st.columns(3)
        difficulty_weights = {}
        priority_weights = {}
        for col, level, p_level in zip(weight_cols, DIFFICULTIES, PRIORITIES):
            with col:
                difficulty_weights[level] = st.number_input(
                    f"Difficulty: {level}", min_value=0.5, max_value=10.0,
                    value=current.difficulty_weights[level], step=0.5,
                )
                priority_weights[p_level] = st.number_input(
                    f"Priority: {p_level}", min_value=0.5, max_value=10.0,
                    value=current.priority_weights[p_level], step=0.5,
                )
        regenerate = st.checkbox("Regenerate plan now (resets task statuses)", value=False)
        if st.form_submit_button("Save settings", type="primary"):
            update_settings(state, store, PlannerSettings(
                base_hours=base_hours,
                min_session_hours=min_session,
                daily_capacity_hours=capacity,
                priority_weights=priority_weights,
                difficulty_weights=difficulty_weights,
                preferred_start_hour=start_hour,
            ))
            if regenerate:
                regenerate_plan(state, store)
            _queue_toast("Settings saved.")
            st.rerun()


profiles = _ensure_session_state()
state: AppState = st.session_state.state
current_profile = st.session_state.profile_name
store = profile_store(current_profile)

st.title("Study Planner")
st.caption("Smart scheduling for exam success.")
_flush_toast()

if "nav_page" not in st.session_state:
    st.session_state.nav_page = "Plan" if state.subjects else "Subjects"

with st.sidebar:
    st.header("Profile")
    profiles = list_profiles()
    selected_profile = st.selectbox(
        "Active profile",
        options=profiles,
        index=profiles.index(current_profile) if current_profile in profiles else 0,
    )
    if selected_profile != current_profile:
        _switch_profile(selected_profile)
        st.rerun()

    with st.form("create_profile_form"):
        new_profile_name = st.text_input("New profile name", placeholder="e.g. Semester A")
        if st.form_submit_button("Create profile"):
            try:
                new_state = create_profile(new_profile_name)
            except ValueError as e:
                st.error(str(e))
            else:
                _queue_toast(f"Profile '{new_profile_name.strip()}' created.")
                st.session_state.profile_name = new_profile_name.strip()
                st.session_state.state = new_state
                st.rerun()

    if st.button("Delete profile", disabled=len(profiles) <= 1):

        @st.dialog("Delete profile?")
        def _confirm_delete_profile() -> None:
            st.write(f"Delete profile '{current_profile}' and its data?")
            if st.button("Delete", type="primary"):
                delete_profile(current_profile)
                remaining = list_profiles()
                _switch_profile(remaining[0])
                _queue_toast("Profile deleted.")
                st.rerun()

        _confirm_delete_profile()

    st.divider()
    st.header("Navigate")
    pages = ["Plan", "Subjects", "Progress", "Settings"]
    page = st.radio("Page", pages, key="nav_page", label_visibility="collapsed")

if page == "Plan":
    render_plan(state)
elif page == "Subjects":
    render_subjects(state)
elif page == "Progress":
    render_progress(state)
elif page == "Settings":
    render_settings(state)
