from __future__ import annotations
import logging
import re
import shutil
from pathlib import Path
from typing import Any, List
from pydantic import TypeAdapter, ValidationError
from models import AppState, PlannerSettings, StudyPlan, Subject
from paths import get_data_dir
from storage import KeyValueStore, StateLoadError, load_json, save_json

logger = logging.getLogger(__name__)

SUBJECTS_KEY = "study-planner-subjects"
PLAN_KEY = "study-planner-plan"
SETTINGS_KEY = "study-planner-settings"

_subjects_adapter = TypeAdapter(List[Subject])
_plan_adapter = TypeAdapter(StudyPlan)


def _profiles_file() -> Path:
    return get_data_dir() / "profiles.json"


def _profiles_root() -> Path:
    return get_data_dir() / "profiles"


def _sanitize_profile_name(name: str) -> str:
    safe = re.sub(r"[^A-Za-z0-9_-]+", "_", name.strip())
    safe = safe.strip("_") or "default"
    return safe[:80]


def _profile_dir(profile_name: str) -> Path:
    return _profiles_root() / _sanitize_profile_name(profile_name)


def _save_profiles_list(profiles: List[str]) -> None:
    save_json(_profiles_file(), {"profiles": profiles})


def _validate(key: str, adapter: TypeAdapter, raw: Any) -> Any:
    try:
        return adapter.validate_python(raw)
    except ValidationError as e:
        logger.error("Stored %s failed validation: %s", key, e)
        raise StateLoadError(key, f"{e.error_count()} validation error(s)") from e


def profile_store(profile_name: str) -> KeyValueStore:
    return KeyValueStore(_profile_dir(profile_name))


def load_subjects(store: KeyValueStore) -> List[Subject]:
    return _validate(SUBJECTS_KEY, _subjects_adapter, store.get(SUBJECTS_KEY, []))


def load_plan(store: KeyValueStore) -> StudyPlan:
    plan = _validate(PLAN_KEY, _plan_adapter, store.get(PLAN_KEY, {}))
    for key, tasks in plan.items():
        for t in tasks:
            if t.day.isoformat() != key:
                raise StateLoadError(PLAN_KEY, f"task {t.id} dated {t.day} stored under {key}")
    return plan


def load_settings(store: KeyValueStore) -> PlannerSettings:
    raw = store.get(SETTINGS_KEY, {})
    try:
        return PlannerSettings.model_validate(raw)
    except ValidationError as e:
        logger.error("Stored settings failed validation: %s", e)
        raise StateLoadError(SETTINGS_KEY, f"{e.error_count()} validation error(s)") from e


def save_subjects(store: KeyValueStore, subjects: List[Subject]) -> None:
    store.set(SUBJECTS_KEY, _subjects_adapter.dump_python(subjects, mode="json"))


def save_plan(store: KeyValueStore, plan: StudyPlan) -> None:
    store.set(PLAN_KEY, _plan_adapter.dump_python(plan, mode="json"))


def save_settings(store: KeyValueStore, settings: PlannerSettings) -> None:
    store.set(SETTINGS_KEY, settings.model_dump(mode="json"))


def list_profiles() -> List[str]:
    data = load_json(_profiles_file(), {"profiles": []})
    profiles: List[str] = [p for p in data.get("profiles", []) if isinstance(p, str)]

    # Discover any profile directories not in the list
    known = {_sanitize_profile_name(p) for p in profiles}
    root = _profiles_root()
    discovered = []
    if root.exists():
        for path in sorted(root.iterdir()):
            if path.is_dir() and path.name not in known:
                discovered.append(path.name)

    combined = []
    for name in profiles + discovered:
        if name and name not in combined:
            combined.append(name)

    if not combined:
        combined = ["default"]
        _save_profiles_list(combined)

    return combined


def load_profile(profile_name: str) -> AppState:
    """
    Read one profile's subjects, plan and settings.
    Raises StateLoadError when any of them is malformed.
    """
    profiles = list_profiles()
    if profile_name not in profiles:
        profiles.append(profile_name)
        _save_profiles_list(profiles)

    store = profile_store(profile_name)
    return AppState(
        subjects=load_subjects(store),
        plan=load_plan(store),
        settings=load_settings(store),
        profile=profile_name,
    )


def save_profile(profile_name: str, state: AppState) -> None:
    state.profile = profile_name
    # Register the name before its directory exists so it is not also discovered
    profiles = list_profiles()
    if profile_name not in profiles:
        profiles.append(profile_name)
        _save_profiles_list(profiles)
    store = profile_store(profile_name)
    save_subjects(store, state.subjects)
    save_plan(store, state.plan)
    save_settings(store, state.settings)


def create_profile(profile_name: str) -> AppState:
    name = profile_name.strip()
    if not name:
        raise ValueError("Profile name cannot be empty.")

    profiles = list_profiles()
    if any(p.lower() == name.lower() for p in profiles):
        raise ValueError("Profile already exists.")

    if _profile_dir(name).exists():
        raise ValueError("A profile with that name already exists on disk.")

    state = AppState(profile=name)
    save_profile(name, state)
    logger.info("Created profile %s", name)
    return state


def delete_profile(profile_name: str) -> None:
    shutil.rmtree(_profile_dir(profile_name), ignore_errors=True)

    profiles = [p for p in list_profiles() if p != profile_name]
    if not profiles:
        profiles = ["default"]
        save_profile("default", AppState(profile="default"))
    _save_profiles_list(profiles)
    logger.info("Deleted profile %s", profile_name)
