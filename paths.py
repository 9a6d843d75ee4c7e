from __future__ import annotations
import os
import sys
from datetime import tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo


APP_NAME = "StudyPlanner"


def get_data_dir() -> Path:
    """
    Resolve the directory used for storing local app data.
    Uses an environment override when provided, otherwise falls back to a
    per-OS user data location.
    """
    override = os.environ.get("STUDY_PLANNER_DATA_DIR")
    if override:
        base = Path(override).expanduser()
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support" / APP_NAME
    elif sys.platform.startswith("win"):
        roaming = os.environ.get("APPDATA")
        base = Path(roaming) / APP_NAME if roaming else Path.home() / "AppData" / "Roaming" / APP_NAME
    else:
        xdg = os.environ.get("XDG_DATA_HOME")
        base = (Path(xdg) if xdg else Path.home() / ".local" / "share") / "study-planner"

    base.mkdir(parents=True, exist_ok=True)
    return base


def get_log_level() -> str:
    return os.environ.get("STUDY_PLANNER_LOG_LEVEL", "INFO").upper()


def get_timezone() -> tzinfo | None:
    """
    Zone used for exported calendar times. None means the machine's local
    time, which exports convert to UTC.
    """
    name = os.environ.get("STUDY_PLANNER_TZ")
    return ZoneInfo(name) if name else None
