from __future__ import annotations
import sys
from zoneinfo import ZoneInfo

import pytest

from paths import get_data_dir, get_log_level, get_timezone


def test_data_dir_override_is_created(data_dir):
    assert get_data_dir() == data_dir
    assert data_dir.is_dir()


@pytest.mark.skipif(sys.platform.startswith("win") or sys.platform == "darwin", reason="XDG only")
def test_data_dir_follows_xdg(tmp_path, monkeypatch):
    monkeypatch.delenv("STUDY_PLANNER_DATA_DIR")
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))

    assert get_data_dir() == tmp_path / "xdg" / "study-planner"


def test_log_level(monkeypatch):
    monkeypatch.delenv("STUDY_PLANNER_LOG_LEVEL", raising=False)
    assert get_log_level() == "INFO"
    monkeypatch.setenv("STUDY_PLANNER_LOG_LEVEL", "debug")
    assert get_log_level() == "DEBUG"


def test_timezone(monkeypatch):
    monkeypatch.delenv("STUDY_PLANNER_TZ", raising=False)
    assert get_timezone() is None
    monkeypatch.setenv("STUDY_PLANNER_TZ", "Asia/Bangkok")
    assert get_timezone() == ZoneInfo("Asia/Bangkok")
