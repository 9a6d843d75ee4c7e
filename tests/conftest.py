from __future__ import annotations
from datetime import date, datetime, timedelta

import pytest

from models import Subject

TODAY = date(2026, 3, 11)  # a Wednesday


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    path = tmp_path / "data"
    monkeypatch.setenv("STUDY_PLANNER_DATA_DIR", str(path))
    return path


def make_subject(
    sid: str = "s1",
    name: str = "Math",
    priority: str = "medium",
    difficulty: str = "medium",
    days_out: int = 10,
    today: date = TODAY,
) -> Subject:
    return Subject(
        id=sid,
        name=name,
        priority=priority,
        difficulty=difficulty,
        exam_date=today + timedelta(days=days_out),
        created_at=datetime(2026, 3, 1, 9, 0),
    )
