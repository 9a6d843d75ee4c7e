from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Dict, List, Literal, Optional


Priority = Literal["low", "medium", "high"]
Difficulty = Literal["easy", "medium", "hard"]
TaskStatus = Literal["pending", "working", "completed", "skipped"]
ViewMode = Literal["daily", "weekly", "monthly"]

PRIORITIES: List[str] = ["low", "medium", "high"]
DIFFICULTIES: List[str] = ["easy", "medium", "hard"]
TASK_STATUSES: List[str] = ["pending", "working", "completed", "skipped"]
VIEW_MODES: List[str] = ["daily", "weekly", "monthly"]


class Subject(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(min_length=1)
    priority: Priority = "medium"
    difficulty: Difficulty = "medium"
    exam_date: date
    created_at: datetime = Field(default_factory=datetime.now)


class StudyTask(BaseModel):
    id: str
    subject_id: str
    subject_name: str
    day: date
    hours: float = Field(gt=0)
    status: TaskStatus = "pending"
    priority: Priority
    difficulty: Difficulty
    original_date: Optional[date] = None
    # "<id>@<day>[<original date]" of the skipped task this was copied from
    rescheduled_from: Optional[str] = None


# ISO date string -> tasks scheduled on that date
StudyPlan = Dict[str, List[StudyTask]]


class PlannerSettings(BaseModel):
    base_hours: float = Field(default=10.0, gt=0)
    min_session_hours: float = Field(default=0.5, gt=0, le=8)
    daily_capacity_hours: float = Field(default=8.0, gt=0, le=24)
    priority_weights: Dict[Priority, float] = Field(
        default_factory=lambda: {"high": 3.0, "medium": 2.0, "low": 1.0}
    )
    difficulty_weights: Dict[Difficulty, float] = Field(
        default_factory=lambda: {"hard": 3.0, "medium": 2.0, "easy": 1.0}
    )
    preferred_start_hour: int = Field(default=18, ge=0, le=23)


class AppState(BaseModel):
    subjects: List[Subject] = Field(default_factory=list)
    plan: StudyPlan = Field(default_factory=dict)
    settings: PlannerSettings = Field(default_factory=PlannerSettings)
    profile: str = "default"
