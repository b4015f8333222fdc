"""Pydantic models for the persisted learning-activity record.

Python attributes are snake_case; the serialized blob keeps the camelCase
field names the dashboard has always stored, so existing blobs keep loading.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field, field_validator

# XP needed to reach each level, highest first
LEVEL_THRESHOLDS = (
    (2000, "Expert"),
    (1000, "Advanced"),
    (500, "Intermediate"),
)

class Level(str, Enum):
    """Learner level derived from total XP."""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"

class MaterialType(str, Enum):
    """Kind of AI-generated material recorded in the activity log."""
    STUDY_MATERIAL = "study_material"
    QUIZ = "quiz"

def level_for_xp(total_xp: int) -> Level:
    """Return the level for a total XP value."""
    for threshold, name in LEVEL_THRESHOLDS:
        if total_xp >= threshold:
            return Level(name)
    return Level.BEGINNER

def subject_progress(lessons_completed: int, total_lessons: int) -> float:
    """Percentage of a subject's lessons completed, capped at 100."""
    if total_lessons <= 0:
        return 0.0
    return min(100.0, lessons_completed / total_lessons * 100)

class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

class Subject(_CamelModel):
    """A study subject with its own lesson progress."""
    name: str
    progress: float = Field(default=0.0, ge=0, le=100)
    color: str = "#3B82F6"
    icon: str = "📘"
    lessons_completed: int = Field(default=0, ge=0, alias="lessonsCompleted")
    total_lessons: int = Field(default=25, gt=0, alias="totalLessons")

class QuizScore(_CamelModel):
    subject: str
    score: int = Field(ge=0)
    total_questions: int = Field(gt=0, alias="totalQuestions")
    date: datetime
    is_ai_generated: bool = Field(default=False, alias="isAIGenerated")

    @property
    def percentage(self) -> float:
        return self.score / self.total_questions * 100

class AIMaterial(_CamelModel):
    subject: str
    topic: str
    date: datetime
    material_type: MaterialType = Field(alias="type")

class DailyActivity(_CamelModel):
    """Aggregate of one calendar day's activity."""
    hours_studied: float = Field(default=0.0, ge=0, alias="hoursStudied")
    xp_earned: int = Field(default=0, ge=0, alias="xpEarned")
    lessons_completed: int = Field(default=0, ge=0, alias="lessonsCompleted")

DEFAULT_SUBJECTS = [
    {"name": "Mathematics", "color": "#3B82F6", "icon": "📊"},
    {"name": "Science", "color": "#10B981", "icon": "🔬"},
    {"name": "History", "color": "#8B5CF6", "icon": "📚"},
    {"name": "Literature", "color": "#F59E0B", "icon": "📖"},
]

def _default_subjects() -> List[Subject]:
    return [Subject(**subject) for subject in DEFAULT_SUBJECTS]

class ActivityRecord(_CamelModel):
    """The single learner's activity snapshot."""
    total_xp: int = Field(default=0, ge=0, alias="totalXP")
    current_streak: int = Field(default=0, ge=0, alias="currentStreak")
    completed_lessons: int = Field(default=0, ge=0, alias="completedLessons")
    total_lessons: int = Field(default=100, gt=0, alias="totalLessons")
    current_level: Level = Field(default=Level.BEGINNER, alias="currentLevel")
    weekly_goal: int = Field(default=5, gt=0, alias="weeklyGoal")
    weekly_completed: int = Field(default=0, ge=0, alias="weeklyCompleted")
    subjects: List[Subject] = Field(default_factory=_default_subjects)
    quiz_scores: List[QuizScore] = Field(default_factory=list, alias="quizScores")
    ai_materials_generated: List[AIMaterial] = Field(default_factory=list, alias="aiMaterialsGenerated")
    daily_activity: Dict[str, DailyActivity] = Field(default_factory=dict, alias="dailyActivity")
    last_active_date: str = Field(default_factory=lambda: date.today().isoformat(), alias="lastActiveDate")

    @field_validator("quiz_scores", "ai_materials_generated", mode="before")
    @classmethod
    def _default_missing_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("daily_activity", mode="before")
    @classmethod
    def _coerce_daily_activity(cls, value: Any) -> Any:
        if value is None:
            return {}
        # Older blobs stored a list of {date, hoursStudied, ...} entries
        if isinstance(value, list):
            merged: Dict[str, Dict[str, Any]] = {}
            for entry in value:
                if not isinstance(entry, dict) or "date" not in entry:
                    continue
                day = _normalize_date_key(entry["date"])
                fields = {k: v for k, v in entry.items() if k != "date"}
                merged.setdefault(day, fields)
            return merged
        return value

    @field_validator("last_active_date", mode="before")
    @classmethod
    def _coerce_last_active(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _normalize_date_key(value)
        if isinstance(value, (date, datetime)):
            return value.isoformat()[:10]
        return value

    def subject(self, name: str):
        """Return the subject named ``name`` or ``None``."""
        return next((s for s in self.subjects if s.name == name), None)

def _normalize_date_key(value: Any) -> str:
    """Turn a stored date string into an ISO ``YYYY-MM-DD`` key."""
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10]).isoformat()
    except ValueError:
        pass
    # e.g. "Mon Jun 02 2025" as written by older builds
    try:
        return datetime.strptime(text, "%a %b %d %Y").date().isoformat()
    except ValueError:
        return text

def default_record(today: date) -> ActivityRecord:
    """Build a fresh record for a new learner."""
    return ActivityRecord(last_active_date=today.isoformat())
