import json
import math
import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional
from pydantic import ValidationError as PydanticValidationError
from agents.exceptions import StateError, ValidationError
from analytics.models import (
    ActivityRecord,
    AIMaterial,
    DailyActivity,
    MaterialType,
    QuizScore,
    default_record,
    level_for_xp,
    subject_progress,
)
from analytics.storage import ActivityPersistence

logger = logging.getLogger(__name__)

XP_PER_CORRECT_ANSWER = 10
XP_PER_STUDY_HOUR = 20
XP_PER_LESSON = 25
# Hours credited to the day for a finished lesson, or for a quiz that opens the day
LESSON_HOURS = 0.5
QUIZ_SESSION_HOURS = 0.5

class ActivityStore:
    """Owns the learner's ActivityRecord and is the only way to change it.

    The record is hydrated from the persistence adapter on ``open()`` and a
    full snapshot is written back after every mutation. Each mutation works
    on a deep copy and swaps it in, so a snapshot handed out earlier never
    changes under the caller.
    """

    def __init__(self, persistence: ActivityPersistence, clock: Optional[Callable[[], datetime]] = None):
        self.persistence = persistence
        self.clock = clock or datetime.now
        self._record: Optional[ActivityRecord] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> ActivityRecord:
        """Load the persisted record, falling back to defaults."""
        self._record = self._load()
        return self._record

    def close(self) -> None:
        """Flush the current snapshot to storage."""
        if self._record is not None:
            self._save(self._record)

    def __enter__(self) -> "ActivityStore":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def record(self) -> ActivityRecord:
        """The current snapshot."""
        if self._record is None:
            self.open()
        return self._record

    def today(self) -> date:
        return self.clock().date()

    def reset(self) -> ActivityRecord:
        """Clear stored activity and start over from defaults."""
        self.persistence.clear()
        self._record = default_record(self.today())
        logger.info("Activity record reset to defaults")
        return self._record

    def _load(self) -> ActivityRecord:
        blob = self.persistence.load()
        if blob is None:
            logger.info("No stored activity found, starting with defaults")
            return default_record(self.today())

        try:
            record = ActivityRecord.model_validate(json.loads(blob))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.warning(f"Stored activity is malformed, using defaults: {str(e)}")
            return default_record(self.today())

        return self._normalize(record)

    def _normalize(self, record: ActivityRecord) -> ActivityRecord:
        """Re-derive fields that must follow from the raw counters."""
        record.current_level = level_for_xp(record.total_xp)
        record.weekly_completed = min(record.weekly_completed, record.weekly_goal)
        for subject in record.subjects:
            subject.progress = subject_progress(subject.lessons_completed, subject.total_lessons)
        return record

    def _save(self, record: ActivityRecord) -> None:
        try:
            self.persistence.save(record.model_dump_json(by_alias=True))
        except OSError as e:
            logger.error(f"Failed to persist activity: {str(e)}")
            raise StateError(f"Could not save activity: {str(e)}")

    def _commit(self, draft: ActivityRecord) -> ActivityRecord:
        self._save(draft)
        self._record = draft
        return draft

    def _draft(self) -> ActivityRecord:
        return self.record.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Helpers applied to a draft
    # ------------------------------------------------------------------

    def _award_xp(self, draft: ActivityRecord, xp: int) -> None:
        draft.total_xp += xp
        draft.current_level = level_for_xp(draft.total_xp)

    def _update_daily(self, draft: ActivityRecord, xp: int = 0, hours: float = 0.0,
                      lessons: int = 0, opening_hours: Optional[float] = None) -> None:
        """Add to today's daily entry, creating it on the first activity of the day."""
        key = self.today().isoformat()
        entry = draft.daily_activity.get(key)
        if entry is None:
            draft.daily_activity[key] = DailyActivity(
                hours_studied=hours if opening_hours is None else opening_hours,
                xp_earned=xp,
                lessons_completed=lessons,
            )
            return

        entry.hours_studied += hours
        entry.xp_earned += xp
        entry.lessons_completed += lessons

    def _apply_streak(self, draft: ActivityRecord) -> bool:
        today = self.today()
        try:
            last_active = date.fromisoformat(draft.last_active_date)
        except ValueError:
            last_active = None

        if last_active == today:
            return False

        if last_active == today - timedelta(days=1):
            draft.current_streak += 1
        else:
            draft.current_streak = 1
        draft.last_active_date = today.isoformat()
        return True

    # ------------------------------------------------------------------
    # Mutation API
    # ------------------------------------------------------------------

    def refresh_streak(self) -> ActivityRecord:
        """Continue, start or reset the daily streak based on the last active date."""
        draft = self._draft()
        if not self._apply_streak(draft):
            return self.record
        logger.info(f"Streak is now {draft.current_streak} day(s)")
        return self._commit(draft)

    def record_quiz_score(self, subject: str, score: int, total_questions: int,
                          is_ai_generated: bool = False) -> ActivityRecord:
        """Log a finished quiz and award XP for each correct answer."""
        if total_questions <= 0:
            raise ValidationError("A quiz needs at least one question")
        if score < 0 or score > total_questions:
            raise ValidationError(f"Score must be between 0 and {total_questions}")

        xp_earned = score * XP_PER_CORRECT_ANSWER
        draft = self._draft()
        draft.quiz_scores.append(QuizScore(
            subject=subject,
            score=score,
            total_questions=total_questions,
            date=self.clock(),
            is_ai_generated=is_ai_generated,
        ))
        self._award_xp(draft, xp_earned)
        self._update_daily(draft, xp=xp_earned, opening_hours=QUIZ_SESSION_HOURS)
        self._apply_streak(draft)

        logger.info(f"Recorded quiz for {subject}: {score}/{total_questions} (+{xp_earned} XP)")
        return self._commit(draft)

    def record_ai_material(self, subject: str, topic: str, material_type: MaterialType) -> ActivityRecord:
        """Log that AI study material or an AI quiz was generated."""
        draft = self._draft()
        draft.ai_materials_generated.append(AIMaterial(
            subject=subject,
            topic=topic,
            date=self.clock(),
            material_type=MaterialType(material_type),
        ))
        logger.info(f"Recorded AI {MaterialType(material_type).value} for {subject}: {topic}")
        return self._commit(draft)

    def record_study_session(self, subject: str, hours: float) -> ActivityRecord:
        """Log study time; ``subject`` is kept for callers but does not move subject progress."""
        if not math.isfinite(hours):
            raise ValidationError("Study hours must be a finite number")
        if hours < 0:
            raise ValidationError("Study hours cannot be negative")

        xp_earned = int(math.floor(hours * XP_PER_STUDY_HOUR))
        draft = self._draft()
        self._award_xp(draft, xp_earned)
        self._update_daily(draft, xp=xp_earned, hours=hours)
        self._apply_streak(draft)

        logger.info(f"Recorded {hours}h study session ({subject}, +{xp_earned} XP)")
        return self._commit(draft)

    def complete_lesson(self, subject: str) -> ActivityRecord:
        """Mark one lesson of ``subject`` as completed."""
        draft = self._draft()

        target = draft.subject(subject)
        if target is not None:
            target.lessons_completed += 1
            target.progress = subject_progress(target.lessons_completed, target.total_lessons)
        else:
            logger.debug(f"Unknown subject '{subject}', subject progress unchanged")

        draft.completed_lessons += 1
        draft.weekly_completed = min(draft.weekly_goal, draft.weekly_completed + 1)
        self._award_xp(draft, XP_PER_LESSON)
        self._update_daily(draft, xp=XP_PER_LESSON, hours=LESSON_HOURS, lessons=1)
        self._apply_streak(draft)

        logger.info(f"Completed lesson in {subject} (+{XP_PER_LESSON} XP, level {draft.current_level.value})")
        return self._commit(draft)
