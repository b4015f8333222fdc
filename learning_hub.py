import os
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional
from agents import (
    CannedResponseProvider,
    CredentialsError,
    OpenRouterProvider,
    ResponseProvider,
    StudyMaterialGenerator,
    TutorAgent,
    ValidationError
)
from analytics import ActivityPersistence, ActivityStore, FileStorage, KeyValueStorage, metrics
from analytics.storage import API_KEY_STORAGE_KEY
from config import Settings
from quiz_system import QuizSession

logger = logging.getLogger(__name__)

class LearningHub:
    """Builds and owns the store, the AI agents and quiz sessions for one learner."""

    def __init__(
        self,
        settings: Settings,
        storage: KeyValueStorage,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.settings = settings
        self.storage = storage
        self.clock = clock or datetime.now
        self.store = ActivityStore(ActivityPersistence(storage), clock=self.clock)
        self.provider: Optional[ResponseProvider] = None
        self._tutor: Optional[TutorAgent] = None
        self._generator: Optional[StudyMaterialGenerator] = None

    @classmethod
    def from_settings(cls, settings: Settings, storage: Optional[KeyValueStorage] = None,
                      clock: Optional[Callable[[], datetime]] = None) -> "LearningHub":
        """Create and open a hub, using file storage unless ``storage`` is given."""
        hub = cls(settings, storage or FileStorage(settings.storage_dir), clock=clock)
        hub.open()
        return hub

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        self.store.open()
        self._connect_provider()

    def close(self) -> None:
        self.store.close()
        logger.info("Learning hub closed")

    def __enter__(self) -> "LearningHub":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Credentials and providers
    # ------------------------------------------------------------------

    def resolve_api_key(self) -> Optional[str]:
        """Settings first, then the environment, then the key saved from the setup screen."""
        return (
            self.settings.api_key
            or os.getenv("OPENROUTER_API_KEY")
            or self.storage.get(API_KEY_STORAGE_KEY)
            or None
        )

    def _connect_provider(self) -> None:
        if self.settings.use_canned_responses:
            logger.info("Using canned tutor responses")
            self._set_provider(CannedResponseProvider())
            return

        api_key = self.resolve_api_key()
        if not api_key:
            logger.warning("No OpenRouter API key configured; AI features need setup")
            self._set_provider(None)
            return

        self._set_provider(OpenRouterProvider(
            api_key=api_key,
            model=self.settings.model,
            base_url=self.settings.base_url,
            app_title=self.settings.app_title,
            referer=self.settings.referer
        ))

    def _set_provider(self, provider: Optional[ResponseProvider]) -> None:
        self.provider = provider
        if provider is None:
            self._tutor = None
            self._generator = None
            return
        self._tutor = TutorAgent(provider, clock=self.clock)
        self._generator = StudyMaterialGenerator(provider, store=self.store, clock=self.clock)

    def save_api_key(self, api_key: str) -> None:
        """Store a key entered on the setup screen and reconnect the AI agents."""
        if not api_key or not api_key.strip():
            raise ValidationError("Please enter an API key.")
        self.storage.set(API_KEY_STORAGE_KEY, api_key.strip())
        logger.info("OpenRouter API key saved")
        self._connect_provider()

    def clear_api_key(self) -> None:
        self.storage.remove(API_KEY_STORAGE_KEY)
        self._connect_provider()

    @property
    def ai_ready(self) -> bool:
        return self.provider is not None

    @property
    def tutor(self) -> TutorAgent:
        if self._tutor is None:
            raise CredentialsError("Please set your OpenRouter API key in the AI Tutor tab first.")
        return self._tutor

    @property
    def generator(self) -> StudyMaterialGenerator:
        if self._generator is None:
            raise CredentialsError("Please set your OpenRouter API key in the AI Tutor tab first.")
        return self._generator

    # ------------------------------------------------------------------
    # Quizzes and dashboard
    # ------------------------------------------------------------------

    def start_quiz(self, quiz_key: str) -> QuizSession:
        return QuizSession(quiz_key, store=self.store, clock=self.clock)

    def dashboard(self) -> Dict[str, Any]:
        """Everything the progress dashboard renders, computed from the current snapshot."""
        record = self.store.record
        today = self.store.today()
        return {
            "total_xp": record.total_xp,
            "current_streak": record.current_streak,
            "completed_lessons": record.completed_lessons,
            "total_lessons": record.total_lessons,
            "lessons_percentage": round(record.completed_lessons / record.total_lessons * 100),
            "current_level": record.current_level.value,
            "weekly_goal": record.weekly_goal,
            "weekly_completed": record.weekly_completed,
            "subjects": metrics.subject_distribution(record),
            "weekly_series": metrics.weekly_series(record, today),
            "weekly_hours": metrics.weekly_hours(record, today),
            "monthly_performance": metrics.monthly_performance(record, today),
            "average_score": metrics.average_score(record, today),
            "achievements": metrics.achievements(record),
            "ai_materials": len(record.ai_materials_generated),
            "quizzes_taken": len(record.quiz_scores),
        }
