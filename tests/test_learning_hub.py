import pytest

import learning_hub
from agents.exceptions import CredentialsError, ValidationError
from agents.providers import CannedResponseProvider
from analytics.storage import API_KEY_STORAGE_KEY, STORAGE_KEY, MemoryStorage
from config import Settings


class FakeOpenRouterProvider:
    def __init__(self, api_key, **kwargs):
        self.api_key = api_key
        self.kwargs = kwargs

    def complete(self, system_prompt, history, message):
        return f"echo: {message}"


@pytest.fixture(autouse=True)
def no_env_key(monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.setattr(learning_hub, "OpenRouterProvider", FakeOpenRouterProvider)


def test_without_key_ai_needs_setup(clock):
    hub = learning_hub.LearningHub.from_settings(Settings(), storage=MemoryStorage(), clock=clock)

    assert hub.ai_ready is False
    with pytest.raises(CredentialsError):
        hub.tutor
    with pytest.raises(CredentialsError):
        hub.generator


def test_saved_key_connects_provider(clock):
    storage = MemoryStorage()
    hub = learning_hub.LearningHub.from_settings(Settings(model="test/model"), storage=storage, clock=clock)

    hub.save_api_key("  sk-saved  ")

    assert storage.get(API_KEY_STORAGE_KEY) == "sk-saved"
    assert hub.ai_ready
    assert hub.provider.api_key == "sk-saved"
    assert hub.provider.kwargs["model"] == "test/model"
    assert hub.tutor.ask("hi").content == "echo: hi"


def test_blank_key_is_rejected(clock):
    hub = learning_hub.LearningHub.from_settings(Settings(), storage=MemoryStorage(), clock=clock)
    with pytest.raises(ValidationError):
        hub.save_api_key(" ")


def test_key_lookup_order(monkeypatch, clock):
    storage = MemoryStorage({API_KEY_STORAGE_KEY: "sk-stored"})
    hub = learning_hub.LearningHub(Settings(), storage, clock=clock)
    assert hub.resolve_api_key() == "sk-stored"

    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-env")
    assert hub.resolve_api_key() == "sk-env"

    hub.settings = Settings(api_key="sk-settings")
    assert hub.resolve_api_key() == "sk-settings"


def test_clear_api_key(clock):
    storage = MemoryStorage({API_KEY_STORAGE_KEY: "sk-stored"})
    hub = learning_hub.LearningHub.from_settings(Settings(), storage=storage, clock=clock)
    assert hub.ai_ready

    hub.clear_api_key()
    assert hub.ai_ready is False
    assert storage.get(API_KEY_STORAGE_KEY) is None


def test_canned_mode_needs_no_key(clock):
    hub = learning_hub.LearningHub.from_settings(
        Settings(use_canned_responses=True), storage=MemoryStorage(), clock=clock
    )
    assert isinstance(hub.provider, CannedResponseProvider)
    material = hub.generator.generate("summary", "Fractions", "Mathematics")
    assert material.subject == "Mathematics"
    assert hub.dashboard()["ai_materials"] == 1


def test_quiz_and_dashboard(clock):
    storage = MemoryStorage()
    with learning_hub.LearningHub.from_settings(Settings(), storage=storage, clock=clock) as hub:
        session = hub.start_quiz("science")
        for answer in (0, 2, 0):
            session.select_answer(answer)
            session.next_question()
        hub.store.complete_lesson("Science")

        dashboard = hub.dashboard()
        assert dashboard["total_xp"] == 55
        assert dashboard["quizzes_taken"] == 1
        assert dashboard["completed_lessons"] == 1
        assert dashboard["lessons_percentage"] == 1
        assert dashboard["average_score"] == 100
        assert len(dashboard["weekly_series"]) == 7
        assert dashboard["weekly_series"][-1]["xp"] == 55
        assert len(dashboard["monthly_performance"]) == 6

    assert storage.get(STORAGE_KEY) is not None
