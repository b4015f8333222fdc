import pytest
from streamlit.testing.v1 import AppTest

import learning_hub
import streamlit_app
from agents.exceptions import ProviderError
from analytics.storage import API_KEY_STORAGE_KEY, STORAGE_KEY, MemoryStorage
from config import Settings


def app():
    import streamlit_app
    streamlit_app.main()


class FlakyStorage(MemoryStorage):
    """Memory storage whose activity writes can be switched to fail."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_saves = False

    def set(self, key, value):
        if self.fail_saves and key == STORAGE_KEY:
            raise OSError("disk full")
        super().set(key, value)


class FailingProvider:
    def __init__(self, api_key, **kwargs):
        self.api_key = api_key

    def complete(self, system_prompt, history, message):
        raise ProviderError("503 upstream")


@pytest.fixture(autouse=True)
def no_env_key(monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)


def _run_with(hub):
    at = AppTest.from_function(app, default_timeout=30)
    at.session_state["hub"] = hub
    at.run()
    return at


def _texts(elements):
    return [element.value for element in elements]


def test_setup_prompt_without_key(clock):
    hub = learning_hub.LearningHub.from_settings(Settings(), storage=MemoryStorage(), clock=clock)
    at = _run_with(hub)

    assert not at.exception
    assert "🤖 Setup AI Tutor" in _texts(at.subheader)
    assert at.text_input(key="api_key_input") is not None
    assert any("API Key Required" in text for text in _texts(at.warning))


def test_blank_api_key_shows_warning(clock):
    hub = learning_hub.LearningHub.from_settings(Settings(), storage=MemoryStorage(), clock=clock)
    at = _run_with(hub)

    at.button(key="save_api_key_button").click().run()

    assert "Please enter an API key." in _texts(at.warning)
    assert hub.ai_ready is False


def test_tutor_failure_stays_visible(monkeypatch, clock):
    monkeypatch.setattr(learning_hub, "OpenRouterProvider", FailingProvider)
    storage = MemoryStorage({API_KEY_STORAGE_KEY: "sk-test"})
    hub = learning_hub.LearningHub.from_settings(Settings(), storage=storage, clock=clock)
    at = _run_with(hub)

    at.chat_input[0].set_value("Explain gravity").run()

    assert not at.exception
    assert any("Failed to get response from AI" in text for text in _texts(at.error))
    assert [message.role for message in hub.tutor.messages] == ["assistant"]


def test_tutor_reply_is_rendered(clock):
    hub = learning_hub.LearningHub.from_settings(
        Settings(use_canned_responses=True), storage=MemoryStorage(), clock=clock
    )
    at = _run_with(hub)

    at.chat_input[0].set_value("Explain gravity").run()

    assert not at.exception
    assert not at.error
    assert [message.role for message in hub.tutor.messages] == ["assistant", "user", "assistant"]


def test_material_fields_required(clock):
    hub = learning_hub.LearningHub.from_settings(
        Settings(use_canned_responses=True), storage=MemoryStorage(), clock=clock
    )
    at = _run_with(hub)

    at.button(key="generate_summary_button").click().run()

    assert any("Missing Information" in text for text in _texts(at.warning))
    assert hub.generator.materials == []


def test_material_save_failure_shows_error(clock):
    storage = FlakyStorage()
    hub = learning_hub.LearningHub.from_settings(
        Settings(use_canned_responses=True), storage=storage, clock=clock
    )
    at = _run_with(hub)
    storage.fail_saves = True

    at.text_input(key="material_subject").input("Mathematics")
    at.text_input(key="material_topic").input("Fractions")
    at.button(key="generate_summary_button").click().run()

    assert not at.exception
    assert any("Could not save progress" in text for text in _texts(at.error))
    assert hub.generator.materials == []
    assert hub.store.record.ai_materials_generated == []


def test_lesson_save_failure_stays_visible(clock):
    storage = FlakyStorage()
    hub = learning_hub.LearningHub.from_settings(Settings(), storage=storage, clock=clock)
    at = _run_with(hub)
    storage.fail_saves = True

    at.button(key="start_lesson_button").click().run()

    assert not at.exception
    assert any("Could not save progress" in text for text in _texts(at.error))
    assert hub.store.record.completed_lessons == 0


def test_hub_start_failure_is_reported(monkeypatch):
    def broken_hub(cls, settings, storage=None, clock=None):
        raise ProviderError("Client initialization failed: bad base url")

    monkeypatch.setattr(streamlit_app, "load_settings", lambda: Settings())
    monkeypatch.setattr(streamlit_app, "configure_logging", lambda settings: None)
    monkeypatch.setattr(learning_hub.LearningHub, "from_settings", classmethod(broken_hub))

    at = AppTest.from_function(app, default_timeout=30)
    at.run()

    assert not at.exception
    assert any("Could not start LearnHub" in text for text in _texts(at.error))
    assert not at.tabs
