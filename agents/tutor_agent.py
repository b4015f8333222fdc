import uuid
import logging
from datetime import datetime
from typing import Callable, List, Optional
from pydantic import BaseModel, Field
from agents.exceptions import ProviderError, TutorAgentError, ValidationError
from agents.providers import ResponseProvider

logger = logging.getLogger(__name__)

TUTOR_SYSTEM_PROMPT = (
    "You are an AI learning assistant. Help students learn by providing clear explanations, "
    "creating study materials, generating quizzes, and offering personalized learning advice. "
    "Be encouraging and educational."
)

GREETING = (
    "Hello! I'm your AI learning assistant. I can help you with personalized study materials, "
    "create quizzes, explain concepts, and track your progress. What would you like to learn about today?"
)

FALLBACK_REPLY = "I apologize, but I couldn't generate a response. Please try again."

QUICK_PROMPTS = [
    "Explain quantum physics",
    "Create a math quiz",
    "Summarize history topic",
]

class ChatMessage(BaseModel):
    """One message in the tutor conversation."""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: str = Field(description="Either 'user' or 'assistant'")
    content: str
    timestamp: datetime

class TutorAgent:
    """Chat-style AI tutor backed by a pluggable response provider."""

    def __init__(self, provider: ResponseProvider, clock: Optional[Callable[[], datetime]] = None):
        self.provider = provider
        self.clock = clock or datetime.now
        self.quick_prompts = list(QUICK_PROMPTS)
        self.messages: List[ChatMessage] = []
        self.reset()

    def reset(self) -> None:
        """Start a new conversation with only the greeting."""
        self.messages = [ChatMessage(role="assistant", content=GREETING, timestamp=self.clock())]

    def history(self) -> List[dict]:
        return [{"role": message.role, "content": message.content} for message in self.messages]

    def ask(self, question: str) -> ChatMessage:
        """Send ``question`` to the provider and append both sides of the exchange."""
        if not question or not question.strip():
            raise ValidationError("Please enter a question for the tutor.")

        question = question.strip()
        try:
            reply = self.provider.complete(TUTOR_SYSTEM_PROMPT, self.history(), question)
        except ProviderError as e:
            logger.error(f"Error getting tutor response: {str(e)}")
            raise TutorAgentError(f"Failed to get response from AI: {str(e)}")

        if not reply:
            logger.warning("Provider returned an empty reply, using fallback text")
            reply = FALLBACK_REPLY

        user_message = ChatMessage(role="user", content=question, timestamp=self.clock())
        assistant_message = ChatMessage(role="assistant", content=reply, timestamp=self.clock())
        self.messages.extend([user_message, assistant_message])

        logger.info(f"Tutor answered a {len(question)}-character question")
        return assistant_message
