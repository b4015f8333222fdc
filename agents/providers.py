import random
import logging
from typing import Dict, List, Optional
from langchain_openai import ChatOpenAI
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from openai import OpenAIError
from agents.exceptions import CredentialsError, ProviderError

logger = logging.getLogger(__name__)

class ResponseProvider:
    """Produces an assistant reply for a conversation.

    ``history`` is a list of ``{"role": "user" | "assistant", "content": str}``
    dicts. Implementations return the reply text, or ``None`` when the backend
    answered with nothing usable.
    """

    def complete(self, system_prompt: str, history: List[Dict[str, str]], message: str) -> Optional[str]:
        raise NotImplementedError

class OpenRouterProvider(ResponseProvider):
    """Chat completions through OpenRouter's OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "deepseek/deepseek-r1:free",
        base_url: str = "https://openrouter.ai/api/v1",
        app_title: str = "AI Learning Assistant",
        referer: str = "http://localhost:8501",
        temperature: float = 0.7
    ):
        if not api_key or not api_key.strip():
            raise CredentialsError("OpenRouter API key is not set")

        try:
            self.llm = ChatOpenAI(
                model=model,
                api_key=api_key.strip(),
                base_url=base_url,
                temperature=temperature,
                default_headers={
                    "HTTP-Referer": referer,
                    "X-Title": app_title
                }
            )
        except Exception as e:
            logger.error(f"Failed to initialize OpenRouter client: {str(e)}")
            raise ProviderError(f"Client initialization failed: {str(e)}")

        self.model = model

    def _build_messages(self, system_prompt: str, history: List[Dict[str, str]], message: str) -> List[BaseMessage]:
        messages: List[BaseMessage] = [SystemMessage(content=system_prompt)]
        for entry in history:
            if entry.get("role") == "assistant":
                messages.append(AIMessage(content=entry.get("content", "")))
            else:
                messages.append(HumanMessage(content=entry.get("content", "")))
        messages.append(HumanMessage(content=message))
        return messages

    def complete(self, system_prompt: str, history: List[Dict[str, str]], message: str) -> Optional[str]:
        messages = self._build_messages(system_prompt, history, message)
        try:
            response = self.llm.invoke(messages)
        except OpenAIError as e:
            logger.error(f"OpenRouter request failed: {str(e)}")
            raise ProviderError(f"Chat completion failed: {str(e)}")

        content = getattr(response, "content", None)
        logger.debug(f"Raw LLM response: {content}")

        if not isinstance(content, str) or not content.strip():
            return None
        return content

CANNED_REPLIES = [
    "Great question! Let's break \"{topic}\" into smaller ideas. Start with the core definition, then look at one worked example before moving on.",
    "Here's a study tip for \"{topic}\": explain it out loud in your own words, then check which parts felt shaky and review those first.",
    "Let's make \"{topic}\" stick. Write three key facts on flashcards and quiz yourself tomorrow. Spaced review beats cramming!",
    "Good thinking! For \"{topic}\", try connecting it to something you already know. Analogies make new concepts much easier to remember.",
    "You're making progress! To master \"{topic}\", practice with a short quiz after each study session and track which answers you miss.",
]

class CannedResponseProvider(ResponseProvider):
    """Offline provider that answers with encouraging template replies."""

    def __init__(self, seed: Optional[int] = None, replies: Optional[List[str]] = None):
        self.random = random.Random(seed)
        self.replies = replies or CANNED_REPLIES

    def complete(self, system_prompt: str, history: List[Dict[str, str]], message: str) -> Optional[str]:
        topic = message.strip().rstrip("?.!") or "this topic"
        return self.random.choice(self.replies).format(topic=topic)
