import json
import uuid
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union
from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from langchain_core.prompts import PromptTemplate
from agents.exceptions import MaterialAgentError, ProviderError, ValidationError
from agents.providers import ResponseProvider
from analytics.models import MaterialType

logger = logging.getLogger(__name__)

GENERATOR_SYSTEM_PROMPT = (
    "You are an educational content generator. Create high-quality study materials "
    "that are accurate, well-structured, and educational."
)

FAILED_CONTENT = "Failed to generate content."

MATERIAL_PROMPTS = {
    "summary": PromptTemplate.from_template(
        'Create a comprehensive study summary for the topic "{topic}" in {subject}. '
        "Include key concepts, important facts, and main points. "
        "Format it clearly with headings and bullet points."
    ),
    "flashcard": PromptTemplate.from_template(
        'Create 10 flashcards for the topic "{topic}" in {subject}. '
        'Format as JSON array with "question" and "answer" fields. '
        "Focus on key concepts and definitions."
    ),
    "quiz": PromptTemplate.from_template(
        'Create a 5-question multiple choice quiz about "{topic}" in {subject}. '
        'Format as JSON array with "question", "options" (array of 4 choices), '
        '"correct" (index of correct answer), and "explanation" fields.'
    ),
}

class Flashcard(BaseModel):
    question: str
    answer: str

class GeneratedQuestion(BaseModel):
    """A multiple-choice question produced by the model."""
    question: str
    options: List[str] = Field(default_factory=list)
    correct: int = Field(default=0, ge=0)
    explanation: str = ""

class StudyMaterial(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    kind: str = Field(description="summary, flashcard or quiz")
    title: str
    content: Union[List[Flashcard], List[GeneratedQuestion], str]
    subject: str
    topic: str
    created_at: datetime

    @property
    def is_structured(self) -> bool:
        return isinstance(self.content, list)

_CONTENT_ADAPTERS = {
    "flashcard": TypeAdapter(List[Flashcard]),
    "quiz": TypeAdapter(List[GeneratedQuestion]),
}

def extract_json_array(text: str) -> Optional[List[Any]]:
    """Return the first-to-last bracketed JSON array in ``text``, if any."""
    start_idx = text.find('[')
    end_idx = text.rfind(']')
    if start_idx == -1 or end_idx <= start_idx:
        return None
    try:
        parsed = json.loads(text[start_idx:end_idx + 1])
    except json.JSONDecodeError as e:
        logger.debug(f"Response did not contain a valid JSON array: {str(e)}")
        return None
    return parsed if isinstance(parsed, list) else None

class StudyMaterialGenerator:
    """Generates summaries, flashcards and quizzes and records them in the activity store."""

    def __init__(self, provider: ResponseProvider, store=None, clock: Optional[Callable[[], datetime]] = None):
        self.provider = provider
        self.store = store
        self.clock = clock or datetime.now
        self.materials: List[StudyMaterial] = []

    def _parse_content(self, kind: str, content: str):
        adapter = _CONTENT_ADAPTERS.get(kind)
        if adapter is None:
            return content

        items = extract_json_array(content)
        if items is None:
            return content
        try:
            return adapter.validate_python(items)
        except PydanticValidationError as e:
            logger.warning(f"Generated {kind} items did not match the expected shape: {str(e)}")
            return content

    def generate(self, kind: str, topic: str, subject: str) -> StudyMaterial:
        """Generate one piece of study material for ``topic`` in ``subject``."""
        if kind not in MATERIAL_PROMPTS:
            raise ValidationError(f"Unknown material type: {kind}")
        if not topic or not topic.strip() or not subject or not subject.strip():
            raise ValidationError("Please enter both topic and subject.")

        topic, subject = topic.strip(), subject.strip()
        prompt = MATERIAL_PROMPTS[kind].format(topic=topic, subject=subject)

        try:
            content = self.provider.complete(GENERATOR_SYSTEM_PROMPT, [], prompt)
        except ProviderError as e:
            logger.error(f"Error generating material: {str(e)}")
            raise MaterialAgentError(f"Failed to generate study material: {str(e)}")

        content = content or FAILED_CONTENT

        material = StudyMaterial(
            kind=kind,
            title=f"{kind.capitalize()}: {topic}",
            content=self._parse_content(kind, content),
            subject=subject,
            topic=topic,
            created_at=self.clock(),
        )

        # Listed only once the store has recorded it
        if self.store is not None:
            material_type = MaterialType.QUIZ if kind == "quiz" else MaterialType.STUDY_MATERIAL
            self.store.record_ai_material(subject, topic, material_type)

        self.materials.insert(0, material)

        logger.info(f"Generated {kind} for {subject}: {topic}")
        return material

    def counts_by_kind(self) -> Dict[str, int]:
        """Count of generated materials per kind."""
        counts = {kind: 0 for kind in MATERIAL_PROMPTS}
        for material in self.materials:
            counts[material.kind] += 1
        return counts
