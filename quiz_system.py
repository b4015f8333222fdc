import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
from pydantic import BaseModel, Field
from agents.exceptions import StateError, ValidationError

logger = logging.getLogger(__name__)

class Question(BaseModel):
    id: str
    question: str
    options: List[str]
    correct: int = Field(description="Index of the correct option")
    explanation: str
    subject: str

class Quiz(BaseModel):
    title: str
    subject: str
    difficulty: str
    questions: List[Question]

def _quiz(title: str, subject: str, difficulty: str, questions: List[Dict[str, Any]]) -> Quiz:
    return Quiz(
        title=title,
        subject=subject,
        difficulty=difficulty,
        questions=[Question(id=str(i), subject=subject, **q) for i, q in enumerate(questions, 1)]
    )

QUIZ_BANK: Dict[str, Quiz] = {
    "mathematics": _quiz("Mathematics Quiz", "Mathematics", "Intermediate", [
        {
            "question": "What is the derivative of x²?",
            "options": ["x", "2x", "x²", "2x²"],
            "correct": 1,
            "explanation": "The derivative of x² is 2x. Using the power rule: d/dx(xⁿ) = n·xⁿ⁻¹",
        },
        {
            "question": "Solve for x: 2x + 5 = 13",
            "options": ["x = 3", "x = 4", "x = 5", "x = 6"],
            "correct": 1,
            "explanation": "2x + 5 = 13, so 2x = 8, therefore x = 4",
        },
        {
            "question": "What is the area of a circle with radius 5?",
            "options": ["25π", "10π", "5π", "15π"],
            "correct": 0,
            "explanation": "Area = πr², so with r = 5, Area = π(5)² = 25π",
        },
    ]),
    "science": _quiz("Science Quiz", "Science", "Beginner", [
        {
            "question": "What is the chemical symbol for water?",
            "options": ["H₂O", "CO₂", "NaCl", "CH₄"],
            "correct": 0,
            "explanation": "Water consists of 2 hydrogen atoms and 1 oxygen atom, hence H₂O",
        },
        {
            "question": "What process do plants use to make food?",
            "options": ["Respiration", "Digestion", "Photosynthesis", "Fermentation"],
            "correct": 2,
            "explanation": "Photosynthesis is the process where plants convert sunlight, water, and CO₂ into glucose",
        },
        {
            "question": "What is the speed of light in vacuum?",
            "options": ["300,000 km/s", "150,000 km/s", "450,000 km/s", "600,000 km/s"],
            "correct": 0,
            "explanation": "Light travels at approximately 300,000 kilometers per second in vacuum",
        },
    ]),
    "history": _quiz("World History Quiz", "History", "Intermediate", [
        {
            "question": "In which year did World War II end?",
            "options": ["1944", "1945", "1946", "1947"],
            "correct": 1,
            "explanation": "World War II ended in 1945 with the surrender of Japan in September",
        },
        {
            "question": "Who was the first President of the United States?",
            "options": ["Thomas Jefferson", "John Adams", "George Washington", "Benjamin Franklin"],
            "correct": 2,
            "explanation": "George Washington served as the first President from 1789 to 1797",
        },
        {
            "question": "The Renaissance period began in which country?",
            "options": ["France", "Germany", "Italy", "England"],
            "correct": 2,
            "explanation": "The Renaissance began in Italy during the 14th century, particularly in Florence",
        },
    ]),
}

def format_time(seconds: int) -> str:
    """Format a duration as ``m:ss``."""
    minutes, remaining = divmod(int(seconds), 60)
    return f"{minutes}:{remaining:02d}"

class QuizSession:
    """One run through a static quiz.

    Answers are collected question by question; finishing the last question
    records the score in the activity store once.
    """

    def __init__(self, quiz_key: str, store=None, clock: Optional[Callable[[], datetime]] = None):
        if quiz_key not in QUIZ_BANK:
            raise ValidationError(f"Unknown quiz: {quiz_key}")

        self.quiz_key = quiz_key
        self.quiz = QUIZ_BANK[quiz_key]
        self.store = store
        self.clock = clock or datetime.now
        self.started_at = self.clock()
        self.finished_at: Optional[datetime] = None
        self.current_index = 0
        self.selected_answer: Optional[int] = None
        self.answers: List[int] = []

    @property
    def completed(self) -> bool:
        return self.finished_at is not None

    @property
    def current_question(self) -> Question:
        return self.quiz.questions[self.current_index]

    @property
    def progress(self) -> float:
        """Percentage of the quiz reached, counting the current question."""
        return (self.current_index + 1) / len(self.quiz.questions) * 100

    def select_answer(self, index: int) -> None:
        if self.completed:
            raise StateError("Quiz already completed")
        if not 0 <= index < len(self.current_question.options):
            raise ValidationError(f"Answer must be between 0 and {len(self.current_question.options) - 1}")
        self.selected_answer = index

    def next_question(self) -> bool:
        """Lock in the selected answer. Returns True when the quiz has just finished."""
        if self.completed:
            raise StateError("Quiz already completed")
        if self.selected_answer is None:
            raise ValidationError("Please select an answer before proceeding.")

        self.answers.append(self.selected_answer)
        self.selected_answer = None

        if self.current_index < len(self.quiz.questions) - 1:
            self.current_index += 1
            return False

        self._complete()
        return True

    def _complete(self) -> None:
        self.finished_at = self.clock()
        score = self.score()
        logger.info(f"Finished {self.quiz.title}: {score}/{len(self.quiz.questions)}")

        if self.store is not None:
            self.store.record_quiz_score(self.quiz.subject, score, len(self.quiz.questions), is_ai_generated=False)

    def score(self) -> int:
        return sum(
            1 for answer, question in zip(self.answers, self.quiz.questions)
            if answer == question.correct
        )

    def result(self) -> Dict[str, Any]:
        if not self.completed:
            raise StateError("Quiz is not finished yet")

        total = len(self.quiz.questions)
        score = self.score()
        return {
            "score": score,
            "total_questions": total,
            "percentage": round(score / total * 100),
            "time_spent_seconds": int((self.finished_at - self.started_at).total_seconds()),
            "answers": list(self.answers),
        }
