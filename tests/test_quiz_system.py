import pytest

from agents.exceptions import StateError, ValidationError
from quiz_system import QUIZ_BANK, QuizSession, format_time


def _answer_all(session, answers):
    finished = False
    for answer in answers:
        session.select_answer(answer)
        finished = session.next_question()
    return finished


def test_quiz_bank_contents():
    assert set(QUIZ_BANK) == {"mathematics", "science", "history"}
    for quiz in QUIZ_BANK.values():
        assert len(quiz.questions) == 3
        for question in quiz.questions:
            assert 0 <= question.correct < len(question.options)
            assert question.subject == quiz.subject


def test_full_run_records_score(store, clock):
    session = QuizSession("mathematics", store=store, clock=clock)
    session.select_answer(1)
    assert session.next_question() is False
    session.select_answer(0)
    assert session.next_question() is False
    clock.advance(seconds=75)
    session.select_answer(0)
    assert session.next_question() is True

    result = session.result()
    assert result["score"] == 2
    assert result["total_questions"] == 3
    assert result["percentage"] == 67
    assert result["time_spent_seconds"] == 75

    record = store.record
    assert len(record.quiz_scores) == 1
    assert record.quiz_scores[0].subject == "Mathematics"
    assert record.quiz_scores[0].is_ai_generated is False
    assert record.total_xp == 20


def test_next_requires_selection():
    session = QuizSession("science")
    with pytest.raises(ValidationError):
        session.next_question()
    assert session.current_index == 0


def test_selection_is_cleared_between_questions():
    session = QuizSession("science")
    session.select_answer(0)
    session.next_question()
    with pytest.raises(ValidationError):
        session.next_question()


def test_invalid_answer_index():
    session = QuizSession("history")
    with pytest.raises(ValidationError):
        session.select_answer(4)


def test_completed_quiz_cannot_continue(store):
    session = QuizSession("history", store=store)
    assert _answer_all(session, [1, 2, 2]) is True
    assert session.result()["percentage"] == 100

    with pytest.raises(StateError):
        session.select_answer(0)
    with pytest.raises(StateError):
        session.next_question()
    assert len(store.record.quiz_scores) == 1


def test_result_before_finish():
    with pytest.raises(StateError):
        QuizSession("science").result()


def test_unknown_quiz():
    with pytest.raises(ValidationError):
        QuizSession("geography")


def test_progress_counts_current_question():
    session = QuizSession("science")
    assert round(session.progress) == 33


@pytest.mark.parametrize("seconds,text", [(0, "0:00"), (65, "1:05"), (600, "10:00")])
def test_format_time(seconds, text):
    assert format_time(seconds) == text
