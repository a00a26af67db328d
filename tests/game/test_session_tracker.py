from __future__ import annotations

import dataclasses

import pytest

from guessing_game.game.questions.types import Question
from guessing_game.game.sessions.errors import CorruptSavedGameError, SessionNotCompletedError
from guessing_game.game.sessions.tracker import SessionTracker
from guessing_game.game.sessions.types import SessionScore
from tests.game.content_source_fixtures import make_question


def test_new_tracker_starts_at_first_question_with_empty_score() -> None:
    tracker = SessionTracker(total_questions=10)

    assert tracker.current_question_number == 1
    assert tracker.total_questions == 10
    assert tracker.score.correct == 0
    assert tracker.score.incorrect == 0
    assert tracker.score.show_answers_used == 0
    assert tracker.history == ()
    assert tracker.is_complete is False


def test_summary_is_unavailable_before_completion() -> None:
    tracker = SessionTracker(total_questions=2)

    with pytest.raises(SessionNotCompletedError):
        tracker.summary()


def test_history_entries_are_detached_from_live_questions() -> None:
    tracker = SessionTracker(total_questions=2)
    question = make_question()
    question.is_answered = True

    tracker.finish_question(question)
    question.all_answers[0].is_eliminated = True
    question.question_number = 42

    stored = tracker.history[0]
    assert stored.question_number == 1
    assert stored.all_answers[0].is_eliminated is False


def test_summary_reports_truncated_session() -> None:
    tracker = SessionTracker(total_questions=1, requested_questions=10)
    tracker.record_answer(is_correct=True, show_answer=True)
    tracker.finish_question(make_question())

    summary = tracker.summary()

    assert summary.truncated is True
    assert summary.requested_questions == 10
    assert len(summary.questions) == 1
    assert summary.score.correct == 1
    assert summary.score.show_answers_used == 1
    with pytest.raises(dataclasses.FrozenInstanceError):
        summary.score = summary.score  # type: ignore[misc]


def test_current_question_number_never_exceeds_total() -> None:
    tracker = SessionTracker(total_questions=1)
    tracker.finish_question(make_question())

    assert tracker.is_complete is True
    assert tracker.current_question_number == 1


def _answered_questions(count: int) -> list[Question]:
    questions = []
    for number in range(1, count + 1):
        question = make_question(question_number=number)
        question.is_answered = True
        questions.append(question)
    return questions


def test_restore_keeps_consistent_position() -> None:
    tracker = SessionTracker.restore(
        total_questions=3,
        requested_questions=3,
        score=SessionScore(correct=2),
        history=_answered_questions(2),
        current_index=2,
        completed=False,
    )

    assert tracker.current_question_number == 3
    assert tracker.score.correct == 2
    assert tracker.is_complete is False


@pytest.mark.parametrize(
    ("current_index", "completed", "history_size"),
    [
        (42, False, 0),
        (-1, False, 0),
        (3, False, 3),
        (1, True, 1),
        (2, False, 0),
    ],
)
def test_restore_rejects_inconsistent_position(
    current_index: int,
    completed: bool,
    history_size: int,
) -> None:
    with pytest.raises(CorruptSavedGameError):
        SessionTracker.restore(
            total_questions=3,
            requested_questions=3,
            score=SessionScore(),
            history=_answered_questions(history_size),
            current_index=current_index,
            completed=completed,
        )
