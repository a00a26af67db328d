from __future__ import annotations

import copy
from dataclasses import replace

from guessing_game.game.questions.types import Question

from .errors import CorruptSavedGameError, SessionNotCompletedError
from .types import SessionScore, SessionSummary


class SessionTracker:
    """Score, answered-question history and position for one play-through."""

    def __init__(self, *, total_questions: int, requested_questions: int | None = None) -> None:
        self._total_questions = total_questions
        self._requested_questions = (
            requested_questions if requested_questions is not None else total_questions
        )
        self._score = SessionScore()
        self._history: list[Question] = []
        self._current_index = 0
        self._completed = total_questions == 0

    @property
    def score(self) -> SessionScore:
        return self._score

    @property
    def history(self) -> tuple[Question, ...]:
        return tuple(self._history)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_question_number(self) -> int:
        return min(self._current_index + 1, self._total_questions)

    @property
    def total_questions(self) -> int:
        return self._total_questions

    @property
    def requested_questions(self) -> int:
        return self._requested_questions

    @property
    def is_complete(self) -> bool:
        return self._completed

    def record_answer(self, *, is_correct: bool, show_answer: bool = False) -> None:
        if is_correct:
            self._score = replace(
                self._score,
                correct=self._score.correct + 1,
                show_answers_used=self._score.show_answers_used + int(show_answer),
            )
        else:
            self._score = replace(self._score, incorrect=self._score.incorrect + 1)

    def record_hint_button(self) -> None:
        self._score = replace(self._score, hint_buttons_used=self._score.hint_buttons_used + 1)

    def finish_question(self, question: Question) -> None:
        # The stored copy is detached from the live question so history never changes.
        self._history.append(copy.deepcopy(question))
        self._current_index += 1
        if self._current_index >= self._total_questions:
            self._completed = True

    def summary(self) -> SessionSummary:
        if not self._completed:
            raise SessionNotCompletedError
        return SessionSummary(
            questions=tuple(self._history),
            score=self._score,
            requested_questions=self._requested_questions,
        )

    @classmethod
    def restore(
        cls,
        *,
        total_questions: int,
        requested_questions: int,
        score: SessionScore,
        history: list[Question],
        current_index: int,
        completed: bool,
    ) -> SessionTracker:
        if not 0 <= current_index <= total_questions:
            raise CorruptSavedGameError(
                f"current index {current_index} outside 0..{total_questions}"
            )
        if completed != (current_index >= total_questions):
            raise CorruptSavedGameError(
                f"completed={completed} disagrees with index {current_index} of {total_questions}"
            )
        if len(history) != current_index:
            raise CorruptSavedGameError(
                f"history has {len(history)} questions, expected {current_index}"
            )
        tracker = cls(total_questions=total_questions, requested_questions=requested_questions)
        tracker._score = score
        tracker._history = list(history)
        tracker._current_index = current_index
        tracker._completed = completed
        return tracker
