from __future__ import annotations

import random
from typing import Sequence

import structlog

from guessing_game.game.questions.types import Question

from .tracker import SessionTracker

logger = structlog.get_logger(__name__)


class QuestionRuntime:
    """Walks the pre-built question list one question at a time.

    Every mutator returns ``True`` when it changed state. Redundant or
    out-of-order actions (double clicks, submitting twice, selecting an
    eliminated answer) return ``False`` and leave state untouched.
    """

    def __init__(
        self,
        questions: Sequence[Question],
        tracker: SessionTracker,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._questions = list(questions)
        self._tracker = tracker
        self._rng = rng or random.Random()

    @property
    def questions(self) -> tuple[Question, ...]:
        return tuple(self._questions)

    @property
    def tracker(self) -> SessionTracker:
        return self._tracker

    @property
    def current_question(self) -> Question | None:
        if self._tracker.is_complete:
            return None
        return self._questions[self._tracker.current_index]

    @property
    def is_complete(self) -> bool:
        return self._tracker.is_complete

    def _open_question(self, action: str) -> Question | None:
        question = self.current_question
        if question is None or question.is_answered:
            logger.debug("guessing_game_action_ignored", action=action, reason="not_open")
            return None
        return question

    def select(self, answer_id: int) -> bool:
        question = self._open_question("select")
        if question is None:
            return False
        answer = question.find_answer(answer_id)
        if answer is None or answer.is_eliminated:
            logger.debug("guessing_game_action_ignored", action="select", answer_id=answer_id)
            return False
        question.selected_answer = answer
        return True

    def use_hint_button(self) -> bool:
        question = self._open_question("hint_button")
        if question is None or question.hint_button_used:
            return False
        candidates = question.eliminable_answers()
        if not candidates:
            return False

        eliminated = self._rng.choice(candidates)
        eliminated.is_eliminated = True
        question.hint_button_used = True
        if question.selected_answer is not None and question.selected_answer.id == eliminated.id:
            question.selected_answer = None
        self._tracker.record_hint_button()
        return True

    def submit(self) -> bool:
        question = self._open_question("submit")
        if question is None or question.selected_answer is None:
            return False
        is_correct = question.selected_answer.id == question.correct_answer.id
        question.is_answered = True
        question.is_correct = is_correct
        self._tracker.record_answer(is_correct=is_correct)
        return True

    def use_show_answer(self) -> bool:
        question = self._open_question("show_answer")
        if question is None or question.show_answer_used:
            return False
        question.show_answer_used = True
        question.selected_answer = question.find_answer(question.correct_answer.id)
        question.is_answered = True
        # Revealing the answer scores as correct.
        question.is_correct = True
        self._tracker.record_answer(is_correct=True, show_answer=True)
        return True

    def advance(self) -> bool:
        question = self.current_question
        if question is None or not question.is_answered:
            return False
        self._tracker.finish_question(question)
        if self._tracker.is_complete:
            score = self._tracker.score
            logger.info(
                "guessing_game_session_completed",
                questions=self._tracker.total_questions,
                correct=score.correct,
                incorrect=score.incorrect,
                show_answers_used=score.show_answers_used,
            )
        return True
