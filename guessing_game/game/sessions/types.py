from __future__ import annotations

from dataclasses import dataclass

from guessing_game.game.questions.types import Question


@dataclass(frozen=True, slots=True)
class SessionScore:
    correct: int = 0
    incorrect: int = 0
    show_answers_used: int = 0
    hint_buttons_used: int = 0

    @property
    def answered(self) -> int:
        return self.correct + self.incorrect


@dataclass(frozen=True, slots=True)
class SessionSummary:
    questions: tuple[Question, ...]
    score: SessionScore
    requested_questions: int

    @property
    def truncated(self) -> bool:
        return len(self.questions) < self.requested_questions
