from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from guessing_game.game.questions.constants import (
    GAME_CATEGORIES,
    GAME_DIFFICULTIES,
    GAME_QUESTION_COUNTS,
)
from guessing_game.game.sessions.errors import InvalidGameOptionsError

GameCategory = Literal["movies", "characters", "mixed"]
QuestionCategory = Literal["movie", "character"]
QuestionState = Literal["unanswered", "hint-used", "answered"]


@dataclass(frozen=True, slots=True)
class GameOptions:
    category: GameCategory
    difficulty: int
    question_count: int

    def __post_init__(self) -> None:
        if self.category not in GAME_CATEGORIES:
            raise InvalidGameOptionsError(f"unknown category: {self.category!r}")
        if self.difficulty not in GAME_DIFFICULTIES:
            raise InvalidGameOptionsError(f"unsupported difficulty: {self.difficulty!r}")
        if self.question_count not in GAME_QUESTION_COUNTS:
            raise InvalidGameOptionsError(f"unsupported question count: {self.question_count!r}")


@dataclass(slots=True, eq=False)
class AnswerChoice:
    """One selectable answer. Two choices are the same answer when their ids match."""

    id: int
    url_id: str
    name: str
    is_correct: bool
    title: str | None = None
    image: str | None = None
    is_eliminated: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnswerChoice):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True, slots=True)
class Hint:
    id: int
    content: str
    hint_type: str
    difficulty: int
    movie_url_id: str | None = None
    character_url_id: str | None = None


@dataclass(slots=True)
class Question:
    question_number: int
    category: QuestionCategory
    correct_answer: AnswerChoice
    wrong_answers: list[AnswerChoice]
    all_answers: list[AnswerChoice]
    revealed_hints: list[Hint] = field(default_factory=list)
    available_hints: list[Hint] = field(default_factory=list)
    hint_button_used: bool = False
    show_answer_used: bool = False
    is_answered: bool = False
    selected_answer: AnswerChoice | None = None
    is_correct: bool | None = None

    @property
    def state(self) -> QuestionState:
        if self.is_answered:
            return "answered"
        if self.hint_button_used:
            return "hint-used"
        return "unanswered"

    def find_answer(self, answer_id: int) -> AnswerChoice | None:
        for answer in self.all_answers:
            if answer.id == answer_id:
                return answer
        return None

    def eliminable_answers(self) -> list[AnswerChoice]:
        return [
            answer
            for answer in self.all_answers
            if not answer.is_correct and not answer.is_eliminated
        ]
