from __future__ import annotations

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class StartGameRequest(BaseModel):
    category: Literal["movies", "characters", "mixed"]
    difficulty: Literal[1, 2, 3] = 1
    question_count: Literal[10, 20, 50] = 10


class SelectAnswerRequest(BaseModel):
    answer_id: int


class AnswerChoiceView(BaseModel):
    id: int
    url_id: str
    name: str
    title: str | None = None
    image: str | None = None
    is_eliminated: bool
    # Hidden until the question is answered.
    is_correct: bool | None = None


class HintView(BaseModel):
    id: int
    content: str
    hint_type: str
    difficulty: int


class QuestionView(BaseModel):
    question_number: int
    category: Literal["movie", "character"]
    state: Literal["unanswered", "hint-used", "answered"]
    answers: list[AnswerChoiceView]
    revealed_hints: list[HintView]
    hint_button_used: bool
    show_answer_used: bool
    is_answered: bool
    selected_answer_id: int | None = None
    correct_answer_id: int | None = None
    is_correct: bool | None = None


class ScoreView(BaseModel):
    correct: int = Field(ge=0)
    incorrect: int = Field(ge=0)
    show_answers_used: int = Field(ge=0)
    hint_buttons_used: int = Field(ge=0)


class GameView(BaseModel):
    game_id: UUID
    status: Literal["active", "complete"]
    current_question_number: int
    total_questions: int
    requested_questions: int
    score: ScoreView
    question: QuestionView | None = None


class GameActionResponse(GameView):
    applied: bool


class GameSummaryResponse(BaseModel):
    game_id: UUID
    requested_questions: int
    truncated: bool
    score: ScoreView
    questions: list[QuestionView]
