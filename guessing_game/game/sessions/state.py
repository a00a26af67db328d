"""Plain-data form of a game session.

Everything here round-trips through JSON, so any store can persist a session
without knowing about the engine's classes.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from guessing_game.game.questions.types import AnswerChoice, GameOptions, Hint, Question

from .types import SessionScore

STATE_VERSION = 1


def options_to_state(options: GameOptions) -> dict[str, Any]:
    return asdict(options)


def options_from_state(data: dict[str, Any]) -> GameOptions:
    return GameOptions(
        category=data["category"],
        difficulty=int(data["difficulty"]),
        question_count=int(data["question_count"]),
    )


def answer_to_state(answer: AnswerChoice) -> dict[str, Any]:
    return {
        "id": answer.id,
        "url_id": answer.url_id,
        "name": answer.name,
        "title": answer.title,
        "image": answer.image,
        "is_correct": answer.is_correct,
        "is_eliminated": answer.is_eliminated,
    }


def answer_from_state(data: dict[str, Any]) -> AnswerChoice:
    return AnswerChoice(
        id=int(data["id"]),
        url_id=data["url_id"],
        name=data["name"],
        title=data.get("title"),
        image=data.get("image"),
        is_correct=bool(data["is_correct"]),
        is_eliminated=bool(data.get("is_eliminated", False)),
    )


def hint_to_state(hint: Hint) -> dict[str, Any]:
    return asdict(hint)


def hint_from_state(data: dict[str, Any]) -> Hint:
    return Hint(
        id=int(data["id"]),
        content=data["content"],
        hint_type=data["hint_type"],
        difficulty=int(data["difficulty"]),
        movie_url_id=data.get("movie_url_id"),
        character_url_id=data.get("character_url_id"),
    )


def question_to_state(question: Question) -> dict[str, Any]:
    return {
        "question_number": question.question_number,
        "category": question.category,
        "correct_answer_id": question.correct_answer.id,
        "all_answers": [answer_to_state(answer) for answer in question.all_answers],
        "revealed_hints": [hint_to_state(hint) for hint in question.revealed_hints],
        "available_hints": [hint_to_state(hint) for hint in question.available_hints],
        "hint_button_used": question.hint_button_used,
        "show_answer_used": question.show_answer_used,
        "is_answered": question.is_answered,
        "selected_answer_id": (
            question.selected_answer.id if question.selected_answer is not None else None
        ),
        "is_correct": question.is_correct,
    }


def question_from_state(data: dict[str, Any]) -> Question:
    # correct/wrong/selected must be the same objects as in all_answers so an
    # elimination is visible through every reference.
    all_answers = [answer_from_state(answer) for answer in data["all_answers"]]
    by_id = {answer.id: answer for answer in all_answers}
    correct_answer = by_id[int(data["correct_answer_id"])]
    selected_id = data.get("selected_answer_id")
    return Question(
        question_number=int(data["question_number"]),
        category=data["category"],
        correct_answer=correct_answer,
        wrong_answers=[answer for answer in all_answers if answer.id != correct_answer.id],
        all_answers=all_answers,
        revealed_hints=[hint_from_state(hint) for hint in data.get("revealed_hints", [])],
        available_hints=[hint_from_state(hint) for hint in data.get("available_hints", [])],
        hint_button_used=bool(data.get("hint_button_used", False)),
        show_answer_used=bool(data.get("show_answer_used", False)),
        is_answered=bool(data.get("is_answered", False)),
        selected_answer=by_id.get(int(selected_id)) if selected_id is not None else None,
        is_correct=data.get("is_correct"),
    )


def score_to_state(score: SessionScore) -> dict[str, int]:
    return asdict(score)


def score_from_state(data: dict[str, Any]) -> SessionScore:
    return SessionScore(
        correct=int(data.get("correct", 0)),
        incorrect=int(data.get("incorrect", 0)),
        show_answers_used=int(data.get("show_answers_used", 0)),
        hint_buttons_used=int(data.get("hint_buttons_used", 0)),
    )
