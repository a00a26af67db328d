from __future__ import annotations

import asyncio
import random
from typing import Any, Coroutine, Protocol, Sequence, TypeVar

import structlog

from guessing_game.game.sessions.errors import BuildFailureError

from .constants import CATEGORY_CHARACTER, CATEGORY_MOVIE
from .content_source import CharacterSummary, ContentSource, MovieSummary
from .difficulty import answer_count, initial_hint_count
from .plan import count_slots, plan_question_categories
from .types import AnswerChoice, GameOptions, Hint, Question, QuestionCategory

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class _Identified(Protocol):
    @property
    def id(self) -> int: ...


IdentifiedT = TypeVar("IdentifiedT", bound=_Identified)


async def _join_all(calls: dict[str, Coroutine[Any, Any, T]]) -> dict[str, T]:
    """Await every call concurrently; the first failure cancels the rest."""
    tasks: dict[str, asyncio.Task[T]] = {}
    try:
        async with asyncio.TaskGroup() as group:
            for key, call in calls.items():
                tasks[key] = group.create_task(call)
    except ExceptionGroup as exc_group:
        cause = exc_group.exceptions[0]
        raise BuildFailureError(f"content source request failed: {cause}") from cause
    return {key: task.result() for key, task in tasks.items()}


def _dedupe_by_id(items: Sequence[IdentifiedT]) -> list[IdentifiedT]:
    seen: set[int] = set()
    unique: list[IdentifiedT] = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


def _movie_choice(movie: MovieSummary, *, is_correct: bool) -> AnswerChoice:
    return AnswerChoice(
        id=movie.id,
        url_id=movie.url_id,
        name=movie.title,
        title=movie.title,
        image=movie.image,
        is_correct=is_correct,
    )


def _character_choice(character: CharacterSummary, *, is_correct: bool) -> AnswerChoice:
    return AnswerChoice(
        id=character.id,
        url_id=character.url_id,
        name=character.name,
        image=character.image,
        is_correct=is_correct,
    )


def _unique_url_ids(questions: Sequence[Question], *, category: QuestionCategory) -> list[str]:
    url_ids: list[str] = []
    for question in questions:
        url_id = question.correct_answer.url_id
        if question.category == category and url_id not in url_ids:
            url_ids.append(url_id)
    return url_ids


class QuestionBuilder:
    """Turns game options into a fully materialized, ordered question list.

    A build costs at most two pool fetches (movies, characters) followed by at
    most two hint fetches, regardless of the question count. Nothing is
    returned unless every fetch succeeds.
    """

    def __init__(self, content_source: ContentSource, *, rng: random.Random | None = None) -> None:
        self._content_source = content_source
        self._rng = rng or random.Random()

    async def build(self, options: GameOptions) -> list[Question]:
        per_question = answer_count(options.difficulty)
        plan = plan_question_categories(options, rng=self._rng)
        movie_slots, character_slots = count_slots(plan)
        logger.info(
            "guessing_game_build_started",
            category=options.category,
            difficulty=options.difficulty,
            question_count=options.question_count,
            movie_slots=movie_slots,
            character_slots=character_slots,
        )

        try:
            movie_pool, character_pool = await self._fetch_pools(
                movie_count=movie_slots * per_question,
                character_count=character_slots * per_question,
            )
            questions = self._assemble(
                plan,
                movie_pool=movie_pool,
                character_pool=character_pool,
                per_question=per_question,
            )
            if not questions:
                raise BuildFailureError("content source returned too few items for a single question")
            await self._attach_hints(questions, hints_to_reveal=initial_hint_count(options.difficulty))
        except BuildFailureError as exc:
            logger.warning("guessing_game_build_failed", error=str(exc))
            raise

        if len(questions) < options.question_count:
            logger.warning(
                "guessing_game_build_truncated",
                requested=options.question_count,
                built=len(questions),
            )
        logger.info("guessing_game_build_completed", built=len(questions))
        return questions

    async def _fetch_pools(
        self,
        *,
        movie_count: int,
        character_count: int,
    ) -> tuple[list[MovieSummary], list[CharacterSummary]]:
        calls: dict[str, Coroutine[Any, Any, list]] = {}
        if movie_count > 0:
            calls[CATEGORY_MOVIE] = self._content_source.random_movies_except([], movie_count)
        if character_count > 0:
            calls[CATEGORY_CHARACTER] = self._content_source.random_characters_except(
                [], character_count
            )
        results = await _join_all(calls)
        return (
            _dedupe_by_id(results.get(CATEGORY_MOVIE, [])),
            _dedupe_by_id(results.get(CATEGORY_CHARACTER, [])),
        )

    def _assemble(
        self,
        plan: Sequence[QuestionCategory],
        *,
        movie_pool: Sequence[MovieSummary],
        character_pool: Sequence[CharacterSummary],
        per_question: int,
    ) -> list[Question]:
        cursors = {CATEGORY_MOVIE: 0, CATEGORY_CHARACTER: 0}
        questions: list[Question] = []
        for category in plan:
            start = cursors[category]
            if category == CATEGORY_MOVIE:
                chunk = [
                    _movie_choice(movie, is_correct=index == 0)
                    for index, movie in enumerate(movie_pool[start : start + per_question])
                ]
            else:
                chunk = [
                    _character_choice(character, is_correct=index == 0)
                    for index, character in enumerate(character_pool[start : start + per_question])
                ]
            if len(chunk) < per_question:
                # Pool exhausted: the slot is dropped and the session gets shorter.
                continue
            cursors[category] = start + per_question

            correct_answer, wrong_answers = chunk[0], chunk[1:]
            all_answers = [*wrong_answers, correct_answer]
            self._rng.shuffle(all_answers)
            questions.append(
                Question(
                    question_number=len(questions) + 1,
                    category=category,
                    correct_answer=correct_answer,
                    wrong_answers=wrong_answers,
                    all_answers=all_answers,
                )
            )
        return questions

    async def _attach_hints(self, questions: list[Question], *, hints_to_reveal: int) -> None:
        calls: dict[str, Coroutine[Any, Any, dict[str, list[Hint]]]] = {}
        movie_url_ids = _unique_url_ids(questions, category=CATEGORY_MOVIE)
        character_url_ids = _unique_url_ids(questions, category=CATEGORY_CHARACTER)
        if movie_url_ids:
            calls[CATEGORY_MOVIE] = self._content_source.batch_hints_for_movies(movie_url_ids)
        if character_url_ids:
            calls[CATEGORY_CHARACTER] = self._content_source.batch_hints_for_characters(
                character_url_ids
            )
        hints_by_category = await _join_all(calls)

        for question in questions:
            url_id = question.correct_answer.url_id
            hints = hints_by_category.get(question.category, {}).get(url_id)
            if not hints:
                logger.warning(
                    "guessing_game_hints_missing",
                    category=question.category,
                    url_id=url_id,
                )
                hints = []
            question.available_hints = list(hints)
            question.revealed_hints = list(hints[:hints_to_reveal])
