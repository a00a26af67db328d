from __future__ import annotations

import asyncio
import random

import pytest

from guessing_game.game.questions.builder import QuestionBuilder
from guessing_game.game.questions.content_source import MovieSummary
from guessing_game.game.questions.plan import count_slots, plan_question_categories
from guessing_game.game.questions.types import GameOptions, Question
from guessing_game.game.sessions.errors import BuildFailureError
from tests.game.content_source_fixtures import (
    FakeContentSource,
    make_characters,
    make_hints,
    make_movies,
)


def _assert_question_invariants(question: Question, *, expected_answers: int) -> None:
    ids = [answer.id for answer in question.all_answers]
    assert len(question.all_answers) == expected_answers
    assert len(question.wrong_answers) + 1 == len(question.all_answers)
    assert sum(answer.is_correct for answer in question.all_answers) == 1
    assert len(set(ids)) == len(ids)
    assert question.correct_answer in question.all_answers
    assert all(not answer.is_eliminated for answer in question.all_answers)
    assert question.is_answered is False
    assert question.selected_answer is None


@pytest.mark.asyncio
async def test_movies_easy_game_fetches_one_pool_sized_for_every_answer() -> None:
    source = FakeContentSource(movies=make_movies(40))
    builder = QuestionBuilder(source, rng=random.Random(3))

    questions = await builder.build(GameOptions("movies", 1, 10))

    pool_calls = [call for call in source.calls if call[0] in {"movies", "characters"}]
    assert pool_calls == [("movies", 40)]
    assert len(questions) == 10
    assert [question.question_number for question in questions] == list(range(1, 11))
    for question in questions:
        assert question.category == "movie"
        _assert_question_invariants(question, expected_answers=4)
        assert len(question.revealed_hints) == 3
        assert len(question.available_hints) == 5


@pytest.mark.asyncio
async def test_build_consumes_pool_in_order_without_reuse() -> None:
    source = FakeContentSource(movies=make_movies(40))
    questions = await QuestionBuilder(source, rng=random.Random(5)).build(GameOptions("movies", 1, 10))

    assert [question.correct_answer.id for question in questions] == list(range(1, 41, 4))
    used_ids = [answer.id for question in questions for answer in question.all_answers]
    assert sorted(used_ids) == list(range(1, 41))


@pytest.mark.asyncio
async def test_hints_are_fetched_once_per_correct_answer_after_pools() -> None:
    source = FakeContentSource(movies=make_movies(40))
    questions = await QuestionBuilder(source, rng=random.Random(5)).build(GameOptions("movies", 1, 10))

    assert [call[0] for call in source.calls] == ["movies", "movie_hints"]
    _, hinted_url_ids = source.calls[1]
    assert hinted_url_ids == tuple(question.correct_answer.url_id for question in questions)
    first = questions[0]
    assert first.revealed_hints == make_hints(first.correct_answer.url_id)[:3]


@pytest.mark.asyncio
async def test_hard_difficulty_uses_eight_answers_and_one_hint() -> None:
    source = FakeContentSource(characters=make_characters(80))
    questions = await QuestionBuilder(source, rng=random.Random(9)).build(
        GameOptions("characters", 3, 10)
    )

    assert [call for call in source.calls if call[0] == "characters"] == [("characters", 80)]
    assert all(call[0] != "movies" for call in source.calls)
    for question in questions:
        assert question.category == "character"
        _assert_question_invariants(question, expected_answers=8)
        assert len(question.revealed_hints) == 1


@pytest.mark.asyncio
async def test_mixed_game_follows_seeded_plan_with_one_fetch_per_type() -> None:
    options = GameOptions("mixed", 2, 20)
    expected_plan = plan_question_categories(options, rng=random.Random(11))
    movie_slots, character_slots = count_slots(expected_plan)
    source = FakeContentSource(movies=make_movies(200), characters=make_characters(200))

    questions = await QuestionBuilder(source, rng=random.Random(11)).build(options)

    assert [question.category for question in questions] == expected_plan
    pool_calls = sorted(call for call in source.calls if call[0] in {"movies", "characters"})
    assert pool_calls == [("characters", character_slots * 6), ("movies", movie_slots * 6)]
    assert len(source.calls) == 4
    for question in questions:
        _assert_question_invariants(question, expected_answers=6)


@pytest.mark.asyncio
async def test_exhausted_pool_truncates_session() -> None:
    source = FakeContentSource(movies=make_movies(30))
    questions = await QuestionBuilder(source, rng=random.Random(1)).build(GameOptions("movies", 1, 10))

    assert len(questions) == 7
    assert [question.question_number for question in questions] == list(range(1, 8))


@pytest.mark.asyncio
async def test_duplicate_items_in_pool_are_skipped() -> None:
    movies = make_movies(8)
    duplicated = [movies[0], movies[0], *movies[1:]]
    source = FakeContentSource(movies=duplicated)

    questions = await QuestionBuilder(source, rng=random.Random(1)).build(GameOptions("movies", 1, 10))

    assert len(questions) == 2
    for question in questions:
        _assert_question_invariants(question, expected_answers=4)


@pytest.mark.asyncio
async def test_empty_pool_is_a_build_failure() -> None:
    source = FakeContentSource(movies=[])

    with pytest.raises(BuildFailureError):
        await QuestionBuilder(source).build(GameOptions("movies", 1, 10))

    assert [call[0] for call in source.calls] == ["movies"]


@pytest.mark.asyncio
async def test_content_source_failure_aborts_build() -> None:
    source = FakeContentSource(
        movies=make_movies(200),
        characters=make_characters(200),
        fail_on="characters",
    )

    with pytest.raises(BuildFailureError):
        await QuestionBuilder(source, rng=random.Random(2)).build(GameOptions("mixed", 1, 20))

    assert all(call[0] not in {"movie_hints", "character_hints"} for call in source.calls)


@pytest.mark.asyncio
async def test_hint_fetch_failure_aborts_build() -> None:
    source = FakeContentSource(movies=make_movies(40), fail_on="movie_hints")

    with pytest.raises(BuildFailureError):
        await QuestionBuilder(source).build(GameOptions("movies", 1, 10))


@pytest.mark.asyncio
async def test_entity_without_hints_gets_empty_hint_list() -> None:
    movies = make_movies(8)
    source = FakeContentSource(movies=movies, movie_hints={"movie_1": make_hints("movie_1", count=2)})

    questions = await QuestionBuilder(source, rng=random.Random(4)).build(GameOptions("movies", 1, 10))

    assert len(questions[0].revealed_hints) == 2
    assert questions[1].revealed_hints == []


@pytest.mark.asyncio
async def test_cancelled_build_propagates_cancellation() -> None:
    source = FakeContentSource(movies=make_movies(40), block_on="movies")
    task = asyncio.create_task(QuestionBuilder(source).build(GameOptions("movies", 1, 10)))
    await source.blocked.wait()

    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_answer_order_is_shuffled_once_and_contains_the_correct_answer() -> None:
    movies = [MovieSummary(id=index, url_id=f"m{index}", title=f"M{index}") for index in range(1, 41)]
    source = FakeContentSource(movies=movies)
    questions = await QuestionBuilder(source, rng=random.Random(21)).build(GameOptions("movies", 1, 10))

    positions = {
        [answer.id for answer in question.all_answers].index(question.correct_answer.id)
        for question in questions
    }
    assert len(positions) > 1
