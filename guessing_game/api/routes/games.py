from __future__ import annotations

import random
from functools import lru_cache
from typing import Callable
from uuid import UUID, uuid4

import structlog
from fastapi import APIRouter, HTTPException, Response, status

from guessing_game.core.config import get_settings
from guessing_game.game.questions.content_source import ContentSource
from guessing_game.game.questions.types import AnswerChoice, GameOptions, Question
from guessing_game.game.sessions.errors import (
    BuildFailureError,
    GuessingGameError,
    SavedGameBusyError,
    SessionNotCompletedError,
)
from guessing_game.game.sessions.service import GuessingGameSession
from guessing_game.game.sessions.types import SessionScore
from guessing_game.services.content_api import HttpContentSource
from guessing_game.services.saved_games import RedisSavedGameStore, SavedGameStore

from .games_models import (
    AnswerChoiceView,
    GameActionResponse,
    GameSummaryResponse,
    GameView,
    HintView,
    QuestionView,
    ScoreView,
    SelectAnswerRequest,
    StartGameRequest,
)

router = APIRouter(prefix="/games", tags=["games"])
logger = structlog.get_logger(__name__)


@lru_cache(maxsize=1)
def _http_content_source() -> HttpContentSource:
    return HttpContentSource.from_settings()


@lru_cache(maxsize=1)
def _redis_saved_game_store() -> RedisSavedGameStore:
    return RedisSavedGameStore.from_settings()


def get_content_source() -> ContentSource:
    return _http_content_source()


def get_saved_game_store() -> SavedGameStore:
    return _redis_saved_game_store()


async def close_game_resources() -> None:
    if _http_content_source.cache_info().currsize:
        await _http_content_source().aclose()
        _http_content_source.cache_clear()
    if _redis_saved_game_store.cache_info().currsize:
        await _redis_saved_game_store().aclose()
        _redis_saved_game_store.cache_clear()


def _new_rng() -> random.Random:
    return random.Random(get_settings().game_random_seed)


def _answer_view(answer: AnswerChoice, *, reveal: bool) -> AnswerChoiceView:
    return AnswerChoiceView(
        id=answer.id,
        url_id=answer.url_id,
        name=answer.name,
        title=answer.title,
        image=answer.image,
        is_eliminated=answer.is_eliminated,
        is_correct=answer.is_correct if reveal else None,
    )


def _question_view(question: Question) -> QuestionView:
    reveal = question.is_answered
    return QuestionView(
        question_number=question.question_number,
        category=question.category,
        state=question.state,
        answers=[_answer_view(answer, reveal=reveal) for answer in question.all_answers],
        revealed_hints=[
            HintView(
                id=hint.id,
                content=hint.content,
                hint_type=hint.hint_type,
                difficulty=hint.difficulty,
            )
            for hint in question.revealed_hints
        ],
        hint_button_used=question.hint_button_used,
        show_answer_used=question.show_answer_used,
        is_answered=question.is_answered,
        selected_answer_id=(
            question.selected_answer.id if question.selected_answer is not None else None
        ),
        correct_answer_id=question.correct_answer.id if reveal else None,
        is_correct=question.is_correct,
    )


def _score_view(score: SessionScore) -> ScoreView:
    return ScoreView(
        correct=score.correct,
        incorrect=score.incorrect,
        show_answers_used=score.show_answers_used,
        hint_buttons_used=score.hint_buttons_used,
    )


def _game_view(game_id: UUID, session: GuessingGameSession) -> GameView:
    tracker = session.tracker
    question = session.current_question
    return GameView(
        game_id=game_id,
        status="complete" if session.is_complete else "active",
        current_question_number=tracker.current_question_number,
        total_questions=tracker.total_questions,
        requested_questions=tracker.requested_questions,
        score=_score_view(tracker.score),
        question=_question_view(question) if question is not None else None,
    )


async def _load_session(game_id: UUID) -> GuessingGameSession:
    state = await get_saved_game_store().load(str(game_id))
    if state is None:
        raise HTTPException(status_code=404, detail={"code": "E_GAME_NOT_FOUND"})
    try:
        return GuessingGameSession.from_state(
            state,
            content_source=get_content_source(),
            rng=_new_rng(),
        )
    except (GuessingGameError, KeyError, TypeError, ValueError) as exc:
        logger.warning("saved_game_load_failed", game_id=str(game_id), error=str(exc))
        raise HTTPException(status_code=404, detail={"code": "E_GAME_NOT_FOUND"}) from exc


async def _apply_action(
    game_id: UUID,
    action: Callable[[GuessingGameSession], bool],
) -> GameActionResponse:
    store = get_saved_game_store()
    try:
        async with store.lock(str(game_id)):
            session = await _load_session(game_id)
            applied = action(session)
            if applied:
                await store.save(str(game_id), session.to_state())
    except SavedGameBusyError as exc:
        raise HTTPException(status_code=409, detail={"code": "E_GAME_BUSY"}) from exc
    view = _game_view(game_id, session)
    return GameActionResponse(**view.model_dump(), applied=applied)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=GameView)
async def start_game(payload: StartGameRequest) -> GameView:
    options = GameOptions(
        category=payload.category,
        difficulty=payload.difficulty,
        question_count=payload.question_count,
    )
    session = GuessingGameSession(get_content_source(), rng=_new_rng())
    try:
        await session.start(options)
    except BuildFailureError as exc:
        raise HTTPException(status_code=502, detail={"code": "E_BUILD_FAILED"}) from exc

    game_id = uuid4()
    await get_saved_game_store().save(str(game_id), session.to_state())
    return _game_view(game_id, session)


@router.get("/{game_id}", response_model=GameView)
async def get_game(game_id: UUID) -> GameView:
    session = await _load_session(game_id)
    return _game_view(game_id, session)


@router.post("/{game_id}/select", response_model=GameActionResponse)
async def select_answer(game_id: UUID, payload: SelectAnswerRequest) -> GameActionResponse:
    return await _apply_action(game_id, lambda session: session.select(payload.answer_id))


@router.post("/{game_id}/hint", response_model=GameActionResponse)
async def use_hint_button(game_id: UUID) -> GameActionResponse:
    return await _apply_action(game_id, lambda session: session.use_hint_button())


@router.post("/{game_id}/submit", response_model=GameActionResponse)
async def submit_answer(game_id: UUID) -> GameActionResponse:
    return await _apply_action(game_id, lambda session: session.submit())


@router.post("/{game_id}/show-answer", response_model=GameActionResponse)
async def show_answer(game_id: UUID) -> GameActionResponse:
    return await _apply_action(game_id, lambda session: session.use_show_answer())


@router.post("/{game_id}/advance", response_model=GameActionResponse)
async def advance(game_id: UUID) -> GameActionResponse:
    return await _apply_action(game_id, lambda session: session.advance())


@router.get("/{game_id}/summary", response_model=GameSummaryResponse)
async def get_summary(game_id: UUID) -> GameSummaryResponse:
    session = await _load_session(game_id)
    try:
        summary = session.summary()
    except SessionNotCompletedError as exc:
        raise HTTPException(status_code=409, detail={"code": "E_GAME_NOT_COMPLETED"}) from exc
    return GameSummaryResponse(
        game_id=game_id,
        requested_questions=summary.requested_questions,
        truncated=summary.truncated,
        score=_score_view(summary.score),
        questions=[_question_view(question) for question in summary.questions],
    )


@router.delete("/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
async def quit_game(game_id: UUID) -> Response:
    store = get_saved_game_store()
    try:
        async with store.lock(str(game_id)):
            await store.clear(str(game_id))
    except SavedGameBusyError as exc:
        raise HTTPException(status_code=409, detail={"code": "E_GAME_BUSY"}) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
