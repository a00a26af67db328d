from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any

from guessing_game.game.questions.builder import QuestionBuilder
from guessing_game.game.questions.content_source import ContentSource
from guessing_game.game.questions.types import GameOptions, Question

from .errors import GuessingGameError, SessionNotStartedError
from .runtime import QuestionRuntime
from .state import (
    STATE_VERSION,
    options_from_state,
    options_to_state,
    question_from_state,
    question_to_state,
    score_from_state,
    score_to_state,
)
from .tracker import SessionTracker
from .types import SessionScore, SessionSummary


class GuessingGameSession:
    """One play-through: options, the built question list, runtime and tracker.

    ``start`` commits nothing until the build has fully succeeded, so a failed
    or cancelled build leaves the previous state as it was.
    """

    def __init__(self, content_source: ContentSource, *, rng: random.Random | None = None) -> None:
        self._content_source = content_source
        self._rng = rng or random.Random()
        self._options: GameOptions | None = None
        self._runtime: QuestionRuntime | None = None

    @property
    def options(self) -> GameOptions | None:
        return self._options

    @property
    def is_active(self) -> bool:
        return self._runtime is not None and not self._runtime.is_complete

    @property
    def is_complete(self) -> bool:
        return self._runtime is not None and self._runtime.is_complete

    @property
    def runtime(self) -> QuestionRuntime:
        if self._runtime is None:
            raise SessionNotStartedError
        return self._runtime

    @property
    def tracker(self) -> SessionTracker:
        return self.runtime.tracker

    @property
    def current_question(self) -> Question | None:
        return self.runtime.current_question

    @property
    def score(self) -> SessionScore:
        return self.tracker.score

    async def start(self, options: GameOptions) -> list[Question]:
        questions = await QuestionBuilder(self._content_source, rng=self._rng).build(options)
        self._options = options
        self._runtime = QuestionRuntime(
            questions,
            SessionTracker(total_questions=len(questions), requested_questions=options.question_count),
            rng=self._rng,
        )
        return questions

    def reset(self) -> None:
        """Drop the whole session (quit or restart)."""
        self._options = None
        self._runtime = None

    def select(self, answer_id: int) -> bool:
        return self.runtime.select(answer_id)

    def use_hint_button(self) -> bool:
        return self.runtime.use_hint_button()

    def submit(self) -> bool:
        return self.runtime.submit()

    def use_show_answer(self) -> bool:
        return self.runtime.use_show_answer()

    def advance(self) -> bool:
        return self.runtime.advance()

    def summary(self) -> SessionSummary:
        return self.tracker.summary()

    def to_state(self) -> dict[str, Any]:
        runtime = self.runtime
        tracker = runtime.tracker
        return {
            "version": STATE_VERSION,
            "options": options_to_state(self._options) if self._options is not None else None,
            "questions": [question_to_state(question) for question in runtime.questions],
            "history": [question_to_state(question) for question in tracker.history],
            "current_question_index": tracker.current_index,
            "requested_questions": tracker.requested_questions,
            "score": score_to_state(tracker.score),
            "is_complete": tracker.is_complete,
            "last_updated": datetime.now(timezone.utc).isoformat(),
        }

    @classmethod
    def from_state(
        cls,
        state: dict[str, Any],
        *,
        content_source: ContentSource,
        rng: random.Random | None = None,
    ) -> GuessingGameSession:
        if state.get("version") != STATE_VERSION:
            raise GuessingGameError(f"unsupported saved game version: {state.get('version')!r}")

        session = cls(content_source, rng=rng)
        questions = [question_from_state(question) for question in state["questions"]]
        tracker = SessionTracker.restore(
            total_questions=len(questions),
            requested_questions=int(state.get("requested_questions", len(questions))),
            score=score_from_state(state.get("score", {})),
            history=[question_from_state(question) for question in state.get("history", [])],
            current_index=int(state.get("current_question_index", 0)),
            completed=bool(state.get("is_complete", False)),
        )
        options = state.get("options")
        session._options = options_from_state(options) if options is not None else None
        session._runtime = QuestionRuntime(questions, tracker, rng=session._rng)
        return session
