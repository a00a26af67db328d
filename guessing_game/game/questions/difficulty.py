from __future__ import annotations

from .constants import (
    ANSWER_COUNT_BY_DIFFICULTY,
    DEFAULT_ANSWER_COUNT,
    DEFAULT_INITIAL_HINT_COUNT,
    INITIAL_HINT_COUNT_BY_DIFFICULTY,
)


def answer_count(difficulty: int) -> int:
    return ANSWER_COUNT_BY_DIFFICULTY.get(difficulty, DEFAULT_ANSWER_COUNT)


def initial_hint_count(difficulty: int) -> int:
    return INITIAL_HINT_COUNT_BY_DIFFICULTY.get(difficulty, DEFAULT_INITIAL_HINT_COUNT)
