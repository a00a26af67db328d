from __future__ import annotations

import random
from collections import Counter

from .constants import CATEGORY_CHARACTER, CATEGORY_MOVIE
from .types import GameOptions, QuestionCategory


def plan_question_categories(
    options: GameOptions,
    *,
    rng: random.Random,
) -> list[QuestionCategory]:
    """Return the category of every question slot, in play order.

    Mixed games flip a fair coin per slot, so the split is not balanced.
    """
    if options.category == "movies":
        return [CATEGORY_MOVIE] * options.question_count
    if options.category == "characters":
        return [CATEGORY_CHARACTER] * options.question_count
    return [
        CATEGORY_MOVIE if rng.random() < 0.5 else CATEGORY_CHARACTER
        for _ in range(options.question_count)
    ]


def count_slots(plan: list[QuestionCategory]) -> tuple[int, int]:
    counts = Counter(plan)
    return counts[CATEGORY_MOVIE], counts[CATEGORY_CHARACTER]
