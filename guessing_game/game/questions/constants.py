from __future__ import annotations

GAME_CATEGORIES: frozenset[str] = frozenset({"movies", "characters", "mixed"})
GAME_DIFFICULTIES: frozenset[int] = frozenset({1, 2, 3})
GAME_QUESTION_COUNTS: frozenset[int] = frozenset({10, 20, 50})

CATEGORY_MOVIE = "movie"
CATEGORY_CHARACTER = "character"

ANSWER_COUNT_BY_DIFFICULTY: dict[int, int] = {1: 4, 2: 6, 3: 8}
DEFAULT_ANSWER_COUNT = 4
INITIAL_HINT_COUNT_BY_DIFFICULTY: dict[int, int] = {1: 3, 2: 2, 3: 1}
DEFAULT_INITIAL_HINT_COUNT = 2
