from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from .types import Hint


@dataclass(frozen=True, slots=True)
class MovieSummary:
    id: int
    url_id: str
    title: str
    image: str | None = None


@dataclass(frozen=True, slots=True)
class CharacterSummary:
    id: int
    url_id: str
    name: str
    image: str | None = None


class ContentSource(Protocol):
    """Supplier of random movies, characters and their hints.

    Every call is a single round trip. Implementations raise
    ``ContentSourceError`` on any failure.
    """

    async def random_movies_except(
        self,
        exclude_ids: Sequence[int],
        count: int,
    ) -> list[MovieSummary]: ...

    async def random_characters_except(
        self,
        exclude_ids: Sequence[int],
        count: int,
    ) -> list[CharacterSummary]: ...

    async def batch_hints_for_movies(self, url_ids: Sequence[str]) -> dict[str, list[Hint]]: ...

    async def batch_hints_for_characters(self, url_ids: Sequence[str]) -> dict[str, list[Hint]]: ...
