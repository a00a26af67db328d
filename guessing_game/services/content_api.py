from __future__ import annotations

from typing import Any, Sequence

import httpx
import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from guessing_game.core.config import get_settings
from guessing_game.game.questions.content_source import CharacterSummary, MovieSummary
from guessing_game.game.questions.types import Hint
from guessing_game.game.sessions.errors import ContentSourceError

logger = structlog.get_logger(__name__)


class MoviePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    url_id: str = Field(validation_alias=AliasChoices("url_id", "urlId"))
    title: str
    image_1: str | None = Field(default=None, validation_alias=AliasChoices("image_1", "image1"))


class CharacterPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    url_id: str = Field(validation_alias=AliasChoices("url_id", "urlId"))
    name: str
    profile_image_1: str | None = Field(
        default=None,
        validation_alias=AliasChoices("profile_image_1", "profileImage1"),
    )


class HintPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    content: str
    difficulty: int
    hint_type: str = Field(validation_alias=AliasChoices("hint_type", "hintType"))
    movie_url_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("movie_url_id", "movieUrlId"),
    )
    character_url_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("character_url_id", "characterUrlId"),
    )

    def to_hint(self) -> Hint:
        return Hint(
            id=self.id,
            content=self.content,
            hint_type=self.hint_type,
            difficulty=self.difficulty,
            movie_url_id=self.movie_url_id,
            character_url_id=self.character_url_id,
        )


_MOVIES = TypeAdapter(list[MoviePayload])
_CHARACTERS = TypeAdapter(list[CharacterPayload])
_HINTS_BY_URL_ID = TypeAdapter(dict[str, list[HintPayload]])


class HttpContentSource:
    """Content source backed by the content REST API.

    Every method is exactly one GET request.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_settings(cls) -> HttpContentSource:
        settings = get_settings()
        client = httpx.AsyncClient(
            base_url=settings.content_api_base_url,
            timeout=settings.content_api_timeout_seconds,
        )
        return cls(client)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str, *, params: dict[str, Any]) -> Any:
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("content_api_request_failed", path=path, error=str(exc))
            raise ContentSourceError(f"GET {path} failed: {exc}") from exc

    @staticmethod
    def _validate(adapter: TypeAdapter[Any], payload: Any, *, path: str) -> Any:
        try:
            return adapter.validate_python(payload)
        except ValidationError as exc:
            logger.warning("content_api_payload_invalid", path=path, errors=exc.error_count())
            raise ContentSourceError(f"GET {path} returned an unexpected payload") from exc

    @staticmethod
    def _random_params(exclude_ids: Sequence[int], count: int) -> dict[str, Any]:
        params: dict[str, Any] = {"count": count}
        if exclude_ids:
            params["exclude_ids"] = ",".join(str(item_id) for item_id in exclude_ids)
        return params

    async def random_movies_except(
        self,
        exclude_ids: Sequence[int],
        count: int,
    ) -> list[MovieSummary]:
        path = "/movies/random-except"
        payload = await self._get_json(path, params=self._random_params(exclude_ids, count))
        movies: list[MoviePayload] = self._validate(_MOVIES, payload, path=path)
        return [
            MovieSummary(id=movie.id, url_id=movie.url_id, title=movie.title, image=movie.image_1)
            for movie in movies
        ]

    async def random_characters_except(
        self,
        exclude_ids: Sequence[int],
        count: int,
    ) -> list[CharacterSummary]:
        path = "/characters/random-except"
        payload = await self._get_json(path, params=self._random_params(exclude_ids, count))
        characters: list[CharacterPayload] = self._validate(_CHARACTERS, payload, path=path)
        return [
            CharacterSummary(
                id=character.id,
                url_id=character.url_id,
                name=character.name,
                image=character.profile_image_1,
            )
            for character in characters
        ]

    async def _batch_hints(self, path: str, url_ids: Sequence[str]) -> dict[str, list[Hint]]:
        if not url_ids:
            return {}
        payload = await self._get_json(path, params={"urlIds": ",".join(url_ids)})
        hints_by_url_id: dict[str, list[HintPayload]] = self._validate(
            _HINTS_BY_URL_ID, payload, path=path
        )
        return {
            url_id: [hint.to_hint() for hint in hints]
            for url_id, hints in hints_by_url_id.items()
        }

    async def batch_hints_for_movies(self, url_ids: Sequence[str]) -> dict[str, list[Hint]]:
        return await self._batch_hints("/movie-hints/batch", url_ids)

    async def batch_hints_for_characters(self, url_ids: Sequence[str]) -> dict[str, list[Hint]]:
        return await self._batch_hints("/character-hints/batch", url_ids)
