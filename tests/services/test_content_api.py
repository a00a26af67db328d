from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from guessing_game.game.sessions.errors import ContentSourceError
from guessing_game.services.content_api import HttpContentSource

BASE_URL = "http://content.example.local/api"


def _source(handler: Callable[[httpx.Request], httpx.Response]) -> HttpContentSource:
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return HttpContentSource(client)


def _recording_handler(
    requests: list[httpx.Request],
    *,
    payload: Any,
    status_code: int = 200,
) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, json=payload)

    return handler


@pytest.mark.asyncio
async def test_random_movies_requests_count_without_empty_exclusions() -> None:
    requests: list[httpx.Request] = []
    source = _source(
        _recording_handler(
            requests,
            payload=[
                {
                    "id": 7,
                    "url_id": "frozen",
                    "title": "Frozen",
                    "image_1": "frozen.jpg",
                    "short_description": "ignored",
                },
            ],
        )
    )

    movies = await source.random_movies_except([], 40)

    assert len(requests) == 1
    assert requests[0].url.path == "/api/movies/random-except"
    assert dict(requests[0].url.params) == {"count": "40"}
    assert movies[0].id == 7
    assert movies[0].url_id == "frozen"
    assert movies[0].title == "Frozen"
    assert movies[0].image == "frozen.jpg"


@pytest.mark.asyncio
async def test_random_characters_sends_exclusions_and_accepts_camel_case() -> None:
    requests: list[httpx.Request] = []
    source = _source(
        _recording_handler(
            requests,
            payload=[{"id": 3, "urlId": "elsa", "name": "Elsa", "profileImage1": "elsa.png"}],
        )
    )

    characters = await source.random_characters_except([1, 2], 5)

    assert requests[0].url.path == "/api/characters/random-except"
    assert requests[0].url.params["exclude_ids"] == "1,2"
    assert characters[0].url_id == "elsa"
    assert characters[0].image == "elsa.png"


@pytest.mark.asyncio
async def test_batch_hints_are_keyed_by_url_id_in_source_order() -> None:
    requests: list[httpx.Request] = []
    source = _source(
        _recording_handler(
            requests,
            payload={
                "frozen": [
                    {"id": 2, "movieUrlId": "frozen", "content": "Ice", "difficulty": 1, "hintType": "PLOT"},
                    {"id": 1, "movieUrlId": "frozen", "content": "Song", "difficulty": 2, "hintType": "QUOTE"},
                ],
            },
        )
    )

    hints = await source.batch_hints_for_movies(["frozen", "moana"])

    assert requests[0].url.path == "/api/movie-hints/batch"
    assert requests[0].url.params["urlIds"] == "frozen,moana"
    assert [hint.id for hint in hints["frozen"]] == [2, 1]
    assert hints["frozen"][0].hint_type == "PLOT"
    assert hints["frozen"][0].movie_url_id == "frozen"
    assert hints["frozen"][0].character_url_id is None
    assert "moana" not in hints


@pytest.mark.asyncio
async def test_character_hints_use_character_endpoint() -> None:
    requests: list[httpx.Request] = []
    source = _source(_recording_handler(requests, payload={}))

    hints = await source.batch_hints_for_characters(["elsa"])

    assert requests[0].url.path == "/api/character-hints/batch"
    assert hints == {}


@pytest.mark.asyncio
async def test_empty_hint_batch_skips_request() -> None:
    requests: list[httpx.Request] = []
    source = _source(_recording_handler(requests, payload={}))

    assert await source.batch_hints_for_movies([]) == {}
    assert requests == []


@pytest.mark.asyncio
async def test_error_status_raises_content_source_error() -> None:
    requests: list[httpx.Request] = []
    source = _source(_recording_handler(requests, payload={"error": "boom"}, status_code=500))

    with pytest.raises(ContentSourceError):
        await source.random_movies_except([], 4)


@pytest.mark.asyncio
async def test_transport_error_raises_content_source_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    source = _source(handler)

    with pytest.raises(ContentSourceError):
        await source.batch_hints_for_characters(["elsa"])


@pytest.mark.asyncio
async def test_unexpected_payload_raises_content_source_error() -> None:
    requests: list[httpx.Request] = []
    source = _source(_recording_handler(requests, payload={"not": "a list"}))

    with pytest.raises(ContentSourceError):
        await source.random_movies_except([], 4)
