"""Typed client for the catalog REST API."""

from typing import Any
from urllib.parse import quote

import httpx
import structlog

from ..models.game import Game, GameDraft
from ..models.review import Review, ReviewDraft
from ..models.stats import GameStats, ReviewStats
from . import codec
from .errors import ApiError, NetworkError, ValidationError, http_error_message
from .http_client import HttpClientService

log = structlog.stdlib.get_logger()

GAMES_PATH = "/juegos"
REVIEWS_PATH = "/reseñas"


def _record_path(collection: str, record_id: str) -> str:
    return f"{collection}/{quote(record_id, safe='')}"


class CatalogApiClient:
    """Catalog API operations returning model objects.

    Every payload is unwrapped from the server's ``{"data": ...}`` envelope.
    Transport failures become NetworkError; error statuses become ApiError
    carrying the server's ``message`` when it sends one.
    """

    def __init__(self, http_client: HttpClientService) -> None:
        self.http_client = http_client

    async def _call(self, method: str, path: str, json: Any = None) -> Any:
        try:
            response = await self.http_client.request(method, path, json=json)
        except httpx.HTTPStatusError as e:
            raise self._api_error(e) from e
        except httpx.TimeoutException as e:
            raise NetworkError(
                "The catalog server took too long to respond.",
                original_error=e,
                url=str(e.request.url),
            ) from e
        except httpx.RequestError as e:
            raise NetworkError(
                "Unable to reach the catalog server.",
                original_error=e,
                url=str(e.request.url),
            ) from e

        if response.status_code == 204 or not response.content:
            return None
        try:
            body = response.json()
        except ValueError as e:
            raise ValidationError("The server returned a response that is not JSON", field=path) from e
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    @staticmethod
    def _api_error(error: httpx.HTTPStatusError) -> ApiError:
        server_message = None
        try:
            body = error.response.json()
            if isinstance(body, dict):
                server_message = body.get("message")
        except ValueError:
            pass

        status_code = error.response.status_code
        return ApiError(
            message=server_message or http_error_message(status_code),
            status_code=status_code,
            url=str(error.request.url),
            server_message=server_message,
        )

    # Games

    async def list_games(self) -> list[Game]:
        data = await self._call("GET", GAMES_PATH)
        games = [codec.game_from_wire(item) for item in data or []]
        log.info("Games fetched", count=len(games))
        return games

    async def get_game(self, game_id: str) -> Game:
        data = await self._call("GET", _record_path(GAMES_PATH, game_id))
        return codec.game_from_wire(data)

    async def create_game(self, draft: GameDraft) -> Game:
        data = await self._call("POST", GAMES_PATH, json=codec.game_to_wire(draft))
        game = codec.game_from_wire(data)
        log.info("Game created", game_id=game.id, title=game.title)
        return game

    async def update_game(self, game_id: str, draft: GameDraft) -> Game:
        data = await self._call("PUT", _record_path(GAMES_PATH, game_id), json=codec.game_to_wire(draft))
        log.info("Game updated", game_id=game_id)
        return codec.game_from_wire(data)

    async def delete_game(self, game_id: str) -> None:
        await self._call("DELETE", _record_path(GAMES_PATH, game_id))
        log.info("Game deleted", game_id=game_id)

    async def game_statistics(self) -> GameStats:
        data = await self._call("GET", f"{GAMES_PATH}/estadisticas")
        return codec.game_stats_from_wire(data or {})

    # Reviews

    async def list_reviews(self) -> list[Review]:
        data = await self._call("GET", REVIEWS_PATH)
        reviews = [codec.review_from_wire(item) for item in data or []]
        log.info("Reviews fetched", count=len(reviews))
        return reviews

    async def list_reviews_for_game(self, game_id: str) -> list[Review]:
        data = await self._call("GET", _record_path(f"{REVIEWS_PATH}/juego", game_id))
        return [codec.review_from_wire(item) for item in data or []]

    async def create_review(self, draft: ReviewDraft) -> Review:
        data = await self._call("POST", REVIEWS_PATH, json=codec.review_to_wire(draft))
        review = codec.review_from_wire(data)
        log.info("Review created", review_id=review.id, game_id=review.game_id)
        return review

    async def update_review(self, review_id: str, draft: ReviewDraft) -> Review:
        data = await self._call("PUT", _record_path(REVIEWS_PATH, review_id), json=codec.review_to_wire(draft))
        log.info("Review updated", review_id=review_id)
        return codec.review_from_wire(data)

    async def delete_review(self, review_id: str) -> None:
        await self._call("DELETE", _record_path(REVIEWS_PATH, review_id))
        log.info("Review deleted", review_id=review_id)

    async def review_statistics(self) -> ReviewStats:
        data = await self._call("GET", f"{REVIEWS_PATH}/estadisticas")
        return codec.review_stats_from_wire(data or {})
