"""Library service: fetches records from the catalog API and runs the query engine over them."""

import asyncio
from dataclasses import dataclass

import structlog

from ..models.game import Game, GameDraft
from ..models.query import ALL_GAMES, LibraryQuery
from ..models.review import Review, ReviewDraft
from ..models.stats import GameStats, ReviewStats, ReviewSummary
from .catalog_api import CatalogApiClient
from .errors import ApiError, http_error_message
from .query_engine import aggregate_games, aggregate_reviews, run_query, summarize_reviews
from .validation import ensure_valid_game, ensure_valid_review

log = structlog.stdlib.get_logger()


@dataclass(frozen=True)
class LibraryPage:
    """Result of browsing the library with a query."""
    games: list[Game]  # Filtered and sorted
    stats: GameStats  # Over the whole library, not just the matches

    @property
    def matched(self) -> int:
        return len(self.games)


@dataclass(frozen=True)
class Dashboard:
    """Statistics shown on the dashboard."""
    games: GameStats
    reviews: ReviewStats
    source: str


class LibraryService:
    """High-level operations on the personal library."""

    def __init__(self, api: CatalogApiClient) -> None:
        self.api = api

    async def browse(self, query: LibraryQuery) -> LibraryPage:
        """Fetch the library and apply ``query`` to it."""
        games = await self.api.list_games()
        page = LibraryPage(games=run_query(games, query), stats=aggregate_games(games))
        log.info(
            "Library browsed",
            total=page.stats.total,
            matched=page.matched,
            status=str(query.status),
            search=query.search,
            sort=str(query.sort),
        )
        return page

    async def statistics(self, source: str = "local") -> Dashboard:
        """Dashboard statistics, aggregated locally or computed by the server.

        Both sources produce the same GameStats/ReviewStats shapes.
        """
        if source == "server":
            game_stats, review_stats = await asyncio.gather(
                self.api.game_statistics(),
                self.api.review_statistics(),
            )
        elif source == "local":
            games, reviews = await asyncio.gather(
                self.api.list_games(),
                self.api.list_reviews(),
            )
            game_stats = aggregate_games(games)
            review_stats = aggregate_reviews(reviews, games)
        else:
            raise ValueError(f"Unknown statistics source: {source}")

        log.info("Statistics computed", source=source, games=game_stats.total, reviews=review_stats.total)
        return Dashboard(games=game_stats, reviews=review_stats, source=source)

    async def reviews(self, game_id: str = ALL_GAMES) -> list[Review]:
        """All reviews, or those of a single game."""
        if game_id == ALL_GAMES:
            return await self.api.list_reviews()
        return await self.api.list_reviews_for_game(game_id)

    async def review_summary(self, game_id: str = ALL_GAMES) -> ReviewSummary:
        return summarize_reviews(await self.reviews(game_id))

    async def game(self, game_id: str) -> Game:
        return await self.api.get_game(game_id)

    async def review(self, review_id: str) -> Review:
        """Find a review by id in the full review list."""
        for review in await self.api.list_reviews():
            if review.id == review_id:
                return review
        raise ApiError(http_error_message(404), status_code=404)

    async def add_game(self, draft: GameDraft) -> Game:
        ensure_valid_game(draft)
        return await self.api.create_game(draft)

    async def update_game(self, game_id: str, draft: GameDraft) -> Game:
        ensure_valid_game(draft)
        return await self.api.update_game(game_id, draft)

    async def remove_game(self, game_id: str) -> None:
        await self.api.delete_game(game_id)

    async def add_review(self, draft: ReviewDraft) -> Review:
        ensure_valid_review(draft)
        return await self.api.create_review(draft)

    async def update_review(self, review_id: str, draft: ReviewDraft) -> Review:
        ensure_valid_review(draft)
        return await self.api.update_review(review_id, draft)

    async def remove_review(self, review_id: str) -> None:
        await self.api.delete_review(review_id)
