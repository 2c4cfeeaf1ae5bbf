"""Data models for the game catalog client."""

from .config import AppConfig
from .game import GENRES, PLATFORMS, Game, GameDraft, GameStatus
from .query import ALL_STATUSES, LibraryQuery, MatchMode, SortKey
from .review import PointList, Review, ReviewDraft
from .stats import GameStats, GenreCount, ReviewStats, ReviewSummary, TopRatedGame

__all__ = [
    "ALL_STATUSES",
    "AppConfig",
    "GENRES",
    "Game",
    "GameDraft",
    "GameStats",
    "GameStatus",
    "GenreCount",
    "LibraryQuery",
    "MatchMode",
    "PLATFORMS",
    "PointList",
    "Review",
    "ReviewDraft",
    "ReviewStats",
    "ReviewSummary",
    "SortKey",
    "TopRatedGame",
]
