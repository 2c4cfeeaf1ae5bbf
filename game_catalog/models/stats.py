"""Aggregate statistics data models."""

from dataclasses import dataclass, field

from .game import Game


@dataclass(frozen=True)
class GenreCount:
    """Number of library games in one genre."""
    genre: str
    count: int


@dataclass(frozen=True)
class GameStats:
    """Summary statistics over a library of games."""
    total: int
    completed: int
    playing: int
    total_hours: float
    most_played: Game | None = None
    genres: list[GenreCount] = field(default_factory=list)  # Sorted by count, descending

    @property
    def remaining(self) -> int:
        """Games neither completed nor being played."""
        return self.total - self.completed - self.playing


@dataclass(frozen=True)
class TopRatedGame:
    """A game ranked by the mean rating of its reviews."""
    game_id: str
    title: str
    mean_rating: float


@dataclass(frozen=True)
class ReviewStats:
    """Summary statistics over a set of reviews."""
    total: int
    mean_rating: float  # 0.0 when there are no reviews
    top_games: list[TopRatedGame] = field(default_factory=list)


@dataclass(frozen=True)
class ReviewSummary:
    """Header counters shown above a list of reviews."""
    total: int
    recommended: int
    mean_rating: float
    games_reviewed: int
