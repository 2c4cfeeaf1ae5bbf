"""Game-related data models."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class GameStatus(Enum):
    """Play-progress state of a game in the library."""
    UNPLAYED = "Unplayed"
    PLAYING = "Playing"
    COMPLETED = "Completed"
    ABANDONED = "Abandoned"


GENRES: tuple[str, ...] = (
    "Action",
    "Adventure",
    "RPG",
    "Strategy",
    "Sports",
    "Racing",
    "Shooter",
    "Indie",
    "Simulation",
    "Horror",
    "Platformer",
    "Fighting",
    "Open World",
)

PLATFORMS: tuple[str, ...] = (
    "PC",
    "PlayStation",
    "Xbox",
    "Nintendo Switch",
    "Mobile",
    "Multiplatform",
)

MIN_RELEASE_YEAR = 1970
MAX_GAME_RATING = 5


@dataclass(frozen=True)
class Game:
    """A game record as held by the personal library."""
    id: str
    title: str
    developer: str
    genre: str
    platform: str
    release_year: int
    status: GameStatus
    added_at: datetime
    rating: int = 0  # 0-5 scale, 0 = unrated
    hours_played: float = 0.0
    cover_url: str | None = None
    started_on: date | None = None
    finished_on: date | None = None

    @property
    def is_rated(self) -> bool:
        return self.rating > 0


@dataclass(frozen=True)
class GameDraft:
    """Editable game fields submitted to the API on create/update."""
    title: str
    developer: str
    genre: str
    platform: str
    release_year: int
    status: GameStatus = GameStatus.UNPLAYED
    rating: int = 0
    hours_played: float = 0.0
    cover_url: str | None = None
    started_on: date | None = None
    finished_on: date | None = None
