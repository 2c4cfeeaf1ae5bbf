"""Library query parameter models."""

from dataclasses import dataclass
from enum import Enum
from typing import Final

from .game import GameStatus

ALL_STATUSES: Final = "all"
ALL_GAMES: Final = "all"

StatusFilter = GameStatus | str


class SortKey(Enum):
    """Orderings available for the library view."""
    RECENT = "recent"
    OLDEST = "oldest"
    TITLE = "title"
    RATING = "rating"
    HOURS = "hours"


class MatchMode(Enum):
    """How the status filter and the search term combine."""
    SEARCH_OVERRIDES_STATUS = "search_overrides_status"
    MATCH_ALL = "match_all"


@dataclass(frozen=True)
class LibraryQuery:
    """Immutable view selections passed to the query engine on every call."""
    status: StatusFilter = ALL_STATUSES
    search: str = ""
    sort: SortKey | str = SortKey.RECENT
    match_mode: MatchMode = MatchMode.SEARCH_OVERRIDES_STATUS
