"""Derived display values computed from aggregate statistics.

Kept apart from the stats types so that rounding and labels never leak
into the numbers the query engine produces.
"""

from dataclasses import dataclass

from ..models.stats import GameStats, GenreCount

MAX_GENRES_SHOWN = 8


def percentage(part: float, total: float) -> float:
    """Share of ``part`` in ``total`` as a percentage; 0.0 when total is 0."""
    if not total:
        return 0.0
    return part / total * 100


@dataclass(frozen=True)
class CompletionBreakdown:
    """Completion shares of a library, in percent."""
    completed: float
    playing: float
    remaining: float


def completion_breakdown(stats: GameStats) -> CompletionBreakdown:
    return CompletionBreakdown(
        completed=percentage(stats.completed, stats.total),
        playing=percentage(stats.playing, stats.total),
        remaining=percentage(stats.remaining, stats.total),
    )


def genre_shares(
    stats: GameStats,
    limit: int = MAX_GENRES_SHOWN,
) -> tuple[list[tuple[GenreCount, float]], int]:
    """Top genres with their share of the library.

    Returns:
        The first ``limit`` genres paired with their percentage, and the
        number of genres left out
    """
    shown = [(genre, percentage(genre.count, stats.total)) for genre in stats.genres[:limit]]
    return shown, max(len(stats.genres) - limit, 0)


def format_percentage(value: float) -> str:
    return f"{value:.1f}%"


def format_rating(value: float) -> str:
    return f"{value:.1f}/5"


def format_hours(hours: float) -> str:
    """Hours without a trailing ``.0`` for whole numbers."""
    if float(hours).is_integer():
        return f"{int(hours)}h"
    return f"{hours:.1f}h"
