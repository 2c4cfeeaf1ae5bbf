"""Collection query engine: filter, sort and aggregate library records.

Every function here is pure. Inputs are fully materialized sequences of
frozen records; outputs are new lists or stats objects. Nothing is cached
between calls, so the functions are safe to call from any read path.
"""

import unicodedata
from collections import Counter
from collections.abc import Iterable, Sequence

import structlog

from ..models.game import Game, GameStatus
from ..models.query import ALL_GAMES, ALL_STATUSES, LibraryQuery, MatchMode, SortKey, StatusFilter
from ..models.review import Review
from ..models.stats import GameStats, GenreCount, ReviewStats, ReviewSummary, TopRatedGame

log = structlog.stdlib.get_logger()

TOP_RATED_LIMIT = 3


def _status_value(status: StatusFilter) -> str:
    if isinstance(status, GameStatus):
        return status.value
    return status


def _matches_search(game: Game, term: str) -> bool:
    return any(
        term in (value or "").casefold()
        for value in (game.title, game.developer, game.genre)
    )


def filter_games(
    games: Sequence[Game],
    status: StatusFilter = ALL_STATUSES,
    search_term: str = "",
    match_mode: MatchMode = MatchMode.SEARCH_OVERRIDES_STATUS,
) -> list[Game]:
    """Filter games by play status and free-text search.

    The search term is matched case-insensitively as a substring of the
    title, developer or genre. With ``SEARCH_OVERRIDES_STATUS`` a non-empty
    term decides on its own and the status filter is ignored; with
    ``MATCH_ALL`` a game must satisfy both.

    Args:
        games: Games to filter
        status: ``ALL_STATUSES`` or a status (member or its value)
        search_term: Free-text search, empty for none
        match_mode: How status and search combine

    Returns:
        Matching games in input order
    """
    status_value = _status_value(status)
    term = search_term.casefold() if search_term else ""

    if status_value == ALL_STATUSES and not term:
        return list(games)

    result = []
    for game in games:
        if term and match_mode is MatchMode.SEARCH_OVERRIDES_STATUS:
            if _matches_search(game, term):
                result.append(game)
            continue

        if status_value != ALL_STATUSES and game.status.value != status_value:
            continue
        if term and not _matches_search(game, term):
            continue
        result.append(game)

    return result


def collation_key(text: str | None) -> str:
    """Sort key that orders text alphabetically regardless of case and accents."""
    decomposed = unicodedata.normalize("NFKD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def _parse_sort_key(key: SortKey | str) -> SortKey | None:
    if isinstance(key, SortKey):
        return key
    try:
        return SortKey(key)
    except ValueError:
        return None


def sort_games(games: Sequence[Game], key: SortKey | str = SortKey.RECENT) -> list[Game]:
    """Return the games ordered by ``key``; the input is left untouched.

    All orderings are stable. An unknown key keeps the input order.
    """
    sort_key = _parse_sort_key(key)

    if sort_key is SortKey.RECENT:
        return sorted(games, key=lambda g: g.added_at, reverse=True)
    if sort_key is SortKey.OLDEST:
        return sorted(games, key=lambda g: g.added_at)
    if sort_key is SortKey.TITLE:
        return sorted(games, key=lambda g: collation_key(g.title))
    if sort_key is SortKey.RATING:
        return sorted(games, key=lambda g: g.rating or 0, reverse=True)
    if sort_key is SortKey.HOURS:
        return sorted(games, key=lambda g: g.hours_played or 0.0, reverse=True)

    log.debug("Unknown sort key, keeping input order", sort_key=str(key))
    return list(games)


def run_query(games: Sequence[Game], query: LibraryQuery) -> list[Game]:
    """Apply a full library query: filter, then sort."""
    filtered = filter_games(games, query.status, query.search, query.match_mode)
    return sort_games(filtered, query.sort)


def aggregate_games(games: Sequence[Game]) -> GameStats:
    """Compute library statistics.

    ``most_played`` is the first game with the highest hours played.
    Genres are ordered by count, ties in order of first appearance.
    """
    completed = 0
    playing = 0
    total_hours = 0.0
    most_played: Game | None = None
    genre_counts: Counter[str] = Counter()

    for game in games:
        if game.status is GameStatus.COMPLETED:
            completed += 1
        elif game.status is GameStatus.PLAYING:
            playing += 1

        hours = game.hours_played or 0.0
        total_hours += hours
        if most_played is None or hours > (most_played.hours_played or 0.0):
            most_played = game

        genre_counts[game.genre] += 1

    return GameStats(
        total=len(games),
        completed=completed,
        playing=playing,
        total_hours=total_hours,
        most_played=most_played,
        genres=[GenreCount(genre, count) for genre, count in genre_counts.most_common()],
    )


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def aggregate_reviews(
    reviews: Sequence[Review],
    games: Iterable[Game] | None = None,
    limit: int = TOP_RATED_LIMIT,
) -> ReviewStats:
    """Compute review statistics and the best rated games.

    Args:
        reviews: Reviews to aggregate
        games: Optional library used to resolve titles missing from reviews
        limit: Number of top rated games to return

    Returns:
        ReviewStats; an empty input gives zero counts and a 0.0 mean
    """
    library_titles = {game.id: game.title for game in games or ()}
    titles: dict[str, str] = {}
    ratings_by_game: dict[str, list[int]] = {}

    for review in reviews:
        ratings_by_game.setdefault(review.game_id, []).append(review.rating)
        if review.game_id not in titles or not titles[review.game_id]:
            titles[review.game_id] = review.game_title or library_titles.get(review.game_id, "")

    ranked = sorted(
        (
            TopRatedGame(game_id, titles.get(game_id, ""), _mean(ratings))
            for game_id, ratings in ratings_by_game.items()
        ),
        key=lambda entry: entry.mean_rating,
        reverse=True,
    )

    return ReviewStats(
        total=len(reviews),
        mean_rating=_mean([review.rating for review in reviews]),
        top_games=ranked[:limit],
    )


def filter_reviews(reviews: Sequence[Review], game_id: str = ALL_GAMES) -> list[Review]:
    """Reviews of one game, or all of them for ``"all"``."""
    if game_id == ALL_GAMES:
        return list(reviews)
    return [review for review in reviews if review.game_id == game_id]


def summarize_reviews(reviews: Sequence[Review]) -> ReviewSummary:
    """Counters shown above a review list."""
    return ReviewSummary(
        total=len(reviews),
        recommended=sum(1 for review in reviews if review.recommended),
        mean_rating=_mean([review.rating for review in reviews]),
        games_reviewed=len({review.game_id for review in reviews}),
    )
