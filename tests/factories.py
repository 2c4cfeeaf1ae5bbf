"""Record builders and hypothesis strategies shared by the tests."""

from datetime import UTC, datetime, timedelta
from itertools import count

from hypothesis import strategies as st

from game_catalog.models.game import GENRES, PLATFORMS, Game, GameStatus
from game_catalog.models.review import Review

_ids = count(1)
BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)


def make_game(
    title: str = "Hollow Knight",
    developer: str = "Team Cherry",
    genre: str = "Platformer",
    status: GameStatus = GameStatus.UNPLAYED,
    rating: int = 0,
    hours_played: float = 0.0,
    added_at: datetime | None = None,
    game_id: str | None = None,
    platform: str = "PC",
    release_year: int = 2017,
) -> Game:
    return Game(
        id=game_id or f"g{next(_ids)}",
        title=title,
        developer=developer,
        genre=genre,
        platform=platform,
        release_year=release_year,
        status=status,
        added_at=added_at or BASE_TIME,
        rating=rating,
        hours_played=hours_played,
    )


def make_review(
    game_id: str,
    rating: int = 4,
    recommended: bool = True,
    game_title: str | None = None,
    review_id: str | None = None,
) -> Review:
    return Review(
        id=review_id or f"r{next(_ids)}",
        game_id=game_id,
        game_title=game_title,
        title="Worth it",
        body="Tight controls and a great soundtrack.",
        rating=rating,
        reviewed_at=BASE_TIME,
        pros=["Soundtrack"],
        cons=[],
        recommended=recommended,
    )


titles = st.text(
    min_size=1,
    max_size=40,
    alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd", "Zs")),
).filter(lambda x: x.strip())

statuses = st.sampled_from(list(GameStatus))


@st.composite
def games(draw: st.DrawFn) -> Game:
    """Generate a valid Game."""
    return Game(
        id=f"g{draw(st.integers(min_value=0, max_value=10**9))}",
        title=draw(titles),
        developer=draw(titles),
        genre=draw(st.sampled_from(GENRES)),
        platform=draw(st.sampled_from(PLATFORMS)),
        release_year=draw(st.integers(min_value=1970, max_value=2030)),
        status=draw(statuses),
        added_at=BASE_TIME + timedelta(days=draw(st.integers(min_value=0, max_value=30))),
        rating=draw(st.integers(min_value=0, max_value=5)),
        hours_played=draw(st.floats(min_value=0, max_value=500, allow_nan=False, allow_infinity=False)),
    )


game_lists = st.lists(games(), max_size=15)


@st.composite
def reviews(draw: st.DrawFn) -> Review:
    """Generate a valid Review for one of a handful of game ids."""
    return make_review(
        game_id=draw(st.sampled_from(["g1", "g2", "g3", "g4", "g5"])),
        rating=draw(st.integers(min_value=1, max_value=5)),
        recommended=draw(st.booleans()),
    )


review_lists = st.lists(reviews(), max_size=20)
