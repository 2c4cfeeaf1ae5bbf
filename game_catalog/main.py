"""Command-line entry point for the game catalog client.

This module provides:
- Command-line argument parsing
- Application initialization and dependency wiring
- Draft building for the game and review write commands
- Plain-text rendering of library pages, statistics and reviews
"""

import argparse
import asyncio
import sys
from collections.abc import Sequence
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any

import structlog

from game_catalog.models import AppConfig
from game_catalog.models.game import GENRES, PLATFORMS, Game, GameDraft, GameStatus
from game_catalog.models.query import ALL_GAMES, ALL_STATUSES, LibraryQuery, MatchMode, SortKey
from game_catalog.models.review import PointList, Review, ReviewDraft
from game_catalog.services.catalog_api import CatalogApiClient
from game_catalog.services.config import ConfigurationService
from game_catalog.services.errors import AppError, ValidationError, get_error_service
from game_catalog.services.http_client import HttpClientService
from game_catalog.services.library import Dashboard, LibraryPage, LibraryService
from game_catalog.services.logging import setup_logging
from game_catalog.services.presentation import (
    completion_breakdown,
    format_hours,
    format_percentage,
    format_rating,
    genre_shares,
)
from game_catalog.services.query_engine import summarize_reviews

log = structlog.stdlib.get_logger()

VERSION = "0.1.0"


class ApplicationContext:
    """Container for application services.

    Services are created lazily so commands only build what they use.
    """

    def __init__(self, config_path: Path | None = None, api_url: str | None = None) -> None:
        self._config_path: Path | None = config_path
        self._api_url: str | None = api_url

        self._config_service: ConfigurationService | None = None
        self._config: AppConfig | None = None
        self._http_client: HttpClientService | None = None
        self._library: LibraryService | None = None

    @property
    def config_service(self) -> ConfigurationService:
        if self._config_service is None:
            self._config_service = ConfigurationService(config_path=self._config_path)
        return self._config_service

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            self._config = self.config_service.load_config()
        return self._config

    @property
    def http_client(self) -> HttpClientService:
        if self._http_client is None:
            self._http_client = HttpClientService(
                base_url=self._api_url or self.config.api_base_url,
                timeout=self.config.request_timeout,
                max_retries=self.config.max_retries,
            )
        return self._http_client

    @property
    def library(self) -> LibraryService:
        if self._library is None:
            self._library = LibraryService(CatalogApiClient(self.http_client))
        return self._library

    async def cleanup(self) -> None:
        if self._http_client is not None:
            await self._http_client.close()


class ParsedArgs:
    """Type-safe container for parsed command-line arguments."""

    def __init__(
        self,
        command: str,
        config: Path | None,
        log_level: str | None,
        log_dir: Path | None,
        api_url: str | None,
        status: str = ALL_STATUSES,
        search: str = "",
        sort: str | None = None,
        match_all: bool = False,
        source: str | None = None,
        game: str | None = ALL_GAMES,
        action: str | None = None,
        record_id: str | None = None,
        fields: dict[str, Any] | None = None,
    ) -> None:
        self.command: str = command
        self.config: Path | None = config
        self.log_level: str | None = log_level
        self.log_dir: Path | None = log_dir
        self.api_url: str | None = api_url
        self.status: str = status
        self.search: str = search
        self.sort: str | None = sort
        self.match_all: bool = match_all
        self.source: str | None = source
        self.game: str | None = game
        self.action: str | None = action
        self.record_id: str | None = record_id
        # Options of the game/review write commands; None means "not given"
        self.fields: dict[str, Any] = fields or {}

    def field(self, name: str) -> Any:
        return self.fields.get(name)


GAME_FIELDS = (
    "title", "developer", "genre", "platform", "release_year", "game_status",
    "rating", "hours", "cover", "started", "finished",
)
REVIEW_FIELDS = (
    "title", "body", "rating", "hours", "recommended", "pros", "cons", "drop_pros", "drop_cons",
)


def _add_game_options(parser: argparse.ArgumentParser, required: bool) -> None:
    _ = parser.add_argument("--title", required=required)
    _ = parser.add_argument("--developer", required=required)
    _ = parser.add_argument("--genre", required=required, help=f"One of: {', '.join(GENRES)}")
    _ = parser.add_argument("--platform", required=required, help=f"One of: {', '.join(PLATFORMS)}")
    _ = parser.add_argument("--year", dest="release_year", type=int, required=required)
    _ = parser.add_argument("--status", dest="game_status", choices=[status.value for status in GameStatus])
    _ = parser.add_argument("--rating", type=int, help="0 (unrated) to 5")
    _ = parser.add_argument("--hours", type=float, help="Hours played")
    _ = parser.add_argument("--cover", help="Cover image URL")
    _ = parser.add_argument("--started", type=date.fromisoformat, help="Start date, YYYY-MM-DD")
    _ = parser.add_argument("--finished", type=date.fromisoformat, help="Finish date, YYYY-MM-DD")


def _add_review_options(parser: argparse.ArgumentParser, required: bool) -> None:
    _ = parser.add_argument("--title", required=required)
    _ = parser.add_argument("--body", required=required)
    _ = parser.add_argument("--rating", type=int, required=required, help="1 to 5")
    _ = parser.add_argument("--hours", type=float, help="Hours played when writing the review")
    _ = parser.add_argument("--pro", dest="pros", action="append", help="Positive point (repeatable)")
    _ = parser.add_argument("--con", dest="cons", action="append", help="Negative point (repeatable)")
    verdict = parser.add_mutually_exclusive_group()
    _ = verdict.add_argument("--recommended", dest="recommended", action="store_const", const=True)
    _ = verdict.add_argument("--not-recommended", dest="recommended", action="store_const", const=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="game-catalog",
        description="Browse a personal video-game library and its reviews",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  game-catalog list --status Completed --sort hours
  game-catalog list --search zelda
  game-catalog stats --source server
  game-catalog reviews --game 64f1c2
  game-catalog game add --title Hades --developer "Supergiant Games" --genre Action --platform PC --year 2020
  game-catalog game edit 64f1c2 --status Completed --hours 42
  game-catalog review add --game 64f1c2 --title "Great" --body "Loved it" --rating 5 --pro Music
        """,
    )
    _ = parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    _ = parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: ~/.config/game-catalog/config.json)",
    )
    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set the logging level (default: from configuration)",
    )
    _ = parser.add_argument("--log-dir", type=Path, default=None, help="Directory for log files")
    _ = parser.add_argument("--api-url", default=None, help="Catalog API base URL (overrides configuration)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List games of the library")
    _ = list_parser.add_argument(
        "--status",
        choices=[ALL_STATUSES] + [status.value for status in GameStatus],
        default=ALL_STATUSES,
    )
    _ = list_parser.add_argument("--search", default="", help="Match title, developer or genre")
    _ = list_parser.add_argument("--sort", choices=[key.value for key in SortKey], default=None)
    _ = list_parser.add_argument(
        "--match-all",
        action="store_true",
        help="Require both the status and the search term to match",
    )

    stats_parser = subparsers.add_parser("stats", help="Show library and review statistics")
    _ = stats_parser.add_argument("--source", choices=["local", "server"], default=None)

    reviews_parser = subparsers.add_parser("reviews", help="List reviews")
    _ = reviews_parser.add_argument("--game", default=ALL_GAMES, help="Only reviews of this game id")

    game_parser = subparsers.add_parser("game", help="Add, edit or delete a game")
    game_actions = game_parser.add_subparsers(dest="action", required=True)
    _add_game_options(game_actions.add_parser("add", help="Add a game to the library"), required=True)
    game_edit = game_actions.add_parser("edit", help="Change fields of a game")
    _ = game_edit.add_argument("record_id", metavar="ID")
    _add_game_options(game_edit, required=False)
    game_delete = game_actions.add_parser("delete", help="Delete a game")
    _ = game_delete.add_argument("record_id", metavar="ID")

    review_parser = subparsers.add_parser("review", help="Write, edit or delete a review")
    review_actions = review_parser.add_subparsers(dest="action", required=True)
    review_add = review_actions.add_parser("add", help="Write a review")
    _ = review_add.add_argument("--game", required=True, help="Id of the reviewed game")
    _add_review_options(review_add, required=True)
    review_edit = review_actions.add_parser("edit", help="Change a review")
    _ = review_edit.add_argument("record_id", metavar="ID")
    _ = review_edit.add_argument("--game", default=None, help="Move the review to another game")
    _add_review_options(review_edit, required=False)
    _ = review_edit.add_argument(
        "--drop-pro", dest="drop_pros", type=int, action="append", help="Remove the Nth positive point"
    )
    _ = review_edit.add_argument(
        "--drop-con", dest="drop_cons", type=int, action="append", help="Remove the Nth negative point"
    )
    review_delete = review_actions.add_parser("delete", help="Delete a review")
    _ = review_delete.add_argument("record_id", metavar="ID")

    return parser


def parse_arguments(argv: Sequence[str] | None = None) -> ParsedArgs:
    ns = build_parser().parse_args(argv)

    field_names = GAME_FIELDS if ns.command == "game" else REVIEW_FIELDS if ns.command == "review" else ()
    return ParsedArgs(
        command=str(ns.command),
        config=ns.config,
        log_level=ns.log_level,
        log_dir=ns.log_dir,
        api_url=ns.api_url,
        status=getattr(ns, "status", ALL_STATUSES),
        search=getattr(ns, "search", ""),
        sort=getattr(ns, "sort", None),
        match_all=bool(getattr(ns, "match_all", False)),
        source=getattr(ns, "source", None),
        game=getattr(ns, "game", ALL_GAMES),
        action=getattr(ns, "action", None),
        record_id=getattr(ns, "record_id", None),
        fields={name: getattr(ns, name, None) for name in field_names},
    )


def build_query(args: ParsedArgs, config: AppConfig) -> LibraryQuery:
    """Turn the list options into a query, using configured defaults for unset ones."""
    return LibraryQuery(
        status=args.status,
        search=args.search,
        sort=SortKey(args.sort) if args.sort else config.default_sort,
        match_mode=MatchMode.MATCH_ALL if args.match_all else config.match_mode,
    )


def _given(changes: dict[str, Any]) -> dict[str, Any]:
    return {name: value for name, value in changes.items() if value is not None}


def game_draft(args: ParsedArgs, current: Game | None = None) -> GameDraft:
    """Draft from the game options; options not given keep ``current``'s values."""
    status = args.field("game_status")
    changes = _given({
        "title": args.field("title"),
        "developer": args.field("developer"),
        "genre": args.field("genre"),
        "platform": args.field("platform"),
        "release_year": args.field("release_year"),
        "status": GameStatus(status) if status else None,
        "rating": args.field("rating"),
        "hours_played": args.field("hours"),
        "cover_url": args.field("cover"),
        "started_on": args.field("started"),
        "finished_on": args.field("finished"),
    })
    if current is None:
        return GameDraft(**changes)

    base = GameDraft(
        title=current.title,
        developer=current.developer,
        genre=current.genre,
        platform=current.platform,
        release_year=current.release_year,
        status=current.status,
        rating=current.rating,
        hours_played=current.hours_played,
        cover_url=current.cover_url,
        started_on=current.started_on,
        finished_on=current.finished_on,
    )
    return replace(base, **changes)


def edit_points(
    points: PointList,
    label: str,
    drop: Sequence[int] | None = None,
    add: Sequence[str] | None = None,
) -> PointList:
    """Drop entries by 1-based position, then fill blank rows before appending."""
    for position in sorted(set(drop or []), reverse=True):
        index = position - 1
        try:
            points = points.remove(index) if len(points) > 1 else points.set(index, "")
        except IndexError:
            raise ValidationError(f"{label}: there is no point number {position}", field=label) from None

    for text in add or []:
        blank = next((index for index, item in enumerate(points.items) if not item.strip()), None)
        points = points.add(text) if blank is None else points.set(blank, text)
    return points


def review_draft(args: ParsedArgs, current: Review | None = None) -> ReviewDraft:
    """Draft from the review options; options not given keep ``current``'s values."""
    if current is None:
        return ReviewDraft(
            game_id=args.game or "",
            title=args.field("title"),
            body=args.field("body"),
            rating=args.field("rating"),
            pros=edit_points(PointList(), "pros", add=args.field("pros")),
            cons=edit_points(PointList(), "cons", add=args.field("cons")),
            hours_played=args.field("hours") or 0.0,
            recommended=args.field("recommended") is not False,
        )

    pros = edit_points(PointList(tuple(current.pros) or ("",)), "pros", args.field("drop_pros"), args.field("pros"))
    cons = edit_points(PointList(tuple(current.cons) or ("",)), "cons", args.field("drop_cons"), args.field("cons"))
    base = ReviewDraft(
        game_id=current.game_id,
        title=current.title,
        body=current.body,
        rating=current.rating,
        pros=pros,
        cons=cons,
        hours_played=current.hours_played,
        recommended=current.recommended,
    )
    return replace(base, **_given({
        "game_id": args.game,
        "title": args.field("title"),
        "body": args.field("body"),
        "rating": args.field("rating"),
        "hours_played": args.field("hours"),
        "recommended": args.field("recommended"),
    }))


def render_library(page: LibraryPage) -> str:
    lines = [
        f"{page.stats.total} games, {page.stats.completed} completed, "
        f"{format_hours(page.stats.total_hours)} played, {page.matched} shown",
        "",
    ]
    for game in page.games:
        rating = f"{game.rating}/5" if game.is_rated else "unrated"
        lines.append(
            f"{game.title} ({game.developer}, {game.release_year}) "
            f"[{game.status.value}] {game.genre} / {game.platform} "
            f"{rating} {format_hours(game.hours_played)}"
        )
    if not page.games:
        lines.append("No games match the current filters.")
    return "\n".join(lines)


def render_dashboard(dashboard: Dashboard) -> str:
    games = dashboard.games
    shares = completion_breakdown(games)
    lines = [
        f"Statistics ({dashboard.source})",
        f"Total games: {games.total}",
        f"Completed: {games.completed} ({format_percentage(shares.completed)})",
        f"Playing: {games.playing} ({format_percentage(shares.playing)})",
        f"Remaining: {games.remaining} ({format_percentage(shares.remaining)})",
        f"Hours played: {format_hours(games.total_hours)}",
    ]
    if games.most_played:
        lines.append(f"Most played: {games.most_played.title} ({format_hours(games.most_played.hours_played)})")

    shown, hidden = genre_shares(games)
    if shown:
        lines.append("Genres:")
        lines.extend(f"  {genre.genre}: {genre.count} ({format_percentage(share)})" for genre, share in shown)
        if hidden:
            lines.append(f"  +{hidden} more genres")

    reviews = dashboard.reviews
    lines.append(f"Reviews: {reviews.total}, average {format_rating(reviews.mean_rating)}")
    for position, entry in enumerate(reviews.top_games, start=1):
        lines.append(f"  {position}. {entry.title or entry.game_id} {format_rating(entry.mean_rating)}")
    return "\n".join(lines)


def render_reviews(reviews: Sequence[Review]) -> str:
    summary = summarize_reviews(reviews)
    lines = [
        f"{summary.total} reviews, {summary.recommended} recommended, "
        f"average {format_rating(summary.mean_rating)}, {summary.games_reviewed} games",
        "",
    ]
    for review in reviews:
        verdict = "recommended" if review.recommended else "not recommended"
        lines.append(
            f"{review.title} - {review.game_title or review.game_id} "
            f"{review.rating}/5, {verdict}, {review.reviewed_at.date().isoformat()}"
        )
        lines.extend(f"  + {point}" for point in review.pros)
        lines.extend(f"  - {point}" for point in review.cons)
    return "\n".join(lines)




async def run_game_action(args: ParsedArgs, library: LibraryService) -> str:
    if args.action == "add":
        game = await library.add_game(game_draft(args))
        return f"Game added: {game.title} ({game.id})"
    if args.action == "edit" and args.record_id:
        current = await library.game(args.record_id)
        game = await library.update_game(args.record_id, game_draft(args, current))
        return f"Game updated: {game.title} ({game.id})"
    if args.action == "delete" and args.record_id:
        await library.remove_game(args.record_id)
        return f"Game deleted: {args.record_id}"
    raise ValueError(f"Unknown game action: {args.action}")


async def run_review_action(args: ParsedArgs, library: LibraryService) -> str:
    if args.action == "add":
        review = await library.add_review(review_draft(args))
        return f"Review added: {review.title} ({review.id})"
    if args.action == "edit" and args.record_id:
        current = await library.review(args.record_id)
        review = await library.update_review(args.record_id, review_draft(args, current))
        return f"Review updated: {review.title} ({review.id})"
    if args.action == "delete" and args.record_id:
        await library.remove_review(args.record_id)
        return f"Review deleted: {args.record_id}"
    raise ValueError(f"Unknown review action: {args.action}")


async def run_command(args: ParsedArgs, context: ApplicationContext) -> str:
    """Run the selected command and return its output."""
    try:
        if args.command == "list":
            page = await context.library.browse(build_query(args, context.config))
            return render_library(page)
        if args.command == "stats":
            dashboard = await context.library.statistics(args.source or context.config.stats_source)
            return render_dashboard(dashboard)
        if args.command == "reviews":
            return render_reviews(await context.library.reviews(args.game or ALL_GAMES))
        if args.command == "game":
            return await run_game_action(args, context.library)
        if args.command == "review":
            return await run_review_action(args, context.library)
        raise ValueError(f"Unknown command: {args.command}")
    finally:
        await context.cleanup()


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point for the application."""
    args = parse_arguments(argv)
    _ = setup_logging(log_level=args.log_level or "WARNING", log_dir=args.log_dir)

    context = ApplicationContext(config_path=args.config, api_url=args.api_url)

    try:
        if args.log_level is None and context.config.log_level != "WARNING":
            _ = setup_logging(log_level=context.config.log_level, log_dir=args.log_dir)

        log.info("Starting game catalog", version=VERSION, command=args.command)
        print(asyncio.run(run_command(args, context)))
        exit_code = 0

    except KeyboardInterrupt:
        log.info("Interrupted by user")
        exit_code = 130

    except AppError as e:
        error_service = get_error_service()
        friendly = error_service.handle_error(e, operation=args.command, component="cli")
        print(error_service.create_user_message(friendly), file=sys.stderr)
        exit_code = 1

    except Exception as e:
        log.error("Unhandled exception", error=str(e), exc_info=True)
        print(f"Fatal error: {e}", file=sys.stderr)
        exit_code = 1

    log.info("Application exiting", exit_code=exit_code)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
