"""Tests for argument parsing, rendering and the CLI entry point."""

import json
import logging
from collections.abc import Callable, Iterator
from functools import partial
from pathlib import Path

import httpx
import pytest
import structlog

from game_catalog import main as cli
from game_catalog.models import AppConfig
from game_catalog.models.game import GameStatus
from game_catalog.models.query import ALL_GAMES, ALL_STATUSES, MatchMode, SortKey
from game_catalog.models.review import PointList
from game_catalog.models.stats import GameStats, GenreCount, ReviewStats, TopRatedGame
from game_catalog.services.errors import ApiError, ValidationError
from game_catalog.services.http_client import HttpClientService
from game_catalog.services.library import Dashboard, LibraryPage
from game_catalog.services.query_engine import aggregate_games

from factories import make_game, make_review


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


class FakeLibrary:
    """Stands in for LibraryService inside the application context."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.queries: list = []

    async def browse(self, query):
        if self.error:
            raise self.error
        self.queries.append(query)
        games = [make_game(title="Celeste", status=GameStatus.COMPLETED, hours_played=20)]
        return LibraryPage(games=games, stats=aggregate_games(games))

    async def statistics(self, source):
        return Dashboard(
            games=GameStats(total=0, completed=0, playing=0, total_hours=0.0),
            reviews=ReviewStats(total=0, mean_rating=0.0),
            source=source,
        )

    async def reviews(self, game_id=ALL_GAMES):
        return [make_review("g1", game_title="Celeste")]


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"default_sort": "title"}), encoding="utf-8")
    return path


def install_library(monkeypatch: pytest.MonkeyPatch, library: FakeLibrary) -> None:
    monkeypatch.setattr(cli.ApplicationContext, "library", property(lambda self: library))


class TestArguments:
    def test_list_defaults(self) -> None:
        args = cli.parse_arguments(["list"])

        assert args.command == "list"
        assert args.status == ALL_STATUSES
        assert args.search == ""
        assert args.sort is None
        assert not args.match_all
        assert args.log_level is None

    def test_list_options(self) -> None:
        args = cli.parse_arguments(
            ["--log-level", "DEBUG", "list", "--status", "Completed", "--search", "zelda", "--sort", "hours", "--match-all"]
        )

        assert args.log_level == "DEBUG"
        assert (args.status, args.search, args.sort, args.match_all) == ("Completed", "zelda", "hours", True)

    def test_unknown_status_is_rejected(self) -> None:
        with pytest.raises(SystemExit):
            cli.parse_arguments(["list", "--status", "Wishlist"])

    def test_command_is_required(self) -> None:
        with pytest.raises(SystemExit):
            cli.parse_arguments([])

    def test_reviews_game_option(self) -> None:
        assert cli.parse_arguments(["reviews"]).game == ALL_GAMES
        assert cli.parse_arguments(["reviews", "--game", "abc"]).game == "abc"


class TestBuildQuery:
    def test_unset_options_use_configuration(self) -> None:
        config = AppConfig(default_sort=SortKey.TITLE, match_mode=MatchMode.SEARCH_OVERRIDES_STATUS)

        query = cli.build_query(cli.parse_arguments(["list"]), config)

        assert query.sort is SortKey.TITLE
        assert query.match_mode is MatchMode.SEARCH_OVERRIDES_STATUS

    def test_flags_win_over_configuration(self) -> None:
        args = cli.parse_arguments(["list", "--sort", "rating", "--match-all"])

        query = cli.build_query(args, AppConfig(default_sort=SortKey.TITLE))

        assert query.sort is SortKey.RATING
        assert query.match_mode is MatchMode.MATCH_ALL


class TestRendering:
    def test_empty_library_page(self) -> None:
        page = LibraryPage(games=[], stats=aggregate_games([]))

        output = cli.render_library(page)

        assert "0 games" in output
        assert "No games match the current filters." in output

    def test_unrated_game_is_labelled(self) -> None:
        games = [make_game(title="Okami")]

        output = cli.render_library(LibraryPage(games=games, stats=aggregate_games(games)))

        assert "Okami (Team Cherry, 2017) [Unplayed]" in output
        assert "unrated" in output

    def test_dashboard_lists_top_games_and_hidden_genres(self) -> None:
        genres = [GenreCount(genre=f"Genre {index}", count=1) for index in range(10)]
        dashboard = Dashboard(
            games=GameStats(total=10, completed=5, playing=2, total_hours=40.0, genres=genres),
            reviews=ReviewStats(total=2, mean_rating=4.5, top_games=[TopRatedGame("g1", "Celeste", 4.5)]),
            source="local",
        )

        output = cli.render_dashboard(dashboard)

        assert "Completed: 5 (50.0%)" in output
        assert "Remaining: 3 (30.0%)" in output
        assert "+2 more genres" in output
        assert "1. Celeste 4.5/5" in output

    def test_reviews_show_points(self) -> None:
        output = cli.render_reviews([make_review("g1", game_title="Celeste")])

        assert output.startswith("1 reviews, 1 recommended")
        assert "Worth it - Celeste 4/5, recommended" in output
        assert "  + Soundtrack" in output


class TestMain:
    def test_list_prints_page_and_exits_zero(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], config_path: Path
    ) -> None:
        library = FakeLibrary()
        install_library(monkeypatch, library)

        with pytest.raises(SystemExit) as exit_info:
            cli.main(["--config", str(config_path), "list"])

        assert exit_info.value.code == 0
        assert "Celeste" in capsys.readouterr().out
        assert library.queries[0].sort is SortKey.TITLE

    def test_stats_source_defaults_to_configuration(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], config_path: Path
    ) -> None:
        install_library(monkeypatch, FakeLibrary())

        with pytest.raises(SystemExit) as exit_info:
            cli.main(["--config", str(config_path), "stats"])

        assert exit_info.value.code == 0
        assert "Statistics (local)" in capsys.readouterr().out

    def test_app_errors_exit_one_with_message(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], config_path: Path
    ) -> None:
        install_library(monkeypatch, FakeLibrary(error=ApiError("Catalog unavailable", status_code=503)))

        with pytest.raises(SystemExit) as exit_info:
            cli.main(["--config", str(config_path), "list"])

        captured = capsys.readouterr()
        assert exit_info.value.code == 1
        assert captured.out == ""
        assert "Catalog unavailable" in captured.err

    def test_unreadable_config_falls_back_to_defaults(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], tmp_path: Path
    ) -> None:
        config_dir = tmp_path / "config.json"
        config_dir.mkdir()
        library = FakeLibrary()
        install_library(monkeypatch, library)

        with pytest.raises(SystemExit) as exit_info:
            cli.main(["--config", str(config_dir), "list"])

        assert exit_info.value.code == 0
        assert "Celeste" in capsys.readouterr().out
        assert library.queries[0].sort is SortKey.RECENT


API_URL = "http://catalog.test/api"

Handler = Callable[[httpx.Request], httpx.Response]


def game_payload(game_id: str = "g1", **overrides: object) -> dict:
    payload = {
        "_id": game_id,
        "titulo": "Persona 5",
        "desarrolladora": "Atlus",
        "genero": "RPG",
        "plataforma": "PlayStation",
        "añoLanzamiento": 2016,
        "estado": "Jugando",
        "puntuacion": 4,
        "horasJugadas": 30,
        "fechaAgregado": "2024-01-01T00:00:00Z",
    }
    payload.update(overrides)
    return payload


def review_payload(review_id: str = "r1", **overrides: object) -> dict:
    payload = {
        "_id": review_id,
        "juegoId": {"_id": "g1", "titulo": "Persona 5"},
        "titulo": "Stylish",
        "contenido": "Great music and dungeons.",
        "puntuacion": 5,
        "pros": ["Music", "Style"],
        "contras": ["Length"],
        "horasJugadasParaReseña": 80,
        "recomendado": True,
        "fechaReseña": "2024-02-01T00:00:00Z",
    }
    payload.update(overrides)
    return payload


class CatalogServer:
    """Records requests and answers them from a handler, over httpx.MockTransport."""

    def __init__(self, monkeypatch: pytest.MonkeyPatch, handler: Handler) -> None:
        self.requests: list[tuple[str, str, dict | None]] = []
        self._handler = handler
        monkeypatch.setattr(
            cli,
            "HttpClientService",
            partial(HttpClientService, base_delay=0.0, transport=httpx.MockTransport(self._record)),
        )

    def _record(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body))
        return self._handler(request)

    def sent(self, method: str) -> list[dict | None]:
        return [body for sent_method, _, body in self.requests if sent_method == method]


def echo(record_id: str) -> Handler:
    """Answer writes by echoing the submitted body as the stored record."""
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "DELETE":
            return httpx.Response(204)
        body = json.loads(request.content)
        return httpx.Response(201, json={"data": {"_id": record_id, **body}})
    return handler


def run_cli(config_path: Path, *argv: str) -> int:
    with pytest.raises(SystemExit) as exit_info:
        cli.main(["--config", str(config_path), "--api-url", API_URL, *argv])
    return int(exit_info.value.code or 0)


class TestGameCommands:
    def test_add_posts_wire_payload(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], config_path: Path
    ) -> None:
        server = CatalogServer(monkeypatch, echo("new"))

        code = run_cli(
            config_path, "game", "add", "--title", " Hades ", "--developer", "Supergiant Games",
            "--genre", "Action", "--platform", "Multiplatform", "--year", "2020", "--hours", "12.5",
        )

        assert code == 0
        assert "Game added: Hades (new)" in capsys.readouterr().out
        [body] = server.sent("POST")
        assert body is not None
        assert body["titulo"] == "Hades"
        assert body["genero"] == "Acción"
        assert body["plataforma"] == "Multiplataforma"
        assert body["estado"] == "Por jugar"
        assert body["horasJugadas"] == 12.5
        assert server.requests[0][1] == "/api/juegos"

    def test_invalid_game_is_rejected_before_any_request(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], config_path: Path
    ) -> None:
        server = CatalogServer(monkeypatch, echo("new"))

        code = run_cli(
            config_path, "game", "add", "--title", "Tetris", "--developer", "Pajitnov",
            "--genre", "Puzzle", "--platform", "PC", "--year", "1960",
        )

        assert code == 1
        assert server.requests == []
        err = capsys.readouterr().err
        assert "genre must be one of" in err

    def test_edit_keeps_fields_that_were_not_given(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], config_path: Path
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json={"data": game_payload("g1")})
            body = json.loads(request.content)
            return httpx.Response(200, json={"data": {"_id": "g1", **body}})

        server = CatalogServer(monkeypatch, handler)

        code = run_cli(
            config_path, "game", "edit", "g1", "--status", "Completed", "--hours", "95",
            "--finished", "2024-05-01",
        )

        assert code == 0
        assert "Game updated: Persona 5 (g1)" in capsys.readouterr().out
        assert [(method, path) for method, path, _ in server.requests] == [
            ("GET", "/api/juegos/g1"),
            ("PUT", "/api/juegos/g1"),
        ]
        [body] = server.sent("PUT")
        assert body is not None
        assert body["estado"] == "Completado"
        assert body["horasJugadas"] == 95.0
        assert body["fechaFin"] == "2024-05-01"
        assert body["titulo"] == "Persona 5"
        assert body["desarrolladora"] == "Atlus"
        assert body["puntuacion"] == 4

    def test_delete(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], config_path: Path
    ) -> None:
        server = CatalogServer(monkeypatch, echo("g1"))

        assert run_cli(config_path, "game", "delete", "g1") == 0
        assert "Game deleted: g1" in capsys.readouterr().out
        assert server.requests == [("DELETE", "/api/juegos/g1", None)]

    def test_missing_game_exits_one(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], config_path: Path
    ) -> None:
        CatalogServer(monkeypatch, lambda request: httpx.Response(404, json={"message": "Juego no encontrado"}))

        assert run_cli(config_path, "game", "edit", "nope", "--hours", "3") == 1
        assert "Juego no encontrado" in capsys.readouterr().err


class TestReviewCommands:
    def test_add_collects_points(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], config_path: Path
    ) -> None:
        server = CatalogServer(monkeypatch, echo("r9"))

        code = run_cli(
            config_path, "review", "add", "--game", "g1", "--title", "Stylish", "--body", "Great music.",
            "--rating", "5", "--pro", "Music", "--pro", "  ", "--pro", "Style", "--con", "Length",
            "--not-recommended",
        )

        assert code == 0
        assert "Review added: Stylish (r9)" in capsys.readouterr().out
        [body] = server.sent("POST")
        assert body is not None
        assert server.requests[0][1] == "/api/reseñas"
        assert body["juegoId"] == "g1"
        assert body["pros"] == ["Music", "Style"]
        assert body["contras"] == ["Length"]
        assert body["recomendado"] is False

    def test_review_without_points_is_rejected(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], config_path: Path
    ) -> None:
        server = CatalogServer(monkeypatch, echo("r9"))

        code = run_cli(
            config_path, "review", "add", "--game", "g1", "--title", "Hmm", "--body", "No opinion.", "--rating", "3",
        )

        assert code == 1
        assert server.requests == []
        assert "add at least one positive or negative point" in capsys.readouterr().err

    def test_edit_drops_and_adds_points(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], config_path: Path
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json={"data": [review_payload("r0"), review_payload("r1")]})
            body = json.loads(request.content)
            return httpx.Response(200, json={"data": {"_id": "r1", **body}})

        server = CatalogServer(monkeypatch, handler)

        code = run_cli(
            config_path, "review", "edit", "r1", "--drop-pro", "1", "--pro", "Characters",
            "--drop-con", "1", "--rating", "4",
        )

        assert code == 0
        assert "Review updated: Stylish (r1)" in capsys.readouterr().out
        [body] = server.sent("PUT")
        assert body is not None
        assert server.requests[-1][1] == "/api/reseñas/r1"
        assert body["pros"] == ["Style", "Characters"]
        assert body["contras"] == []
        assert body["puntuacion"] == 4
        assert body["juegoId"] == "g1"
        assert body["contenido"] == "Great music and dungeons."

    def test_edit_unknown_review_exits_one(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], config_path: Path
    ) -> None:
        server = CatalogServer(monkeypatch, lambda request: httpx.Response(200, json={"data": [review_payload()]}))

        assert run_cli(config_path, "review", "edit", "missing", "--rating", "2") == 1
        assert server.sent("PUT") == []
        assert "not found" in capsys.readouterr().err

    def test_delete(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], config_path: Path
    ) -> None:
        server = CatalogServer(monkeypatch, echo("r1"))

        assert run_cli(config_path, "review", "delete", "r1") == 0
        assert "Review deleted: r1" in capsys.readouterr().out
        assert server.requests == [("DELETE", "/api/reseñas/r1", None)]


class TestEditPoints:
    def test_new_points_fill_the_blank_row_first(self) -> None:
        points = cli.edit_points(PointList(), "pros", add=["Music", "Style"])

        assert points.items == ("Music", "Style")

    def test_dropping_the_last_point_clears_it(self) -> None:
        points = cli.edit_points(PointList(("Music",)), "pros", drop=[1])

        assert points.items == ("",)
        assert points.cleaned() == []

    def test_unknown_position_is_a_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            cli.edit_points(PointList(("Music", "Style")), "pros", drop=[3])

    def test_game_draft_for_add_uses_given_options(self) -> None:
        args = cli.parse_arguments([
            "game", "add", "--title", "Celeste", "--developer", "Maddy Makes Games", "--genre", "Platformer",
            "--platform", "PC", "--year", "2018", "--status", "Playing", "--started", "2024-01-02",
        ])

        draft = cli.game_draft(args)

        assert draft.status is GameStatus.PLAYING
        assert draft.release_year == 2018
        assert draft.started_on is not None and draft.started_on.isoformat() == "2024-01-02"
        assert draft.rating == 0
