"""Conversion between catalog API payloads and the data models.

The catalog server speaks Spanish field names and values; everything past
this module uses the English model. Optional fields may be missing or null
in any payload.
"""

from datetime import UTC, date, datetime
from typing import Any

from ..models.game import Game, GameDraft, GameStatus
from ..models.review import Review, ReviewDraft
from ..models.stats import GameStats, GenreCount, ReviewStats, TopRatedGame
from .errors import ValidationError
from .query_engine import TOP_RATED_LIMIT

Payload = dict[str, Any]

STATUS_TO_WIRE: dict[GameStatus, str] = {
    GameStatus.UNPLAYED: "Por jugar",
    GameStatus.PLAYING: "Jugando",
    GameStatus.COMPLETED: "Completado",
    GameStatus.ABANDONED: "Abandonado",
}
STATUS_FROM_WIRE: dict[str, GameStatus] = {wire: status for status, wire in STATUS_TO_WIRE.items()}

GENRE_TO_WIRE: dict[str, str] = {
    "Action": "Acción",
    "Adventure": "Aventura",
    "RPG": "RPG",
    "Strategy": "Estrategia",
    "Sports": "Deportes",
    "Racing": "Carreras",
    "Shooter": "Shooter",
    "Indie": "Indie",
    "Simulation": "Simulación",
    "Horror": "Terror",
    "Platformer": "Plataformas",
    "Fighting": "Lucha",
    "Open World": "Mundo abierto",
}
GENRE_FROM_WIRE: dict[str, str] = {wire: genre for genre, wire in GENRE_TO_WIRE.items()}

PLATFORM_TO_WIRE: dict[str, str] = {"Multiplatform": "Multiplataforma"}
PLATFORM_FROM_WIRE: dict[str, str] = {wire: platform for platform, wire in PLATFORM_TO_WIRE.items()}

EPOCH = datetime.fromtimestamp(0, tz=UTC)


def _require(payload: Payload, key: str) -> Any:
    value = payload.get(key)
    if value is None:
        raise ValidationError(f"Missing field '{key}' in API payload", field=key)
    return value


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(f"Invalid timestamp: {value}", value=value) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_date(value: str | None) -> date | None:
    parsed = parse_timestamp(value)
    return parsed.date() if parsed else None


def status_from_wire(value: str) -> GameStatus:
    try:
        return STATUS_FROM_WIRE[value]
    except KeyError:
        raise ValidationError(
            f"Unknown game status: {value}",
            field="estado",
            value=value,
            constraints=[f"one of {', '.join(STATUS_FROM_WIRE)}"],
        ) from None


def game_from_wire(payload: Payload) -> Game:
    """Build a Game from a ``/juegos`` payload."""
    added_at = parse_timestamp(payload.get("fechaAgregado") or payload.get("createdAt"))
    genre = payload.get("genero") or ""
    platform = payload.get("plataforma") or ""

    return Game(
        id=str(_require(payload, "_id")),
        title=_require(payload, "titulo"),
        developer=payload.get("desarrolladora") or "",
        genre=GENRE_FROM_WIRE.get(genre, genre),
        platform=PLATFORM_FROM_WIRE.get(platform, platform),
        release_year=int(payload.get("añoLanzamiento") or 0),
        status=status_from_wire(payload.get("estado") or STATUS_TO_WIRE[GameStatus.UNPLAYED]),
        added_at=added_at or EPOCH,
        rating=int(payload.get("puntuacion") or 0),
        hours_played=float(payload.get("horasJugadas") or 0.0),
        cover_url=payload.get("portada") or None,
        started_on=parse_date(payload.get("fechaInicio")),
        finished_on=parse_date(payload.get("fechaFin")),
    )


def game_to_wire(draft: GameDraft) -> Payload:
    """Body for creating or updating a game; unset dates are omitted."""
    payload: Payload = {
        "titulo": draft.title.strip(),
        "desarrolladora": draft.developer.strip(),
        "genero": GENRE_TO_WIRE.get(draft.genre, draft.genre),
        "plataforma": PLATFORM_TO_WIRE.get(draft.platform, draft.platform),
        "añoLanzamiento": draft.release_year,
        "portada": draft.cover_url or "",
        "estado": STATUS_TO_WIRE[draft.status],
        "puntuacion": draft.rating,
        "horasJugadas": draft.hours_played,
    }
    if draft.started_on:
        payload["fechaInicio"] = draft.started_on.isoformat()
    if draft.finished_on:
        payload["fechaFin"] = draft.finished_on.isoformat()
    return payload


def _game_reference(value: Any) -> tuple[str, str | None]:
    """Game id and title from a review's game reference (object or bare id)."""
    if isinstance(value, dict):
        return str(_require(value, "_id")), value.get("titulo")
    if value is None:
        raise ValidationError("Review payload has no game reference", field="juegoId")
    return str(value), None


def review_from_wire(payload: Payload) -> Review:
    """Build a Review from a ``/reseñas`` payload."""
    game_id, game_title = _game_reference(payload.get("juegoId"))
    reviewed_at = parse_timestamp(payload.get("fechaReseña") or payload.get("createdAt"))
    recommended = payload.get("recomendado")

    return Review(
        id=str(_require(payload, "_id")),
        game_id=game_id,
        game_title=game_title,
        title=payload.get("titulo") or "",
        body=payload.get("contenido") or "",
        rating=int(_require(payload, "puntuacion")),
        reviewed_at=reviewed_at or EPOCH,
        pros=list(payload.get("pros") or []),
        cons=list(payload.get("contras") or []),
        hours_played=float(payload.get("horasJugadasParaReseña") or 0.0),
        recommended=recommended is None or bool(recommended),
    )


def review_to_wire(draft: ReviewDraft) -> Payload:
    """Body for creating or updating a review, with blank points dropped."""
    return {
        "juegoId": draft.game_id,
        "titulo": draft.title.strip(),
        "contenido": draft.body.strip(),
        "puntuacion": draft.rating,
        "pros": draft.pros.cleaned(),
        "contras": draft.cons.cleaned(),
        "horasJugadasParaReseña": draft.hours_played,
        "recomendado": draft.recommended,
    }


def game_stats_from_wire(payload: Payload) -> GameStats:
    """Decode ``/juegos/estadisticas`` into the same shape local aggregation produces."""
    most_played_raw = payload.get("juegoMasJugado")
    genres = []
    for entry in payload.get("generosStats") or []:
        genre = entry.get("_id") or ""
        genres.append(GenreCount(GENRE_FROM_WIRE.get(genre, genre), int(entry.get("count") or 0)))

    return GameStats(
        total=int(payload.get("totalJuegos") or 0),
        completed=int(payload.get("juegosCompletados") or 0),
        playing=int(payload.get("juegosJugando") or 0),
        total_hours=float(payload.get("totalHoras") or 0.0),
        most_played=game_from_wire(most_played_raw) if most_played_raw else None,
        genres=sorted(genres, key=lambda g: g.count, reverse=True),
    )


def review_stats_from_wire(payload: Payload) -> ReviewStats:
    """Decode ``/reseñas/estadisticas`` into the same shape local aggregation produces."""
    top_games = [
        TopRatedGame(
            game_id=str(entry.get("_id") or ""),
            title=entry.get("titulo") or "",
            mean_rating=float(entry.get("avgPuntuacion") or 0.0),
        )
        for entry in payload.get("juegosMejorCalificados") or []
    ]

    return ReviewStats(
        total=int(payload.get("totalReseñas") or 0),
        mean_rating=float(payload.get("promedioPuntuacion") or 0.0),
        top_games=sorted(top_games, key=lambda g: g.mean_rating, reverse=True)[:TOP_RATED_LIMIT],
    )
