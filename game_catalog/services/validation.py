"""Validation of game and review drafts before they are sent to the API."""

from datetime import date

import structlog

from ..models.game import GENRES, MAX_GAME_RATING, MIN_RELEASE_YEAR, PLATFORMS, GameDraft
from ..models.review import MAX_REVIEW_BODY_LENGTH, MAX_REVIEW_TITLE_LENGTH, ReviewDraft
from .config import ValidationResult
from .errors import ValidationError

log = structlog.stdlib.get_logger()

RELEASE_YEAR_LOOKAHEAD = 5


def max_release_year(today: date | None = None) -> int:
    return (today or date.today()).year + RELEASE_YEAR_LOOKAHEAD


def validate_game(draft: GameDraft, today: date | None = None) -> ValidationResult:
    """Validate a game draft."""
    errors = []

    if not draft.title.strip():
        errors.append("title is required")
    if not draft.developer.strip():
        errors.append("developer is required")

    if not draft.genre:
        errors.append("genre is required")
    elif draft.genre not in GENRES:
        errors.append(f"genre must be one of: {', '.join(GENRES)}")

    if not draft.platform:
        errors.append("platform is required")
    elif draft.platform not in PLATFORMS:
        errors.append(f"platform must be one of: {', '.join(PLATFORMS)}")

    latest = max_release_year(today)
    if not isinstance(draft.release_year, int) or not MIN_RELEASE_YEAR <= draft.release_year <= latest:
        errors.append(f"release_year must be between {MIN_RELEASE_YEAR} and {latest}")

    if not isinstance(draft.rating, int) or not 0 <= draft.rating <= MAX_GAME_RATING:
        errors.append(f"rating must be an integer between 0 and {MAX_GAME_RATING}")

    if draft.hours_played < 0:
        errors.append("hours_played cannot be negative")

    if draft.started_on and draft.finished_on and draft.finished_on < draft.started_on:
        errors.append("finished_on cannot be earlier than started_on")

    return ValidationResult(len(errors) == 0, errors)


def validate_review(draft: ReviewDraft) -> ValidationResult:
    """Validate a review draft.

    Blank pros and cons are ignored; at least one non-blank point is required.
    """
    errors = []

    if not draft.game_id:
        errors.append("game_id is required")

    if not draft.title.strip():
        errors.append("title is required")
    elif len(draft.title) > MAX_REVIEW_TITLE_LENGTH:
        errors.append(f"title cannot exceed {MAX_REVIEW_TITLE_LENGTH} characters")

    if not draft.body.strip():
        errors.append("body is required")
    elif len(draft.body) > MAX_REVIEW_BODY_LENGTH:
        errors.append(f"body cannot exceed {MAX_REVIEW_BODY_LENGTH} characters")

    if not isinstance(draft.rating, int) or not 1 <= draft.rating <= MAX_GAME_RATING:
        errors.append(f"rating must be an integer between 1 and {MAX_GAME_RATING}")

    if draft.hours_played < 0:
        errors.append("hours_played cannot be negative")

    if not draft.pros.cleaned() and not draft.cons.cleaned():
        errors.append("add at least one positive or negative point")

    return ValidationResult(len(errors) == 0, errors)


def _raise_if_invalid(kind: str, result: ValidationResult) -> None:
    if result.is_valid:
        return
    log.warning("Draft rejected", kind=kind, errors=result.errors)
    raise ValidationError(
        message=f"Invalid {kind}: {'; '.join(result.errors)}",
        field=kind,
        constraints=result.errors,
    )


def ensure_valid_game(draft: GameDraft, today: date | None = None) -> None:
    """Raise ValidationError if the game draft is invalid."""
    _raise_if_invalid("game", validate_game(draft, today))


def ensure_valid_review(draft: ReviewDraft) -> None:
    """Raise ValidationError if the review draft is invalid."""
    _raise_if_invalid("review", validate_review(draft))
