"""Service layer: query engine, API access and ambient services."""

from .catalog_api import CatalogApiClient
from .config import ConfigurationService, ValidationResult
from .errors import (
    ApiError,
    AppError,
    ConfigurationError,
    ErrorCategory,
    ErrorHandlingService,
    ErrorSeverity,
    NetworkError,
    UserFriendlyError,
    ValidationError,
    get_error_service,
    handle_error,
)
from .http_client import HttpClientService
from .library import Dashboard, LibraryPage, LibraryService
from .query_engine import (
    aggregate_games,
    aggregate_reviews,
    filter_games,
    filter_reviews,
    run_query,
    sort_games,
    summarize_reviews,
)
from .validation import ensure_valid_game, ensure_valid_review, validate_game, validate_review

__all__ = [
    "ApiError",
    "AppError",
    "CatalogApiClient",
    "ConfigurationError",
    "ConfigurationService",
    "Dashboard",
    "ErrorCategory",
    "ErrorHandlingService",
    "ErrorSeverity",
    "HttpClientService",
    "LibraryPage",
    "LibraryService",
    "NetworkError",
    "UserFriendlyError",
    "ValidationError",
    "ValidationResult",
    "aggregate_games",
    "aggregate_reviews",
    "ensure_valid_game",
    "ensure_valid_review",
    "filter_games",
    "filter_reviews",
    "get_error_service",
    "handle_error",
    "run_query",
    "sort_games",
    "summarize_reviews",
    "validate_game",
    "validate_review",
]
