"""Configuration data models."""

from dataclasses import dataclass

from .query import MatchMode, SortKey

DEFAULT_API_BASE_URL = "http://localhost:5000/api"


@dataclass(frozen=True)
class AppConfig:
    """Application configuration settings."""
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = 10.0
    max_retries: int = 2
    log_level: str = "INFO"
    default_sort: SortKey = SortKey.RECENT
    match_mode: MatchMode = MatchMode.SEARCH_OVERRIDES_STATUS
    stats_source: str = "local"  # "local" aggregates fetched records, "server" asks the API
