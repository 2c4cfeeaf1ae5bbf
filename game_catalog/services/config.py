"""Configuration service for managing application settings."""

import json
import os
from pathlib import Path
from typing import Any

import structlog

from ..models import AppConfig
from ..models.config import DEFAULT_API_BASE_URL
from ..models.query import MatchMode, SortKey

log = structlog.stdlib.get_logger()

API_URL_ENV_VAR = "GAME_CATALOG_API_URL"
STATS_SOURCES = ("local", "server")


class ValidationResult:
    """Result of a validation pass."""

    def __init__(self, is_valid: bool, errors: list[str] | None = None) -> None:
        self.is_valid: bool = is_valid
        self.errors: list[str] = errors or []


class ConfigurationService:
    """Service for managing application configuration."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path: Path = config_path or Path.home() / ".config" / "game-catalog" / "config.json"
        log.info("Configuration service initialized", config_path=str(self.config_path))

    def load_config(self) -> AppConfig:
        """Load configuration from file or return default configuration.

        The ``GAME_CATALOG_API_URL`` environment variable, when set, replaces
        the API base URL of whatever configuration was loaded.
        """
        return self._apply_environment(self._load_file_config())

    def _load_file_config(self) -> AppConfig:
        if not self.config_path.exists():
            log.info("Configuration file not found, using defaults")
            return self._get_default_config()

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data: dict[str, Any] = json.load(f)

            config = self._dict_to_config(data)
            validation_result = self.validate_config(config)

            if not validation_result.is_valid:
                log.warning("Invalid configuration loaded, using defaults", errors=validation_result.errors)
                return self._get_default_config()

            log.info("Configuration loaded successfully")
            return config

        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            log.error("Failed to load configuration, using defaults", error=str(e))
            return self._get_default_config()

    def _apply_environment(self, config: AppConfig) -> AppConfig:
        api_url = os.getenv(API_URL_ENV_VAR)
        if not api_url:
            return config
        log.info("API URL overridden from environment", api_base_url=api_url)
        return AppConfig(
            api_base_url=api_url,
            request_timeout=config.request_timeout,
            max_retries=config.max_retries,
            log_level=config.log_level,
            default_sort=config.default_sort,
            match_mode=config.match_mode,
            stats_source=config.stats_source,
        )

    def save_config(self, config: AppConfig) -> None:
        """Save configuration to file."""
        validation_result = self.validate_config(config)
        if not validation_result.is_valid:
            raise ValueError(f"Invalid configuration: {', '.join(validation_result.errors)}")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            data = self._config_to_dict(config)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)

            log.info("Configuration saved successfully")

        except OSError as e:
            log.error("Failed to save configuration", error=str(e))
            raise

    def validate_config(self, config: AppConfig) -> ValidationResult:
        """Validate configuration settings."""
        errors = []

        if not isinstance(config.api_base_url, str) or not config.api_base_url.startswith(("http://", "https://")):
            errors.append("api_base_url must be an http(s) URL")

        if not isinstance(config.request_timeout, (int, float)) or config.request_timeout <= 0:
            errors.append("request_timeout must be a positive number")
        elif config.request_timeout > 120:
            errors.append("request_timeout should not exceed 120 seconds")

        if not isinstance(config.max_retries, int) or config.max_retries < 0:
            errors.append("max_retries must be a non-negative integer")
        elif config.max_retries > 10:
            errors.append("max_retries should not exceed 10")

        valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if config.log_level not in valid_log_levels:
            errors.append(f"log_level must be one of: {', '.join(sorted(valid_log_levels))}")

        if not isinstance(config.default_sort, SortKey):
            errors.append("default_sort must be a known sort key")

        if not isinstance(config.match_mode, MatchMode):
            errors.append("match_mode must be a known match mode")

        if config.stats_source not in STATS_SOURCES:
            errors.append(f"stats_source must be one of: {', '.join(STATS_SOURCES)}")

        return ValidationResult(len(errors) == 0, errors)

    def _get_default_config(self) -> AppConfig:
        return AppConfig(
            api_base_url=DEFAULT_API_BASE_URL,
            request_timeout=10.0,
            max_retries=2,
            log_level="INFO",
            default_sort=SortKey.RECENT,
            match_mode=MatchMode.SEARCH_OVERRIDES_STATUS,
            stats_source="local",
        )

    def _config_to_dict(self, config: AppConfig) -> dict[str, Any]:
        """Convert AppConfig to dictionary for JSON serialization."""
        return {
            "api_base_url": config.api_base_url,
            "request_timeout": config.request_timeout,
            "max_retries": config.max_retries,
            "log_level": config.log_level,
            "default_sort": config.default_sort.value,
            "match_mode": config.match_mode.value,
            "stats_source": config.stats_source,
        }

    def _dict_to_config(self, data: dict[str, Any]) -> AppConfig:
        """Convert dictionary to AppConfig, falling back to defaults per field."""
        timeout_raw = data.get("request_timeout", 10.0)
        retries_raw = data.get("max_retries", 2)

        return AppConfig(
            api_base_url=str(data.get("api_base_url", DEFAULT_API_BASE_URL)),
            request_timeout=float(timeout_raw) if isinstance(timeout_raw, (int, float)) else 10.0,
            max_retries=int(retries_raw) if isinstance(retries_raw, int) else 2,
            log_level=str(data.get("log_level", "INFO")).upper(),
            default_sort=SortKey(data.get("default_sort", SortKey.RECENT.value)),
            match_mode=MatchMode(data.get("match_mode", MatchMode.SEARCH_OVERRIDES_STATUS.value)),
            stats_source=str(data.get("stats_source", "local")),
        )
