"""Application settings parsed from environment variables and defaults."""

import json
from functools import lru_cache
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]
DEFAULT_PLATFORM_PROVIDERS = {"netflix": 8, "prime": 119, "hotstar": 122}


def _maybe_json(value: str) -> Any:
    stripped = value.strip()
    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        return stripped


def _string_list(value: Any) -> list[str]:
    """Normalize a JSON array, a comma-separated string or a list into clean strings."""
    if isinstance(value, str):
        value = _maybe_json(value)
        if isinstance(value, str):
            value = value.split(",")
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = "Moviefinder API"
    environment: str = "development"
    api_prefix: str = "/api"

    log_level: str = "INFO"
    cors_origins: list[str] | str = Field(default_factory=lambda: DEFAULT_CORS_ORIGINS.copy())
    health_allowlist: list[str] | str = Field(default_factory=list)

    tmdb_api_key: Optional[str] = None
    tmdb_api_auth_header: Optional[str] = None
    omdb_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash-preview-09-2025"

    provider_timeout_seconds: float = 15.0
    provider_retry_attempts: int = 3

    search_cache_ttl_seconds: int = 60 * 60 * 24
    fast_path_cache_ttl_seconds: int = 60 * 60
    fallback_cache_ttl_seconds: int = 60 * 5
    details_cache_ttl_seconds: int = 60 * 60
    trending_cache_ttl_seconds: int = 60 * 60 * 6
    ratings_cache_ttl_seconds: int = 60 * 60 * 24
    cache_sweep_interval_seconds: int = 60 * 10
    cache_max_entries: int = 4096

    search_enrich_limit: int = 10
    similar_enrich_limit: int = 10
    direct_search_limit: int = 10
    trending_cap: int = 12
    regional_per_type_cap: int = 10

    primary_region: str = "IN"
    secondary_region: str = "US"
    regional_languages: str = "hi|te|ta|ml"
    platform_providers: dict[str, int] | str = Field(default_factory=lambda: DEFAULT_PLATFORM_PROVIDERS.copy())

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_cors_origins(cls, value: str | list[str] | None) -> list[str]:
        return _string_list(value) or DEFAULT_CORS_ORIGINS.copy()

    @field_validator("health_allowlist", mode="before")
    @classmethod
    def _split_health_allowlist(cls, value: str | list[str] | None) -> list[str]:
        return _string_list(value)

    @field_validator("platform_providers", mode="before")
    @classmethod
    def _parse_platform_providers(cls, value: str | dict | None) -> dict[str, int]:
        """Accept platform maps as JSON objects or `name=id` CSV pairs."""
        parsed = _maybe_json(value) if isinstance(value, str) else value
        if isinstance(parsed, str):
            parsed = dict(pair.split("=", 1) for pair in parsed.split(",") if "=" in pair)
        if isinstance(parsed, dict) and parsed:
            return {str(name).strip().lower(): int(provider_id) for name, provider_id in parsed.items()}
        return DEFAULT_PLATFORM_PROVIDERS.copy()

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings to avoid re-parsing environment variables."""
    return Settings()


settings = get_settings()
