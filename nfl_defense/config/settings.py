import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # ESPN Configuration
    espn_site_api_base: str = Field(
        "https://site.api.espn.com/apis/site/v2/sports/football/nfl",
        description="Base URL for ESPN site API (team statistics, team directory).",
    )
    espn_web_api_base: str = Field(
        "https://site.web.api.espn.com/apis/v2/sports/football/nfl",
        description="Base URL for ESPN web API (standings).",
    )
    season: int = Field(2024, ge=2000, description="NFL season year to fetch.")

    # HTTP Configuration
    request_timeout: float = Field(
        30.0, gt=0, description="Timeout in seconds for a single upstream request."
    )
    request_attempts: int = Field(
        1,
        ge=1,
        description="Total attempts per upstream request (1 means no retry).",
    )
    max_concurrent_requests: int = Field(
        32, ge=1, description="Upper bound on in-flight per-team requests."
    )
    enrich_identity: bool = Field(
        False,
        description="Fill missing names/logos from the ESPN team directory.",
    )

    # Output Configuration
    cache_ttl_seconds: int = Field(
        3600, ge=0, description="How long the HTTP endpoint caches a stats envelope."
    )
    output_file: str = Field(
        "defense_stats.json", description="Where the CLI writes the stats envelope."
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )
    log_file: Optional[str] = Field(
        None, description="Optional path for a rotating file log sink."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_settings() -> AppSettings:
    """Builds settings from the environment, falling back to INFO for a bad log level."""
    try:
        loaded = AppSettings()
    except Exception as e:
        logging.exception(f"Invalid NFL defense settings: {e}")
        raise SystemExit("Could not load settings; check your environment and .env file.")

    level = loaded.log_level.upper()
    if level not in VALID_LOG_LEVELS:
        logging.warning(f"Unknown LOG_LEVEL '{loaded.log_level}', defaulting to INFO.")
        level = "INFO"
    loaded.log_level = level
    return loaded


settings: AppSettings = load_settings()
