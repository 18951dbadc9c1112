"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Geocoding service (Nominatim)
    geocoder_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Base URL for the place-name geocoding service"
    )
    geocoder_user_agent: str = Field(
        default="agroenv-dashboard",
        description="User-Agent sent to the geocoder (required by Nominatim usage policy)"
    )
    geocoder_include_boundary: bool = Field(
        default=True,
        description="Whether to request the GeoJSON boundary of the matched place"
    )
    boundary_simplify_tolerance: float = Field(
        default=0.001,
        description="Simplification tolerance for boundary polygons, in degrees"
    )

    # Weather archive (Open-Meteo)
    weather_archive_base_url: str = Field(
        default="https://archive-api.open-meteo.com",
        description="Base URL for the historical daily weather archive"
    )
    weather_history_years: int = Field(
        default=5,
        description="Length of the trailing weather window, in years"
    )

    # HTTP / Retry Configuration
    http_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout applied to every upstream HTTP call"
    )
    max_retry_attempts: int = Field(
        default=1,
        description="Maximum number of attempts for upstream calls (1 disables retry)"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=1,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=30,
        description="Maximum analysis requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Agro-Environmental Insights API",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
