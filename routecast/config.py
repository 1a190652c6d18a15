"""RouteCast Application Configuration.

Centralized configuration management for the RouteCast service using Pydantic
settings. Handles environment variables, provider credentials and the
checkpoint sampling thresholds used when overlaying weather on a route.

Environment variables are loaded from .env file in development and from the
system environment in production. A missing OpenWeather key is a supported
state: weather is then generated synthetically.
"""

from typing import Dict, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# OpenWeather icon codes to icon categories.
# Codes with no entry fall back to "cloud".
WEATHER_ICON_CODES: Dict[str, str] = {
    "01d": "sun",
    "01n": "moon",
    "02d": "cloud-sun",
    "02n": "cloud-moon",
    "03d": "cloud",
    "03n": "cloud",
    "04d": "cloud",
    "04n": "cloud",
    "09d": "cloud-drizzle",
    "09n": "cloud-drizzle",
    "10d": "cloud-rain",
    "10n": "cloud-rain",
    "11d": "cloud-lightning",
    "11n": "cloud-lightning",
    "13d": "cloud-snow",
    "13n": "cloud-snow",
    "50d": "cloud-fog",
    "50n": "cloud-fog",
}


class Settings(BaseSettings):
    """Application settings - single source of truth for configuration."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Directions / geocoding (Mapbox)
    MAPBOX_ACCESS_TOKEN: str = Field(default="")
    MAPBOX_API_URL: str = "https://api.mapbox.com"
    MAPBOX_PROFILE: str = "driving"

    # Weather (OpenWeather)
    OPENWEATHER_API_KEY: str = Field(default="")
    OPENWEATHER_API_URL: str = "https://api.openweathermap.org/data/2.5"

    # HTTP client policy for both providers
    HTTP_TIMEOUT_S: float = 10.0
    HTTP_MAX_RETRIES: int = 2

    # Redis (directions cache)
    REDIS_URL: str = "redis://localhost:6379/0"
    DIRECTIONS_CACHE_TTL_S: int = 86400

    # App
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8080"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60

    # Checkpoint sampling
    CHECKPOINT_INTERVAL_MINUTES: float = 15.0
    CHECKPOINT_INTERVAL_KM: float = 10.0
    END_MERGE_MINUTES: float = 5.0
    END_MERGE_KM: float = 2.0
    CURRENT_WEATHER_WINDOW_HOURS: float = 2.0

    @field_validator("CORS_ORIGINS")
    @classmethod
    def parse_cors_origins(cls, v: str) -> List[str]:
        """Parse comma-separated CORS origins."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        if isinstance(self.CORS_ORIGINS, str):
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
        return self.CORS_ORIGINS

    @property
    def weather_provider_configured(self) -> bool:
        return bool(self.OPENWEATHER_API_KEY.strip())

    @property
    def directions_provider_configured(self) -> bool:
        return bool(self.MAPBOX_ACCESS_TOKEN.strip())


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
