"""Environment-driven configuration."""

import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict


class Settings(BaseModel):
    """Runtime settings read from environment variables."""

    model_config = ConfigDict(frozen=True)

    geocoding_url: str = "https://geocoding-api.open-meteo.com/v1/search"
    forecast_url: str = "https://api.openweathermap.org/data/3.0/onecall"
    openweather_api_key: str = ""
    http_timeout_s: float = 5.0
    search_result_count: int = 10
    search_language: str = "en"
    search_debounce_s: float = 0.5
    forecast_units: str = "metric"
    redis_host: str = "redis"
    redis_port: int = 6379
    redis_db: int = 0
    favorites_key_prefix: str = "favorites"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment.

        Returns:
            Settings with defaults for any unset variable.
        """
        defaults = cls()
        return cls(
            geocoding_url=os.getenv("GEOCODING_URL", defaults.geocoding_url),
            forecast_url=os.getenv("FORECAST_URL", defaults.forecast_url),
            openweather_api_key=os.getenv("OPENWEATHER_API_KEY", ""),
            http_timeout_s=float(os.getenv("HTTP_TIMEOUT_S", "5")),
            search_result_count=int(os.getenv("SEARCH_RESULT_COUNT", "10")),
            search_language=os.getenv("SEARCH_LANGUAGE", "en"),
            search_debounce_s=int(os.getenv("SEARCH_DEBOUNCE_MS", "500")) / 1000,
            forecast_units=os.getenv("FORECAST_UNITS", "metric"),
            redis_host=os.getenv("REDIS_HOST", "redis"),
            redis_port=int(os.getenv("REDIS_PORT", "6379")),
            redis_db=int(os.getenv("REDIS_DB", "0")),
            favorites_key_prefix=os.getenv("FAVORITES_KEY_PREFIX", "favorites"),
        )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, read once."""
    return Settings.from_env()
