"""Daily forecast models for the One Call weather API.

Every field is optional: the upstream omits whatever it has no data for,
and absence is not an error. Nothing is defaulted to zero.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class _ForecastModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class FeelsLike(_ForecastModel):
    """Feels-like temperatures across the day."""

    day: Optional[float] = None
    night: Optional[float] = None
    eve: Optional[float] = None
    morn: Optional[float] = None


class Temperature(_ForecastModel):
    """Temperature breakdown across the day."""

    day: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    night: Optional[float] = None
    eve: Optional[float] = None
    morn: Optional[float] = None


class WeatherCondition(_ForecastModel):
    """A weather condition descriptor, e.g. ``Rain / light rain``."""

    id: Optional[int] = None
    main: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None


def _alias(name: str, camel: str):
    return Field(default=None, validation_alias=AliasChoices(name, camel))


class DailyForecast(_ForecastModel):
    """One day of forecast data."""

    clouds: Optional[int] = None
    dew_point: Optional[float] = _alias("dew_point", "dewPoint")
    dt: Optional[int] = None
    feels_like: Optional[FeelsLike] = _alias("feels_like", "feelsLike")
    humidity: Optional[int] = None
    moon_phase: Optional[float] = _alias("moon_phase", "moonPhase")
    moonrise: Optional[int] = None
    moonset: Optional[int] = None
    pop: Optional[float] = None
    pressure: Optional[int] = None
    rain: Optional[float] = None
    sunrise: Optional[int] = None
    sunset: Optional[int] = None
    temp: Optional[Temperature] = None
    uvi: Optional[float] = None
    weather: Optional[list[WeatherCondition]] = None
    wind_deg: Optional[int] = _alias("wind_deg", "windDeg")
    wind_gust: Optional[float] = _alias("wind_gust", "windGust")
    wind_speed: Optional[float] = _alias("wind_speed", "windSpeed")

    @property
    def primary_condition(self) -> Optional[WeatherCondition]:
        """Return the first weather condition, if any."""
        return self.weather[0] if self.weather else None


class Forecast(_ForecastModel):
    """Forecast response envelope holding the daily entries."""

    lat: Optional[float] = None
    lon: Optional[float] = None
    timezone: Optional[str] = None
    timezone_offset: Optional[int] = None
    daily: list[DailyForecast] = Field(default_factory=list)

    @classmethod
    def from_api_response(cls, api_data: dict) -> "Forecast":
        """Create a Forecast from the external API payload.

        Args:
            api_data: Decoded JSON body of the forecast endpoint.

        Returns:
            A populated Forecast model.

        Raises:
            pydantic.ValidationError: If a present field has the wrong shape.
        """
        if api_data.get("daily") is None:
            api_data = {**api_data, "daily": []}
        return cls.model_validate(api_data)
