"""Remote lookup client for city search and daily forecasts."""

from typing import Optional

import httpx
from pydantic import ValidationError

from weatherdex.logging_config import logger
from weatherdex.models.city import City
from weatherdex.models.forecast import Forecast
from weatherdex.settings import Settings, get_settings

RATE_LIMIT_STATUS = 429


class LookupServiceError(Exception):
    """Base exception for remote lookup failures."""

    user_message = "Something went wrong, please try again"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.user_message)
        if message:
            self.user_message = message


class NetworkError(LookupServiceError):
    """Raised on connectivity failures, timeouts and bad HTTP statuses."""

    user_message = "Unable to reach the weather service"


class RateLimitError(NetworkError):
    """Raised when the upstream API rejects the request as rate limited."""

    user_message = "Too many requests, please wait a moment"


class DecodeError(LookupServiceError):
    """Raised when a response body has an unexpected shape."""

    user_message = "Received an unexpected response from the weather service"


class EmptyQueryError(LookupServiceError):
    """Raised when a lookup is attempted with blank input."""

    user_message = "Enter a city name"


class WeatherLookupClient:
    """Async client over the geocoding and forecast APIs.

    A fresh request never retries an earlier one; callers that need
    supersession discard stale results themselves.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.settings.http_timeout_s)
        return self._http_client

    async def aclose(self):
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _get_json(
        self,
        *,
        url: str,
        params: dict,
        event_prefix: str,
        log_context: dict,
    ):
        """Execute an HTTP GET and decode the JSON body with consistent logging.

        Args:
            url: The URL to call.
            params: Query parameters to include in the request.
            event_prefix: Log event prefix for consistent names.
            log_context: Extra log fields for all events.

        Returns:
            The decoded JSON body.

        Raises:
            RateLimitError: On HTTP 429.
            NetworkError: On transport failures and other bad statuses.
            DecodeError: When the body is not JSON.
        """
        try:
            response = await self.http_client.get(url, params=params)
            logger.info(
                f"{event_prefix}_RESPONSE",
                **log_context,
                status=response.status_code,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.error(f"{event_prefix}_BAD_STATUS", **log_context, status=status_code)
            if status_code == RATE_LIMIT_STATUS:
                raise RateLimitError() from exc
            raise NetworkError() from exc
        except httpx.TimeoutException as exc:
            logger.error(f"{event_prefix}_TIMEOUT", **log_context, error=str(exc))
            raise NetworkError("The weather service took too long to respond") from exc
        except httpx.RequestError as exc:
            logger.error(f"{event_prefix}_REQUEST_FAILED", **log_context, error=str(exc))
            raise NetworkError() from exc

        try:
            return response.json()
        except ValueError as exc:
            logger.error(f"{event_prefix}_BAD_PAYLOAD", **log_context, error=str(exc))
            raise DecodeError() from exc

    async def search(self, query: str) -> list[City]:
        """Search the geocoding API for cities matching a query.

        Args:
            query: City name text; surrounding whitespace is ignored.

        Returns:
            Zero or more matching cities, in upstream order.

        Raises:
            EmptyQueryError: If the query is blank.
            NetworkError: If the request fails.
            DecodeError: If the response payload is invalid.
        """
        query = query.strip()
        if not query:
            raise EmptyQueryError()

        data = await self._get_json(
            url=self.settings.geocoding_url,
            params={
                "name": query,
                "count": self.settings.search_result_count,
                "language": self.settings.search_language,
                "format": "json",
            },
            event_prefix="CITY_SEARCH",
            log_context={"query": query},
        )

        try:
            results = data.get("results") or []
            return [City.from_geocoding_result(item) for item in results]
        except (AttributeError, TypeError, KeyError, ValidationError) as exc:
            logger.error("CITY_SEARCH_BAD_PAYLOAD", query=query, error=str(exc))
            raise DecodeError() from exc

    async def get_forecast(
        self, latitude: float, longitude: float, units: Optional[str] = None
    ) -> Forecast:
        """Fetch the daily forecast for a coordinate pair.

        Args:
            latitude: Latitude in decimal degrees.
            longitude: Longitude in decimal degrees.
            units: Unit system (``metric``, ``imperial`` or ``standard``).

        Returns:
            A Forecast whose daily entries may have any field missing.

        Raises:
            NetworkError: If the request fails.
            DecodeError: If the response payload is invalid.
        """
        units = units or self.settings.forecast_units
        log_context = {"latitude": latitude, "longitude": longitude}
        data = await self._get_json(
            url=self.settings.forecast_url,
            params={
                "lat": latitude,
                "lon": longitude,
                "units": units,
                "exclude": "minutely,hourly,alerts",
                "appid": self.settings.openweather_api_key,
            },
            event_prefix="FORECAST",
            log_context=log_context,
        )

        try:
            return Forecast.from_api_response(data)
        except (AttributeError, TypeError, ValidationError) as exc:
            logger.error("FORECAST_BAD_PAYLOAD", **log_context, error=str(exc))
            raise DecodeError() from exc
