"""Health checks for the favorites store and the geocoding API."""

import httpx
from redis.exceptions import RedisError

from weatherdex.favorites.store import redis_client
from weatherdex.logging_config import logger
from weatherdex.models.health import ServiceStatus
from weatherdex.settings import get_settings


def is_favorites_store_available() -> ServiceStatus:
    """Check Redis connectivity.

    Returns:
        ServiceStatus.available when Redis responds, else not_available.
    """
    try:
        redis_client.ping()
        return ServiceStatus.available
    except RedisError as exc:
        logger.error("REDIS_UNAVAILABLE", error=str(exc))
        return ServiceStatus.not_available


async def is_geocoding_api_available() -> ServiceStatus:
    """Check the geocoding API with a known query.

    Returns:
        ServiceStatus.available if the API answers with a results list.
    """
    settings = get_settings()
    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout_s) as client:
            response = await client.get(
                settings.geocoding_url, params={"name": "London", "count": 1}
            )
            if response.status_code == 200 and "results" in response.json():
                return ServiceStatus.available
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("GEOCODING_API_UNAVAILABLE", error=str(exc))
    return ServiceStatus.not_available
