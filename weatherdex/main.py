"""FastAPI application routes, middleware, and metrics."""

import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from structlog.contextvars import bind_contextvars, clear_contextvars

from weatherdex.favorites.store import FavoritesStore, FavoritesWriteError, favorites_store
from weatherdex.health.health_check import (
    is_favorites_store_available,
    is_geocoding_api_available,
)
from weatherdex.logging_config import logger
from weatherdex.models.city import City
from weatherdex.models.forecast import Forecast
from weatherdex.models.health import Dependencies, HealthResponse
from weatherdex.weather_service.lookup import (
    DecodeError,
    LookupServiceError,
    NetworkError,
    RateLimitError,
    WeatherLookupClient,
)

lookup_client = WeatherLookupClient()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await lookup_client.aclose()


app = FastAPI(lifespan=lifespan)

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "path", "status_code"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "HTTP request duration in seconds", ["path"]
)


def get_lookup_client() -> WeatherLookupClient:
    return lookup_client


def get_favorites_store() -> FavoritesStore:
    return favorites_store()


@app.middleware("http")
async def request_logging(request: Request, call_next):
    """Log request details, attach a request ID, and record metrics.

    Args:
        request: Incoming HTTP request.
        call_next: FastAPI handler for the next middleware/app.

    Returns:
        The response produced by the downstream handler.
    """
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    bind_contextvars(request_id=request_id)
    start = time.perf_counter()
    response = None
    try:
        response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response
    finally:
        duration_s = time.perf_counter() - start
        status_code = getattr(response, "status_code", 500)
        logger.info(
            "HTTP_REQUEST",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=round(duration_s * 1000, 2),
        )
        REQUEST_COUNT.labels(
            method=request.method, path=request.url.path, status_code=status_code
        ).inc()
        REQUEST_LATENCY.labels(path=request.url.path).observe(duration_s)
        clear_contextvars()


@app.exception_handler(RateLimitError)
async def rate_limit_handler(request: Request, exc: RateLimitError):
    """Convert upstream rate limiting into 503 responses."""
    return JSONResponse(status_code=503, content={"detail": exc.user_message})


@app.exception_handler(NetworkError)
async def network_error_handler(request: Request, exc: NetworkError):
    """Convert upstream connectivity errors into 502 responses."""
    return JSONResponse(status_code=502, content={"detail": exc.user_message})


@app.exception_handler(DecodeError)
async def decode_error_handler(request: Request, exc: DecodeError):
    """Convert malformed upstream payloads into 502 responses."""
    return JSONResponse(status_code=502, content={"detail": exc.user_message})


@app.exception_handler(LookupServiceError)
async def lookup_error_handler(request: Request, exc: LookupServiceError):
    """Convert any other lookup failure into a 500 response."""
    return JSONResponse(status_code=500, content={"detail": "Unexpected error"})


@app.exception_handler(FavoritesWriteError)
async def favorites_write_error_handler(request: Request, exc: FavoritesWriteError):
    """Convert favorites write failures into 503 responses."""
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.get("/cities/search")
async def search_cities(
    query: str = "",
    lookup: WeatherLookupClient = Depends(get_lookup_client),
) -> list[City]:
    """Search cities by name.

    Args:
        query: City name text; blank text yields no results.

    Returns:
        Matching cities in upstream order.
    """
    if not query.strip():
        return []
    return await lookup.search(query)


@app.get("/forecast")
async def get_forecast(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
    units: Optional[str] = Query(default=None, pattern="^(metric|imperial|standard)$"),
    lookup: WeatherLookupClient = Depends(get_lookup_client),
) -> Forecast:
    """Fetch the daily forecast for a coordinate pair."""
    return await lookup.get_forecast(latitude, longitude, units)


@app.get("/favorites")
async def list_favorites(
    store: FavoritesStore = Depends(get_favorites_store),
) -> list[City]:
    """Return favorited cities, oldest first."""
    return store.list()


@app.post("/favorites", status_code=status.HTTP_201_CREATED)
async def add_favorite(
    city: City, store: FavoritesStore = Depends(get_favorites_store)
) -> list[City]:
    """Favorite a city; repeated calls leave the favorites unchanged.

    Returns:
        The favorites after the write.
    """
    store.add(city)
    return store.list()


@app.delete("/favorites")
async def remove_favorite(
    name: str,
    latitude: float,
    longitude: float,
    store: FavoritesStore = Depends(get_favorites_store),
) -> list[City]:
    """Remove a favorited city identified by name and coordinates.

    Raises:
        HTTPException: 404 if the city is not a favorite.
    """
    city = City(name=name, country="", latitude=latitude, longitude=longitude)
    if not store.remove(city):
        raise HTTPException(status_code=404, detail=f"Not a favorite: {name}")
    return store.list()


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Report API health and dependency availability.

    Returns:
        A HealthResponse containing dependency status.
    """
    return HealthResponse(
        status="ok",
        dependencies=Dependencies(
            geocoding_api=await is_geocoding_api_available(),
            favorites_store=is_favorites_store_available(),
        ),
    )


@app.get("/metrics")
async def metrics():
    """Expose Prometheus metrics for scraping."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
