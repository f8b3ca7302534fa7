"""Redis-backed store for favorited cities."""

import time
from functools import partial

from pydantic import ValidationError
from redis import Redis
from redis.exceptions import RedisError

from weatherdex.logging_config import logger
from weatherdex.models.city import City
from weatherdex.settings import get_settings

_settings = get_settings()

redis_client = Redis(
    host=_settings.redis_host,
    port=_settings.redis_port,
    db=_settings.redis_db,
    decode_responses=True,
)


class FavoritesError(Exception):
    """Base exception for favorites store failures."""
    pass


class FavoritesWriteError(FavoritesError):
    """Raised when a favorite cannot be saved or removed."""
    pass


class FavoritesStore:
    """Ordered, duplicate-free set of favorited cities.

    Identity keys live in a sorted set scored by favoriting time; the city
    payloads live in a hash under the same keys.
    """

    def __init__(self, client, key_prefix: str = "favorites"):
        self.redis_client: Redis = client
        self.order_key = f"{key_prefix}:order"
        self.cities_key = f"{key_prefix}:cities"

    def list(self) -> list[City]:
        """Return favorited cities, oldest first.

        Returns:
            The favorites, or an empty list if Redis cannot be read.
        """
        try:
            keys = self.redis_client.zrange(self.order_key, 0, -1)
            payloads = self.redis_client.hmget(self.cities_key, keys) if keys else []
        except RedisError as exc:
            logger.error("FAVORITES_READ_FAILED", error=str(exc))
            return []

        cities = []
        for key, payload in zip(keys, payloads):
            if payload is None:
                logger.warning("FAVORITES_MISSING_ENTRY", key=key)
                continue
            try:
                cities.append(City.model_validate_json(payload))
            except ValidationError as exc:
                logger.warning("FAVORITES_BAD_ENTRY", key=key, error=str(exc))
        return cities

    def contains(self, city: City) -> bool:
        try:
            return self.redis_client.zscore(self.order_key, city.identity_key) is not None
        except RedisError as exc:
            logger.error("FAVORITES_READ_FAILED", city=city.name, error=str(exc))
            return False

    def add(self, city: City) -> bool:
        """Favorite a city; favoriting it again changes nothing.

        Args:
            city: City to favorite.

        Returns:
            True if the city was newly added.

        Raises:
            FavoritesWriteError: If Redis rejects the write.
        """
        key = city.identity_key
        try:
            pipe = self.redis_client.pipeline(transaction=True)
            pipe.zadd(self.order_key, {key: time.time()}, nx=True)
            pipe.hsetnx(self.cities_key, key, city.model_dump_json())
            added, _ = pipe.execute()
        except RedisError as exc:
            logger.error("FAVORITES_ADD_FAILED", city=city.name, error=str(exc))
            raise FavoritesWriteError(f"Could not favorite {city.name}") from exc
        logger.info("FAVORITES_ADD", city=city.name, added=bool(added))
        return bool(added)

    def remove(self, city: City) -> bool:
        """Remove a city from the favorites.

        Args:
            city: City to remove.

        Returns:
            True if the city had been favorited.

        Raises:
            FavoritesWriteError: If Redis rejects the write.
        """
        key = city.identity_key
        try:
            pipe = self.redis_client.pipeline(transaction=True)
            pipe.zrem(self.order_key, key)
            pipe.hdel(self.cities_key, key)
            removed, _ = pipe.execute()
        except RedisError as exc:
            logger.error("FAVORITES_REMOVE_FAILED", city=city.name, error=str(exc))
            raise FavoritesWriteError(f"Could not remove {city.name}") from exc
        logger.info("FAVORITES_REMOVE", city=city.name, removed=bool(removed))
        return bool(removed)


favorites_store = partial(
    FavoritesStore, client=redis_client, key_prefix=_settings.favorites_key_prefix
)
