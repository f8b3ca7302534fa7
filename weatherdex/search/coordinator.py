"""City search and favorites coordinator.

Drives the search screen: debounces query input, runs at most one
authoritative lookup at a time, merges favorites, and publishes state
snapshots and error notifications to subscribers. All state mutation
happens on the event loop thread the coordinator is used from.
"""

import asyncio
from typing import Callable, Optional

from weatherdex.favorites.store import FavoritesStore, FavoritesWriteError
from weatherdex.logging_config import logger
from weatherdex.models.city import City
from weatherdex.models.state import Notification, SearchState
from weatherdex.settings import get_settings
from weatherdex.weather_service.lookup import LookupServiceError, WeatherLookupClient

GENERIC_ERROR_MESSAGE = "Something went wrong, please try again"

StateListener = Callable[[SearchState], None]
ErrorListener = Callable[[Notification], None]
Navigator = Callable[..., None]


class CitySearchCoordinator:
    """View-model for the city search screen.

    Args:
        lookup: Client used for remote city searches.
        favorites: Store holding the favorited cities.
        navigator: Called with ``city_name``, ``latitude`` and ``longitude``
            when a city is selected.
        debounce_s: Quiescence interval before a query is looked up.
    """

    def __init__(
        self,
        lookup: WeatherLookupClient,
        favorites: FavoritesStore,
        navigator: Optional[Navigator] = None,
        debounce_s: Optional[float] = None,
    ):
        self.lookup = lookup
        self.favorites = favorites
        self.navigator = navigator
        self.debounce_s = (
            get_settings().search_debounce_s if debounce_s is None else debounce_s
        )
        self._state = SearchState()
        self._state_listeners: list[StateListener] = []
        self._error_listeners: list[ErrorListener] = []
        self._token = 0
        self._pending: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def state(self) -> SearchState:
        return self._state

    def subscribe(self, callback: StateListener) -> Callable[[], None]:
        """Register a state listener and deliver the current state to it.

        Returns:
            A callable that removes the listener.
        """
        self._state_listeners.append(callback)
        self._deliver(callback, self._state)
        return lambda: self._remove(self._state_listeners, callback)

    def subscribe_errors(self, callback: ErrorListener) -> Callable[[], None]:
        """Register a listener for transient error notifications.

        Returns:
            A callable that removes the listener.
        """
        self._error_listeners.append(callback)
        return lambda: self._remove(self._error_listeners, callback)

    @staticmethod
    def _remove(listeners: list, callback):
        if callback in listeners:
            listeners.remove(callback)

    @staticmethod
    def _deliver(callback, value):
        try:
            callback(value)
        except Exception as exc:
            logger.error("LISTENER_FAILED", listener=repr(callback), error=str(exc))

    def _publish(self, **changes):
        self._state = self._state.model_copy(update=changes)
        for callback in list(self._state_listeners):
            self._deliver(callback, self._state)

    def _notify(self, message: str):
        notification = Notification(message=message or GENERIC_ERROR_MESSAGE)
        for callback in list(self._error_listeners):
            self._deliver(callback, notification)

    def on_query_changed(self, text: str):
        """Accept new query text and schedule a debounced lookup.

        Blank text cancels pending work and clears the results at once.
        Must be called from a running event loop.
        """
        if self._closed:
            return
        self._token += 1
        token = self._token
        self._cancel_pending()
        query = text.strip()
        if not query:
            self._publish(query=text, results=(), is_searching=False)
            return
        self._publish(query=text, is_searching=False)
        self._pending = asyncio.get_running_loop().create_task(
            self._search(query, token)
        )

    def _cancel_pending(self):
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def _is_current(self, token: int) -> bool:
        return token == self._token and not self._closed

    async def _search(self, query: str, token: int):
        try:
            await asyncio.sleep(self.debounce_s)
            if not self._is_current(token):
                return
            self._publish(is_searching=True)
            logger.info("CITY_SEARCH_DISPATCHED", query=query, token=token)
            try:
                results = await self.lookup.search(query)
            except LookupServiceError as exc:
                self._fail(token, query, exc.user_message, str(exc))
                return
            except Exception as exc:
                logger.exception("CITY_SEARCH_UNEXPECTED_ERROR", query=query)
                self._fail(token, query, GENERIC_ERROR_MESSAGE, str(exc))
                return
            if not self._is_current(token):
                logger.info("CITY_SEARCH_STALE_RESULT", query=query, token=token)
                return
            self._publish(results=tuple(results), is_searching=False)
        except asyncio.CancelledError:
            if token == self._token:
                self._publish(is_searching=False)
            raise

    def _fail(self, token: int, query: str, message: str, error: str):
        if not self._is_current(token):
            logger.info("CITY_SEARCH_STALE_ERROR", query=query, token=token)
            return
        logger.error("CITY_SEARCH_FAILED", query=query, error=error)
        self._publish(results=(), is_searching=False)
        self._notify(message)

    def on_activate(self):
        """Re-read favorites when the screen becomes visible."""
        if self._closed:
            return
        self._refresh_favorites()

    def _refresh_favorites(self):
        self._publish(favorites=tuple(self.favorites.list()))

    def is_favorite(self, city: City) -> bool:
        return self.favorites.contains(city)

    def add_favorite(self, city: City):
        """Favorite a city; already-favorited cities are left as they are."""
        try:
            self.favorites.add(city)
        except FavoritesWriteError as exc:
            self._notify(str(exc))
        self._refresh_favorites()

    def remove_favorite(self, city: City):
        try:
            self.favorites.remove(city)
        except FavoritesWriteError as exc:
            self._notify(str(exc))
        self._refresh_favorites()

    def toggle_favorite(self, city: City):
        if self.is_favorite(city):
            self.remove_favorite(city)
        else:
            self.add_favorite(city)

    def select_city(self, city: City):
        """Navigate to the detail view for a city."""
        if self.navigator is None:
            logger.warning("NAVIGATION_UNAVAILABLE", city=city.name)
            return
        self.navigator(
            city_name=city.name, latitude=city.latitude, longitude=city.longitude
        )

    async def close(self):
        """Cancel pending work and leave the coordinator idle."""
        self._closed = True
        pending = self._pending
        self._cancel_pending()
        if pending is not None:
            await asyncio.gather(pending, return_exceptions=True)
        if self._state.is_searching:
            self._publish(is_searching=False)
