"""
Weather widget: state holder for weather lookup and city autocomplete.

WeatherWidget geolocates the user on mount, looks up current weather by
coordinates or city name and keeps autocomplete suggestions for the search
field. Network work runs as tasks in the task group owned by the mounted
widget; every lookup and every suggestion request is tagged with a sequence
number so a response arriving after a newer request started is dropped
instead of overwriting newer state.
"""

import asyncio
import dataclasses
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Coroutine, List, Optional, Set

from lib.geolocation import LocationProviderInterface
from lib.openweathermap import (
    LocationNotFoundError,
    OpenWeatherMapClient,
    OpenWeatherMapError,
    Suggestion,
    WeatherResult,
    suggestionLookupKey,
)

from .models import LookupOutcome, UIState

logger = logging.getLogger(__name__)

StateListener = Callable[[UIState], None]

DEFAULT_MIN_QUERY_LENGTH = 2
DEFAULT_SUGGESTION_LIMIT = 5


class WeatherWidget:
    """
    Weather lookup widget.

    Usage:
        widget = WeatherWidget(client, IpApiLocationProvider())
        widget.addListener(lambda state: print(renderWidget(state)))

        async with widget.mounted():
            widget.handleInputChange("Par")
            await widget.settle()
            widget.handleSuggestionClick(widget.state.suggestions[0])
            await widget.settle()

    Attributes:
        client: OpenWeatherMap API client
        locationProvider: Source of initial position
        minQueryLength: Shorter input clears suggestions without a request
        suggestionLimit: Max number of suggestions kept
        state: Current UI state
    """

    def __init__(
        self,
        client: OpenWeatherMapClient,
        locationProvider: LocationProviderInterface,
        minQueryLength: int = DEFAULT_MIN_QUERY_LENGTH,
        suggestionLimit: int = DEFAULT_SUGGESTION_LIMIT,
    ):
        if minQueryLength < 0:
            raise ValueError("minQueryLength must not be negative")
        if suggestionLimit <= 0:
            raise ValueError("suggestionLimit must be positive")

        self.client = client
        self.locationProvider = locationProvider
        self.minQueryLength = minQueryLength
        self.suggestionLimit = suggestionLimit

        self.state = UIState()
        self._listeners: List[StateListener] = []

        self._taskGroup: Optional[asyncio.TaskGroup] = None
        self._tasks: Set[asyncio.Task] = set()

        # Latest issued request numbers, older responses are discarded
        self._lookupSeq = 0
        self._suggestionSeq = 0

    ###
    # Lifecycle
    ###

    @asynccontextmanager
    async def mounted(self) -> AsyncIterator["WeatherWidget"]:
        """
        Mount the widget for the duration of the context.

        Creates fresh state, starts the mount-time location lookup and owns the
        task group for all network work. On exit work still in flight is
        cancelled and state is discarded.

        Raises:
            RuntimeError: If the widget is already mounted
        """
        if self._taskGroup is not None:
            raise RuntimeError("Widget is already mounted")

        self._resetState()
        try:
            async with asyncio.TaskGroup() as taskGroup:
                self._taskGroup = taskGroup
                logger.debug("Widget mounted")
                self.spawn(self.onMount())
                try:
                    yield self
                finally:
                    for task in list(self._tasks):
                        task.cancel()
        except BaseExceptionGroup as group:
            # Error raised in the context body comes back wrapped by the task group
            if len(group.exceptions) == 1:
                raise group.exceptions[0]
            raise
        finally:
            self._taskGroup = None
            self._tasks.clear()
            self._resetState()
            logger.debug("Widget unmounted")

    @property
    def isMounted(self) -> bool:
        return self._taskGroup is not None

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """
        Run coroutine as a task of the mounted widget.

        Raises:
            RuntimeError: If the widget is not mounted
        """
        if self._taskGroup is None:
            coro.close()
            raise RuntimeError("Widget is not mounted")
        task = self._taskGroup.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def settle(self) -> None:
        """Wait until every spawned task (including ones spawned meanwhile) is done."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.wait(pending)

    def addListener(self, listener: StateListener) -> None:
        """Register callback receiving state snapshot on every change."""
        self._listeners.append(listener)

    def removeListener(self, listener: StateListener) -> None:
        self._listeners.remove(listener)

    def _notify(self) -> None:
        snapshot = self.state.copy()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"State listener {listener!r} failed: {e}")
                logger.exception(e)

    def _resetState(self) -> None:
        self._lookupSeq = 0
        self._suggestionSeq = 0
        self.state = UIState()
        self._notify()

    async def onMount(self) -> Optional[LookupOutcome]:
        """
        Request current position once and look up weather there.

        Returns:
            Lookup outcome, or None if location is unavailable or denied
        """
        try:
            position = await self.locationProvider.getCurrentPosition()
        except Exception as e:
            logger.error(f"Location provider failed: {e}")
            return None

        if position is None:
            logger.info("Location is not available, waiting for city search")
            return None

        logger.info(f"Got current position: {position['lat']}, {position['lon']}")
        return await self.fetchWeatherByCoords(position["lat"], position["lon"])

    ###
    # Lookups
    ###

    async def fetchWeatherByCoords(self, lat: float, lon: float) -> LookupOutcome:
        """
        Look up weather for coordinates.

        On success replaces lastResult and sets selectedCityName to the returned
        location name, on failure keeps lastResult. Loading flag is cleared when
        request settles.
        """
        return await self._lookupByCoords(self._nextLookupSeq(), lat, lon)

    async def fetchWeatherByCity(self, name: str) -> LookupOutcome:
        """
        Look up weather for free-text city name (e.g. "Paris" or "Paris,FR").

        Unknown or ambiguous names fail the same way as network errors.
        """
        return await self._lookupByCity(self._nextLookupSeq(), name)

    async def fetchCitySuggestions(self, text: str) -> Optional[List[Suggestion]]:
        """
        Refresh suggestion list for the search field input.

        Input shorter than minQueryLength clears the list without any request.

        Returns:
            Suggestions fetched (possibly empty), or None if request failed
            and the list was left as it was
        """
        return await self._fetchSuggestions(self._nextSuggestionSeq(), text)

    # Sequence numbers are taken when a request is issued (not when its task
    # starts running), so issue order decides which response is the latest.

    def _nextLookupSeq(self) -> int:
        self._lookupSeq += 1
        return self._lookupSeq

    def _nextSuggestionSeq(self) -> int:
        self._suggestionSeq += 1
        return self._suggestionSeq

    async def _lookupByCoords(self, seq: int, lat: float, lon: float) -> LookupOutcome:
        return await self._lookup(seq, f"{lat},{lon}", lambda: self.client.getWeatherByCoords(lat, lon), "")

    async def _lookupByCity(self, seq: int, name: str) -> LookupOutcome:
        return await self._lookup(seq, name, lambda: self.client.getWeatherByCity(name), name)

    async def _lookup(
        self,
        seq: int,
        description: str,
        request: Callable[[], Awaitable[WeatherResult]],
        fallbackName: str,
    ) -> LookupOutcome:
        if seq == self._lookupSeq:
            self.state.isLoading = True
            self._notify()

        try:
            result = await request()
        except LocationNotFoundError as e:
            logger.warning(f"No weather for '{description}': {e}")
            outcome = LookupOutcome.failure(str(e))
        except OpenWeatherMapError as e:
            logger.error(f"Error fetching weather for '{description}': {e}")
            outcome = LookupOutcome.failure(str(e))
        except Exception as e:
            logger.error(f"Unexpected error fetching weather for '{description}': {e}")
            outcome = LookupOutcome.failure(f"Unexpected error: {e}")
        else:
            outcome = LookupOutcome.success(result)

        if seq != self._lookupSeq:
            logger.debug(f"Discarding superseded lookup #{seq} for '{description}'")
            return dataclasses.replace(outcome, superseded=True)

        if outcome.data is not None:
            self.state.lastResult = outcome.data
            # Provider may omit name, keep what user asked for then
            self.state.selectedCityName = outcome.data["name"] or fallbackName
            self.state.errorReason = None
        else:
            self.state.errorReason = outcome.reason
        self.state.lookupStatus = outcome.status
        self.state.isLoading = False
        self._notify()
        return outcome

    async def _fetchSuggestions(self, seq: int, text: str) -> Optional[List[Suggestion]]:
        if len(text) < self.minQueryLength:
            if seq == self._suggestionSeq:
                self._setSuggestions([])
            return []

        try:
            suggestions = await self.client.searchCities(text, limit=self.suggestionLimit)
        except OpenWeatherMapError as e:
            logger.error(f"Error fetching suggestions for '{text}': {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected error fetching suggestions for '{text}': {e}")
            return None

        suggestions = suggestions[: self.suggestionLimit]
        if seq != self._suggestionSeq:
            logger.debug(f"Discarding superseded suggestions #{seq} for '{text}'")
            return suggestions

        self._setSuggestions(suggestions)
        return suggestions

    def _setSuggestions(self, suggestions: List[Suggestion]) -> None:
        self.state.suggestions = list(suggestions)
        self._notify()

    def _clearSuggestions(self) -> None:
        # Pending suggestion requests must not refill the list
        self._nextSuggestionSeq()
        self._setSuggestions([])

    ###
    # User gestures
    ###

    def handleInputChange(self, text: str) -> asyncio.Task:
        """Typing in the search field: update query text and refresh suggestions."""
        self.state.queryText = text
        self._notify()
        return self.spawn(self._fetchSuggestions(self._nextSuggestionSeq(), text))

    def handleSubmit(self) -> asyncio.Task:
        """Enter key or search control: look up current query text."""
        query = self.state.queryText
        self._clearSuggestions()
        return self.spawn(self._lookupByCity(self._nextLookupSeq(), query))

    def handleSuggestionClick(self, suggestion: Suggestion) -> asyncio.Task:
        """Suggestion chosen: look up "name,country" and put it into the search field."""
        cityName = suggestionLookupKey(suggestion)
        self.state.queryText = cityName
        self._clearSuggestions()
        return self.spawn(self._lookupByCity(self._nextLookupSeq(), cityName))
