"""
Tests for WeatherWidget.

Covers mount-time geolocation lookup, city lookups, autocomplete, failure
handling, discarding of superseded responses and mount lifecycle.
"""

import asyncio
from typing import List
from unittest.mock import AsyncMock

import pytest

from internal.widget import LookupStatus, UIState, WeatherWidget, renderWidget
from lib.geolocation import LocationProviderInterface
from lib.openweathermap import LocationNotFoundError, NetworkError, OpenWeatherMapClient, parseWeatherResult
from tests.utils import makeSuggestion, makeWeatherResult


class TestWidgetInit:
    """Tests for constructor"""

    def testDefaults(self, mockClient, noLocationProvider):
        widget = WeatherWidget(mockClient, noLocationProvider)

        assert widget.minQueryLength == 2
        assert widget.suggestionLimit == 5
        assert widget.state == UIState()
        assert not widget.isMounted

    def testInvalidArguments(self, mockClient, noLocationProvider):
        with pytest.raises(ValueError):
            WeatherWidget(mockClient, noLocationProvider, suggestionLimit=0)
        with pytest.raises(ValueError):
            WeatherWidget(mockClient, noLocationProvider, minQueryLength=-1)


class TestMount:
    """Tests for mount lifecycle and initial location lookup"""

    @pytest.mark.asyncio
    async def testMountLooksUpCurrentPosition(self, mockClient, parisLocationProvider, parisWeather):
        """Location granted: weather for current position is shown"""
        widget = WeatherWidget(mockClient, parisLocationProvider)

        async with widget.mounted():
            await widget.settle()
            state = widget.state.copy()

        mockClient.getWeatherByCoords.assert_awaited_once_with(48.85, 2.35)
        assert state.lastResult == parisWeather
        assert state.selectedCityName == "Paris"
        assert state.lookupStatus == LookupStatus.SUCCESS
        assert state.isLoading is False
        assert state.errorReason is None

    @pytest.mark.asyncio
    async def testMountWithoutLocation(self, mockClient, noLocationProvider):
        """Location denied: nothing is requested, widget waits for search"""
        widget = WeatherWidget(mockClient, noLocationProvider)

        async with widget.mounted():
            await widget.settle()
            state = widget.state.copy()

        mockClient.getWeatherByCoords.assert_not_awaited()
        assert state.lastResult is None
        assert state.lookupStatus == LookupStatus.NOT_YET_SEARCHED
        assert state.isLoading is False

    @pytest.mark.asyncio
    async def testMountLocationProviderFailure(self, mockClient):
        """Provider error is treated as unavailable location"""
        provider = AsyncMock(spec=LocationProviderInterface)
        provider.getCurrentPosition.side_effect = RuntimeError("sensor on fire")
        widget = WeatherWidget(mockClient, provider)

        async with widget.mounted():
            await widget.settle()
            assert widget.state.lookupStatus == LookupStatus.NOT_YET_SEARCHED

        mockClient.getWeatherByCoords.assert_not_awaited()

    @pytest.mark.asyncio
    async def testMountLookupFailure(self, mockClient, parisLocationProvider):
        """Failed coordinates lookup reports error and clears loading"""
        mockClient.getWeatherByCoords.side_effect = NetworkError("Network error: unreachable")
        widget = WeatherWidget(mockClient, parisLocationProvider)

        async with widget.mounted():
            await widget.settle()
            state = widget.state.copy()

        assert state.lastResult is None
        assert state.isLoading is False
        assert state.lookupStatus == LookupStatus.ERROR
        assert state.errorReason == "Network error: unreachable"

    @pytest.mark.asyncio
    async def testUnmountDiscardsState(self, mockClient, parisLocationProvider):
        widget = WeatherWidget(mockClient, parisLocationProvider)
        snapshots: List[UIState] = []
        widget.addListener(snapshots.append)

        async with widget.mounted():
            widget.handleInputChange("Paris")
            await widget.settle()
            assert widget.isMounted
            assert widget.state.lastResult is not None

        assert not widget.isMounted
        assert widget.state == UIState()
        assert snapshots[-1] == UIState()

    @pytest.mark.asyncio
    async def testUnmountCancelsRequestsInFlight(self, mockClient, noLocationProvider):
        neverAnswered = asyncio.Event()

        async def hangingLookup(name):
            await neverAnswered.wait()

        mockClient.getWeatherByCity.side_effect = hangingLookup
        widget = WeatherWidget(mockClient, noLocationProvider)

        async with widget.mounted():
            widget.handleInputChange("Paris")
            task = widget.handleSubmit()
            await asyncio.sleep(0)
            assert widget.state.isLoading is True

        assert task.cancelled()
        assert widget.state.isLoading is False

    @pytest.mark.asyncio
    async def testDoubleMount(self, mockClient, noLocationProvider):
        widget = WeatherWidget(mockClient, noLocationProvider)

        async with widget.mounted():
            with pytest.raises(RuntimeError):
                async with widget.mounted():
                    pass
            assert widget.isMounted

    @pytest.mark.asyncio
    async def testMountAgainStartsFresh(self, mockClient, noLocationProvider):
        widget = WeatherWidget(mockClient, noLocationProvider)

        async with widget.mounted():
            widget.handleInputChange("Paris")
            widget.handleSubmit()
            await widget.settle()

        async with widget.mounted():
            await widget.settle()
            assert widget.state == UIState()

    def testGestureRequiresMount(self, mockClient, noLocationProvider):
        widget = WeatherWidget(mockClient, noLocationProvider)

        with pytest.raises(RuntimeError):
            widget.handleSubmit()
        mockClient.getWeatherByCity.assert_not_called()

    @pytest.mark.asyncio
    async def testErrorInContextBodyIsNotWrapped(self, mockClient, noLocationProvider):
        widget = WeatherWidget(mockClient, noLocationProvider)

        with pytest.raises(ValueError, match="boom"):
            async with widget.mounted():
                raise ValueError("boom")

        assert not widget.isMounted
        assert widget.state == UIState()

    @pytest.mark.asyncio
    async def testFailingListenerDoesNotBreakWidget(self, mockClient, noLocationProvider, parisWeather, caplog):
        widget = WeatherWidget(mockClient, noLocationProvider)
        snapshots: List[UIState] = []

        def brokenListener(state: UIState) -> None:
            if state.isLoading:
                raise RuntimeError("render failed")

        widget.addListener(brokenListener)
        widget.addListener(snapshots.append)

        async with widget.mounted():
            widget.handleInputChange("Paris")
            task = widget.handleSubmit()
            await widget.settle()

            assert widget.isMounted
            assert task.result().status == LookupStatus.SUCCESS
            assert widget.state.lastResult == parisWeather

        # Listeners after the failing one still get every change
        assert any(snapshot.isLoading for snapshot in snapshots)
        assert "render failed" in caplog.text


class TestMountAndRender:
    """Tests for whole flow from mount to rendered card"""

    @pytest.mark.asyncio
    async def testParisAtCurrentPosition(self, parisLocationProvider):
        client = AsyncMock(spec=OpenWeatherMapClient)
        client.getWeatherByCoords.return_value = parseWeatherResult(
            {
                "name": "Paris",
                "main": {"temp": 15, "humidity": 70},
                "weather": [{"main": "Clouds"}],
                "wind": {"speed": 3.1},
            }
        )
        widget = WeatherWidget(client, parisLocationProvider)

        async with widget.mounted():
            await widget.settle()
            lines = renderWidget(widget.state).split("\n")

        client.getWeatherByCoords.assert_awaited_once_with(48.85, 2.35)
        for expected in ["Paris", "🌡 Temp: 15°C", "☁️ Condition: Clouds", "💧 Humidity: 70%", "🌬 Wind: 3.1 m/s"]:
            assert expected in lines
        assert "(!)" not in "\n".join(lines)


class TestCityLookup:
    """Tests for submitting city name"""

    @pytest.mark.asyncio
    async def testSubmitQuery(self, mockClient, noLocationProvider, parisWeather):
        widget = WeatherWidget(mockClient, noLocationProvider)
        snapshots: List[UIState] = []
        widget.addListener(snapshots.append)

        async with widget.mounted():
            await widget.settle()
            widget.handleInputChange("Paris")
            outcome = await widget.handleSubmit()
            await widget.settle()
            state = widget.state.copy()

        mockClient.getWeatherByCity.assert_awaited_once_with("Paris")
        assert outcome.ok
        assert outcome.data == parisWeather
        assert state.lastResult == parisWeather
        assert state.selectedCityName == "Paris"
        assert state.suggestions == []
        assert any(snapshot.isLoading for snapshot in snapshots)
        assert state.isLoading is False

    @pytest.mark.asyncio
    async def testFailureKeepsLastResult(self, mockClient, parisLocationProvider, parisWeather):
        """Failed lookup keeps previous result and clears loading flag"""
        mockClient.getWeatherByCity.side_effect = LocationNotFoundError("city not found", statusCode=404)
        widget = WeatherWidget(mockClient, parisLocationProvider)

        async with widget.mounted():
            await widget.settle()
            widget.handleInputChange("Nowhereville")
            outcome = await widget.handleSubmit()
            state = widget.state.copy()

        assert not outcome.ok
        assert outcome.reason == "city not found (status: 404)"
        assert state.lastResult == parisWeather
        assert state.selectedCityName == "Paris"
        assert state.isLoading is False
        assert state.lookupStatus == LookupStatus.ERROR
        assert state.errorReason == "city not found (status: 404)"

    @pytest.mark.asyncio
    async def testSuccessAfterFailureClearsError(self, mockClient, noLocationProvider):
        mockClient.getWeatherByCity.side_effect = [
            LocationNotFoundError("city not found", statusCode=404),
            makeWeatherResult("Lyon"),
        ]
        widget = WeatherWidget(mockClient, noLocationProvider)

        first = await widget.fetchWeatherByCity("Lyonn")
        assert widget.state.lookupStatus == LookupStatus.ERROR

        second = await widget.fetchWeatherByCity("Lyon")

        assert not first.ok
        assert second.ok
        assert widget.state.lookupStatus == LookupStatus.SUCCESS
        assert widget.state.errorReason is None
        assert widget.state.selectedCityName == "Lyon"

    @pytest.mark.asyncio
    async def testUnexpectedErrorIsReported(self, mockClient, noLocationProvider):
        mockClient.getWeatherByCity.side_effect = RuntimeError("boom")
        widget = WeatherWidget(mockClient, noLocationProvider)

        outcome = await widget.fetchWeatherByCity("Paris")

        assert outcome.reason == "Unexpected error: boom"
        assert widget.state.isLoading is False

    @pytest.mark.asyncio
    async def testMissingNameFallsBackToQuery(self, mockClient, noLocationProvider):
        result = makeWeatherResult("Paris")
        result["name"] = None
        mockClient.getWeatherByCity.return_value = result
        widget = WeatherWidget(mockClient, noLocationProvider)

        await widget.fetchWeatherByCity("Paris,FR")

        assert widget.state.selectedCityName == "Paris,FR"

    @pytest.mark.asyncio
    async def testSupersededLookupIsDiscarded(self, mockClient, noLocationProvider):
        """Slow response of older lookup must not overwrite newer result"""
        releaseLondon = asyncio.Event()

        async def fakeLookup(name):
            if name == "London":
                await releaseLondon.wait()
            return makeWeatherResult(name)

        mockClient.getWeatherByCity.side_effect = fakeLookup
        widget = WeatherWidget(mockClient, noLocationProvider)

        async with widget.mounted():
            widget.handleInputChange("London")
            londonTask = widget.handleSubmit()
            await asyncio.sleep(0)

            widget.handleInputChange("Paris")
            parisOutcome = await widget.handleSubmit()
            assert widget.state.selectedCityName == "Paris"
            assert widget.state.isLoading is False

            releaseLondon.set()
            londonOutcome = await londonTask
            state = widget.state.copy()

        assert parisOutcome.superseded is False
        assert londonOutcome.ok
        assert londonOutcome.superseded is True
        assert state.selectedCityName == "Paris"
        assert state.lastResult["name"] == "Paris"
        assert state.isLoading is False


class TestSuggestions:
    """Tests for autocomplete"""

    @pytest.mark.asyncio
    async def testShortInputMakesNoRequest(self, mockClient, noLocationProvider, parisSuggestions):
        mockClient.searchCities.return_value = parisSuggestions
        widget = WeatherWidget(mockClient, noLocationProvider)

        async with widget.mounted():
            widget.handleInputChange("Pa")
            await widget.settle()
            assert len(widget.state.suggestions) == 3

            widget.handleInputChange("P")
            await widget.settle()
            state = widget.state.copy()

        mockClient.searchCities.assert_awaited_once_with("Pa", limit=5)
        assert state.queryText == "P"
        assert state.suggestions == []

    @pytest.mark.asyncio
    async def testNoMatches(self, mockClient, noLocationProvider):
        widget = WeatherWidget(mockClient, noLocationProvider)

        async with widget.mounted():
            suggestions = await widget.handleInputChange("Lo")
            state = widget.state.copy()

        assert suggestions == []
        assert state.suggestions == []

    @pytest.mark.asyncio
    async def testSuggestionsAreLimited(self, mockClient, noLocationProvider):
        mockClient.searchCities.return_value = [makeSuggestion(f"Town{i}", "XX") for i in range(8)]
        widget = WeatherWidget(mockClient, noLocationProvider, suggestionLimit=5)

        suggestions = await widget.fetchCitySuggestions("Town")

        assert len(suggestions) == 5
        assert [s["name"] for s in widget.state.suggestions] == [f"Town{i}" for i in range(5)]

    @pytest.mark.asyncio
    async def testSuggestionClick(self, mockClient, noLocationProvider, parisSuggestions):
        """Choosing suggestion looks up "name,country" and clears the list"""
        mockClient.searchCities.return_value = parisSuggestions
        widget = WeatherWidget(mockClient, noLocationProvider)

        async with widget.mounted():
            widget.handleInputChange("Par")
            await widget.settle()

            task = widget.handleSuggestionClick(widget.state.suggestions[0])
            assert widget.state.suggestions == []
            assert widget.state.queryText == "Paris,FR"

            outcome = await task
            state = widget.state.copy()

        mockClient.getWeatherByCity.assert_awaited_once_with("Paris,FR")
        assert outcome.ok
        assert state.selectedCityName == "Paris"
        assert state.suggestions == []

    @pytest.mark.asyncio
    async def testSuggestionErrorKeepsList(self, mockClient, noLocationProvider, parisSuggestions):
        mockClient.searchCities.side_effect = [parisSuggestions, NetworkError("Network error: reset")]
        widget = WeatherWidget(mockClient, noLocationProvider)

        assert await widget.fetchCitySuggestions("Par") == parisSuggestions
        assert await widget.fetchCitySuggestions("Pari") is None
        assert widget.state.suggestions == parisSuggestions

    @pytest.mark.asyncio
    async def testSupersededSuggestionsAreDiscarded(self, mockClient, noLocationProvider):
        releaseFirst = asyncio.Event()

        async def fakeSearch(text, limit):
            if text == "Pa":
                await releaseFirst.wait()
                return [makeSuggestion("Pau", "FR")]
            return [makeSuggestion("Paris", "FR")]

        mockClient.searchCities.side_effect = fakeSearch
        widget = WeatherWidget(mockClient, noLocationProvider)

        async with widget.mounted():
            firstTask = widget.handleInputChange("Pa")
            await asyncio.sleep(0)
            await widget.handleInputChange("Par")

            releaseFirst.set()
            await firstTask
            state = widget.state.copy()

        assert [s["name"] for s in state.suggestions] == ["Paris"]

    @pytest.mark.asyncio
    async def testSubmitIgnoresPendingSuggestions(self, mockClient, noLocationProvider):
        """Suggestions arriving after submit must not reopen the list"""
        releaseSearch = asyncio.Event()

        async def fakeSearch(text, limit):
            await releaseSearch.wait()
            return [makeSuggestion("Paris", "FR")]

        mockClient.searchCities.side_effect = fakeSearch
        widget = WeatherWidget(mockClient, noLocationProvider)

        async with widget.mounted():
            widget.handleInputChange("Paris")
            await asyncio.sleep(0)
            widget.handleSubmit()

            releaseSearch.set()
            await widget.settle()
            state = widget.state.copy()

        assert state.suggestions == []
        assert state.selectedCityName == "Paris"
