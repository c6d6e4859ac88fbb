"""
Pytest configuration and common fixtures for tenki tests.

Provides mocked OpenWeatherMap client, sample API payloads and location
providers. All fixtures follow camelCase naming convention.
"""

from typing import List
from unittest.mock import AsyncMock

import pytest

from lib.geolocation import NullLocationProvider, StaticLocationProvider
from lib.openweathermap import OpenWeatherMapClient, Suggestion, WeatherResult
from tests.utils import makeSuggestion, makeWeatherResult

# ============================================================================
# Sample Data
# ============================================================================


@pytest.fixture
def parisWeather() -> WeatherResult:
    """Parsed weather for Paris: 15°C, Clouds, 70%, 3.1 m/s"""
    return makeWeatherResult("Paris")


@pytest.fixture
def parisSuggestions() -> List[Suggestion]:
    return [
        makeSuggestion("Paris", "FR", "Ile-de-France"),
        makeSuggestion("Paris", "US", "Texas"),
        makeSuggestion("Paris", "CA", "Ontario"),
    ]


# ============================================================================
# Client And Provider Fixtures
# ============================================================================


@pytest.fixture
def mockClient(parisWeather) -> AsyncMock:
    """
    Create mocked OpenWeatherMapClient.

    Every lookup returns Paris weather, city search returns nothing.
    Override return_value / side_effect of its methods per test.

    Returns:
        AsyncMock: Mocked client instance

    Example:
        def testSomething(mockClient):
            mockClient.getWeatherByCity.side_effect = LocationNotFoundError("city not found")
    """
    mock = AsyncMock(spec=OpenWeatherMapClient)
    mock.getWeatherByCoords.return_value = parisWeather
    mock.getWeatherByCity.return_value = parisWeather
    mock.searchCities.return_value = []
    return mock


@pytest.fixture
def parisLocationProvider() -> StaticLocationProvider:
    """Location provider reporting central Paris"""
    return StaticLocationProvider(48.85, 2.35)


@pytest.fixture
def noLocationProvider() -> NullLocationProvider:
    """Location provider for denied or unavailable location"""
    return NullLocationProvider()
