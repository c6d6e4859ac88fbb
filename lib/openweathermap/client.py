"""
OpenWeatherMap Async Client

This module provides the main OpenWeatherMapClient class for interacting with
the OpenWeatherMap current weather and geocoding APIs.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .exceptions import (
    MalformedResponseError,
    NetworkError,
    OpenWeatherMapError,
    RequestTimeoutError,
    parseApiError,
)
from .models import Suggestion, WeatherResult, parseSuggestions, parseWeatherResult

logger = logging.getLogger(__name__)


class OpenWeatherMapClient:
    """
    Async client for OpenWeatherMap API

    Creates a new HTTP session for each request to support proper concurrent requests.
    Every method performs exactly one request and raises OpenWeatherMapError
    subclass on any failure, there are no retries.

    Example usage:
        client = OpenWeatherMapClient(apiKey="your_key", requestTimeout=10)

        # Current weather by coordinates
        weather = await client.getWeatherByCoords(48.85, 2.35)

        # Current weather by free-text city query
        weather = await client.getWeatherByCity("Paris,FR")

        # City autocomplete
        suggestions = await client.searchCities("Par", limit=5)
    """

    WEATHER_API = "https://api.openweathermap.org/data/2.5/weather"
    GEOCODING_API = "https://api.openweathermap.org/geo/1.0/direct"

    def __init__(
        self,
        apiKey: str,
        requestTimeout: Optional[float] = 10,
        units: str = "metric",
    ):
        """
        Initialize OpenWeatherMap client

        Args:
            apiKey: OpenWeatherMap API key (empty key is sent as is, provider answers 401)
            requestTimeout: HTTP request timeout (seconds), None disables it
            units: Unit system for weather requests
        """
        self.apiKey = apiKey
        self.requestTimeout = requestTimeout
        self.units = units
        # No persistent session - create new session for each request

    async def getWeatherByCoords(self, lat: float, lon: float) -> WeatherResult:
        """
        Get current weather by coordinates

        Uses: https://api.openweathermap.org/data/2.5/weather

        Args:
            lat: Latitude
            lon: Longitude

        Returns:
            Parsed current weather

        Raises:
            OpenWeatherMapError: On any request or parsing failure
        """
        params = {
            "lat": lat,
            "lon": lon,
            "appid": self.apiKey,
            "units": self.units,
        }
        responseData = await self._makeRequest(self.WEATHER_API, params)
        return parseWeatherResult(responseData)

    async def getWeatherByCity(self, city: str) -> WeatherResult:
        """
        Get current weather by free-text city query

        Query may be qualified with country code ("Paris,FR"), ambiguous or
        unknown names are reported by the provider as 404.

        Args:
            city: City query

        Returns:
            Parsed current weather

        Raises:
            LocationNotFoundError: If provider does not know the city
            OpenWeatherMapError: On any other request or parsing failure
        """
        params = {
            "q": city,
            "appid": self.apiKey,
            "units": self.units,
        }
        responseData = await self._makeRequest(self.WEATHER_API, params)
        return parseWeatherResult(responseData)

    async def searchCities(self, query: str, limit: int = 5) -> List[Suggestion]:
        """
        Search cities by name prefix

        Uses: https://api.openweathermap.org/geo/1.0/direct

        Args:
            query: Free-text prefix
            limit: Max results

        Returns:
            Up to `limit` suggestions in API order (empty list if nothing matched)

        Raises:
            OpenWeatherMapError: On any request or parsing failure
        """
        params = {"q": query, "limit": limit, "appid": self.apiKey}
        responseData = await self._makeRequest(self.GEOCODING_API, params)
        return parseSuggestions(responseData, limit)

    async def _makeRequest(self, url: str, params: Dict[str, Any]) -> Any:
        """
        Make HTTP request to OpenWeatherMap API

        Creates a new session for each request to support proper concurrent requests.

        Args:
            url: API endpoint URL
            params: Query parameters (including appid)

        Returns:
            Parsed JSON response

        Raises:
            InvalidApiKeyError: 401
            LocationNotFoundError: 404
            RateLimitError: 429
            ApiResponseError: Other non-200 status
            RequestTimeoutError: Request timeout
            NetworkError: Connection error
            MalformedResponseError: Body is not valid JSON
        """
        logger.debug(f"Making request to {url} with params: {self._redact(params)}")
        try:
            # Create new session for each request
            async with httpx.AsyncClient(timeout=self.requestTimeout) as session:
                response = await session.get(url, params=params)

                if response.status_code == 200:
                    data = response.json()
                    logger.debug(f"API request successful: {response.status_code}")
                    logger.debug(f"API response: {data}")
                    return data

                try:
                    errorData = response.json()
                except ValueError:
                    errorData = None
                raise parseApiError(response.status_code, errorData)

        except OpenWeatherMapError:
            raise
        except httpx.TimeoutException as e:
            raise RequestTimeoutError() from e
        except httpx.RequestError as e:
            raise NetworkError(f"Network error: {e}") from e
        except ValueError as e:
            raise MalformedResponseError(f"Failed to parse JSON response: {e}") from e

    @staticmethod
    def _redact(params: Dict[str, Any]) -> Dict[str, Any]:
        return {k: ("***" if k == "appid" else v) for k, v in params.items()}
