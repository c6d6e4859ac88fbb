"""
OpenWeatherMap Async Client Library

This module provides an async client for the OpenWeatherMap current weather
and geocoding APIs. Responses are parsed into typed records tolerant to missing
fields, failures are raised as OpenWeatherMapError subclasses.

Example usage:
    from lib.openweathermap import OpenWeatherMapClient, OpenWeatherMapError

    client = OpenWeatherMapClient(apiKey="your_api_key")

    try:
        result = await client.getWeatherByCity("Paris,FR")
        print(f"Temperature: {result['temp']}°C")
    except OpenWeatherMapError as e:
        print(f"Lookup failed: {e}")
"""

from .client import OpenWeatherMapClient
from .exceptions import (
    ApiResponseError,
    InvalidApiKeyError,
    LocationNotFoundError,
    MalformedResponseError,
    NetworkError,
    OpenWeatherMapError,
    RateLimitError,
    RequestTimeoutError,
)
from .models import (
    Suggestion,
    WeatherResult,
    parseSuggestions,
    parseWeatherResult,
    suggestionLabel,
    suggestionLookupKey,
)

__all__ = [
    "OpenWeatherMapClient",
    "WeatherResult",
    "Suggestion",
    "parseWeatherResult",
    "parseSuggestions",
    "suggestionLabel",
    "suggestionLookupKey",
    "OpenWeatherMapError",
    "InvalidApiKeyError",
    "LocationNotFoundError",
    "RateLimitError",
    "ApiResponseError",
    "NetworkError",
    "RequestTimeoutError",
    "MalformedResponseError",
]
