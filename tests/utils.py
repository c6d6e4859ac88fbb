"""
Test utilities for tenki tests.

Builders for API payloads shared by fixtures and tests.
"""

from typing import Any, Dict

from lib.openweathermap import Suggestion, WeatherResult, parseWeatherResult


def makeWeatherResult(name: str = "Paris", **overrides: Any) -> WeatherResult:
    """
    Build parsed weather result like the API returns it.

    Args:
        name: Location name
        **overrides: "main" fields to replace (temp, humidity)

    Returns:
        WeatherResult: Parsed result
    """
    main: Dict[str, Any] = {"temp": 15, "feels_like": 14.3, "humidity": 70}
    main.update(overrides)
    return parseWeatherResult(
        {
            "coord": {"lat": 48.85, "lon": 2.35},
            "weather": [{"main": "Clouds", "description": "broken clouds"}],
            "main": main,
            "wind": {"speed": 3.1},
            "sys": {"country": "FR"},
            "name": name,
        }
    )


def makeSuggestion(name: str, country: str, state: str | None = None) -> Suggestion:
    return {"name": name, "state": state, "country": country, "lat": None, "lon": None}
