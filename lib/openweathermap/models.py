"""
Data models for OpenWeatherMap API client

This module defines TypedDict classes for parsed API responses together with
the functions converting raw JSON into them. The provider omits fields freely,
so every field is checked for presence and type before use and stored as None
when missing.
"""

from typing import Any, Dict, List, Optional, TypedDict

from .exceptions import MalformedResponseError

# API Response Models


class WeatherResult(TypedDict):
    """Current weather for one location"""

    # https://openweathermap.org/current#fields_json

    name: Optional[str]  # Location name
    country: Optional[str]  # Country code (e.g., "FR")
    lat: Optional[float]  # Latitude
    lon: Optional[float]  # Longitude

    temp: Optional[float]  # Temperature (Celsius)
    feels_like: Optional[float]  # Feels like temperature (Celsius)
    humidity: Optional[int]  # Humidity percentage

    wind_speed: Optional[float]  # Wind speed (m/s)

    # https://openweathermap.org/weather-conditions
    weather_main: Optional[str]  # Weather group (Rain, Snow, Clouds, etc.)
    weather_description: Optional[str]  # Weather description

    raw: Dict[str, Any]  # Payload as returned by the API


class Suggestion(TypedDict):
    """City candidate from geocoding API"""

    name: str  # City name
    state: Optional[str]  # State/region name (if available)
    country: str  # Country code (e.g., "FR")
    lat: Optional[float]  # Latitude
    lon: Optional[float]  # Longitude


def _getMapping(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _getNumber(data: Dict[str, Any], key: str) -> Optional[float]:
    value = data.get(key)
    # bool is an int subclass, but never a valid measurement
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return None


def _getString(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if isinstance(value, str) and value:
        return value
    return None


def parseWeatherResult(data: Any) -> WeatherResult:
    """
    Convert current weather API response to WeatherResult

    Args:
        data: Decoded JSON body of /data/2.5/weather

    Returns:
        WeatherResult with None for every field absent from the payload

    Raises:
        MalformedResponseError: If payload is not a JSON object
    """
    if not isinstance(data, dict):
        raise MalformedResponseError(f"Expected JSON object, got {type(data).__name__}")

    mainData = _getMapping(data, "main")
    windData = _getMapping(data, "wind")
    sysData = _getMapping(data, "sys")
    coordData = _getMapping(data, "coord")

    # Only the first entry of "weather" is the primary condition
    weatherInfo: Dict[str, Any] = {}
    weatherList = data.get("weather")
    if isinstance(weatherList, list) and weatherList and isinstance(weatherList[0], dict):
        weatherInfo = weatherList[0]

    humidity = _getNumber(mainData, "humidity")

    return {
        "name": _getString(data, "name"),
        "country": _getString(sysData, "country"),
        "lat": _getNumber(coordData, "lat"),
        "lon": _getNumber(coordData, "lon"),
        "temp": _getNumber(mainData, "temp"),
        "feels_like": _getNumber(mainData, "feels_like"),
        "humidity": int(humidity) if humidity is not None else None,
        "wind_speed": _getNumber(windData, "speed"),
        "weather_main": _getString(weatherInfo, "main"),
        "weather_description": _getString(weatherInfo, "description"),
        "raw": data,
    }


def parseSuggestions(data: Any, limit: int) -> List[Suggestion]:
    """
    Convert geocoding API response to list of suggestions

    Entries without a name are skipped, API order is preserved.

    Args:
        data: Decoded JSON body of /geo/1.0/direct
        limit: Max number of suggestions to return

    Returns:
        Up to `limit` suggestions

    Raises:
        MalformedResponseError: If payload is not a JSON array
    """
    if not isinstance(data, list):
        raise MalformedResponseError(f"Expected JSON array, got {type(data).__name__}")

    ret: List[Suggestion] = []
    for item in data:
        if len(ret) >= limit:
            break
        if not isinstance(item, dict):
            continue
        name = _getString(item, "name")
        if name is None:
            continue
        ret.append(
            {
                "name": name,
                "state": _getString(item, "state"),
                "country": _getString(item, "country") or "",
                "lat": _getNumber(item, "lat"),
                "lon": _getNumber(item, "lon"),
            }
        )
    return ret


def suggestionLookupKey(suggestion: Suggestion) -> str:
    """Build "name,country" query accepted by weather API (e.g. "Paris,FR")."""
    if suggestion["country"]:
        return f"{suggestion['name']},{suggestion['country']}"
    return suggestion["name"]


def suggestionLabel(suggestion: Suggestion) -> str:
    """Human-readable label: "name, state, country" (state omitted when absent)"""
    parts = [suggestion["name"]]
    if suggestion.get("state"):
        parts.append(str(suggestion["state"]))
    if suggestion["country"]:
        parts.append(suggestion["country"])
    return ", ".join(parts)
