"""
Text rendering of the weather widget.

renderWidget() is a pure function of UIState, the terminal front end prints
its output on every state change.
"""

from typing import Any, List, Optional

from lib.openweathermap import WeatherResult, suggestionLabel

from .models import LookupStatus, UIState

TITLE = "天気アプリ (Weather App)"
SEARCH_PLACEHOLDER = "都市を検索 / Search city"
SEARCH_BUTTON = "検索"
LOADING_TEXT = "読み込み中... / Loading..."
FALLBACK_PROMPT = "都市を検索してください 🌸 / Please search a city 🌸"
NOT_AVAILABLE = "n/a"


def _formatValue(value: Any) -> str:
    # Provider sends whole numbers as 15.0
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _valueOrNA(value: Optional[Any], unit: str = "") -> str:
    return NOT_AVAILABLE if value is None else f"{_formatValue(value)}{unit}"


def renderWeather(cityName: str, result: WeatherResult) -> List[str]:
    """Render weather card lines for the result."""
    return [
        cityName or _valueOrNA(result["name"]),
        f"🌡 Temp: {_valueOrNA(result['temp'], '°C')}",
        f"☁️ Condition: {_valueOrNA(result['weather_main'])}",
        f"💧 Humidity: {_valueOrNA(result['humidity'], '%')}",
        f"🌬 Wind: {_valueOrNA(result['wind_speed'], ' m/s')}",
    ]


def renderWidget(state: UIState) -> str:
    """
    Render whole widget as text.

    Layout: title, search field, numbered suggestions (if any), then one of
    loading text, weather card for lastResult, or fallback prompt. Failed
    lookup adds its reason below.

    Args:
        state: Widget state

    Returns:
        Multiline string
    """
    lines: List[str] = [TITLE, ""]
    query = state.queryText if state.queryText else SEARCH_PLACEHOLDER
    lines.append(f"> {query}  [{SEARCH_BUTTON}]")

    for index, suggestion in enumerate(state.suggestions, start=1):
        lines.append(f"  {index}. {suggestionLabel(suggestion)}")
    lines.append("")

    if state.isLoading:
        lines.append(LOADING_TEXT)
    elif state.lastResult is not None:
        lines.extend(renderWeather(state.selectedCityName, state.lastResult))
    else:
        lines.append(FALLBACK_PROMPT)

    if not state.isLoading and state.lookupStatus == LookupStatus.ERROR:
        lines.append(f"(!) {state.errorReason or 'Lookup failed'}")

    return "\n".join(lines)
