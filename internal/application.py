"""
Tenki application: builds widget and its dependencies from configuration.
"""

import asyncio
import logging
from typing import Any, Dict

from internal.config.manager import ConfigManager
from internal.widget import LookupOutcome, TerminalFrontend, WeatherWidget, renderWidget
from lib.geolocation import (
    IpApiLocationProvider,
    LocationProviderInterface,
    NullLocationProvider,
    StaticLocationProvider,
)
from lib.openweathermap import OpenWeatherMapClient

logger = logging.getLogger(__name__)


def createLocationProvider(config: Dict[str, Any]) -> LocationProviderInterface:
    """
    Create location provider from [geolocation] config section.

    Location access is granted only with `enabled = true`, otherwise
    NullLocationProvider is used.

    Raises:
        ValueError: If provider type is unknown or static position is missing
    """
    if not config.get("enabled", False):
        logger.info("Geolocation is not enabled")
        return NullLocationProvider()

    providerType = config.get("provider", "ip-api")
    match providerType:
        case "ip-api":
            return IpApiLocationProvider(requestTimeout=config.get("request-timeout", 10))
        case "static":
            if "lat" not in config or "lon" not in config:
                raise ValueError("Static geolocation provider requires lat and lon")
            return StaticLocationProvider(float(config["lat"]), float(config["lon"]))
        case "none":
            return NullLocationProvider()
        case _:
            raise ValueError(f"Unknown geolocation provider: {providerType}")


class TenkiApplication:
    """Wires configuration, API client, location provider and widget together."""

    def __init__(self, configManager: ConfigManager):
        self.configManager = configManager

        openWeatherMapConfig = self.configManager.getOpenWeatherMapConfig()
        self.client = OpenWeatherMapClient(
            apiKey=self.configManager.getApiKey(),
            requestTimeout=openWeatherMapConfig.get("request-timeout", 10),
            units=openWeatherMapConfig.get("units", "metric"),
        )

        self.locationProvider = createLocationProvider(self.configManager.getGeolocationConfig())

        widgetConfig = self.configManager.getWidgetConfig()
        self.widget = WeatherWidget(
            client=self.client,
            locationProvider=self.locationProvider,
            minQueryLength=int(widgetConfig.get("min-query-length", 2)),
            suggestionLimit=int(widgetConfig.get("suggestion-limit", 5)),
        )

    def run(self) -> None:
        """Run interactive terminal widget until user quits."""
        asyncio.run(TerminalFrontend(self.widget).run())

    async def lookupOnce(self, city: str) -> LookupOutcome:
        """Look up weather for a city without mounting interactive widget."""
        self.widget.state.queryText = city
        return await self.widget.fetchWeatherByCity(city)

    def runOnce(self, city: str) -> bool:
        """
        Look up weather for a city, print rendered widget.

        Returns:
            True if lookup succeeded
        """
        outcome = asyncio.run(self.lookupOnce(city))
        print(renderWidget(self.widget.state))
        return outcome.ok
