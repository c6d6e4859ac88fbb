"""
Abstract interface for geolocation providers

This module defines the abstract interface that all location providers
must follow. Similar to the pattern used in lib/openweathermap and lib/cache.
"""

from abc import ABC, abstractmethod
from typing import Optional, TypedDict


class Coordinates(TypedDict):
    """Geographic position"""

    lat: float  # Latitude
    lon: float  # Longitude


class LocationProviderInterface(ABC):
    """Abstract interface for acquiring current position of the device"""

    @abstractmethod
    async def getCurrentPosition(self) -> Optional[Coordinates]:
        """
        Get current position once

        Implementations must not raise: unavailable capability, denied access
        and lookup failures are all reported as None.

        Returns:
            Coordinates if position is known, None otherwise
        """
        pass
