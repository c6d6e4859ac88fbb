"""
Geolocation Library

Location providers answering "where is this device now?" for the weather
widget. Every provider returns None instead of raising when position is
unknown, so callers can silently stay without location.

Example:
    >>> from lib.geolocation import IpApiLocationProvider
    >>>
    >>> provider = IpApiLocationProvider(requestTimeout=5)
    >>> position = await provider.getCurrentPosition()
    >>> if position is not None:
    ...     print(position["lat"], position["lon"])
"""

from .interface import Coordinates, LocationProviderInterface
from .ip_api_provider import IpApiLocationProvider
from .null_provider import NullLocationProvider
from .static_provider import StaticLocationProvider

__all__ = [
    "Coordinates",
    "LocationProviderInterface",
    "NullLocationProvider",
    "StaticLocationProvider",
    "IpApiLocationProvider",
]
