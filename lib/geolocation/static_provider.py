"""
Static location provider

Returns fixed coordinates taken from configuration.
"""

from typing import Optional

from .interface import Coordinates, LocationProviderInterface


class StaticLocationProvider(LocationProviderInterface):
    """Location provider with preconfigured position"""

    def __init__(self, lat: float, lon: float):
        """
        Initialize static provider

        Args:
            lat: Latitude in range [-90, 90]
            lon: Longitude in range [-180, 180]

        Raises:
            ValueError: If coordinates are out of range
        """
        if not -90 <= lat <= 90:
            raise ValueError(f"Latitude out of range: {lat}")
        if not -180 <= lon <= 180:
            raise ValueError(f"Longitude out of range: {lon}")
        self.lat = float(lat)
        self.lon = float(lon)

    async def getCurrentPosition(self) -> Optional[Coordinates]:
        return {"lat": self.lat, "lon": self.lon}
