"""
Null location provider

Implements LocationProviderInterface for hosts without geolocation capability
or when location access is not granted.
"""

from typing import Optional

from .interface import Coordinates, LocationProviderInterface


class NullLocationProvider(LocationProviderInterface):
    """Location provider that never knows the position"""

    async def getCurrentPosition(self) -> Optional[Coordinates]:
        """
        Always return None (position unavailable)

        Returns:
            None
        """
        return None
