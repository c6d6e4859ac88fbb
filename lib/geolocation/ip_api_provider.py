"""
IP-based location provider

Estimates position of the host from its public IP address using ip-api.com
(free, no API key, HTTP only on the free tier).
"""

import logging
from typing import Optional

import httpx

from .interface import Coordinates, LocationProviderInterface

logger = logging.getLogger(__name__)


class IpApiLocationProvider(LocationProviderInterface):
    """
    Location provider backed by ip-api.com

    Position is approximate (city level). Any failure is logged and reported
    as unavailable position.
    """

    API_URL = "http://ip-api.com/json/"

    def __init__(self, requestTimeout: Optional[float] = 10):
        """
        Initialize provider

        Args:
            requestTimeout: HTTP request timeout (seconds)
        """
        self.requestTimeout = requestTimeout

    async def getCurrentPosition(self) -> Optional[Coordinates]:
        """
        Ask ip-api.com for position of current public IP

        Returns:
            Coordinates or None if lookup failed
        """
        params = {"fields": "status,message,lat,lon"}
        try:
            async with httpx.AsyncClient(timeout=self.requestTimeout) as session:
                response = await session.get(self.API_URL, params=params)
                if response.status_code != 200:
                    logger.warning(f"IP geolocation failed: HTTP {response.status_code}")
                    return None
                data = response.json()
        except httpx.TimeoutException:
            logger.warning("IP geolocation request timeout")
            return None
        except httpx.RequestError as e:
            logger.warning(f"IP geolocation network error: {e}")
            return None
        except ValueError as e:
            logger.warning(f"Failed to parse IP geolocation response: {e}")
            return None

        if not isinstance(data, dict) or data.get("status") != "success":
            message = data.get("message") if isinstance(data, dict) else None
            logger.warning(f"IP geolocation unsuccessful: {message or data}")
            return None

        lat = data.get("lat")
        lon = data.get("lon")
        if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
            logger.warning(f"IP geolocation returned no coordinates: {data}")
            return None

        logger.debug(f"IP geolocation: {lat}, {lon}")
        return {"lat": float(lat), "lon": float(lon)}
