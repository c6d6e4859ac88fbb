"""
OpenWeatherMap API Exceptions

This module contains exception classes raised by OpenWeatherMapClient for
every failure mode of a single request: HTTP errors, network errors, timeouts
and responses that can not be parsed.
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class OpenWeatherMapError(Exception):
    """Base exception class for all OpenWeatherMap client errors.

    Attributes:
        message: Human-readable error message
        statusCode: HTTP status code (if the provider answered)
        response: Parsed error body (if available)
    """

    def __init__(
        self,
        message: str,
        statusCode: Optional[int] = None,
        response: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.statusCode = statusCode
        self.response = response
        logger.debug(f"OpenWeatherMapError: {message} (status: {statusCode})")

    def __str__(self) -> str:
        if self.statusCode:
            return f"{self.message} (status: {self.statusCode})"
        return self.message


class InvalidApiKeyError(OpenWeatherMapError):
    """Raised on HTTP 401: the API key is missing, wrong or not activated yet."""

    def __init__(
        self,
        message: str = "Invalid API key",
        statusCode: Optional[int] = 401,
        response: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, statusCode, response)


class LocationNotFoundError(OpenWeatherMapError):
    """Raised on HTTP 404, usually `{"cod": "404", "message": "city not found"}`."""

    def __init__(
        self,
        message: str = "Location not found",
        statusCode: Optional[int] = 404,
        response: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, statusCode, response)


class RateLimitError(OpenWeatherMapError):
    """Raised on HTTP 429: the account exceeded its call quota."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        statusCode: Optional[int] = 429,
        response: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, statusCode, response)


class ApiResponseError(OpenWeatherMapError):
    """Raised for any other non-200 answer from the provider."""


class NetworkError(OpenWeatherMapError):
    """Raised when the request could not be sent or the connection broke."""


class RequestTimeoutError(NetworkError):
    """Raised when the request did not complete within the configured timeout."""

    def __init__(self, message: str = "Request timeout") -> None:
        super().__init__(message)


class MalformedResponseError(OpenWeatherMapError):
    """Raised when the body is not valid JSON or has an unexpected shape."""


def parseApiError(statusCode: int, responseData: Optional[Dict[str, Any]] = None) -> OpenWeatherMapError:
    """
    Build exception for non-200 API response

    OpenWeatherMap error bodies look like `{"cod": "404", "message": "city not found"}`.
    The provider message is used when present, otherwise a generic one.

    Args:
        statusCode: HTTP status code
        responseData: Parsed JSON error body, if any

    Returns:
        Exception instance matching the status code (not raised)

    Example:
        >>> error = parseApiError(404, {"cod": "404", "message": "city not found"})
        >>> isinstance(error, LocationNotFoundError)
        True
    """
    providerMessage: Optional[str] = None
    if isinstance(responseData, dict) and isinstance(responseData.get("message"), str):
        providerMessage = responseData["message"]

    match statusCode:
        case 401:
            return InvalidApiKeyError(providerMessage or "Invalid API key", response=responseData)
        case 404:
            return LocationNotFoundError(providerMessage or "Location not found", response=responseData)
        case 429:
            return RateLimitError(providerMessage or "Rate limit exceeded", response=responseData)
        case _:
            return ApiResponseError(
                providerMessage or "API request failed", statusCode=statusCode, response=responseData
            )
