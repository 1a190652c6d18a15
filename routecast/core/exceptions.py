"""Custom exception classes."""

from fastapi import status


class RouteCastException(Exception):
    """Base exception for RouteCast application."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ExternalServiceError(RouteCastException):
    """External service (Mapbox, OpenWeather) error."""

    def __init__(self, message: str = "External service unavailable"):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)


class ProviderNotConfiguredError(ExternalServiceError):
    """A provider credential required for this operation is missing."""

    def __init__(self, message: str = "Provider credential not configured"):
        super().__init__(message)


class WeatherProviderError(ExternalServiceError):
    """OpenWeather request failed or returned an unusable payload.

    Never reaches API callers: the weather service falls back to synthetic
    data when it sees this.
    """

    def __init__(self, message: str = "Weather provider unavailable"):
        super().__init__(message)
