"""Error taxonomy for the weather dashboard API.

Every error carries the HTTP status it maps to and a short category label.
The exception handler in ``app.main`` renders them as ``{error, message}``.
"""

from typing import Optional


class WeatherAPIError(Exception):
    """Base class for errors that are safe to show to API callers."""

    status_code: int = 500
    error: str = "Internal Server Error"

    def __init__(self, message: str, status_code: Optional[int] = None, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error is not None:
            self.error = error

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class ValidationError(WeatherAPIError):
    """Malformed or missing request input."""

    status_code = 400
    error = "Validation Error"


class NotFoundError(WeatherAPIError):
    """The upstream provider could not resolve the named city."""

    status_code = 404
    error = "City Not Found"

    def __init__(self, message: str = "The specified city could not be found"):
        super().__init__(message)


class ConfigurationError(WeatherAPIError):
    """The upstream credential is not provisioned."""

    status_code = 500
    error = "Configuration Error"

    def __init__(self, message: str = "Weather API key not configured"):
        super().__init__(message)


class UpstreamError(WeatherAPIError):
    """Non-404 failure talking to the upstream provider."""

    status_code = 500
    error = "Weather Service Error"


class QuotaExceeded(WeatherAPIError):
    """A caller used up its rate-limit window."""

    status_code = 429
    error = "Too Many Requests"

    def __init__(self, retry_after: float, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message)
        self.retry_after = max(0.0, retry_after)
