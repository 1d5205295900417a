"""Domain exceptions.

Hey future me - every failure the Spotify access layer can surface is one of
these. The HTTP layer (api/exception_handlers.py) maps them to status codes,
so services just raise and never build responses themselves.
"""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # We store message as an attribute so handlers can read it without parsing
    # str(exception). Don't raise this directly - use a specific subclass.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationException(DomainException):
    """Raised when client input is unusable (blank playlist id, bad state).

    HTTP Status: 400
    """

    pass


class ConfigurationError(DomainException):
    """Application misconfiguration.

    Raised when required configuration is missing or invalid.
    """

    pass


class NotConfiguredError(ConfigurationError):
    """No refresh token is available, so no access token can be minted.

    Fails startup when OAuth is disabled, otherwise surfaces as HTTP 500
    until /oauth/login has been completed.
    """

    pass


class TokenRefreshException(DomainException):
    """Raised when the Accounts service refuses to mint a new access token.

    Hey future me - Spotify answers 400 with {"error": "invalid_grant"} when the
    refresh token was revoked. We keep that code and the HTTP status around so
    logs tell you whether to re-run /oauth/login or just wait for Spotify.
    """

    def __init__(
        self,
        message: str = "Failed to refresh Spotify access token.",
        error_code: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.http_status = http_status

    @property
    def requires_reauth(self) -> bool:
        """Check if error requires the host account to log in again."""
        return self.error_code == "invalid_grant" or self.http_status in (400, 401, 403)


class AuthExchangeException(DomainException):
    """Raised when an authorization code cannot be exchanged for tokens."""

    def __init__(
        self,
        message: str = "Failed to exchange authorization code for tokens.",
        error_code: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.http_status = http_status


class ExternalServiceError(DomainException):
    """Spotify returned a non-2xx status (other than a handled 429).

    HTTP Status: 500
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitExceededError(DomainException):
    """Spotify kept answering 429 after the one-shot retry.

    HTTP Status: 503
    """

    pass


class ServiceUnavailableError(DomainException):
    """No outbound permit could be obtained in time.

    HTTP Status: 503
    """

    pass


SPOTIFY_UNAVAILABLE_MESSAGE = (
    "Spotify API temporarily unavailable. Please try again shortly."
)

__all__ = [
    "AuthExchangeException",
    "ConfigurationError",
    "DomainException",
    "ExternalServiceError",
    "NotConfiguredError",
    "RateLimitExceededError",
    "SPOTIFY_UNAVAILABLE_MESSAGE",
    "ServiceUnavailableError",
    "TokenRefreshException",
    "ValidationException",
]
