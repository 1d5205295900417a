"""Custom exception handlers for FastAPI application.

This module registers global exception handlers that convert domain exceptions
into HTTP responses. Services raise, routes don't catch, this maps:

- ValidationException        -> 400 plain text
- RateLimitExceededError     -> 503 plain text (shown to the user as-is)
- ServiceUnavailableError    -> 503 plain text
- NotConfiguredError, TokenRefreshException, AuthExchangeException,
  ExternalServiceError       -> 500 {"detail": ...}
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from muzikant.domain.exceptions import (
    AuthExchangeException,
    ConfigurationError,
    ExternalServiceError,
    RateLimitExceededError,
    ServiceUnavailableError,
    TokenRefreshException,
    ValidationException,
)

logger = logging.getLogger(__name__)


# Hey future me, register these during app setup BEFORE any requests arrive. Without
# them a RateLimitExceededError would leak as a generic 500 with a stack trace, and the
# front-end would show "Internal Server Error" instead of "try again shortly".
def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for the domain exception taxonomy.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(ValidationException)
    async def validation_exception_handler(
        request: Request, exc: ValidationException
    ) -> PlainTextResponse:
        """Handle unusable client input with 400 Bad Request."""
        logger.warning(
            "Invalid input at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return PlainTextResponse(exc.message, status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(RateLimitExceededError)
    async def rate_limit_exception_handler(
        request: Request, exc: RateLimitExceededError
    ) -> PlainTextResponse:
        """Handle Spotify rate limiting with 503 Service Unavailable."""
        logger.warning(
            "Spotify rate limit surfaced at %s",
            request.url.path,
            extra={"path": request.url.path},
        )
        return PlainTextResponse(
            exc.message, status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    @app.exception_handler(ServiceUnavailableError)
    async def service_unavailable_exception_handler(
        request: Request, exc: ServiceUnavailableError
    ) -> PlainTextResponse:
        """Handle permit starvation with 503 Service Unavailable."""
        logger.warning(
            "Spotify permit unavailable at %s",
            request.url.path,
            extra={"path": request.url.path},
        )
        return PlainTextResponse(
            exc.message, status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_exception_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        """Handle missing credentials with 500 Internal Server Error."""
        logger.error(
            "Configuration error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": exc.message},
        )

    @app.exception_handler(TokenRefreshException)
    async def token_refresh_exception_handler(
        request: Request, exc: TokenRefreshException
    ) -> JSONResponse:
        """Handle refused token refreshes with 500 Internal Server Error."""
        logger.error(
            "Spotify token refresh failed at %s: %s",
            request.url.path,
            exc.message,
            extra={
                "path": request.url.path,
                "error_code": exc.error_code,
                "http_status": exc.http_status,
                "requires_reauth": exc.requires_reauth,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": exc.message},
        )

    @app.exception_handler(AuthExchangeException)
    async def auth_exchange_exception_handler(
        request: Request, exc: AuthExchangeException
    ) -> JSONResponse:
        """Handle failed code exchanges with 500 Internal Server Error."""
        logger.error(
            "Spotify code exchange failed at %s: %s",
            request.url.path,
            exc.message,
            extra={
                "path": request.url.path,
                "error_code": exc.error_code,
                "http_status": exc.http_status,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": exc.message},
        )

    @app.exception_handler(ExternalServiceError)
    async def external_service_exception_handler(
        request: Request, exc: ExternalServiceError
    ) -> JSONResponse:
        """Handle other Spotify failures with 500 Internal Server Error."""
        logger.error(
            "Spotify upstream error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "upstream_status": exc.status_code},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": exc.message},
        )
