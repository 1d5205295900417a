"""Application lifecycle management for startup and shutdown tasks.

This module holds the FastAPI lifespan context manager that builds the Spotify
object graph once per process and tears it down on shutdown.

Startup order:
1. Logging
2. Shared httpx.AsyncClient
3. Accounts client -> token service -> rate governor -> Web API client
4. Playlist aggregator and OAuth service
5. Startup validation (may abort the process)
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from muzikant.application.services import (
    PlaylistService,
    SpotifyAuthService,
    SpotifyStartupValidator,
    SpotifyTokenService,
)
from muzikant.config import Settings, get_settings
from muzikant.infrastructure.integrations import SpotifyAccountsClient, SpotifyClient
from muzikant.infrastructure.observability import configure_logging
from muzikant.infrastructure.rate_limiter import SpotifyRateGovernor

logger = logging.getLogger(__name__)


def _settings_for(app: FastAPI) -> Settings:
    settings = getattr(app.state, "settings", None)
    if settings is None:
        settings = get_settings()
        app.state.settings = settings
    return settings


# Listen future me, everything before `yield` runs at STARTUP, everything after runs at
# SHUTDOWN. One httpx client is shared by the accounts and Web API clients so connection
# pooling covers both hosts. The token service and governor are process singletons: the
# refresh lock and the permit pool only work if every request sees the SAME instance.
# If the startup validator raises, the exception propagates and uvicorn refuses to serve.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = _settings_for(app)

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    spotify_settings = settings.spotify
    http_client = httpx.AsyncClient(timeout=spotify_settings.request_timeout_seconds)
    try:
        accounts_client = SpotifyAccountsClient(spotify_settings, http_client=http_client)
        token_service = SpotifyTokenService(
            accounts_client, refresh_token=spotify_settings.refresh_token
        )
        governor = SpotifyRateGovernor(
            max_concurrent_calls=spotify_settings.max_concurrent_calls,
            permit_timeout=spotify_settings.permit_timeout_seconds,
        )
        spotify_client = SpotifyClient(
            spotify_settings,
            token_provider=token_service,
            governor=governor,
            http_client=http_client,
        )

        app.state.http_client = http_client
        app.state.token_service = token_service
        app.state.rate_governor = governor
        app.state.spotify_client = spotify_client
        app.state.playlist_service = PlaylistService(spotify_client)
        app.state.auth_service = SpotifyAuthService(accounts_client, token_service)

        await SpotifyStartupValidator(spotify_settings, token_service).run()
        logger.info(
            "Spotify client ready (max_concurrent_calls=%d)",
            governor.max_concurrent_calls,
        )

        yield

    except Exception as e:
        logger.exception("Error during application startup: %s", e)
        raise
    finally:
        logger.info("Shutting down application")
        try:
            await http_client.aclose()
            logger.info("HTTP client closed")
        except Exception as e:
            logger.exception("Error closing HTTP client: %s", e)
