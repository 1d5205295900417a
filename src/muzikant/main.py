"""FastAPI application factory and uvicorn entry point."""

import uvicorn
from fastapi import FastAPI

from muzikant import __version__
from muzikant.api import api_router
from muzikant.api.cors import PathScopedCORSMiddleware
from muzikant.api.exception_handlers import register_exception_handlers
from muzikant.api.routers import health, oauth
from muzikant.config import Settings, get_settings
from muzikant.infrastructure.lifecycle import lifespan
from muzikant.infrastructure.observability import RequestLoggingMiddleware


# Hey future me, settings are resolved HERE (not at import time) so `import muzikant.main`
# works without SPOTIFY_CLIENT_ID in the environment. Tests pass their own Settings; uvicorn
# calls this with no arguments through factory=True.
def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Settings to use; read from env/.env when None

    Returns:
        Configured application. Spotify services are attached on startup.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Muzikant Backend API",
        description="Host-only backend for fetching Spotify playlist tracks.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        PathScopedCORSMiddleware,
        path_prefix="/api",
        allow_origins=[settings.api.frontend_origin],
        allow_methods=["GET", "POST"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api")
    app.include_router(health.router, prefix="/health", tags=["Health"])
    # OAuth routes do not exist at all unless explicitly enabled: 404, not 403.
    if settings.spotify.oauth_enabled:
        app.include_router(oauth.router, prefix="/oauth", tags=["OAuth"])

    return app


def run() -> None:
    """Console script entry point."""
    settings = get_settings()
    uvicorn.run(
        "muzikant.main:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
