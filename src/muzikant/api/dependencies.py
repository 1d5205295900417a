"""Dependency injection for API endpoints."""

from typing import cast

from fastapi import HTTPException, Request

from muzikant.application.services.playlist_service import PlaylistService
from muzikant.application.services.spotify_auth_service import SpotifyAuthService


# Hey future me, the services are built ONCE in the lifespan (infrastructure/lifecycle.py)
# and parked on app.state. If an attribute is missing, startup never finished - answer 503
# instead of an AttributeError 500.
def get_playlist_service(request: Request) -> PlaylistService:
    """Get playlist aggregator from app state.

    Raises:
        HTTPException: 503 if the service is not initialized
    """
    if not hasattr(request.app.state, "playlist_service"):
        raise HTTPException(status_code=503, detail="Playlist service not initialized")
    return cast(PlaylistService, request.app.state.playlist_service)


def get_auth_service(request: Request) -> SpotifyAuthService:
    """Get OAuth service from app state.

    Raises:
        HTTPException: 503 if the service is not initialized
    """
    if not hasattr(request.app.state, "auth_service"):
        raise HTTPException(status_code=503, detail="Auth service not initialized")
    return cast(SpotifyAuthService, request.app.state.auth_service)
