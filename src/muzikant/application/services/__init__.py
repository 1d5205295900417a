"""Application services - token management, OAuth and playlist aggregation."""

from muzikant.application.services.playlist_service import PlaylistService
from muzikant.application.services.spotify_auth_service import SpotifyAuthService
from muzikant.application.services.startup_validator import SpotifyStartupValidator
from muzikant.application.services.token_service import (
    SpotifyTokenService,
    TokenResult,
)

__all__ = [
    "PlaylistService",
    "SpotifyAuthService",
    "SpotifyStartupValidator",
    "SpotifyTokenService",
    "TokenResult",
]
