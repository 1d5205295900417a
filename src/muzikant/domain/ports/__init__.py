"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from muzikant.infrastructure.integrations.spotify_models import (
        SpotifyPlaylistTracksPage,
    )


class IAccessTokenProvider(ABC):
    """Source of bearer tokens for Spotify Web API calls."""

    @abstractmethod
    async def get_valid_access_token(self) -> str:
        """Return an access token valid for at least the early-refresh window."""
        pass


class ISpotifyClient(ABC):
    """Port for the Spotify Web API reads the playlist aggregator needs."""

    @abstractmethod
    async def get_playlist_name(self, playlist_id: str) -> str | None:
        """Get the display name of a playlist."""
        pass

    @abstractmethod
    def playlist_tracks_url(self, playlist_id: str) -> str:
        """Build the URL of the first page of playlist tracks."""
        pass

    @abstractmethod
    async def get_playlist_tracks_page(self, url: str) -> "SpotifyPlaylistTracksPage":
        """Fetch one page of playlist tracks by absolute URL."""
        pass


__all__ = ["IAccessTokenProvider", "ISpotifyClient"]
