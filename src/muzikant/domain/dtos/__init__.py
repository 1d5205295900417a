"""
Data Transfer Objects produced by the playlist aggregator.

Hey future me - these are the shapes the rest of the app sees. The Spotify wire
format (nested track/album/artists objects) is flattened into TrackDTO by
PlaylistService, and the API layer turns PlaylistDTO into JSON.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TrackDTO:
    """Flattened playlist entry.

    `artist` is every credited artist joined with ", ". `year` is None when the
    album release date is missing or unparseable.
    """

    id: str
    title: str
    artist: str
    album: str | None = None
    year: int | None = None
    spotify_url: str | None = None


@dataclass(frozen=True)
class PlaylistDTO:
    """Playlist name plus tracks ordered by release year (unknown years last)."""

    name: str | None
    tracks: list[TrackDTO] = field(default_factory=list)


__all__ = ["PlaylistDTO", "TrackDTO"]
