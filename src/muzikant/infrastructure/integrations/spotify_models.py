"""Pydantic models for the slices of Spotify Web API responses we request.

Hey future me - the playlist calls use `fields=` filters, so Spotify only sends
what is listed here. Everything is optional because Spotify happily returns
nulls (removed tracks, local files, podcast episodes without albums). Unknown
keys are ignored so a wider response never breaks parsing.
"""

from pydantic import BaseModel, ConfigDict, Field


class SpotifyModel(BaseModel):
    """Base for Spotify payload models: tolerant of extra keys."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SpotifyArtist(SpotifyModel):
    name: str | None = None


class SpotifyAlbum(SpotifyModel):
    name: str | None = None
    release_date: str | None = None


class SpotifyExternalUrls(SpotifyModel):
    spotify: str | None = None


class SpotifyTrack(SpotifyModel):
    id: str | None = None
    name: str | None = None
    album: SpotifyAlbum | None = None
    artists: list[SpotifyArtist | None] | None = None
    external_urls: SpotifyExternalUrls | None = None


class SpotifyPlaylistItem(SpotifyModel):
    is_local: bool | None = False
    track: SpotifyTrack | None = None


class SpotifyPlaylistTracksPage(SpotifyModel):
    """One page of /v1/playlists/{id}/tracks.

    `next` is an absolute URL to the following page, or None on the last one.
    """

    items: list[SpotifyPlaylistItem | None] | None = None
    next: str | None = Field(default=None)


class SpotifyPlaylistName(SpotifyModel):
    """Response of /v1/playlists/{id}?fields=name."""

    name: str | None = None
