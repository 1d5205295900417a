"""Pydantic request/response models for the API."""

from muzikant.api.schemas.playlists import (
    PlaylistRequest,
    PlaylistResponse,
    TrackResponse,
)

__all__ = ["PlaylistRequest", "PlaylistResponse", "TrackResponse"]
