"""Playlist read endpoints for the browser front-end."""

import logging

from fastapi import APIRouter, Depends, Response, status

from muzikant.api.dependencies import get_playlist_service
from muzikant.api.schemas.playlists import PlaylistRequest, PlaylistResponse
from muzikant.application.services.playlist_service import PlaylistService
from muzikant.domain.value_objects import extract_playlist_id

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict[str, str]] = {
    400: {"description": "Blank playlist id (empty body)"},
    503: {"description": "Spotify is rate limiting us, try again shortly"},
}


async def _playlist_or_bad_request(
    raw_id: str | None, service: PlaylistService
) -> PlaylistResponse | Response:
    playlist_id = extract_playlist_id(raw_id)
    if playlist_id is None or not playlist_id.strip():
        return Response(status_code=status.HTTP_400_BAD_REQUEST)
    playlist = await service.fetch_playlist(playlist_id)
    return PlaylistResponse.from_dto(playlist)


@router.get(
    "/playlist/{playlist_id}",
    response_model=PlaylistResponse,
    responses=_ERROR_RESPONSES,
)
async def get_playlist(
    playlist_id: str,
    service: PlaylistService = Depends(get_playlist_service),
) -> PlaylistResponse | Response:
    """Return a playlist's tracks ordered by release year (unknown years last)."""
    return await _playlist_or_bad_request(playlist_id, service)


# Hey future me - same thing as the GET, but the front-end can post whatever the user
# pasted (bare id or open.spotify.com share link) without URL-encoding it into a path.
@router.post(
    "/playlist",
    response_model=PlaylistResponse,
    responses=_ERROR_RESPONSES,
)
async def post_playlist(
    body: PlaylistRequest,
    service: PlaylistService = Depends(get_playlist_service),
) -> PlaylistResponse | Response:
    """Return a playlist's tracks for an id or share URL given in the body."""
    return await _playlist_or_bad_request(body.playlist_id, service)
