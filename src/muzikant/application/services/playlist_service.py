"""Playlist aggregation: paginate, de-duplicate, project, sort by year."""

import logging
from collections.abc import Iterable

from muzikant.domain.dtos import PlaylistDTO, TrackDTO
from muzikant.domain.ports import ISpotifyClient
from muzikant.infrastructure.integrations.spotify_models import (
    SpotifyArtist,
    SpotifyPlaylistItem,
    SpotifyTrack,
)

logger = logging.getLogger(__name__)


def build_artist_names(artists: Iterable[SpotifyArtist | None] | None) -> str:
    """Join all non-blank artist names with ", " (empty string when none)."""
    if not artists:
        return ""
    return ", ".join(
        artist.name
        for artist in artists
        if artist is not None and artist.name and artist.name.strip()
    )


def extract_year(release_date: str | None) -> int | None:
    """Parse the year from a Spotify release date ("1999", "1999-05", "1999-05-03").

    Returns None when the date is missing, shorter than 4 characters or does
    not start with a number.
    """
    if release_date is None or not release_date.strip():
        return None
    prefix = release_date[:4]
    if len(prefix) < 4 or not (prefix.isascii() and prefix.isdigit()):
        return None
    return int(prefix)


def project_track(track: SpotifyTrack) -> TrackDTO:
    """Flatten a Spotify track object into a TrackDTO."""
    album = track.album
    return TrackDTO(
        id=track.id or "",
        title=track.name or "",
        artist=build_artist_names(track.artists),
        album=album.name if album is not None else None,
        year=extract_year(album.release_date if album is not None else None),
        spotify_url=(
            track.external_urls.spotify if track.external_urls is not None else None
        ),
    )


def _year_sort_key(track: TrackDTO) -> tuple[bool, int]:
    # (False, year) sorts before (True, 0): known years first, unknown last.
    return (track.year is None, track.year or 0)


class PlaylistService:
    """Reads a whole playlist through the governed Spotify client.

    Errors are not caught here; RateLimitExceededError, ExternalServiceError
    and friends bubble straight up to the HTTP layer.
    """

    def __init__(self, spotify_client: ISpotifyClient) -> None:
        self._spotify_client = spotify_client

    async def fetch_playlist(self, playlist_id: str) -> PlaylistDTO:
        """Fetch name and all tracks of a playlist, ordered by release year.

        Args:
            playlist_id: Spotify playlist ID

        Returns:
            PlaylistDTO with de-duplicated tracks, nulls-last year order
        """
        results: list[TrackDTO] = []
        seen: set[str] = set()

        name = await self._spotify_client.get_playlist_name(playlist_id)

        # Hey future me - pages are fetched strictly one after another. `next` is an
        # opaque continuation from Spotify, follow it verbatim.
        next_url: str | None = self._spotify_client.playlist_tracks_url(playlist_id)
        pages = 0
        while next_url and next_url.strip():
            page = await self._spotify_client.get_playlist_tracks_page(next_url)
            pages += 1
            if page.items is None:
                break
            self._add_tracks(results, seen, page.items)
            next_url = page.next

        # list.sort is stable: equal years keep Spotify's playlist order.
        results.sort(key=_year_sort_key)
        logger.info(
            "Fetched playlist %s: %d tracks from %d pages",
            playlist_id,
            len(results),
            pages,
        )
        return PlaylistDTO(name=name, tracks=results)

    @staticmethod
    def _add_tracks(
        results: list[TrackDTO],
        seen: set[str],
        items: Iterable[SpotifyPlaylistItem | None],
    ) -> None:
        for item in items:
            if item is None or item.track is None or item.is_local:
                continue
            track_id = item.track.id
            if not track_id or not track_id.strip():
                continue
            if track_id in seen:
                continue
            seen.add(track_id)
            results.append(project_track(item.track))
