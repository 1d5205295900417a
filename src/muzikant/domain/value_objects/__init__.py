"""Value objects and pure parsing helpers."""

from muzikant.domain.value_objects.spotify_url import extract_playlist_id

__all__ = ["extract_playlist_id"]
