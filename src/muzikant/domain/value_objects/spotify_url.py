"""Playlist id extraction from free-form user input."""

SPOTIFY_HOST_MARKER = "spotify.com"


# Hey future me - users paste whatever the Spotify share button gave them, e.g.
# "https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=abc". Anything that
# doesn't look like a spotify.com URL is treated as a bare id and returned trimmed.
def extract_playlist_id(value: str | None) -> str | None:
    """Extract a playlist id from a share URL or return the bare id.

    Args:
        value: Playlist id or share URL

    Returns:
        Playlist id, or the input unchanged when it is None or blank
    """
    if value is None or not value.strip():
        return value

    trimmed = value.strip()
    if SPOTIFY_HOST_MARKER not in trimmed:
        return trimmed

    parts = trimmed.split("/")
    for index, part in enumerate(parts[:-1]):
        if part == "playlist":
            return parts[index + 1].split("?", 1)[0]
    return trimmed
