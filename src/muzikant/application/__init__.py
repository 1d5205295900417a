"""Application layer: Spotify token, auth and playlist services."""
