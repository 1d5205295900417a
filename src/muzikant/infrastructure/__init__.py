"""Infrastructure layer: Spotify integrations, governor, observability, lifecycle."""
