"""External integration client implementations."""

from muzikant.infrastructure.integrations.spotify_accounts_client import (
    SpotifyAccountsClient,
)
from muzikant.infrastructure.integrations.spotify_client import SpotifyClient

__all__ = [
    "SpotifyAccountsClient",
    "SpotifyClient",
]
