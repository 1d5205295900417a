"""Access token store for the single host Spotify account.

Hey future me - this service owns the ONLY copy of our Spotify credentials:

- access_token / expires_at: short-lived, minted from the refresh token
- refresh_token: long-lived, seeded from SPOTIFY_REFRESH_TOKEN or set by the
  OAuth callback; never cleared once set

get_valid_access_token() refreshes 60 seconds BEFORE expiry so a token never
dies mid-request. The check-and-refresh runs under one asyncio.Lock, so a burst
of concurrent requests triggers exactly one refresh.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from muzikant.domain.exceptions import NotConfiguredError
from muzikant.domain.ports import IAccessTokenProvider
from muzikant.infrastructure.integrations.spotify_accounts_client import (
    SpotifyAccountsClient,
)

logger = logging.getLogger(__name__)

EARLY_REFRESH_WINDOW = timedelta(seconds=60)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class TokenResult:
    """Result of token operations.

    Hey future me - refresh_token might be None on refresh!
    Spotify doesn't always rotate it; keep the old one in that case.
    """

    access_token: str
    refresh_token: str | None
    expires_in: int
    token_type: str
    scope: str | None

    @classmethod
    def from_response(cls, token_data: dict[str, Any]) -> "TokenResult":
        """Build from an Accounts service JSON payload."""
        return cls(
            access_token=token_data["access_token"],
            refresh_token=token_data.get("refresh_token"),
            expires_in=int(token_data.get("expires_in") or 3600),
            token_type=token_data.get("token_type") or "Bearer",
            scope=token_data.get("scope"),
        )


class SpotifyTokenService(IAccessTokenProvider):
    """Holds the current access token and mediates refreshes."""

    def __init__(
        self,
        accounts_client: SpotifyAccountsClient,
        refresh_token: str | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize token store.

        Args:
            accounts_client: Client for accounts.spotify.com token calls
            refresh_token: Initial refresh token (blank means none)
            clock: Returns the current aware UTC datetime
        """
        self._accounts_client = accounts_client
        self._clock = clock
        self._lock = asyncio.Lock()
        self._access_token: str | None = None
        self._expires_at: datetime | None = None
        self._refresh_token: str | None = None
        if refresh_token and refresh_token.strip():
            self._refresh_token = refresh_token.strip()

    @property
    def expires_at(self) -> datetime | None:
        """Instant after which the current access token must not be used."""
        return self._expires_at

    @property
    def has_refresh_token(self) -> bool:
        return bool(self._refresh_token and self._refresh_token.strip())

    def get_refresh_token(self) -> str | None:
        """Current refresh token (None until configured or authorized)."""
        return self._refresh_token

    # No await in here, so the three fields change together from the point of
    # view of every other task on the loop.
    def update_from_authorization(self, token: TokenResult) -> None:
        """Store a fresh token response.

        Args:
            token: Parsed response of a refresh or code exchange
        """
        self._access_token = token.access_token
        self._expires_at = self._clock() + timedelta(seconds=token.expires_in)
        if token.refresh_token and token.refresh_token.strip():
            self._refresh_token = token.refresh_token
        logger.info("Spotify access token updated, expires at %s", self._expires_at)

    def _needs_refresh(self) -> bool:
        if self._access_token is None or self._expires_at is None:
            return True
        return self._clock() >= self._expires_at - EARLY_REFRESH_WINDOW

    async def get_valid_access_token(self) -> str:
        """Return a token valid for at least another 60 seconds.

        Returns:
            Bearer access token

        Raises:
            NotConfiguredError: If no refresh token is set
            TokenRefreshException: If the Accounts service refuses the refresh
        """
        async with self._lock:
            if not self.has_refresh_token:
                raise NotConfiguredError(
                    "SPOTIFY_REFRESH_TOKEN is not set. Complete /oauth/login first."
                )
            if self._needs_refresh():
                await self._refresh_access_token()
            assert self._access_token is not None
            return self._access_token

    async def _refresh_access_token(self) -> None:
        assert self._refresh_token is not None
        logger.info("Refreshing Spotify access token")
        token_data = await self._accounts_client.refresh_token(self._refresh_token)
        self.update_from_authorization(TokenResult.from_response(token_data))
