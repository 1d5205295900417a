"""Spotify OAuth Authentication Service.

Hey future me - this backend links exactly ONE Spotify account (the host's).
There is no user session store: the latest CSRF state lives right here, and a
successful code exchange hands the tokens straight to SpotifyTokenService.

OAuth Flow:
1. build_login_url() -> redirect the host to Spotify
2. Spotify redirects back to /oauth/callback?code&state
3. is_state_valid(state) -> CSRF check against the most recent login
4. exchange_code_for_token(code) -> tokens stored in the token service

Two overlapping logins race for last_state; the later one wins. That is fine
for a single-user backend, don't build a state table for it.
"""

import asyncio
import logging
import secrets
from collections.abc import Callable

from muzikant.application.services.token_service import (
    SpotifyTokenService,
    TokenResult,
)
from muzikant.infrastructure.integrations.spotify_accounts_client import (
    SpotifyAccountsClient,
)

logger = logging.getLogger(__name__)


def _new_state() -> str:
    return secrets.token_urlsafe(32)


class SpotifyAuthService:
    """Authorization Code flow for the host account."""

    def __init__(
        self,
        accounts_client: SpotifyAccountsClient,
        token_service: SpotifyTokenService,
        state_factory: Callable[[], str] = _new_state,
    ) -> None:
        """Initialize auth service.

        Args:
            accounts_client: Client for the Spotify Accounts service
            token_service: Receives the tokens of a successful exchange
            state_factory: Produces unpredictable CSRF state values
        """
        self._accounts_client = accounts_client
        self._token_service = token_service
        self._state_factory = state_factory
        self._lock = asyncio.Lock()
        self._last_state: str | None = None

    async def build_login_url(self) -> str:
        """Issue a fresh state and return the Spotify authorize URL.

        Raises:
            NotConfiguredError: If client id or redirect URI is missing
        """
        async with self._lock:
            state = self._state_factory()
            url = self._accounts_client.build_authorization_url(state)
            self._last_state = state
            logger.debug("Generated auth URL with state=%s...", state[:8])
            return url

    async def is_state_valid(self, state: str | None) -> bool:
        """True iff state equals the most recently issued one."""
        async with self._lock:
            if self._last_state is None or state is None:
                return False
            return secrets.compare_digest(
                self._last_state.encode("utf-8"), state.encode("utf-8")
            )

    # Hey future me - the code is single-use. If Spotify rejects it, the host just
    # has to hit /oauth/login again; we never retry the exchange.
    async def exchange_code_for_token(self, code: str) -> TokenResult:
        """Exchange an authorization code and store the resulting tokens.

        Args:
            code: Authorization code from the callback

        Returns:
            TokenResult of the exchange

        Raises:
            AuthExchangeException: If Spotify rejects the exchange
        """
        async with self._lock:
            token_data = await self._accounts_client.exchange_code(code)
            token = TokenResult.from_response(token_data)
            self._token_service.update_from_authorization(token)
            logger.info("Successfully exchanged code for tokens")
            return token
