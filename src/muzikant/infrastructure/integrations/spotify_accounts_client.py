"""Spotify Accounts service client (token endpoint, authorize URL)."""

import base64
import logging
from typing import Any, cast
from urllib.parse import urlencode

import httpx

from muzikant.config.settings import SpotifySettings
from muzikant.domain.exceptions import (
    AuthExchangeException,
    NotConfiguredError,
    TokenRefreshException,
)

logger = logging.getLogger(__name__)


class SpotifyAccountsClient:
    """HTTP client for accounts.spotify.com using confidential-client Basic auth."""

    AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
    TOKEN_URL = "https://accounts.spotify.com/api/token"  # nosec B105 - public endpoint URL, not a password

    def __init__(
        self, settings: SpotifySettings, http_client: httpx.AsyncClient | None = None
    ) -> None:
        """
        Initialize accounts client.

        Args:
            settings: Spotify configuration settings
            http_client: Shared client; a private one is created lazily when None
        """
        self.settings = settings
        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.settings.request_timeout_seconds
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client if we created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _basic_auth_header(self) -> str:
        creds = f"{self.settings.client_id}:{self.settings.client_secret}"
        return "Basic " + base64.b64encode(creds.encode("utf-8")).decode("ascii")

    def build_authorization_url(self, state: str) -> str:
        """
        Build the URL the host account is redirected to for consent.

        Args:
            state: CSRF state echoed back on the callback

        Returns:
            Authorization URL

        Raises:
            NotConfiguredError: If client_id or redirect_uri is not configured
        """
        if not self.settings.client_id.strip():
            raise NotConfiguredError("SPOTIFY_CLIENT_ID is not configured.")
        if not self.settings.redirect_uri.strip():
            raise NotConfiguredError(
                "SPOTIFY_REDIRECT_URI is not configured. "
                "Set it to the callback URL registered in the Spotify dashboard "
                "(e.g., http://localhost:8080/oauth/callback)."
            )

        params = {
            "response_type": "code",
            "client_id": self.settings.client_id,
            "redirect_uri": self.settings.redirect_uri,
            "state": state,
        }
        if self.settings.scopes.strip():
            params["scope"] = self.settings.scopes.strip()

        return f"{self.AUTHORIZE_URL}?{urlencode(params)}"

    async def _post_token_request(self, data: dict[str, str]) -> httpx.Response:
        client = await self._get_client()
        return await client.post(
            self.TOKEN_URL,
            data=data,
            headers={
                "Authorization": self._basic_auth_header(),
                "Content-Type": "application/x-www-form-urlencoded",
            },
        )

    @staticmethod
    def _error_code(response: httpx.Response) -> str | None:
        try:
            body = response.json()
        except ValueError:
            return None
        return body.get("error") if isinstance(body, dict) else None

    @staticmethod
    def _token_payload(response: httpx.Response) -> dict[str, Any] | None:
        """Return the JSON body if it is an object carrying an access token."""
        try:
            body = response.json()
        except ValueError:
            return None
        if not isinstance(body, dict) or not body.get("access_token"):
            return None
        return cast(dict[str, Any], body)

    # Hey future me, access tokens expire after 1 hour. This mints a new one from the
    # long-lived refresh token. Spotify answers 400 {"error": "invalid_grant"} when the
    # refresh token was revoked - that ends up in TokenRefreshException.error_code so
    # the logs say "re-run /oauth/login" instead of a bare 400.
    async def refresh_token(self, refresh_token: str) -> dict[str, Any]:
        """
        Refresh access token using refresh token.

        Args:
            refresh_token: Refresh token of the host account

        Returns:
            Token response with access_token, expires_in and maybe refresh_token

        Raises:
            TokenRefreshException: On transport error, non-2xx or missing access token
        """
        try:
            response = await self._post_token_request(
                {"grant_type": "refresh_token", "refresh_token": refresh_token}
            )
        except httpx.HTTPError as exc:
            logger.error("Spotify token refresh failed: %s", exc)
            raise TokenRefreshException(
                f"Failed to refresh Spotify access token: {exc}"
            ) from exc

        if response.is_error:
            error_code = self._error_code(response)
            logger.error(
                "Spotify token refresh rejected: HTTP %d (%s)",
                response.status_code,
                error_code or "no error code",
            )
            raise TokenRefreshException(
                f"Failed to refresh Spotify access token (HTTP {response.status_code}).",
                error_code=error_code,
                http_status=response.status_code,
            )

        payload = self._token_payload(response)
        if payload is None:
            logger.error("Spotify token refresh returned no access token")
            raise TokenRefreshException(
                "Failed to refresh Spotify access token: response had no access_token.",
                http_status=response.status_code,
            )
        return payload

    # Yo future me, the code is single-use and expires in ~10 minutes. redirect_uri
    # MUST match the one used in build_authorization_url() byte for byte, or Spotify
    # rejects the exchange with invalid_grant.
    async def exchange_code(self, code: str) -> dict[str, Any]:
        """
        Exchange authorization code for tokens.

        Args:
            code: Authorization code from the OAuth callback

        Returns:
            Token response with access_token, refresh_token, expires_in

        Raises:
            AuthExchangeException: On transport error, non-2xx or missing access token
        """
        try:
            response = await self._post_token_request(
                {
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self.settings.redirect_uri,
                }
            )
        except httpx.HTTPError as exc:
            logger.error("Spotify code exchange failed: %s", exc)
            raise AuthExchangeException(
                f"Failed to exchange authorization code for tokens: {exc}"
            ) from exc

        if response.is_error:
            error_code = self._error_code(response)
            logger.error(
                "Spotify code exchange rejected: HTTP %d (%s)",
                response.status_code,
                error_code or "no error code",
            )
            raise AuthExchangeException(
                error_code=error_code, http_status=response.status_code
            )

        payload = self._token_payload(response)
        if payload is None:
            logger.error("Spotify code exchange returned no access token")
            raise AuthExchangeException(http_status=response.status_code)
        return payload

    async def __aenter__(self) -> "SpotifyAccountsClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
