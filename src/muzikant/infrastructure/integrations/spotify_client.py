"""Spotify Web API client: governed, authenticated GETs with one-shot 429 retry."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from muzikant.config.settings import SpotifySettings
from muzikant.domain.exceptions import (
    SPOTIFY_UNAVAILABLE_MESSAGE,
    ExternalServiceError,
    RateLimitExceededError,
)
from muzikant.domain.ports import IAccessTokenProvider, ISpotifyClient
from muzikant.infrastructure.integrations.spotify_models import (
    SpotifyPlaylistName,
    SpotifyPlaylistTracksPage,
)
from muzikant.infrastructure.rate_limiter import SpotifyRateGovernor

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_RETRY_AFTER_SECONDS = 5
PLAYLIST_PAGE_LIMIT = 100
TRACK_FIELDS = (
    "items(track(id,name,artists(name),album(name,release_date),"
    "external_urls(spotify))),next"
)


def parse_retry_after_seconds(value: str | None) -> int:
    """Parse a Retry-After header given in whole seconds.

    Returns DEFAULT_RETRY_AFTER_SECONDS when the header is absent, negative or
    not an integer (the HTTP-date form is not supported).
    """
    if value is None:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        seconds = int(value.strip())
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS
    return seconds if seconds >= 0 else DEFAULT_RETRY_AFTER_SECONDS


class SpotifyClient(ISpotifyClient):
    """HTTP client for Spotify Web API reads."""

    API_BASE_URL = "https://api.spotify.com/v1"

    def __init__(
        self,
        settings: SpotifySettings,
        token_provider: IAccessTokenProvider,
        governor: SpotifyRateGovernor,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize Spotify client.

        Args:
            settings: Spotify configuration settings
            token_provider: Hands out valid bearer tokens (refreshing as needed)
            governor: Backoff deadline and permit pool shared by all Web API calls
            http_client: Shared client; a private one is created lazily when None
            sleep: Sleep primitive used for the 429 backoff
        """
        self.settings = settings
        self._token_provider = token_provider
        self._governor = governor
        self._client = http_client
        self._owns_client = http_client is None
        self._sleep = sleep

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

    # Hey future me - ALL Web API reads go through here! Order matters:
    # 1. governor.gated(): sleep out any global backoff, then take a permit
    # 2. one GET; on 429 push the global deadline, sleep Retry-After, GET once more
    # 3. a second 429 means Spotify is hostile right now -> RateLimitExceededError (503)
    # The retry deliberately does NOT re-enter the wait phase; we already slept the
    # full Retry-After while holding our permit.
    async def get(
        self,
        url: str,
        response_model: type[ModelT],
        params: dict[str, Any] | None = None,
    ) -> ModelT:
        """Make a governed GET and parse the JSON body into response_model.

        Args:
            url: Absolute Web API URL
            response_model: Pydantic model describing the expected body
            params: Extra query parameters

        Returns:
            Parsed response body

        Raises:
            RateLimitExceededError: If the one-shot retry is rate limited again
            ExternalServiceError: On any other non-2xx or transport error
            ServiceUnavailableError: If no permit could be obtained
        """
        async with self._governor.gated():
            response = await self._do_get(url, params)

            if response.status_code == 429:
                retry_seconds = parse_retry_after_seconds(
                    response.headers.get("Retry-After")
                )
                retry_until = self._governor.now_ms() + retry_seconds * 1000
                self._governor.defer_until(retry_until)
                logger.warning(
                    "Spotify 429 received. Retrying %s in %d s.", url, retry_seconds
                )
                await self._sleep(retry_seconds)

                response = await self._do_get(url, params)
                if response.status_code == 429:
                    logger.error("Spotify 429 again after backoff: %s", url)
                    raise RateLimitExceededError(SPOTIFY_UNAVAILABLE_MESSAGE)

        return self._parse(response, url, response_model)

    async def _do_get(
        self, url: str, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        access_token = await self._token_provider.get_valid_access_token()
        client = await self._get_client()

        logger.info("Spotify request start: %s", url)
        started = time.perf_counter()
        try:
            response = await client.get(
                url,
                params=params,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as exc:
            logger.error("Spotify request failed: %s (%s)", url, exc)
            raise ExternalServiceError(f"Spotify request failed: {exc}") from exc

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "Spotify request finished in %.0f ms (HTTP %d): %s",
            elapsed_ms,
            response.status_code,
            url,
        )
        return response

    @staticmethod
    def _parse(
        response: httpx.Response, url: str, response_model: type[ModelT]
    ) -> ModelT:
        if response.is_error:
            logger.error(
                "Spotify API error: HTTP %d for %s", response.status_code, url
            )
            raise ExternalServiceError(
                f"Spotify API error: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
            # A literal `null` body is treated like an empty object.
            return response_model.model_validate(data if data is not None else {})
        except (ValueError, ValidationError) as exc:
            logger.error("Unexpected Spotify response body for %s: %s", url, exc)
            raise ExternalServiceError(
                "Spotify API returned an unexpected response body.",
                status_code=response.status_code,
            ) from exc

    def _playlist_url(self, playlist_id: str) -> str:
        return f"{self.API_BASE_URL}/playlists/{quote(playlist_id, safe='')}"

    async def get_playlist_name(self, playlist_id: str) -> str | None:
        """
        Get playlist display name.

        Args:
            playlist_id: Spotify playlist ID

        Returns:
            Playlist name (None if Spotify has none)
        """
        result = await self.get(
            self._playlist_url(playlist_id),
            SpotifyPlaylistName,
            params={"fields": "name"},
        )
        return result.name

    def playlist_tracks_url(self, playlist_id: str) -> str:
        """Absolute URL of the first page of playlist tracks (limit 100)."""
        url = httpx.URL(
            f"{self._playlist_url(playlist_id)}/tracks",
            params={
                "limit": PLAYLIST_PAGE_LIMIT,
                "offset": 0,
                "fields": TRACK_FIELDS,
            },
        )
        return str(url)

    # Listen up, `url` is either playlist_tracks_url() or the `next` link from the
    # previous page. `next` is opaque - follow it verbatim, never rebuild offsets.
    async def get_playlist_tracks_page(self, url: str) -> SpotifyPlaylistTracksPage:
        """
        Fetch one page of playlist tracks.

        Args:
            url: Absolute page URL

        Returns:
            Page with items and the next-page URL
        """
        return await self.get(url, SpotifyPlaylistTracksPage)

    async def __aenter__(self) -> "SpotifyClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
