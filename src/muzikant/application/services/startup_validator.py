"""Fail-fast check that Spotify credentials work before serving traffic."""

import logging

from muzikant.application.services.token_service import SpotifyTokenService
from muzikant.config.settings import SpotifySettings
from muzikant.domain.exceptions import DomainException, NotConfiguredError

logger = logging.getLogger(__name__)


class SpotifyStartupValidator:
    """Proves the refresh token works when OAuth endpoints are disabled.

    With OAuth disabled there is no way to obtain a refresh token at runtime,
    so a missing or revoked SPOTIFY_REFRESH_TOKEN must stop the process instead
    of turning every playlist request into a 500.
    """

    def __init__(
        self, settings: SpotifySettings, token_service: SpotifyTokenService
    ) -> None:
        self._settings = settings
        self._token_service = token_service

    async def run(self) -> None:
        """Validate configuration; raise NotConfiguredError to abort startup."""
        self._settings.validate_for_startup()

        if self._settings.oauth_enabled:
            logger.info("Spotify OAuth endpoints enabled.")
            return

        logger.info(
            "Spotify OAuth endpoints disabled. Using refresh token authentication only."
        )
        if not self._token_service.has_refresh_token:
            raise NotConfiguredError(
                "SPOTIFY_REFRESH_TOKEN is required when OAuth is disabled."
            )

        try:
            await self._token_service.get_valid_access_token()
        except NotConfiguredError:
            raise
        except DomainException as exc:
            raise NotConfiguredError(
                f"SPOTIFY_REFRESH_TOKEN could not be used: {exc.message}"
            ) from exc
        logger.info("Spotify refresh token verified")
