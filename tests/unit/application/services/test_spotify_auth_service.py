"""Tests for the host-account OAuth service."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from muzikant.application.services.spotify_auth_service import SpotifyAuthService
from muzikant.application.services.token_service import SpotifyTokenService
from muzikant.domain.exceptions import AuthExchangeException
from muzikant.infrastructure.integrations.spotify_accounts_client import (
    SpotifyAccountsClient,
)


@pytest.fixture
def accounts_client() -> MagicMock:
    """Create a mock accounts client that echoes state into the URL."""
    mock = MagicMock(spec=SpotifyAccountsClient)
    mock.build_authorization_url.side_effect = (
        lambda state: f"https://accounts.spotify.com/authorize?state={state}"
    )
    mock.exchange_code = AsyncMock(
        return_value={
            "access_token": "access-from-code",
            "refresh_token": "refresh-from-code",
            "expires_in": 3600,
            "token_type": "Bearer",
        }
    )
    mock.refresh_token = AsyncMock()
    return mock


@pytest.fixture
def token_service(accounts_client: MagicMock) -> SpotifyTokenService:
    return SpotifyTokenService(accounts_client)


@pytest.fixture
def auth_service(
    accounts_client: MagicMock, token_service: SpotifyTokenService
) -> SpotifyAuthService:
    states = iter(["state-1", "state-2", "state-3"])
    return SpotifyAuthService(
        accounts_client, token_service, state_factory=lambda: next(states)
    )


class TestStateHandling:
    """Test CSRF state issue and verification."""

    async def test_login_url_carries_fresh_state(
        self, auth_service: SpotifyAuthService, accounts_client: MagicMock
    ) -> None:
        url = await auth_service.build_login_url()

        assert url == "https://accounts.spotify.com/authorize?state=state-1"
        accounts_client.build_authorization_url.assert_called_once_with("state-1")

    async def test_issued_state_is_valid(self, auth_service: SpotifyAuthService) -> None:
        await auth_service.build_login_url()

        assert await auth_service.is_state_valid("state-1") is True

    async def test_state_invalid_before_any_login(
        self, auth_service: SpotifyAuthService
    ) -> None:
        assert await auth_service.is_state_valid("state-1") is False

    @pytest.mark.parametrize("state", [None, "", "state-2", "state-1x"])
    async def test_mismatching_state_is_invalid(
        self, auth_service: SpotifyAuthService, state: str | None
    ) -> None:
        await auth_service.build_login_url()

        assert await auth_service.is_state_valid(state) is False

    async def test_later_login_replaces_state(
        self, auth_service: SpotifyAuthService
    ) -> None:
        """Test that only the most recent login's state is accepted."""
        await auth_service.build_login_url()
        await auth_service.build_login_url()

        assert await auth_service.is_state_valid("state-1") is False
        assert await auth_service.is_state_valid("state-2") is True


class TestCodeExchange:
    """Test handing exchanged tokens to the token store."""

    async def test_exchange_stores_tokens(
        self,
        auth_service: SpotifyAuthService,
        token_service: SpotifyTokenService,
        accounts_client: MagicMock,
    ) -> None:
        result = await auth_service.exchange_code_for_token("the-code")

        accounts_client.exchange_code.assert_awaited_once_with("the-code")
        assert result.refresh_token == "refresh-from-code"
        assert token_service.get_refresh_token() == "refresh-from-code"
        assert await token_service.get_valid_access_token() == "access-from-code"
        accounts_client.refresh_token.assert_not_called()

    async def test_exchange_failure_leaves_store_untouched(
        self,
        auth_service: SpotifyAuthService,
        token_service: SpotifyTokenService,
        accounts_client: MagicMock,
    ) -> None:
        accounts_client.exchange_code.side_effect = AuthExchangeException(
            error_code="invalid_grant", http_status=400
        )

        with pytest.raises(AuthExchangeException):
            await auth_service.exchange_code_for_token("stale-code")
        assert token_service.has_refresh_token is False
