"""Tests for the access token store."""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from muzikant.application.services.token_service import (
    SpotifyTokenService,
    TokenResult,
)
from muzikant.domain.exceptions import NotConfiguredError, TokenRefreshException
from muzikant.infrastructure.integrations.spotify_accounts_client import (
    SpotifyAccountsClient,
)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def _token_payload(access_token: str, refresh_token: str | None = None) -> dict:
    payload = {"access_token": access_token, "expires_in": 3600, "token_type": "Bearer"}
    if refresh_token is not None:
        payload["refresh_token"] = refresh_token
    return payload


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def accounts_client() -> MagicMock:
    """Create a mock accounts client."""
    mock = MagicMock(spec=SpotifyAccountsClient)
    mock.refresh_token = AsyncMock(return_value=_token_payload("access-1"))
    return mock


@pytest.fixture
def token_service(accounts_client: MagicMock, clock: FakeClock) -> SpotifyTokenService:
    return SpotifyTokenService(accounts_client, refresh_token="rt-1", clock=clock)


class TestTokenResult:
    """Test parsing of token payloads."""

    def test_from_response_defaults(self) -> None:
        result = TokenResult.from_response({"access_token": "a"})
        assert result.access_token == "a"
        assert result.refresh_token is None
        assert result.expires_in == 3600
        assert result.token_type == "Bearer"

    def test_from_response_full(self) -> None:
        result = TokenResult.from_response(
            {
                "access_token": "a",
                "refresh_token": "r",
                "expires_in": 120,
                "token_type": "bearer",
                "scope": "playlist-read-private",
            }
        )
        assert result.refresh_token == "r"
        assert result.expires_in == 120
        assert result.scope == "playlist-read-private"


class TestGetValidAccessToken:
    """Test refresh decisions of get_valid_access_token()."""

    async def test_without_refresh_token_raises_not_configured(
        self, accounts_client: MagicMock
    ) -> None:
        """Test that no refresh is attempted without a refresh token."""
        service = SpotifyTokenService(accounts_client, refresh_token="   ")

        assert service.has_refresh_token is False
        with pytest.raises(NotConfiguredError):
            await service.get_valid_access_token()
        accounts_client.refresh_token.assert_not_called()

    async def test_first_call_refreshes(
        self,
        token_service: SpotifyTokenService,
        accounts_client: MagicMock,
        clock: FakeClock,
    ) -> None:
        token = await token_service.get_valid_access_token()

        assert token == "access-1"
        accounts_client.refresh_token.assert_awaited_once_with("rt-1")
        assert token_service.expires_at == clock.now + timedelta(seconds=3600)

    async def test_cached_token_reused_while_valid(
        self,
        token_service: SpotifyTokenService,
        accounts_client: MagicMock,
        clock: FakeClock,
    ) -> None:
        await token_service.get_valid_access_token()
        clock.advance(3539)

        assert await token_service.get_valid_access_token() == "access-1"
        assert accounts_client.refresh_token.await_count == 1

    async def test_refreshes_sixty_seconds_before_expiry(
        self,
        token_service: SpotifyTokenService,
        accounts_client: MagicMock,
        clock: FakeClock,
    ) -> None:
        """Test the early refresh window boundary (now == expires_at - 60s)."""
        await token_service.get_valid_access_token()
        accounts_client.refresh_token.return_value = _token_payload("access-2")
        clock.advance(3540)

        assert await token_service.get_valid_access_token() == "access-2"
        assert accounts_client.refresh_token.await_count == 2

    async def test_rotated_refresh_token_is_kept(
        self, token_service: SpotifyTokenService, accounts_client: MagicMock
    ) -> None:
        accounts_client.refresh_token.return_value = _token_payload("access-1", "rt-2")

        await token_service.get_valid_access_token()

        assert token_service.get_refresh_token() == "rt-2"

    async def test_missing_refresh_token_in_response_keeps_old_one(
        self, token_service: SpotifyTokenService
    ) -> None:
        await token_service.get_valid_access_token()

        assert token_service.get_refresh_token() == "rt-1"

    async def test_refresh_failure_propagates(
        self, token_service: SpotifyTokenService, accounts_client: MagicMock
    ) -> None:
        accounts_client.refresh_token.side_effect = TokenRefreshException(
            "refused", error_code="invalid_grant", http_status=400
        )

        with pytest.raises(TokenRefreshException) as exc_info:
            await token_service.get_valid_access_token()
        assert exc_info.value.requires_reauth is True

    async def test_concurrent_callers_share_one_refresh(
        self, token_service: SpotifyTokenService, accounts_client: MagicMock
    ) -> None:
        """Test that a burst of requests triggers exactly one refresh."""

        async def slow_refresh(refresh_token: str) -> dict:
            await asyncio.sleep(0.01)
            return _token_payload("access-1")

        accounts_client.refresh_token.side_effect = slow_refresh

        tokens = await asyncio.gather(
            *(token_service.get_valid_access_token() for _ in range(5))
        )

        assert tokens == ["access-1"] * 5
        assert accounts_client.refresh_token.await_count == 1


class TestUpdateFromAuthorization:
    """Test storing tokens from the OAuth callback."""

    async def test_authorization_seeds_store_without_refresh(
        self, accounts_client: MagicMock, clock: FakeClock
    ) -> None:
        service = SpotifyTokenService(accounts_client, clock=clock)

        service.update_from_authorization(
            TokenResult(
                access_token="from-callback",
                refresh_token="rt-new",
                expires_in=3600,
                token_type="Bearer",
                scope=None,
            )
        )

        assert service.has_refresh_token is True
        assert await service.get_valid_access_token() == "from-callback"
        accounts_client.refresh_token.assert_not_called()

    def test_blank_refresh_token_does_not_replace(
        self, token_service: SpotifyTokenService
    ) -> None:
        token_service.update_from_authorization(
            TokenResult(
                access_token="a",
                refresh_token="  ",
                expires_in=60,
                token_type="Bearer",
                scope=None,
            )
        )

        assert token_service.get_refresh_token() == "rt-1"
