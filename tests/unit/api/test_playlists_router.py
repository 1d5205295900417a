"""Tests for the playlist endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from muzikant.application.services.playlist_service import PlaylistService
from muzikant.config import ApiSettings, Settings, SpotifySettings
from muzikant.domain.dtos import PlaylistDTO, TrackDTO
from muzikant.domain.exceptions import (
    SPOTIFY_UNAVAILABLE_MESSAGE,
    ExternalServiceError,
    NotConfiguredError,
    RateLimitExceededError,
    ServiceUnavailableError,
    TokenRefreshException,
)
from muzikant.main import create_app

PLAYLIST = PlaylistDTO(
    name="Road Trip",
    tracks=[
        TrackDTO(
            id="t1",
            title="Old Song",
            artist="A, B",
            album="LP",
            year=1975,
            spotify_url="https://open.spotify.com/track/t1",
        ),
        TrackDTO(id="t2", title="Unknown Year", artist=""),
    ],
)


@pytest.fixture
def playlist_service() -> MagicMock:
    mock = MagicMock(spec=PlaylistService)
    mock.fetch_playlist = AsyncMock(return_value=PLAYLIST)
    return mock


@pytest.fixture
def app(playlist_service: MagicMock) -> FastAPI:
    """App without lifespan: services are parked on app.state by hand."""
    settings = Settings(
        spotify=SpotifySettings(client_id="id", client_secret="secret"),
        api=ApiSettings(frontend_origin="http://localhost:3000"),
    )
    app = create_app(settings)
    app.state.playlist_service = playlist_service
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


class TestGetPlaylist:
    """Test GET /api/playlist/{playlist_id}."""

    def test_returns_playlist_json(
        self, client: TestClient, playlist_service: MagicMock
    ) -> None:
        response = client.get("/api/playlist/37i9dQZF1DXcBWIGoYBM5M")

        assert response.status_code == 200
        assert response.json() == {
            "name": "Road Trip",
            "tracks": [
                {
                    "id": "t1",
                    "title": "Old Song",
                    "artist": "A, B",
                    "album": "LP",
                    "year": 1975,
                    "spotifyUrl": "https://open.spotify.com/track/t1",
                },
                {
                    "id": "t2",
                    "title": "Unknown Year",
                    "artist": "",
                    "album": None,
                    "year": None,
                    "spotifyUrl": None,
                },
            ],
        }
        playlist_service.fetch_playlist.assert_awaited_once_with(
            "37i9dQZF1DXcBWIGoYBM5M"
        )

    def test_id_is_trimmed(
        self, client: TestClient, playlist_service: MagicMock
    ) -> None:
        client.get("/api/playlist/%20abc%20")

        playlist_service.fetch_playlist.assert_awaited_once_with("abc")

    def test_blank_id_is_bad_request(
        self, client: TestClient, playlist_service: MagicMock
    ) -> None:
        response = client.get("/api/playlist/%20%20")

        assert response.status_code == 400
        assert response.content == b""
        playlist_service.fetch_playlist.assert_not_called()

    def test_rate_limited_is_service_unavailable(
        self, client: TestClient, playlist_service: MagicMock
    ) -> None:
        playlist_service.fetch_playlist.side_effect = RateLimitExceededError(
            SPOTIFY_UNAVAILABLE_MESSAGE
        )

        response = client.get("/api/playlist/abc")

        assert response.status_code == 503
        assert response.text == SPOTIFY_UNAVAILABLE_MESSAGE
        assert response.headers["content-type"].startswith("text/plain")

    def test_permit_timeout_is_service_unavailable(
        self, client: TestClient, playlist_service: MagicMock
    ) -> None:
        playlist_service.fetch_playlist.side_effect = ServiceUnavailableError(
            SPOTIFY_UNAVAILABLE_MESSAGE
        )

        response = client.get("/api/playlist/abc")

        assert response.status_code == 503

    @pytest.mark.parametrize(
        "error",
        [
            ExternalServiceError("Spotify API error: HTTP 404", status_code=404),
            NotConfiguredError("SPOTIFY_REFRESH_TOKEN is not set."),
            TokenRefreshException("refused", error_code="invalid_grant"),
        ],
    )
    def test_upstream_failures_are_internal_errors(
        self, client: TestClient, playlist_service: MagicMock, error: Exception
    ) -> None:
        playlist_service.fetch_playlist.side_effect = error

        response = client.get("/api/playlist/abc")

        assert response.status_code == 500
        assert response.json() == {"detail": error.message}

    def test_missing_service_is_service_unavailable(self, app: FastAPI) -> None:
        del app.state.playlist_service

        response = TestClient(app).get("/api/playlist/abc")

        assert response.status_code == 503


class TestPostPlaylist:
    """Test POST /api/playlist."""

    def test_share_url_in_body(
        self, client: TestClient, playlist_service: MagicMock
    ) -> None:
        response = client.post(
            "/api/playlist",
            json={
                "playlistId": "https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=x"
            },
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Road Trip"
        playlist_service.fetch_playlist.assert_awaited_once_with(
            "37i9dQZF1DXcBWIGoYBM5M"
        )

    @pytest.mark.parametrize("body", [{}, {"playlistId": None}, {"playlistId": "  "}])
    def test_blank_body_is_bad_request(
        self, client: TestClient, playlist_service: MagicMock, body: dict
    ) -> None:
        response = client.post("/api/playlist", json=body)

        assert response.status_code == 400
        playlist_service.fetch_playlist.assert_not_called()
