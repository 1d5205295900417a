"""Application settings loaded from environment variables and `.env`.

Hey future me - every knob of the service lives here. Env var names are the
contract with the deployment (docker-compose, systemd unit, whatever):

- SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET: always required
- SPOTIFY_REFRESH_TOKEN: required while OAuth endpoints are disabled
- SPOTIFY_REDIRECT_URI: required once SPOTIFY_OAUTH_ENABLED=true
- SPOTIFY_MAX_CONCURRENT_CALLS: permit pool size for Web API calls
- FRONTEND_ORIGIN: the only origin allowed to call /api/... from a browser
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from muzikant.domain.exceptions import ConfigurationError


class SpotifySettings(BaseSettings):
    """Spotify client credentials and outbound call tuning."""

    model_config = SettingsConfigDict(
        env_prefix="SPOTIFY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    client_id: str = Field(description="Spotify application client id")
    client_secret: str = Field(description="Spotify application client secret")
    refresh_token: str = Field(
        default="",
        description="Long-lived refresh token of the host account",
    )
    redirect_uri: str = Field(
        default="",
        description="OAuth callback URL registered in the Spotify dashboard",
    )
    oauth_enabled: bool = Field(
        default=False,
        description="Expose /oauth/login and /oauth/callback",
    )
    scopes: str = Field(
        default="",
        description="Space separated scopes; public playlist reads need none",
    )
    # Values below 1 are clamped to 1 by the governor.
    max_concurrent_calls: int = Field(default=1)
    permit_timeout_seconds: float | None = Field(
        default=None,
        description="Give up waiting for a permit after this many seconds",
    )
    request_timeout_seconds: float = Field(default=30.0)

    def validate_for_startup(self) -> None:
        """Raise ConfigurationError when the enabled mode lacks a setting."""
        if self.oauth_enabled and not self.redirect_uri.strip():
            raise ConfigurationError(
                "SPOTIFY_REDIRECT_URI is required when SPOTIFY_OAUTH_ENABLED=true."
            )


class ApiSettings(BaseSettings):
    """HTTP surface settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    frontend_origin: str = Field(
        default="http://localhost:3000", alias="FRONTEND_ORIGIN"
    )
    host: str = Field(default="0.0.0.0", alias="HOST")  # nosec B104 - container default
    port: int = Field(default=8080, alias="PORT")


class ObservabilitySettings(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    log_json_format: bool = Field(default=False, alias="LOG_JSON_FORMAT")


class Settings(BaseSettings):
    """Root settings object handed to the application factory."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(default="muzikant", alias="APP_NAME")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    spotify: SpotifySettings = Field(default_factory=SpotifySettings)  # type: ignore[arg-type]
    api: ApiSettings = Field(default_factory=ApiSettings)
    observability: ObservabilitySettings = Field(
        default_factory=ObservabilitySettings
    )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, read once."""
    return Settings()
