"""Configuration module for Muzikant."""

from .settings import (
    ApiSettings,
    ObservabilitySettings,
    Settings,
    SpotifySettings,
    get_settings,
)

__all__ = [
    "ApiSettings",
    "ObservabilitySettings",
    "Settings",
    "SpotifySettings",
    "get_settings",
]
