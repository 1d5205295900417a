"""Tests for playlist id extraction."""

import pytest

from muzikant.domain.value_objects import extract_playlist_id


class TestExtractPlaylistId:
    """Test share URL and bare id handling."""

    def test_share_url_with_query(self) -> None:
        """Test the id is taken from the playlist segment and the query dropped."""
        url = "https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=x"
        assert extract_playlist_id(url) == "37i9dQZF1DXcBWIGoYBM5M"

    def test_share_url_without_query(self) -> None:
        assert (
            extract_playlist_id("https://open.spotify.com/playlist/abc123")
            == "abc123"
        )

    def test_localized_share_url(self) -> None:
        """Test URLs with a locale segment before /playlist/."""
        url = "https://open.spotify.com/intl-de/playlist/abc123?si=1&pt=2"
        assert extract_playlist_id(url) == "abc123"

    def test_bare_id_is_trimmed(self) -> None:
        assert extract_playlist_id("  37i9dQZF1DXcBWIGoYBM5M  ") == "37i9dQZF1DXcBWIGoYBM5M"

    def test_non_spotify_url_returned_trimmed(self) -> None:
        """Test that input without spotify.com is never parsed."""
        assert (
            extract_playlist_id(" https://example.com/playlist/abc ")
            == "https://example.com/playlist/abc"
        )

    def test_spotify_url_without_playlist_segment(self) -> None:
        url = "https://open.spotify.com/album/xyz"
        assert extract_playlist_id(url) == url

    def test_trailing_playlist_segment_has_no_id(self) -> None:
        url = "https://open.spotify.com/playlist"
        assert extract_playlist_id(url) == url

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_input_returned_unchanged(self, value: str | None) -> None:
        assert extract_playlist_id(value) == value
