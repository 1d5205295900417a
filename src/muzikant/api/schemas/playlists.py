"""API schemas for playlist reads."""

from pydantic import BaseModel, ConfigDict, Field

from muzikant.domain.dtos import PlaylistDTO, TrackDTO


class TrackResponse(BaseModel):
    """One playlist entry as sent to the front-end."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Spotify track id")
    title: str = Field(..., description="Track title")
    artist: str = Field(..., description="Credited artists joined with ', '")
    album: str | None = Field(default=None, description="Album name")
    year: int | None = Field(default=None, description="Album release year")
    spotify_url: str | None = Field(
        default=None,
        alias="spotifyUrl",
        description="open.spotify.com link to the track",
    )

    @classmethod
    def from_dto(cls, track: TrackDTO) -> "TrackResponse":
        return cls(
            id=track.id,
            title=track.title,
            artist=track.artist,
            album=track.album,
            year=track.year,
            spotify_url=track.spotify_url,
        )


class PlaylistResponse(BaseModel):
    """Playlist name plus tracks ordered by year, unknown years last."""

    name: str | None = Field(default=None, description="Playlist name")
    tracks: list[TrackResponse] = Field(default_factory=list)

    @classmethod
    def from_dto(cls, playlist: PlaylistDTO) -> "PlaylistResponse":
        return cls(
            name=playlist.name,
            tracks=[TrackResponse.from_dto(track) for track in playlist.tracks],
        )


class PlaylistRequest(BaseModel):
    """Body of POST /api/playlist: a playlist id or a share URL."""

    model_config = ConfigDict(populate_by_name=True)

    playlist_id: str | None = Field(
        default=None,
        alias="playlistId",
        description="Playlist id or https://open.spotify.com/playlist/... URL",
    )
