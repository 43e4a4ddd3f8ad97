"""
Batch configuration files

A batch file is a YAML document listing the albums to download, each with a
source URL plus optional manual metadata, per-track values and MusicBrainz
lookup hints:

    albums:
      - url: "https://youtube.com/playlist?list=..."
        artist: "Black Kids"
        album: "Partie Traumatic"
        year: 2008
        tracks:
          - {num: 1, title: "Hit The Heartbrakes"}
      - url: "https://youtube.com/playlist?list=..."
        auto_fetch: "Motion City Soundtrack - Commit This to Memory"

Scalar values are read as text, so ``year: 2008`` and ``year: "2008"`` are
equivalent.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..download.downloader import DownloadRequest
from ..metadata.models import AlbumMetadata, FlatMetadata, PlaylistMetadata, TrackMetadata
from ..utils.exceptions import ConfigError


def _text(value: Any) -> str:
    """Read a YAML scalar as stripped text; None becomes empty"""
    if value is None:
        return ""
    return str(value).strip()


@dataclass
class TrackConfig:
    """Manual values for one track, identified by its 1-based ``num``"""
    num: int = 0
    title: str = ""
    artist: str = ""
    composer: str = ""
    duration: str = ""
    comment: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any], album_number: int, track_number: int) -> 'TrackConfig':
        if not isinstance(data, dict):
            raise ConfigError(f"album {album_number}: track {track_number} must be a mapping")

        num = data.get('num') or 0
        try:
            num = int(num)
        except (TypeError, ValueError) as e:
            raise ConfigError(
                f"album {album_number}: track {track_number}: num must be a number, got {num!r}"
            ) from e

        return cls(
            num=num,
            title=_text(data.get('title')),
            artist=_text(data.get('artist')),
            composer=_text(data.get('composer')),
            duration=_text(data.get('duration')),
            comment=_text(data.get('comment'))
        )

    def to_track_metadata(self) -> TrackMetadata:
        return TrackMetadata(
            position=self.num,
            title=self.title,
            duration=self.duration,
            artist=self.artist,
            composer=self.composer,
            comment=self.comment
        )


@dataclass
class AlbumConfig:
    """
    One album entry of a batch file

    Attributes:
        url: Video or playlist URL (required)
        artist, album, album_artist, year, genre: Manual album metadata
        cover: Cover source (local path or URL)
        output_dir: Target directory; empty uses the batch default
        format: Audio format; empty uses the batch default
        musicbrainz_id: Release ID to look up
        auto_fetch: "Artist - Album" query to search MusicBrainz with
        tracks: Manual per-track values
    """
    url: str
    artist: str = ""
    album: str = ""
    album_artist: str = ""
    year: str = ""
    genre: str = ""
    cover: str = ""
    output_dir: str = ""
    format: str = ""
    musicbrainz_id: str = ""
    auto_fetch: str = ""
    tracks: List[TrackConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], album_number: int) -> 'AlbumConfig':
        """
        Build an album entry from its YAML mapping

        Raises:
            ConfigError: If the entry is malformed or has no URL
        """
        if not isinstance(data, dict):
            raise ConfigError(f"album {album_number}: entry must be a mapping")

        url = _text(data.get('url'))
        if not url:
            raise ConfigError(f"album {album_number}: url is required")

        tracks_data = data.get('tracks') or []
        if not isinstance(tracks_data, list):
            raise ConfigError(f"album {album_number}: tracks must be a list")

        return cls(
            url=url,
            artist=_text(data.get('artist')),
            album=_text(data.get('album')),
            album_artist=_text(data.get('album_artist')),
            year=_text(data.get('year')),
            genre=_text(data.get('genre')),
            cover=_text(data.get('cover')),
            output_dir=_text(data.get('output_dir')),
            format=_text(data.get('format')),
            musicbrainz_id=_text(data.get('musicbrainz_id')),
            auto_fetch=_text(data.get('auto_fetch')),
            tracks=[
                TrackConfig.from_dict(track, album_number, i)
                for i, track in enumerate(tracks_data, 1)
            ]
        )

    @property
    def display_name(self) -> str:
        """Name used in progress and failure reports: album title, else URL"""
        return self.album or self.url

    def needs_musicbrainz_lookup(self) -> bool:
        return bool(self.musicbrainz_id or self.auto_fetch)

    def has_playlist_metadata(self) -> bool:
        return bool(self.tracks or self.artist or self.album)

    def manual_album(self) -> AlbumMetadata:
        """Album metadata from the manually configured values"""
        return AlbumMetadata(
            title=self.album,
            artist=self.artist,
            album_artist=self.album_artist or self.artist,
            year=self.year,
            genre=self.genre,
            total_tracks=len(self.tracks),
            cover=self.cover
        )

    def manual_tracks(self) -> Tuple[TrackMetadata, ...]:
        return tuple(track.to_track_metadata() for track in self.tracks)

    def to_request(self, default_output_dir: str = ".", default_format: str = "mp3") -> DownloadRequest:
        """
        Build the download request for this album

        Playlist metadata is attached when tracks, an artist or an album
        title are configured.

        Args:
            default_output_dir: Directory used when the entry sets none
            default_format: Audio format used when the entry sets none

        Returns:
            DownloadRequest; tool paths keep their defaults and are set by
            the caller
        """
        playlist: Optional[PlaylistMetadata] = None
        if self.has_playlist_metadata():
            playlist = PlaylistMetadata(album=self.manual_album(), tracks=self.manual_tracks())

        return DownloadRequest(
            url=self.url,
            output_dir=self.output_dir or default_output_dir or ".",
            cover=self.cover,
            audio_format=self.format or default_format or "mp3",
            metadata=FlatMetadata(
                artist=self.artist,
                album=self.album,
                album_artist=self.album_artist,
                year=self.year,
                genre=self.genre
            ),
            playlist=playlist
        )


@dataclass
class BatchConfig:
    albums: List[AlbumConfig] = field(default_factory=list)


def parse_batch_config(text: str) -> BatchConfig:
    """
    Parse batch configuration YAML

    Raises:
        ConfigError: If the YAML is invalid, lists no albums, or an entry
                     is malformed
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"parse config: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("parse config: top level must be a mapping with an 'albums' list")

    albums_data = data.get('albums') or []
    if not isinstance(albums_data, list):
        raise ConfigError("parse config: 'albums' must be a list")
    if not albums_data:
        raise ConfigError("no albums defined in configuration")

    return BatchConfig(albums=[AlbumConfig.from_dict(album, i) for i, album in enumerate(albums_data, 1)])


def load_batch_config(path: str) -> BatchConfig:
    """
    Read and parse a batch configuration file

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        text = Path(path).expanduser().read_text(encoding='utf-8')
    except OSError as e:
        raise ConfigError(f"read config file: {e}", details={'path': path}) from e

    return parse_batch_config(text)


EXAMPLE_CONFIG = """\
# album-fetcher batch configuration
albums:
  # Example 1: Manual metadata
  - url: "https://youtube.com/playlist?list=PLxxxxxx"
    artist: "Black Kids"
    album: "Partie Traumatic"
    year: "2008"
    genre: "Indie Pop"
    cover: "https://example.com/cover.jpg"
    output_dir: "./music/Black Kids"
    tracks:
      - {num: 1, title: "Hit The Heartbrakes"}
      - {num: 2, title: "Partie Traumatic"}
      - {num: 3, title: "I'm Not Gonna Teach Your Boyfriend How to Dance with You"}

  # Example 2: Metadata from MusicBrainz by release ID
  - url: "https://youtube.com/playlist?list=PLyyyyyy"
    musicbrainz_id: "abc-123-def-456"
    output_dir: "./music/Motion City Soundtrack"

  # Example 3: Search MusicBrainz, override one track title, save as m4a
  - url: "https://youtube.com/playlist?list=PLzzzzzz"
    auto_fetch: "Motion City Soundtrack - Commit This to Memory"
    output_dir: "./music/Motion City Soundtrack"
    format: "m4a"
    tracks:
      - {num: 1, title: "Attractive Today", comment: "live"}
"""


def example_config() -> str:
    """Return an example batch configuration file"""
    return EXAMPLE_CONFIG
