"""
Data models for album and track metadata

This module defines the metadata records that flow from the input side of
the application (CLI flags, batch configuration, MusicBrainz lookups) to the
tagging step that writes tags into downloaded audio files.

Model Layers:

1. **Input records** describe what is known about a release:
   - AlbumMetadata: album-scoped fields shared by every file of a download
   - TrackMetadata: per-track fields, identified by a 1-based position
   - PlaylistMetadata: an album plus its ordered track list

2. **Output record** describes exactly what gets written to one file:
   - FlatMetadata: merged, file-ready tag values

All records are frozen dataclasses. They are built once per download (or per
batch entry) and only read afterwards; adjusted copies are produced with
``dataclasses.replace`` instead of mutating shared instances.
"""

from dataclasses import dataclass, field, fields
from typing import Iterator, Tuple


@dataclass(frozen=True)
class AlbumMetadata:
    """
    Album-scoped metadata

    Attributes:
        title: Album title, written as the ``album`` tag
        artist: Main artist credited for the release
        album_artist: Album artist; empty means "same as artist"
        year: Release year (kept as text, e.g. "2008")
        genre: Genre name
        label: Record label
        catalog_number: Label catalog number
        country: Release country code
        total_tracks: Number of tracks on the release, 0 when unknown
        cover: Cover art source, a local file path or a URL
        comment: Album-wide comment, used when a track has none
    """
    title: str = ""
    artist: str = ""
    album_artist: str = ""
    year: str = ""
    genre: str = ""
    label: str = ""
    catalog_number: str = ""
    country: str = ""
    total_tracks: int = 0
    cover: str = ""
    comment: str = ""


@dataclass(frozen=True)
class TrackMetadata:
    """
    Per-track metadata

    ``position`` is 1-based; 0 means the position is unknown. Empty string
    fields mean "not provided" and fall back to album values during merging
    where a fallback exists.
    """
    position: int = 0
    title: str = ""
    duration: str = ""
    artist: str = ""
    composer: str = ""
    isrc: str = ""
    disc_number: int = 0
    total_discs: int = 0
    comment: str = ""


@dataclass(frozen=True)
class PlaylistMetadata:
    """Album metadata together with its ordered track list"""
    album: AlbumMetadata = field(default_factory=AlbumMetadata)
    tracks: Tuple[TrackMetadata, ...] = ()


# Order in which tags are passed to the tagger
TAG_FIELDS = (
    'title',
    'artist',
    'album',
    'album_artist',
    'composer',
    'year',
    'genre',
    'track',
    'comment',
)


@dataclass(frozen=True)
class FlatMetadata:
    """
    Fully merged, file-ready tag values

    ``track`` holds the formatted track number, ``"n"`` or ``"n/total"``.
    Empty fields are not written, which leaves any value already present in
    the file untouched.
    """
    title: str = ""
    artist: str = ""
    album: str = ""
    album_artist: str = ""
    composer: str = ""
    year: str = ""
    genre: str = ""
    track: str = ""
    comment: str = ""

    def tags(self) -> Iterator[Tuple[str, str]]:
        """
        Yield ``(key, value)`` tag pairs for every non-empty field

        The year is emitted under both the ``year`` and ``date`` keys.
        """
        for name in TAG_FIELDS:
            value = getattr(self, name).strip()
            if not value:
                continue
            yield name, value
            if name == 'year':
                yield 'date', value

    def is_empty(self) -> bool:
        """True when no field carries a value"""
        return not any(getattr(self, f.name).strip() for f in fields(self))
