"""
Metadata merging and per-file track resolution

Downloaded files are matched to track records and album defaults are merged
with track values before tagging. The functions here implement that logic:

- extract_track_index: recover the playlist index yt-dlp wrote into a
  filename ("<index> - <title>.<ext>")
- merge_track_metadata: combine album and track records into the tags of one
  file, following fixed field precedence
- resolve_track_metadata: choose the track record for a downloaded file and
  merge it
- apply_track_overrides / fill_album_defaults: overlay manually configured
  values on metadata looked up from MusicBrainz

Matching by index is a heuristic: when the downloader's playlist order and
the declared track list disagree, tags can land on the wrong file. Such
mismatches are logged as warnings instead of passing silently.
"""

import os
from dataclasses import fields, replace
from typing import Iterable, Sequence, Tuple

from .models import AlbumMetadata, FlatMetadata, PlaylistMetadata, TrackMetadata
from ..utils.logger import get_logger


logger = get_logger(__name__)

INDEX_SEPARATOR = " - "


def extract_track_index(filename: str) -> int:
    """
    Extract the playlist index from a filename

    Looks at the base name for the first " - " separator that is not at the
    very start, and parses everything before it as a decimal number. Leading
    zeros and leading blanks are accepted ("01 - Intro.mp3" -> 1) and only
    the first separator counts ("12 - 3 - Song.mp3" -> 12).

    Args:
        filename: File name or path

    Returns:
        The recovered index, or 0 when there is no separator or the prefix
        is not a plain number
    """
    base = os.path.basename(filename)
    offset = base.find(INDEX_SEPARATOR, 1)
    if offset <= 0:
        return 0

    prefix = base[:offset].lstrip()
    if not (prefix.isascii() and prefix.isdigit()):
        return 0
    return int(prefix)


def format_track_number(position: int, total: int) -> str:
    """Format a track number as "n/total", "n", or "" when unknown"""
    if total > 0:
        return f"{position}/{total}"
    if position > 0:
        return str(position)
    return ""


def merge_track_metadata(
    album: AlbumMetadata,
    track: TrackMetadata,
    fallback_position: int
) -> FlatMetadata:
    """
    Merge album defaults and track values into file-ready metadata

    Field precedence:
    - album, year, genre come from the album
    - comment: track comment when set, else album comment
    - album artist: album.album_artist when set, else album.artist
    - artist: track.artist when set, else album.artist
    - title: track.title when set, else left empty so the file keeps the
      title it already has
    - composer: track.composer when set, else empty
    - track number: the track position when positive, else
      ``fallback_position``; written as "n/total" when the album's
      total_tracks is known

    The function is pure: the same inputs always give the same result.

    Args:
        album: Album-level metadata
        track: Track-level metadata (may be an empty record)
        fallback_position: 1-based position to use when the track has none

    Returns:
        Merged FlatMetadata
    """
    position = track.position if track.position > 0 else fallback_position

    return FlatMetadata(
        title=track.title,
        artist=track.artist or album.artist,
        album=album.title,
        album_artist=album.album_artist or album.artist,
        composer=track.composer,
        year=album.year,
        genre=album.genre,
        track=format_track_number(position, album.total_tracks),
        comment=track.comment or album.comment,
    )


def resolve_track_metadata(playlist: PlaylistMetadata, filename: str, file_index: int) -> FlatMetadata:
    """
    Determine the metadata for one downloaded file

    The track index comes from the filename when it can be recovered,
    otherwise from the file's 1-based position in the sorted list of new
    files. The track record at that index is used when it exists; failing
    that the record at the file's position; failing that an empty record.

    Args:
        playlist: Album and track metadata for the download
        filename: Relative path of the downloaded file
        file_index: 0-based position of the file among the new files

    Returns:
        Merged FlatMetadata for the file
    """
    tracks = playlist.tracks
    recovered = extract_track_index(filename)
    track_index = recovered if recovered > 0 else file_index + 1

    if 0 < track_index <= len(tracks):
        track = tracks[track_index - 1]
    elif file_index < len(tracks):
        track = tracks[file_index]
        logger.warning(
            f"Track index {track_index} of '{os.path.basename(filename)}' is outside the "
            f"{len(tracks)} known tracks; using track {file_index + 1} by position"
        )
    else:
        track = TrackMetadata()
        if tracks:
            logger.warning(
                f"No track metadata for '{os.path.basename(filename)}' "
                f"(index {track_index}); tagging with album metadata only"
            )

    return merge_track_metadata(playlist.album, track, track_index)


def apply_track_overrides(
    tracks: Sequence[TrackMetadata],
    overrides: Iterable[TrackMetadata]
) -> Tuple[TrackMetadata, ...]:
    """
    Overlay manually configured track values onto looked-up tracks

    Overrides are matched by position. Every non-empty field of an override
    replaces the looked-up value; overrides for positions that do not exist
    are appended.

    Args:
        tracks: Track list, usually from MusicBrainz
        overrides: Configured per-track values keyed by ``position``

    Returns:
        New track tuple
    """
    merged = list(tracks)
    by_position = {track.position: i for i, track in enumerate(merged) if track.position > 0}

    for override in overrides:
        changes = {
            f.name: getattr(override, f.name)
            for f in fields(override)
            if f.name != 'position' and getattr(override, f.name)
        }
        slot = by_position.get(override.position)
        if slot is None:
            merged.append(override)
            if override.position > 0:
                by_position[override.position] = len(merged) - 1
        elif changes:
            merged[slot] = replace(merged[slot], **changes)

    return tuple(merged)


def fill_album_defaults(album: AlbumMetadata, fallback: AlbumMetadata) -> AlbumMetadata:
    """
    Fill empty album fields from manually supplied values

    Args:
        album: Album metadata, usually from MusicBrainz
        fallback: Manually supplied album metadata

    Returns:
        New AlbumMetadata where each empty field takes the fallback value
    """
    changes = {
        f.name: getattr(fallback, f.name)
        for f in fields(album)
        if not getattr(album, f.name) and getattr(fallback, f.name)
    }
    return replace(album, **changes) if changes else album
