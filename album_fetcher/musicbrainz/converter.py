"""
Conversion of MusicBrainz releases into album and track metadata
"""

from typing import List

from ..metadata.models import AlbumMetadata, PlaylistMetadata, TrackMetadata
from .models import Release, extract_year, format_length, get_artist_name


def to_playlist_metadata(release: Release, cover_url: str = "") -> PlaylistMetadata:
    """
    Convert a release into PlaylistMetadata

    Tracks are numbered sequentially across all media. Disc number and disc
    count are only set for releases with more than one medium. The
    recording's title and first ISRC take precedence over the track's, and
    a track artist is only recorded when it differs from the album artist.

    Args:
        release: Release fetched with recordings included
        cover_url: Optional cover image URL for the album

    Returns:
        PlaylistMetadata for the release
    """
    artist = get_artist_name(release.artist_credit)

    label = ""
    catalog_number = ""
    if release.label_info:
        first = release.label_info[0]
        if first.label is not None:
            label = first.label.name
        catalog_number = first.catalog_number

    album = AlbumMetadata(
        title=release.title,
        artist=artist,
        album_artist=artist,
        year=extract_year(release.date),
        label=label,
        catalog_number=catalog_number,
        country=release.country,
        total_tracks=release.track_count,
        cover=cover_url,
    )

    multi_disc = len(release.media) > 1
    tracks: List[TrackMetadata] = []
    position = 0
    for disc_index, medium in enumerate(release.media):
        for track in medium.tracks:
            position += 1
            title = track.title
            isrc = ""
            track_artist = ""

            recording = track.recording
            if recording is not None:
                if recording.title:
                    title = recording.title
                if recording.isrcs:
                    isrc = recording.isrcs[0]
                credited = get_artist_name(recording.artist_credit)
                if credited and credited != artist:
                    track_artist = credited

            tracks.append(TrackMetadata(
                position=position,
                title=title,
                duration=format_length(track.length),
                artist=track_artist,
                isrc=isrc,
                disc_number=disc_index + 1 if multi_disc else 0,
                total_discs=len(release.media) if multi_disc else 0,
            ))

    return PlaylistMetadata(album=album, tracks=tuple(tracks))
