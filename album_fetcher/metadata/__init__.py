"""
Album and track metadata records and the rules for merging them
"""

from .merge import (
    apply_track_overrides,
    extract_track_index,
    fill_album_defaults,
    format_track_number,
    merge_track_metadata,
    resolve_track_metadata,
)
from .models import AlbumMetadata, FlatMetadata, PlaylistMetadata, TrackMetadata

__all__ = [
    'AlbumMetadata',
    'FlatMetadata',
    'PlaylistMetadata',
    'TrackMetadata',
    'apply_track_overrides',
    'extract_track_index',
    'fill_album_defaults',
    'format_track_number',
    'merge_track_metadata',
    'resolve_track_metadata',
]
