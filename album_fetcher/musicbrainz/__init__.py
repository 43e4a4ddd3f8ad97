"""
MusicBrainz integration: API client, response models and metadata conversion
"""

from .client import MusicBrainzClient
from .converter import to_playlist_metadata
from .lookup import lookup_playlist_metadata
from .models import (
    Artist,
    ArtistCredit,
    CoverArt,
    CoverArtImage,
    Label,
    LabelInfo,
    Medium,
    Recording,
    Release,
    ReleaseGroup,
    SearchResult,
    Track,
    extract_year,
    format_length,
    get_artist_name,
)

__all__ = [
    'MusicBrainzClient',
    'to_playlist_metadata',
    'lookup_playlist_metadata',
    'Artist',
    'ArtistCredit',
    'CoverArt',
    'CoverArtImage',
    'Label',
    'LabelInfo',
    'Medium',
    'Recording',
    'Release',
    'ReleaseGroup',
    'SearchResult',
    'Track',
    'extract_year',
    'format_length',
    'get_artist_name',
]
