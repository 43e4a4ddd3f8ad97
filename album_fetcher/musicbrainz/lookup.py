"""
Release lookup: resolve an ID or "Artist - Album" query to playlist metadata
"""

from typing import Optional

from ..metadata.models import PlaylistMetadata
from ..utils.exceptions import MusicBrainzError, NotFoundError, ValidationError
from ..utils.logger import get_logger
from .client import MusicBrainzClient
from .converter import to_playlist_metadata


logger = get_logger(__name__)


def lookup_playlist_metadata(
    client: MusicBrainzClient,
    musicbrainz_id: Optional[str] = None,
    query: Optional[str] = None,
    with_cover: bool = True
) -> PlaylistMetadata:
    """
    Look up a release and convert it to PlaylistMetadata

    A release ID is fetched directly. Otherwise ``query`` ("Artist - Album"
    or free text) is searched and the best hit is fetched in full. The front
    cover URL is added when the Cover Art Archive has one; cover lookup
    failures only leave the cover empty.

    Args:
        client: MusicBrainz client
        musicbrainz_id: Release ID, takes precedence over ``query``
        query: Search string used when no ID is given
        with_cover: Whether to look up the front cover URL

    Returns:
        PlaylistMetadata of the release

    Raises:
        ValidationError: If neither an ID nor a query is given
        NotFoundError: If the release does not exist or the search is empty
        MusicBrainzError: On other API failures
    """
    musicbrainz_id = (musicbrainz_id or "").strip()
    query = (query or "").strip()

    if musicbrainz_id:
        release_id = musicbrainz_id
    elif query:
        result = client.auto_search(query)
        if not result.releases:
            raise NotFoundError(f"no MusicBrainz release found for '{query}'", details={'query': query})
        best = result.releases[0]
        logger.info(f"Best MusicBrainz match for '{query}': {best.artist_name} - {best.title} ({best.id})")
        release_id = best.id
    else:
        raise ValidationError("a MusicBrainz release ID or search query is required")

    release = client.get_release(release_id)

    cover_url = ""
    if with_cover:
        try:
            cover_url = client.get_front_cover_url(release.id or release_id)
        except MusicBrainzError as e:
            logger.debug(f"No cover art for release {release_id}: {e}")

    metadata = to_playlist_metadata(release, cover_url)
    logger.console_info(
        f"🔎 MusicBrainz: {metadata.album.artist} - {metadata.album.title} "
        f"({len(metadata.tracks)} tracks)"
    )
    return metadata
