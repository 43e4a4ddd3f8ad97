"""
Batch processing of albums listed in a batch configuration file

Albums are processed one after another. A failure of one album (download,
tagging, or anything else raised as FetcherError) is recorded and the batch
moves on to the next album; the result lists which albums failed.

Albums configured with a MusicBrainz release ID or search query are looked
up first. The looked-up metadata replaces the manual values, which still
fill fields MusicBrainz left empty, and configured per-track values are laid
over the looked-up tracks. A failed lookup is only a warning: the album is
downloaded with its manual metadata.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from ..config.batch import AlbumConfig, BatchConfig
from ..metadata.merge import apply_track_overrides, fill_album_defaults
from ..metadata.models import PlaylistMetadata
from ..musicbrainz.client import MusicBrainzClient
from ..musicbrainz.lookup import lookup_playlist_metadata
from ..utils.exceptions import FetcherError
from ..utils.logger import get_logger
from .downloader import Downloader, DownloadRequest


logger = get_logger(__name__)

SEPARATOR = "━" * 60


@dataclass
class BatchResult:
    """
    Outcome of a batch run

    Attributes:
        total: Number of albums in the batch
        succeeded: Display names of albums downloaded and tagged
        failed: Display names of albums that failed
        errors: Error message per failed album, keyed by display name
    """
    total: int = 0
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.failed


def merge_lookup_metadata(looked_up: PlaylistMetadata, album_config: AlbumConfig) -> PlaylistMetadata:
    """
    Combine looked-up metadata with the manual values of an album entry

    Args:
        looked_up: Metadata from MusicBrainz
        album_config: Album entry with manual album and track values

    Returns:
        PlaylistMetadata with gaps filled from the entry and its track
        values overlaid
    """
    return PlaylistMetadata(
        album=fill_album_defaults(looked_up.album, album_config.manual_album()),
        tracks=apply_track_overrides(looked_up.tracks, album_config.manual_tracks())
    )


def build_album_request(
    album_config: AlbumConfig,
    client: Optional[MusicBrainzClient],
    default_output_dir: str,
    default_format: str
) -> DownloadRequest:
    """
    Build the download request of one album, looking up MusicBrainz if configured

    Lookup errors are logged as warnings and leave the manual metadata in place.
    """
    request = album_config.to_request(default_output_dir, default_format)

    if not album_config.needs_musicbrainz_lookup() or client is None:
        return request

    try:
        looked_up = lookup_playlist_metadata(
            client,
            musicbrainz_id=album_config.musicbrainz_id,
            query=album_config.auto_fetch
        )
    except FetcherError as e:
        logger.console_warning(f"⚠️  MusicBrainz lookup failed: {e}")
        logger.console_warning("    Continuing with manual metadata...")
        return request

    return replace(request, playlist=merge_lookup_metadata(looked_up, album_config))


def run_batch(
    batch_config: BatchConfig,
    downloader: Downloader,
    client: Optional[MusicBrainzClient] = None,
    default_output_dir: str = ".",
    default_format: str = "mp3",
    audio_quality: str = "0",
    yt_dlp_path: str = "yt-dlp",
    ffmpeg_path: str = "ffmpeg"
) -> BatchResult:
    """
    Download and tag every album of a batch configuration

    Args:
        batch_config: Parsed batch configuration
        downloader: Downloader used for every album
        client: MusicBrainz client for albums that request a lookup;
                None skips lookups
        default_output_dir: Directory for albums without ``output_dir``
        default_format: Audio format for albums without ``format``
        audio_quality: yt-dlp audio quality for all albums
        yt_dlp_path: Resolved yt-dlp executable
        ffmpeg_path: Resolved ffmpeg executable

    Returns:
        BatchResult summarizing successes and failures
    """
    albums = batch_config.albums
    result = BatchResult(total=len(albums))

    logger.console_info(f"🐢 Processing {len(albums)} album(s) from configuration...")

    for i, album_config in enumerate(albums, 1):
        header = f"Album {i}/{len(albums)}"
        if album_config.album:
            header += f": {album_config.album}"
        if album_config.artist:
            header += f" by {album_config.artist}"
        logger.console_info(SEPARATOR)
        logger.console_info(header)
        logger.console_info(SEPARATOR)

        name = album_config.display_name
        try:
            request = build_album_request(album_config, client, default_output_dir, default_format)
            request = replace(
                request,
                audio_quality=audio_quality,
                yt_dlp_path=yt_dlp_path,
                ffmpeg_path=ffmpeg_path
            )
            downloader.download(request)
        except FetcherError as e:
            logger.console_error(f"❌ Failed to download album: {e}")
            result.failed.append(name)
            result.errors[name] = str(e)
            continue

        result.succeeded.append(name)

    logger.console_info(SEPARATOR)
    logger.console_info(f"Batch complete: {len(result.succeeded)}/{result.total} albums successful")
    if result.failed:
        logger.console_info("Failed albums:")
        for name in result.failed:
            logger.console_info(f"  - {name}")

    return result
