"""
Download orchestration: fetch audio with yt-dlp, then tag it with ffmpeg

This module sequences one download request from URL to tagged files:

1. Validate the request (a source URL is required)
2. Snapshot the output directory for files of the target audio format
3. Run yt-dlp to download and extract audio for the URL (video or playlist)
4. Snapshot again; the difference is the set of files this run produced
5. Resolve the cover art source (looked-up album cover, else the request's)
6. Tag each new file in sorted order with its merged metadata
7. Return the sorted list of new files

Failure Semantics:
- Steps 1-4 are fatal for the request and produce no tagged output
- A cover that cannot be resolved is only a warning; files are tagged
  without artwork
- A tagging failure stops the remaining files and raises TaggingError that
  lists the files already tagged, which stay on disk

yt-dlp is told to prefix each file with its playlist index
("<index> - <title>.<ext>") so that files can be matched to track metadata
afterwards; see ``metadata.merge.resolve_track_metadata``.
"""

import os
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import List, Optional

from ..metadata.merge import resolve_track_metadata
from ..metadata.models import FlatMetadata, PlaylistMetadata
from ..utils.exceptions import CommandError, CoverError, DownloadError, TaggingError, ValidationError
from ..utils.helpers import ensure_directory, normalize_extension
from ..utils.logger import get_logger, OperationLogger
from .cover import CoverResolver
from .runner import CommandRunner
from .snapshot import FileSet, diff_files, snapshot_files
from .tagger import Tagger, supports_cover


OUTPUT_TEMPLATE = "%(playlist_index|0)s - %(title)s.%(ext)s"


@dataclass
class DownloadRequest:
    """
    Parameters for one download run

    Attributes:
        url: Video or playlist URL
        output_dir: Directory receiving the audio files
        cover: Cover source (local path or URL) used when the playlist
               metadata carries none
        audio_format: Target audio format / file extension
        audio_quality: yt-dlp ``--audio-quality`` value
        yt_dlp_path: yt-dlp executable
        ffmpeg_path: ffmpeg executable
        metadata: Flat tags applied to every file when there is no playlist
        playlist: Album and per-track metadata, matched to files by index
    """
    url: str
    output_dir: str = "."
    cover: str = ""
    audio_format: str = "mp3"
    audio_quality: str = "0"
    yt_dlp_path: str = "yt-dlp"
    ffmpeg_path: str = "ffmpeg"
    metadata: FlatMetadata = field(default_factory=FlatMetadata)
    playlist: Optional[PlaylistMetadata] = None


def build_ytdlp_args(url: str, output_dir: str, audio_format: str, audio_quality: str = "0") -> List[str]:
    """
    Build yt-dlp arguments for audio-only playlist download

    The output template embeds the playlist index so that per-track
    metadata can be matched to files later. Single videos get index 0.

    Args:
        url: Video or playlist URL
        output_dir: Target directory
        audio_format: Audio format for ``--audio-format``
        audio_quality: ``--audio-quality`` value (0 = best)

    Returns:
        Argument list (without the yt-dlp executable)
    """
    template = os.path.join(output_dir, OUTPUT_TEMPLATE)
    return [
        "--extract-audio",
        "--audio-format", audio_format,
        "--audio-quality", audio_quality,
        "--prefer-ffmpeg",
        "--yes-playlist",
        "--ignore-errors",
        "--no-continue",
        "--newline",
        "-o", template,
        url,
    ]


class Downloader:
    """
    Orchestrates yt-dlp downloads and ffmpeg tagging for download requests

    The runner and cover resolver are injectable so that tests can replace
    external processes and HTTP downloads with fakes.
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        cover_resolver: Optional[CoverResolver] = None
    ):
        self.runner = runner or CommandRunner()
        self.cover_resolver = cover_resolver or CoverResolver()
        self.logger = get_logger(__name__)

    def download(self, request: DownloadRequest) -> List[str]:
        """
        Download audio for ``request.url``, tag it, and report the new files

        Args:
            request: Download parameters

        Returns:
            Sorted relative paths (below ``request.output_dir``) of the new files

        Raises:
            ValidationError: If the URL is empty
            DownloadError: If the output directory is unusable or nothing new
                           was downloaded
            CommandError: If yt-dlp fails
            TaggingError: If tagging a file fails
        """
        if not request.url or not request.url.strip():
            raise ValidationError("url is required")

        output_dir = request.output_dir or "."
        audio_format = normalize_extension(request.audio_format or "mp3").lstrip('.') or "mp3"

        try:
            ensure_directory(output_dir)
        except OSError as e:
            raise DownloadError(f"create output dir: {e}", details={'path': output_dir}) from e

        before = self._snapshot(output_dir, audio_format)

        self.logger.console_info(f"🎧 Fetching audio from {request.url}")
        args = build_ytdlp_args(request.url.strip(), output_dir, audio_format, request.audio_quality or "0")
        try:
            self.runner.run(request.yt_dlp_path, args)
        except CommandError:
            self.logger.console_error("❌ Download failed")
            raise

        after = self._snapshot(output_dir, audio_format)
        new_files = diff_files(before, after)
        if not new_files:
            raise DownloadError(
                "no new audio files found after download",
                details={'url': request.url, 'output_dir': output_dir}
            )

        self.logger.console_info(f"✅ Downloaded {len(new_files)} file(s)")
        for name in new_files:
            self.logger.console_info(f"   • {name}")

        cover_source = request.cover
        if request.playlist is not None and request.playlist.album.cover:
            cover_source = request.playlist.album.cover

        if cover_source and not supports_cover(audio_format):
            self.logger.warning(f"⚠️  {audio_format} files cannot carry cover art; tagging without it")
            cover_source = ""

        with ExitStack() as stack:
            try:
                cover_path = stack.enter_context(self.cover_resolver.prepare(cover_source))
            except CoverError as e:
                self.logger.warning(f"⚠️  Cover preparation failed: {e}")
                cover_path = None

            has_metadata = (
                not request.metadata.is_empty()
                or cover_path is not None
                or request.playlist is not None
            )
            if has_metadata:
                self._tag_files(request, output_dir, audio_format, new_files, cover_path)
            else:
                self.logger.debug("No metadata or cover to apply; skipping tagging")

        self.logger.console_info(f"🎵 Successfully processed {len(new_files)} file(s)")
        return new_files

    def _snapshot(self, output_dir: str, audio_format: str) -> FileSet:
        try:
            return snapshot_files(output_dir, audio_format)
        except OSError as e:
            raise DownloadError(f"scan output dir: {e}", details={'path': output_dir}) from e

    @staticmethod
    def _warn_on_track_mismatch(
        operation: OperationLogger,
        playlist: Optional[PlaylistMetadata],
        new_files: List[str]
    ) -> None:
        if playlist is None or not playlist.tracks:
            return
        if len(playlist.tracks) != len(new_files):
            operation.warning(
                f"Downloaded {len(new_files)} file(s) but metadata lists "
                f"{len(playlist.tracks)} track(s); check that tags matched the right files"
            )

    def _tag_files(
        self,
        request: DownloadRequest,
        output_dir: str,
        audio_format: str,
        new_files: List[str],
        cover_path: Optional[str]
    ) -> None:
        tagger = Tagger(self.runner, request.ffmpeg_path)
        operation = OperationLogger(self.logger, "Tagging")
        operation.start("🏷️  Embedding tags and cover art")
        self._warn_on_track_mismatch(operation, request.playlist, new_files)

        processed: List[str] = []
        for i, name in enumerate(new_files):
            operation.progress(os.path.basename(name), i, len(new_files))

            if request.playlist is not None:
                metadata = resolve_track_metadata(request.playlist, name, i)
            else:
                metadata = request.metadata

            try:
                tagger.apply(os.path.join(output_dir, name), metadata, cover_path, audio_format)
            except (CommandError, OSError) as e:
                operation.error(f"{name}: {e}", e)
                raise TaggingError(
                    f"failed to tag {name}: {e}",
                    failed_file=name,
                    processed=processed,
                    new_files=new_files,
                    details={'original_error': e}
                ) from e
            processed.append(name)

        operation.progress("done", len(new_files), len(new_files))
        operation.complete(f"✅ Metadata applied to {len(processed)} file(s)")
