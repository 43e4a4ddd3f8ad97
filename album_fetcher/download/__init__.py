"""
Download pipeline: yt-dlp download, snapshot diff, cover art and ffmpeg tagging
"""

from .cover import CoverResolver
from .downloader import Downloader, DownloadRequest, build_ytdlp_args
from .runner import CommandRunner
from .snapshot import diff_files, snapshot_files
from .tagger import Tagger, build_ffmpeg_args, supports_cover

__all__ = [
    'CoverResolver',
    'Downloader',
    'DownloadRequest',
    'build_ytdlp_args',
    'CommandRunner',
    'diff_files',
    'snapshot_files',
    'Tagger',
    'build_ffmpeg_args',
    'supports_cover',
]
