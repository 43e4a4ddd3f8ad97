"""
Metadata embedding with ffmpeg

Tags are written by remuxing each file with ffmpeg: audio is stream-copied,
``-metadata`` pairs set the tags, and an optional cover image is attached as
a picture stream. ffmpeg writes to a separate ``.tagged`` file which
replaces the original only after ffmpeg succeeded, so a failed run never
leaves a half-written audio file behind.
"""

import os
from typing import List, Optional

from ..metadata.models import FlatMetadata
from ..utils.logger import get_logger
from .runner import CommandRunner


TAGGED_SUFFIX = ".tagged"

# ffmpeg muxer for each audio format; the ".tagged" output name carries no
# usable extension, so the muxer is always given explicitly
OUTPUT_MUXERS = {
    'mp3': 'mp3',
    'm4a': 'ipod',
    'flac': 'flac',
    'ogg': 'ogg',
    'opus': 'ogg',
    'wav': 'wav',
}

# Formats whose muxer accepts an attached picture stream
COVER_FORMATS = frozenset({'mp3', 'm4a', 'flac'})


def supports_cover(audio_format: str) -> bool:
    """Check whether cover art can be embedded in ``audio_format`` files"""
    return audio_format.lower().lstrip('.') in COVER_FORMATS


def build_ffmpeg_args(
    input_path: str,
    output_path: str,
    metadata: FlatMetadata,
    cover_path: Optional[str] = None,
    audio_format: str = "mp3"
) -> List[str]:
    """
    Build ffmpeg arguments that copy the audio and write tags

    Args:
        input_path: Audio file to read
        output_path: File to write
        metadata: Tag values, empty fields are skipped
        cover_path: Optional image to attach as front cover, ignored for
                    formats that cannot carry artwork (wav, ogg, opus)
        audio_format: Audio format of the file (selects the output muxer)

    Returns:
        Argument list (without the ffmpeg executable)
    """
    audio_format = audio_format.lower().lstrip('.')
    has_cover = bool(cover_path and cover_path.strip()) and supports_cover(audio_format)

    args = ["-y", "-i", input_path]
    if has_cover:
        args += ["-i", cover_path]

    args += ["-map", "0:a"]
    if has_cover:
        args += [
            "-map", "1",
            "-c:a", "copy",
            "-c:v", "mjpeg",
            "-metadata:s:v", "title=Album cover",
            "-metadata:s:v", "comment=Cover (front)",
            "-disposition:v:0", "attached_pic",
        ]
    else:
        args += ["-c", "copy"]

    for key, value in metadata.tags():
        args += ["-metadata", f"{key}={value}"]

    if audio_format == 'mp3':
        args += ["-id3v2_version", "3"]

    args += ["-f", OUTPUT_MUXERS.get(audio_format, audio_format), output_path]
    return args


class Tagger:
    """Embed metadata into audio files in place using ffmpeg"""

    def __init__(self, runner: CommandRunner, ffmpeg_path: str = "ffmpeg"):
        self.runner = runner
        self.ffmpeg_path = ffmpeg_path
        self.logger = get_logger(__name__)

    def apply(
        self,
        file_path: str,
        metadata: FlatMetadata,
        cover_path: Optional[str] = None,
        audio_format: str = "mp3"
    ) -> None:
        """
        Write ``metadata`` (and cover) into ``file_path``

        Raises:
            CommandError: If ffmpeg fails; the original file is left untouched
            OSError: If the tagged file cannot replace the original
        """
        temp_path = file_path + TAGGED_SUFFIX
        if os.path.exists(temp_path):
            os.remove(temp_path)

        args = build_ffmpeg_args(file_path, temp_path, metadata, cover_path, audio_format)
        try:
            self.runner.run(self.ffmpeg_path, args)
            os.replace(temp_path, file_path)
        finally:
            if os.path.exists(temp_path):
                os.remove(temp_path)

        self.logger.debug(f"Tagged {os.path.basename(file_path)}: {dict(metadata.tags())}")
