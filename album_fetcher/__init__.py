"""
album-fetcher: download audio from YouTube and tag it as a proper album

yt-dlp downloads a video or playlist as audio files, then ffmpeg embeds
album and track metadata plus cover art into every file the download
produced. Metadata comes from command-line options, a YAML batch file or a
MusicBrainz release lookup.

Packages:
- config: settings (YAML, environment) and batch configuration files
- download: the download/tag pipeline and batch processing
- metadata: metadata records and merge rules
- musicbrainz: MusicBrainz and Cover Art Archive client
- utils: logging, exceptions, tool resolution, helpers
"""

__version__ = "1.0.0"
