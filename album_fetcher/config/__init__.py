"""
Configuration management package for album-fetcher

Two kinds of configuration live here:

1. Application settings (settings.py):
   - Output directory, audio format and quality defaults
   - External tool locations and subprocess timeout
   - MusicBrainz network settings and logging options

2. Batch configuration files (batch.py):
   - Declarative list of albums to download and tag
   - Imported directly as ``album_fetcher.config.batch`` because it builds
     download requests and so depends on the download package

Usage:

    from album_fetcher.config import get_settings

    settings = get_settings()
"""

from .settings import get_settings, reload_settings, Settings, SUPPORTED_FORMATS

__all__ = [
    'get_settings',
    'reload_settings',
    'Settings',
    'SUPPORTED_FORMATS',
]
