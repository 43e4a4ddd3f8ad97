# album_fetcher/utils/__init__.py
"""
Utilities package
Logging, exceptions, tool resolution and small helper functions
"""

from .exceptions import (
    FetcherError,
    ConfigError,
    ValidationError,
    ToolNotFoundError,
    CommandError,
    DownloadError,
    TaggingError,
    CoverError,
    MusicBrainzError,
    NotFoundError
)
from .helpers import (
    is_valid_url,
    format_duration,
    ensure_directory,
    normalize_extension
)
from .tools import ToolPaths, ensure_tools, resolve_tool

__all__ = [
    # Exceptions
    'FetcherError',
    'ConfigError',
    'ValidationError',
    'ToolNotFoundError',
    'CommandError',
    'DownloadError',
    'TaggingError',
    'CoverError',
    'MusicBrainzError',
    'NotFoundError',

    # Helper exports
    'is_valid_url',
    'format_duration',
    'ensure_directory',
    'normalize_extension',

    # Tool resolution
    'ToolPaths',
    'ensure_tools',
    'resolve_tool',
]
