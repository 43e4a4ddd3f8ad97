"""
Utility functions and helpers for album-fetcher
Common functions for URL checks, duration formatting and file handling
"""

from pathlib import Path
from typing import Union
from urllib.parse import urlparse


def is_valid_url(url: str) -> bool:
    """
    Check if string is a valid URL

    A value counts as a URL only when it has both a scheme and a host, so
    plain relative or absolute file paths are never mistaken for URLs.

    Args:
        url: URL string to validate

    Returns:
        True if valid URL
    """
    try:
        result = urlparse(url)
        return all([result.scheme, result.netloc])
    except ValueError:
        return False


def format_duration(seconds: Union[int, float]) -> str:
    """
    Format duration in seconds to human-readable string

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 0:
        return "0:00"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    else:
        return f"{minutes}:{secs:02d}"


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure directory exists, create if necessary

    Args:
        path: Directory path

    Returns:
        Path object
    """
    path_obj = Path(path)
    path_obj.mkdir(parents=True, exist_ok=True)
    return path_obj


def normalize_extension(format_name: str) -> str:
    """
    Get lower-case file extension for an audio format

    Args:
        format_name: Format name with or without leading dot (mp3, .FLAC)

    Returns:
        Extension with dot, or empty string for an empty format
    """
    name = format_name.strip().lstrip('.').lower()
    return f".{name}" if name else ""
