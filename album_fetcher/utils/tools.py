"""
External tool resolution

Locates the yt-dlp and ffmpeg executables either from explicit paths given
by the user (CLI options, settings, environment) or from the system PATH.
"""

import os
import shutil
from dataclasses import dataclass
from typing import Optional

from .exceptions import ToolNotFoundError


@dataclass(frozen=True)
class ToolPaths:
    """Resolved executable paths for the required tools"""
    yt_dlp: str
    ffmpeg: str


def is_executable(path: str) -> bool:
    """Check that ``path`` points to an existing file (not a directory)."""
    return os.path.exists(path) and not os.path.isdir(path)


def resolve_tool(name: str, explicit_path: Optional[str] = None) -> str:
    """
    Find a tool binary using the explicit path or system PATH

    Args:
        name: Executable name (``yt-dlp`` or ``ffmpeg``)
        explicit_path: User-supplied location, takes precedence when set

    Returns:
        Path to the executable

    Raises:
        ToolNotFoundError: If the tool cannot be found
    """
    if explicit_path and explicit_path.strip():
        explicit_path = os.path.expanduser(explicit_path.strip())
        if is_executable(explicit_path):
            return explicit_path
        raise ToolNotFoundError(
            f"{name} not found or not executable: {explicit_path}",
            details={'tool': name, 'path': explicit_path}
        )

    found = shutil.which(name)
    if found and is_executable(found):
        return found

    raise ToolNotFoundError(
        f"{name} not found on PATH. Install it or use --{name}-path to specify its location",
        details={'tool': name}
    )


def ensure_tools(yt_dlp_path: Optional[str] = None, ffmpeg_path: Optional[str] = None) -> ToolPaths:
    """
    Locate yt-dlp and ffmpeg

    Args:
        yt_dlp_path: Optional explicit yt-dlp location
        ffmpeg_path: Optional explicit ffmpeg location

    Returns:
        ToolPaths with both executables resolved
    """
    return ToolPaths(
        yt_dlp=resolve_tool('yt-dlp', yt_dlp_path),
        ffmpeg=resolve_tool('ffmpeg', ffmpeg_path),
    )
