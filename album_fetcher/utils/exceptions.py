"""
Exception classes for album-fetcher.

This module defines all custom exceptions used throughout the application.
Each exception carries a human-readable message plus an optional ``details``
dictionary so that callers can log context without parsing strings.

Exception Hierarchy:
    FetcherError (base)
        ConfigError - Settings or batch configuration issues
        ValidationError - Invalid user input (missing URL, bad options)
        ToolNotFoundError - yt-dlp / ffmpeg could not be located
        CommandError - External command failed or could not be started
        DownloadError - Nothing downloaded or output directory unusable
        TaggingError - Metadata embedding aborted part way through
        CoverError - Cover art source missing or not downloadable
        MusicBrainzError - MusicBrainz / Cover Art Archive API issues
            NotFoundError - Requested resource does not exist
"""

from typing import List, Optional, Sequence


class FetcherError(Exception):
    """
    Base exception for all album-fetcher errors.

    All custom exceptions in this project inherit from this class, so the
    CLI and the batch runner can catch every expected failure with a single
    except clause.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (paths, URLs, ...).

    Example:
        try:
            downloader.download(request)
        except FetcherError as e:
            logger.error(f"Download failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description shown to the user.
            details: Optional dictionary containing additional context about
                     the error. Common keys include:
                     - 'url': Source URL involved in the error
                     - 'path': File or directory involved in the error
                     - 'original_error': Wrapped exception, if any
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(FetcherError):
    """
    Raised when there's an issue with a settings or batch configuration file.

    This is a CRITICAL error that stops the current command.

    Common causes:
        - Configuration file not found or unreadable
        - Invalid YAML syntax
        - No albums defined, or an album without a URL
    """
    pass


class ValidationError(FetcherError):
    """
    Raised when user input is invalid before any work starts.

    Example:
        raise ValidationError("url is required")
    """
    pass


class ToolNotFoundError(FetcherError):
    """Raised when yt-dlp or ffmpeg cannot be located."""
    pass


class CommandError(FetcherError):
    """
    Raised when an external command fails.

    The combined stdout/stderr of the process is kept verbatim so it can be
    shown to the user for diagnosis.

    Attributes:
        command: Executable that was run.
        returncode: Exit status, or None if the process never completed.
        output: Combined stdout and stderr of the process.
    """

    def __init__(
        self,
        message: str,
        command: str,
        returncode: Optional[int] = None,
        output: str = "",
        details: Optional[dict] = None
    ) -> None:
        super().__init__(message, details)
        self.command = command
        self.returncode = returncode
        self.output = output


class DownloadError(FetcherError):
    """
    Raised when a download request produced no usable result.

    Common causes:
        - Downloader exited cleanly but no new audio files appeared
        - Output directory could not be created or scanned
    """
    pass


class TaggingError(FetcherError):
    """
    Raised when tagging stops part way through the downloaded files.

    Files tagged before the failure stay on disk, so the error reports them
    alongside the file that failed.

    Attributes:
        failed_file: Relative path of the file whose tagging failed.
        processed: Relative paths tagged successfully before the failure.
        new_files: All files produced by the download.
    """

    def __init__(
        self,
        message: str,
        failed_file: str,
        processed: Sequence[str] = (),
        new_files: Sequence[str] = (),
        details: Optional[dict] = None
    ) -> None:
        super().__init__(message, details)
        self.failed_file = failed_file
        self.processed: List[str] = list(processed)
        self.new_files: List[str] = list(new_files)


class CoverError(FetcherError):
    """
    Raised when the cover art source cannot be used.

    This is a NON-CRITICAL error for downloads: files are tagged without
    embedded artwork.
    """
    pass


class MusicBrainzError(FetcherError):
    """
    Raised when a MusicBrainz or Cover Art Archive request fails.

    Attributes:
        status_code: HTTP status code, if a response was received.
        body: Raw response body, if a response was received.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: str = "",
        details: Optional[dict] = None
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
        self.body = body


class NotFoundError(MusicBrainzError):
    """
    Raised when the requested release, search result or artwork does not exist.

    Callers treat this as recoverable and fall back to manual metadata.
    """
    pass
