"""
Configuration management for album-fetcher

This module handles loading, validation, and management of application settings
from YAML files and environment variables. It provides one settings object
shared by the CLI, the downloader, the MusicBrainz client and logging.

The configuration is organized into logical sections using dataclasses:
- Download preferences (output directory, audio format, quality)
- External tool locations (yt-dlp, ffmpeg) and subprocess timeout
- Network settings for MusicBrainz and the Cover Art Archive
- Logging output

Tool paths and the output directory can be overridden from environment
variables (optionally loaded from a .env file), which take precedence over
values from YAML files.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, asdict
from dotenv import load_dotenv

from ..utils.exceptions import ConfigError

# Load environment variables from .env file if present
load_dotenv()


SUPPORTED_FORMATS = ['mp3', 'm4a', 'flac', 'ogg', 'opus', 'wav']


@dataclass
class DownloadConfig:
    """
    Download configuration settings and preferences

    Controls where downloaded audio lands and how yt-dlp extracts it.
    ``quality`` is passed verbatim to ``--audio-quality`` (0 = best VBR,
    10 = worst, or an explicit bitrate such as ``320K``).
    """
    output_directory: str = "."
    format: str = "mp3"
    quality: str = "0"


@dataclass
class ToolsConfig:
    """
    External tool configuration

    Empty paths mean "search PATH". ``timeout`` (seconds) bounds each
    subprocess; None lets yt-dlp and ffmpeg run to completion.
    """
    yt_dlp_path: str = ""
    ffmpeg_path: str = ""
    timeout: Optional[int] = None


@dataclass
class NetworkConfig:
    """
    Network and HTTP configuration settings

    MusicBrainz requires a descriptive User-Agent and asks clients to stay
    at or below one request per second.
    """
    user_agent: str = "album-fetcher/1.0 (https://github.com/album-fetcher/album-fetcher)"
    request_timeout: int = 30
    rate_limit_delay: float = 1.0
    musicbrainz_url: str = "https://musicbrainz.org/ws/2"
    coverart_url: str = "https://coverartarchive.org"


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings

    Console output only shows user-facing messages; the optional log file
    receives full technical detail with rotation.
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


class Settings:
    """
    Main settings class that manages all configuration

    Loads settings from the first YAML file found, then applies environment
    variable overrides. Sections are plain dataclasses so the rest of the
    application reads them as attributes (``settings.download.format``).
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file and environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations

        Raises:
            ConfigError: If an explicitly given config file cannot be loaded
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".album-fetcher"

        self.download = DownloadConfig()
        self.tools = ToolsConfig()
        self.network = NetworkConfig()
        self.logging = LoggingConfig()

        self._load_config()
        self._load_environment_variables()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file

        Searches for configuration files in order of precedence and uses the
        first one found. A broken file at a default location only produces a
        warning; a broken file the user asked for is an error.
        """
        if self.config_path:
            path = Path(self.config_path).expanduser()
            if not path.exists():
                raise ConfigError(
                    f"Config file not found: {path}",
                    details={'path': str(path)}
                )
            self._apply_config(self._read_yaml(path))
            return

        config_paths = [
            self.config_dir / "config.yaml",
            Path("config/config.yaml"),
            Path("config.yaml")
        ]

        for path in config_paths:
            if path.exists():
                try:
                    self._apply_config(self._read_yaml(path))
                except ConfigError as e:
                    print(f"Warning: {e}")
                break

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        """Read a YAML mapping from ``path``."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(
                f"Failed to load config from {path}: {e}",
                details={'path': str(path), 'original_error': e}
            ) from e

        if not isinstance(data, dict):
            raise ConfigError(
                f"Config file {path} must contain a mapping",
                details={'path': str(path)}
            )
        return data

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Only keys that exist on the matching dataclass are applied; unknown
        sections and keys are ignored.

        Args:
            config_data: Dictionary containing configuration sections
        """
        config_mapping = {
            'download': self.download,
            'tools': self.tools,
            'network': self.network,
            'logging': self.logging,
        }

        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _load_environment_variables(self) -> None:
        """Apply environment variable overrides."""
        env_mappings = {
            'ALBUM_FETCHER_OUTPUT_DIR': lambda v: setattr(self.download, 'output_directory', v),
            'ALBUM_FETCHER_FORMAT': lambda v: setattr(self.download, 'format', v),
            'YT_DLP_PATH': lambda v: setattr(self.tools, 'yt_dlp_path', v),
            'FFMPEG_PATH': lambda v: setattr(self.tools, 'ffmpeg_path', v),
            'MUSICBRAINZ_USER_AGENT': lambda v: setattr(self.network, 'user_agent', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                setter(value)

    def get_output_directory(self) -> Path:
        """
        Get the expanded output directory path

        Returns:
            Path object for the output directory
        """
        return Path(self.download.output_directory).expanduser()

    def get_config_directory(self) -> Path:
        """
        Get the expanded config directory path

        Returns:
            Path object for the configuration directory
        """
        return self.config_dir.expanduser()

    def to_dict(self) -> Dict[str, Any]:
        """Return all sections as plain dictionaries."""
        return {
            'download': asdict(self.download),
            'tools': asdict(self.tools),
            'network': asdict(self.network),
            'logging': asdict(self.logging),
        }

    def validate(self) -> List[str]:
        """
        Validate current configuration

        Returns:
            List of human-readable problems, empty when the configuration is valid
        """
        errors = []

        if str(self.download.format).lower().lstrip('.') not in SUPPORTED_FORMATS:
            errors.append(
                f"Invalid download format: {self.download.format}. "
                f"Valid formats: {', '.join(SUPPORTED_FORMATS)}"
            )

        if not str(self.download.quality).strip():
            errors.append("Audio quality cannot be empty")

        if self.network.request_timeout <= 0:
            errors.append(f"Invalid request timeout: {self.network.request_timeout}")

        if self.network.rate_limit_delay < 0:
            errors.append(f"Invalid rate limit delay: {self.network.rate_limit_delay}")

        if self.tools.timeout is not None and self.tools.timeout <= 0:
            errors.append(f"Invalid tool timeout: {self.tools.timeout}")

        return errors

    def __str__(self) -> str:
        sections = [
            f"Download: {self.download.format} @ quality {self.download.quality}",
            f"Output: {self.download.output_directory}",
            f"Rate limit: {self.network.rate_limit_delay}s",
        ]
        return f"Settings({', '.join(sections)})"


# Global settings instance for singleton pattern
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance

    The instance is created on first use so importing this module never
    touches configuration files.

    Returns:
        The global Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global _settings
    _settings = Settings(config_path)
    return _settings
