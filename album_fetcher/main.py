"""
Main CLI interface for album-fetcher

The CLI is built with Click and exposes:
- fetch: download one video or playlist and tag it
- batch: process every album of a YAML batch configuration
- example-config: print an example batch configuration
- doctor: check tools and configuration
"""

import sys
import click
import functools

from . import __version__
from .config.batch import example_config as get_example_config, load_batch_config
from .config.settings import SUPPORTED_FORMATS, get_settings, reload_settings
from .download.batch import run_batch
from .download.cover import CoverResolver
from .download.downloader import Downloader, DownloadRequest
from .download.runner import CommandRunner
from .metadata.merge import fill_album_defaults
from .metadata.models import AlbumMetadata, FlatMetadata, PlaylistMetadata
from .musicbrainz.client import MusicBrainzClient
from .musicbrainz.lookup import lookup_playlist_metadata
from .utils.exceptions import FetcherError, TaggingError
from .utils.logger import configure_from_settings, get_logger, get_current_log_file
from .utils.tools import ensure_tools, resolve_tool


# Initialize logging system from configuration settings
configure_from_settings()
logger = get_logger(__name__)


def print_banner():
    """Print application banner to console"""
    banner = """
╔═══════════════════════════════════════════════════════════════╗
║                         album-fetcher                         ║
║                                                               ║
║     Download albums from YouTube and tag them properly        ║
║                                                               ║
╚═══════════════════════════════════════════════════════════════╝
    """
    click.echo(click.style(banner, fg='green', bold=True))


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Application errors are printed in red and exit with status 1; Ctrl-C
    exits with status 130. A tagging failure also lists the files that were
    already tagged, since those stay on disk.

    Args:
        func: The CLI command function to wrap

    Returns:
        Wrapped function with error handling
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)
        except TaggingError as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            if e.processed:
                click.echo(f"Tagged before the failure: {', '.join(e.processed)}", err=True)
            sys.exit(1)
        except FetcherError as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
        except Exception as e:
            logger.exception(f"Unexpected error: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


def create_downloader(settings) -> Downloader:
    """Create a Downloader wired to the configured timeouts and User-Agent"""
    return Downloader(
        runner=CommandRunner(timeout=settings.tools.timeout),
        cover_resolver=CoverResolver(
            timeout=settings.network.request_timeout,
            user_agent=settings.network.user_agent
        )
    )


# Main CLI group - root command that all subcommands attach to
@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
@handle_error
def cli(ctx, version, verbose, config):
    """
    album-fetcher - Download audio from YouTube and tag it

    Downloads a video or playlist with yt-dlp, converts it to the chosen
    audio format and embeds album/track metadata and cover art with ffmpeg.
    Metadata comes from command-line options, a batch file, or MusicBrainz.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"album-fetcher v{__version__}")
        return

    if config:
        settings = reload_settings(config)
        configure_from_settings()
        click.echo(f"Loaded config: {config}")
    else:
        settings = get_settings()

    if verbose:
        ctx.obj['verbose'] = True
        settings.logging.level = 'DEBUG'
        configure_from_settings()
        logger.info("Verbose mode enabled")

    if ctx.invoked_subcommand is None:
        print_banner()
        click.echo(ctx.get_help())


@cli.command()
@click.argument('url')
@click.option('--output', '-o', type=click.Path(), help='Output directory')
@click.option('--cover', help='Path or URL to the cover image')
@click.option('--format', 'audio_format', type=click.Choice(SUPPORTED_FORMATS), help='Audio format')
@click.option('--title', default='', help='Track title')
@click.option('--artist', default='', help='Artist')
@click.option('--album', default='', help='Album title')
@click.option('--album-artist', default='', help='Album artist')
@click.option('--composer', default='', help='Composer')
@click.option('--year', default='', help='Release year')
@click.option('--genre', default='', help='Genre')
@click.option('--track', default='', help='Track number ("3" or "3/12")')
@click.option('--comment', default='', help='Comment')
@click.option('--musicbrainz-id', default='', help='MusicBrainz release ID to fetch metadata from')
@click.option('--auto-fetch-metadata', default='', help='Search MusicBrainz ("Artist - Album")')
@click.option('--yt-dlp-path', default='', help='Path to yt-dlp (searches PATH if not given)')
@click.option('--ffmpeg-path', default='', help='Path to ffmpeg (searches PATH if not given)')
@handle_error
def fetch(url, output, cover, audio_format, title, artist, album, album_artist, composer,
          year, genre, track, comment, musicbrainz_id, auto_fetch_metadata, yt_dlp_path, ffmpeg_path):
    """
    Download a video or playlist and tag the audio files

    Examples:

      album-fetch fetch "https://youtube.com/watch?v=VIDEO_ID" -o ./music \\
        --artist "Black Kids" --album "Partie Traumatic" --year 2008

      album-fetch fetch "https://youtube.com/playlist?list=..." \\
        --auto-fetch-metadata "Black Kids - Partie Traumatic"
    """
    settings = get_settings()

    tools = ensure_tools(
        yt_dlp_path or settings.tools.yt_dlp_path,
        ffmpeg_path or settings.tools.ffmpeg_path
    )

    request = DownloadRequest(
        url=url,
        output_dir=output or str(settings.get_output_directory()),
        cover=cover or "",
        audio_format=audio_format or settings.download.format,
        audio_quality=str(settings.download.quality),
        yt_dlp_path=tools.yt_dlp,
        ffmpeg_path=tools.ffmpeg,
        metadata=FlatMetadata(
            title=title,
            artist=artist,
            album=album,
            album_artist=album_artist,
            composer=composer,
            year=year,
            genre=genre,
            track=track,
            comment=comment
        )
    )

    if musicbrainz_id or auto_fetch_metadata:
        client = MusicBrainzClient.from_settings(settings.network)
        try:
            playlist = lookup_playlist_metadata(client, musicbrainz_id=musicbrainz_id, query=auto_fetch_metadata)
        except FetcherError as e:
            logger.console_warning(f"⚠️  MusicBrainz lookup failed: {e}")
            logger.console_warning("    Continuing without MusicBrainz metadata...")
        else:
            manual = AlbumMetadata(
                title=album,
                artist=artist,
                album_artist=album_artist,
                year=year,
                genre=genre,
                cover=cover or "",
                comment=comment
            )
            request.playlist = PlaylistMetadata(
                album=fill_album_defaults(playlist.album, manual),
                tracks=playlist.tracks
            )
            found = request.playlist.album
            click.echo(f"🎵 Found: {found.artist} - {found.title} ({found.year})")
            click.echo(f"   {len(request.playlist.tracks)} tracks\n")

    files = create_downloader(settings).download(request)
    click.echo(click.style(f"\nDone: {len(files)} file(s) in {request.output_dir}", fg='green'))


@cli.command()
@click.argument('config_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(), help='Default output directory')
@click.option('--format', 'audio_format', type=click.Choice(SUPPORTED_FORMATS), help='Default audio format')
@click.option('--yt-dlp-path', default='', help='Path to yt-dlp (searches PATH if not given)')
@click.option('--ffmpeg-path', default='', help='Path to ffmpeg (searches PATH if not given)')
@handle_error
def batch(config_file, output, audio_format, yt_dlp_path, ffmpeg_path):
    """
    Download every album listed in a YAML batch file

    Albums are processed one at a time; a failed album is reported and the
    batch continues. Exits with status 1 if any album failed.
    """
    settings = get_settings()
    batch_config = load_batch_config(config_file)

    tools = ensure_tools(
        yt_dlp_path or settings.tools.yt_dlp_path,
        ffmpeg_path or settings.tools.ffmpeg_path
    )

    result = run_batch(
        batch_config,
        create_downloader(settings),
        client=MusicBrainzClient.from_settings(settings.network),
        default_output_dir=output or str(settings.get_output_directory()),
        default_format=audio_format or settings.download.format,
        audio_quality=str(settings.download.quality),
        yt_dlp_path=tools.yt_dlp,
        ffmpeg_path=tools.ffmpeg
    )

    if not result.success:
        click.echo(click.style(f"\n{len(result.failed)} album(s) failed", fg='red'), err=True)
        sys.exit(1)

    click.echo(click.style(f"\nAll {result.total} album(s) completed", fg='green'))


@cli.command('example-config')
def example_config():
    """Print an example batch configuration file"""
    click.echo(get_example_config(), nl=False)


@cli.command()
@handle_error
def doctor():
    """
    Run system diagnostics

    Checks that yt-dlp and ffmpeg can be found and that the configuration
    is valid.
    """
    click.echo("Running diagnostics...\n")

    issues = []
    settings = get_settings()

    for name, configured in (('yt-dlp', settings.tools.yt_dlp_path), ('ffmpeg', settings.tools.ffmpeg_path)):
        try:
            path = resolve_tool(name, configured)
            click.echo(f"{name}: {path}")
        except FetcherError as e:
            click.echo(f"{name}: Not found")
            issues.append(str(e))

    for problem in settings.validate():
        issues.append(problem)

    output_dir = settings.get_output_directory()
    if output_dir.exists() and output_dir.is_dir():
        click.echo(f"Output directory: {output_dir}")
    else:
        click.echo(f"Output directory: {output_dir} (will be created)")

    click.echo(f"Audio: {settings.download.format} @ quality {settings.download.quality}")
    click.echo(f"MusicBrainz: {settings.network.musicbrainz_url}")

    current_log = get_current_log_file()
    if current_log:
        click.echo(f"Logging: {current_log}")
    else:
        click.echo("Logging: Console only")

    if issues:
        click.echo(f"\nFound {len(issues)} issues:")
        for issue in issues:
            click.echo(f"   • {issue}")
        sys.exit(1)

    click.echo("\nAll systems operational!")


# Entry point for module execution
if __name__ == '__main__':
    cli()
