"""Test configuration and fixtures"""

import os
import pytest
import tempfile
from pathlib import Path
from unittest.mock import Mock

from album_fetcher.utils.exceptions import CommandError


class FakeRunner:
    """
    Stand-in for CommandRunner that simulates yt-dlp and ffmpeg on disk

    yt-dlp calls create ``download_files`` in the directory of the ``-o``
    template. ffmpeg calls copy the input file to the output path (the last
    argument) with a marker line, unless the input's base name is listed in
    ``fail_on``.
    """

    def __init__(self, download_files=(), fail_download=False, fail_on=()):
        self.download_files = list(download_files)
        self.fail_download = fail_download
        self.fail_on = set(fail_on)
        self.calls = []

    def run(self, command, args):
        args = list(args)
        self.calls.append((command, args))

        if 'ffmpeg' in os.path.basename(command):
            return self._tag(command, args)
        return self._download(command, args)

    def _download(self, command, args):
        if self.fail_download:
            raise CommandError(
                f"{command} failed: exit status 1 (output: ERROR: unavailable)",
                command=command,
                returncode=1,
                output="ERROR: unavailable"
            )
        template = args[args.index('-o') + 1]
        output_dir = os.path.dirname(template)
        for name in self.download_files:
            path = os.path.join(output_dir, name)
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                f.write(f"audio:{name}\n")
        return "[download] done\n"

    def _tag(self, command, args):
        input_path = args[args.index('-i') + 1]
        output_path = args[-1]
        if os.path.basename(input_path) in self.fail_on:
            raise CommandError(
                f"{command} failed: exit status 1 (output: Invalid data)",
                command=command,
                returncode=1,
                output="Invalid data"
            )
        with open(input_path, 'r', encoding='utf-8') as src, open(output_path, 'w', encoding='utf-8') as dst:
            dst.write(src.read())
            dst.write("tagged\n")
        return ""

    @property
    def ffmpeg_calls(self):
        return [args for command, args in self.calls if 'ffmpeg' in os.path.basename(command)]

    @property
    def download_calls(self):
        return [args for command, args in self.calls if 'ffmpeg' not in os.path.basename(command)]


def metadata_args(args):
    """Collect the ``-metadata key=value`` pairs of an ffmpeg argument list"""
    tags = {}
    for i, arg in enumerate(args[:-1]):
        if arg == '-metadata':
            key, _, value = args[i + 1].partition('=')
            tags[key] = value
    return tags


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def fake_runner():
    """Runner that downloads two playlist entries"""
    return FakeRunner(download_files=["1 - track1.mp3", "2 - track2.mp3"])


@pytest.fixture
def mock_settings():
    """Mock settings for testing"""
    settings = Mock()
    settings.download.output_directory = "~/test_music"
    settings.download.format = "mp3"
    settings.download.quality = "0"
    settings.tools.yt_dlp_path = ""
    settings.tools.ffmpeg_path = ""
    settings.tools.timeout = None
    settings.network.user_agent = "album-fetcher-tests/1.0"
    settings.network.request_timeout = 5
    settings.network.rate_limit_delay = 0
    return settings


@pytest.fixture
def sample_release_data():
    """Release document as returned by /ws/2/release/<id> with recordings"""
    return {
        'id': 'f1c2d3e4-0000-4000-8000-000000000001',
        'title': 'Partie Traumatic',
        'status': 'Official',
        'date': '2008-07-08',
        'country': 'US',
        'barcode': '602517739130',
        'artist-credit': [
            {'name': 'Black Kids', 'joinphrase': '', 'artist': {'id': 'a1', 'name': 'Black Kids', 'sort-name': 'Black Kids'}}
        ],
        'label-info': [
            {'catalog-number': 'B0011532-02', 'label': {'id': 'l1', 'name': 'Almost Gold'}}
        ],
        'release-group': {'id': 'rg1', 'title': 'Partie Traumatic', 'primary-type': 'Album'},
        'media': [
            {
                'position': 1,
                'format': 'CD',
                'tracks': [
                    {
                        'id': 't1', 'number': '1', 'position': 1, 'title': 'Hit the Heartbrakes', 'length': 215000,
                        'recording': {
                            'id': 'r1', 'title': 'Hit the Heartbrakes', 'length': 215000, 'isrcs': ['USUM70812345'],
                            'artist-credit': [{'name': 'Black Kids', 'joinphrase': '', 'artist': {'id': 'a1', 'name': 'Black Kids'}}]
                        }
                    },
                    {
                        'id': 't2', 'number': '2', 'position': 2, 'title': 'Partie Traumatic', 'length': 185500,
                        'recording': {
                            'id': 'r2', 'title': 'Partie Traumatic (album version)', 'length': 185500, 'isrcs': [],
                            'artist-credit': [
                                {'name': 'Black Kids', 'joinphrase': ' feat. ', 'artist': {'id': 'a1', 'name': 'Black Kids'}},
                                {'name': '', 'joinphrase': '', 'artist': {'id': 'a2', 'name': 'Guest'}}
                            ]
                        }
                    },
                    {
                        'id': 't3', 'number': '3', 'position': 3, 'title': 'Hurricane Jane', 'length': None,
                        'recording': None
                    }
                ]
            }
        ]
    }


@pytest.fixture
def sample_cover_art_data():
    """Cover Art Archive listing for a release"""
    return {
        'release': 'https://musicbrainz.org/release/f1c2d3e4-0000-4000-8000-000000000001',
        'images': [
            {
                'id': 1, 'image': 'https://coverartarchive.org/release/x/1.jpg', 'front': False, 'back': True,
                'types': ['Back'], 'approved': True,
                'thumbnails': {'250': 'https://coverartarchive.org/release/x/1-250.jpg'}
            },
            {
                'id': 2, 'image': 'https://coverartarchive.org/release/x/2.jpg', 'front': True, 'back': False,
                'types': ['Front'], 'approved': True,
                'thumbnails': {
                    '500': 'https://coverartarchive.org/release/x/2-500.jpg',
                    '1200': 'https://coverartarchive.org/release/x/2-1200.jpg'
                }
            }
        ]
    }


def make_response(status_code=200, json_data=None, text="", content=b""):
    """Build a mock requests.Response"""
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.content = content
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response
