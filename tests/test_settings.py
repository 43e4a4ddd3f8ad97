"""Test application settings"""

import pytest

from album_fetcher.config import settings as settings_module
from album_fetcher.config.settings import Settings, get_settings, reload_settings
from album_fetcher.utils.exceptions import ConfigError


ENV_VARS = ['ALBUM_FETCHER_OUTPUT_DIR', 'ALBUM_FETCHER_FORMAT', 'YT_DLP_PATH', 'FFMPEG_PATH', 'MUSICBRAINZ_USER_AGENT']


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings_module, '_settings', None)


@pytest.fixture
def config_file(temp_dir):
    path = temp_dir / "config.yaml"
    path.write_text(
        "download:\n"
        "  output_directory: ~/Music\n"
        "  format: flac\n"
        "tools:\n"
        "  ffmpeg_path: /opt/ffmpeg\n"
        "  timeout: 600\n"
        "network:\n"
        "  rate_limit_delay: 2.5\n"
        "  unknown_key: ignored\n"
        "unknown_section:\n"
        "  key: value\n",
        encoding='utf-8'
    )
    return str(path)


class TestSettings:
    """Test loading and validation"""

    def test_explicit_config_file(self, config_file):
        """Test explicit config file"""
        settings = Settings(config_file)

        assert settings.download.format == "flac"
        assert settings.download.quality == "0"
        assert settings.tools.ffmpeg_path == "/opt/ffmpeg"
        assert settings.tools.timeout == 600
        assert settings.network.rate_limit_delay == 2.5
        assert not hasattr(settings.network, 'unknown_key')
        assert settings.get_output_directory().name == "Music"
        assert "~" not in str(settings.get_output_directory())

    def test_missing_explicit_file(self, temp_dir):
        """Test missing explicit file"""
        with pytest.raises(ConfigError, match="Config file not found"):
            Settings(str(temp_dir / "missing.yaml"))

    def test_invalid_yaml(self, temp_dir):
        """Test YAML syntax errors"""
        path = temp_dir / "broken.yaml"
        path.write_text("download: [unclosed", encoding='utf-8')

        with pytest.raises(ConfigError, match="Failed to load config"):
            Settings(str(path))

    def test_non_mapping_file(self, temp_dir):
        """Test non mapping file"""
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n", encoding='utf-8')

        with pytest.raises(ConfigError, match="must contain a mapping"):
            Settings(str(path))

    def test_environment_overrides(self, config_file, monkeypatch):
        """Test environment overrides"""
        monkeypatch.setenv('ALBUM_FETCHER_OUTPUT_DIR', '/srv/music')
        monkeypatch.setenv('ALBUM_FETCHER_FORMAT', 'opus')
        monkeypatch.setenv('YT_DLP_PATH', '/usr/local/bin/yt-dlp')
        monkeypatch.setenv('FFMPEG_PATH', '/usr/local/bin/ffmpeg')
        monkeypatch.setenv('MUSICBRAINZ_USER_AGENT', 'tests/1.0')

        settings = Settings(config_file)

        assert settings.download.output_directory == '/srv/music'
        assert settings.download.format == 'opus'
        assert settings.tools.yt_dlp_path == '/usr/local/bin/yt-dlp'
        assert settings.tools.ffmpeg_path == '/usr/local/bin/ffmpeg'
        assert settings.network.user_agent == 'tests/1.0'

    def test_validate_defaults(self, config_file):
        """Test validate defaults"""
        assert Settings(config_file).validate() == []

    def test_validate_errors(self, config_file):
        """Test validate errors"""
        settings = Settings(config_file)
        settings.download.format = "aiff"
        settings.download.quality = " "
        settings.network.request_timeout = 0
        settings.network.rate_limit_delay = -1
        settings.tools.timeout = 0

        errors = settings.validate()

        assert len(errors) == 5
        assert errors[0].startswith("Invalid download format: aiff")

    def test_to_dict(self, config_file):
        """Test dictionary export"""
        data = Settings(config_file).to_dict()

        assert set(data) == {'download', 'tools', 'network', 'logging'}
        assert data['download']['format'] == 'flac'
        assert data['logging']['level'] == 'INFO'


class TestSettingsSingleton:
    """Test the shared settings instance"""

    def test_get_settings_is_cached(self, monkeypatch, temp_dir):
        """Test get settings is cached"""
        monkeypatch.chdir(temp_dir)
        assert get_settings() is get_settings()

    def test_reload_settings(self, config_file):
        """Test reload settings"""
        reloaded = reload_settings(config_file)

        assert reloaded.download.format == "flac"
        assert get_settings() is reloaded
