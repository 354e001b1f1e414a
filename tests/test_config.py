"""
Tests for YAML/env configuration
Run with: uv run pytest tests/test_config.py -v
"""

from datetime import time
from zoneinfo import ZoneInfo

import pytest

from config import DEFAULTS, Config
from models import Zone


def write_config(tmp_path, text: str) -> str:
    path = tmp_path / 'config.yaml'
    path.write_text(text)
    return str(path)


class TestLoading:
    """Test defaults, YAML and environment overrides"""

    def test_missing_file_uses_defaults(self):
        config = Config('missing.yaml')
        assert config.zone is None
        assert config['api_base_url'] == DEFAULTS['api_base_url']
        assert config.allowed_charging_hours == (2, 4, 8)
        assert config.tomorrow_cutoff == time(13, 0)
        assert config.tz == ZoneInfo('Europe/Stockholm')

    def test_yaml_values(self, tmp_path):
        path = write_config(tmp_path, "zone: se4\ntomorrow_cutoff: '14:30'\nallowed_charging_hours: [1, 3]\n")
        config = Config(path)
        assert config.zone is Zone.SE4
        assert config.tomorrow_cutoff == time(14, 30)
        assert config.allowed_charging_hours == (1, 3)
        assert config.get('request_timeout') == 10

    def test_empty_yaml_file(self, tmp_path):
        config = Config(write_config(tmp_path, ""))
        assert config['timezone'] == 'Europe/Stockholm'

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        monkeypatch.setenv('ZONE', 'SE1')
        config = Config(write_config(tmp_path, "zone: SE3\n"))
        assert config.zone is Zone.SE1

    def test_dotenv_file_loaded(self, tmp_path):
        (tmp_path / '.env').write_text("# local settings\nAPI_BASE_URL=http://localhost:9000/prices\n")
        config = Config('missing.yaml')
        assert config['api_base_url'] == 'http://localhost:9000/prices'


class TestValidation:
    """Test rejection of bad settings"""

    def test_invalid_zone(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid zone"):
            Config(write_config(tmp_path, "zone: SE7\n"))

    def test_invalid_cutoff(self, tmp_path):
        with pytest.raises(ValueError, match="tomorrow_cutoff"):
            Config(write_config(tmp_path, "tomorrow_cutoff: 'one pm'\n"))

    def test_invalid_timezone(self, tmp_path):
        with pytest.raises(ValueError, match="timezone"):
            Config(write_config(tmp_path, "timezone: Mars/Olympus\n"))

    @pytest.mark.parametrize("hours", ["[]", "[0, 2]", "[2.5]", "[true]", "4", "'2, 4'"])
    def test_invalid_charging_hours(self, tmp_path, hours):
        with pytest.raises(ValueError, match="allowed_charging_hours"):
            Config(write_config(tmp_path, f"allowed_charging_hours: {hours}\n"))

    def test_invalid_timeout(self, tmp_path):
        with pytest.raises(ValueError, match="request_timeout"):
            Config(write_config(tmp_path, "request_timeout: 0\n"))

    def test_non_numeric_timeout(self, tmp_path):
        with pytest.raises(ValueError, match="request_timeout"):
            Config(write_config(tmp_path, "request_timeout: soon\n"))

    def test_malformed_yaml(self, tmp_path):
        with pytest.raises(ValueError, match="Cannot parse"):
            Config(write_config(tmp_path, "zone: [SE3\n"))

    def test_settings_must_be_mapping(self, tmp_path):
        with pytest.raises(ValueError, match="mapping"):
            Config(write_config(tmp_path, "- SE3\n- SE4\n"))
