"""
Unit tests for configuration loading and the configuration singleton.
"""

import tomllib
from unittest.mock import patch

import pytest

from throttlewatch.config import (
    DEFAULT_CONFIG_PATH,
    clear_config_cache,
    get_config,
    get_config_path,
    is_config_loaded,
    load_toml_file,
    set_config_path,
)
from throttlewatch.validation import ValidationError


@pytest.mark.unit
class TestConfigManager:
    """Test cases for the configuration singleton."""

    def test_load_from_custom_path(self, config_files):
        set_config_path(config_files["config"])

        config = get_config()

        assert get_config_path() == config_files["config"]
        assert config.monitor.collection.interval_seconds == 2.0
        assert config.monitor.storage.format == "csv"
        assert "backupd" in config.attribution.excluded_processes

    def test_config_is_cached(self, config_files):
        set_config_path(config_files["config"])

        first = get_config()
        assert is_config_loaded()
        assert get_config() is first

        clear_config_cache()
        assert not is_config_loaded()
        assert get_config() is not first

    def test_missing_custom_path_raises(self, temp_dir):
        set_config_path(temp_dir / "missing.toml")

        with pytest.raises(FileNotFoundError):
            get_config()

    def test_missing_default_file_uses_defaults(self, temp_dir):
        missing_default = temp_dir / "config.toml"
        with patch("throttlewatch.config.manager.DEFAULT_CONFIG_PATH", missing_default):
            set_config_path(missing_default)

            config = get_config()

        assert config.monitor.collection.interval_seconds == 5.0
        assert config.monitor.detection.min_low_clock_streak == 3

    def test_packaged_default_file_is_valid(self):
        if not DEFAULT_CONFIG_PATH.exists():
            pytest.skip("packaged configuration not present")
        set_config_path(DEFAULT_CONFIG_PATH)

        config = get_config()

        assert config.monitor.collection.interval_seconds == 5.0
        assert config.monitor.collection.duration_minutes == 10.0
        assert config.monitor.detection.high_load_threshold == 70.0

    def test_invalid_value_raises(self, temp_dir):
        config_file = temp_dir / "bad.toml"
        config_file.write_text("[monitor.collection]\ninterval_seconds = 0\n")
        set_config_path(config_file)

        with pytest.raises(ValidationError):
            get_config()


@pytest.mark.unit
class TestLoadTomlFile:
    """Test cases for raw TOML loading."""

    def test_load(self, config_files):
        data = load_toml_file(config_files["config"])

        assert data["monitor"]["collection"]["interval_seconds"] == 2.0

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_toml_file(temp_dir / "nope.toml")

    def test_malformed_file(self, temp_dir):
        config_file = temp_dir / "broken.toml"
        config_file.write_text("[monitor\ninterval = \n")

        with pytest.raises(tomllib.TOMLDecodeError):
            load_toml_file(config_file)
