"""
Tests for settings persistence.
"""

import json
import logging

import pytest

from instafilter.config import Settings, load_settings, save_settings
from instafilter.core.errors import ConfigError
from instafilter.core.parameters import ParameterName


class TestLoadSettings:
    """Tests for reading settings files."""

    def test_missing_file(self, tmp_path):
        settings = load_settings(tmp_path / "missing.json")
        assert settings == Settings()

    def test_round_trip(self, tmp_path):
        path = tmp_path / "cfg" / "settings.json"
        original = Settings(image_format="JPEG", default_filter="vignette", intensity=0.8, cache_size=0)
        assert save_settings(original, path) == path
        assert load_settings(path) == original

    def test_corrupt_file(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="instafilter.config"):
            settings = load_settings(path)
        assert settings == Settings()
        assert "Failed to load settings" in caplog.text

    def test_non_object(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_settings(path) == Settings()

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"radius": 42, "theme": "dark"}), encoding="utf-8")
        settings = load_settings(path)
        assert settings.radius == 42
        assert not hasattr(settings, "theme")

    def test_invalid_value_falls_back(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"image_format": "GIFV"}), encoding="utf-8")
        assert load_settings(path) == Settings()


class TestSettings:
    """Tests for the Settings dataclass."""

    def test_parameter_defaults(self):
        settings = Settings(intensity=0.2, scale=3)
        assert settings.parameter_defaults() == {
            ParameterName.INTENSITY: 0.2,
            ParameterName.RADIUS: 100.0,
            ParameterName.SCALE: 3,
        }

    @pytest.mark.parametrize(
        "overrides",
        [
            {"image_format": "GIFV"},
            {"thumbnail_size": 0},
            {"cache_size": -1},
            {"log_level": "LOUD"},
            {"default_filter": "posterize"},
        ],
    )
    def test_validate(self, overrides):
        with pytest.raises(ConfigError):
            Settings(**overrides).validate()

    def test_save_rejects_invalid(self, tmp_path):
        with pytest.raises(ConfigError):
            save_settings(Settings(cache_size=-3), tmp_path / "settings.json")
        assert not (tmp_path / "settings.json").exists()

    def test_output_path_expands_user(self):
        assert "~" not in str(Settings(output_dir="~/shots").output_path)
