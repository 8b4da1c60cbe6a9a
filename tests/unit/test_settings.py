"""
Unit tests for conversion settings.
"""

import json

import pytest
from pydantic import ValidationError

from nib_converter.core import ConverterSettings, load_settings, save_settings


class TestConverterSettings:
    """Test settings validation."""

    def test_defaults(self):
        """Test default settings."""
        settings = ConverterSettings()
        assert settings.volume == 254
        assert settings.workers == 1
        assert settings.strict is False
        assert settings.log_file is None
        assert settings.verbose is False

    @pytest.mark.parametrize("volume", [-1, 256])
    def test_volume_range(self, volume):
        """Test volume must be 0-255."""
        with pytest.raises(ValidationError):
            ConverterSettings(volume=volume)

    @pytest.mark.parametrize("workers", [0, 36])
    def test_workers_range(self, workers):
        """Test workers must be 1-35."""
        with pytest.raises(ValidationError):
            ConverterSettings(workers=workers)

    def test_unknown_field_rejected(self):
        """Test unknown settings are rejected."""
        with pytest.raises(ValidationError):
            ConverterSettings(sides=2)

    def test_assignment_validated(self):
        """Test assignments are validated."""
        settings = ConverterSettings()
        with pytest.raises(ValidationError):
            settings.volume = 300


class TestSettingsPersistence:
    """Test loading and saving settings files."""

    def test_save_and_load(self, tmp_path):
        """Test settings survive a save and load."""
        path = tmp_path / "config" / "settings.json"
        settings = ConverterSettings(volume=17, workers=4, strict=True)

        save_settings(settings, path)

        assert json.loads(path.read_text())["volume"] == 17
        assert load_settings(path) == settings

    def test_load_invalid_values(self, tmp_path, caplog):
        """Test invalid values in a file raise ValidationError and are logged."""
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"volume": 999}))

        with pytest.raises(ValidationError):
            load_settings(path)
        assert "Invalid settings" in caplog.text

    def test_load_missing_file(self, tmp_path):
        """Test a missing file raises OSError."""
        with pytest.raises(OSError):
            load_settings(tmp_path / "missing.json")
