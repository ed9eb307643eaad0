"""Tests for settings and logging configuration."""

import logging

import pytest
import structlog
from pydantic import ValidationError

from polygon_map.config import Settings
from polygon_map.core.relaxation import MapConfig
from polygon_map.utils.log_config import configure_logging


class TestSettings:
    """Test environment driven settings."""

    def test_defaults(self, monkeypatch):
        """Test default settings with a clean environment."""
        for name in ("MAP_WIDTH", "MAP_HEIGHT", "SAMPLES", "LLOYD_ITERATIONS", "SEED"):
            monkeypatch.delenv(f"POLYGON_MAP_{name}", raising=False)
        settings = Settings(_env_file=None)
        assert settings.map_width == 800.0
        assert settings.map_height == 600.0
        assert settings.samples == 500
        assert settings.lloyd_iterations == 2
        assert settings.seed == "default"

    def test_environment_override(self, monkeypatch):
        """Test environment override."""
        monkeypatch.setenv("POLYGON_MAP_SAMPLES", "42")
        monkeypatch.setenv("POLYGON_MAP_SEED", "island")
        settings = Settings(_env_file=None)
        assert settings.samples == 42
        assert settings.seed == "island"

    def test_invalid_values_rejected(self, monkeypatch):
        """Test invalid values rejected."""
        monkeypatch.setenv("POLYGON_MAP_SAMPLES", "0")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_invalid_log_format_rejected(self):
        """Test invalid log format rejected."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_format="xml")

    def test_map_config_from_settings(self):
        """Test map config from settings."""
        settings = Settings(_env_file=None, map_width=120, map_height=80,
                            samples=30, lloyd_iterations=1)
        config = MapConfig.from_settings(settings)
        assert config == MapConfig(width=120, height=80, samples=30, lloyd_iterations=1)


class TestLogging:
    """Test structlog configuration."""

    @pytest.mark.parametrize("fmt", ["json", "console"])
    def test_configure_logging(self, fmt):
        """Test configure logging."""
        configure_logging("DEBUG", fmt)
        assert logging.getLogger().level == logging.DEBUG
        structlog.get_logger("polygon_map.test").info("configured", fmt=fmt)

    def test_unknown_level_falls_back_to_info(self):
        """Test unknown level falls back to info."""
        configure_logging("NOT_A_LEVEL")
        assert logging.getLogger().level == logging.INFO
