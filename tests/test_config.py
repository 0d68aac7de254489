"""Tests for configuration module."""

import pytest


class TestSettings:
    """Tests for Settings class."""

    def test_settings_default_values(self, mock_env_vars, monkeypatch):
        """Test default values are set correctly."""
        from fluentspec.config import Settings

        monkeypatch.delenv("FLUENTSPEC_LOG_LEVEL", raising=False)
        monkeypatch.delenv("FLUENTSPEC_STOP_ON_FAILURE", raising=False)

        settings = Settings(_env_file=None)
        assert settings.log_level == "INFO"
        assert settings.log_json is False
        assert settings.log_timestamps is True
        assert settings.stop_on_failure is False
        assert settings.setup_error_label == "### ERROR IN TEST SETUP ###"
        assert settings.missing_examples_label == "### ERROR: use of example values but none provided ###"

    def test_settings_loads_from_env(self, mock_env_vars, monkeypatch):
        """Test that settings loads from environment variables."""
        from fluentspec.config import get_settings

        monkeypatch.setenv("FLUENTSPEC_STOP_ON_FAILURE", "true")
        monkeypatch.setenv("FLUENTSPEC_SETUP_ERROR_LABEL", "SETUP BROKE")

        settings = get_settings()
        assert settings.log_level == "DEBUG"
        assert settings.stop_on_failure is True
        assert settings.setup_error_label == "SETUP BROKE"

    def test_settings_rejects_unknown_level(self, mock_env_vars, monkeypatch):
        """Test that log level is validated."""
        from pydantic import ValidationError

        from fluentspec.config import Settings

        monkeypatch.setenv("FLUENTSPEC_LOG_LEVEL", "CHATTY")

        with pytest.raises(ValidationError):
            Settings()

    def test_settings_ignores_unrelated_env(self, mock_env_vars, monkeypatch):
        """Test that unrelated variables are ignored."""
        from fluentspec.config import Settings

        monkeypatch.setenv("FLUENTSPEC_UNKNOWN_OPTION", "1")

        settings = Settings()
        assert not hasattr(settings, "unknown_option")
