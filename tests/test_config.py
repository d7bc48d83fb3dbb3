"""Tests for configuration."""

import logging

from rich.console import Console

from cloudleaf.config import Config, get_config, reset_config
from cloudleaf.log import configure_logging


class TestConfigFromEnv:
    """Tests for loading configuration from the environment."""

    def test_defaults(self):
        """Test defaults with no environment overrides."""
        config = Config.from_env()

        assert config.db_path == ":memory:"
        assert config.loan_days == 14
        assert config.sweep_interval == 60.0
        assert config.default_trust_score == 4.0
        assert config.password_hasher == "bcrypt"
        assert config.gemini_api_key is None
        assert config.summary_model == "gemini-2.5-flash"
        assert config.log_level == "WARNING"
        assert config.default_wishlist == ["The Great Gatsby", "1984"]
        assert not config.has_summary_config()

    def test_overrides(self, monkeypatch):
        """Test environment overrides."""
        monkeypatch.setenv("CLOUDLEAF_LOAN_DAYS", "7")
        monkeypatch.setenv("CLOUDLEAF_SWEEP_INTERVAL", "5")
        monkeypatch.setenv("CLOUDLEAF_PASSWORD_HASHER", "Plaintext")
        monkeypatch.setenv("CLOUDLEAF_DEFAULT_WISHLIST", " Dracula , ,Emma")
        monkeypatch.setenv("CLOUDLEAF_LOG_LEVEL", "info")
        monkeypatch.setenv("GEMINI_API_KEY", "key")

        config = Config.from_env()

        assert config.loan_days == 7
        assert config.sweep_interval == 5.0
        assert config.password_hasher == "plaintext"
        assert config.default_wishlist == ["Dracula", "Emma"]
        assert config.log_level == "INFO"
        assert config.has_summary_config()

    def test_global_config(self, monkeypatch):
        """Test get_config caches until reset."""
        first = get_config()
        assert get_config() is first

        monkeypatch.setenv("CLOUDLEAF_LOAN_DAYS", "3")
        reset_config()
        assert get_config().loan_days == 3


class TestConfigValidate:
    """Tests for Config.validate."""

    def test_valid(self, config):
        """Test the default config has no errors."""
        assert config.validate() == []

    def test_invalid(self, config):
        """Test each invalid setting is reported."""
        config.loan_days = 0
        config.sweep_interval = -1
        config.password_hasher = "md5"

        errors = config.validate()

        assert len(errors) == 3
        assert any("md5" in e for e in errors)


class TestConfigureLogging:
    """Tests for logging setup."""

    def test_single_handler(self):
        """Test repeated calls add the Rich handler once."""
        logger = logging.getLogger("cloudleaf")
        console = Console(file=None, quiet=True)

        configure_logging("INFO", console=console)
        configure_logging("DEBUG", console=console)

        names = [h.get_name() for h in logger.handlers]
        assert names.count("cloudleaf-rich") == 1
        assert logger.level == logging.DEBUG
        logger.setLevel(logging.NOTSET)
