"""Tests for the configuration classes."""

import pytest

from taskboard import config


class TestConfigClasses:

    def test_board_defaults(self, app):
        assert app.config["ACTIVITY_FEED_LIMIT"] == 50
        assert app.config["NOTIFICATION_LIST_LIMIT"] == 50
        assert app.config["CHAT_RATE_LIMIT"] == "30 per minute"

    def test_no_unused_url_setting(self, app):
        # Nothing builds absolute links, so no base URL is configured.
        assert "APP_BASE_URL" not in app.config
        assert not hasattr(config.Config, "APP_BASE_URL")

    def test_names(self):
        assert set(config.config_by_name) == {"development", "production", "testing"}
        assert config.config_by_name["testing"] is config.TestConfig

    def test_validate_reports_missing_vars(self, monkeypatch):
        monkeypatch.delenv("SECRET_KEY", raising=False)
        monkeypatch.setenv("DATABASE_URL", "sqlite://")
        with pytest.raises(RuntimeError, match="SECRET_KEY"):
            config.Config.validate()

    def test_testing_skips_validation(self, monkeypatch):
        monkeypatch.delenv("SECRET_KEY", raising=False)
        monkeypatch.delenv("DATABASE_URL", raising=False)
        config.TestConfig.validate()
