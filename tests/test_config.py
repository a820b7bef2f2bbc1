# =============================================================================
# TESTS - Configuration
# =============================================================================

import logging

import pytest

from topic_quiz.config import load_settings
from topic_quiz.services.session_registry import DEFAULT_MAX_SESSIONS
from topic_quiz.utils.logging_config import configure_logging


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("QUIZ_DATA_FILE", "CORS_ALLOW_ORIGINS", "QUIZ_MAX_SESSIONS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestLoadSettings:
    """Settings read from environment variables."""

    def test_defaults(self, clean_env):
        settings = load_settings()

        assert settings.data_file is None
        assert settings.cors_allow_origins == ["*"]
        assert settings.max_sessions == DEFAULT_MAX_SESSIONS
        assert settings.log_level == "INFO"

    def test_overrides(self, clean_env):
        clean_env.setenv("QUIZ_DATA_FILE", "/tmp/catalog.json")
        clean_env.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test")
        clean_env.setenv("QUIZ_MAX_SESSIONS", "25")
        clean_env.setenv("LOG_LEVEL", "debug")

        settings = load_settings()

        assert settings.data_file == "/tmp/catalog.json"
        assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]
        assert settings.max_sessions == 25
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("value", ["many", "0", "-3"])
    def test_invalid_max_sessions(self, clean_env, value):
        clean_env.setenv("QUIZ_MAX_SESSIONS", value)

        with pytest.raises(ValueError):
            load_settings()


class TestConfigureLogging:
    def test_returns_package_logger(self):
        logger = configure_logging("WARNING")

        assert isinstance(logger, logging.Logger)
        assert logger.name == "topic_quiz"
