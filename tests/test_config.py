"""
Tests for engine settings.
"""

import pytest
from pydantic import ValidationError

from togglekit.core.config import EngineSettings, get_settings


def test_defaults(monkeypatch):
    for name in ("TOGGLE_APP_NAME", "TOGGLE_ENVIRONMENT", "TOGGLE_HOSTNAME", "TOGGLE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = EngineSettings()

    assert settings.app_name is None
    assert settings.environment == "default"
    assert settings.hostname is None
    assert settings.log_level == "INFO"
    assert settings.log_format == "json"


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("TOGGLE_APP_NAME", "checkout")
    monkeypatch.setenv("TOGGLE_ENVIRONMENT", "production")
    monkeypatch.setenv("TOGGLE_HOSTNAME", "web-01")

    settings = EngineSettings()

    assert settings.app_name == "checkout"
    assert settings.environment == "production"
    assert settings.hostname == "web-01"


def test_log_level_is_normalized():
    assert EngineSettings(log_level="debug").log_level == "DEBUG"


@pytest.mark.parametrize("kwargs", [{"log_level": "LOUD"}, {"log_format": "xml"}])
def test_invalid_logging_settings(kwargs):
    with pytest.raises(ValidationError):
        EngineSettings(**kwargs)


def test_static_context():
    assert EngineSettings(environment="staging").static_context() == {"environment": "staging"}
    assert EngineSettings(app_name="web", environment="prod").static_context() == {
        "environment": "prod",
        "app_name": "web",
    }


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
