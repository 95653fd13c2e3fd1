from __future__ import annotations

from infra.config import default_api_url, load_app_config


def test_load_app_config_defaults(monkeypatch):
    for name in (
        "SBF_API_URL",
        "SBF_SESSION_TIMEOUT_MINUTES",
        "SBF_HTTP_TIMEOUT_SECONDS",
        "SBF_SESSION_POLL_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)

    config = load_app_config()

    assert config.api_url == "http://localhost/star-beverage-flow/public/api"
    assert config.session_timeout_minutes == 30
    assert config.http_timeout_seconds == 10.0
    assert config.session_poll_seconds == 60


def test_load_app_config_reads_env_overrides(monkeypatch):
    monkeypatch.setenv("SBF_API_URL", "https://erp.example.test/api/")
    monkeypatch.setenv("SBF_SESSION_TIMEOUT_MINUTES", "15")
    monkeypatch.setenv("SBF_HTTP_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("SBF_SESSION_POLL_SECONDS", "5")

    config = load_app_config()

    assert config.api_url == "https://erp.example.test/api"
    assert config.session_timeout_minutes == 15
    assert config.http_timeout_seconds == 2.5
    assert config.session_poll_seconds == 5


def test_invalid_env_values_fall_back_to_defaults(monkeypatch, caplog):
    monkeypatch.setenv("SBF_SESSION_TIMEOUT_MINUTES", "-10")
    monkeypatch.setenv("SBF_HTTP_TIMEOUT_SECONDS", "fast")
    monkeypatch.setenv("SBF_SESSION_POLL_SECONDS", "0")

    config = load_app_config()

    assert config.session_timeout_minutes == 30
    assert config.http_timeout_seconds == 10.0
    assert config.session_poll_seconds == 60
    assert "SBF_HTTP_TIMEOUT_SECONDS" in caplog.text


def test_default_api_url_strips_whitespace(monkeypatch):
    monkeypatch.setenv("SBF_API_URL", "   ")
    assert default_api_url() == "http://localhost/star-beverage-flow/public/api"
