from __future__ import annotations

import pytest

from sessionguard.core.settings import PipelineSettings
from sessionguard.utils.env import get_mapping_env


def test_settings_from_file_resolves_store_path(tmp_path):
    config = tmp_path / "sessionguard.yml"
    config.write_text(
        "refresh_endpoint: https://api.example.com/auth/refresh\n"
        "expiry_status_code: 440\n"
        "custom_refresh_headers:\n"
        "  rid: session\n"
        "store_path: data/tokens.json\n"
    )

    settings = PipelineSettings.from_file(config)

    assert settings.expiry_status_code == 440
    assert settings.custom_refresh_headers == {"rid": "session"}
    assert settings.store_path == (tmp_path / "data" / "tokens.json").resolve()
    assert settings.intercept_globally is None
    assert settings.max_attempts == 10


def test_settings_from_file_rejects_invalid(tmp_path):
    config = tmp_path / "bad.yml"
    config.write_text("refresh_endpoint: ftp://example.com\n")

    with pytest.raises(ValueError, match="Invalid sessionguard settings"):
        PipelineSettings.from_file(config)


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("SESSIONGUARD_REFRESH_ENDPOINT", "http://localhost:3000/refresh")
    monkeypatch.setenv("SESSIONGUARD_INTERCEPT_GLOBALLY", "off")
    monkeypatch.setenv("SESSIONGUARD_MAX_ATTEMPTS", "4")
    monkeypatch.setenv("SESSIONGUARD_REFRESH_HEADERS", 'rid=session "x-note=two words"')

    settings = PipelineSettings.from_env()

    assert settings.refresh_endpoint == "http://localhost:3000/refresh"
    assert settings.intercept_globally is False
    assert settings.max_attempts == 4
    assert settings.custom_refresh_headers == {"rid": "session", "x-note": "two words"}


def test_settings_from_env_requires_endpoint(monkeypatch):
    monkeypatch.delenv("SESSIONGUARD_REFRESH_ENDPOINT", raising=False)
    with pytest.raises(ValueError):
        PipelineSettings.from_env()


def test_mapping_env_rejects_bare_values(monkeypatch):
    monkeypatch.setenv("HEADERS", "novalue")
    with pytest.raises(ValueError):
        get_mapping_env("HEADERS")
