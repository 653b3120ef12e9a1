from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from sessionguard.utils.logging import get_logger


def test_logger_settings_from_environment(monkeypatch):
    monkeypatch.setenv("SESSIONGUARD_LOG_LEVEL", "debug")
    monkeypatch.setenv("SESSIONGUARD_RICH_LOGS", "off")

    logger = get_logger("EnvConfigured")

    assert logger.name == "sessionguard.EnvConfigured"
    assert logger.level == logging.DEBUG
    assert not isinstance(logger.handlers[0], RichHandler)
    assert logger.propagate is False


def test_rich_handler_by_default(monkeypatch):
    monkeypatch.delenv("SESSIONGUARD_LOG_LEVEL", raising=False)
    monkeypatch.delenv("SESSIONGUARD_RICH_LOGS", raising=False)

    logger = get_logger("sessionguard.RichDefault")

    assert logger.level == logging.INFO
    assert isinstance(logger.handlers[0], RichHandler)


def test_unknown_level_is_rejected(monkeypatch):
    monkeypatch.setenv("SESSIONGUARD_LOG_LEVEL", "chatty")
    with pytest.raises(ValueError):
        get_logger("BadLevel")
