"""Tests for logging configuration."""

from __future__ import annotations

import logging

import pytest_mock

from gameart.config.settings import Settings
from gameart.monitoring.logging import configure_logging


def test_configure_logging_uses_settings_level(mocker: pytest_mock.MockerFixture) -> None:
    basic_config = mocker.patch("gameart.monitoring.logging.logging.basicConfig")

    configure_logging(Settings(log_level="debug"))

    basic_config.assert_called_once()
    assert basic_config.call_args.kwargs["level"] == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
