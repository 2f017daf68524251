"""Tests for relay settings loading."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from capacity_relay.config import Settings


def test_defaults_when_env_empty(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "N8N_WEBHOOK_URL", "RELAY_LOG_PATH", "RELAY_LOG_MAX_BYTES",
        "RELAY_LOG_BACKUP_COUNT", "RELAY_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = Settings.from_env()
    assert settings.webhook_url == ""
    assert settings.relay_log_path == "logs/webhook_capacity_log.jsonl"
    assert settings.timeout_seconds == 30.0
    assert settings.webhook_configured is False


def test_reads_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("N8N_WEBHOOK_URL", " https://n8n.example.com/webhook/cap ")
    monkeypatch.setenv("RELAY_LOG_PATH", "/tmp/relay.jsonl")
    monkeypatch.setenv("RELAY_LOG_MAX_BYTES", "2048")
    monkeypatch.setenv("RELAY_LOG_BACKUP_COUNT", "2")
    monkeypatch.setenv("RELAY_TIMEOUT_SECONDS", "12.5")
    settings = Settings.from_env()
    assert settings.webhook_url == "https://n8n.example.com/webhook/cap"
    assert settings.relay_log_path == "/tmp/relay.jsonl"
    assert settings.relay_log_max_bytes == 2048
    assert settings.relay_log_backup_count == 2
    assert settings.timeout_seconds == 12.5
    assert settings.webhook_configured is True


@pytest.mark.parametrize("url", [
    "",
    "https://your-n8n-domain.com/webhook/traveler-capacity",
])
def test_placeholder_or_empty_url_not_configured(url: str) -> None:
    assert Settings(webhook_url=url).webhook_configured is False


def test_misconfigured_url_warns_at_startup(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture,
) -> None:
    monkeypatch.setenv("N8N_WEBHOOK_URL", "https://your-n8n-domain.com/webhook/x")
    with caplog.at_level(logging.WARNING, logger="capacity_relay.config"):
        Settings.from_env()
    assert "N8N_WEBHOOK_URL" in caplog.text


def test_settings_frozen() -> None:
    settings = Settings(webhook_url="https://n8n.example.com/hook")
    with pytest.raises(ValidationError):
        settings.webhook_url = "https://other.example.com"  # type: ignore[misc]


def test_timeout_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Settings(timeout_seconds=0)
