from __future__ import annotations

import pytest

from headline_digest.config import DEFAULT_CHANNEL_NAMES, DEFAULT_OPENAI_MODEL, Settings, parse_channel_names

REQUIRED = {
    "REDDIT_CLIENT_ID": "id",
    "REDDIT_CLIENT_SECRET": "secret",
    "OPENAI_API_KEY": "sk-test",
    "DISCORD_BOT_TOKEN": "bot-token",
}


def _set_required(monkeypatch) -> None:
    for name, value in REQUIRED.items():
        monkeypatch.setenv(name, value)
    for name in ("OPENAI_MODEL", "SUMMARY_SYSTEM_PROMPT", "DISCORD_CHANNEL_NAMES", "AUTH_FILE", "HTTP_USER_AGENT", "ARRAKIS_TERMINAL_TOKEN"):
        monkeypatch.delenv(name, raising=False)


def test_from_env_uses_defaults(monkeypatch) -> None:
    _set_required(monkeypatch)
    settings = Settings.from_env()
    assert settings.discord_bot_token == "bot-token"
    assert settings.openai_model == DEFAULT_OPENAI_MODEL
    assert settings.channel_names == DEFAULT_CHANNEL_NAMES
    assert settings.auth_file == "auth.json"


def test_from_env_reads_overrides(monkeypatch) -> None:
    _set_required(monkeypatch)
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4.1-mini")
    monkeypatch.setenv("DISCORD_CHANNEL_NAMES", "news, , alerts")
    monkeypatch.setenv("AUTH_FILE", "/tmp/tokens.json")
    settings = Settings.from_env()
    assert settings.openai_model == "gpt-4.1-mini"
    assert settings.channel_names == ("news", "alerts")
    assert settings.auth_file == "/tmp/tokens.json"


def test_from_env_requires_bot_token(monkeypatch) -> None:
    _set_required(monkeypatch)
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "  ")
    with pytest.raises(ValueError, match="DISCORD_BOT_TOKEN"):
        Settings.from_env()


def test_parse_channel_names_blank_keeps_defaults() -> None:
    assert parse_channel_names(None) == DEFAULT_CHANNEL_NAMES
    assert parse_channel_names("   ") == DEFAULT_CHANNEL_NAMES


def test_from_env_accepts_legacy_bot_token_name(monkeypatch) -> None:
    _set_required(monkeypatch)
    monkeypatch.delenv("DISCORD_BOT_TOKEN")
    monkeypatch.setenv("ARRAKIS_TERMINAL_TOKEN", "legacy-token")
    assert Settings.from_env().discord_bot_token == "legacy-token"


def test_from_env_prefers_new_bot_token_name(monkeypatch) -> None:
    _set_required(monkeypatch)
    monkeypatch.setenv("ARRAKIS_TERMINAL_TOKEN", "legacy-token")
    assert Settings.from_env().discord_bot_token == "bot-token"
