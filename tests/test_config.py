"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from apix.config import load_settings

ENV_VARS = [
    "APIX_NETWORK",
    "APIX_WALLET_PROVIDER",
    "APIX_LOG_LEVEL",
    "APIX_TYPE_CHECK",
    "APIX_TYPE_CHECK_TIMEOUT",
    "APIX_CLAUDE_MODEL",
    "ANTHROPIC_API_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_file(tmp_path) -> None:
    settings = load_settings(str(tmp_path / "missing.toml"))
    assert settings.network == "testnet"
    assert settings.run_type_check
    assert settings.anthropic_api_key == ""


def test_file_then_env_then_overrides(tmp_path, monkeypatch) -> None:
    config = tmp_path / "config.toml"
    config.write_text(
        '[defaults]\nnetwork = "previewnet"\ndefault_wallet_provider = "blade"\n'
        '[api_keys]\nanthropic = "sk-file"\n'
    )
    monkeypatch.setenv("APIX_WALLET_PROVIDER", "metamask")
    monkeypatch.setenv("APIX_TYPE_CHECK", "0")

    settings = load_settings(str(config), network="mainnet")
    assert settings.network == "mainnet"
    assert settings.default_wallet_provider == "metamask"
    assert settings.anthropic_api_key == "sk-file"
    assert not settings.run_type_check
    assert "sk-file" not in repr(settings)


def test_unreadable_file_is_ignored(tmp_path) -> None:
    config = tmp_path / "config.toml"
    config.write_text("not = [valid")
    assert load_settings(str(config)).network == "testnet"


def test_invalid_network_rejected(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("APIX_NETWORK", "moonnet")
    with pytest.raises(ValidationError):
        load_settings(str(tmp_path / "missing.toml"))
