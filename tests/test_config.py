import dataclasses
import logging
from unittest.mock import MagicMock

import pytest

from ask_gemini.utils.config import DEFAULT_MODEL, Config, describe_settings, set_config_value


def test_defaults():
    config = Config(_env_file=None)
    assert config.MODEL == DEFAULT_MODEL
    assert config.API_KEY is None
    assert config.TRANSPORT == "curl"
    assert config.TIMEOUT_SECONDS == 120


def test_key_from_gemini_env(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    assert Config(_env_file=None).API_KEY == "from-env"


def test_key_from_prefixed_env(monkeypatch):
    monkeypatch.setenv("ASK_GEMINI_API_KEY", "prefixed")
    assert Config(_env_file=None).API_KEY == "prefixed"


def test_prefixed_settings(monkeypatch):
    monkeypatch.setenv("ASK_GEMINI_MODEL", "gemini-1.5-pro-latest")
    monkeypatch.setenv("ASK_GEMINI_TIMEOUT_SECONDS", "30")
    config = Config(_env_file=None)
    assert config.MODEL == "gemini-1.5-pro-latest"
    assert config.TIMEOUT_SECONDS == 30


def test_explicit_key_beats_env(monkeypatch, caplog):
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    config = Config(_env_file=None, API_KEY="explicit")
    assert config.API_KEY == "explicit"
    with caplog.at_level(logging.INFO, logger="ask_gemini.utils.config"):
        config.log_setup()
    assert "Using Gemini API key from setup options." in caplog.text
    assert "askGemini setup complete. Model: gemini-1.5-flash-latest" in caplog.text


def test_missing_key_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="ask_gemini.utils.config"):
        Config(_env_file=None).log_setup()
    assert "GEMINI_API_KEY is not set" in caplog.text


def test_gemini_config_is_frozen():
    gemini = Config(_env_file=None, API_KEY="k").gemini_config()
    assert gemini.api_key == "k"
    with pytest.raises(dataclasses.FrozenInstanceError):
        gemini.model = "other"


def test_describe_settings_masks_key():
    described = describe_settings(Config(_env_file=None, API_KEY="secret"))
    assert described["API_KEY"] == "****"
    assert "secret" not in "".join(described.values())


def fake_config(tmp_path):
    config = MagicMock()
    config.model_config = {"env_file": str(tmp_path / "cfg" / ".env"), "env_prefix": "ASK_GEMINI_"}
    return config


def test_set_config_value_writes_and_updates(tmp_path):
    config = fake_config(tmp_path)
    assert set_config_value("model", "gemini-pro", config)
    assert set_config_value("TIMEOUT_SECONDS", "30", config)
    assert set_config_value("MODEL", "gemini-1.5-pro-latest", config)
    env_file = tmp_path / "cfg" / ".env"
    assert env_file.read_text().splitlines() == [
        "ASK_GEMINI_MODEL=gemini-1.5-pro-latest",
        "ASK_GEMINI_TIMEOUT_SECONDS=30",
    ]


def test_set_config_value_rejects_unknown_key(tmp_path, mocker):
    mocker.patch("ask_gemini.utils.config.console")
    assert not set_config_value("NOT_A_SETTING", "x", fake_config(tmp_path))
    assert not (tmp_path / "cfg" / ".env").exists()
