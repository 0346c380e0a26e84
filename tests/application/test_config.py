"""Tests for layered configuration resolution."""

import logging

from cadence.application.config import AppConfig, config_file_candidates, resolve_config


def test_defaults(mock_home):
    config = resolve_config()
    assert config.daily_cap == 20
    assert config.new_card_cap == 10
    assert config.host == "127.0.0.1"
    assert config.port == 8787


def test_env_overrides_defaults(mock_home, monkeypatch):
    monkeypatch.setenv("CADENCE_DAILY_CAP", "5")
    assert resolve_config().daily_cap == 5


def test_toml_file_is_read(mock_home):
    cfg = mock_home / ".config/cadence/config.toml"
    cfg.parent.mkdir(parents=True)
    cfg.write_text("daily_cap = 12\nnew_card_cap = 3\n")

    config = resolve_config()
    assert config.daily_cap == 12
    assert config.new_card_cap == 3


def test_env_beats_toml(mock_home, monkeypatch):
    (mock_home / ".cadence.toml").write_text("daily_cap = 12\n")
    monkeypatch.setenv("CADENCE_DAILY_CAP", "7")
    assert resolve_config().daily_cap == 7


def test_overrides_win_and_none_is_ignored(mock_home, monkeypatch):
    monkeypatch.setenv("CADENCE_DAILY_CAP", "7")
    assert resolve_config({"daily_cap": 3}).daily_cap == 3
    assert resolve_config({"daily_cap": None}).daily_cap == 7


def test_log_level_is_normalized(mock_home):
    assert AppConfig(log_level="debug").log_level == "DEBUG"


def test_effective_log_level(mock_home):
    assert AppConfig().effective_log_level == logging.INFO
    assert AppConfig(log_level="warning").effective_log_level == logging.WARNING
    # -vv and above win over the configured level
    assert AppConfig(log_level="error", verbose=2).effective_log_level == logging.DEBUG


def test_log_level_from_env(mock_home, monkeypatch):
    monkeypatch.setenv("CADENCE_LOG_LEVEL", "error")
    assert resolve_config().effective_log_level == logging.ERROR


def test_config_file_candidates_follow_home(mock_home):
    candidates = config_file_candidates()
    assert candidates[0] == mock_home / ".config/cadence/config.toml"
    assert candidates[1] == mock_home / ".cadence.toml"
