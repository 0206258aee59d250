"""Tests for bridge configuration."""

import pytest

from sqlbridge.config import DEFAULT_BUSY_TIMEOUT_MS, BridgeConfig


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Clear SQLBRIDGE_* variables before each test."""
    for name in ("SQLBRIDGE_BUSY_TIMEOUT_MS", "SQLBRIDGE_STRICT_PARAMS",
                 "SQLBRIDGE_TEXT_ERRORS", "SQLBRIDGE_LIB_PATH"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = BridgeConfig()
    assert config.busy_timeout_ms == DEFAULT_BUSY_TIMEOUT_MS == 1000
    assert config.strict_params is True
    assert config.text_errors == "surrogateescape"
    assert config.library_path is None


def test_from_env_without_variables():
    assert BridgeConfig.from_env() == BridgeConfig()


def test_from_env(monkeypatch):
    monkeypatch.setenv("SQLBRIDGE_BUSY_TIMEOUT_MS", "2500")
    monkeypatch.setenv("SQLBRIDGE_STRICT_PARAMS", "false")
    monkeypatch.setenv("SQLBRIDGE_TEXT_ERRORS", "replace")
    monkeypatch.setenv("SQLBRIDGE_LIB_PATH", "/opt/sqlite/lib")

    config = BridgeConfig.from_env()
    assert config.busy_timeout_ms == 2500
    assert config.strict_params is False
    assert config.text_errors == "replace"
    assert config.library_path == "/opt/sqlite/lib"


def test_overrides_win_over_env(monkeypatch):
    monkeypatch.setenv("SQLBRIDGE_BUSY_TIMEOUT_MS", "2500")
    config = BridgeConfig.from_env(busy_timeout_ms=10)
    assert config.busy_timeout_ms == 10


def test_strict_params_truthy_values(monkeypatch):
    for value in ("1", "true", "YES", "on"):
        monkeypatch.setenv("SQLBRIDGE_STRICT_PARAMS", value)
        assert BridgeConfig.from_env().strict_params is True


def test_negative_timeout_rejected():
    with pytest.raises(ValueError):
        BridgeConfig(busy_timeout_ms=-1)


def test_unknown_error_handler_rejected():
    with pytest.raises(LookupError):
        BridgeConfig(text_errors="no-such-handler")


def test_frozen():
    config = BridgeConfig()
    with pytest.raises(AttributeError):
        config.busy_timeout_ms = 5
