import logging

import pytest

from scrooge import configure_logging
from scrooge.core.config import ScroogeConfig, load_config_from_env


def test_config_defaults():
    """Test that the configuration has expected defaults."""
    config = ScroogeConfig()

    assert config.search_node_budget == 100_000
    assert config.selection_mode == "optimal"
    assert config.max_workers == 1
    assert config.group_size_warning == 16
    assert config.log_level == "INFO"


def test_config_override(monkeypatch):
    """Test that environment variables override defaults."""
    monkeypatch.setenv("SCROOGE_SEARCH_NODE_BUDGET", "500")
    monkeypatch.setenv("SCROOGE_SELECTION_MODE", "GREEDY")
    monkeypatch.setenv("SCROOGE_MAX_WORKERS", "4")
    monkeypatch.setenv("SCROOGE_LOG_LEVEL", "debug")

    config = load_config_from_env()

    assert config.search_node_budget == 500
    assert config.selection_mode == "greedy"
    assert config.max_workers == 4
    assert config.log_level == "DEBUG"
    assert config.group_size_warning == 16


def test_config_validation():
    """Test that configuration values are validated."""
    with pytest.raises(ValueError):
        ScroogeConfig(search_node_budget=0)
    with pytest.raises(ValueError):
        ScroogeConfig(max_workers=0)
    with pytest.raises(ValueError):
        ScroogeConfig(selection_mode="random")
    with pytest.raises(ValueError):
        ScroogeConfig(log_level="LOUD")

    config = ScroogeConfig(search_node_budget=1)
    assert config.search_node_budget == 1


def test_config_validates_assignment():
    config = ScroogeConfig()
    with pytest.raises(ValueError):
        config.max_workers = -1


def test_configure_logging(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging("DEBUG")

    assert calls[0]["level"] == "DEBUG"
