"""Tests for YAML config loading."""

import pytest

from multipass_exporter.config import ExporterConfig, config_from_mapping, load_config
from multipass_exporter.errors import ConfigError


def test_missing_file_uses_defaults(tmp_path):
    cfg, loaded = load_config(str(tmp_path / "nonexistent_config.yaml"))

    assert loaded is False
    assert cfg.port == 1986
    assert cfg.metrics_path == "/metrics"
    assert cfg.timeout_seconds == 5
    assert cfg.log_level == "info"


def test_valid_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("port: 9090\nmetrics_path: /custom-metrics\ntimeout_seconds: 10\nlog_level: debug\n")

    cfg, loaded = load_config(str(path))

    assert loaded is True
    assert cfg.port == 9090
    assert cfg.metrics_path == "/custom-metrics"
    assert cfg.timeout_seconds == 10
    assert cfg.log_level == "debug"


def test_partial_file_keeps_other_defaults(tmp_path):
    path = tmp_path / "partial.yaml"
    path.write_text("port: 3000\n")

    cfg, loaded = load_config(str(path))

    assert loaded is True
    assert cfg.port == 3000
    assert cfg.metrics_path == "/metrics"
    assert cfg.timeout_seconds == 5


def test_empty_file_is_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    cfg, loaded = load_config(str(path))
    assert loaded is True
    assert cfg == ExporterConfig()


def test_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("port: [9090\n")

    with pytest.raises(ConfigError):
        load_config(str(path))


@pytest.mark.parametrize("data", [
    {"port": 0},
    {"port": 70000},
    {"port": "9090"},
    {"metrics_path": "metrics"},
    {"timeout_seconds": 0},
    {"timeout_seconds": -1},
    {"log_level": "loud"},
])
def test_invalid_values(data):
    with pytest.raises(ConfigError):
        config_from_mapping(data)


def test_top_level_must_be_mapping():
    with pytest.raises(ConfigError):
        config_from_mapping(["port", 1986])


def test_unknown_keys_are_ignored():
    cfg = config_from_mapping({"port": 2000, "retries": 3})
    assert cfg.port == 2000


def test_logging_level_mapping():
    import logging

    assert ExporterConfig(log_level="DEBUG").logging_level == logging.DEBUG
    assert ExporterConfig(log_level="warn").logging_level == logging.WARNING
