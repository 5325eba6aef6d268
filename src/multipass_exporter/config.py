"""
Exporter configuration.

Settings come from an optional YAML file; anything the file leaves out keeps
its default. A missing file is not an error, it just means "all defaults".
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping, Optional, Tuple

import yaml

from multipass_exporter.errors import ConfigError

log = logging.getLogger(__name__)

DEFAULT_PORT = 1986
DEFAULT_METRICS_PATH = "/metrics"
DEFAULT_TIMEOUT_SECONDS = 5
DEFAULT_LOG_LEVEL = "info"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class ExporterConfig:
    port: int = DEFAULT_PORT
    metrics_path: str = DEFAULT_METRICS_PATH
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL
    listen_address: str = ""  # all interfaces

    @property
    def logging_level(self) -> int:
        return LOG_LEVELS[self.log_level.lower()]

    def validate(self) -> "ExporterConfig":
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 1 <= self.port <= 65535:
            raise ConfigError(f"port must be an integer between 1 and 65535, got {self.port!r}")
        if not isinstance(self.metrics_path, str) or not self.metrics_path.startswith("/"):
            raise ConfigError(f"metrics_path must start with '/', got {self.metrics_path!r}")
        if (isinstance(self.timeout_seconds, bool)
                or not isinstance(self.timeout_seconds, (int, float))
                or self.timeout_seconds <= 0):
            raise ConfigError(f"timeout_seconds must be a positive number, got {self.timeout_seconds!r}")
        if not isinstance(self.log_level, str) or self.log_level.lower() not in LOG_LEVELS:
            raise ConfigError(
                f"log_level must be one of {', '.join(sorted(LOG_LEVELS))}, got {self.log_level!r}"
            )
        if not isinstance(self.listen_address, str):
            raise ConfigError(f"listen_address must be a string, got {self.listen_address!r}")
        return self

    def describe(self) -> str:
        return ", ".join(f"{key}={value}" for key, value in asdict(self).items())


def config_from_mapping(data: Optional[Mapping[str, Any]]) -> ExporterConfig:
    if data is None:
        return ExporterConfig()
    if not isinstance(data, Mapping):
        raise ConfigError(f"expected a mapping at the top level, got {type(data).__name__}")

    known = {f.name for f in fields(ExporterConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        log.warning("Ignoring unknown config keys: %s", ", ".join(map(str, unknown)))

    values = {key: value for key, value in data.items() if key in known and value is not None}
    return ExporterConfig(**values).validate()


def load_config(path: str) -> Tuple[ExporterConfig, bool]:
    """Load YAML config from `path`.

    Returns (config, loaded) where loaded is False when the file doesn't
    exist and defaults were used instead.
    """
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except FileNotFoundError:
        return ExporterConfig(), False
    except OSError as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"error parsing YAML in {path}: {exc}") from exc

    return config_from_mapping(data), True
