"""Configuration loading and validation for collectd_reporter."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError
from .protocol import SecurityLevel
from .transport import DEFAULT_PORT


@dataclass(frozen=True)
class ReporterConfig:
    """Connection and security settings for one reporter, fixed once built."""

    collectd_host: str | None = None
    collectd_port: int = DEFAULT_PORT
    source_host: str | None = None
    security_level: SecurityLevel = SecurityLevel.NONE
    username: str = ""
    password: str = ""

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` if credentials are missing."""
        if self.security_level is SecurityLevel.NONE:
            return
        if not self.username:
            raise ConfigurationError(
                f"username is required for security level: {self.security_level.name}"
            )
        if not self.password:
            raise ConfigurationError(
                f"password is required for security level: {self.security_level.name}"
            )


@dataclass
class CollectdConfig:
    """Target collectd server settings as read from the config file."""

    host: str | None = None
    port: int = DEFAULT_PORT
    source_host: str | None = None
    security_level: str = "none"
    username: str = ""
    password: str = ""


@dataclass
class CollectorConfig:
    """Report scheduling and built-in system collector settings."""

    enabled: bool = True
    interval_seconds: int = 10
    cpu: bool = True
    per_cpu: bool = False
    memory: bool = True
    network: bool = True
    network_interface: str = ""


@dataclass
class AppConfig:
    """Top-level collectd_reporter configuration."""

    collectd: CollectdConfig = field(default_factory=CollectdConfig)
    collector: CollectorConfig = field(default_factory=CollectorConfig)

    def reporter_config(self) -> ReporterConfig:
        """Freeze the ``collectd`` section into a :class:`ReporterConfig`."""
        c = self.collectd
        try:
            security_level = SecurityLevel.parse(c.security_level)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        return ReporterConfig(
            collectd_host=c.host or None,
            collectd_port=c.port,
            source_host=c.source_host or None,
            security_level=security_level,
            username=c.username or "",
            password=c.password or "",
        )


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides using COLLECTD_REPORTER_ prefix."""
    env_map = {
        "COLLECTD_REPORTER_HOST": ("collectd", "host"),
        "COLLECTD_REPORTER_PORT": ("collectd", "port"),
        "COLLECTD_REPORTER_SOURCE_HOST": ("collectd", "source_host"),
        "COLLECTD_REPORTER_SECURITY_LEVEL": ("collectd", "security_level"),
        "COLLECTD_REPORTER_USERNAME": ("collectd", "username"),
        "COLLECTD_REPORTER_PASSWORD": ("collectd", "password"),
        "COLLECTD_REPORTER_INTERVAL": ("collector", "interval_seconds"),
    }
    for env_key, path in env_map.items():
        value = os.environ.get(env_key)
        if value is not None:
            obj = data
            for part in path[:-1]:
                obj = obj.setdefault(part, {})
            obj[path[-1]] = value
    return data


def _as_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None


def _dict_to_config(data: dict[str, Any]) -> AppConfig:
    """Convert a raw dictionary to an AppConfig dataclass."""
    collectd_data = data.get("collectd") or {}
    collector_data = data.get("collector") or {}

    collectd = CollectdConfig(**{
        k: v for k, v in collectd_data.items()
        if k in CollectdConfig.__dataclass_fields__
    })
    collector = CollectorConfig(**{
        k: v for k, v in collector_data.items()
        if k in CollectorConfig.__dataclass_fields__
    })

    # numeric values may arrive as strings from the environment
    collectd.port = _as_int(collectd.port, "collectd.port")
    collector.interval_seconds = _as_int(collector.interval_seconds, "collector.interval_seconds")
    if collector.interval_seconds <= 0:
        raise ConfigurationError(
            f"collector.interval_seconds must be positive, got {collector.interval_seconds}"
        )
    return AppConfig(collectd=collectd, collector=collector)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from a YAML file with environment overrides.

    Looks for ``collectd_reporter.yaml`` in the current directory if *path*
    is None.  A missing file yields the defaults.
    """
    data: dict[str, Any] = {}
    if path is None:
        path = Path("collectd_reporter.yaml")
    else:
        path = Path(path)

    if path.exists():
        with open(path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
            if isinstance(loaded, dict):
                data = loaded

    data = _apply_env_overrides(data)
    return _dict_to_config(data)
