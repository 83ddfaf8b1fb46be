"""Error types raised by collectd_reporter."""

from __future__ import annotations


class CollectdReporterError(Exception):
    """Base class for all collectd_reporter errors."""


class ConfigurationError(CollectdReporterError, ValueError):
    """Invalid reporter configuration, raised when building a reporter."""


class PacketError(CollectdReporterError, ValueError):
    """A sample could not be encoded into a collectd packet."""


class UnsupportedSnapshotError(CollectdReporterError, TypeError):
    """The dispatcher was handed a snapshot kind it has no mapping for."""
