"""Periodic metrics reporter for collectd's binary network protocol."""

from .config import ReporterConfig
from .errors import ConfigurationError, PacketError, UnsupportedSnapshotError
from .metadata import MetaData
from .protocol import PacketWriter, SecurityLevel
from .reporter import CollectdReporter, ReporterBuilder, create_reporter
from .snapshot import (
    CounterSnapshot,
    GaugeDoubleSnapshot,
    GaugeLongSnapshot,
    ReportBatch,
    TimedSnapshot,
    ValueSnapshot,
)
from .transport import Sender

__version__ = "0.1.0"

__all__ = [
    "CollectdReporter",
    "ConfigurationError",
    "CounterSnapshot",
    "GaugeDoubleSnapshot",
    "GaugeLongSnapshot",
    "MetaData",
    "PacketError",
    "PacketWriter",
    "ReportBatch",
    "ReporterBuilder",
    "ReporterConfig",
    "SecurityLevel",
    "Sender",
    "TimedSnapshot",
    "UnsupportedSnapshotError",
    "ValueSnapshot",
    "create_reporter",
]
