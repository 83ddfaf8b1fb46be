"""Reporter that publishes metric snapshots to a collectd server.

Typical use::

    reporter = (
        CollectdReporter.create()
        .with_host("app-container-1")
        .with_collectd_host("collectd.internal")
        .with_collectd_port(25826)
        .with_security_level(SecurityLevel.ENCRYPT)
        .with_username("user")
        .with_password("secret")
        .build()
    )

    manager = ReportManager(CollectorConfig(interval_seconds=60), reporter)
    manager.start()
"""

from __future__ import annotations

import logging
import socket
import threading
from typing import Protocol

from .clock import Clock, SystemClock
from .config import ReporterConfig
from .dispatcher import Sample, dispatch
from .errors import ConfigurationError, UnsupportedSnapshotError
from .metadata import MetaData
from .protocol import PacketWriter, SecurityLevel
from .snapshot import MetricSnapshot, ReportBatch
from .transport import DEFAULT_PORT, Sender

logger = logging.getLogger(__name__)

FALLBACK_HOST_NAME = "localhost"


class Connection(Protocol):
    def is_connected(self) -> bool: ...

    def connect(self) -> None: ...

    def disconnect(self) -> None: ...


class Writer(Protocol):
    def write(self, metadata: MetaData, *values: int | float) -> None: ...


def resolve_host_name() -> str:
    """Return the local host name, or ``"localhost"`` if it cannot be found."""
    try:
        name = socket.gethostname()
    except Exception as exc:
        logger.error("Failed to look up local host name: %s", exc, exc_info=True)
        return FALLBACK_HOST_NAME
    if not name or not name.strip():
        logger.error("Local host name is blank, using %s", FALLBACK_HOST_NAME)
        return FALLBACK_HOST_NAME
    return name


class CollectdReporter:
    """Sends each batch of snapshots to collectd in one reporting cycle.

    A cycle connects the sender, writes one packet per scalar field of every
    snapshot and then disconnects.  Failures never escape :meth:`report`:
    a connect failure skips the cycle, a failed write skips that one
    sample, and a failed disconnect is only logged.
    """

    def __init__(
        self,
        sender: Connection,
        writer: Writer,
        clock: Clock | None = None,
        source_host: str | None = None,
    ) -> None:
        self._sender = sender
        self._writer = writer
        self._clock = clock or SystemClock()
        # resolved once; a lookup failure at startup is not retried
        if source_host and source_host.strip():
            self._host_name = source_host
        else:
            self._host_name = resolve_host_name()
        self._lock = threading.Lock()

    @staticmethod
    def create() -> ReporterBuilder:
        return ReporterBuilder()

    @property
    def host_name(self) -> str:
        return self._host_name

    def cleanup(self) -> None:
        """Nothing to release; each cycle manages its own connection."""

    def report(self, batch: ReportBatch) -> None:
        if not self._lock.acquire(blocking=False):
            logger.warning(
                "Previous report still in progress, dropping batch of %d metrics",
                len(batch.metrics),
            )
            return
        try:
            self._report(batch)
        finally:
            self._lock.release()

    def _report(self, batch: ReportBatch) -> None:
        logger.debug("Reporting %d metrics ...", len(batch.metrics))
        try:
            metadata = MetaData(self._host_name, self._clock.now() // 1000, batch.interval_seconds)
            self._connect()
        except Exception:
            logger.warning("Error trying to send metrics to collectd", exc_info=True)
        else:
            for snapshot in batch.metrics:
                self._report_snapshot(metadata, snapshot)
        finally:
            self._disconnect()

    def _report_snapshot(self, metadata: MetaData, snapshot: MetricSnapshot) -> None:
        try:
            samples = dispatch(metadata, snapshot)
        except UnsupportedSnapshotError as exc:
            logger.warning("Skipping metric: %s", exc)
            return
        for sample in samples:
            self._write(sample)

    def _connect(self) -> None:
        # every cycle ends with a disconnect, so this is normally unconnected
        if not self._sender.is_connected():
            self._sender.connect()

    def _disconnect(self) -> None:
        try:
            self._sender.disconnect()
        except Exception:
            logger.warning("Error disconnecting from collectd", exc_info=True)

    def _write(self, sample: Sample) -> None:
        try:
            self._writer.write(sample.metadata, *sample.values)
        except OSError:
            logger.error("Failed to send metric '%s' to collectd", sample.metadata.plugin, exc_info=True)
        except Exception as exc:
            logger.warning("Failed to process metric '%s': %s", sample.metadata.plugin, exc)


def create_reporter(config: ReporterConfig, clock: Clock | None = None) -> CollectdReporter:
    """Validate *config* and assemble an unconnected reporter.

    Raises :class:`ConfigurationError` before any socket is created.
    """
    config.validate()
    sender = Sender(config.collectd_host, config.collectd_port)
    writer = PacketWriter(sender, config.username, config.password, config.security_level)
    return CollectdReporter(sender, writer, clock=clock, source_host=config.source_host)


class ReporterBuilder:
    """Collects reporter settings; :meth:`build` validates them."""

    def __init__(self) -> None:
        self._collectd_host: str | None = None
        self._collectd_port = DEFAULT_PORT
        self._source_host: str | None = None
        self._security_level: SecurityLevel | str = SecurityLevel.NONE
        self._username = ""
        self._password = ""
        self._clock: Clock = SystemClock()

    def with_collectd_host(self, host: str) -> ReporterBuilder:
        """Set the collectd host name to send metrics to."""
        self._collectd_host = host
        return self

    def with_collectd_port(self, port: int) -> ReporterBuilder:
        """Set the collectd port. Defaults to 25826."""
        self._collectd_port = port
        return self

    def with_host(self, host_name: str) -> ReporterBuilder:
        """Set the host the metrics are reported for (e.g. the container name)."""
        self._source_host = host_name
        return self

    def with_clock(self, clock: Clock) -> ReporterBuilder:
        self._clock = clock
        return self

    def with_username(self, username: str) -> ReporterBuilder:
        """Set the username used for SIGN or ENCRYPT."""
        self._username = username
        return self

    def with_password(self, password: str) -> ReporterBuilder:
        """Set the password used for SIGN or ENCRYPT."""
        self._password = password
        return self

    def with_security_level(self, security_level: SecurityLevel | str) -> ReporterBuilder:
        self._security_level = security_level
        return self

    def build(self) -> CollectdReporter:
        try:
            security_level = SecurityLevel.parse(self._security_level)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        config = ReporterConfig(
            collectd_host=self._collectd_host,
            collectd_port=self._collectd_port,
            source_host=self._source_host,
            security_level=security_level,
            username=self._username,
            password=self._password,
        )
        return create_reporter(config, clock=self._clock)
