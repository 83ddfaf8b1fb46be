"""Report manager that collects snapshots and drives the reporter."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

from ..config import CollectorConfig
from ..snapshot import MetricSnapshot, ReportBatch
from .base import BaseCollector
from .cpu import CpuCollector
from .memory import MemoryCollector
from .network import NetworkCollector

logger = logging.getLogger(__name__)

SnapshotSource = Callable[[], list[MetricSnapshot]]


class Reporter(Protocol):
    def report(self, batch: ReportBatch) -> None: ...

    def cleanup(self) -> None: ...


class ReportManager:
    """Runs collectors on an interval and hands each batch to a reporter.

    Instantiate it with a :class:`CollectorConfig` and a reporter, register
    application snapshot sources via :meth:`add_source`, then call
    :meth:`start` / :meth:`stop`.  Cycles run one at a time on a single
    background thread.
    """

    def __init__(self, config: CollectorConfig, reporter: Reporter) -> None:
        self._config = config
        self._reporter = reporter
        self._collectors: list[BaseCollector] = []
        self._sources: list[SnapshotSource] = []
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

        if config.cpu:
            self._collectors.append(CpuCollector(per_cpu=config.per_cpu))
        if config.memory:
            self._collectors.append(MemoryCollector())
        if config.network:
            self._collectors.append(NetworkCollector(interface=config.network_interface))

    def add_source(self, source: SnapshotSource) -> None:
        """Register a callable returning application metric snapshots."""
        self._sources.append(source)

    def collect_once(self) -> list[MetricSnapshot]:
        """Run all collectors and sources once and return the snapshots."""
        snapshots: list[MetricSnapshot] = []
        for collector in self._collectors:
            try:
                snapshots.extend(collector.collect())
            except Exception:
                logger.exception("Collector %s failed", collector.name)
        for source in self._sources:
            try:
                snapshots.extend(source())
            except Exception:
                logger.exception("Snapshot source %r failed", source)
        return snapshots

    def report_once(self) -> ReportBatch:
        """Collect and report a single batch; returns the batch sent."""
        batch = ReportBatch(self._config.interval_seconds, self.collect_once())
        self._reporter.report(batch)
        return batch

    def _run(self) -> None:
        """Background thread loop."""
        while not self._stop_event.is_set():
            try:
                self.report_once()
            except Exception:
                logger.exception("Report cycle failed")
            self._stop_event.wait(self._config.interval_seconds)

    def start(self) -> None:
        """Start reporting in the background."""
        if not self._config.enabled:
            return
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="collectd-reporter", daemon=True)
        self._thread.start()
        logger.info("ReportManager started (interval=%ds)", self._config.interval_seconds)

    def stop(self) -> None:
        """Stop background reporting and release the reporter."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        self._reporter.cleanup()
        logger.info("ReportManager stopped")
