"""CPU resource collector."""

from __future__ import annotations

import psutil

from ..snapshot import GaugeDoubleSnapshot, MetricSnapshot
from .base import BaseCollector


class CpuCollector(BaseCollector):
    """Collects CPU usage and load average gauges."""

    def __init__(self, per_cpu: bool = False) -> None:
        self._per_cpu = per_cpu

    @property
    def name(self) -> str:
        return "cpu"

    def collect(self) -> list[MetricSnapshot]:
        snapshots: list[MetricSnapshot] = [
            GaugeDoubleSnapshot("system.cpu.usage_percent", psutil.cpu_percent(interval=0)),
        ]

        if self._per_cpu:
            per_cpu = psutil.cpu_percent(interval=0, percpu=True)
            for idx, pct in enumerate(per_cpu):
                snapshots.append(GaugeDoubleSnapshot(f"system.cpu{idx}.usage_percent", pct))

        load1, load5, load15 = psutil.getloadavg()
        snapshots.append(GaugeDoubleSnapshot("system.cpu.load_avg_1m", load1))
        snapshots.append(GaugeDoubleSnapshot("system.cpu.load_avg_5m", load5))
        snapshots.append(GaugeDoubleSnapshot("system.cpu.load_avg_15m", load15))
        return snapshots
