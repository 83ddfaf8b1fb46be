"""Memory resource collector."""

from __future__ import annotations

import psutil

from ..snapshot import GaugeDoubleSnapshot, GaugeLongSnapshot, MetricSnapshot
from .base import BaseCollector


class MemoryCollector(BaseCollector):
    """Collects memory and swap usage gauges."""

    @property
    def name(self) -> str:
        return "memory"

    def collect(self) -> list[MetricSnapshot]:
        mem = psutil.virtual_memory()
        swap = psutil.swap_memory()

        return [
            GaugeDoubleSnapshot("system.memory.usage_percent", mem.percent),
            GaugeLongSnapshot("system.memory.used_bytes", int(mem.used)),
            GaugeLongSnapshot("system.memory.available_bytes", int(mem.available)),
            GaugeLongSnapshot("system.memory.total_bytes", int(mem.total)),
            GaugeDoubleSnapshot("system.swap.usage_percent", swap.percent),
        ]
