"""Network resource collector."""

from __future__ import annotations

import psutil

from ..snapshot import CounterSnapshot, MetricSnapshot
from .base import BaseCollector


class NetworkCollector(BaseCollector):
    """Collects per-interface network I/O counters.

    Loopback is skipped.  If *interface* names an existing interface only
    that one is reported.
    """

    def __init__(self, interface: str = "") -> None:
        self._interface = interface

    @property
    def name(self) -> str:
        return "network"

    def collect(self) -> list[MetricSnapshot]:
        counters = psutil.net_io_counters(pernic=True)
        if self._interface and self._interface in counters:
            interfaces = [self._interface]
        else:
            interfaces = list(counters.keys())

        snapshots: list[MetricSnapshot] = []
        for iface in interfaces:
            if iface == "lo":
                continue
            nio = counters[iface]
            prefix = f"system.network.{iface}"
            snapshots.append(CounterSnapshot(f"{prefix}.bytes_sent", nio.bytes_sent))
            snapshots.append(CounterSnapshot(f"{prefix}.bytes_recv", nio.bytes_recv))
            snapshots.append(CounterSnapshot(f"{prefix}.packets_sent", nio.packets_sent))
            snapshots.append(CounterSnapshot(f"{prefix}.packets_recv", nio.packets_recv))
        return snapshots
