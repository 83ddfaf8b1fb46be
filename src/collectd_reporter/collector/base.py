"""Base interface for system resource collectors."""

from __future__ import annotations

import abc

from ..snapshot import MetricSnapshot


class BaseCollector(abc.ABC):
    """Abstract base class for system resource collectors."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Collector name used in configuration and logs."""

    @abc.abstractmethod
    def collect(self) -> list[MetricSnapshot]:
        """Read current resource metrics. Returns a list of snapshots."""
