"""Point-in-time metric snapshots handed to the reporter each cycle."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class CounterSnapshot:
    """A monotonically counted value."""

    name: str
    count: int


@dataclass(frozen=True)
class GaugeLongSnapshot:
    """An integer gauge reading."""

    name: str
    value: int


@dataclass(frozen=True)
class GaugeDoubleSnapshot:
    """A floating point gauge reading."""

    name: str
    value: float


@dataclass(frozen=True)
class ValueSnapshot:
    """Summary of a distribution of recorded values."""

    name: str
    count: int
    max: float
    mean: float
    total: float


@dataclass(frozen=True)
class TimedSnapshot:
    """Summary of recorded durations; reported exactly like a value distribution."""

    name: str
    count: int
    max: float
    mean: float
    total: float


MetricSnapshot = Union[
    CounterSnapshot,
    GaugeLongSnapshot,
    GaugeDoubleSnapshot,
    ValueSnapshot,
    TimedSnapshot,
]


@dataclass
class ReportBatch:
    """The snapshots for one reporting cycle and the interval they cover."""

    interval_seconds: int
    metrics: list[MetricSnapshot] = field(default_factory=list)
