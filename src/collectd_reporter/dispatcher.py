"""Translate metric snapshots into collectd samples."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .errors import UnsupportedSnapshotError
from .metadata import MetaData
from .snapshot import (
    CounterSnapshot,
    GaugeDoubleSnapshot,
    GaugeLongSnapshot,
    MetricSnapshot,
    TimedSnapshot,
    ValueSnapshot,
)

Number = Union[int, float]

_DISTRIBUTION_FIELDS = ("count", "max", "mean", "total")

# type instance names per snapshot kind; each name is also the attribute read
FIELDS_BY_KIND: dict[type, tuple[str, ...]] = {
    CounterSnapshot: ("count",),
    GaugeLongSnapshot: ("value",),
    GaugeDoubleSnapshot: ("value",),
    ValueSnapshot: _DISTRIBUTION_FIELDS,
    TimedSnapshot: _DISTRIBUTION_FIELDS,
}


@dataclass(frozen=True)
class Sample:
    """One write destined for the packet writer."""

    metadata: MetaData
    values: tuple[Number, ...]


def dispatch(metadata: MetaData, snapshot: MetricSnapshot) -> list[Sample]:
    """Return the samples to write for *snapshot*, in write order.

    The plugin is set to the snapshot name once, then each scalar field gets
    its own type instance.  No I/O happens here.
    """
    try:
        fields = FIELDS_BY_KIND[type(snapshot)]
    except KeyError:
        raise UnsupportedSnapshotError(
            f"no sample mapping for snapshot kind {type(snapshot).__name__}"
        ) from None

    plugin_meta = metadata.with_plugin(snapshot.name)
    return [
        Sample(plugin_meta.with_type_instance(name), (getattr(snapshot, name),))
        for name in fields
    ]
