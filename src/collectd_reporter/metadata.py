"""Addressing and timestamp values attached to every collectd sample."""

from __future__ import annotations

from dataclasses import dataclass, replace

DEFAULT_TYPE = "gauge"


@dataclass(frozen=True)
class MetaData:
    """Identifies where a sample belongs in collectd's naming scheme.

    One base value is built per reporting cycle with *host*, *timestamp* and
    *interval* fixed.  Per metric, :meth:`with_plugin` derives a copy naming
    the metric; per scalar field, :meth:`with_type_instance` derives a copy
    naming the field.  Copies never share mutable state, so a
    type instance from one metric cannot end up on another.
    """

    host: str
    timestamp: int
    interval: int
    plugin: str = ""
    type_instance: str = ""
    plugin_instance: str = ""
    type: str = DEFAULT_TYPE

    def __post_init__(self) -> None:
        if not self.host or not self.host.strip():
            raise ValueError("MetaData host must not be blank")

    def with_plugin(self, plugin: str) -> MetaData:
        """Return a copy addressed to *plugin* with no type instance set."""
        return replace(self, plugin=plugin, type_instance="")

    def with_type_instance(self, type_instance: str) -> MetaData:
        return replace(self, type_instance=type_instance)
