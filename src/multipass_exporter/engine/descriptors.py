"""
Metric descriptor table.

Built once at startup and handed to the deriver and the collector, instead
of registering metrics globally. Names, help strings and label sets are a
contract with whatever scrapes us, so treat changes here as breaking.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from multipass_exporter.snapshot import (
    STATE_DELETED,
    STATE_RUNNING,
    STATE_STOPPED,
    STATE_SUSPENDED,
)

INSTANCE_LABELS = ("name", "release")


@dataclass(frozen=True)
class MetricDescriptor:
    name: str
    help_text: str
    label_names: Tuple[str, ...] = ()
    metric_type: str = "gauge"


# key, name suffix, help text, labels
_SCHEMA = [
    ("total",        "instances_total",       "Total number of Multipass instances", ()),
    ("running",      "instances_running",     "Total number of Multipass running instances", ()),
    ("stopped",      "instances_stopped",     "Total number of Multipass stopped instances", ()),
    ("deleted",      "instances_deleted",     "Total number of Multipass deleted instances", ()),
    ("suspended",    "instances_suspended",   "Total number of Multipass suspended instances", ()),
    ("memory_bytes", "instance_memory_bytes", "Memory usage of Multipass instances in bytes", INSTANCE_LABELS),
    ("cpu_total",    "instance_cpu_total",    "Total number of CPUs in Multipass instances", INSTANCE_LABELS),
    ("load_1m",      "instance_load_1m",
     "Average number of processes running on the CPU or in queue waiting for CPU time in the last minute",
     INSTANCE_LABELS),
    ("load_5m",      "instance_load_5m",
     "Average number of processes running on the CPU or in queue waiting for CPU time in the last 5 minutes",
     INSTANCE_LABELS),
    ("load_15m",     "instance_load_15m",
     "Average number of processes running on the CPU or in queue waiting for CPU time in the last 15 minutes",
     INSTANCE_LABELS),
    ("error",        "error",                 "Error collecting metrics from Multipass", ()),
]

# Per-state counters, in emission order
STATE_COUNTERS = [
    ("running", STATE_RUNNING),
    ("stopped", STATE_STOPPED),
    ("deleted", STATE_DELETED),
    ("suspended", STATE_SUSPENDED),
]

LOAD_WINDOWS = ("load_1m", "load_5m", "load_15m")


class DescriptorTable:
    """Ordered, keyed collection of MetricDescriptors."""

    def __init__(self, descriptors: Dict[str, MetricDescriptor]):
        self._descriptors = dict(descriptors)

    def __getitem__(self, key: str) -> MetricDescriptor:
        return self._descriptors[key]

    def __iter__(self) -> Iterator[MetricDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)

    def names(self) -> List[str]:
        return [d.name for d in self._descriptors.values()]


def build_descriptor_table(namespace: str = "multipass") -> DescriptorTable:
    return DescriptorTable({
        key: MetricDescriptor(
            name=f"{namespace}_{suffix}",
            help_text=help_text,
            label_names=labels,
        )
        for key, suffix, help_text, labels in _SCHEMA
    })
