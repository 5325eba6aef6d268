"""
Turns one InstanceSnapshot into the full set of metric readings.

Every value is read from the snapshot passed in; nothing is fetched or
cached here, so derive() gives the same answer for the same snapshot.

Per-instance gauges treat zero/empty as "not measured" and skip the
instance rather than publish a fake zero. The CLI reports 0 used memory
and an empty cpu_count for stopped machines, and a zero in a dashboard
would read as a real measurement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from multipass_exporter.engine.descriptors import (
    LOAD_WINDOWS,
    STATE_COUNTERS,
    DescriptorTable,
    MetricDescriptor,
    build_descriptor_table,
)
from multipass_exporter.snapshot import InstanceRecord, InstanceSnapshot

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricReading:
    descriptor: MetricDescriptor
    value: float
    label_values: Tuple[str, ...] = ()

    @property
    def labels(self) -> dict:
        return dict(zip(self.descriptor.label_names, self.label_values))


def _instance_labels(record: InstanceRecord) -> Tuple[str, str]:
    return record.name, record.release


class MetricDeriver:

    def __init__(self, descriptors: Optional[DescriptorTable] = None):
        self._descriptors = descriptors or build_descriptor_table()

    @property
    def descriptors(self) -> DescriptorTable:
        return self._descriptors

    def derive(self, snapshot: InstanceSnapshot) -> List[MetricReading]:
        """Compute every reading for one scrape, in a fixed order."""
        readings: List[MetricReading] = []

        readings.extend(self._instance_counts(snapshot))
        readings.extend(self._memory(snapshot))
        readings.extend(self._cpus(snapshot))
        readings.extend(self._load(snapshot))

        return readings

    def error_readings(self) -> List[MetricReading]:
        """What a failed scrape publishes instead of the normal set."""
        return [MetricReading(self._descriptors["error"], 1.0)]

    # -- Individual metrics --

    def _instance_counts(self, snapshot: InstanceSnapshot) -> List[MetricReading]:
        total = len(snapshot)
        log.debug("Collecting instance metric total=%d", total)
        out = [MetricReading(self._descriptors["total"], float(total))]

        for key, state in STATE_COUNTERS:
            count = snapshot.count_state(state)
            log.debug("Collecting instance metric %s=%d", key, count)
            out.append(MetricReading(self._descriptors[key], float(count)))
        return out

    def _memory(self, snapshot: InstanceSnapshot) -> List[MetricReading]:
        descriptor = self._descriptors["memory_bytes"]
        out = []
        for record in snapshot.values():
            if not record.has_memory_usage:
                log.debug("Skipping instance %s - memory usage is 0", record.name)
                continue
            out.append(MetricReading(descriptor, float(record.memory_used_bytes), _instance_labels(record)))

        log.info("Collected memory metrics for %d of %d instances", len(out), len(snapshot))
        return out

    def _cpus(self, snapshot: InstanceSnapshot) -> List[MetricReading]:
        descriptor = self._descriptors["cpu_total"]
        out = []
        for record in snapshot.values():
            cpus = record.cpus
            if cpus is None:
                if record.cpu_count.strip():
                    log.warning("Skipping instance %s - unparseable cpu_count %r", record.name, record.cpu_count)
                else:
                    log.debug("Skipping instance %s - cpu_count is empty", record.name)
                continue
            out.append(MetricReading(descriptor, float(cpus), _instance_labels(record)))

        log.info("Collected CPU metrics for %d of %d instances", len(out), len(snapshot))
        return out

    def _load(self, snapshot: InstanceSnapshot) -> List[MetricReading]:
        descriptors = [self._descriptors[key] for key in LOAD_WINDOWS]
        out = []
        qualifying = 0
        for record in snapshot.values():
            load = record.load
            if load is None:
                log.debug(
                    "Skipping instance %s - load has %d values, need 3",
                    record.name, len(record.load_averages),
                )
                continue
            labels = _instance_labels(record)
            for descriptor, value in zip(descriptors, load):
                out.append(MetricReading(descriptor, value, labels))
            qualifying += 1

        log.info("Collected load metrics for %d of %d instances", qualifying, len(snapshot))
        return out
