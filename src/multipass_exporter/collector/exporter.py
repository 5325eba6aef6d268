"""
Prometheus collector for Multipass.

Each collect() call is one scrape: fetch a single fresh snapshot, derive all
readings from it, and hand them to prometheus_client as gauge families. If
the fetch fails the scrape publishes only `multipass_error 1`.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from multipass_exporter.collector.fetcher import SnapshotFetcher
from multipass_exporter.engine.deriver import MetricDeriver, MetricReading
from multipass_exporter.engine.descriptors import MetricDescriptor
from multipass_exporter.errors import CollectionError

log = logging.getLogger(__name__)


def _family(descriptor: MetricDescriptor) -> GaugeMetricFamily:
    return GaugeMetricFamily(
        descriptor.name,
        descriptor.help_text,
        labels=list(descriptor.label_names),
    )


def to_metric_families(readings: List[MetricReading]) -> List[GaugeMetricFamily]:
    """Group readings by descriptor, keeping first-seen order."""
    families: Dict[str, GaugeMetricFamily] = {}
    for reading in readings:
        family = families.get(reading.descriptor.name)
        if family is None:
            family = families[reading.descriptor.name] = _family(reading.descriptor)
        family.add_metric(list(reading.label_values), reading.value)
    return list(families.values())


class MultipassCollector(Collector):

    def __init__(self, fetcher: SnapshotFetcher, deriver: Optional[MetricDeriver] = None):
        self._fetcher = fetcher
        self._deriver = deriver or MetricDeriver()

    def scrape(self) -> List[MetricReading]:
        """One complete, fresh set of readings (or just the error reading)."""
        log.info("Starting metrics collection")
        try:
            snapshot = self._fetcher.fetch()
        except CollectionError as exc:
            log.error("Failed to get multipass info: %s", exc)
            return self._deriver.error_readings()

        readings = self._deriver.derive(snapshot)
        log.info("Finished metrics collection: %d readings", len(readings))
        return readings

    def collect(self) -> Iterator[GaugeMetricFamily]:
        yield from to_metric_families(self.scrape())

    def describe(self) -> Iterator[GaugeMetricFamily]:
        # Lets the registry learn our names without running multipass
        for descriptor in self._deriver.descriptors:
            yield _family(descriptor)

    def name(self) -> str:
        return f"Multipass ({self._fetcher.name()})"
