"""Applies derived sample values to the delta store and the metric sink."""

from __future__ import annotations

import logging

from dockerstats.monitoring.base import ContainerRef, StatsSnapshot
from dockerstats.monitoring.derive import SampleUpdate, derive_sample
from dockerstats.monitoring.history import DeltaStore
from dockerstats.monitoring.metrics import MetricSink

logger = logging.getLogger(__name__)


class SampleProcessor:
    """Turns one snapshot into published values and an advanced baseline.

    Example:
        ```python
        processor = SampleProcessor(DeltaStore(), MetricSink())
        processor.process(ref, source.fetch_stats(ref.id), now=time.monotonic())
        ```
    """

    def __init__(self, store: DeltaStore, sink: MetricSink) -> None:
        self.store = store
        self.sink = sink

    def process(self, ref: ContainerRef, snapshot: StatsSnapshot, now: float) -> SampleUpdate:
        """Derive, store and publish one snapshot.

        Args:
            ref: Container the snapshot belongs to
            snapshot: Freshly fetched stats
            now: Monotonic timestamp of the observation

        Returns:
            The SampleUpdate that was applied
        """
        name = ref.name
        previous_cpu, previous_net = self.store.get(ref.id)
        update = derive_sample(name, snapshot, previous_cpu, previous_net, now)

        if update.is_new:
            logger.info(f"New container detected: {name} (id: {ref.short_id})")
        elif previous_cpu is not None and previous_cpu.name != name:
            # Series are keyed by (name, id); drop the old label set before publishing
            logger.info(f"Container renamed: {previous_cpu.name} -> {name} (id: {ref.short_id})")
            self.sink.remove_series(previous_cpu.name, ref.short_id)

        self.store.put(ref.id, update.cpu_entry, update.net_entry)
        self._publish(name, ref.short_id, update)
        return update

    def _publish(self, name: str, short_id: str, update: SampleUpdate) -> None:
        sink = self.sink

        if update.cpu_ratio is not None:
            sink.set_gauge(sink.cpu_usage_ratio, name, short_id, update.cpu_ratio)

        sink.set_gauge(sink.memory_usage_bytes, name, short_id, update.memory_usage_bytes)
        sink.set_gauge(sink.memory_limit_bytes, name, short_id, update.memory_limit_bytes)
        if update.memory_usage_ratio is not None:
            sink.set_gauge(sink.memory_usage_ratio, name, short_id, update.memory_usage_ratio)
        if update.memory_rss_bytes is not None:
            sink.set_gauge(sink.memory_usage_rss_bytes, name, short_id, update.memory_rss_bytes)

        sink.inc_counter(sink.network_received_bytes, name, short_id, update.rx_increment)
        sink.inc_counter(sink.network_transmitted_bytes, name, short_id, update.tx_increment)

        sink.set_gauge(sink.blockio_read_bytes, name, short_id, update.blockio_read_bytes)
        sink.set_gauge(sink.blockio_written_bytes, name, short_id, update.blockio_written_bytes)
