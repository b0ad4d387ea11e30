"""Prometheus metrics exported by dockerstats.

All series live in a private ``CollectorRegistry`` so the process, platform and
GC collectors of the default registry are not exported alongside them.
"""

from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    generate_latest,
)

from dockerstats.core.constants import METRIC_NAMESPACE

LABEL_NAMES = ("name", "id")


class MetricSink:
    """Labelled gauges and counters for per-container resource usage.

    prometheus_client metrics are thread-safe, so workers may publish for
    different containers concurrently.
    """

    def __init__(
        self,
        namespace: str = METRIC_NAMESPACE,
        registry: CollectorRegistry | None = None,
    ) -> None:
        self.registry = registry if registry is not None else CollectorRegistry(auto_describe=True)

        def gauge(name: str, documentation: str) -> Gauge:
            return Gauge(
                f"{namespace}_{name}", documentation, LABEL_NAMES, registry=self.registry
            )

        def counter(name: str, documentation: str) -> Counter:
            return Counter(
                f"{namespace}_{name}", documentation, LABEL_NAMES, registry=self.registry
            )

        self.cpu_usage_ratio = gauge("cpu_usage_ratio", "CPU usage in percent of one core")
        self.memory_usage_bytes = gauge("memory_usage_bytes", "Memory usage in bytes")
        self.memory_usage_rss_bytes = gauge("memory_usage_rss_bytes", "Resident memory in bytes")
        self.memory_limit_bytes = gauge("memory_limit_bytes", "Memory limit in bytes")
        self.memory_usage_ratio = gauge(
            "memory_usage_ratio", "Memory usage in percent of the limit"
        )
        self.blockio_read_bytes = gauge("blockio_read_bytes", "Bytes read from block devices")
        self.blockio_written_bytes = gauge(
            "blockio_written_bytes", "Bytes written to block devices"
        )
        self.network_received_bytes = counter(
            "network_received_bytes_total", "Bytes received over all interfaces"
        )
        self.network_transmitted_bytes = counter(
            "network_transmitted_bytes_total", "Bytes transmitted over all interfaces"
        )

    @property
    def all_metrics(self) -> list[Gauge | Counter]:
        return [
            self.cpu_usage_ratio,
            self.memory_usage_bytes,
            self.memory_usage_rss_bytes,
            self.memory_limit_bytes,
            self.memory_usage_ratio,
            self.network_received_bytes,
            self.network_transmitted_bytes,
            self.blockio_read_bytes,
            self.blockio_written_bytes,
        ]

    def set_gauge(self, gauge: Gauge, name: str, short_id: str, value: float) -> None:
        gauge.labels(name=name, id=short_id).set(value)

    def inc_counter(self, counter: Counter, name: str, short_id: str, amount: float) -> None:
        """Add to a counter; zero amounts are skipped."""
        if amount > 0:
            counter.labels(name=name, id=short_id).inc(amount)

    def remove_series(self, name: str, short_id: str) -> None:
        """Delete every series labelled (name, id). Missing series are ignored."""
        for metric in self.all_metrics:
            try:
                metric.remove(name, short_id)
            except KeyError:
                pass

    def render(self) -> tuple[bytes, str]:
        """Return the current exposition payload and its content type."""
        return generate_latest(self.registry), CONTENT_TYPE_LATEST
