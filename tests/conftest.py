"""Shared fixtures for dockerstats tests."""

from __future__ import annotations

import threading
import time

import pytest
from prometheus_client import CollectorRegistry

from dockerstats.monitoring.base import (
    ContainerRef,
    CpuStats,
    MemoryStats,
    NetworkStats,
    SnapshotSource,
    SnapshotSourceError,
    StatsSnapshot,
)
from dockerstats.monitoring.history import DeltaStore
from dockerstats.monitoring.metrics import MetricSink
from dockerstats.monitoring.processor import SampleProcessor


def make_snapshot(
    total: int = 1000,
    system: int = 50000,
    online_cpus: int = 1,
    percpu: list[int] | None = None,
    rx: int = 0,
    tx: int = 0,
    memory_usage: int = 100 * 1024 * 1024,
    memory_limit: int = 1024 * 1024 * 1024,
    rss: int | None = None,
) -> StatsSnapshot:
    """Build a snapshot with a single network interface."""
    return StatsSnapshot(
        cpu=CpuStats(
            total_usage=total,
            system_usage=system,
            online_cpus=online_cpus,
            percpu_usage=percpu or [],
        ),
        memory=MemoryStats(usage=memory_usage, limit=memory_limit, rss=rss),
        networks=[NetworkStats(rx_bytes=rx, tx_bytes=tx)],
    )


class FakeSource(SnapshotSource):
    """In-memory snapshot source with optional latency and failures."""

    def __init__(self, containers: list[ContainerRef] | None = None, delay: float = 0.0) -> None:
        self.containers = containers or []
        self.snapshots: dict[str, StatsSnapshot] = {}
        self.failing_ids: set[str] = set()
        self.fail_list = False
        self.delay = delay
        self.fetch_calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def list_containers(self) -> list[ContainerRef]:
        if self.fail_list:
            raise SnapshotSourceError("daemon unavailable")
        return list(self.containers)

    def fetch_stats(self, container_id: str) -> StatsSnapshot:
        with self._lock:
            self.fetch_calls.append(container_id)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if container_id in self.failing_ids:
                raise SnapshotSourceError(f"no such container: {container_id}")
            return self.snapshots.get(container_id, make_snapshot())
        finally:
            with self._lock:
                self.in_flight -= 1


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def sink() -> MetricSink:
    return MetricSink(registry=CollectorRegistry())


@pytest.fixture
def store() -> DeltaStore:
    return DeltaStore()


@pytest.fixture
def processor(store: DeltaStore, sink: MetricSink) -> SampleProcessor:
    return SampleProcessor(store, sink)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
