"""Monitoring module - Stats polling and Prometheus publication.

Components:
- DockerSnapshotSource: Docker Engine API client
- DeltaStore: previous sample per container
- SampleProcessor: derives and publishes values from a snapshot
- Reaper: evicts containers that stopped reporting
- PollingScheduler: fixed-interval cycles with bounded fan-out
"""

from __future__ import annotations

from dockerstats.monitoring.base import (
    ContainerRef,
    SnapshotSource,
    SnapshotSourceError,
    StatsSnapshot,
)
from dockerstats.monitoring.docker_source import DockerSnapshotSource, parse_stats
from dockerstats.monitoring.history import CpuHistoryEntry, DeltaStore, NetHistoryEntry
from dockerstats.monitoring.metrics import MetricSink
from dockerstats.monitoring.processor import SampleProcessor
from dockerstats.monitoring.reaper import Reaper
from dockerstats.monitoring.scheduler import CycleResult, PollingScheduler

__all__ = [
    "ContainerRef",
    "CpuHistoryEntry",
    "CycleResult",
    "DeltaStore",
    "DockerSnapshotSource",
    "MetricSink",
    "NetHistoryEntry",
    "parse_stats",
    "PollingScheduler",
    "Reaper",
    "SampleProcessor",
    "SnapshotSource",
    "SnapshotSourceError",
    "StatsSnapshot",
]
