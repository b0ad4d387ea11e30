"""Derivation of exported values from a snapshot and the previous sample.

Everything here is pure: no store access and no metric writes. ``SampleProcessor``
applies the resulting ``SampleUpdate``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from dockerstats.monitoring.base import CpuStats, StatsSnapshot
from dockerstats.monitoring.history import CpuHistoryEntry, NetHistoryEntry

logger = logging.getLogger(__name__)


@dataclass
class SampleUpdate:
    """Values to publish for one container and the baselines to store."""

    # None means "don't publish this tick"
    cpu_ratio: float | None
    # 0 means "no increment"
    rx_increment: int
    tx_increment: int
    memory_usage_bytes: float
    memory_limit_bytes: float
    memory_usage_ratio: float | None
    memory_rss_bytes: float | None
    blockio_read_bytes: float
    blockio_written_bytes: float
    cpu_entry: CpuHistoryEntry
    net_entry: NetHistoryEntry
    is_new: bool


def online_cpu_count(cpu: CpuStats) -> int:
    """Number of CPUs the container is scheduled on.

    Falls back to the length of the per-CPU breakdown when online_cpus is zero.
    """
    if cpu.online_cpus:
        return cpu.online_cpus
    return len(cpu.percpu_usage)


def compute_cpu_ratio(previous: CpuHistoryEntry | None, cpu: CpuStats) -> float | None:
    """CPU utilization in percent of one core, or None when nothing can be published.

    Returns None for the first observation and whenever either delta is not
    strictly positive (counter reset, unchanged system counter, jitter).
    """
    if previous is None:
        return None

    cpu_delta = float(cpu.total_usage) - float(previous.total_usage)
    system_delta = float(cpu.system_usage) - float(previous.system_usage)
    if cpu_delta <= 0 or system_delta <= 0:
        logger.debug(f"Skipping CPU ratio (cpu_delta={cpu_delta}, system_delta={system_delta})")
        return None

    return (cpu_delta / system_delta) * float(online_cpu_count(cpu)) * 100.0


def counter_increment(previous: int, current: int) -> int:
    """Increment to add to a monotonic counter, 0 on counter reset."""
    if current < previous:
        logger.debug(f"Counter reset detected ({previous} -> {current}), rebasing")
        return 0
    return current - previous


def compute_net_increments(
    previous: NetHistoryEntry | None, rx_bytes: int, tx_bytes: int
) -> tuple[int, int]:
    """Return the (rx, tx) increments since the previous sample.

    The first observation only establishes a baseline and yields (0, 0).
    """
    if previous is None:
        return 0, 0
    return (
        counter_increment(previous.rx_bytes, rx_bytes),
        counter_increment(previous.tx_bytes, tx_bytes),
    )


def derive_sample(
    name: str,
    snapshot: StatsSnapshot,
    previous_cpu: CpuHistoryEntry | None,
    previous_net: NetHistoryEntry | None,
    now: float,
) -> SampleUpdate:
    """Compute everything to publish for one snapshot plus the next baselines.

    Args:
        name: Display name of the container
        snapshot: Current stats snapshot
        previous_cpu: Stored CPU baseline, None on first observation
        previous_net: Stored network baseline, None on first observation
        now: Monotonic timestamp of this observation

    Returns:
        SampleUpdate; baselines always hold the current counters
    """
    rx_bytes = snapshot.rx_bytes
    tx_bytes = snapshot.tx_bytes
    rx_increment, tx_increment = compute_net_increments(previous_net, rx_bytes, tx_bytes)

    memory = snapshot.memory
    memory_usage = float(memory.usage)
    memory_limit = float(memory.limit)
    memory_ratio = (memory_usage / memory_limit) * 100.0 if memory_limit > 0 else None

    read_bytes, write_bytes = snapshot.blockio_totals()

    return SampleUpdate(
        cpu_ratio=compute_cpu_ratio(previous_cpu, snapshot.cpu),
        rx_increment=rx_increment,
        tx_increment=tx_increment,
        memory_usage_bytes=memory_usage,
        memory_limit_bytes=memory_limit,
        memory_usage_ratio=memory_ratio,
        memory_rss_bytes=float(memory.rss) if memory.rss is not None else None,
        blockio_read_bytes=float(read_bytes),
        blockio_written_bytes=float(write_bytes),
        cpu_entry=CpuHistoryEntry(
            total_usage=snapshot.cpu.total_usage,
            system_usage=snapshot.cpu.system_usage,
            last_seen=now,
            name=name,
        ),
        net_entry=NetHistoryEntry(rx_bytes=rx_bytes, tx_bytes=tx_bytes),
        is_new=previous_cpu is None,
    )
