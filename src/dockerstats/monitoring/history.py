"""Per-container history of cumulative counters.

The Docker stats one-shot mode doesn't provide a usable previous sample, so the
last observed counters are kept here and compared against on the next poll.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class CpuHistoryEntry:
    """Last observed CPU counters of a container."""

    total_usage: int
    system_usage: int
    last_seen: float  # Monotonic timestamp (seconds)
    name: str


@dataclass(frozen=True)
class NetHistoryEntry:
    """Last observed network byte totals of a container (all interfaces)."""

    rx_bytes: int
    tx_bytes: int


class DeltaStore:
    """Thread-safe store of the previous sample per container ID.

    Entries are replaced, never merged. Every operation takes the internal lock,
    so workers handling different containers may call it concurrently.
    """

    def __init__(self) -> None:
        self._cpu: dict[str, CpuHistoryEntry] = {}
        self._net: dict[str, NetHistoryEntry] = {}
        self._lock = threading.Lock()

    def get(self, container_id: str) -> tuple[CpuHistoryEntry | None, NetHistoryEntry | None]:
        """Return the stored (cpu, net) entries, None where nothing is stored yet."""
        with self._lock:
            return self._cpu.get(container_id), self._net.get(container_id)

    def put(self, container_id: str, cpu: CpuHistoryEntry, net: NetHistoryEntry) -> None:
        """Replace both entries for a container."""
        with self._lock:
            self._cpu[container_id] = cpu
            self._net[container_id] = net

    def delete(self, container_id: str) -> None:
        """Forget a container. Unknown IDs are ignored."""
        with self._lock:
            self._cpu.pop(container_id, None)
            self._net.pop(container_id, None)

    def stale(self, now: float, max_age: float) -> list[tuple[str, CpuHistoryEntry]]:
        """Return containers not seen for more than ``max_age`` seconds."""
        with self._lock:
            return [
                (container_id, entry)
                for container_id, entry in self._cpu.items()
                if now - entry.last_seen > max_age
            ]

    def __contains__(self, container_id: object) -> bool:
        with self._lock:
            return container_id in self._cpu

    def __len__(self) -> int:
        with self._lock:
            return len(self._cpu)
