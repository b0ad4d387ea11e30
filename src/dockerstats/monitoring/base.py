"""Snapshot source abstraction and the snapshot data model.

The polling core only talks to a container runtime through ``SnapshotSource``.
Implementations:
- DockerSnapshotSource: Docker Engine API via the docker SDK
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from dockerstats.core.constants import ID_LABEL_LENGTH, UNKNOWN_CONTAINER_NAME


class SnapshotSourceError(RuntimeError):
    """Raised when the container runtime cannot be reached or answers with an error."""


def display_name(names: list[str] | None) -> str:
    """Human-readable container name from the runtime's name list.

    Docker reports names with a single leading slash ("/web"); only that one
    is dropped. The first name wins.
    """
    if not names:
        return UNKNOWN_CONTAINER_NAME
    name = names[0].removeprefix("/")
    return name or UNKNOWN_CONTAINER_NAME


def label_id(container_id: str) -> str:
    """Identity label value: fixed-length prefix of the full container ID."""
    return container_id[:ID_LABEL_LENGTH]


@dataclass(frozen=True)
class ContainerRef:
    """A live container as reported by the runtime's list call."""

    id: str
    names: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return display_name(list(self.names))

    @property
    def short_id(self) -> str:
        return label_id(self.id)


@dataclass
class CpuStats:
    """Cumulative CPU counters of one snapshot."""

    total_usage: int = 0  # Container CPU time (ns)
    system_usage: int = 0  # Host CPU time reference (ns)
    online_cpus: int = 0  # 0 when the runtime doesn't report it
    percpu_usage: list[int] = field(default_factory=list)


@dataclass
class MemoryStats:
    """Instantaneous memory figures of one snapshot."""

    usage: int = 0
    limit: int = 0
    rss: int | None = None  # Only reported on cgroups v1


@dataclass
class NetworkStats:
    """Cumulative byte counters of one network interface."""

    rx_bytes: int = 0
    tx_bytes: int = 0


@dataclass
class BlockIOEntry:
    """One io_service_bytes_recursive entry."""

    op: str
    value: int = 0


@dataclass
class StatsSnapshot:
    """A single point-in-time resource usage sample for one container."""

    cpu: CpuStats = field(default_factory=CpuStats)
    memory: MemoryStats = field(default_factory=MemoryStats)
    networks: list[NetworkStats] = field(default_factory=list)
    blockio: list[BlockIOEntry] = field(default_factory=list)

    @property
    def rx_bytes(self) -> int:
        """Received bytes summed across all interfaces."""
        return sum(n.rx_bytes for n in self.networks)

    @property
    def tx_bytes(self) -> int:
        """Transmitted bytes summed across all interfaces."""
        return sum(n.tx_bytes for n in self.networks)

    def blockio_totals(self) -> tuple[int, int]:
        """Return (read_bytes, write_bytes) summed over all block devices."""
        read_bytes = 0
        write_bytes = 0
        for entry in self.blockio:
            op = entry.op.lower()
            if op == "read":
                read_bytes += entry.value
            elif op == "write":
                write_bytes += entry.value
        return read_bytes, write_bytes


class SnapshotSource(ABC):
    """Abstract base class for container runtime clients.

    Both calls may fail; implementations raise ``SnapshotSourceError``.
    Implementations must be safe to call from several threads at once.
    """

    @abstractmethod
    def list_containers(self) -> list[ContainerRef]:
        """Return the currently running containers.

        Raises:
            SnapshotSourceError: If the runtime can't be queried
        """
        pass

    @abstractmethod
    def fetch_stats(self, container_id: str) -> StatsSnapshot:
        """Fetch one resource usage snapshot for a container.

        Args:
            container_id: Full container ID

        Raises:
            SnapshotSourceError: If the request fails or the payload can't be decoded
        """
        pass

    def close(self) -> None:
        """Release any connection held by the source."""
        return None
