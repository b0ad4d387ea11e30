"""DockerSnapshotSource - SnapshotSource implementation using the Docker Engine API.

Uses the low-level API client so that listing containers costs a single request
(the high-level ``containers.list()`` inspects every container) and stats are
requested in one-shot mode, which skips the daemon's second pre-sample.

Note: One-shot stats leave ``precpu_stats`` empty, so CPU utilization has to be
derived from our own previous sample (see ``dockerstats.monitoring.derive``).
"""

from __future__ import annotations

import logging
from typing import Any

import docker
from docker.errors import DockerException
from requests.exceptions import RequestException

from dockerstats.core.constants import CONNECT_TIMEOUT_SECONDS, DEFAULT_FETCH_TIMEOUT_SECONDS
from dockerstats.monitoring.base import (
    BlockIOEntry,
    ContainerRef,
    CpuStats,
    MemoryStats,
    NetworkStats,
    SnapshotSource,
    SnapshotSourceError,
    StatsSnapshot,
    label_id,
)

logger = logging.getLogger(__name__)


def parse_stats(stats: dict[str, Any]) -> StatsSnapshot:
    """Parse a Docker stats JSON payload into a StatsSnapshot.

    Missing sections are treated as zero; a payload of the wrong shape raises.

    Raises:
        KeyError, TypeError, ValueError: If the payload is malformed
    """
    if not isinstance(stats, dict):
        raise TypeError(f"Unexpected stats payload type: {type(stats).__name__}")

    cpu_stats = stats.get("cpu_stats") or {}
    cpu_usage = cpu_stats.get("cpu_usage") or {}
    cpu = CpuStats(
        total_usage=int(cpu_usage.get("total_usage", 0)),
        system_usage=int(cpu_stats.get("system_cpu_usage", 0)),
        online_cpus=int(cpu_stats.get("online_cpus") or 0),
        percpu_usage=[int(v) for v in cpu_usage.get("percpu_usage") or []],
    )

    memory_stats = stats.get("memory_stats") or {}
    detailed = memory_stats.get("stats") or {}
    memory = MemoryStats(
        usage=int(memory_stats.get("usage", 0)),
        limit=int(memory_stats.get("limit", 0)),
        rss=int(detailed["rss"]) if "rss" in detailed else None,
    )

    # "networks" is absent for containers running with network_mode=none
    networks = [
        NetworkStats(rx_bytes=int(n.get("rx_bytes", 0)), tx_bytes=int(n.get("tx_bytes", 0)))
        for n in (stats.get("networks") or {}).values()
    ]

    # io_service_bytes_recursive is null on some cgroups v2 hosts
    blkio_stats = stats.get("blkio_stats") or {}
    blockio = [
        BlockIOEntry(op=str(entry.get("op", "")), value=int(entry.get("value", 0)))
        for entry in blkio_stats.get("io_service_bytes_recursive") or []
    ]

    return StatsSnapshot(cpu=cpu, memory=memory, networks=networks, blockio=blockio)


class DockerSnapshotSource(SnapshotSource):
    """SnapshotSource backed by a Docker daemon.

    Example:
        ```python
        source = DockerSnapshotSource.connect(base_url="tcp://10.0.0.5:2375")
        for ref in source.list_containers():
            snapshot = source.fetch_stats(ref.id)
            print(ref.name, snapshot.memory.usage)
        ```
    """

    def __init__(self, client: docker.DockerClient) -> None:
        """Wrap an existing Docker client.

        Args:
            client: Connected docker SDK client
        """
        self._client = client

    @classmethod
    def connect(
        cls,
        base_url: str | None = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
    ) -> DockerSnapshotSource:
        """Create a client, negotiate the API version and ping the daemon.

        Args:
            base_url: Daemon URL (e.g. ``tcp://host:2375``); None uses DOCKER_HOST
                or the default local socket
            timeout: Timeout in seconds applied to every API request

        Raises:
            SnapshotSourceError: If the daemon can't be reached
        """
        if base_url:
            logger.info(f"Connecting to Docker on {base_url}...")
        else:
            logger.info("Connecting to Docker on default socket (/var/run/docker.sock)...")

        try:
            if base_url:
                client = docker.DockerClient(base_url=base_url, version="auto", timeout=timeout)
            else:
                client = docker.from_env(version="auto", timeout=timeout)
        except DockerException as e:
            raise SnapshotSourceError(f"Unable to create Docker client: {e}") from e

        source = cls(client)
        source.ping()
        logger.info("Connection established")
        return source

    def ping(self) -> None:
        """Fail fast if the daemon doesn't answer.

        Raises:
            SnapshotSourceError: If the ping fails
        """
        previous_timeout = self._client.api.timeout
        self._client.api.timeout = min(previous_timeout, CONNECT_TIMEOUT_SECONDS)
        try:
            self._client.ping()
        except (DockerException, RequestException) as e:
            raise SnapshotSourceError(f"Could not connect to Docker: {e}") from e
        finally:
            self._client.api.timeout = previous_timeout

    def list_containers(self) -> list[ContainerRef]:
        """Return running containers (the API default excludes stopped ones)."""
        try:
            containers = self._client.api.containers()
        except (DockerException, RequestException) as e:
            raise SnapshotSourceError(f"ContainerList: {e}") from e

        return [ContainerRef(id=c["Id"], names=tuple(c.get("Names") or ())) for c in containers]

    def fetch_stats(self, container_id: str) -> StatsSnapshot:
        """Fetch a one-shot stats sample for a container."""
        try:
            stats = self._client.api.stats(container_id, stream=False, one_shot=True)
        except (DockerException, RequestException) as e:
            raise SnapshotSourceError(f"Stats for {label_id(container_id)}: {e}") from e

        try:
            return parse_stats(stats)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise SnapshotSourceError(
                f"Could not decode stats for {label_id(container_id)}: {e}"
            ) from e

    def close(self) -> None:
        self._client.close()
