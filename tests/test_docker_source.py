"""Tests for DockerSnapshotSource."""

from unittest.mock import MagicMock, patch

import pytest
from docker.errors import APIError, DockerException

from dockerstats.monitoring.base import SnapshotSourceError
from dockerstats.monitoring.docker_source import DockerSnapshotSource, parse_stats


def create_mock_stats(
    memory_usage: int = 1024 * 1024 * 100,  # 100 MB
    memory_limit: int = 1024 * 1024 * 1024,  # 1 GB
    blkio_read: int = 1024 * 1024,  # 1 MB
    blkio_write: int = 512 * 1024,  # 512 KB
) -> dict:
    """Create a mock one-shot Docker stats response."""
    return {
        "memory_stats": {
            "usage": memory_usage,
            "limit": memory_limit,
            "stats": {"rss": 50 * 1024 * 1024},
        },
        "cpu_stats": {
            "cpu_usage": {"total_usage": 1000000000, "percpu_usage": [500000000, 500000000]},
            "system_cpu_usage": 10000000000,
            "online_cpus": 2,
        },
        # one-shot mode leaves the pre-sample empty
        "precpu_stats": {"cpu_usage": {"total_usage": 0}},
        "networks": {
            "eth0": {"rx_bytes": 1000, "tx_bytes": 2000},
            "eth1": {"rx_bytes": 30, "tx_bytes": 40},
        },
        "blkio_stats": {
            "io_service_bytes_recursive": [
                {"major": 8, "minor": 0, "op": "Read", "value": blkio_read},
                {"major": 8, "minor": 0, "op": "Write", "value": blkio_write},
                {"major": 8, "minor": 0, "op": "Sync", "value": 7},
                {"major": 8, "minor": 16, "op": "read", "value": blkio_read},
            ],
        },
    }


class TestParseStats:
    """Tests for parse_stats."""

    def test_cpu(self):
        snapshot = parse_stats(create_mock_stats())

        assert snapshot.cpu.total_usage == 1000000000
        assert snapshot.cpu.system_usage == 10000000000
        assert snapshot.cpu.online_cpus == 2
        assert snapshot.cpu.percpu_usage == [500000000, 500000000]

    def test_memory(self):
        snapshot = parse_stats(create_mock_stats(memory_usage=200 * 1024 * 1024))

        assert snapshot.memory.usage == 200 * 1024 * 1024
        assert snapshot.memory.limit == 1024 * 1024 * 1024
        assert snapshot.memory.rss == 50 * 1024 * 1024

    def test_memory_without_rss(self):
        stats = create_mock_stats()
        stats["memory_stats"]["stats"] = {"anon": 1}
        assert parse_stats(stats).memory.rss is None

    def test_networks_summed(self):
        snapshot = parse_stats(create_mock_stats())
        assert snapshot.rx_bytes == 1030
        assert snapshot.tx_bytes == 2040

    def test_blkio(self):
        snapshot = parse_stats(create_mock_stats(blkio_read=10, blkio_write=5))
        assert snapshot.blockio_totals() == (20, 5)

    def test_sparse_payload(self):
        """cgroups v2 hosts report null blkio lists and no networks for network_mode=none."""
        snapshot = parse_stats({"blkio_stats": {"io_service_bytes_recursive": None}})

        assert snapshot.blockio_totals() == (0, 0)
        assert snapshot.rx_bytes == 0
        assert snapshot.cpu.online_cpus == 0
        assert snapshot.memory.usage == 0

    def test_malformed_payload(self):
        with pytest.raises(TypeError):
            parse_stats(["not", "a", "dict"])
        with pytest.raises(ValueError):
            parse_stats({"memory_stats": {"usage": "lots"}})


class TestDockerSnapshotSource:
    """Tests for DockerSnapshotSource class."""

    def test_list_containers(self):
        client = MagicMock()
        client.api.containers.return_value = [
            {"Id": "a" * 64, "Names": ["/web"]},
            {"Id": "b" * 64, "Names": None},
        ]

        refs = DockerSnapshotSource(client).list_containers()

        assert [r.id for r in refs] == ["a" * 64, "b" * 64]
        assert refs[0].name == "web"
        assert refs[0].short_id == "a" * 12
        assert refs[1].name == "unknown"

    def test_list_failure(self):
        client = MagicMock()
        client.api.containers.side_effect = APIError("boom")

        with pytest.raises(SnapshotSourceError):
            DockerSnapshotSource(client).list_containers()

    def test_fetch_stats_one_shot(self):
        client = MagicMock()
        client.api.stats.return_value = create_mock_stats()

        snapshot = DockerSnapshotSource(client).fetch_stats("c" * 64)

        client.api.stats.assert_called_once_with("c" * 64, stream=False, one_shot=True)
        assert snapshot.memory.usage == 1024 * 1024 * 100

    def test_fetch_failure(self):
        client = MagicMock()
        client.api.stats.side_effect = APIError("No such container")

        with pytest.raises(SnapshotSourceError):
            DockerSnapshotSource(client).fetch_stats("c" * 64)

    def test_fetch_decode_failure(self):
        client = MagicMock()
        client.api.stats.return_value = {"cpu_stats": {"cpu_usage": {"total_usage": "x"}}}

        with pytest.raises(SnapshotSourceError):
            DockerSnapshotSource(client).fetch_stats("c" * 64)

    @patch("dockerstats.monitoring.docker_source.docker")
    def test_connect_tcp(self, mock_docker):
        client = mock_docker.DockerClient.return_value
        client.api.timeout = 10.0

        source = DockerSnapshotSource.connect(base_url="tcp://10.0.0.5:2375", timeout=10.0)

        mock_docker.DockerClient.assert_called_once_with(
            base_url="tcp://10.0.0.5:2375", version="auto", timeout=10.0
        )
        client.ping.assert_called_once()
        assert client.api.timeout == 10.0
        assert isinstance(source, DockerSnapshotSource)

    @patch("dockerstats.monitoring.docker_source.docker")
    def test_connect_from_env(self, mock_docker):
        mock_docker.from_env.return_value.api.timeout = 10.0

        DockerSnapshotSource.connect()

        mock_docker.from_env.assert_called_once_with(version="auto", timeout=10.0)

    @patch("dockerstats.monitoring.docker_source.docker")
    def test_connect_failure(self, mock_docker):
        mock_docker.from_env.side_effect = DockerException("socket not found")

        with pytest.raises(SnapshotSourceError):
            DockerSnapshotSource.connect()

    def test_ping_failure(self):
        client = MagicMock()
        client.api.timeout = 10.0
        client.ping.side_effect = DockerException("connection refused")

        with pytest.raises(SnapshotSourceError):
            DockerSnapshotSource(client).ping()
        assert client.api.timeout == 10.0
