"""Tests for Reaper."""

from conftest import make_snapshot
from dockerstats.monitoring.base import ContainerRef
from dockerstats.monitoring.reaper import Reaper

GONE = ContainerRef(id="aaaaaaaaaaaa1111", names=("/gone",))
ALIVE = ContainerRef(id="bbbbbbbbbbbb2222", names=("/alive",))


class TestReaper:
    """Tests for Reaper class."""

    def test_evicts_stale_container_and_series(self, processor, sink, store):
        reaper = Reaper(store, sink, max_age_seconds=20.0)
        processor.process(GONE, make_snapshot(total=1, system=10, rx=0), now=0.0)
        processor.process(GONE, make_snapshot(total=11, system=20, rx=10), now=10.0)
        processor.process(ALIVE, make_snapshot(), now=25.0)

        evicted = reaper.reap(now=30.5)

        assert evicted == [GONE.id]
        assert GONE.id not in store
        assert ALIVE.id in store
        gone_labels = {"name": "gone", "id": "aaaaaaaaaaaa"}
        for metric in (
            "cpu_usage_ratio",
            "memory_usage_bytes",
            "memory_limit_bytes",
            "memory_usage_ratio",
            "blockio_read_bytes",
            "network_received_bytes_total",
        ):
            assert sink.registry.get_sample_value(f"dockerstats_{metric}", gone_labels) is None
        alive_labels = {"name": "alive", "id": "bbbbbbbbbbbb"}
        alive_memory = sink.registry.get_sample_value(
            "dockerstats_memory_usage_bytes", alive_labels
        )
        assert alive_memory is not None

    def test_retains_within_window(self, processor, sink, store):
        reaper = Reaper(store, sink, max_age_seconds=20.0)
        processor.process(ALIVE, make_snapshot(), now=0.0)

        assert reaper.reap(now=20.0) == []
        assert ALIVE.id in store

    def test_reappearing_container_starts_fresh(self, processor, sink, store):
        reaper = Reaper(store, sink, max_age_seconds=20.0)
        processor.process(GONE, make_snapshot(total=100, system=1000), now=0.0)
        reaper.reap(now=100.0)

        update = processor.process(GONE, make_snapshot(total=200, system=2000), now=101.0)

        assert update.is_new is True
        assert update.cpu_ratio is None

    def test_renamed_container_leaves_no_series_after_eviction(self, processor, sink, store):
        reaper = Reaper(store, sink, max_age_seconds=20.0)
        container_id = "abc123456789def0"
        processor.process(ContainerRef(id=container_id, names=("/old",)), make_snapshot(), now=0.0)
        processor.process(ContainerRef(id=container_id, names=("/new",)), make_snapshot(), now=10.0)

        assert reaper.reap(now=100.0) == [container_id]

        assert len(store) == 0
        for name in ("old", "new"):
            labels = {"name": name, "id": "abc123456789"}
            value = sink.registry.get_sample_value("dockerstats_memory_usage_bytes", labels)
            assert value is None
