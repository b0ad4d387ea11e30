"""Eviction of containers that stopped reporting."""

from __future__ import annotations

import logging

from dockerstats.monitoring.base import label_id
from dockerstats.monitoring.history import DeltaStore
from dockerstats.monitoring.metrics import MetricSink

logger = logging.getLogger(__name__)


class Reaper:
    """Removes history and exported series of containers unseen for too long.

    Must only run after a polling cycle has fully joined, never alongside workers.
    """

    def __init__(self, store: DeltaStore, sink: MetricSink, max_age_seconds: float) -> None:
        """Initialize the reaper.

        Args:
            store: Delta store shared with the workers
            sink: Metric sink shared with the workers
            max_age_seconds: Staleness window; containers unseen for longer are evicted
        """
        self.store = store
        self.sink = sink
        self.max_age_seconds = max_age_seconds

    def reap(self, now: float) -> list[str]:
        """Evict every stale container.

        Returns:
            Full IDs of the evicted containers
        """
        evicted = []
        for container_id, entry in self.store.stale(now, self.max_age_seconds):
            short_id = label_id(container_id)
            logger.info(
                f"Container gone: {entry.name} (id: {short_id}). Removing from tracking."
            )
            self.sink.remove_series(entry.name, short_id)
            self.store.delete(container_id)
            evicted.append(container_id)
        return evicted
