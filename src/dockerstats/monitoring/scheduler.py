"""Polling loop for container stats.

Each cycle lists the running containers, fetches one snapshot per container on a
bounded worker pool, waits for every task, and then runs the reaper. Cycles never
overlap: a slow cycle delays the next one.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field

from dockerstats.monitoring.base import ContainerRef, SnapshotSource, SnapshotSourceError
from dockerstats.monitoring.processor import SampleProcessor
from dockerstats.monitoring.reaper import Reaper

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    """Outcome of one polling cycle."""

    listed: int = 0
    sampled: int = 0
    failed: int = 0
    evicted: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0


class PollingScheduler:
    """Runs polling cycles on a fixed interval until stopped.

    Example:
        ```python
        scheduler = PollingScheduler(source, processor, reaper, interval=10, max_workers=10)
        thread = threading.Thread(target=scheduler.run_forever, daemon=True)
        thread.start()
        ...
        scheduler.stop()
        thread.join()
        scheduler.close()
        ```
    """

    def __init__(
        self,
        source: SnapshotSource,
        processor: SampleProcessor,
        reaper: Reaper,
        interval: float,
        max_workers: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the scheduler.

        Args:
            source: Where container lists and snapshots come from
            processor: Applies each snapshot to the store and sink
            reaper: Evicts stale containers after every cycle
            interval: Seconds between cycle starts
            max_workers: Maximum number of snapshots fetched at once
            clock: Monotonic clock used for observation timestamps
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.source = source
        self.processor = processor
        self.reaper = reaper
        self.interval = interval
        self.max_workers = max_workers
        self._clock = clock
        self._stop = threading.Event()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="dockerstats-worker"
        )

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def run_cycle(self) -> CycleResult | None:
        """Run one polling cycle.

        Returns:
            CycleResult, or None if the container list couldn't be fetched and the
            cycle was skipped without touching any state
        """
        started = time.monotonic()
        try:
            containers = self.source.list_containers()
        except SnapshotSourceError as e:
            logger.warning(f"Skipping cycle, could not list containers: {e}")
            return None

        futures: dict[Future[bool], ContainerRef] = {
            self._executor.submit(self._sample, ref): ref for ref in containers
        }
        wait(futures)

        result = CycleResult(listed=len(containers))
        for future, ref in futures.items():
            exc = future.exception()
            if exc is not None:
                logger.error(
                    f"Unexpected error processing {ref.name} (id: {ref.short_id})",
                    exc_info=exc,
                )
                result.failed += 1
            elif future.result():
                result.sampled += 1
            else:
                result.failed += 1

        result.evicted = self.reaper.reap(self._clock())
        result.duration_seconds = time.monotonic() - started
        logger.debug(
            f"Cycle done: {result.sampled}/{result.listed} sampled, "
            f"{len(result.evicted)} evicted in {result.duration_seconds:.2f}s"
        )
        return result

    def _sample(self, ref: ContainerRef) -> bool:
        """Fetch and process one container. Returns False if nothing was applied."""
        if self._stop.is_set():
            return False

        try:
            snapshot = self.source.fetch_stats(ref.id)
        except SnapshotSourceError as e:
            logger.warning(f"Could not sample {ref.name} (id: {ref.short_id}): {e}")
            return False

        self.processor.process(ref, snapshot, self._clock())
        return True

    def run_forever(self) -> None:
        """Run cycles until ``stop()`` is called."""
        logger.info(
            f"Polling every {self.interval}s with up to {self.max_workers} concurrent requests"
        )
        while not self._stop.is_set():
            started = time.monotonic()
            self.run_cycle()
            elapsed = time.monotonic() - started
            self._stop.wait(max(self.interval - elapsed, 0.0))
        logger.debug("Polling loop stopped")

    def stop(self) -> None:
        """Ask the loop to exit; interrupts the inter-cycle sleep."""
        self._stop.set()

    def close(self) -> None:
        """Stop the loop and wait for in-flight tasks to drain."""
        self.stop()
        self._executor.shutdown(wait=True)
