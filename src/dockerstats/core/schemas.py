"""Pydantic schemas for dockerstats.

Defines the configuration value handed from the CLI layer into the polling core.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, field_validator

from dockerstats.core.constants import (
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_MAX_WORKERS,
    DEFAULT_PORT,
    DEFAULT_STALENESS_FACTOR,
    METRIC_NAMESPACE,
    MIN_INTERVAL_SECONDS,
)

logger = logging.getLogger(__name__)


class ExporterConfig(BaseModel):
    """Exporter configuration.

    Attributes:
        port: Port of the scrape endpoint
        listen_address: Address the scrape endpoint binds to
        interval: Polling interval in seconds (clamped to a minimum of 3)
        max_workers: Maximum number of concurrent stats requests
        host_ip: Docker host IP for a TCP connection
        host_port: Docker host port for a TCP connection
        fetch_timeout_seconds: Timeout applied to every Docker API request
        staleness_factor: Number of intervals a container may go unseen before eviction
        namespace: Prefix for exported metric names
    """

    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Port to expose metrics")
    listen_address: str = Field(default="0.0.0.0", description="Bind address for /metrics")
    interval: int = Field(
        default=DEFAULT_INTERVAL_SECONDS,
        description=f"Interval in seconds (min: {MIN_INTERVAL_SECONDS})",
    )
    max_workers: int = Field(
        default=DEFAULT_MAX_WORKERS, ge=1, description="Max concurrent API calls"
    )
    host_ip: str | None = Field(default=None, description="Docker host IP (for TCP connection)")
    host_port: int | None = Field(
        default=None, ge=1, le=65535, description="Docker host port (for TCP connection)"
    )
    fetch_timeout_seconds: float = Field(default=DEFAULT_FETCH_TIMEOUT_SECONDS, gt=0)
    staleness_factor: float = Field(default=DEFAULT_STALENESS_FACTOR, ge=1.0)
    namespace: str = Field(default=METRIC_NAMESPACE, min_length=1)

    @field_validator("interval")
    @classmethod
    def clamp_interval(cls, v: int) -> int:
        """Raise intervals below the floor instead of rejecting them."""
        if v < MIN_INTERVAL_SECONDS:
            logger.warning(f"Interval {v}s is below the minimum, using {MIN_INTERVAL_SECONDS}s")
            return MIN_INTERVAL_SECONDS
        return v

    @field_validator("host_ip")
    @classmethod
    def empty_host_ip_is_unset(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def docker_base_url(self) -> str | None:
        """TCP URL of the Docker daemon, or None to use the environment default."""
        if self.host_ip and self.host_port:
            return f"tcp://{self.host_ip}:{self.host_port}"
        return None

    @property
    def staleness_window_seconds(self) -> float:
        """How long a container may go unseen before the reaper evicts it."""
        return self.staleness_factor * self.interval
