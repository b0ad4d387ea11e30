"""Shared constants for dockerstats.

Centralized policy values so the workers, the reaper and the CLI agree on them.
"""

from __future__ import annotations

APP_NAME = "dockerstats"
FULL_PROG_NAME = "Simple Docker Stats Prometheus Exporter"

# Prefix of every exported metric name
METRIC_NAMESPACE = APP_NAME

# Label values use a fixed-length prefix of the container ID.
# Workers and the reaper must truncate identically or deletes will miss.
ID_LABEL_LENGTH = 12

# Name used when the runtime does not report any container name
UNKNOWN_CONTAINER_NAME = "unknown"

DEFAULT_PORT = 9487
DEFAULT_INTERVAL_SECONDS = 10
MIN_INTERVAL_SECONDS = 3
DEFAULT_MAX_WORKERS = 10
DEFAULT_FETCH_TIMEOUT_SECONDS = 10.0

# A container is evicted once unseen for longer than this many intervals
DEFAULT_STALENESS_FACTOR = 2.0

# Timeout for the startup ping against the Docker daemon
CONNECT_TIMEOUT_SECONDS = 5
