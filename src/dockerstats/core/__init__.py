"""Core module - configuration, constants and schemas."""

from __future__ import annotations

from dockerstats.core.config import load_config, merge_overrides
from dockerstats.core.constants import (
    APP_NAME,
    FULL_PROG_NAME,
    ID_LABEL_LENGTH,
    MIN_INTERVAL_SECONDS,
    UNKNOWN_CONTAINER_NAME,
)
from dockerstats.core.schemas import ExporterConfig

__all__ = [
    "APP_NAME",
    "ExporterConfig",
    "FULL_PROG_NAME",
    "ID_LABEL_LENGTH",
    "load_config",
    "merge_overrides",
    "MIN_INTERVAL_SECONDS",
    "UNKNOWN_CONTAINER_NAME",
]
