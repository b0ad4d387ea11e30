"""Simple Docker Stats Prometheus Exporter - Core package."""

from __future__ import annotations

from dockerstats.core.schemas import ExporterConfig

__version__ = "0.1.1"

__all__ = [
    "ExporterConfig",
    "__version__",
]
