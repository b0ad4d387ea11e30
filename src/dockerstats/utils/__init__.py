"""Utils module - Shared utilities."""

from __future__ import annotations

from dockerstats.utils.logging import JsonFormatter, get_logger, setup_logging

__all__ = ["JsonFormatter", "setup_logging", "get_logger"]
