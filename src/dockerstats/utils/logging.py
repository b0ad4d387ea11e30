"""Log output for the exporter's polling loop and scrape server.

The docker SDK talks to the daemon through urllib3, which logs every stats
request at DEBUG. Those loggers are held at WARNING unless the exporter itself
runs at DEBUG, so a busy host doesn't bury the per-cycle messages.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from rich.logging import RichHandler

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CHATTY_LOGGERS = ("urllib3", "docker")


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now().astimezone().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _console_handler(level: str, rich_console: bool, json_format: bool) -> logging.Handler:
    if json_format:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        return handler
    if rich_console:
        return RichHandler(
            level=level,
            rich_tracebacks=True,
            markup=False,
            show_time=True,
            show_path=False,
        )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    rich_console: bool = True,
    json_format: bool = False,
) -> None:
    """Route exporter logs to the console and, optionally, a file.

    Args:
        level: Threshold for dockerstats messages (DEBUG, INFO, WARNING, ERROR)
        log_file: Extra plain-text log destination; parent dirs are created
        rich_console: Colored console output via rich
        json_format: JSON lines on stdout; takes precedence over rich_console
    """
    level = level.upper()
    handlers = [_console_handler(level, rich_console, json_format)]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(level=getattr(logging, level), handlers=handlers, force=True)

    chatty_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
