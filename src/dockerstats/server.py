"""HTTP scrape endpoint.

Serves the metric sink at ``/metrics`` and a liveness probe at ``/health``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from socketserver import ThreadingMixIn
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import make_wsgi_app

from dockerstats.monitoring.metrics import MetricSink

logger = logging.getLogger(__name__)

StartResponse = Callable[..., Any]


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """Handle scrapes on separate threads so a slow client can't block others."""

    daemon_threads = True


class _QuietHandler(WSGIRequestHandler):
    """Route access logs to debug instead of stderr."""

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug(f"{self.address_string()} - {format % args}")


def create_app(sink: MetricSink) -> Callable[[dict[str, Any], StartResponse], Iterable[bytes]]:
    """Build the WSGI application for a metric sink."""
    metrics_app = make_wsgi_app(sink.registry)

    def app(environ: dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        path = environ.get("PATH_INFO", "/")
        if path == "/metrics":
            return metrics_app(environ, start_response)
        if path == "/health":
            start_response("200 OK", [("Content-Type", "text/plain; charset=utf-8")])
            return [b"OK"]
        start_response("404 Not Found", [("Content-Type", "text/plain; charset=utf-8")])
        return [b"Not Found"]

    return app


class MetricsServer:
    """Background HTTP server for the scrape endpoint."""

    def __init__(self, sink: MetricSink, port: int, address: str = "0.0.0.0") -> None:
        self._httpd = make_server(
            address,
            port,
            create_app(sink),
            server_class=_ThreadingWSGIServer,
            handler_class=_QuietHandler,
        )
        self._thread: threading.Thread | None = None

    @property
    def port(self) -> int:
        return self._httpd.server_port

    def start(self) -> None:
        """Start serving on a daemon thread."""
        self._thread = threading.Thread(
            target=self._httpd.serve_forever, name="dockerstats-http", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._httpd.shutdown()
        self._httpd.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None
