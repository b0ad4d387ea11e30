"""CLI for the Docker stats Prometheus exporter.

Provides a command-line interface using Typer for:
- Serving metrics (polling loop + scrape endpoint)
- Generating a sample configuration file
"""

from __future__ import annotations

import signal
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from dockerstats import __version__
from dockerstats.core.config import load_config, merge_overrides
from dockerstats.core.constants import FULL_PROG_NAME
from dockerstats.core.schemas import ExporterConfig
from dockerstats.monitoring.base import SnapshotSourceError
from dockerstats.monitoring.docker_source import DockerSnapshotSource
from dockerstats.monitoring.history import DeltaStore
from dockerstats.monitoring.metrics import MetricSink
from dockerstats.monitoring.processor import SampleProcessor
from dockerstats.monitoring.reaper import Reaper
from dockerstats.monitoring.scheduler import PollingScheduler
from dockerstats.server import MetricsServer
from dockerstats.utils.logging import get_logger, setup_logging

app = typer.Typer(
    name="dockerstats",
    help=FULL_PROG_NAME,
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{FULL_PROG_NAME} (Version: {__version__})")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Simple Docker Stats Prometheus Exporter."""


@app.command()
def serve(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to configuration file (YAML/JSON)"
    ),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to expose metrics"),
    interval: int | None = typer.Option(
        None, "--interval", "-i", help="Interval in seconds (min: 3)"
    ),
    host_ip: str | None = typer.Option(
        None, "--hostip", help="Docker host IP (for TCP connection)"
    ),
    host_port: int | None = typer.Option(
        None, "--hostport", help="Docker host port (for TCP connection)"
    ),
    max_workers: int | None = typer.Option(
        None, "--workers", "-w", help="Max concurrent API calls"
    ),
    log_level: str = typer.Option("INFO", "--log-level", "-l", help="Logging level"),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file in addition to console"
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Output logs in JSON format (for programmatic parsing)"
    ),
) -> None:
    """Poll Docker stats and serve them for Prometheus."""
    setup_logging(
        level=log_level, log_file=log_file, json_format=json_logs, rich_console=not json_logs
    )

    try:
        exporter_config = load_config(config) if config is not None else ExporterConfig()
        exporter_config = merge_overrides(
            exporter_config,
            {
                "port": port,
                "interval": interval,
                "host_ip": host_ip,
                "host_port": host_port,
                "max_workers": max_workers,
            },
        )
    except Exception as e:
        console.print(f"[bold red]Error loading config: {e}[/]")
        raise typer.Exit(1) from e

    if not json_logs:
        _show_config_summary(exporter_config)

    try:
        source = DockerSnapshotSource.connect(
            base_url=exporter_config.docker_base_url,
            timeout=exporter_config.fetch_timeout_seconds,
        )
    except SnapshotSourceError as e:
        logger.critical(f"FATAL: {e}")
        raise typer.Exit(1) from e

    store = DeltaStore()
    sink = MetricSink(namespace=exporter_config.namespace)
    scheduler = PollingScheduler(
        source=source,
        processor=SampleProcessor(store, sink),
        reaper=Reaper(store, sink, exporter_config.staleness_window_seconds),
        interval=exporter_config.interval,
        max_workers=exporter_config.max_workers,
    )

    try:
        server = MetricsServer(sink, exporter_config.port, exporter_config.listen_address)
    except OSError as e:
        logger.critical(f"FATAL: Server failed: {e}")
        scheduler.close()
        source.close()
        raise typer.Exit(1) from e

    signal.signal(signal.SIGTERM, lambda signum, frame: scheduler.stop())
    server.start()
    logger.info(f"{FULL_PROG_NAME} listening on :{server.port}")

    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        scheduler.close()
        server.stop()
        source.close()


@app.command()
def init_config(
    output: Path = typer.Option(
        Path("dockerstats.yaml"), "--output", "-o", help="Output configuration file"
    ),
) -> None:
    """Generate a sample configuration file."""
    sample_config = """\
# Simple Docker Stats Prometheus Exporter configuration

# Scrape endpoint
port: 9487
listen_address: "0.0.0.0"

# Polling interval in seconds (values below 3 are raised to 3)
interval: 10

# Maximum number of concurrent stats requests against the daemon
max_workers: 10

# Remote daemon over TCP; leave unset to use DOCKER_HOST or /var/run/docker.sock
# host_ip: 10.0.0.5
# host_port: 2375

# Timeout for every Docker API request (seconds)
fetch_timeout_seconds: 10

# Containers unseen for staleness_factor * interval seconds are dropped
staleness_factor: 2
"""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(sample_config)
    console.print(f"[bold green]Sample configuration written to {output}[/]")


def _show_config_summary(config: ExporterConfig) -> None:
    """Display a summary of the exporter configuration."""
    table = Table(title=FULL_PROG_NAME)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Version", __version__)
    table.add_row("Listen", f"{config.listen_address}:{config.port}")
    table.add_row("Docker", config.docker_base_url or "default socket")
    table.add_row("Interval", f"{config.interval}s")
    table.add_row("Workers", str(config.max_workers))
    table.add_row("Evict After", f"{config.staleness_window_seconds:g}s")

    console.print(table)


if __name__ == "__main__":
    app()
