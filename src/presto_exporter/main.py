"""
presto_exporter entry point.

Usage:
    presto-exporter                                   Scrape http://localhost:8080, serve :9483
    presto-exporter --web.url http://coordinator:8080
    presto-exporter --web.listen-address 127.0.0.1:9483 --log.level debug
"""

from __future__ import annotations

import logging
import platform

import click
from rich.console import Console
from rich.logging import RichHandler

from presto_exporter import __version__
from presto_exporter.collector.presto_collector import PrestoCollector
from presto_exporter.config import (
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_TELEMETRY_PATH,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_WEB_URL,
    ConfigError,
    ExporterConfig,
)
from presto_exporter.server import build_registry, create_server

log = logging.getLogger("presto_exporter")

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}


def setup_logging(level: str):
    logging.basicConfig(
        level=LOG_LEVELS[level],
        format="[%(name)s] %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def build_context() -> str:
    return f"(python={platform.python_version()}, implementation={platform.python_implementation()}, platform={platform.platform()})"


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="presto_exporter")
@click.option("--web.listen-address", "listen_address", default=DEFAULT_LISTEN_ADDRESS,
              envvar="PRESTO_EXPORTER_LISTEN_ADDRESS", show_default=True,
              help="Address on which to expose metrics and web interface.")
@click.option("--web.telemetry-path", "telemetry_path", default=DEFAULT_TELEMETRY_PATH,
              envvar="PRESTO_EXPORTER_TELEMETRY_PATH", show_default=True,
              help="Path under which to expose metrics.")
@click.option("--web.url", "web_url", default=DEFAULT_WEB_URL,
              envvar="PRESTO_EXPORTER_WEB_URL", show_default=True,
              help="Presto cluster address.")
@click.option("--web.timeout", "timeout", type=float, default=DEFAULT_TIMEOUT_SECONDS,
              envvar="PRESTO_EXPORTER_TIMEOUT", show_default=True,
              help="Timeout in seconds for each request to the Presto coordinator.")
@click.option("--log.level", "log_level", type=click.Choice(list(LOG_LEVELS)), default="info",
              show_default=True, help="Only log messages with the given severity or above.")
def cli(listen_address: str, telemetry_path: str, web_url: str, timeout: float, log_level: str):
    """Prometheus exporter for Presto cluster metrics."""
    setup_logging(log_level)

    try:
        config = ExporterConfig(
            web_url=web_url,
            listen_address=listen_address,
            telemetry_path=telemetry_path,
            timeout_seconds=timeout,
        )
    except ConfigError as exc:
        raise click.UsageError(str(exc))

    log.info("Starting presto_exporter (version=%s)", __version__)
    log.info("Build context %s", build_context())

    collector = PrestoCollector(config)
    registry = build_registry(collector)
    log.info("Collecting from %s", collector.name())

    try:
        server = create_server(config, registry)
    except OSError as exc:
        log.critical("Could not listen on %s: %s", config.listen_address, exc)
        collector.close()
        raise SystemExit(1)

    log.info("Listening on %s", config.listen_address)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
        collector.close()


if __name__ == "__main__":
    cli()
