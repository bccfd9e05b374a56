"""
HTTP surface of the exporter: a landing page at / and the metric
exposition at the telemetry path.

The telemetry path is prometheus_client's own WSGI app, so content
negotiation, gzip, HEAD and name[] filtering behave as in any other
client_python exporter. The server is threaded like start_wsgi_server(),
so overlapping scrapes don't queue behind a slow coordinator.
"""

from __future__ import annotations

import logging
import socket
from socketserver import ThreadingMixIn
from typing import Callable
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer

from prometheus_client import CollectorRegistry, PlatformCollector, ProcessCollector, make_wsgi_app

from presto_exporter.collector.base import MetricsCollector
from presto_exporter.config import ExporterConfig

log = logging.getLogger(__name__)

LANDING_PAGE = """<html>
<head><title>Presto Exporter</title></head>
<body>
<h1>Presto Exporter</h1>
<p><a href="{path}">Metrics</a></p>
</body>
</html>
"""


def build_registry(collector: MetricsCollector) -> CollectorRegistry:
    """Dedicated registry: our collector plus process/platform stats."""
    registry = CollectorRegistry()
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    registry.register(collector)
    return registry


class _ExporterServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


class _ExporterServerV6(_ExporterServer):
    address_family = socket.AF_INET6


class _ExporterRequestHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        log.debug("%s - %s", self.address_string(), format % args)


def make_app(registry: CollectorRegistry, telemetry_path: str) -> Callable:
    metrics_app = make_wsgi_app(registry)
    landing = LANDING_PAGE.format(path=telemetry_path).encode()

    def app(environ, start_response):
        path = environ.get("PATH_INFO", "")
        if path == telemetry_path:
            return metrics_app(environ, start_response)
        if path == "/":
            start_response("200 OK", [
                ("Content-Type", "text/html; charset=utf-8"),
                ("Content-Length", str(len(landing))),
            ])
            return [landing]

        body = b"404 page not found\n"
        start_response("404 Not Found", [
            ("Content-Type", "text/plain; charset=utf-8"),
            ("Content-Length", str(len(body))),
        ])
        return [body]

    return app


def create_server(config: ExporterConfig, registry: CollectorRegistry) -> WSGIServer:
    """Bind the exporter's HTTP server. Raises OSError if the bind fails."""
    host, port = config.bind
    server_cls = _ExporterServerV6 if ":" in host else _ExporterServer
    server = server_cls((host, port), _ExporterRequestHandler)
    server.set_app(make_app(registry, config.telemetry_path))
    return server
