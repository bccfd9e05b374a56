"""
Exporter configuration.

Built once at startup from the command line and handed to the collector
and the HTTP server. Nothing mutates it afterwards, so concurrent scrapes
can read it freely.
"""

from __future__ import annotations

import socket
from dataclasses import dataclass, field
from typing import Tuple

DEFAULT_LISTEN_ADDRESS = ":9483"
DEFAULT_TELEMETRY_PATH = "/metrics"
DEFAULT_WEB_URL = "http://localhost:8080"
DEFAULT_TIMEOUT_SECONDS = 5.0


class ConfigError(ValueError):
    pass


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split "[host]:port" into (host, port).

    An empty host means all IPv4 interfaces (0.0.0.0); use "[::]:port"
    to listen on IPv6. IPv6 hosts go in brackets, e.g. "[::1]:9483".
    """
    host, sep, port_str = address.rpartition(":")
    if not sep:
        raise ConfigError(f"listen address {address!r} has no port")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    try:
        port = int(port_str)
    except ValueError:
        raise ConfigError(f"invalid port {port_str!r} in listen address {address!r}") from None

    if not 0 <= port <= 65535:
        raise ConfigError(f"port {port} out of range in listen address {address!r}")

    return host or "0.0.0.0", port


@dataclass(frozen=True)
class ExporterConfig:
    web_url: str = DEFAULT_WEB_URL
    listen_address: str = DEFAULT_LISTEN_ADDRESS
    telemetry_path: str = DEFAULT_TELEMETRY_PATH
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    # Resolved once; every sample carries it as the "hostname" label
    hostname: str = field(default_factory=socket.gethostname)

    def __post_init__(self):
        self.validate()

    def validate(self):
        if not self.telemetry_path.startswith("/") or self.telemetry_path == "/":
            raise ConfigError(
                f"telemetry path must start with '/' and not be the root, got {self.telemetry_path!r}"
            )
        if self.timeout_seconds <= 0:
            raise ConfigError(f"timeout must be > 0, got {self.timeout_seconds}")
        if not self.web_url:
            raise ConfigError("web url must not be empty")
        parse_listen_address(self.listen_address)

    @property
    def bind(self) -> Tuple[str, int]:
        return parse_listen_address(self.listen_address)
