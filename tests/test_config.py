"""Tests for ExporterConfig and listen-address parsing."""

import socket

import pytest

from presto_exporter.config import ConfigError, ExporterConfig, parse_listen_address


def test_defaults():
    config = ExporterConfig()
    assert config.web_url == "http://localhost:8080"
    assert config.listen_address == ":9483"
    assert config.telemetry_path == "/metrics"
    assert config.timeout_seconds == 5.0
    assert config.hostname == socket.gethostname()
    assert config.bind == ("0.0.0.0", 9483)


@pytest.mark.parametrize("address, expected", [
    (":9483", ("0.0.0.0", 9483)),
    ("127.0.0.1:9000", ("127.0.0.1", 9000)),
    ("exporter.local:80", ("exporter.local", 80)),
    ("[::1]:9483", ("::1", 9483)),
    ("[::]:0", ("::", 0)),
])
def test_parse_listen_address(address, expected):
    assert parse_listen_address(address) == expected


@pytest.mark.parametrize("address", ["9483", "localhost", "host:http", ":70000", ":-1"])
def test_parse_listen_address_rejects_bad_ports(address):
    with pytest.raises(ConfigError):
        parse_listen_address(address)


@pytest.mark.parametrize("kwargs", [
    {"telemetry_path": "metrics"},
    {"telemetry_path": "/"},
    {"timeout_seconds": 0},
    {"web_url": ""},
    {"listen_address": "nowhere"},
])
def test_invalid_config_is_rejected(kwargs):
    with pytest.raises(ConfigError):
        ExporterConfig(hostname="h", **kwargs)


def test_config_is_immutable():
    config = ExporterConfig(hostname="h")
    with pytest.raises(AttributeError):
        config.web_url = "http://elsewhere:8080"
