"""Shared fixtures: a fake coordinator served from a background thread."""

import pytest

from presto_exporter.collector.presto_collector import PrestoCollector
from presto_exporter.config import ExporterConfig
from presto_exporter.mock.fake_presto_server import FakeCoordinator, start_fake_server


@pytest.fixture
def coordinator():
    return FakeCoordinator()


@pytest.fixture
def coordinator_url(coordinator):
    server = start_fake_server(coordinator)
    host, port = server.server_address[:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def config(coordinator_url):
    return ExporterConfig(web_url=coordinator_url, listen_address="127.0.0.1:0", hostname="test-host")


@pytest.fixture
def collector(config):
    c = PrestoCollector(config)
    try:
        yield c
    finally:
        c.close()
