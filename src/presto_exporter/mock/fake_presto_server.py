"""
Fake Presto coordinator for running the exporter without a cluster.

    python -m presto_exporter.mock.fake_presto_server
    presto-exporter --web.url http://localhost:8080

Serves /v1/cluster, /v1/info and /v1/query from a FakeCoordinator.
Tests swap payloads, force status codes or serve raw bodies through it.
"""

from __future__ import annotations

import json
import random
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer, ThreadingHTTPServer
from typing import Any, Dict, List, Optional, Type


def sample_cluster() -> Dict[str, Any]:
    return {
        "runningQueries": 3,
        "blockedQueries": 1,
        "queuedQueries": 2,
        "activeWorkers": 8,
        "runningDrivers": 112,
        "reservedMemory": 2147483648.0,
        "totalInputRows": 987654321,
        "totalInputBytes": 123456789012,
        "totalCpuTimeSecs": 45678,
    }


def sample_info() -> Dict[str, Any]:
    return {
        "nodeVersion": {"version": "0.287"},
        "environment": "production",
        "coordinator": True,
        "starting": False,
        "uptime": "5.20d",
    }


def sample_query(query_id: str = "20240101_000000_00001_abcde", **stats_overrides) -> Dict[str, Any]:
    stats = {
        "queuedTime": "1.23ms",
        "elapsedTime": "4.56s",
        "executionTime": "4.50s",
        "totalDrivers": 7,
        "rawInputDataSize": "1.21GB",
        "cumulativeUserMemory": 1234500.0,
        "peakUserMemoryReservation": "64MB",
        "totalCpuTime": "12.34s",
        "totalScheduledTime": "15.00s",
    }
    stats.update(stats_overrides)
    return {
        "queryId": query_id,
        "state": "RUNNING",
        "scheduled": True,
        "query": "SELECT count(*) FROM hive.web.page_views",
        "queryStats": stats,
    }


def generate_queries(count: int, seed: int = 42) -> List[Dict[str, Any]]:
    """A handful of believable queries for local runs."""
    rng = random.Random(seed)
    states = ["QUEUED", "PLANNING", "RUNNING", "RUNNING", "FINISHING", "FINISHED"]
    queries = []
    for i in range(count):
        state = rng.choice(states)
        query = sample_query(
            query_id=f"20240101_000000_{i:05d}_{rng.randrange(16 ** 5):05x}",
            totalDrivers=rng.randint(1, 400),
            cumulativeUserMemory=float(rng.randint(0, 10 ** 10)),
            elapsedTime=f"{rng.uniform(0.1, 600):.2f}s",
        )
        query["state"] = state
        query["scheduled"] = state != "QUEUED"
        queries.append(query)
    return queries


class FakeCoordinator:
    """Mutable payloads behind the fake /v1 endpoints.

    `statuses` forces a status code per resource ("cluster", "info",
    "query"); `raw_bodies` replaces the JSON with arbitrary bytes.
    """

    def __init__(self, queries: Optional[List[Dict[str, Any]]] = None):
        self._lock = threading.Lock()
        self.payloads: Dict[str, Any] = {
            "cluster": sample_cluster(),
            "info": sample_info(),
            "query": [sample_query()] if queries is None else queries,
        }
        self.statuses: Dict[str, int] = {}
        self.raw_bodies: Dict[str, bytes] = {}
        self.hits: Dict[str, int] = {"cluster": 0, "info": 0, "query": 0}

    def respond(self, resource: str):
        """Returns (status, body) for one /v1 resource."""
        with self._lock:
            if resource not in self.payloads:
                return 404, b"not found"
            self.hits[resource] += 1
            status = self.statuses.get(resource, 200)
            body = self.raw_bodies.get(resource)
            if body is None:
                body = json.dumps(self.payloads[resource]).encode()
            return status, body

    def reset_failures(self):
        with self._lock:
            self.statuses.clear()
            self.raw_bodies.clear()


def make_handler(coordinator: FakeCoordinator) -> Type[BaseHTTPRequestHandler]:

    class _CoordinatorHandler(BaseHTTPRequestHandler):
        def do_GET(self):
            prefix = "/v1/"
            if not self.path.startswith(prefix):
                self.send_response(404)
                self.end_headers()
                return

            status, body = coordinator.respond(self.path[len(prefix):].strip("/"))
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):
            pass  # Suppress request logging noise

    return _CoordinatorHandler


def start_fake_server(coordinator: FakeCoordinator, host: str = "127.0.0.1", port: int = 0) -> HTTPServer:
    """Serve the coordinator from a daemon thread. Port 0 picks a free one."""
    server = ThreadingHTTPServer((host, port), make_handler(coordinator))
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server


def run_fake_server(host: str = "127.0.0.1", port: int = 8080):
    coordinator = FakeCoordinator(queries=generate_queries(5))
    server = ThreadingHTTPServer((host, port), make_handler(coordinator))
    print(f"Fake Presto coordinator running at http://{host}:{port}/v1/cluster")
    print("Press Ctrl+C to stop.\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    server.server_close()
    print("\nServer stopped.")


if __name__ == "__main__":
    run_fake_server()
