"""
Static table of every metric the exporter exposes.

All of them are gauges under the presto_cluster_ namespace.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from prometheus_client.core import GaugeMetricFamily

NAMESPACE = "presto_cluster"

HOSTNAME_LABELS: Tuple[str, ...] = ("hostname",)

QUERY_LABELS: Tuple[str, ...] = (
    "hostname",
    "queryId",
    "state",
    "scheduled",
    "query",
    "queuedTime",
    "elapsedTime",
    "executionTime",
    "totalDrivers",
    "rawInputDataSize",
    "cumulativeUserMemory",
    "PeakUserMemoryReservation",
    "totalCpuTime",
    "totalScheduledTime",
)


@dataclass(frozen=True)
class MetricSpec:
    name: str
    help_text: str
    labels: Tuple[str, ...] = HOSTNAME_LABELS

    @property
    def full_name(self) -> str:
        return f"{NAMESPACE}_{self.name}"

    def family(self) -> GaugeMetricFamily:
        """An empty gauge family; add_metric() on it to attach samples."""
        return GaugeMetricFamily(self.full_name, self.help_text, labels=list(self.labels))


# (ClusterSnapshot attribute, descriptor), in exposition order
CLUSTER_GAUGES: Tuple[Tuple[str, MetricSpec], ...] = (
    ("running_queries", MetricSpec("running_queries", "Running requests of the presto cluster.")),
    ("blocked_queries", MetricSpec("blocked_queries", "Blocked queries of the presto cluster.")),
    ("queued_queries", MetricSpec("queued_queries", "Queued queries of the presto cluster.")),
    ("active_workers", MetricSpec("active_workers", "Active workers of the presto cluster.")),
    ("running_drivers", MetricSpec("running_drivers", "Running drivers of the presto cluster.")),
    ("reserved_memory", MetricSpec("reserved_memory", "Reserved memory of the presto cluster.")),
    ("total_input_rows", MetricSpec("total_input_rows", "Total input rows of the presto cluster.")),
    ("total_input_bytes", MetricSpec("total_input_bytes", "Total input bytes of the presto cluster.")),
    ("total_cpu_time_secs", MetricSpec("total_cpu_time_secs", "Total cpu time of the presto cluster.")),
)

UPTIME = MetricSpec("uptime", "Total up time of the presto cluster.")

QUERYS = MetricSpec("querys", "Querys of the presto cluster.", QUERY_LABELS)

ALL_METRICS: Tuple[MetricSpec, ...] = tuple(spec for _, spec in CLUSTER_GAUGES) + (UPTIME, QUERYS)
