"""
Collector for a live Presto coordinator. On every scrape it fetches
/v1/cluster, /v1/info and /v1/query in that order and maps them onto
the presto_cluster_* gauges.

A scrape is all-or-nothing: if any of the three fetches fails, the
error is logged and no presto_cluster_* samples are produced for that
scrape. The next scrape starts from scratch.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from prometheus_client.core import GaugeMetricFamily

from presto_exporter.cluster import ClusterSnapshot, NodeInfoSnapshot, QueryRecord
from presto_exporter.collector.base import MetricsCollector
from presto_exporter.collector.client import PrestoClient, UpstreamError
from presto_exporter.collector.descriptors import ALL_METRICS, CLUSTER_GAUGES, QUERYS, UPTIME
from presto_exporter.config import ExporterConfig

log = logging.getLogger(__name__)


class PrestoCollector(MetricsCollector):

    def __init__(self, config: ExporterConfig, client: Optional[PrestoClient] = None):
        self._config = config
        self._client = client or PrestoClient(
            base_url=config.web_url,
            timeout_seconds=config.timeout_seconds,
        )

    def describe(self) -> List[GaugeMetricFamily]:
        return [spec.family() for spec in ALL_METRICS]

    def collect(self) -> List[GaugeMetricFamily]:
        try:
            cluster = self._client.fetch_cluster()
            info = self._client.fetch_info()
            queries = self._client.fetch_queries()
        except UpstreamError as exc:
            log.error("Scrape of %s aborted: %s", self._client.base_url, exc)
            return []

        return self.build_families(cluster, info, queries)

    def build_families(
        self,
        cluster: ClusterSnapshot,
        info: NodeInfoSnapshot,
        queries: List[QueryRecord],
    ) -> List[GaugeMetricFamily]:
        """Map decoded snapshots onto gauge families. No I/O."""
        hostname = self._config.hostname
        families = []

        for attr, spec in CLUSTER_GAUGES:
            family = spec.family()
            family.add_metric([hostname], getattr(cluster, attr))
            families.append(family)

        uptime = UPTIME.family()
        uptime.add_metric([hostname], self._uptime_days(info))
        families.append(uptime)

        querys = QUERYS.family()
        for record in queries:
            querys.add_metric(record.label_values(hostname), record.stats.cumulative_user_memory)
        families.append(querys)

        return families

    @staticmethod
    def _uptime_days(info: NodeInfoSnapshot) -> float:
        # A bad uptime string shouldn't cost us the rest of the scrape
        try:
            return info.uptime_days()
        except ValueError as exc:
            log.warning("Could not parse coordinator uptime: %s", exc)
            return 0.0

    def name(self) -> str:
        return f"Presto ({self._client.base_url})"

    def close(self):
        self._client.close()
