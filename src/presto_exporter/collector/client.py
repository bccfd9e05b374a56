"""
HTTP client for the coordinator's /v1 status endpoints.

Every fetch is all-or-nothing: anything short of a 200 with a body that
decodes into the expected shape raises UpstreamError.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, TypeVar

import httpx

from presto_exporter.cluster import (
    ClusterSnapshot,
    NodeInfoSnapshot,
    QueryRecord,
    SnapshotDecodeError,
    decode_query_list,
)

log = logging.getLogger(__name__)

T = TypeVar("T")


class UpstreamError(Exception):
    """A /v1 resource couldn't be fetched or decoded."""

    def __init__(self, resource: str, message: str):
        super().__init__(f"/v1/{resource}: {message}")
        self.resource = resource


class PrestoClient:

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            timeout=timeout_seconds,
            follow_redirects=True,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def fetch_cluster(self) -> ClusterSnapshot:
        return self._fetch("cluster", ClusterSnapshot.from_json)

    def fetch_info(self) -> NodeInfoSnapshot:
        return self._fetch("info", NodeInfoSnapshot.from_json)

    def fetch_queries(self) -> List[QueryRecord]:
        return self._fetch("query", decode_query_list)

    def _fetch(self, resource: str, decode: Callable[[Any], T]) -> T:
        body = self._get_json(resource)
        try:
            return decode(body)
        except SnapshotDecodeError as exc:
            raise UpstreamError(resource, f"unexpected document shape: {exc}") from exc

    def _get_json(self, resource: str) -> Any:
        url = f"{self._base_url}/v1/{resource}"
        log.debug("GET %s", url)

        try:
            response = self._client.get(url)
        except httpx.HTTPError as exc:
            raise UpstreamError(resource, f"request to {url} failed: {exc!r}") from exc

        if response.status_code != 200:
            raise UpstreamError(
                resource, f"unexpected status {response.status_code} from {url}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(resource, f"invalid JSON body: {exc}") from exc

    def close(self):
        self._client.close()
