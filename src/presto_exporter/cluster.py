"""
Snapshot types for the coordinator's /v1 status documents.

These mirror the JSON the coordinator returns at /v1/cluster, /v1/info
and /v1/query. Each one is decoded fresh on every scrape and thrown
away once its samples are emitted.

Decoding is strict about types but lenient about presence: a missing or
null field takes its zero value, a field of the wrong JSON type fails
the whole document.
"""

from __future__ import annotations

import math
import re
import struct
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional


class SnapshotDecodeError(ValueError):
    """A status document didn't have the shape we expect."""


def _require_object(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise SnapshotDecodeError(f"{what}: expected a JSON object, got {type(data).__name__}")
    return data


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise SnapshotDecodeError(f"{key}: expected a string, got {value!r}")
    return value


def _float(data: Mapping[str, Any], key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    # bool is an int subclass, but JSON true/false is not a number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SnapshotDecodeError(f"{key}: expected a number, got {value!r}")
    return float(value)


def _int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise SnapshotDecodeError(f"{key}: expected an integer, got {value!r}")
    return value


def _bool(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise SnapshotDecodeError(f"{key}: expected a boolean, got {value!r}")
    return value


@dataclass(frozen=True)
class ClusterSnapshot:
    """Cluster-wide counters from /v1/cluster."""

    running_queries: float = 0.0
    blocked_queries: float = 0.0
    queued_queries: float = 0.0
    active_workers: float = 0.0
    running_drivers: float = 0.0
    reserved_memory: float = 0.0
    total_input_rows: float = 0.0
    total_input_bytes: float = 0.0
    total_cpu_time_secs: float = 0.0

    @classmethod
    def from_json(cls, data: Any) -> "ClusterSnapshot":
        data = _require_object(data, "cluster")
        return cls(
            running_queries=_float(data, "runningQueries"),
            blocked_queries=_float(data, "blockedQueries"),
            queued_queries=_float(data, "queuedQueries"),
            active_workers=_float(data, "activeWorkers"),
            running_drivers=_float(data, "runningDrivers"),
            reserved_memory=_float(data, "reservedMemory"),
            total_input_rows=_float(data, "totalInputRows"),
            total_input_bytes=_float(data, "totalInputBytes"),
            total_cpu_time_secs=_float(data, "totalCpuTimeSecs"),
        )


@dataclass(frozen=True)
class NodeInfoSnapshot:
    """Coordinator identity and uptime from /v1/info."""

    version: str = ""
    environment: str = ""
    coordinator: bool = False
    starting: bool = False
    uptime: str = ""

    @classmethod
    def from_json(cls, data: Any) -> "NodeInfoSnapshot":
        data = _require_object(data, "info")
        node_version = data.get("nodeVersion")
        version = ""
        if node_version is not None:
            version = _str(_require_object(node_version, "nodeVersion"), "version")
        return cls(
            version=version,
            environment=_str(data, "environment"),
            coordinator=_bool(data, "coordinator"),
            starting=_bool(data, "starting"),
            uptime=_str(data, "uptime"),
        )

    def uptime_days(self) -> float:
        return parse_uptime_days(self.uptime)


@dataclass(frozen=True)
class QueryStats:
    queued_time: str = ""
    elapsed_time: str = ""
    execution_time: str = ""
    total_drivers: int = 0
    raw_input_data_size: str = ""
    cumulative_user_memory: float = 0.0
    peak_user_memory_reservation: str = ""
    total_cpu_time: str = ""
    total_scheduled_time: str = ""

    @classmethod
    def from_json(cls, data: Any) -> "QueryStats":
        data = _require_object(data, "queryStats")
        return cls(
            queued_time=_str(data, "queuedTime"),
            elapsed_time=_str(data, "elapsedTime"),
            execution_time=_str(data, "executionTime"),
            total_drivers=_int(data, "totalDrivers"),
            raw_input_data_size=_str(data, "rawInputDataSize"),
            cumulative_user_memory=_float(data, "cumulativeUserMemory"),
            peak_user_memory_reservation=_str(data, "peakUserMemoryReservation"),
            total_cpu_time=_str(data, "totalCpuTime"),
            total_scheduled_time=_str(data, "totalScheduledTime"),
        )


@dataclass(frozen=True)
class QueryRecord:
    """One entry of the /v1/query list."""

    query_id: str = ""
    state: str = ""
    scheduled: bool = False
    query: str = ""
    stats: QueryStats = field(default_factory=QueryStats)

    @classmethod
    def from_json(cls, data: Any) -> "QueryRecord":
        data = _require_object(data, "query")
        stats = data.get("queryStats")
        return cls(
            query_id=_str(data, "queryId"),
            state=_str(data, "state"),
            scheduled=_bool(data, "scheduled"),
            query=_str(data, "query"),
            stats=QueryStats() if stats is None else QueryStats.from_json(stats),
        )

    def label_values(self, hostname: str) -> List[str]:
        """Label values for the per-query gauge, in descriptor order."""
        s = self.stats
        return [
            hostname,
            self.query_id,
            self.state,
            "true" if self.scheduled else "false",
            self.query,
            s.queued_time,
            s.elapsed_time,
            s.execution_time,
            str(s.total_drivers),
            s.raw_input_data_size,
            format_float32_exp(s.cumulative_user_memory),
            s.peak_user_memory_reservation,
            s.total_cpu_time,
            s.total_scheduled_time,
        ]


def decode_query_list(data: Any) -> List[QueryRecord]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise SnapshotDecodeError(f"query list: expected a JSON array, got {type(data).__name__}")
    # A null entry is an all-zero query, like any other null field
    return [QueryRecord() if item is None else QueryRecord.from_json(item) for item in data]


# Fractions of a day per duration unit. A bare number counts as days.
_DAYS_PER_UNIT = {
    "": 1.0,
    "d": 1.0,
    "h": 1.0 / 24,
    "m": 1.0 / (24 * 60),
    "s": 1.0 / (24 * 60 * 60),
    "ms": 1.0 / (24 * 60 * 60 * 1e3),
    "us": 1.0 / (24 * 60 * 60 * 1e6),
    "ns": 1.0 / (24 * 60 * 60 * 1e9),
}

# e.g. "5.20d", "3.45h", "12.00m", "0.5 d"
_DURATION_RE = re.compile(r"^\s*([0-9.eE+-]+)\s*([a-z]*)\s*$")


def parse_uptime_days(uptime: str) -> float:
    """Convert a coordinator duration string into days.

    Raises ValueError on anything that isn't <number><unit>.
    """
    match = _DURATION_RE.match(uptime)
    if not match:
        raise ValueError(f"unrecognized duration {uptime!r}")

    number, unit = match.groups()
    if unit not in _DAYS_PER_UNIT:
        raise ValueError(f"unknown duration unit {unit!r} in {uptime!r}")

    return float(number) * _DAYS_PER_UNIT[unit]


def _as_float32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def format_float32_exp(value: float) -> str:
    """Shortest scientific notation that round-trips at single precision.

    1234500.0 -> "1.2345E+06", 0.0 -> "0E+00", 1e39 -> "+Inf".
    """
    if value != value:
        return "NaN"

    try:
        target = _as_float32(value)
    except OverflowError:
        # Beyond float32 range rounds to infinity
        target = math.copysign(math.inf, value)

    if math.isinf(target):
        return "+Inf" if target > 0 else "-Inf"

    text: Optional[str] = None
    for digits in range(9):
        text = f"{target:.{digits}E}"
        if _as_float32(float(text)) == target:
            break
    return text
