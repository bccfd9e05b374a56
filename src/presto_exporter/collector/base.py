"""
Base collector interface.

A collector is anything a prometheus_client CollectorRegistry can
register: describe() advertises the metric families up front, collect()
produces them with samples on every scrape. Keeping this as our own ABC
lets the server stay unaware of where the numbers come from.
"""

from abc import ABC, abstractmethod
from typing import Iterable

from prometheus_client.core import Metric


class MetricsCollector(ABC):
    """Interface for all metrics sources."""

    @abstractmethod
    def describe(self) -> Iterable[Metric]:
        """Metric families this collector produces, without samples."""
        ...

    @abstractmethod
    def collect(self) -> Iterable[Metric]:
        """Fetch current values and return them as metric families."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...
